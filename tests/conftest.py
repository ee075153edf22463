import pytest


@pytest.fixture
def runs_dir(tmp_path, monkeypatch):
    """Point build storage at an empty temporary directory."""
    path = tmp_path / "runs"
    monkeypatch.setenv("VULNVIZ_RUNS_DIR", str(path))
    return path
