import pytest


@pytest.fixture(autouse=True)
def _isolate_scanner_cache(monkeypatch, tmp_path_factory):
    # Keep compiled scanners out of the user's cache directory.
    monkeypatch.setenv("CODOC_CACHE_DIR", str(tmp_path_factory.mktemp("codoc-cache")))
