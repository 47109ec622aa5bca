import pytest

from eventdb.config import DEFAULT_DB_NAME, load_settings
from eventdb.utils.errors import ConfigurationError


def test_missing_uri_fails_fast(monkeypatch):
    monkeypatch.delenv("MONGODB_URI", raising=False)
    with pytest.raises(ConfigurationError, match="MONGODB_URI"):
        load_settings()


def test_load_settings(monkeypatch):
    monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017")
    monkeypatch.delenv("MONGODB_DB", raising=False)
    settings = load_settings()
    assert settings.mongodb_uri == "mongodb://localhost:27017"
    assert settings.mongodb_db == DEFAULT_DB_NAME
