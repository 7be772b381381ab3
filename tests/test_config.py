from datetime import timedelta

from draftsync.cache import ReferenceCache
from draftsync.config import DraftSyncConfig, get_config


def test_defaults(monkeypatch):
    monkeypatch.delenv("DRAFTSYNC_CACHE_DEFAULT_TTL_SECONDS", raising=False)
    monkeypatch.delenv("DRAFTSYNC_CACHE_ROSTER_TTL_SECONDS", raising=False)

    config = DraftSyncConfig(_env_file=None)

    assert config.cache_default_ttl_seconds == 300
    assert config.cache_roster_ttl_seconds == 900
    assert config.log_json is False


def test_env_override(monkeypatch):
    monkeypatch.setenv("DRAFTSYNC_CACHE_DEFAULT_TTL_SECONDS", "60")

    assert get_config().cache_default_ttl_seconds == 60
    assert ReferenceCache().default_ttl == timedelta(seconds=60)


def test_get_config_is_singleton():
    assert get_config() is get_config()


def test_env_file_is_read(monkeypatch, tmp_path):
    monkeypatch.delenv("DRAFTSYNC_CACHE_ROSTER_TTL_SECONDS", raising=False)
    (tmp_path / ".env").write_text("DRAFTSYNC_CACHE_ROSTER_TTL_SECONDS=120\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    assert DraftSyncConfig().cache_roster_ttl_seconds == 120
