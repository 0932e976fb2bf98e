import pytest

from core.config import Settings
from core.logger import resolve_log_level


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def test_connection_url_without_credentials():
    settings = _settings(mongodb_url="mongodb://localhost:27017")
    assert settings.mongodb_connection_url == "mongodb://localhost:27017"


def test_connection_url_with_root_credentials():
    settings = _settings(
        mongodb_url="mongodb://db:27017",
        mongodb_database="tidytasks",
        mongodb_root_user="admin",
        mongodb_root_password="secret",
    )

    assert (
        settings.mongodb_connection_url
        == "mongodb://admin:secret@db:27017/tidytasks?authSource=tidytasks"
    )


def test_connection_url_keeps_embedded_credentials():
    url = "mongodb://app:pw@db:27017/tidytasks"
    settings = _settings(mongodb_url=url, mongodb_root_user="admin", mongodb_root_password="x")
    assert settings.mongodb_connection_url == url


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("MONGODB_DATABASE", "from_env")
    monkeypatch.setenv("TASKS_COLLECTION", "todo")

    settings = _settings()

    assert settings.mongodb_database == "from_env"
    assert settings.tasks_collection == "todo"


def test_is_production():
    assert _settings(environment="Production").is_production
    assert not _settings(environment="development").is_production


@pytest.mark.parametrize(
    "log_level, debug, expected",
    [
        ("warning", False, "WARNING"),
        ("ERROR", True, "ERROR"),
        ("verbose", False, "INFO"),
        ("", True, "DEBUG"),
        (None, False, "INFO"),
    ],
)
def test_resolve_log_level(log_level, debug, expected):
    assert resolve_log_level(log_level, debug) == expected
