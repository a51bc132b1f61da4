import pytest

from tasks_api.settings import DEFAULT_PORT, DEFAULT_STORE_URL, get_settings

ENV_VARS = ("PORT", "HOST", "STORE_URL", "CORS_ALLOW_ORIGINS", "LOG_LEVEL")


@pytest.fixture()
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    s = get_settings()
    assert s.port == DEFAULT_PORT == 5000
    assert s.host == "0.0.0.0"
    assert s.store_url == DEFAULT_STORE_URL
    assert s.cors_allow_origins == ["*"]
    assert s.log_level == "INFO"


def test_overrides(clean_env):
    clean_env.setenv("PORT", "8080")
    clean_env.setenv("STORE_URL", "memory://")
    clean_env.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test,")
    clean_env.setenv("LOG_LEVEL", "debug")
    s = get_settings()
    assert s.port == 8080
    assert s.store_url == "memory://"
    assert s.cors_allow_origins == ["http://a.test", "http://b.test"]
    assert s.log_level == "DEBUG"


@pytest.mark.parametrize("raw", ["not-a-port", "0", "70000", "  "])
def test_invalid_port_falls_back(clean_env, raw):
    clean_env.setenv("PORT", raw)
    assert get_settings().port == DEFAULT_PORT
