import pytest

from vitale.infrastructure import config
from vitale.infrastructure.config import DEFAULT_STORE_PATH, Settings


@pytest.fixture(autouse=True)
def no_streamlit_secrets(monkeypatch):
    monkeypatch.setattr(config, "_HAS_STREAMLIT", False)
    for name in ["VITALE_STORE_PATH", "SUPABASE_URL", "SUPABASE_ANON_KEY", "LOG_LEVEL"]:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = Settings()
    assert settings.store_path == str(DEFAULT_STORE_PATH)
    assert settings.supabase_url is None
    assert not settings.use_supabase
    assert settings.log_level == "INFO"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("VITALE_STORE_PATH", "/tmp/vitale.json")
    monkeypatch.setenv("SUPABASE_URL", "https://demo.supabase.co")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
    settings = Settings()
    assert settings.store_path == "/tmp/vitale.json"
    assert settings.use_supabase


def test_supabase_needs_both_values(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://demo.supabase.co")
    assert not Settings().use_supabase
