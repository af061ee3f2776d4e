import os
import logging
from pathlib import Path

try:
    import streamlit as st  # type: ignore
    _HAS_STREAMLIT = True
except Exception:
    _HAS_STREAMLIT = False

logger = logging.getLogger(__name__)


PROJECT_ROOT = Path(__file__).parent.parent.parent
DEFAULT_STORE_PATH = PROJECT_ROOT / ".streamlit" / "health_store.json"


def get_secret(name: str, default: str | None = None) -> str | None:
    # Prefer Streamlit secrets if available
    if _HAS_STREAMLIT:
        try:
            if name in st.secrets:
                return str(st.secrets.get(name))
        except Exception:
            logger.debug("Streamlit secrets unavailable; reading %s from the environment", name)
    return os.environ.get(name, default)


class Settings:
    @property
    def store_path(self) -> str:
        return get_secret("VITALE_STORE_PATH") or str(DEFAULT_STORE_PATH)

    @property
    def supabase_url(self) -> str | None:
        return get_secret("SUPABASE_URL")

    @property
    def supabase_anon_key(self) -> str | None:
        return get_secret("SUPABASE_ANON_KEY")

    @property
    def use_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)

    @property
    def log_level(self) -> str:
        return get_secret("LOG_LEVEL", "INFO") or "INFO"
