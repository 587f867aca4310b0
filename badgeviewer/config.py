# config.py
# Runtime settings for Badge Viewer
import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

DEFAULT_API_URL = "https://profile.deepcytes.io/api/"
DEFAULT_TIMEOUT = 30.0
DEFAULT_SESSION_DB = "badge_viewer_session.json"
DEFAULT_LOG_LEVEL = "INFO"

@dataclass(frozen=True)
class Settings:
    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    session_db: str = DEFAULT_SESSION_DB
    log_level: str = DEFAULT_LOG_LEVEL

def _lookup(name: str, secrets: Optional[Mapping[str, Any]]) -> Optional[str]:
    """Secrets win over the environment"""
    if secrets:
        value = secrets.get(name)
        if value:
            return str(value)
    return os.getenv(name)

def load_settings(secrets: Optional[Mapping[str, Any]] = None) -> Settings:
    """Build settings from Streamlit secrets, then environment, then defaults"""
    api_url = _lookup("BADGE_API_URL", secrets) or DEFAULT_API_URL
    if not api_url.endswith("/"):
        api_url += "/"

    raw_timeout = _lookup("BADGE_API_TIMEOUT", secrets)
    try:
        timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
    except ValueError:
        raise ValueError(f"BADGE_API_TIMEOUT must be a number, got {raw_timeout!r}")

    return Settings(
        api_url=api_url,
        timeout=timeout,
        session_db=_lookup("BADGE_SESSION_DB", secrets) or DEFAULT_SESSION_DB,
        log_level=(_lookup("BADGE_LOG_LEVEL", secrets) or DEFAULT_LOG_LEVEL).upper(),
    )
