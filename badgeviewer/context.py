# context.py
# Services built once at app start and handed to every view
from dataclasses import dataclass

from badgeviewer.api import ApiClient
from badgeviewer.config import Settings
from badgeviewer.session import SessionStore, create_session_store

@dataclass(frozen=True)
class AppContext:
    settings: Settings
    api: ApiClient
    session_store: SessionStore

def build_context(settings: Settings, in_memory: bool = False) -> AppContext:
    return AppContext(
        settings=settings,
        api=ApiClient(settings.api_url, timeout=settings.timeout),
        session_store=create_session_store(settings.session_db, in_memory=in_memory),
    )
