# session.py
# Persisted login session: token, email and display name
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
import logging
from tinydb import TinyDB
from tinydb.storages import MemoryStorage

logger = logging.getLogger(__name__)

NAMESPACE = "auth"

@dataclass(frozen=True)
class Session:
    token: Optional[str] = None
    email: Optional[str] = None
    display_name: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

class SessionStore(ABC):
    """Abstract interface for the persisted login session"""

    @abstractmethod
    def get(self) -> Session:
        """Current session (empty when logged out)"""
        pass

    @abstractmethod
    def set_token(self, token: str, email: str, display_name: str) -> None:
        """Replace the session after a successful login"""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Forget token, email and name; safe to call twice"""
        pass

class TinyDBSessionStore(SessionStore):
    """TinyDB implementation, one document in the auth table"""

    def __init__(self, db: TinyDB):
        self.db = db
        self.table = self.db.table(NAMESPACE)

    def get(self) -> Session:
        docs = self.table.all()
        if not docs:
            return Session()
        doc = docs[0]
        return Session(
            token=doc.get("accessToken"),
            email=doc.get("email"),
            display_name=doc.get("name"),
        )

    def set_token(self, token: str, email: str, display_name: str) -> None:
        self.table.truncate()
        self.table.insert({
            "accessToken": token,
            "email": email,
            "name": display_name,
        })
        logger.info("Session stored for %s", email)

    def clear(self) -> None:
        if len(self.table):
            logger.info("Session cleared")
        self.table.truncate()

    def close(self) -> None:
        self.db.close()

# Factory function to create the session store
def create_session_store(path: Optional[str] = None, in_memory: bool = False) -> SessionStore:
    """File-backed store by default, in-memory when asked or when no path is given"""
    if in_memory or not path:
        return TinyDBSessionStore(TinyDB(storage=MemoryStorage))
    return TinyDBSessionStore(TinyDB(path))
