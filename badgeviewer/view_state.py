# view_state.py
# Load-state reconciliation shared by every data-bound screen.
# Steps run in order and end in loading, success or error; a 401 from any step
# clears the session and returns to the unauthenticated home view.
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from badgeviewer.errors import Result, user_message
from badgeviewer.session import SessionStore

logger = logging.getLogger(__name__)

class LoadStatus(Enum):
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"

@dataclass(frozen=True)
class ViewState:
    status: LoadStatus
    message: Optional[str] = None

    @classmethod
    def loading(cls) -> "ViewState":
        return cls(LoadStatus.LOADING)

    @classmethod
    def success(cls) -> "ViewState":
        return cls(LoadStatus.SUCCESS)

    @classmethod
    def error(cls, message: str) -> "ViewState":
        return cls(LoadStatus.ERROR, message)

    @property
    def is_loading(self) -> bool:
        return self.status is LoadStatus.LOADING

    @property
    def is_success(self) -> bool:
        return self.status is LoadStatus.SUCCESS

    @property
    def is_error(self) -> bool:
        return self.status is LoadStatus.ERROR

@dataclass(frozen=True)
class Step:
    """One API call in a screen's load sequence.

    ``call`` receives the values produced so far, keyed by step name.
    ``when`` can skip the step (e.g. authenticated calls while logged out).
    An ``optional`` step may fail without failing the screen.
    """
    name: str
    call: Callable[[Dict[str, Any]], Result]
    optional: bool = False
    when: Optional[Callable[[Dict[str, Any]], bool]] = None

class Reconciler:

    def __init__(self, session_store: SessionStore, on_unauthorized: Callable[[], None]):
        self.session_store = session_store
        self.on_unauthorized = on_unauthorized
        self.state = ViewState.loading()
        self.data: Dict[str, Any] = {}
        self.in_flight = False

    def load(self, steps: List[Step]) -> ViewState:
        """Run the steps in order; all-or-nothing"""
        if self.in_flight:
            logger.debug("Load ignored, one already in flight")
            return self.state

        self.in_flight = True
        self.state = ViewState.loading()
        collected: Dict[str, Any] = {}
        try:
            for step in steps:
                if step.when is not None and not step.when(collected):
                    continue

                result = step.call(collected)
                if result.ok:
                    collected[step.name] = result.value
                    continue

                if result.unauthorized:
                    self.expire_session()
                    return self.state

                if step.optional:
                    logger.warning("Optional step %r failed: %s", step.name, result.error.message)
                    continue

                logger.warning("Step %r failed: %s", step.name, result.error.message)
                self.state = ViewState.error(user_message(result.error))
                return self.state

            self.data = collected
            self.state = ViewState.success()
            return self.state
        finally:
            self.in_flight = False

    def secondary(self, call: Callable[[], Result], placeholder: Any) -> Any:
        """Dependent fetch that never fails the screen; returns the placeholder instead"""
        result = call()
        if result.ok:
            return result.value
        if result.unauthorized:
            self.expire_session()
        else:
            logger.info("Secondary fetch failed, showing placeholder: %s", result.error.message)
        return placeholder

    def expire_session(self) -> None:
        """Token rejected: forget it and leave for the unauthenticated entry point"""
        logger.info("Session expired, redirecting")
        self.session_store.clear()
        self.on_unauthorized()
