# auth_flow.py
# Login, registration and password reset as small state machines
import logging
import re
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from badgeviewer.api import ApiClient
from badgeviewer.errors import BadgeViewerError, Result, ValidationError
from badgeviewer.profile_update import MIN_PASSWORD_LENGTH
from badgeviewer.session import SessionStore

logger = logging.getLogger(__name__)

LOGIN_FAILED = "Authentication failed. Please check credentials."
OTP_FAILED = "Failed to send OTP"
SIGNUP_FAILED = "Signup failed. Check OTP/details."
RESET_FAILED = "Reset failed. Check OTP."

OTP_PATTERN = re.compile(r"[+-]?[0-9]+")
INT32_MIN, INT32_MAX = -2**31, 2**31 - 1

class FlowStatus(Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    ERROR = "error"
    COMPLETED = "completed"

class OtpPhase(Enum):
    REQUEST_OTP = "request_otp"
    FINALIZE = "finalize"

# ---------------------------- Helpers ---------------------------- #

def display_name_from_email(email: str) -> str:
    return email.split("@", 1)[0]

def parse_otp(otp: str) -> int:
    """Signed 32-bit integer, digits only (no spaces or underscores)"""
    if not isinstance(otp, str) or not OTP_PATTERN.fullmatch(otp):
        raise ValidationError("Invalid OTP")
    value = int(otp)
    if not INT32_MIN <= value <= INT32_MAX:
        raise ValidationError("Invalid OTP")
    return value

def check_password_length(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError("Password must be at least 8 characters")

# ---------------------------- Flows ---------------------------- #

class _Flow:
    """Shared status handling; one submission in flight at a time"""

    def __init__(self, api: ApiClient):
        self.api = api
        self.status = FlowStatus.IDLE
        self.error: Optional[str] = None

    @property
    def submitting(self) -> bool:
        return self.status is FlowStatus.SUBMITTING

    @property
    def completed(self) -> bool:
        return self.status is FlowStatus.COMPLETED

    def _begin(self) -> bool:
        if self.submitting or self.completed:
            logger.debug("%s: submission ignored while %s", type(self).__name__, self.status.value)
            return False
        self.status = FlowStatus.SUBMITTING
        self.error = None
        return True

    def _fail(self, message: str, cause: Optional[BadgeViewerError] = None) -> bool:
        if cause is not None:
            logger.info("%s failed: %s", type(self).__name__, cause.message)
        self.status = FlowStatus.ERROR
        self.error = message
        return False

class LoginFlow(_Flow):

    def __init__(self, api: ApiClient, session_store: SessionStore):
        super().__init__(api)
        self.session_store = session_store

    def submit(self, email: str, password: str) -> bool:
        """Log in; stores the session on success"""
        email = (email or "").strip()
        if not email or not password:
            return False
        if not self._begin():
            return False

        result = self.api.login(email, password)
        if not result.ok:
            return self._fail(LOGIN_FAILED, result.error)

        self.session_store.set_token(result.value, email, display_name_from_email(email))
        self.status = FlowStatus.COMPLETED
        return True

class _OtpFlow(_Flow, ABC):
    """Two phases: request an OTP for an email, then finalize with it"""
    send_failed_message = OTP_FAILED

    def __init__(self, api: ApiClient):
        super().__init__(api)
        self.phase = OtpPhase.REQUEST_OTP
        self.pending_email: Optional[str] = None

    @abstractmethod
    def _send(self, email: str) -> Result:
        """The OTP request for this flow"""
        pass

    def send_otp(self, email: str) -> bool:
        if not email or not email.strip():
            return False
        if self.phase is not OtpPhase.REQUEST_OTP or not self._begin():
            return False

        email = email.strip()
        result = self._send(email)
        if not result.ok:
            return self._fail(self.send_failed_message, result.error)

        self.pending_email = email
        self.phase = OtpPhase.FINALIZE
        self.status = FlowStatus.IDLE
        return True

    def _validated_otp(self, otp: str, password: str) -> Optional[int]:
        """Local checks before the finalize call; records the error and returns None on failure"""
        try:
            otp_value = parse_otp(otp)
            check_password_length(password)
        except ValidationError as e:
            self._fail(e.message)
            return None
        return otp_value

    def discard(self) -> None:
        """Drop transient state (dialog dismissed or flow cancelled)"""
        self.pending_email = None
        self.phase = OtpPhase.REQUEST_OTP
        self.status = FlowStatus.IDLE
        self.error = None

class RegistrationFlow(_OtpFlow):

    def _send(self, email: str) -> Result:
        return self.api.send_register_otp(email)

    def finalize(self, first_name: str, last_name: str, otp: str, password: str) -> bool:
        """Create the account; the user still has to log in afterwards"""
        if self.phase is not OtpPhase.FINALIZE or self.submitting or self.completed:
            return False
        otp_value = self._validated_otp(otp, password)
        if otp_value is None or not self._begin():
            return False

        result = self.api.register(self.pending_email, first_name, last_name, otp_value, password)
        if not result.ok:
            return self._fail(SIGNUP_FAILED, result.error)

        logger.info("Account created for %s", self.pending_email)
        self.status = FlowStatus.COMPLETED
        return True

class PasswordResetFlow(_OtpFlow):

    def _send(self, email: str) -> Result:
        return self.api.send_reset_otp(email)

    def finalize(self, otp: str, new_password: str) -> bool:
        if self.phase is not OtpPhase.FINALIZE or self.submitting or self.completed:
            return False
        otp_value = self._validated_otp(otp, new_password)
        if otp_value is None or not self._begin():
            return False

        result = self.api.reset_password(self.pending_email, otp_value, new_password)
        if not result.ok:
            return self._fail(RESET_FAILED, result.error)

        logger.info("Password reset for %s", self.pending_email)
        self.status = FlowStatus.COMPLETED
        return True

# ---------------------------- Dialogs ---------------------------- #

class Dialog(Enum):
    IDLE = "idle"
    LOGIN = "login"
    SIGNUP = "signup"
    SIGNUP_FINAL = "signup_final"
    FORGOT = "forgot"
    RESET_FINAL = "reset_final"

class AuthDialogs:
    """Which auth dialog is open; at most one, with its flow object"""

    def __init__(self, api: ApiClient, session_store: SessionStore):
        self.api = api
        self.session_store = session_store
        self.current = Dialog.IDLE
        self.flow: Optional[_Flow] = None
        self.notice: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.current is not Dialog.IDLE

    def _open(self, dialog: Dialog, flow: _Flow) -> None:
        self._discard_flow()
        self.current = dialog
        self.flow = flow
        self.notice = None

    def _discard_flow(self) -> None:
        if isinstance(self.flow, _OtpFlow):
            self.flow.discard()
        self.flow = None

    def open_login(self) -> None:
        self._open(Dialog.LOGIN, LoginFlow(self.api, self.session_store))

    def open_signup(self) -> None:
        self._open(Dialog.SIGNUP, RegistrationFlow(self.api))

    def open_forgot(self) -> None:
        self._open(Dialog.FORGOT, PasswordResetFlow(self.api))

    def back_to_login(self) -> None:
        self.open_login()

    def otp_sent(self) -> None:
        """Move from the email step to the finalize step of the same flow"""
        if self.current is Dialog.SIGNUP:
            self.current = Dialog.SIGNUP_FINAL
        elif self.current is Dialog.FORGOT:
            self.current = Dialog.RESET_FINAL

    def dismiss(self) -> None:
        self._discard_flow()
        self.current = Dialog.IDLE
        self.notice = None

    # Convenience wrappers used by the UI; they advance the dialog on success

    def login(self, email: str, password: str) -> bool:
        if self.current is not Dialog.LOGIN:
            return False
        if self.flow.submit(email, password):
            self.dismiss()
            return True
        return False

    def send_otp(self, email: str) -> bool:
        if self.current not in (Dialog.SIGNUP, Dialog.FORGOT):
            return False
        if self.flow.send_otp(email):
            self.otp_sent()
            return True
        return False

    def finalize_signup(self, first_name: str, last_name: str, otp: str, password: str) -> bool:
        if self.current is not Dialog.SIGNUP_FINAL:
            return False
        if self.flow.finalize(first_name, last_name, otp, password):
            self.back_to_login()
            self.notice = "Account created. Please log in."
            return True
        return False

    def finalize_reset(self, otp: str, new_password: str) -> bool:
        if self.current is not Dialog.RESET_FINAL:
            return False
        if self.flow.finalize(otp, new_password):
            self.back_to_login()
            self.notice = "Password reset. Please log in."
            return True
        return False
