# api.py
# HTTP client for the badge profile API: one request per call, a Result back
import logging
from typing import Any, Callable, Dict, List, Optional, TypeVar

import requests

from badgeviewer.errors import (
    BadgeViewerError,
    NetworkUnavailable,
    NotFound,
    Result,
    ServerError,
    Unauthorized,
    ValidationError,
)
from badgeviewer.models import Badge, UserProfile, parse_badges
from badgeviewer.profile_update import ProfileUpdate

logger = logging.getLogger(__name__)

T = TypeVar("T")

class ApiClient:
    """
    Typed wrapper over the remote endpoints.

    Usage:
        api = ApiClient("https://profile.deepcytes.io/api/")
        result = api.list_badges()
        if result.ok:
            badges = result.value
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        http: Optional[requests.Session] = None,
    ):
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout = timeout
        self.http = http or requests.Session()
        self.http.headers.setdefault("Accept", "application/json")

    # ==================== Transport ====================

    def _request(
        self,
        method: str,
        path: str,
        parse: Callable[[Dict[str, Any]], T],
        *,
        token: Optional[str] = None,
        json: Optional[Dict[str, Any]] = None,
        files: Optional[list] = None,
    ) -> Result[T]:
        url = f"{self.base_url}{path}"
        headers = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = self.http.request(
                method,
                url,
                headers=headers,
                json=json,
                files=files,
                timeout=self.timeout,
            )
        except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
            logger.warning("%s %s unreachable: %s", method, path, e)
            return Result.failure(NetworkUnavailable(str(e) or "Network unavailable"))
        except requests.exceptions.RequestException as e:
            logger.warning("%s %s failed: %s", method, path, e)
            return Result.failure(ServerError(str(e) or "Request failed"))

        logger.debug("%s %s -> %s", method, path, response.status_code)

        error = self._error_for(response)
        if error is not None:
            logger.warning("%s %s rejected (%s): %s", method, path, response.status_code, error.message)
            return Result.failure(error)

        try:
            payload = response.json()
            return Result.success(parse(payload))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("%s %s returned an unreadable body: %s", method, path, e)
            return Result.failure(ServerError("Malformed response", status=response.status_code))

    @staticmethod
    def _server_message(response: requests.Response) -> Optional[str]:
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict):
            return body.get("message") or body.get("error")
        return None

    def _error_for(self, response: requests.Response) -> Optional[BadgeViewerError]:
        status = response.status_code
        if status < 400:
            return None
        message = self._server_message(response)
        if status == 401:
            return Unauthorized(message or "Unauthorized", status=status)
        if status == 404:
            return NotFound(message or "Not found", status=status)
        if status < 500:
            return ValidationError(message or "Request rejected", status=status)
        return ServerError(message or "Server error", status=status)

    # ==================== Auth ====================

    def login(self, email: str, password: str) -> Result[str]:
        return self._request(
            "POST", "auth/login", lambda body: str(body["token"]),
            json={"email": email, "password": password},
        )

    def send_register_otp(self, email: str) -> Result[str]:
        return self._request("POST", "auth/register/otp", _message, json={"email": email})

    def register(
        self, email: str, first_name: str, last_name: str, otp: int, password: str
    ) -> Result[str]:
        return self._request(
            "POST", "auth/register", _message,
            json={
                "email": email,
                "firstName": first_name,
                "lastName": last_name,
                "otp": otp,
                "password": password,
            },
        )

    def send_reset_otp(self, email: str) -> Result[str]:
        return self._request("POST", "auth/reset-password/otp", _message, json={"email": email})

    def reset_password(self, email: str, otp: int, new_password: str) -> Result[str]:
        return self._request(
            "POST", "auth/reset-password", _message,
            json={"email": email, "otp": otp, "newPassword": new_password},
        )

    # ==================== Profile ====================

    def get_current_user(self, token: str) -> Result[UserProfile]:
        return self._request("GET", "user", UserProfile.from_json, token=token)

    def update_profile(self, token: str, update: ProfileUpdate) -> Result[str]:
        return self._request(
            "PUT", "user/profile", _message, token=token, files=update.multipart(),
        )

    def remove_profile_image(self, token: str) -> Result[str]:
        return self._request("DELETE", "user/profile/image", _message, token=token)

    # ==================== Badges ====================

    def list_badges(self) -> Result[List[Badge]]:
        return self._request("GET", "badges", parse_badges)

    def list_earned_badges(self, token: str) -> Result[List[Badge]]:
        return self._request("GET", "badges-earned", parse_badges, token=token)

    def get_earner_count(self, badge_id: int) -> Result[int]:
        return self._request("GET", f"badge/earners/{badge_id}", lambda body: int(body["earners"]))

def _message(body: Dict[str, Any]) -> str:
    return str(body.get("message") or "")
