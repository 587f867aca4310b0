"""
Pytest configuration and fixtures for the Badge Viewer core.
"""

import json
import os
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pytest
from faker import Faker

# Add the parent directory to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from badgeviewer.api import ApiClient
from badgeviewer.session import create_session_store

BASE_URL = "https://badges.test/api/"

fake = Faker()


class FakeResponse:
    """Just enough of requests.Response for the client"""

    def __init__(self, status_code: int = 200, body: Any = None):
        self.status_code = status_code
        self._body = body
        self.text = json.dumps(body) if body is not None else ""

    def json(self):
        if self._body is None:
            raise ValueError("No JSON body")
        return self._body


@dataclass
class Call:
    method: str
    path: str
    kwargs: Dict[str, Any] = field(default_factory=dict)

    @property
    def authorization(self) -> Optional[str]:
        return self.kwargs.get("headers", {}).get("Authorization")


class FakeHttp:
    """Stands in for requests.Session; routes are (method, path) pairs"""

    def __init__(self):
        self.headers: Dict[str, str] = {}
        self.routes: Dict[tuple, Any] = {}
        self.calls: List[Call] = []

    def route(self, method: str, path: str, status: int = 200, body: Any = None, exc: Exception = None):
        self.routes[(method, path)] = exc if exc is not None else FakeResponse(status, body)

    def request(self, method, url, **kwargs):
        assert url.startswith(BASE_URL), url
        path = url[len(BASE_URL):]
        self.calls.append(Call(method, path, kwargs))
        handler = self.routes.get((method, path))
        if handler is None:
            return FakeResponse(404, {"message": f"no route for {method} {path}"})
        if isinstance(handler, Exception):
            raise handler
        return handler

    def calls_to(self, method: str, path: str) -> List[Call]:
        return [c for c in self.calls if c.method == method and c.path == path]


def badge_json(badge_id: int, name: Optional[str] = None, holders: int = 3) -> Dict[str, Any]:
    return {
        "id": badge_id,
        "name": name or f"Badge {badge_id}",
        "description": fake.sentence(),
        "image": f"/uploads/badge-{badge_id}.png",
        "category": "Cyber",
        "holders": holders,
        "yearLaunched": 2023,
    }


def user_json(badge_ids=(7,), image: Optional[str] = None) -> Dict[str, Any]:
    return {
        "firstName": "Jane",
        "lastName": "Doe",
        "email": "jane@example.com",
        "image": image,
        "badges": [{"badgeId": b, "name": f"Badge {b}", "isPublic": True} for b in badge_ids],
        "emailPreferences": {"badgeReceived": True, "profileUpdate": False, "adminDaily": True},
    }


@pytest.fixture
def http():
    return FakeHttp()


@pytest.fixture
def api(http):
    return ApiClient(BASE_URL, timeout=5, http=http)


@pytest.fixture
def session_store():
    return create_session_store(in_memory=True)


@pytest.fixture
def logged_in(session_store):
    session_store.set_token("tok-1", "jane@example.com", "jane")
    return session_store


@pytest.fixture
def navigations():
    """Records navigator calls as (view, params)"""
    return []


@pytest.fixture
def navigate(navigations):
    def _navigate(view, **params):
        navigations.append((view, params))
    return _navigate
