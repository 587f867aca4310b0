# models.py
# Typed records for the remote API payloads
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

@dataclass
class EmailPreferences:
    badge_received: bool = True
    profile_update: bool = True
    admin_daily: bool = False

    @classmethod
    def from_json(cls, data: Optional[Dict[str, Any]]) -> "EmailPreferences":
        if not data:
            return cls()
        return cls(
            badge_received=bool(data.get("badgeReceived", True)),
            profile_update=bool(data.get("profileUpdate", True)),
            admin_daily=bool(data.get("adminDaily", False)),
        )

    def to_json(self) -> Dict[str, bool]:
        return {
            "badgeReceived": self.badge_received,
            "profileUpdate": self.profile_update,
            "adminDaily": self.admin_daily,
        }

@dataclass
class UserBadge:
    badge_id: int
    name: Optional[str] = None
    is_public: bool = True
    earned_date: Optional[str] = None
    certificate_id: Optional[str] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "UserBadge":
        return cls(
            badge_id=int(data["badgeId"]),
            name=data.get("name"),
            is_public=bool(data.get("isPublic", True)),
            earned_date=data.get("earnedDate"),
            certificate_id=data.get("certificateId"),
        )

    @property
    def label(self) -> str:
        return self.name or f"Badge {self.badge_id}"

@dataclass
class UserProfile:
    first_name: str
    last_name: str
    email: str
    image: Optional[str] = None
    badges: List[UserBadge] = field(default_factory=list)
    email_preferences: EmailPreferences = field(default_factory=EmailPreferences)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "UserProfile":
        return cls(
            first_name=data.get("firstName") or "",
            last_name=data.get("lastName") or "",
            email=data.get("email") or "",
            image=data.get("image"),
            badges=[UserBadge.from_json(b) for b in data.get("badges") or []],
            email_preferences=EmailPreferences.from_json(data.get("emailPreferences")),
        )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

@dataclass(frozen=True)
class Badge:
    id: int
    name: str
    description: str = ""
    image: Optional[str] = None
    category: Optional[str] = None
    level: Optional[str] = None
    vertical: Optional[str] = None
    holders: int = 0
    year_launched: Optional[int] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Badge":
        year = data.get("yearLaunched")
        return cls(
            id=int(data["id"]),
            name=data.get("name") or "",
            description=data.get("description") or "",
            image=data.get("image"),
            category=data.get("category"),
            level=data.get("level"),
            vertical=data.get("vertical"),
            holders=int(data.get("holders") or 0),
            year_launched=int(year) if year is not None else None,
        )

def parse_badges(payload: Dict[str, Any]) -> List[Badge]:
    """Badge list from a {badges: [...]} envelope"""
    return [Badge.from_json(item) for item in payload.get("badges") or []]
