# profile_update.py
# Builds the single multipart request that saves the profile editor
import json
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from badgeviewer.errors import ValidationError
from badgeviewer.models import EmailPreferences, UserBadge, UserProfile

MIN_PASSWORD_LENGTH = 8

@dataclass(frozen=True)
class ImageUpload:
    filename: str
    content: bytes
    mime_type: str = "image/jpeg"

@dataclass
class ProfileForm:
    """Editable state of the profile editor"""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    current_password: str = ""
    new_password: str = ""
    badges: List[UserBadge] = field(default_factory=list)
    notify_badge: bool = True
    notify_profile: bool = True
    notify_admin: bool = False
    image: Optional[ImageUpload] = None
    image_ref: Optional[str] = None

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "ProfileForm":
        prefs = profile.email_preferences
        return cls(
            first_name=profile.first_name,
            last_name=profile.last_name,
            email=profile.email,
            badges=[UserBadge(**vars(b)) for b in profile.badges],
            notify_badge=prefs.badge_received,
            notify_profile=prefs.profile_update,
            notify_admin=prefs.admin_daily,
            image_ref=profile.image,
        )

    def set_badge_visibility(self, badge_id: int, is_public: bool) -> None:
        for badge in self.badges:
            if badge.badge_id == badge_id:
                badge.is_public = is_public

    def clear_passwords(self) -> None:
        self.current_password = ""
        self.new_password = ""

@dataclass(frozen=True)
class ProfileUpdate:
    """Text parts in submission order plus the optional image part"""
    fields: Dict[str, str]
    image: Optional[ImageUpload] = None

    def multipart(self) -> List[Tuple[str, tuple]]:
        """Parts for requests' files= argument; text parts carry no filename or content type"""
        parts = [(name, (None, value)) for name, value in self.fields.items()]
        if self.image is not None:
            parts.append((
                "profileImage",
                (self.image.filename, self.image.content, self.image.mime_type),
            ))
        return parts

def _compact(value) -> str:
    return json.dumps(value, separators=(",", ":"))

def validate_password_change(current_password: str, new_password: str) -> None:
    if not new_password.strip():
        return
    if not current_password.strip():
        raise ValidationError("Enter current password")
    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise ValidationError("Password must be at least 8 characters")

def build_profile_update(form: ProfileForm) -> ProfileUpdate:
    """Validate the form and assemble the update; raises ValidationError before any network call"""
    validate_password_change(form.current_password, form.new_password)

    fields = {
        "firstName": form.first_name,
        "lastName": form.last_name,
    }

    # Password parts only travel as a pair
    if form.current_password.strip() and form.new_password.strip():
        fields["password"] = form.current_password
        fields["newPassword"] = form.new_password

    fields["badges"] = _compact([
        {"badgeId": str(b.badge_id), "isPublic": b.is_public}
        for b in form.badges
    ])
    fields["emailPreferences"] = _compact(EmailPreferences(
        badge_received=form.notify_badge,
        profile_update=form.notify_profile,
        admin_daily=form.notify_admin,
    ).to_json())

    return ProfileUpdate(fields=fields, image=form.image)
