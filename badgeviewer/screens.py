# screens.py
# Screen models: what each view loads, derives and does, without any widgets
import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Set

from badgeviewer.api import ApiClient
from badgeviewer.display import (
    DETAIL_EARNERS_PLACEHOLDER, EARNERS_PLACEHOLDER, initials_from_names, top_bar_initials,
)
from badgeviewer.errors import ValidationError
from badgeviewer.models import Badge, UserBadge, UserProfile
from badgeviewer.profile_update import ImageUpload, ProfileForm, build_profile_update
from badgeviewer.session import SessionStore
from badgeviewer.view_state import Reconciler, Step, ViewState

logger = logging.getLogger(__name__)

# View names understood by the navigator
HOME = "home"
BADGES = "badges"
BADGE = "badge"
PROFILE = "profile"
EDIT_PROFILE = "edit_profile"

UPDATE_FAILED = "Update failed. Please try again."
UPDATE_DONE = "Profile updated"
IMAGE_REMOVE_FAILED = "Could not remove the image. Please try again."

Navigate = Callable[..., None]

# ---------------------------- Base ---------------------------- #

class Screen(ABC):
    """Common wiring: API client, session store, navigator and a reconciler"""

    def __init__(self, api: ApiClient, session_store: SessionStore, navigate: Navigate):
        self.api = api
        self.session_store = session_store
        self.navigate = navigate
        self.reconciler = Reconciler(session_store, on_unauthorized=lambda: navigate(HOME))
        self.mounted = False

    @property
    def state(self) -> ViewState:
        return self.reconciler.state

    @property
    def token(self) -> Optional[str]:
        return self.session_store.get().token

    @property
    def logged_in(self) -> bool:
        return self.session_store.get().is_authenticated

    @property
    def initials(self) -> str:
        return top_bar_initials(self.session_store.get().display_name)

    @abstractmethod
    def steps(self) -> List[Step]:
        """Ordered load sequence for this view"""
        pass

    def derive(self, data: Dict) -> None:
        """Fill derived fields after a successful load"""
        pass

    def mount(self) -> ViewState:
        self.mounted = True
        state = self.reconciler.load(self.steps())
        if state.is_success:
            self.derive(self.reconciler.data)
        return state

    def ensure_mounted(self) -> ViewState:
        """Load once per screen instance; Streamlit reruns call this every time"""
        if not self.mounted:
            return self.mount()
        return self.state

    def logout(self) -> None:
        self.session_store.clear()
        self.navigate(HOME)

    def _require_login(self) -> bool:
        if self.logged_in:
            return True
        self.navigate(HOME)
        return False

# ---------------------------- Home ---------------------------- #

class HomeScreen(Screen):

    def __init__(self, api: ApiClient, session_store: SessionStore, navigate: Navigate):
        super().__init__(api, session_store, navigate)
        self.badges: List[Badge] = []
        self.selected: Optional[Badge] = None
        self.profile_image: Optional[str] = None

    def steps(self) -> List[Step]:
        token = self.token
        return [
            Step("badges", lambda data: self.api.list_badges()),
            Step(
                "user",
                lambda data: self.api.get_current_user(token),
                optional=True,
                when=lambda data: bool(token),
            ),
        ]

    def derive(self, data: Dict) -> None:
        self.badges = data["badges"]
        self.selected = self.badges[0] if self.badges else None
        user = data.get("user")
        self.profile_image = user.image if user else None

    def select(self, badge_id: int) -> None:
        for badge in self.badges:
            if badge.id == badge_id:
                self.selected = badge
                return

    def retry(self) -> ViewState:
        return self.mount()

# ---------------------------- Catalog ---------------------------- #

class CatalogScreen(Screen):
    """All badges; earned ones are highlighted and can be opened"""

    def __init__(self, api: ApiClient, session_store: SessionStore, navigate: Navigate):
        super().__init__(api, session_store, navigate)
        self.badges: List[Badge] = []
        self.owned_ids: Set[int] = set()
        self.profile_image: Optional[str] = None
        self.selected_id: Optional[int] = None
        self.earners: str = EARNERS_PLACEHOLDER

    def steps(self) -> List[Step]:
        token = self.token
        return [
            Step("badges", lambda data: self.api.list_badges()),
            Step(
                "user",
                lambda data: self.api.get_current_user(token),
                optional=True,
                when=lambda data: bool(token),
            ),
            Step(
                "earned",
                lambda data: self.api.list_earned_badges(token),
                when=lambda data: bool(token),
            ),
        ]

    def derive(self, data: Dict) -> None:
        self.badges = data["badges"]
        self.owned_ids = {b.id for b in data.get("earned", [])}
        self.selected_id = None
        self.earners = EARNERS_PLACEHOLDER
        user = data.get("user")
        self.profile_image = user.image if user else None

    def is_owned(self, badge_id: int) -> bool:
        return badge_id in self.owned_ids

    def select(self, badge_id: int) -> None:
        """Highlight a badge and fetch only its earner count"""
        if not self.state.is_success or badge_id == self.selected_id:
            return
        self.selected_id = badge_id
        count = self.reconciler.secondary(
            lambda: self.api.get_earner_count(badge_id), EARNERS_PLACEHOLDER,
        )
        self.earners = str(count)

    def open(self, badge_id: int) -> bool:
        if not self.is_owned(badge_id):
            return False
        self.navigate(BADGE, badge_id=badge_id)
        return True

# ---------------------------- Badge detail ---------------------------- #

class BadgeDetailScreen(Screen):

    def __init__(self, api: ApiClient, session_store: SessionStore, navigate: Navigate, start_id: int):
        super().__init__(api, session_store, navigate)
        self.start_id = start_id
        self.badges: List[Badge] = []
        self.index = 0
        self.earners: str = DETAIL_EARNERS_PLACEHOLDER

    def steps(self) -> List[Step]:
        return [Step("badges", lambda data: self.api.list_badges())]

    def derive(self, data: Dict) -> None:
        self.badges = data["badges"]
        self.index = next(
            (i for i, b in enumerate(self.badges) if b.id == self.start_id), 0
        )
        self._refresh_earners()

    def set_start_id(self, start_id: int) -> ViewState:
        """Dependency change: a new badge id means a full reload"""
        if start_id != self.start_id or not self.mounted:
            self.start_id = start_id
            return self.mount()
        return self.state

    @property
    def badge(self) -> Optional[Badge]:
        return self.badges[self.index] if self.badges else None

    @property
    def position_label(self) -> str:
        return f"{self.index + 1} of {len(self.badges)}"

    @property
    def related(self) -> List[Badge]:
        current = self.badge
        return [b for b in self.badges if current is None or b.id != current.id][:4]

    def _refresh_earners(self) -> None:
        badge = self.badge
        if badge is None:
            self.earners = DETAIL_EARNERS_PLACEHOLDER
            return
        count = self.reconciler.secondary(
            lambda: self.api.get_earner_count(badge.id), DETAIL_EARNERS_PLACEHOLDER,
        )
        self.earners = str(count)

    def _move_to(self, index: int) -> bool:
        if not self.state.is_success or not 0 <= index < len(self.badges) or index == self.index:
            return False
        self.index = index
        self._refresh_earners()
        return True

    def next(self) -> bool:
        return self._move_to(self.index + 1)

    def previous(self) -> bool:
        return self._move_to(self.index - 1)

    def select(self, badge_id: int) -> bool:
        for i, b in enumerate(self.badges):
            if b.id == badge_id:
                return self._move_to(i)
        return False

# ---------------------------- Profile ---------------------------- #

class ProfileScreen(Screen):

    def __init__(self, api: ApiClient, session_store: SessionStore, navigate: Navigate):
        super().__init__(api, session_store, navigate)
        self.user: Optional[UserProfile] = None
        self.catalog: Dict[int, Badge] = {}
        self.selected_badge_id: Optional[int] = None
        self.earners: str = EARNERS_PLACEHOLDER

    def mount(self) -> ViewState:
        if not self._require_login():
            self.mounted = True
            return self.state
        return super().mount()

    def steps(self) -> List[Step]:
        token = self.token
        return [
            Step("user", lambda data: self.api.get_current_user(token)),
            Step("badges", lambda data: self.api.list_badges()),
        ]

    def derive(self, data: Dict) -> None:
        self.user = data["user"]
        self.catalog = {b.id: b for b in data["badges"]}
        self.selected_badge_id = None
        self.earners = EARNERS_PLACEHOLDER
        if self.user.badges:
            self.select(self.user.badges[0].badge_id)

    @property
    def avatar_initials(self) -> str:
        if not self.user:
            return self.initials
        return initials_from_names(self.user.first_name, self.user.last_name)

    @property
    def selected_badge(self) -> Optional[UserBadge]:
        if not self.user:
            return None
        return next((b for b in self.user.badges if b.badge_id == self.selected_badge_id), None)

    def catalog_entry(self, badge_id: int) -> Optional[Badge]:
        return self.catalog.get(badge_id)

    def select(self, badge_id: int) -> None:
        if badge_id == self.selected_badge_id:
            return
        self.selected_badge_id = badge_id
        count = self.reconciler.secondary(
            lambda: self.api.get_earner_count(badge_id), EARNERS_PLACEHOLDER,
        )
        self.earners = str(count)

# ---------------------------- Edit profile ---------------------------- #

class EditProfileScreen(Screen):

    def __init__(self, api: ApiClient, session_store: SessionStore, navigate: Navigate):
        super().__init__(api, session_store, navigate)
        self.form = ProfileForm()
        self.notice: Optional[str] = None
        self.saving = False

    def mount(self) -> ViewState:
        if not self._require_login():
            self.mounted = True
            return self.state
        return super().mount()

    def steps(self) -> List[Step]:
        token = self.token
        return [Step("user", lambda data: self.api.get_current_user(token))]

    def derive(self, data: Dict) -> None:
        self.form = ProfileForm.from_profile(data["user"])

    @property
    def avatar_initials(self) -> str:
        return initials_from_names(self.form.first_name, self.form.last_name)

    def pick_image(self, filename: str, content: bytes, mime_type: str = "image/jpeg") -> None:
        self.form.image = ImageUpload(filename=filename, content=content, mime_type=mime_type)

    def remove_image(self) -> bool:
        result = self.api.remove_profile_image(self.token)
        if result.unauthorized:
            self.reconciler.expire_session()
            return False
        if not result.ok:
            self.notice = IMAGE_REMOVE_FAILED
            return False
        self.form.image = None
        self.form.image_ref = None
        self.notice = result.value or None
        return True

    def save(self) -> bool:
        """Submit the whole form as one update; password fields never survive the attempt"""
        if self.saving:
            return False
        self.saving = True
        try:
            try:
                update = build_profile_update(self.form)
            except ValidationError as e:
                self.notice = e.message
                return False

            result = self.api.update_profile(self.token, update)
            if result.unauthorized:
                self.reconciler.expire_session()
                return False
            if not result.ok:
                logger.warning("Profile update failed: %s", result.error.message)
                self.notice = UPDATE_FAILED
                return False

            self.notice = result.value or UPDATE_DONE
            self.navigate(PROFILE)
            return True
        finally:
            self.form.clear_passwords()
            self.saving = False
