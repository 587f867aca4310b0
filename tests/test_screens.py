"""
Tests for the screen models built on the reconciler.
"""

import pytest
import requests

from badgeviewer.display import image_url, initials_from_names, top_bar_initials
from badgeviewer.profile_update import ImageUpload
from badgeviewer.screens import (
    BADGE, HOME, PROFILE,
    BadgeDetailScreen, CatalogScreen, EditProfileScreen, HomeScreen, ProfileScreen, Screen,
)
from conftest import badge_json, user_json


def _catalog(http, ids=(1, 2, 3)):
    http.route("GET", "badges", body={"badges": [badge_json(i) for i in ids]})


class TestScreenBase:

    def test_requires_load_steps(self, api, session_store, navigate):
        with pytest.raises(TypeError):
            Screen(api, session_store, navigate)


class TestHomeScreen:

    def test_selects_first_badge(self, api, http, session_store, navigate):
        _catalog(http)
        screen = HomeScreen(api, session_store, navigate)

        assert screen.mount().is_success
        assert screen.selected.id == 1
        assert screen.profile_image is None
        assert http.calls_to("GET", "user") == []

    def test_offline_shows_connect_message_and_retry_recovers(self, api, http, session_store, navigate):
        http.route("GET", "badges", exc=requests.exceptions.ConnectionError("offline"))
        screen = HomeScreen(api, session_store, navigate)

        state = screen.mount()
        assert state.is_error
        assert state.message == "Please connect to the internet"

        _catalog(http)
        assert screen.retry().is_success

    def test_logged_in_loads_profile_image(self, api, http, logged_in, navigate):
        _catalog(http)
        http.route("GET", "user", body=user_json(image="/img/me.png"))
        screen = HomeScreen(api, logged_in, navigate)

        screen.mount()

        assert screen.profile_image == "/img/me.png"
        assert screen.initials == "JA"

    def test_profile_image_failure_keeps_screen(self, api, http, logged_in, navigate):
        _catalog(http)
        http.route("GET", "user", status=500)
        screen = HomeScreen(api, logged_in, navigate)

        assert screen.mount().is_success
        assert screen.profile_image is None


class TestCatalogScreen:

    def test_logged_out_skips_authenticated_calls(self, api, http, session_store, navigate):
        _catalog(http)
        screen = CatalogScreen(api, session_store, navigate)

        assert screen.mount().is_success
        assert [c.path for c in http.calls] == ["badges"]
        assert screen.owned_ids == set()

    def test_owned_badges(self, api, http, logged_in, navigate, navigations):
        _catalog(http)
        http.route("GET", "user", body=user_json())
        http.route("GET", "badges-earned", body={"badges": [badge_json(2)]})
        screen = CatalogScreen(api, logged_in, navigate)

        screen.mount()

        assert screen.owned_ids == {2}
        assert not screen.open(1)
        assert screen.open(2)
        assert navigations == [(BADGE, {"badge_id": 2})]

    def test_expired_token_clears_session_and_redirects(self, api, http, logged_in, navigate, navigations):
        _catalog(http)
        http.route("GET", "user", body=user_json())
        http.route("GET", "badges-earned", status=401)
        screen = CatalogScreen(api, logged_in, navigate)

        state = screen.mount()

        assert not state.is_error
        assert navigations == [(HOME, {})]
        session = logged_in.get()
        assert (session.token, session.email, session.display_name) == (None, None, None)

    def test_select_fetches_earners_once(self, api, http, session_store, navigate):
        _catalog(http)
        http.route("GET", "badge/earners/2", body={"earners": 41})
        screen = CatalogScreen(api, session_store, navigate)
        screen.mount()

        screen.select(2)
        screen.select(2)

        assert len(http.calls_to("GET", "badge/earners/2")) == 1
        assert screen.earners == "41"
        assert len(http.calls_to("GET", "badges")) == 1

    def test_select_failure_shows_placeholder(self, api, http, session_store, navigate):
        _catalog(http)
        http.route("GET", "badge/earners/3", status=500)
        screen = CatalogScreen(api, session_store, navigate)
        screen.mount()

        screen.select(3)

        assert len(http.calls_to("GET", "badge/earners/3")) == 1
        assert screen.earners == "—"
        assert screen.state.is_success

    def test_reload_clears_selection(self, api, http, session_store, navigate):
        _catalog(http)
        http.route("GET", "badge/earners/2", status=500)
        screen = CatalogScreen(api, session_store, navigate)
        screen.mount()
        screen.select(2)

        http.route("GET", "badge/earners/2", body={"earners": 12})
        screen.mount()

        assert screen.selected_id is None
        assert screen.earners == "—"

        screen.select(2)

        assert len(http.calls_to("GET", "badge/earners/2")) == 2
        assert screen.earners == "12"


class TestBadgeDetailScreen:

    def test_starts_at_requested_badge(self, api, http, session_store, navigate):
        _catalog(http)
        http.route("GET", "badge/earners/2", body={"earners": 5})
        screen = BadgeDetailScreen(api, session_store, navigate, start_id=2)

        screen.mount()

        assert screen.badge.id == 2
        assert screen.position_label == "2 of 3"
        assert screen.earners == "5"
        assert [b.id for b in screen.related] == [1, 3]

    def test_unknown_start_id_falls_back_to_first(self, api, http, session_store, navigate):
        _catalog(http)
        screen = BadgeDetailScreen(api, session_store, navigate, start_id=99)

        screen.mount()

        assert screen.index == 0
        assert screen.earners == "N/A"

    def test_navigation_refreshes_only_earners(self, api, http, session_store, navigate):
        _catalog(http)
        http.route("GET", "badge/earners/1", body={"earners": 1})
        http.route("GET", "badge/earners/2", body={"earners": 2})
        screen = BadgeDetailScreen(api, session_store, navigate, start_id=1)
        screen.mount()

        assert not screen.previous()
        assert screen.next()
        assert screen.earners == "2"
        assert screen.select(1)
        assert screen.earners == "1"
        assert len(http.calls_to("GET", "badges")) == 1

    def test_new_start_id_reloads(self, api, http, session_store, navigate):
        _catalog(http)
        screen = BadgeDetailScreen(api, session_store, navigate, start_id=1)
        screen.mount()

        screen.set_start_id(1)
        assert len(http.calls_to("GET", "badges")) == 1

        screen.set_start_id(3)
        assert len(http.calls_to("GET", "badges")) == 2
        assert screen.badge.id == 3


class TestProfileScreen:

    def test_logged_out_redirects_without_calls(self, api, http, session_store, navigate, navigations):
        ProfileScreen(api, session_store, navigate).mount()

        assert navigations == [(HOME, {})]
        assert http.calls == []

    def test_selects_first_owned_badge(self, api, http, logged_in, navigate):
        http.route("GET", "user", body=user_json(badge_ids=(3, 1)))
        _catalog(http)
        http.route("GET", "badge/earners/3", body={"earners": 8})
        screen = ProfileScreen(api, logged_in, navigate)

        assert screen.mount().is_success
        assert screen.selected_badge_id == 3
        assert screen.earners == "8"
        assert screen.catalog_entry(3).name == "Badge 3"
        assert screen.avatar_initials == "JD"
        assert [c.path for c in http.calls] == ["user", "badges", "badge/earners/3"]

    def test_earner_failure_is_placeholder(self, api, http, logged_in, navigate):
        http.route("GET", "user", body=user_json(badge_ids=(3,)))
        _catalog(http)
        http.route("GET", "badge/earners/3", exc=requests.exceptions.Timeout("slow"))
        screen = ProfileScreen(api, logged_in, navigate)

        assert screen.mount().is_success
        assert screen.earners == "—"

    def test_logout(self, api, http, logged_in, navigate, navigations):
        screen = ProfileScreen(api, logged_in, navigate)

        screen.logout()

        assert not logged_in.get().is_authenticated
        assert navigations == [(HOME, {})]


class TestEditProfileScreen:

    def _mounted(self, api, http, store, navigate):
        http.route("GET", "user", body=user_json(badge_ids=(7,)))
        screen = EditProfileScreen(api, store, navigate)
        screen.mount()
        return screen

    def test_loads_form(self, api, http, logged_in, navigate):
        screen = self._mounted(api, http, logged_in, navigate)

        assert screen.form.first_name == "Jane"
        assert screen.form.notify_profile is False
        assert [b.badge_id for b in screen.form.badges] == [7]

    def test_local_validation_issues_no_request(self, api, http, logged_in, navigate):
        screen = self._mounted(api, http, logged_in, navigate)
        screen.form.new_password = "newpassword"

        assert not screen.save()

        assert screen.notice == "Enter current password"
        assert http.calls_to("PUT", "user/profile") == []
        assert screen.form.new_password == ""

    def test_save_success(self, api, http, logged_in, navigate, navigations):
        screen = self._mounted(api, http, logged_in, navigate)
        http.route("PUT", "user/profile", body={"message": "Saved"})
        screen.form.current_password = "oldpassword"
        screen.form.new_password = "newpassword"
        screen.pick_image("me.png", b"png", "image/png")

        assert screen.save()

        parts = dict(http.calls_to("PUT", "user/profile")[0].kwargs["files"])
        assert parts["newPassword"] == (None, "newpassword")
        assert parts["profileImage"] == ("me.png", b"png", "image/png")
        assert screen.notice == "Saved"
        assert (screen.form.current_password, screen.form.new_password) == ("", "")
        assert navigations == [(PROFILE, {})]

    def test_save_failure_keeps_form_but_drops_passwords(self, api, http, logged_in, navigate, navigations):
        screen = self._mounted(api, http, logged_in, navigate)
        http.route("PUT", "user/profile", status=500)
        screen.form.first_name = "Janet"
        screen.form.current_password = "oldpassword"
        screen.form.new_password = "newpassword"

        assert not screen.save()

        assert screen.notice == "Update failed. Please try again."
        assert screen.form.first_name == "Janet"
        assert (screen.form.current_password, screen.form.new_password) == ("", "")
        assert navigations == []

    def test_save_unauthorized_clears_session(self, api, http, logged_in, navigate, navigations):
        screen = self._mounted(api, http, logged_in, navigate)
        http.route("PUT", "user/profile", status=401)

        assert not screen.save()

        assert not logged_in.get().is_authenticated
        assert navigations == [(HOME, {})]

    def test_remove_image(self, api, http, logged_in, navigate):
        http.route("GET", "user", body=user_json(image="/img/me.png"))
        http.route("DELETE", "user/profile/image", body={"message": "Image removed"})
        screen = EditProfileScreen(api, logged_in, navigate)
        screen.mount()
        screen.form.image = ImageUpload("x.png", b"x", "image/png")

        assert screen.remove_image()

        assert screen.form.image is None
        assert screen.form.image_ref is None


class TestDisplayHelpers:

    def test_top_bar_initials(self):
        assert top_bar_initials("jane") == "JA"
        assert top_bar_initials(None) == "U"

    def test_initials_from_names(self):
        assert initials_from_names("jane", "doe") == "JD"
        assert initials_from_names("", "") == ""

    def test_image_url(self):
        assert image_url("https://x.test/api/", "/img/a.png", now_ms=5) == "https://x.test/api/img/a.png?t=5"
        assert image_url("https://x.test/api/", None) is None
