# components.py
# UI Components for the Badge Viewer app

import streamlit as st
from typing import Optional

from badgeviewer.auth_flow import AuthDialogs, Dialog
from badgeviewer.context import AppContext
from badgeviewer.display import image_url
from badgeviewer.navigation import get_screen, rerun, set_view, view_params
from badgeviewer.screens import (
    BADGE, BADGES, EDIT_PROFILE, HOME, PROFILE,
    BadgeDetailScreen, CatalogScreen, EditProfileScreen, HomeScreen, ProfileScreen,
)

# ---------------------------- Shared ---------------------------- #

def _navigator(view: str, **params):
    set_view(view, **params)

def show_image(ctx: AppContext, ref: Optional[str], fallback: str = ""):
    url = image_url(ctx.api.base_url, ref)
    if url:
        st.image(url, use_container_width=True)
    elif fallback:
        st.markdown(f"### {fallback}")

def _render_load_state(screen, on_retry=None) -> bool:
    """Spinner or error for a screen that is not loaded; True when content can render"""
    state = screen.state
    if state.is_success:
        return True
    if state.is_error:
        st.error(f"🌐 {state.message}")
        if on_retry and st.button("Retry", key="retry_load"):
            on_retry()
            rerun()
        return False
    st.info("Loading…")
    return False

def _get_dialogs(ctx: AppContext) -> AuthDialogs:
    if "auth_dialogs" not in st.session_state:
        st.session_state.auth_dialogs = AuthDialogs(ctx.api, ctx.session_store)
    return st.session_state.auth_dialogs

def _render_top_bar(ctx: AppContext, profile_image: Optional[str] = None):
    """Title on the left, avatar or login button on the right"""
    session = ctx.session_store.get()
    col1, col2 = st.columns([4, 1])
    with col1:
        st.title("🏅 Badge Viewer")
    with col2:
        if session.is_authenticated:
            url = image_url(ctx.api.base_url, profile_image)
            if url:
                st.image(url, width=48)
            if st.button(session.display_name or "Profile", key="top_profile"):
                set_view(PROFILE)
        else:
            if st.button("Login", key="top_login"):
                _get_dialogs(ctx).open_login()
                set_view(HOME)

# ---------------------------- Auth Components ---------------------------- #

def _render_flow_error(dialogs: AuthDialogs):
    if dialogs.notice:
        st.success(dialogs.notice)
    if dialogs.flow is not None and dialogs.flow.error:
        st.error(dialogs.flow.error)

def _render_login(dialogs: AuthDialogs):
    st.subheader("Welcome Back")
    st.caption("Sign in to continue your journey")
    with st.form("login_form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button(
            "Login", type="primary", disabled=dialogs.flow.submitting
        )
    if submitted:
        if dialogs.login(email, password):
            st.success("Logged in")
            set_view(HOME)
        else:
            rerun()

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Forgot Password?", key="to_forgot"):
            dialogs.open_forgot()
            rerun()
    with col2:
        if st.button("Create account", key="to_signup"):
            dialogs.open_signup()
            rerun()

def _render_email_step(dialogs: AuthDialogs, title: str, subtitle: str, button: str):
    st.subheader(title)
    st.caption(subtitle)
    with st.form(f"{dialogs.current.value}_form"):
        email = st.text_input("Email")
        submitted = st.form_submit_button(button, type="primary", disabled=dialogs.flow.submitting)
    if submitted:
        dialogs.send_otp(email)
        rerun()
    if st.button("Back to login", key="back_login"):
        dialogs.back_to_login()
        rerun()

def _render_signup_final(dialogs: AuthDialogs):
    st.subheader("Complete Signup")
    st.caption(f"Enter the OTP sent to {dialogs.flow.pending_email} and your details")
    with st.form("signup_final_form"):
        col1, col2 = st.columns(2)
        with col1:
            first_name = st.text_input("First name")
        with col2:
            last_name = st.text_input("Last name")
        otp = st.text_input("OTP")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Create Account", type="primary", disabled=dialogs.flow.submitting)
    if submitted:
        dialogs.finalize_signup(first_name, last_name, otp, password)
        rerun()

def _render_reset_final(dialogs: AuthDialogs):
    st.subheader("Reset Password")
    st.caption(f"Enter the OTP sent to {dialogs.flow.pending_email} and a new password")
    with st.form("reset_final_form"):
        otp = st.text_input("OTP")
        new_password = st.text_input("New password", type="password")
        submitted = st.form_submit_button("Reset Password", type="primary", disabled=dialogs.flow.submitting)
    if submitted:
        dialogs.finalize_reset(otp, new_password)
        rerun()

def render_auth_dialog(ctx: AppContext):
    """The one open auth dialog, if any"""
    dialogs = _get_dialogs(ctx)
    if not dialogs.is_open:
        return

    with st.container(border=True):
        if dialogs.current is Dialog.LOGIN:
            _render_login(dialogs)
        elif dialogs.current is Dialog.SIGNUP:
            _render_email_step(dialogs, "Join Us", "Enter email to receive OTP", "Send OTP")
        elif dialogs.current is Dialog.FORGOT:
            _render_email_step(dialogs, "Reset Password", "We'll send an OTP to your email", "Send Recovery OTP")
        elif dialogs.current is Dialog.SIGNUP_FINAL:
            _render_signup_final(dialogs)
        elif dialogs.current is Dialog.RESET_FINAL:
            _render_reset_final(dialogs)

        _render_flow_error(dialogs)

        if st.button("✕ Close", key="close_dialog"):
            dialogs.dismiss()
            rerun()

# ---------------------------- Sidebar Components ---------------------------- #

def render_sidebar(ctx: AppContext):
    """Drawer with navigation and session controls"""
    with st.sidebar:
        st.header("🏅 Badge Viewer")
        st.divider()
        if st.button("Home", key="nav_home", use_container_width=True):
            set_view(HOME)
        if st.button("Badges", key="nav_badges", use_container_width=True):
            set_view(BADGES)

        session = ctx.session_store.get()
        st.divider()
        if session.is_authenticated:
            st.write(f"**{session.display_name}**")
            st.caption(session.email or "")
            if st.button("Profile", key="nav_profile", use_container_width=True):
                set_view(PROFILE)
            if st.button("Logout", key="logout", use_container_width=True):
                ctx.session_store.clear()
                set_view(HOME)
        else:
            if st.button("Login", key="nav_login", use_container_width=True):
                _get_dialogs(ctx).open_login()
                set_view(HOME)

# ---------------------------- Home ---------------------------- #

def render_home(ctx: AppContext):
    screen: HomeScreen = get_screen(HOME, lambda: HomeScreen(ctx.api, ctx.session_store, _navigator))

    _render_top_bar(ctx, screen.profile_image)
    render_auth_dialog(ctx)

    if not _render_load_state(screen, on_retry=screen.retry):
        return

    st.markdown("### Become a part of the community")
    if st.button("Browse all badges", type="primary"):
        set_view(BADGES)

    st.subheader("Achievements")
    if not screen.badges:
        st.info("No badges yet.")
        return

    names = {b.id: b.name for b in screen.badges}
    selected_id = st.selectbox(
        "Badge",
        options=list(names.keys()),
        format_func=lambda badge_id: names[badge_id],
        index=screen.badges.index(screen.selected) if screen.selected else 0,
        key="home_badge",
    )
    screen.select(selected_id)

    badge = screen.selected
    show_image(ctx, badge.image)
    st.write(badge.description)
    col1, col2 = st.columns(2)
    with col1:
        st.metric("Holders", badge.holders)
    with col2:
        st.metric("Year Launched", badge.year_launched or "—")

# ---------------------------- Catalog ---------------------------- #

def render_catalog(ctx: AppContext):
    screen: CatalogScreen = get_screen(BADGES, lambda: CatalogScreen(ctx.api, ctx.session_store, _navigator))

    _render_top_bar(ctx, screen.profile_image)
    if not _render_load_state(screen, on_retry=screen.mount):
        return

    st.subheader("All Badges")
    st.caption("Complete challenges and earn badges to showcase your cybersecurity skills")

    for badge in screen.badges:
        owned = screen.is_owned(badge.id)
        with st.container(border=True):
            col1, col2 = st.columns([1, 3])
            with col1:
                show_image(ctx, badge.image)
            with col2:
                st.write(f"**{badge.name}**")
                st.caption(badge.category or ("Earned" if owned else "🔒 Locked"))
                c1, c2 = st.columns(2)
                with c1:
                    if st.button("Earners", key=f"earners_{badge.id}"):
                        screen.select(badge.id)
                        rerun()
                    if screen.selected_id == badge.id:
                        st.caption(f"Earners: {screen.earners}")
                with c2:
                    if owned and st.button("Open", key=f"open_{badge.id}"):
                        screen.open(badge.id)

    if st.button("Back to Home", key="catalog_home"):
        set_view(HOME)

# ---------------------------- Badge detail ---------------------------- #

def render_badge_detail(ctx: AppContext):
    start_id = view_params().get("badge_id")
    if start_id is None:
        set_view(BADGES)
        return

    screen: BadgeDetailScreen = get_screen(
        BADGE, lambda: BadgeDetailScreen(ctx.api, ctx.session_store, _navigator, start_id)
    )
    screen.set_start_id(start_id)

    _render_top_bar(ctx)
    if not _render_load_state(screen, on_retry=screen.mount):
        return

    badge = screen.badge
    col1, col2, col3 = st.columns([1, 2, 1])
    with col1:
        if st.button("◀", key="prev_badge", disabled=screen.index == 0):
            screen.previous()
            rerun()
    with col2:
        st.caption(screen.position_label)
    with col3:
        if st.button("▶", key="next_badge", disabled=screen.index >= len(screen.badges) - 1):
            screen.next()
            rerun()

    st.subheader(badge.name)
    show_image(ctx, badge.image)
    st.write(badge.description)

    c1, c2, c3 = st.columns(3)
    with c1:
        st.metric("Level", badge.level or "Professional")
    with c2:
        st.metric("Earners", screen.earners)
    with c3:
        st.metric("Vertical", badge.vertical or "General")

    if screen.related:
        st.subheader("Related Badges")
        cols = st.columns(len(screen.related))
        for col, other in zip(cols, screen.related):
            with col:
                if st.button(other.name, key=f"related_{other.id}"):
                    screen.select(other.id)
                    rerun()

# ---------------------------- Profile ---------------------------- #

def render_profile(ctx: AppContext):
    screen: ProfileScreen = get_screen(PROFILE, lambda: ProfileScreen(ctx.api, ctx.session_store, _navigator))
    if not _render_load_state(screen, on_retry=screen.mount):
        return

    user = screen.user
    col1, col2 = st.columns([1, 3])
    with col1:
        show_image(ctx, user.image, fallback=screen.avatar_initials)
    with col2:
        st.subheader(user.full_name or user.email)
        st.caption(user.email)

    c1, c2 = st.columns(2)
    with c1:
        if st.button("Edit Profile", key="edit_profile", use_container_width=True):
            set_view(EDIT_PROFILE)
    with c2:
        if st.button("Logout", key="profile_logout", use_container_width=True):
            screen.logout()

    st.subheader("My Badges")
    if not user.badges:
        st.info("No badges earned yet.")
        return

    for owned in user.badges:
        entry = screen.catalog_entry(owned.badge_id)
        label = entry.name if entry else owned.label
        if st.button(label, key=f"profile_badge_{owned.badge_id}"):
            screen.select(owned.badge_id)
            rerun()

    selected = screen.selected_badge
    if selected:
        entry = screen.catalog_entry(selected.badge_id)
        with st.container(border=True):
            st.write(f"**{entry.name if entry else selected.label}**")
            if entry:
                show_image(ctx, entry.image)
            m1, m2, m3 = st.columns(3)
            with m1:
                st.metric("Status", "Public" if selected.is_public else "Private")
            with m2:
                st.metric("Earners", screen.earners)
            with m3:
                st.metric("Type", (entry.vertical if entry else None) or "General")
            if selected.earned_date:
                st.caption(f"Earned {selected.earned_date}")
            if selected.certificate_id:
                st.caption(f"Certificate {selected.certificate_id}")

# ---------------------------- Edit profile ---------------------------- #

def render_edit_profile(ctx: AppContext):
    screen: EditProfileScreen = get_screen(
        EDIT_PROFILE, lambda: EditProfileScreen(ctx.api, ctx.session_store, _navigator)
    )
    st.subheader("Edit Profile")
    if not _render_load_state(screen, on_retry=screen.mount):
        return

    form = screen.form
    col1, col2 = st.columns([1, 3])
    with col1:
        if form.image is not None:
            st.image(form.image.content, use_container_width=True)
        else:
            show_image(ctx, form.image_ref, fallback=screen.avatar_initials)
    with col2:
        upload = st.file_uploader("Upload", type=["png", "jpg", "jpeg", "webp"], key="profile_image")
        if upload is not None:
            screen.pick_image(upload.name, upload.getvalue(), upload.type or "image/jpeg")
        if st.button("Remove", key="remove_image"):
            screen.remove_image()
            rerun()

    st.text_input("Email", value=form.email, disabled=True)
    c1, c2 = st.columns(2)
    with c1:
        form.first_name = st.text_input("First Name", value=form.first_name)
    with c2:
        form.last_name = st.text_input("Last Name", value=form.last_name)

    form.current_password = st.text_input("Your password", type="password", key="current_password")
    form.new_password = st.text_input("New password", type="password", key="new_password")

    if form.badges:
        st.subheader("Badge visibility")
        for badge in form.badges:
            is_public = st.toggle(badge.label, value=badge.is_public, key=f"public_{badge.badge_id}")
            form.set_badge_visibility(badge.badge_id, is_public)

    st.subheader("Email notifications")
    form.notify_badge = st.checkbox("Badge received", value=form.notify_badge)
    form.notify_profile = st.checkbox("Profile updates", value=form.notify_profile)
    form.notify_admin = st.checkbox("Admin daily", value=form.notify_admin)

    if st.button("Save changes", type="primary", disabled=screen.saving, use_container_width=True):
        saved = screen.save()
        # Password widgets must not keep what the form just dropped
        st.session_state.pop("current_password", None)
        st.session_state.pop("new_password", None)
        if saved:
            st.toast(screen.notice)
        rerun()

    if screen.notice:
        st.info(screen.notice)
