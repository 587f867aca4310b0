# app.py
# Main Streamlit app for Badge Viewer

import streamlit as st
from streamlit.errors import StreamlitAPIException

from badgeviewer.config import load_settings
from badgeviewer.context import AppContext, build_context
from badgeviewer.logging_setup import configure_logging
from badgeviewer.navigation import get_current_view, check_rerun
from badgeviewer.screens import BADGE, BADGES, EDIT_PROFILE, HOME, PROFILE
from badgeviewer.components import (
    render_sidebar, render_home, render_catalog, render_badge_detail,
    render_profile, render_edit_profile
)

# Page config
st.set_page_config(
    page_title="Badge Viewer",
    page_icon="🏅"
)

def _read_secrets() -> dict:
    try:
        return dict(st.secrets)
    except (FileNotFoundError, StreamlitAPIException):
        return {}

@st.cache_resource
def get_context() -> AppContext:
    """Services shared by every rerun: settings, API client, session store"""
    settings = load_settings(_read_secrets())
    configure_logging(settings.log_level)
    return build_context(settings)

ctx = get_context()

# Determine current view
current_view = get_current_view()

# View routing
VIEWS = {
    HOME: lambda: render_home(ctx),
    BADGES: lambda: render_catalog(ctx),
    BADGE: lambda: render_badge_detail(ctx),
    PROFILE: lambda: render_profile(ctx),
    EDIT_PROFILE: lambda: render_edit_profile(ctx),
}

render_sidebar(ctx)

# Main content routing
if current_view in VIEWS:
    VIEWS[current_view]()
else:
    st.error(f"Unknown view: {current_view}")

# Check for pending reruns
check_rerun()
