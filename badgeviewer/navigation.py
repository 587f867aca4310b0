# navigation.py
# View routing through st.session_state
from typing import Any, Callable, Dict, Optional
import streamlit as st

from badgeviewer.screens import HOME

state = st.session_state

def rerun():
    """Request a rerun from anywhere in the app"""
    state.rerun = True

def check_rerun():
    """Check if rerun was requested and execute it"""
    if state.get('rerun', False):
        state.rerun = False
        st.rerun()

def set_view(view: str, **params):
    """Change current view; screen models of the old view are dropped"""
    state.view = view
    state.view_params = params
    state.screens = {}
    rerun()

def get_current_view() -> str:
    if "view" not in state:
        state.view = HOME
    return state.view

def view_params() -> Dict[str, Any]:
    return state.get("view_params", {})

def get_screen(view: str, factory: Callable[[], Any]) -> Any:
    """Screen model for the current view, created and mounted on first render"""
    screens = state.setdefault("screens", {})
    screen: Optional[Any] = screens.get(view)
    if screen is None:
        screen = factory()
        screens[view] = screen
    screen.ensure_mounted()
    return screen
