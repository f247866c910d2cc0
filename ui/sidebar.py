"""Sidebar menu and logout."""
import streamlit as st

from core.auth import get_current_user, logout
from core.constants import MENU


def render_sidebar_menu():
    """Render the sidebar navigation menu with the signed-in user and logout."""
    if (
        "menu_selection" not in st.session_state
        or st.session_state.menu_selection not in MENU
    ):
        st.session_state.menu_selection = MENU[0]
    selected = st.sidebar.radio("Select Page", MENU, key="menu_selection")

    user = get_current_user()
    st.sidebar.markdown("---")
    if user["username"]:
        st.sidebar.caption(f"Signed in as **{user['username']}**")
    if st.sidebar.button("🚪 Logout", key="sidebar_logout"):
        logout()
        st.toast("Logged out.", icon="🔒")
        st.rerun()

    return selected
