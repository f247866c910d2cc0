"""Login against the backend and per-session token handling."""
import logging

import streamlit as st

from core import services
from core.api_client import ApiClient, ApiError, AuthenticationError
from core.session import SessionContext
from core.validators import validate_login, validate_registration

logger = logging.getLogger(__name__)


def get_session() -> SessionContext:
    """SessionContext of this browser session."""
    if "session_context" not in st.session_state:
        st.session_state.session_context = SessionContext()
    return st.session_state.session_context


def get_client() -> ApiClient:
    """API client bound to this browser session's SessionContext."""
    if "api_client" not in st.session_state:
        st.session_state.api_client = ApiClient(get_session())
    return st.session_state.api_client


def login_user(client: ApiClient, username: str, password: str) -> tuple:
    """Verify credentials with the backend and start the session.
    Returns: (success: bool, message: str)
    """
    errors = validate_login(username, password)
    if errors:
        return False, next(iter(errors.values()))
    username = username.strip()
    try:
        response = services.login(client, username, password)
    except AuthenticationError:
        return False, "Invalid username or password"
    except ApiError as e:
        logger.warning("Login failed for %s: %s", username, e.message)
        return False, e.message
    token = (response or {}).get("token")
    if not token:
        return False, "Login response did not include a token"
    client.session.init(token, response.get("username") or username)
    return True, f"Welcome, {client.session.username}"


def register_user(client: ApiClient, username: str, password: str, confirm_password: str) -> tuple:
    """Create a new account.
    Returns: (success: bool, message: str)
    """
    errors = validate_registration(username, password, confirm_password)
    if errors:
        return False, next(iter(errors.values()))
    try:
        services.register(client, username.strip(), password)
    except ApiError as e:
        return False, f"Error creating account: {e.message}"
    return True, "Account created! You can now log in."


def login_form(client: ApiClient):
    """Display login and signup forms."""
    if "show_signup" not in st.session_state:
        st.session_state.show_signup = False

    if not st.session_state.show_signup:
        st.markdown("### \U0001F510 Login")
        with st.form("login_form", clear_on_submit=False):
            username = st.text_input("Username")
            password = st.text_input("Password", type="password")
            submit = st.form_submit_button("Login", width="stretch")

            if submit:
                success, message = login_user(client, username, password)
                if success:
                    st.rerun()
                else:
                    st.error(f"❌ {message}")

        if st.button("\U0001F4DD Don't have an account? Sign up here"):
            st.session_state.show_signup = True
            st.rerun()

    else:
        st.markdown("### \U0001F4DD Sign Up")
        with st.form("signup_form", clear_on_submit=False):
            new_username = st.text_input("Choose Username", key="signup_username")
            new_password = st.text_input("Choose Password", type="password", key="signup_password")
            confirm_password = st.text_input("Confirm Password", type="password", key="signup_confirm")
            signup_submit = st.form_submit_button("Sign Up", width="stretch")

            if signup_submit:
                success, message = register_user(client, new_username, new_password, confirm_password)
                if success:
                    st.success(f"✅ {message}")
                else:
                    st.error(f"❌ {message}")

        if st.button("\U0001F510 Already have an account? Login here"):
            st.session_state.show_signup = False
            st.rerun()


def logout():
    """End the session and drop every page's local state."""
    get_session().clear()
    keep = {"session_context", "api_client"}
    for key in list(st.session_state.keys()):
        if key not in keep:
            del st.session_state[key]


def require_auth() -> bool:
    """Check if user is authenticated. Returns True if authenticated, False otherwise."""
    return get_session().is_authenticated


def get_current_user() -> dict:
    session = get_session()
    return {"username": session.username, "authenticated": session.is_authenticated}
