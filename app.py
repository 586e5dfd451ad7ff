"""
IEEE Webinar Platform
Public event page and admin panel.
"""
import logging
import streamlit as st

from webinar_admin.ui.admin_panel import render_admin_panel
from webinar_admin.ui.home import render_home_page
from webinar_admin.ui.login_page import render_login_page

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


st.set_page_config(
    page_title="IEEE Webinar Platform",
    page_icon="🎙️",
    layout="wide",
    initial_sidebar_state="collapsed"
)

PAGES = {
    "home": render_home_page,
    "login": render_login_page,
    "admin": render_admin_panel,
}


def initialize_session_state():
    """Initialize session state defaults."""
    if "current_page" not in st.session_state:
        st.session_state.current_page = "home"

    if "url_params_processed" not in st.session_state:
        page = st.query_params.get("page")
        if page in PAGES:
            st.session_state.current_page = page
        st.session_state.url_params_processed = True


def render_navigation():
    """Render the top navigation buttons."""
    home_col, _, admin_col = st.columns([1, 3, 1], gap="small")

    with home_col:
        if st.button("🏠 Home", use_container_width=True, key="nav_home"):
            st.session_state.current_page = "home"

    with admin_col:
        if st.button("👤 Admin", use_container_width=True, key="nav_admin"):
            st.session_state.current_page = "admin"


def render_current_page():
    """Render the page selected in session state."""
    try:
        render_page = PAGES.get(st.session_state.current_page)
        if render_page is None:
            st.error(f"Page not found: {st.session_state.current_page}")
            if st.button("Back to home"):
                st.session_state.current_page = "home"
                st.rerun()
            return

        render_page()

    except Exception as e:
        logger.exception("Unhandled exception while rendering page")
        st.error("Something went wrong, please try again later")

        with st.expander("🔍 Error details"):
            st.code(str(e))

        if st.button("Back to home"):
            st.session_state.current_page = "home"
            st.rerun()


def main():
    """Application entry point."""
    initialize_session_state()
    render_navigation()
    render_current_page()


if __name__ == "__main__":
    main()
