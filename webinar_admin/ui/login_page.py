"""Email/password sign-in page."""
import logging

import streamlit as st

from webinar_admin.services.auth_service import login
from webinar_admin.services.backend import get_document_store
from webinar_admin.utils.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


def render_login_page() -> None:
    """Render the sign-in form; a successful sign-in continues to the admin page."""
    with st.form("admin_login_form", clear_on_submit=False):
        st.markdown("## 🔐 Admin Sign In")

        email = st.text_input("Email", placeholder="admin@example.org", key="login_email_input")
        password = st.text_input("Password", type="password", key="login_password_input")

        submit_col, cancel_col = st.columns(2, gap="small")
        with submit_col:
            submit = st.form_submit_button("Sign in", use_container_width=True, type="primary")
        with cancel_col:
            cancel = st.form_submit_button("Back", use_container_width=True)

    if submit:
        if not email or not password:
            st.error("❌ Please enter email and password")
            return
        try:
            login(get_document_store(), email, password)
        except AuthenticationError as error:
            st.error(f"❌ {error}")
        except Exception:
            logger.exception("Sign-in failed")
            st.error("❌ Sign-in is unavailable, please try again later")
        else:
            st.session_state.current_page = "admin"
            st.rerun()

    if cancel:
        st.session_state.current_page = "home"
        st.rerun()
