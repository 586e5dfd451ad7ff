"""Guard that only renders a page for a signed-in (admin) user."""
import logging
from typing import Callable, Optional

import streamlit as st

from webinar_admin.models.user import User
from webinar_admin.services.auth_service import AuthState, GuardDecision, evaluate_guard, get_auth_state
from webinar_admin.utils.config import get_settings

logger = logging.getLogger(__name__)

LOGIN_PAGE = "login"
HOME_PAGE = "home"


def auth_guard(
    render_children: Callable[[User], None],
    admin_only: bool = True,
    auth_state: Optional[AuthState] = None,
    admin_email: Optional[str] = None,
) -> GuardDecision:
    """
    Render ``render_children`` only when the auth state allows it.

    The auth state is re-evaluated on every call; pass one explicitly or the
    current session is observed.

    Returns:
        The decision that was applied
    """
    if auth_state is None:
        auth_state = get_auth_state()
    if admin_email is None:
        admin_email = get_settings().admin_email

    decision = evaluate_guard(auth_state, admin_only, admin_email)

    if decision is GuardDecision.PENDING:
        st.info("⏳ Checking sign-in...")
    elif decision is GuardDecision.REDIRECT_LOGIN:
        st.session_state.current_page = LOGIN_PAGE
        st.rerun()
    elif decision is GuardDecision.REDIRECT_HOME:
        logger.warning("Non-admin user %s redirected from admin page", auth_state.user.uid)
        st.session_state.current_page = HOME_PAGE
        st.rerun()
    else:
        if admin_only:
            st.caption(f"Logged in as: {auth_state.user.email}")
        render_children(auth_state.user)

    return decision
