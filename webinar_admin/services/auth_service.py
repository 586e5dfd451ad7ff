"""Authentication against the users collection and Streamlit session state."""
import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import streamlit as st

from webinar_admin.models.user import User
from webinar_admin.services.document_store import JsonDocumentStore
from webinar_admin.utils.exceptions import AuthenticationError
from webinar_admin.utils.validation import normalize_email

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"
SESSION_USER_KEY = "auth_user"
PBKDF2_ITERATIONS = 260_000


def hash_password(password: str, salt: Optional[str] = None) -> str:
    """Return ``pbkdf2_sha256$<iterations>$<salt>$<hex digest>``."""
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), PBKDF2_ITERATIONS)
    return f"pbkdf2_sha256${PBKDF2_ITERATIONS}${salt}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        algorithm, iterations, salt, expected = encoded.split("$")
    except (ValueError, AttributeError):
        return False
    if algorithm != "pbkdf2_sha256":
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), int(iterations))
    return hmac.compare_digest(digest.hex(), expected)


def _user_from_document(uid: str, doc: Dict[str, Any]) -> User:
    return User(
        uid=uid,
        email=doc["email"],
        display_name=doc.get("displayName"),
        claims=dict(doc.get("claims") or {}),
    )


def _find_user_document(store: JsonDocumentStore, email: str):
    wanted = normalize_email(email)
    for uid, doc in store.get_all(USERS_COLLECTION):
        if normalize_email(doc.get("email")) == wanted:
            return uid, doc
    return None, None


def create_user(store: JsonDocumentStore, email: str, password: str, display_name: Optional[str] = None) -> User:
    """
    Create an account with a hashed password.

    Raises:
        ValueError: If the email is already registered or the password is too short
    """
    if len(password or "") < 6:
        raise ValueError("Password must be at least 6 characters")

    uid, _ = _find_user_document(store, email)
    if uid is not None:
        raise ValueError(f"User already exists: {email}")

    doc = {
        "email": email.strip(),
        "displayName": display_name,
        "passwordHash": hash_password(password),
        "emailVerified": True,
        "claims": {},
    }
    uid = store.add(USERS_COLLECTION, doc)
    logger.info("Created user %s", uid)
    return _user_from_document(uid, doc)


def set_custom_claims(store: JsonDocumentStore, uid: str, claims: Dict[str, Any]) -> None:
    """Replace the custom claims of a user (privileged, offline use only)."""
    doc = store.get(USERS_COLLECTION, uid)
    if doc is None:
        raise AuthenticationError(f"Unknown user: {uid}")
    doc["claims"] = dict(claims)
    store.set(USERS_COLLECTION, uid, doc)
    logger.info("Set claims %s for user %s", sorted(claims), uid)


def sign_in(store: JsonDocumentStore, email: str, password: str) -> User:
    """
    Verify email/password credentials.

    Raises:
        AuthenticationError: If the account is unknown or the password is wrong
    """
    uid, doc = _find_user_document(store, email)
    if uid is None or not verify_password(password, doc.get("passwordHash", "")):
        raise AuthenticationError("Invalid email or password")
    return _user_from_document(uid, doc)


@dataclass(frozen=True)
class AuthState:
    """Result of observing the session: whether it has resolved, and who is signed in."""

    resolved: bool
    user: Optional[User] = None


class GuardDecision(Enum):
    PENDING = "pending"
    RENDER = "render"
    REDIRECT_LOGIN = "login"
    REDIRECT_HOME = "home"


def is_admin_email(email: Optional[str], admin_email: Optional[str]) -> bool:
    """Single admin identity: compare emails ignoring case and whitespace."""
    admin = normalize_email(admin_email)
    return bool(admin) and normalize_email(email) == admin


def evaluate_guard(auth_state: AuthState, admin_only: bool, admin_email: Optional[str]) -> GuardDecision:
    """
    Decide what a guarded page should do for the given auth state.

    Returns:
        PENDING until the auth check resolves, REDIRECT_LOGIN without a user,
        REDIRECT_HOME for a non-admin user on an admin-only page, else RENDER
    """
    if not auth_state.resolved:
        return GuardDecision.PENDING
    if auth_state.user is None:
        return GuardDecision.REDIRECT_LOGIN
    if admin_only and not is_admin_email(auth_state.user.email, admin_email):
        return GuardDecision.REDIRECT_HOME
    return GuardDecision.RENDER


def get_auth_state() -> AuthState:
    """
    Observe the current session.

    Streamlit session state is available synchronously, so the state is
    always resolved.
    """
    return AuthState(resolved=True, user=st.session_state.get(SESSION_USER_KEY))


def login(store: JsonDocumentStore, email: str, password: str) -> AuthState:
    """
    Sign in and remember the user in the session.

    Raises:
        AuthenticationError: If the credentials are invalid
    """
    user = sign_in(store, email, password)
    st.session_state[SESSION_USER_KEY] = user
    logger.info("User %s signed in", user.uid)
    return AuthState(resolved=True, user=user)


def logout() -> None:
    if SESSION_USER_KEY in st.session_state:
        del st.session_state[SESSION_USER_KEY]
