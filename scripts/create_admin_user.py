#!/usr/bin/env python3
"""
Create the admin account and grant it the admin claims.

Privileged offline script, not part of the running app. Reads ADMIN_EMAIL
and ADMIN_PASSWORD (and SERVICE_ACCOUNT_KEY, DATABASE_URL) from the
environment or .env.
"""

import logging
import os
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from webinar_admin.services.auth_service import create_user, set_custom_claims  # noqa: E402
from webinar_admin.services.backend import get_document_store  # noqa: E402
from webinar_admin.utils.config import get_settings  # noqa: E402
from webinar_admin.utils.exceptions import ConfigurationError  # noqa: E402

logger = logging.getLogger("create_admin_user")

ADMIN_CLAIMS = {"admin": True, "ieeeMember": True}


def create_admin_user(email: str, password: str) -> str:
    """Create the user, set its claims and return its uid."""
    store = get_document_store()
    user = create_user(store, email, password)
    set_custom_claims(store, user.uid, ADMIN_CLAIMS)
    return user.uid


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    settings = get_settings()

    try:
        credential = settings.service_account()
    except ConfigurationError as error:
        logger.error("❌ %s", error)
        return 1

    admin_email = os.getenv("ADMIN_EMAIL")
    admin_password = os.getenv("ADMIN_PASSWORD")
    if not admin_email or not admin_password:
        logger.error("❌ Missing ADMIN_EMAIL or ADMIN_PASSWORD in .env")
        return 1

    try:
        uid = create_admin_user(admin_email, admin_password)
    except Exception:
        logger.exception("❌ Error creating admin user")
        return 1

    logger.info("✅ Successfully created admin user: %s", admin_email)
    logger.info("UID: %s (granted by %s)", uid, credential["client_email"])
    return 0


if __name__ == "__main__":
    sys.exit(main())
