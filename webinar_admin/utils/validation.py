"""Data validation utilities."""
import re
from typing import List, Optional

from webinar_admin.models.form import EventFields, SessionFields

IMAGE_URL_PATTERN = re.compile(r"^https?://.*\.(jpg|jpeg|png|gif)$", re.IGNORECASE)
ALLOWED_PHOTO_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif"}


def is_blank(value: Optional[str]) -> bool:
    """True for None, empty or whitespace-only strings."""
    return value is None or not str(value).strip()


def _missing_session_fields(slot: str, session: SessionFields) -> List[str]:
    missing = []
    if is_blank(session.title):
        missing.append(f"{slot}.title")
    if is_blank(session.time):
        missing.append(f"{slot}.time")
    if is_blank(session.description):
        missing.append(f"{slot}.description")
    return missing


def missing_required_fields(fields: EventFields) -> List[str]:
    """
    List the required form fields that are empty.

    Args:
        fields: Event form data

    Returns:
        Dotted field names, empty when the form is complete

    Required:
        - title and date
        - title, time and description of both sessions
        - name and session time of every speaker (when there are any)
    """
    missing = []

    if is_blank(fields.title):
        missing.append("title")
    if is_blank(fields.date):
        missing.append("date")

    missing.extend(_missing_session_fields("talk", fields.talk))
    missing.extend(_missing_session_fields("interview", fields.interview))

    for index, speaker in enumerate(fields.speakers):
        if is_blank(speaker.name):
            missing.append(f"speakers[{index}].name")
        if is_blank(speaker.session_time):
            missing.append(f"speakers[{index}].session_time")

    return missing


def validate_event_fields(fields: EventFields) -> bool:
    """Return True when every required field is filled in."""
    return not missing_required_fields(fields)


def is_direct_image_url(url: Optional[str]) -> bool:
    """
    Check whether a URL points straight at an image file.

    Only http(s) URLs ending in jpg/jpeg/png/gif are accepted.
    """
    if not url:
        return False
    return bool(IMAGE_URL_PATTERN.match(url.strip()))


def normalize_email(email: Optional[str]) -> str:
    """Lowercase and strip an email address for comparison."""
    return (email or "").strip().lower()
