"""Public page showing the latest event and its speakers."""
import logging
from itertools import islice
from typing import Iterable, List, Optional, Tuple

import streamlit as st

from webinar_admin.models.event import SESSION_SLOTS, Event, Session, Speaker
from webinar_admin.services.backend import get_event_repository, get_object_storage
from webinar_admin.services.event_repository import EventRepository
from webinar_admin.ui.html_utils import escape, html_block
from webinar_admin.utils.timestamps import format_event_date, format_session_time
from webinar_admin.utils.validation import ALLOWED_PHOTO_EXTENSIONS, is_direct_image_url

logger = logging.getLogger(__name__)

DEFAULT_SPEAKER_PHOTO = "/app/static/default-speaker.jpg"
NO_EVENT_MESSAGE = "No upcoming events found"
LOAD_ERROR_MESSAGE = "Failed to load event data"
SESSION_LABELS = {"talk": "Talk", "interview": "Interview"}
SOCIAL_LABELS = {
    "linkedin": "LinkedIn",
    "twitter": "Twitter",
    "github": "GitHub",
    "website": "Website",
}


def load_latest_event(repository: EventRepository) -> Tuple[Optional[Event], str]:
    """
    Fetch the most recently dated event.

    Returns:
        (event, "") when found, (None, message) when there is none or the
        backend call fails
    """
    try:
        event = repository.latest()
    except Exception:
        logger.exception("Error loading event")
        return None, LOAD_ERROR_MESSAGE

    if event is None:
        return None, NO_EVENT_MESSAGE
    return event, ""


def speaker_photo_src(photo_url: Optional[str], storage_prefix: Optional[str] = None) -> str:
    """Use the speaker photo when it is a direct image link, else the default image."""
    if is_direct_image_url(photo_url):
        return photo_url.strip()
    if photo_url and storage_prefix and photo_url.startswith(storage_prefix):
        if any(photo_url.lower().endswith(ext) for ext in ALLOWED_PHOTO_EXTENSIONS):
            return photo_url
    return DEFAULT_SPEAKER_PHOTO


def render_speaker_card(speaker: Speaker, storage_prefix: Optional[str] = None) -> str:
    """Build the HTML card for one speaker."""
    time_label = format_session_time(speaker.session_time)
    badge_html = (
        f'<div class="speaker-card__badge">{escape(time_label)}</div>' if time_label else ""
    )
    links_html = "".join(
        f'<a class="speaker-card__link" href="{escape(url)}" target="_blank" '
        f'rel="noopener noreferrer">{SOCIAL_LABELS[name]}</a>'
        for name, url in speaker.social_links.items()
    )
    photo = speaker_photo_src(speaker.photo_url, storage_prefix)

    return html_block(
        f"""
        <div class="speaker-card">
            {badge_html}
            <img class="speaker-card__photo" src="{escape(photo)}" alt="{escape(speaker.name)}"
                 width="96" height="96" style="border-radius: 50%; object-fit: cover;" />
            <div class="speaker-card__name">{escape(speaker.name)}</div>
            <div class="speaker-card__role">{escape(speaker.role)}</div>
            <p class="speaker-card__bio">{escape(speaker.bio)}</p>
            <div class="speaker-card__links">{links_html}</div>
        </div>
        """
    )


def _chunk(items: Iterable[Speaker], size: int) -> Iterable[List[Speaker]]:
    """Yield successive chunks from iterable."""
    iterator = iter(items)
    while True:
        batch = list(islice(iterator, size))
        if not batch:
            break
        yield batch


def _inject_home_styles() -> None:
    st.markdown(
        html_block(
            """
            <style>
            .speaker-card {
                position: relative;
                background: rgba(15, 17, 40, 0.92);
                border-radius: 16px;
                padding: 24px;
                text-align: center;
                margin-bottom: 16px;
            }
            .speaker-card__badge {
                position: absolute;
                top: 12px;
                right: 12px;
                background: #00629b;
                color: #ffffff;
                font-size: 12px;
                padding: 2px 10px;
                border-radius: 999px;
            }
            .speaker-card__name { font-size: 18px; font-weight: 700; color: #f8fafc; margin-top: 12px; }
            .speaker-card__role { font-size: 13px; color: #93c5fd; }
            .speaker-card__bio {
                font-size: 13px;
                color: #cbd5e1;
                display: -webkit-box;
                -webkit-line-clamp: 3;
                -webkit-box-orient: vertical;
                overflow: hidden;
            }
            .speaker-card__link { margin: 0 6px; font-size: 13px; color: #a5b4fc; }
            </style>
            """
        ),
        unsafe_allow_html=True,
    )


def _render_session(label: str, session: Session) -> None:
    st.markdown(f"#### {label}: {session.title}")
    time_label = format_session_time(session.time)
    if time_label:
        st.caption(f"🕒 {time_label}")
    st.write(session.description)


def render_home_page() -> None:
    """Render the latest event, or a fallback message when there is none."""
    event, message = load_latest_event(get_event_repository())

    if event is None:
        st.markdown("## IEEE Webinar Series")
        if message == LOAD_ERROR_MESSAGE:
            st.error(message)
        else:
            st.info(f"📭 {message}")
        return

    _inject_home_styles()
    st.markdown(f"# {event.title}")
    st.markdown(f"**{format_event_date(event.date)}**")

    for column, slot in zip(st.columns(2, gap="large"), SESSION_SLOTS):
        with column:
            _render_session(SESSION_LABELS[slot], event.sessions.get(slot))

    if not event.speakers:
        return

    st.markdown("### Speakers")
    storage_prefix = get_object_storage().base_url
    for row in _chunk(event.speakers, 3):
        columns = st.columns(3, gap="medium")
        for column, speaker in zip(columns, row):
            with column:
                st.markdown(render_speaker_card(speaker, storage_prefix), unsafe_allow_html=True)
                if speaker.bio:
                    with st.expander("Read More"):
                        st.write(speaker.bio)
