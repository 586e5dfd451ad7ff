"""Event form: editable state plus its Streamlit rendering."""
import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional

import streamlit as st

from webinar_admin.models.event import SESSION_SLOTS, Event, Session, Sessions, SocialLinks, Speaker
from webinar_admin.models.form import EventFields, SessionFields, SpeakerFields
from webinar_admin.utils.timestamps import to_display_string, to_native_date
from webinar_admin.utils.validation import missing_required_fields

logger = logging.getLogger(__name__)

REQUIRED_FIELDS_ALERT = "Please fill in all required fields"
SOCIAL_NETWORKS = ("linkedin", "twitter", "website")

EMPTY = "empty"
POPULATED = "populated"
VALIDATED = "validated"
SUBMITTED = "submitted"


def event_to_fields(event: Event) -> EventFields:
    """Convert a stored event into form fields (dates become display strings)."""
    def session_fields(session: Session) -> SessionFields:
        return SessionFields(
            title=session.title,
            description=session.description,
            time=to_display_string(session.time),
        )

    return EventFields(
        title=event.title,
        date=to_display_string(event.date),
        talk=session_fields(event.sessions.talk),
        interview=session_fields(event.sessions.interview),
        speakers=[
            SpeakerFields(
                name=speaker.name,
                role=speaker.role,
                bio=speaker.bio,
                photo_url=speaker.photo_url or "",
                session_time=to_display_string(speaker.session_time),
                session_id=speaker.session_id,
                social_links=dict((speaker.social_links or SocialLinks()).items()),
            )
            for speaker in event.speakers
        ],
    )


def fields_to_event(fields: EventFields, event_id: Optional[str] = None) -> Event:
    """
    Convert form fields into an Event with native datetimes.

    Raises:
        ValueError: If a date string cannot be parsed
    """
    def session(data: SessionFields) -> Session:
        return Session(
            title=data.title.strip(),
            description=data.description.strip(),
            time=to_native_date(data.time),
        )

    return Event(
        id=event_id,
        title=fields.title.strip(),
        date=to_native_date(fields.date),
        sessions=Sessions(talk=session(fields.talk), interview=session(fields.interview)),
        speakers=[
            Speaker(
                name=s.name.strip(),
                role=s.role.strip(),
                bio=s.bio.strip(),
                photo_url=s.photo_url.strip() or None,
                session_time=to_native_date(s.session_time),
                session_id=s.session_id,
                social_links=SocialLinks(
                    linkedin=s.social_links.get("linkedin") or None,
                    twitter=s.social_links.get("twitter") or None,
                    github=s.social_links.get("github") or None,
                    website=s.social_links.get("website") or None,
                ),
            )
            for s in fields.speakers
        ],
    )


class EventFormState:
    """
    Form state machine: empty -> populated -> validated -> submitted.

    Speaker entries are addressed by the key generated when they are added,
    so removing one never shifts the state of the others.
    """

    def __init__(self, fields: Optional[EventFields] = None, status: str = EMPTY):
        self.fields = fields or EventFields()
        self.status = status
        self.alert: Optional[str] = None

    @classmethod
    def empty(cls) -> "EventFormState":
        return cls()

    @classmethod
    def from_event(cls, event: Event) -> "EventFormState":
        return cls(event_to_fields(event), status=POPULATED)

    def _touch(self) -> None:
        if self.status in (EMPTY, VALIDATED, SUBMITTED):
            self.status = POPULATED

    def set_field(self, name: str, value: str) -> None:
        if name not in ("title", "date"):
            raise KeyError(f"Unknown event field: {name}")
        setattr(self.fields, name, value)
        self._touch()

    def update_session(self, slot: str, **changes) -> None:
        if slot not in SESSION_SLOTS:
            raise KeyError(f"Unknown session slot: {slot}")
        setattr(self.fields, slot, replace(getattr(self.fields, slot), **changes))
        self._touch()

    def speaker(self, key: str) -> SpeakerFields:
        for entry in self.fields.speakers:
            if entry.key == key:
                return entry
        raise KeyError(f"Unknown speaker entry: {key}")

    def add_speaker(self) -> str:
        entry = SpeakerFields()
        self.fields.speakers.append(entry)
        self._touch()
        return entry.key

    def remove_speaker(self, key: str) -> bool:
        remaining = [s for s in self.fields.speakers if s.key != key]
        removed = len(remaining) != len(self.fields.speakers)
        self.fields.speakers = remaining
        if removed:
            self._touch()
        return removed

    def update_speaker(self, entry_key: str, **changes) -> None:
        entry = self.speaker(entry_key)
        links = changes.pop("social_links", None)
        for name, value in changes.items():
            if not hasattr(entry, name) or name == "key":
                raise KeyError(f"Unknown speaker field: {name}")
            setattr(entry, name, value)
        if links is not None:
            entry.social_links = {**entry.social_links, **links}
        self._touch()

    def validate(self) -> bool:
        missing = missing_required_fields(self.fields)
        if missing:
            logger.debug("Event form incomplete: %s", ", ".join(missing))
            self.alert = REQUIRED_FIELDS_ALERT
            return False
        self.alert = None
        self.status = VALIDATED
        return True

    def submit(self, on_submit: Callable[[EventFields], None]) -> bool:
        """
        Validate and hand the fields to ``on_submit``.

        Returns:
            False (and sets ``alert``) without calling ``on_submit`` when a
            required field is empty
        """
        if not self.validate():
            return False
        on_submit(self.fields)
        self.status = SUBMITTED
        return True

    def to_event(self, event_id: Optional[str] = None) -> Event:
        return fields_to_event(self.fields, event_id)


def _datetime_input(label: str, current: str, key: str) -> str:
    """Render date + time pickers for a display string; empty when unset."""
    try:
        value = to_native_date(current)
    except (ValueError, TypeError):
        value = None

    date_col, time_col = st.columns(2, gap="small")
    with date_col:
        day = st.date_input(f"{label} date*", value=value.date() if value else None, key=f"{key}_date")
    with time_col:
        moment = st.time_input(f"{label} time*", value=value.time() if value else None, key=f"{key}_time")

    if day is None or moment is None:
        return ""
    return to_display_string(datetime.combine(day, moment))


def _render_session(state: EventFormState, slot: str, heading: str, prefix: str) -> None:
    session = getattr(state.fields, slot)
    st.markdown(f"#### {heading}")
    title = st.text_input("Title*", value=session.title, key=f"{prefix}_{slot}_title")
    time_value = _datetime_input("Session", session.time, key=f"{prefix}_{slot}_time")
    description = st.text_area("Description*", value=session.description, key=f"{prefix}_{slot}_description")
    if (title, time_value, description) != (session.title, session.time, session.description):
        state.update_session(slot, title=title, time=time_value, description=description)


def _render_speaker(
    state: EventFormState,
    entry: SpeakerFields,
    position: int,
    prefix: str,
    upload_photo: Optional[Callable[[str, bytes], str]],
) -> None:
    key = f"{prefix}_speaker_{entry.key}"

    header_col, remove_col = st.columns([4, 1], gap="small")
    with header_col:
        st.markdown(f"**Speaker {position}**")
    with remove_col:
        if st.button("Remove", key=f"{key}_remove"):
            state.remove_speaker(entry.key)
            st.rerun()

    name = st.text_input("Speaker Name*", value=entry.name, key=f"{key}_name")
    role = st.text_input("Role/Title", value=entry.role, key=f"{key}_role")
    session_time = _datetime_input("Speaker session", entry.session_time, key=f"{key}_session_time")

    # Bumped after each upload so the URL input picks up the new value.
    version_key = f"{key}_photo_version"
    if upload_photo is not None:
        uploaded = st.file_uploader(
            "Upload photo",
            type=["png", "jpg", "jpeg", "gif"],
            key=f"{key}_photo_upload",
        )
        uploaded_marker = f"{key}_uploaded_file_id"
        if uploaded is not None and st.session_state.get(uploaded_marker) != uploaded.file_id:
            try:
                entry.photo_url = upload_photo(uploaded.name, uploaded.getvalue())
            except Exception as error:
                logger.exception("Speaker photo upload failed")
                st.error(f"❌ Upload failed: {error}")
            else:
                st.session_state[uploaded_marker] = uploaded.file_id
                st.session_state[version_key] = st.session_state.get(version_key, 0) + 1
    photo_url = st.text_input(
        "Photo URL",
        value=entry.photo_url,
        placeholder="Or paste image URL",
        key=f"{key}_photo_url_{st.session_state.get(version_key, 0)}",
    )

    bio = st.text_area("Biography", value=entry.bio, key=f"{key}_bio")

    st.caption("Social Links")
    links = {}
    for network in SOCIAL_NETWORKS:
        links[network] = st.text_input(
            network.capitalize(),
            value=entry.social_links.get(network, ""),
            key=f"{key}_{network}",
        )

    state.update_speaker(
        entry.key,
        name=name,
        role=role,
        session_time=session_time,
        photo_url=photo_url,
        bio=bio,
        social_links=links,
    )


def render_event_form(
    state: EventFormState,
    on_submit: Callable[[EventFields], None],
    edit_mode: bool = False,
    on_cancel: Optional[Callable[[], None]] = None,
    upload_photo: Optional[Callable[[str, bytes], str]] = None,
    prefix: str = "event_form",
) -> None:
    """Render the event form and submit it through ``state``."""
    st.markdown("#### Event Basics")
    title = st.text_input("Event Title*", value=state.fields.title, key=f"{prefix}_title")
    if title != state.fields.title:
        state.set_field("title", title)
    date_value = _datetime_input("Event", state.fields.date, key=f"{prefix}_date")
    if date_value != state.fields.date:
        state.set_field("date", date_value)

    _render_session(state, "talk", "Talk Session", prefix)
    _render_session(state, "interview", "Interview Session", prefix)

    speakers_col, add_col = st.columns([4, 1], gap="small")
    with speakers_col:
        st.markdown("#### Speakers")
    with add_col:
        if st.button("➕ Add Speaker", key=f"{prefix}_add_speaker"):
            state.add_speaker()

    for position, entry in enumerate(list(state.fields.speakers), start=1):
        with st.container(border=True):
            _render_speaker(state, entry, position, prefix, upload_photo)

    action_cols = st.columns(2, gap="small")
    with action_cols[0]:
        label = "💾 Update Event" if edit_mode else "✅ Create Event"
        if st.button(label, type="primary", use_container_width=True, key=f"{prefix}_submit"):
            if not state.submit(on_submit):
                st.error(f"❌ {state.alert}")
    if edit_mode and on_cancel is not None:
        with action_cols[1]:
            if st.button("❌ Cancel", use_container_width=True, key=f"{prefix}_cancel"):
                on_cancel()
