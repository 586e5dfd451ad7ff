"""Event persistence on top of the document store."""
import logging
from typing import Any, Callable, Dict, List, Optional

from webinar_admin.models.event import Event, Session, Sessions, SocialLinks, Speaker
from webinar_admin.services.document_store import JsonDocumentStore
from webinar_admin.utils.exceptions import DocumentNotFoundError, EventNotFoundError
from webinar_admin.utils.timestamps import PersistedTimestamp, from_persisted, to_persisted

logger = logging.getLogger(__name__)

EVENTS_COLLECTION = "events"


def _session_to_document(session: Session) -> Dict[str, Any]:
    return {
        "title": session.title,
        "description": session.description,
        "time": to_persisted(session.time),
    }


def _speaker_to_document(speaker: Speaker) -> Dict[str, Any]:
    links = speaker.social_links or SocialLinks()
    return {
        "name": speaker.name,
        "role": speaker.role,
        "bio": speaker.bio,
        "photoUrl": speaker.photo_url or "",
        "sessionTime": to_persisted(speaker.session_time),
        "sessionId": speaker.session_id or "",
        "socialLinks": dict(links.items()),
    }


def event_to_document(event: Event) -> Dict[str, Any]:
    """
    Build the stored document for an event.

    The id and the server-assigned metadata are not part of the payload;
    the repository stamps those on write.
    """
    return {
        "title": event.title,
        "date": to_persisted(event.date),
        "sessions": {
            "talk": _session_to_document(event.sessions.talk),
            "interview": _session_to_document(event.sessions.interview),
        },
        "speakers": [_speaker_to_document(s) for s in event.speakers],
    }


def _session_from_document(data: Optional[Dict[str, Any]]) -> Session:
    data = data or {}
    return Session(
        title=data.get("title", ""),
        description=data.get("description", ""),
        time=from_persisted(data.get("time")),
    )


def _speaker_from_document(data: Dict[str, Any]) -> Speaker:
    links = data.get("socialLinks") or {}
    return Speaker(
        name=data.get("name", ""),
        role=data.get("role") or "",
        bio=data.get("bio", ""),
        photo_url=data.get("photoUrl") or None,
        session_time=from_persisted(data.get("sessionTime")),
        session_id=data.get("sessionId") or None,
        social_links=SocialLinks(
            linkedin=links.get("linkedin"),
            twitter=links.get("twitter"),
            github=links.get("github"),
            website=links.get("website"),
        ),
    )


def event_from_document(event_id: str, data: Dict[str, Any]) -> Event:
    """Build an Event from a stored document."""
    sessions = data.get("sessions") or {}
    return Event(
        id=event_id,
        title=data.get("title", ""),
        date=from_persisted(data.get("date")),
        sessions=Sessions(
            talk=_session_from_document(sessions.get("talk")),
            interview=_session_from_document(sessions.get("interview")),
        ),
        speakers=[_speaker_from_document(s) for s in data.get("speakers", [])],
        created_by=data.get("createdBy"),
        created_at=from_persisted(data.get("createdAt")),
        updated_at=from_persisted(data.get("updatedAt")),
    )


class EventRepository:
    """CRUD access to the ``events`` collection."""

    def __init__(
        self,
        store: JsonDocumentStore,
        clock: Callable[[], PersistedTimestamp] = PersistedTimestamp.now,
    ):
        self.store = store
        self.clock = clock

    def list(self) -> List[Event]:
        return [
            event_from_document(doc_id, doc)
            for doc_id, doc in self.store.get_all(EVENTS_COLLECTION)
        ]

    def get(self, event_id: str) -> Optional[Event]:
        doc = self.store.get(EVENTS_COLLECTION, event_id)
        if doc is None:
            return None
        return event_from_document(event_id, doc)

    def latest(self) -> Optional[Event]:
        """Return the event with the most recent date, or None."""
        docs = self.store.query(EVENTS_COLLECTION, order_by="date", descending=True, limit=1)
        if not docs:
            return None
        doc_id, doc = docs[0]
        return event_from_document(doc_id, doc)

    def create(self, payload: Event, created_by: str) -> str:
        """
        Store a new event.

        Args:
            payload: Complete event (its id is ignored)
            created_by: uid of the admin creating the event

        Returns:
            str: id of the new event
        """
        now = self.clock()
        document = event_to_document(payload)
        document.update({"createdBy": created_by, "createdAt": now, "updatedAt": now})

        event_id = self.store.add(EVENTS_COLLECTION, document)
        logger.info("Created event %s (%s)", event_id, payload.title)
        return event_id

    def update(self, event_id: str, payload: Event) -> None:
        """
        Replace an event with the complete payload.

        Creation metadata is carried over from the stored document.

        Raises:
            EventNotFoundError: If the event does not exist
        """
        existing = self.store.get(EVENTS_COLLECTION, event_id)
        if existing is None:
            raise EventNotFoundError(f"Event not found: {event_id}")

        document = event_to_document(payload)
        for key in ("createdBy", "createdAt"):
            if key in existing:
                document[key] = existing[key]
        document["updatedAt"] = self.clock()

        try:
            self.store.set(EVENTS_COLLECTION, event_id, document)
        except DocumentNotFoundError as e:
            raise EventNotFoundError(f"Event not found: {event_id}") from e
        logger.info("Updated event %s", event_id)

    def delete(self, event_id: str) -> None:
        """
        Permanently delete an event.

        Raises:
            EventNotFoundError: If the event does not exist
        """
        try:
            self.store.delete(EVENTS_COLLECTION, event_id)
        except DocumentNotFoundError as e:
            raise EventNotFoundError(f"Event not found: {event_id}") from e
        logger.info("Deleted event %s", event_id)
