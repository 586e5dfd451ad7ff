"""Construct the backend collaborators from the current settings."""
from webinar_admin.services.document_store import JsonDocumentStore
from webinar_admin.services.event_repository import EventRepository
from webinar_admin.services.object_storage import LocalObjectStorage
from webinar_admin.utils.config import get_settings


def get_document_store() -> JsonDocumentStore:
    return JsonDocumentStore(get_settings().database_path)


def get_event_repository() -> EventRepository:
    return EventRepository(get_document_store())


def get_object_storage() -> LocalObjectStorage:
    return LocalObjectStorage()
