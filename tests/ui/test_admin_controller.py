"""Tests for the admin panel controller."""
import copy
import pytest
from dataclasses import replace
from datetime import datetime, timedelta
from unittest.mock import MagicMock
from webinar_admin.models.event import Event, Session, Sessions
from webinar_admin.models.form import EventFields, SessionFields
from webinar_admin.models.user import User
from webinar_admin.ui.admin_panel import BANNER_TIMEOUT_SECONDS, AdminController
from webinar_admin.utils.exceptions import EventNotFoundError


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


class FakeRepository:
    """In-memory stand-in that records every call and stamps server metadata."""

    def __init__(self, events=None):
        self.events = {e.id: e for e in (events or [])}
        self.calls = []
        self.next_id = 1
        self.stamp = datetime(2024, 5, 1, 12, 0)

    def _tick(self):
        self.stamp += timedelta(minutes=1)
        return self.stamp

    def list(self):
        self.calls.append(("list",))
        return [copy.deepcopy(e) for e in self.events.values()]

    def get(self, event_id):
        event = self.events.get(event_id)
        return copy.deepcopy(event) if event is not None else None

    def create(self, payload, created_by):
        self.calls.append(("create", payload.title, created_by))
        event_id = f"evt-{self.next_id}"
        self.next_id += 1
        now = self._tick()
        self.events[event_id] = replace(
            payload, id=event_id, created_by=created_by, created_at=now, updated_at=now
        )
        return event_id

    def update(self, event_id, payload):
        self.calls.append(("update", event_id, payload.title))
        if event_id not in self.events:
            raise EventNotFoundError(f"Event not found: {event_id}")
        existing = self.events[event_id]
        self.events[event_id] = replace(
            payload,
            id=event_id,
            created_by=existing.created_by,
            created_at=existing.created_at,
            updated_at=self._tick(),
        )

    def delete(self, event_id):
        self.calls.append(("delete", event_id))
        if event_id not in self.events:
            raise EventNotFoundError(f"Event not found: {event_id}")
        del self.events[event_id]


def make_event(event_id, title):
    return Event(
        id=event_id,
        title=title,
        date=datetime(2024, 6, 1, 10, 0),
        sessions=Sessions(
            talk=Session("T", "D", datetime(2024, 6, 1, 10, 0)),
            interview=Session("I", "D2", datetime(2024, 6, 1, 11, 0)),
        ),
        created_by="uid-0",
        created_at=datetime(2024, 1, 1, 0, 0),
    )


def make_fields(title="Webinar A"):
    return EventFields(
        title=title,
        date="2024-06-01T10:00",
        talk=SessionFields("T", "D", "2024-06-01T10:00"),
        interview=SessionFields("I", "D2", "2024-06-01T11:00"),
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def repository():
    return FakeRepository([make_event("evt-a", "First"), make_event("evt-b", "Second")])


@pytest.fixture
def controller(repository, clock):
    controller = AdminController(repository, clock=clock)
    controller.load()
    return controller


@pytest.fixture
def admin():
    return User(uid="uid-1", email="admin@example.org", claims={"admin": True})


class TestLoad:
    """Test loading the event list."""

    def test_load_fetches_events(self, controller):
        assert controller.loaded is True
        assert [e.id for e in controller.events] == ["evt-a", "evt-b"]

    def test_load_failure_shows_banner(self, clock):
        repository = MagicMock()
        repository.list.side_effect = OSError("disk gone")
        controller = AdminController(repository, clock=clock)

        controller.load()

        assert controller.loaded is False
        assert controller.events == []
        assert controller.current_banner().message == "Error loading events"


class TestCreate:
    """Test creating events."""

    def test_create_appends_exactly_one_event(self, repository, clock, admin):
        """Test one create call and the list grows by the returned id."""
        repository.events.clear()
        controller = AdminController(repository, clock=clock)
        controller.load()

        event_id = controller.submit(make_fields("Webinar A"), admin)

        creates = [c for c in repository.calls if c[0] == "create"]
        assert creates == [("create", "Webinar A", "uid-1")]
        assert len(controller.events) == 1
        assert controller.events[0].id == event_id
        assert controller.events[0].title == "Webinar A"
        assert controller.events[0].created_by == "uid-1"

    def test_create_does_not_reload(self, controller, repository, admin):
        controller.submit(make_fields(), admin)

        assert [c for c in repository.calls if c[0] == "list"] == [("list",)]
        assert len(controller.events) == 3

    def test_create_resets_form_and_shows_success(self, controller, admin):
        generation = controller.form_generation

        controller.submit(make_fields(), admin)

        assert controller.form.fields == EventFields()
        assert controller.form_generation == generation + 1
        assert controller.current_banner().level == "success"
        assert controller.current_banner().message == "Event created successfully!"

    def test_created_entry_carries_stored_metadata(self, controller, repository, admin):
        """Test the local entry matches the stored event, server stamps included."""
        event_id = controller.submit(make_fields(), admin)

        local = controller.find(event_id)
        assert local == repository.get(event_id)
        assert local.created_at is not None
        assert local.updated_at == local.created_at

    def test_reread_failure_keeps_written_payload(self, controller, repository, admin):
        """Test a failed re-read still adds the written event to the list."""
        repository.get = MagicMock(side_effect=OSError("read failed"))

        event_id = controller.submit(make_fields("Webinar A"), admin)

        assert event_id is not None
        assert controller.find(event_id).title == "Webinar A"
        assert controller.current_banner().level == "success"

    def test_submit_without_user_fails(self, controller, repository):
        assert controller.submit(make_fields(), None) is None

        assert [c for c in repository.calls if c[0] == "create"] == []
        assert controller.current_banner().level == "error"
        assert controller.current_banner().message == "Not authenticated"

    def test_incomplete_fields_never_written(self, controller, repository, admin):
        """Test the controller refuses incomplete fields even without the form."""
        assert controller.submit(make_fields(title=""), admin) is None

        assert [c for c in repository.calls if c[0] == "create"] == []
        assert len(controller.events) == 2
        assert controller.current_banner().message == "Please fill in all required fields"

    def test_repository_failure_keeps_list(self, controller, admin):
        controller.repository.create = MagicMock(side_effect=OSError("write failed"))

        assert controller.submit(make_fields(), admin) is None

        assert len(controller.events) == 2
        assert controller.current_banner().message == "write failed"


class TestEdit:
    """Test editing the selected event."""

    def test_select_populates_form(self, controller):
        form = controller.select_for_edit("evt-b")

        assert controller.edit_mode is True
        assert form is controller.form
        assert form.fields.title == "Second"

    def test_select_unknown_event(self, controller):
        assert controller.select_for_edit("missing") is None
        assert controller.edit_mode is False
        assert controller.current_banner().message == "Event not found"

    def test_update_replaces_entry_in_place(self, controller, repository, admin):
        controller.select_for_edit("evt-a")

        event_id = controller.submit(make_fields("Renamed"), admin)

        assert event_id == "evt-a"
        assert ("update", "evt-a", "Renamed") in repository.calls
        assert [e.title for e in controller.events] == ["Renamed", "Second"]
        assert controller.events[0].created_by == "uid-0"
        assert controller.edit_mode is False
        assert controller.current_banner().message == "Event updated successfully!"

    def test_updated_entry_carries_new_updated_at(self, controller, repository, admin):
        """Test the local entry picks up the stamp written by the update."""
        controller.select_for_edit("evt-a")

        controller.submit(make_fields("Renamed"), admin)

        local = controller.find("evt-a")
        assert local == repository.get("evt-a")
        assert local.created_at == datetime(2024, 1, 1, 0, 0)
        assert local.updated_at is not None

    def test_update_deleted_event_fails(self, controller, repository, admin):
        controller.select_for_edit("evt-a")
        del repository.events["evt-a"]

        assert controller.submit(make_fields("Renamed"), admin) is None

        assert controller.events[0].title == "First"
        assert controller.edit_mode is True
        assert controller.current_banner().level == "error"

    def test_cancel_edit(self, controller):
        controller.select_for_edit("evt-a")

        controller.cancel_edit()

        assert controller.edit_mode is False
        assert controller.form.fields == EventFields()


class TestDelete:
    """Test deleting events."""

    def test_delete_removes_from_list(self, controller):
        assert controller.delete("evt-a") is True

        assert [e.id for e in controller.events] == ["evt-b"]
        assert controller.current_banner().message == "Event deleted successfully!"

    def test_delete_missing_event_reports_failure(self, controller):
        """Test a failed delete leaves the list untouched."""
        before = list(controller.events)

        assert controller.delete("missing") is False

        assert controller.events == before
        assert controller.current_banner().message == "Error deleting event"

    def test_delete_selected_event_leaves_edit_mode(self, controller):
        controller.select_for_edit("evt-a")

        controller.delete("evt-a")

        assert controller.edit_mode is False


class TestBanner:
    """Test banner expiry."""

    def test_banner_expires(self, controller, clock):
        controller.show_banner("success", "Saved")

        clock.now += BANNER_TIMEOUT_SECONDS - 0.1
        assert controller.current_banner().message == "Saved"

        clock.now += 0.2
        assert controller.current_banner() is None

    def test_new_banner_replaces_old(self, controller, clock):
        controller.show_banner("success", "One")
        clock.now += 2.0
        controller.show_banner("error", "Two")
        clock.now += 2.0

        assert controller.current_banner().message == "Two"


class TestUpload:
    """Test speaker photo uploads."""

    def test_upload_delegates_to_storage(self, repository, clock):
        storage = MagicMock()
        storage.upload.return_value = "/app/static/speakers/ada.png"
        controller = AdminController(repository, storage=storage, clock=clock)

        url = controller.upload_speaker_photo("ada.png", b"data")

        assert url == "/app/static/speakers/ada.png"
        storage.upload.assert_called_once_with("ada.png", b"data")

    def test_upload_without_storage(self, repository, clock):
        with pytest.raises(RuntimeError):
            AdminController(repository, clock=clock).upload_speaker_photo("ada.png", b"data")
