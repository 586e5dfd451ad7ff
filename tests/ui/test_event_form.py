"""Tests for the event form state."""
import pytest
from datetime import datetime
from unittest.mock import MagicMock
from webinar_admin.models.event import Event, Session, Sessions, SocialLinks, Speaker
from webinar_admin.ui.event_form import (
    EMPTY,
    POPULATED,
    REQUIRED_FIELDS_ALERT,
    SUBMITTED,
    VALIDATED,
    EventFormState,
    event_to_fields,
    fields_to_event,
)


def fill_required(state):
    state.set_field("title", "Webinar A")
    state.set_field("date", "2024-06-01T10:00")
    state.update_session("talk", title="T", description="D", time="2024-06-01T10:00")
    state.update_session("interview", title="I", description="D2", time="2024-06-01T11:00")
    return state


@pytest.fixture
def stored_event():
    return Event(
        id="evt-1",
        title="Webinar A",
        date=datetime(2024, 6, 1, 10, 0),
        sessions=Sessions(
            talk=Session("T", "D", datetime(2024, 6, 1, 10, 0)),
            interview=Session("I", "D2", datetime(2024, 6, 1, 11, 0)),
        ),
        speakers=[
            Speaker(
                name="Ada",
                role="Chair",
                bio="Bio",
                photo_url="https://example.org/ada.jpg",
                session_time=datetime(2024, 6, 1, 10, 0),
                social_links=SocialLinks(linkedin="https://linkedin.com/in/ada"),
            )
        ],
    )


class TestStates:
    """Test the empty -> populated -> validated -> submitted transitions."""

    def test_starts_empty(self):
        state = EventFormState.empty()
        assert state.status == EMPTY
        assert state.fields.speakers == []

    def test_from_event_is_populated(self, stored_event):
        state = EventFormState.from_event(stored_event)

        assert state.status == POPULATED
        assert state.fields.title == "Webinar A"
        assert state.fields.date == "2024-06-01T10:00"
        assert state.fields.interview.time == "2024-06-01T11:00"
        assert state.fields.speakers[0].session_time == "2024-06-01T10:00"
        assert state.fields.speakers[0].social_links == {"linkedin": "https://linkedin.com/in/ada"}

    def test_valid_form_becomes_validated_then_submitted(self):
        state = fill_required(EventFormState.empty())
        on_submit = MagicMock()

        assert state.validate() is True
        assert state.status == VALIDATED

        assert state.submit(on_submit) is True
        assert state.status == SUBMITTED
        on_submit.assert_called_once_with(state.fields)

    def test_editing_after_validation_returns_to_populated(self):
        state = fill_required(EventFormState.empty())
        state.validate()

        state.set_field("title", "Changed")

        assert state.status == POPULATED


class TestSubmitBlocking:
    """Submitting with a required field empty never calls the callback."""

    @pytest.mark.parametrize("breaker", [
        lambda s: s.set_field("title", ""),
        lambda s: s.set_field("date", ""),
        lambda s: s.update_session("talk", title=""),
        lambda s: s.update_session("talk", time=""),
        lambda s: s.update_session("talk", description=" "),
        lambda s: s.update_session("interview", title=""),
        lambda s: s.update_session("interview", time=""),
        lambda s: s.update_session("interview", description=""),
        lambda s: s.update_speaker(s.add_speaker(), session_time="2024-06-01T10:00"),
        lambda s: s.update_speaker(s.add_speaker(), name="Ada"),
    ])
    def test_missing_field_blocks_submit(self, breaker):
        state = fill_required(EventFormState.empty())
        breaker(state)
        on_submit = MagicMock()

        assert state.submit(on_submit) is False

        on_submit.assert_not_called()
        assert state.alert == REQUIRED_FIELDS_ALERT
        assert state.status != SUBMITTED

    def test_alert_cleared_after_successful_validation(self):
        state = EventFormState.empty()
        state.validate()
        assert state.alert == REQUIRED_FIELDS_ALERT

        fill_required(state).validate()

        assert state.alert is None


class TestSpeakers:
    """Test keyed speaker mutations."""

    def test_add_speaker_returns_unique_keys(self):
        state = EventFormState.empty()
        first = state.add_speaker()
        second = state.add_speaker()

        assert first != second
        assert [s.key for s in state.fields.speakers] == [first, second]

    def test_remove_keeps_other_entries_intact(self):
        """Test removing one entry never shifts data between the others."""
        state = EventFormState.empty()
        keys = [state.add_speaker() for _ in range(3)]
        for key, name in zip(keys, ["Ada", "Grace", "Linus"]):
            state.update_speaker(key, name=name)

        assert state.remove_speaker(keys[0]) is True

        assert [s.key for s in state.fields.speakers] == keys[1:]
        assert state.speaker(keys[1]).name == "Grace"
        assert state.speaker(keys[2]).name == "Linus"

    def test_remove_unknown_key(self):
        state = EventFormState.empty()
        state.add_speaker()

        assert state.remove_speaker("missing") is False
        assert len(state.fields.speakers) == 1

    def test_update_merges_social_links(self):
        state = EventFormState.empty()
        key = state.add_speaker()

        state.update_speaker(key, social_links={"linkedin": "https://linkedin.com/in/ada"})
        state.update_speaker(key, social_links={"website": "https://ada.dev"})

        assert state.speaker(key).social_links == {
            "linkedin": "https://linkedin.com/in/ada",
            "website": "https://ada.dev",
        }

    def test_update_unknown_field_raises(self):
        state = EventFormState.empty()
        key = state.add_speaker()

        with pytest.raises(KeyError):
            state.update_speaker(key, favourite_colour="blue")

    def test_key_cannot_be_changed(self):
        state = EventFormState.empty()
        key = state.add_speaker()

        with pytest.raises(KeyError):
            state.update_speaker(key, key="other")

    def test_unknown_speaker_key_raises(self):
        with pytest.raises(KeyError):
            EventFormState.empty().speaker("missing")


class TestFieldGuards:
    """Test unknown field names are rejected."""

    def test_unknown_event_field(self):
        with pytest.raises(KeyError):
            EventFormState.empty().set_field("location", "Online")

    def test_unknown_session_slot(self):
        with pytest.raises(KeyError):
            EventFormState.empty().update_session("panel", title="P")


class TestConversion:
    """Test form fields <-> Event conversion."""

    def test_to_event_parses_dates_and_strips_text(self):
        state = fill_required(EventFormState.empty())
        state.set_field("title", "  Webinar A  ")
        key = state.add_speaker()
        state.update_speaker(key, name=" Ada ", session_time="2024-06-01T10:00", photo_url="")

        event = state.to_event("evt-1")

        assert event.id == "evt-1"
        assert event.title == "Webinar A"
        assert event.date == datetime(2024, 6, 1, 10, 0)
        assert event.sessions.interview.time == datetime(2024, 6, 1, 11, 0)
        assert event.speakers[0].name == "Ada"
        assert event.speakers[0].photo_url is None
        assert event.speakers[0].social_links == SocialLinks()

    def test_to_event_rejects_bad_dates(self):
        state = fill_required(EventFormState.empty())
        state.set_field("date", "yesterday")

        with pytest.raises(ValueError, match="Invalid date"):
            state.to_event()

    def test_event_round_trips_through_fields(self, stored_event):
        restored = fields_to_event(event_to_fields(stored_event), stored_event.id)

        assert restored == stored_event
