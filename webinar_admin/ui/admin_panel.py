"""Admin panel: event list, create/edit form and delete confirmation."""
import logging
import time
import traceback
from dataclasses import dataclass
from typing import Callable, List, Optional

import streamlit as st

from webinar_admin.models.event import Event
from webinar_admin.models.form import EventFields
from webinar_admin.models.user import User
from webinar_admin.services.auth_service import logout
from webinar_admin.services.backend import get_event_repository, get_object_storage
from webinar_admin.services.event_repository import EventRepository
from webinar_admin.services.object_storage import LocalObjectStorage
from webinar_admin.ui.auth_guard import auth_guard
from webinar_admin.ui.event_form import REQUIRED_FIELDS_ALERT, EventFormState, fields_to_event, render_event_form
from webinar_admin.ui.html_utils import escape, html_block
from webinar_admin.utils.exceptions import EventNotFoundError, ValidationError
from webinar_admin.utils.timestamps import format_event_date
from webinar_admin.utils.validation import validate_event_fields

logger = logging.getLogger(__name__)

BANNER_TIMEOUT_SECONDS = 3.0
CONTROLLER_KEY = "admin_controller"
GENERIC_ERROR = "Error processing request"


@dataclass
class Banner:
    level: str
    message: str
    expires_at: float


class AdminController:
    """
    Holds the admin's event list and routes create/edit/delete actions.

    Writes update the in-memory list in place instead of reloading it.
    """

    def __init__(
        self,
        repository: EventRepository,
        storage: Optional[LocalObjectStorage] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.repository = repository
        self.storage = storage
        self.clock = clock
        self.events: List[Event] = []
        self.loaded = False
        self.selected_event_id: Optional[str] = None
        self.form = EventFormState.empty()
        self.form_generation = 0
        self._banner: Optional[Banner] = None

    # Banner

    def show_banner(self, level: str, message: str) -> None:
        self._banner = Banner(level, message, self.clock() + BANNER_TIMEOUT_SECONDS)

    def current_banner(self) -> Optional[Banner]:
        if self._banner is not None and self.clock() >= self._banner.expires_at:
            self._banner = None
        return self._banner

    # Loading and selection

    def load(self) -> None:
        """Fetch every event once; a failure keeps the current list."""
        try:
            self.events = self.repository.list()
        except Exception:
            logger.exception("Error fetching events")
            self.show_banner("error", "Error loading events")
        else:
            self.loaded = True

    def find(self, event_id: str) -> Optional[Event]:
        for event in self.events:
            if event.id == event_id:
                return event
        return None

    def _reset_form(self, form: EventFormState) -> None:
        self.form = form
        self.form_generation += 1

    def select_for_edit(self, event_id: str) -> Optional[EventFormState]:
        event = self.find(event_id)
        if event is None:
            self.show_banner("error", "Event not found")
            return None
        self.selected_event_id = event_id
        self._reset_form(EventFormState.from_event(event))
        return self.form

    def cancel_edit(self) -> None:
        self.selected_event_id = None
        self._reset_form(EventFormState.empty())

    @property
    def edit_mode(self) -> bool:
        return self.selected_event_id is not None

    # Writes

    def _stored_or(self, event_id: str, payload: Event) -> Event:
        """Re-read a written event so server metadata is current; fall back to ``payload``."""
        try:
            stored = self.repository.get(event_id)
        except Exception:
            logger.exception("Error re-reading event %s", event_id)
            stored = None
        return stored if stored is not None else payload

    def submit(self, fields: EventFields, user: Optional[User]) -> Optional[str]:
        """
        Update the selected event, or create a new one when none is selected.

        Returns:
            The id of the written event, or None on failure (banner set)
        """
        try:
            if user is None:
                raise PermissionError("Not authenticated")
            if not validate_event_fields(fields):
                raise ValidationError(REQUIRED_FIELDS_ALERT)

            if self.selected_event_id is not None:
                event_id = self.selected_event_id
                payload = fields_to_event(fields, event_id)
                self.repository.update(event_id, payload)
                message = "Event updated successfully!"
            else:
                payload = fields_to_event(fields)
                event_id = self.repository.create(payload, created_by=user.uid)
                payload.id = event_id
                payload.created_by = user.uid
                message = "Event created successfully!"
        except Exception as error:
            logger.exception("Operation error")
            self.show_banner("error", str(error) or GENERIC_ERROR)
            return None

        written = self._stored_or(event_id, payload)
        if self.find(event_id) is None:
            self.events = self.events + [written]
        else:
            self.events = [written if e.id == event_id else e for e in self.events]

        self.selected_event_id = None
        self._reset_form(EventFormState.empty())
        self.show_banner("success", message)
        return event_id

    def delete(self, event_id: str) -> bool:
        try:
            self.repository.delete(event_id)
        except EventNotFoundError:
            logger.warning("Delete requested for missing event %s", event_id)
            self.show_banner("error", "Error deleting event")
            return False
        except Exception:
            logger.exception("Delete error")
            self.show_banner("error", "Error deleting event")
            return False

        self.events = [e for e in self.events if e.id != event_id]
        if self.selected_event_id == event_id:
            self.cancel_edit()
        self.show_banner("success", "Event deleted successfully!")
        return True

    def upload_speaker_photo(self, filename: str, data: bytes) -> str:
        if self.storage is None:
            raise RuntimeError("Object storage is not configured")
        return self.storage.upload(filename, data)


def _show_admin_exception(error: Exception, context: str) -> None:
    """Display error details in UI and log full traceback."""
    logger.exception("Admin panel error during %s", context)

    st.error(f"❌ {context} failed: {error}")
    with st.expander("🔍 Error details"):
        st.code("".join(traceback.format_exception(type(error), error, error.__traceback__)))


def _get_controller() -> AdminController:
    controller = st.session_state.get(CONTROLLER_KEY)
    if controller is None:
        controller = AdminController(get_event_repository(), get_object_storage())
        st.session_state[CONTROLLER_KEY] = controller
    if not controller.loaded:
        controller.load()
    return controller


def _render_banner(controller: AdminController) -> None:
    banner = controller.current_banner()
    if banner is None:
        return
    if banner.level == "success":
        st.success(banner.message)
    else:
        st.error(banner.message)


def _render_event_list(controller: AdminController) -> None:
    st.markdown("### Events")

    if not controller.events:
        st.info("📝 No events yet")
        return

    for event in controller.events:
        title_col, action_col = st.columns([4, 1], gap="small")
        with title_col:
            st.markdown(
                html_block(
                    f"""
                    <div class="admin-event-row">
                        <strong>{escape(event.title)}</strong>
                        <div class="admin-event-meta">{escape(format_event_date(event.date))}</div>
                    </div>
                    """
                ),
                unsafe_allow_html=True,
            )
        with action_col:
            edit_col, delete_col = st.columns(2, gap="small")
            with edit_col:
                if st.button("✏️", key=f"edit_{event.id}", help="Edit"):
                    controller.select_for_edit(event.id)
                    st.session_state.pop("admin_delete_event_id", None)
                    st.rerun()
            with delete_col:
                if st.button("🗑️", key=f"delete_{event.id}", help="Delete"):
                    st.session_state.admin_delete_event_id = event.id
                    st.rerun()


def _render_delete_confirmation(controller: AdminController) -> None:
    event_id = st.session_state.get("admin_delete_event_id")
    if not event_id:
        return

    event = controller.find(event_id)
    with st.container(border=True):
        st.error("⚠️ Are you sure you want to delete this event? This cannot be undone.")
        if event is not None:
            st.markdown(f"**{event.title}**")

        confirm_col, cancel_col = st.columns(2, gap="small")
        with confirm_col:
            if st.button("✅ Delete", type="primary", use_container_width=True, key=f"confirm_delete_{event_id}"):
                controller.delete(event_id)
                st.session_state.pop("admin_delete_event_id", None)
                st.rerun()
        with cancel_col:
            if st.button("❌ Cancel", use_container_width=True, key=f"cancel_delete_{event_id}"):
                st.session_state.pop("admin_delete_event_id", None)
                st.rerun()


def _render_admin_content(user: User) -> None:
    controller = _get_controller()

    header_col, home_col, logout_col = st.columns([3, 1, 1], gap="small")
    with header_col:
        st.markdown("## 📊 Event Administration")
    with home_col:
        if st.button("🏠 Home", use_container_width=True, key="admin_home"):
            st.session_state.current_page = "home"
            st.rerun()
    with logout_col:
        if st.button("🚪 Logout", use_container_width=True, key="admin_logout"):
            logout()
            st.session_state.pop(CONTROLLER_KEY, None)
            st.session_state.current_page = "login"
            st.rerun()

    _render_banner(controller)

    list_col, form_col = st.columns([1, 2], gap="large")
    with list_col:
        _render_event_list(controller)
        _render_delete_confirmation(controller)

    with form_col:
        st.markdown("### Edit Event" if controller.edit_mode else "### Create New Event")

        def on_submit(fields: EventFields) -> None:
            if controller.submit(fields, user) is not None:
                st.rerun()

        def on_cancel() -> None:
            controller.cancel_edit()
            st.rerun()

        render_event_form(
            controller.form,
            on_submit=on_submit,
            edit_mode=controller.edit_mode,
            on_cancel=on_cancel,
            upload_photo=controller.upload_speaker_photo,
            prefix=f"event_form_{controller.form_generation}",
        )


def render_admin_panel() -> None:
    """Render the admin page behind the admin-only guard."""
    try:
        auth_guard(_render_admin_content, admin_only=True)
    except Exception as error:
        _show_admin_exception(error, "Loading admin panel")
