from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Any, List, Mapping, Optional, Sequence

from ..common.datetime_utils import isoformat, now_utc
from ..common.validators import optional_text, require_max_length, require_non_empty
from ..core.constants import MAX_DESCRIPTION_LENGTH, MAX_NAME_LENGTH, MAX_WINDOW_HOURS
from ..core.enums import Role, ScanType, SessionStatus
from ..core.exceptions import AuthorizationError, NotFoundError, SessionNotAccepting, ValidationError
from ..events.repository import EventRepository
from ..organizers.model import Organizer
from ..organizers.service import OrganizerService
from .model import Session
from .repository import SessionRepository
from .window import SessionWindowState, TimeWindow, format_time_until, validate_session_windows, windows_overlap

logger = logging.getLogger(__name__)

_EDITABLE = {
    "name",
    "description",
    "time_in_start",
    "time_in_end",
    "time_out_start",
    "time_out_end",
    "is_active",
}

STATUS_LABELS = {
    SessionStatus.INACTIVE: "Inactive",
    SessionStatus.UPCOMING: "Upcoming",
    SessionStatus.ACTIVE_TIME_IN: "Time-in open",
    SessionStatus.ACTIVE_TIME_OUT: "Time-out open",
    SessionStatus.ENDED: "Ended",
}

STATUS_CSS = {
    SessionStatus.INACTIVE: "bg-secondary",
    SessionStatus.UPCOMING: "bg-info",
    SessionStatus.ACTIVE_TIME_IN: "bg-success",
    SessionStatus.ACTIVE_TIME_OUT: "bg-warning text-dark",
    SessionStatus.ENDED: "bg-dark",
}


@dataclass(frozen=True)
class SessionStatusView:
    """Read-model for list views and detail headers."""

    session: Session
    status: SessionStatus
    expected_scan_type: Optional[ScanType]
    time_until_start: Optional[timedelta]
    time_until_end: Optional[timedelta]
    label: str
    css_class: str
    countdown: Optional[str] = None
    event_name: Optional[str] = None

    def to_dict(self) -> dict:
        s = self.session
        return {
            "session_id": s.session_id,
            "event_id": s.event_id,
            "event_name": self.event_name,
            "name": s.name,
            "description": s.description,
            "time_in_start": isoformat(s.time_in_start),
            "time_in_end": isoformat(s.time_in_end),
            "time_out_start": isoformat(s.time_out_start),
            "time_out_end": isoformat(s.time_out_end),
            "is_active": s.is_active,
            "status": self.status.value,
            "status_label": self.label,
            "css_class": self.css_class,
            "current_scan_type": self.expected_scan_type.value if self.expected_scan_type else None,
            "time_until_start_seconds": int(self.time_until_start.total_seconds()) if self.time_until_start is not None else None,
            "time_until_end_seconds": int(self.time_until_end.total_seconds()) if self.time_until_end is not None else None,
            "countdown": self.countdown,
        }


def describe_session(session: Session, now: datetime, *, event_name: Optional[str] = None) -> SessionStatusView:
    state = SessionWindowState.from_session(session)
    status = state.status(now)
    until_start = state.time_until_start(now)
    until_end = state.time_until_end(now)

    countdown = None
    if until_start is not None:
        countdown = f"Starts {format_time_until(session.time_in_start, now)}"
    elif until_end is not None:
        countdown = f"Closes {format_time_until(now + until_end, now)}"

    return SessionStatusView(
        session=session,
        status=status,
        expected_scan_type=state.expected_scan_type(now),
        time_until_start=until_start,
        time_until_end=until_end,
        label=STATUS_LABELS[status],
        css_class=STATUS_CSS[status],
        countdown=countdown,
        event_name=event_name,
    )


class SessionService:
    def __init__(
        self,
        sessions: SessionRepository,
        events: EventRepository,
        organizers: OrganizerService | None = None,
        *,
        max_window_hours: int = MAX_WINDOW_HOURS,
    ):
        self._sessions = sessions
        self._events = events
        self._organizers = organizers
        self._max_window_hours = int(max_window_hours)

    def _validated(self, session: Session) -> Session:
        name = require_max_length(require_non_empty(session.name, "Session name"), "Session name", MAX_NAME_LENGTH)
        description = require_max_length(optional_text(session.description), "Description", MAX_DESCRIPTION_LENGTH)

        if (session.time_out_start is None) != (session.time_out_end is None):
            raise ValidationError("Time-out start and end must be provided together")

        # TimeWindow raises InvalidWindow for start >= end.
        time_in = TimeWindow(session.time_in_start, session.time_in_end)
        time_out = TimeWindow.optional(session.time_out_start, session.time_out_end)

        errors = validate_session_windows(time_in, time_out, max_hours=self._max_window_hours)
        if errors:
            raise ValidationError("; ".join(errors))

        session = replace(session, name=name, description=description)
        self._ensure_no_overlap(session)
        return session

    def _ensure_no_overlap(self, session: Session) -> None:
        state = SessionWindowState.from_session(session)
        for other in self._sessions.list_for_event(session.event_id):
            if other.session_id == session.session_id:
                continue
            if windows_overlap(state, SessionWindowState.from_session(other)):
                raise ValidationError(f"Session time windows overlap with '{other.name}'")

    def get(self, session_id: str) -> Session:
        session = self._sessions.get_by_id(session_id)
        if not session:
            raise NotFoundError("Session not found")
        return session

    def list_for_event(self, event_id: str) -> Sequence[Session]:
        return self._sessions.list_for_event(event_id)

    def create(
        self,
        *,
        current_role: Role,
        event_id: str,
        name: str,
        time_in_start: datetime,
        time_in_end: datetime,
        time_out_start: Optional[datetime] = None,
        time_out_end: Optional[datetime] = None,
        description: Optional[str] = None,
        is_active: bool = True,
    ) -> Session:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can create sessions")
        if not self._events.get_by_id(event_id):
            raise NotFoundError("Event not found")

        session = self._validated(
            Session(
                session_id="",
                event_id=event_id,
                name=name,
                description=description,
                time_in_start=time_in_start,
                time_in_end=time_in_end,
                time_out_start=time_out_start,
                time_out_end=time_out_end,
                is_active=bool(is_active),
            )
        )
        created = self._sessions.create(session)
        logger.info("Created session %s for event %s", created.session_id, event_id)
        return created

    def update(self, *, current_role: Role, session_id: str, changes: Mapping[str, Any]) -> Session:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can edit sessions")

        unknown = set(changes) - _EDITABLE
        if unknown:
            raise ValidationError(f"Unknown session field(s): {', '.join(sorted(unknown))}")

        session = self._validated(replace(self.get(session_id), **changes))
        if not self._sessions.update(session):
            raise ValidationError("Failed to update session")
        return session

    def delete(self, *, current_role: Role, session_id: str) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can delete sessions")
        if not self._sessions.delete(session_id):
            raise NotFoundError("Session not found")

    def status_view(self, session_id: str, *, now: Optional[datetime] = None) -> SessionStatusView:
        now = now or now_utc()
        session = self.get(session_id)
        event = self._events.get_by_id(session.event_id)
        return describe_session(session, now, event_name=event.name if event else None)

    def list_for_organizer(self, organizer: Organizer, *, now: Optional[datetime] = None) -> List[SessionStatusView]:
        """Sessions of the active events the organizer may scan for."""
        if self._organizers is None:
            raise RuntimeError("SessionService was built without an OrganizerService")
        now = now or now_utc()

        allowed = self._organizers.event_ids_for(organizer)
        events = {e.event_id: e for e in self._events.list_all(active_only=True)}
        if allowed is not None:
            events = {k: v for k, v in events.items() if k in set(allowed)}

        sessions = self._sessions.list_for_events(list(events))
        return [describe_session(s, now, event_name=events[s.event_id].name) for s in sessions]

    def require_accepting(self, session_id: str, *, now: Optional[datetime] = None) -> ScanType:
        """Return the scan type the session takes right now, or raise."""
        now = now or now_utc()
        state = SessionWindowState.from_session(self.get(session_id))
        status = state.status(now)
        scan_type = state.expected_scan_type(now)
        if scan_type is None:
            raise SessionNotAccepting(f"Session is not accepting scans ({STATUS_LABELS[status].lower()})", status=status)
        return scan_type
