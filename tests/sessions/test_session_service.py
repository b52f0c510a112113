from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

import pytest

from event_attendance.core.enums import Role, ScanType, SessionStatus
from event_attendance.core.exceptions import (
    AuthorizationError,
    InvalidWindow,
    NotFoundError,
    SessionNotAccepting,
    ValidationError,
)
from event_attendance.events.model import Event
from event_attendance.organizers.model import Organizer
from event_attendance.sessions.model import Session
from event_attendance.sessions.service import SessionService

DAY = datetime(2025, 3, 10)


def at(hour: int, minute: int = 0) -> datetime:
    return DAY.replace(hour=hour, minute=minute)


class InMemoryEvents:
    def __init__(self, *events: Event):
        self.events = {e.event_id: e for e in events}

    def get_by_id(self, event_id: str) -> Optional[Event]:
        return self.events.get(event_id)

    def list_all(self, *, active_only: bool = False):
        return [e for e in self.events.values() if e.is_active or not active_only]


class InMemorySessions:
    def __init__(self):
        self.sessions: dict[str, Session] = {}
        self._id = 0

    def get_by_id(self, session_id: str) -> Optional[Session]:
        return self.sessions.get(session_id)

    def list_for_event(self, event_id: str):
        return [s for s in self.sessions.values() if s.event_id == event_id]

    def list_for_events(self, event_ids):
        return [s for s in self.sessions.values() if s.event_id in event_ids]

    def create(self, session: Session) -> Session:
        self._id += 1
        created = replace(session, session_id=f"s{self._id}")
        self.sessions[created.session_id] = created
        return created

    def update(self, session: Session) -> bool:
        self.sessions[session.session_id] = session
        return True

    def delete(self, session_id: str) -> bool:
        return self.sessions.pop(session_id, None) is not None


class StubOrganizers:
    def __init__(self, event_ids_by_organizer: dict[str, list[str]]):
        self._event_ids = event_ids_by_organizer

    def event_ids_for(self, organizer: Organizer):
        if organizer.is_admin:
            return None
        return self._event_ids.get(organizer.organizer_id, [])


def make_event(event_id: str, *, is_active: bool = True) -> Event:
    return Event(event_id=event_id, name=f"Event {event_id}", start_date=DAY, end_date=DAY, created_by="adm", is_active=is_active)


def build():
    sessions = InMemorySessions()
    events = InMemoryEvents(make_event("e1"), make_event("e2"), make_event("off", is_active=False))
    svc = SessionService(sessions, events, StubOrganizers({"org1": ["e1", "off"]}))
    return svc, sessions


def create(svc: SessionService, **overrides) -> Session:
    kwargs = dict(
        current_role=Role.ADMIN,
        event_id="e1",
        name="Morning",
        time_in_start=at(8),
        time_in_end=at(9),
        time_out_start=at(16),
        time_out_end=at(17),
    )
    kwargs.update(overrides)
    return svc.create(**kwargs)


def test_create_session():
    svc, sessions = build()

    session = create(svc)

    assert session.session_id == "s1"
    assert sessions.sessions["s1"].time_out_end == at(17)


def test_create_requires_admin_and_event():
    svc, _ = build()

    with pytest.raises(AuthorizationError):
        create(svc, current_role=Role.ORGANIZER)
    with pytest.raises(NotFoundError):
        create(svc, event_id="missing")


def test_invalid_window_on_create():
    svc, _ = build()

    with pytest.raises(InvalidWindow):
        create(svc, time_in_start=at(9), time_in_end=at(8))
    with pytest.raises(InvalidWindow):
        create(svc, time_out_start=at(17), time_out_end=at(17))


@pytest.mark.parametrize(
    "overrides",
    [
        {"time_in_start": at(0), "time_in_end": at(9)},
        {"time_out_start": at(8, 30), "time_out_end": at(10)},
        {"time_out_start": at(16), "time_out_end": None},
        {"name": "  "},
    ],
)
def test_create_validation_errors(overrides):
    svc, _ = build()

    with pytest.raises(ValidationError):
        create(svc, **overrides)


def test_overlap_within_event_rejected():
    svc, _ = build()
    create(svc)

    with pytest.raises(ValidationError, match="overlap"):
        create(svc, name="Clash", time_in_start=at(8, 30), time_in_end=at(9, 30), time_out_start=None, time_out_end=None)

    # Same hours in another event are fine.
    create(svc, event_id="e2")


def test_update_keeps_own_windows_out_of_overlap_check():
    svc, _ = build()
    session = create(svc)

    updated = svc.update(current_role=Role.ADMIN, session_id=session.session_id, changes={"time_in_end": at(9, 30)})

    assert updated.time_in_end == at(9, 30)
    with pytest.raises(ValidationError):
        svc.update(current_role=Role.ADMIN, session_id=session.session_id, changes={"event_id": "e2"})


def test_status_view():
    svc, _ = build()
    session = create(svc)

    view = svc.status_view(session.session_id, now=at(7, 30))
    data = view.to_dict()

    assert view.status == SessionStatus.UPCOMING
    assert data["status"] == "upcoming"
    assert data["event_name"] == "Event e1"
    assert data["time_until_start_seconds"] == 1800
    assert data["countdown"] == "Starts in 30m 0s"
    assert data["current_scan_type"] is None

    data = svc.status_view(session.session_id, now=at(16, 50)).to_dict()
    assert data["status"] == "active_time_out"
    assert data["current_scan_type"] == "time_out"
    assert data["time_until_end_seconds"] == 600


def test_list_for_organizer_filters_events():
    svc, _ = build()
    create(svc)
    create(svc, event_id="e2")

    organizer = Organizer(organizer_id="org1", email="o@example.com", full_name="Org")
    admin = Organizer(organizer_id="adm", email="a@example.com", full_name="Admin", role=Role.ADMIN)

    assert [v.session.event_id for v in svc.list_for_organizer(organizer, now=at(8))] == ["e1"]
    assert sorted(v.session.event_id for v in svc.list_for_organizer(admin, now=at(8))) == ["e1", "e2"]


def test_require_accepting():
    svc, _ = build()
    session = create(svc)

    assert svc.require_accepting(session.session_id, now=at(8, 30)) == ScanType.TIME_IN
    assert svc.require_accepting(session.session_id, now=at(16, 30)) == ScanType.TIME_OUT

    with pytest.raises(SessionNotAccepting) as exc:
        svc.require_accepting(session.session_id, now=at(12))
    assert exc.value.status == SessionStatus.INACTIVE


def test_delete():
    svc, sessions = build()
    session = create(svc)

    svc.delete(current_role=Role.ADMIN, session_id=session.session_id)

    assert sessions.sessions == {}
    with pytest.raises(NotFoundError):
        svc.delete(current_role=Role.ADMIN, session_id=session.session_id)
