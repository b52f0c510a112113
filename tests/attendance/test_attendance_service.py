from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import pytest

from event_attendance.attendance.model import AttendanceRecord
from event_attendance.attendance.service import AttendanceService
from event_attendance.core.constants import DEFAULT_ATTENDANCE_LIMIT
from event_attendance.core.enums import OutcomeKind, Role, ScanType, SessionStatus
from event_attendance.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    PersistenceConflict,
    ValidationError,
)
from event_attendance.events.model import Event
from event_attendance.organizers.model import Organizer
from event_attendance.sessions.model import Session
from event_attendance.students.model import Student

DAY = datetime(2025, 3, 10)


def at(hour: int, minute: int = 0) -> datetime:
    return DAY.replace(hour=hour, minute=minute)


@dataclass
class InMemoryEvents:
    events: dict[str, Event]

    def get_by_id(self, event_id: str) -> Optional[Event]:
        return self.events.get(event_id)


@dataclass
class InMemorySessions:
    sessions: dict[str, Session]

    def get_by_id(self, session_id: str) -> Optional[Session]:
        return self.sessions.get(session_id)


@dataclass
class InMemoryStudents:
    students: dict[str, Student]

    def get_by_id(self, student_id: str) -> Optional[Student]:
        return self.students.get(student_id)

    def get_by_id_number(self, student_id_number: str) -> Optional[Student]:
        for s in self.students.values():
            if s.student_id_number == student_id_number:
                return s
        return None


@dataclass
class InMemoryOrganizers:
    organizers: dict[str, Organizer]
    assignments: set[tuple[str, str]] = field(default_factory=set)

    def get_by_id(self, organizer_id: str) -> Optional[Organizer]:
        return self.organizers.get(organizer_id)

    def is_assigned(self, *, organizer_id: str, event_id: str) -> bool:
        return (organizer_id, event_id) in self.assignments


class InMemoryAttendance:
    def __init__(self):
        self.records: dict[tuple[str, str, ScanType], AttendanceRecord] = {}
        self._id = 0

    def find_existing_record(self, student_id, session_id, scan_type):
        return self.records.get((student_id, session_id, scan_type))

    def create_record(self, *, student_id, event_id, session_id, scan_type, timestamp, scanned_by=None, ip_address=None):
        key = (student_id, session_id, scan_type)
        if key in self.records:
            raise PersistenceConflict("duplicate attendance")
        self._id += 1
        rec = AttendanceRecord(
            attendance_id=f"a{self._id}",
            student_id=student_id,
            event_id=event_id,
            session_id=session_id,
            scan_type=scan_type,
            time_in=timestamp if scan_type == ScanType.TIME_IN else None,
            time_out=timestamp if scan_type == ScanType.TIME_OUT else None,
            scanned_by=scanned_by,
        )
        self.records[key] = rec
        return rec

    def list_for_session(self, session_id, limit):
        return [r for r in self.records.values() if r.session_id == session_id][:limit]

    def count_for_session(self, session_id):
        scans = [r.scan_type for r in self.records.values() if r.session_id == session_id]
        return scans.count(ScanType.TIME_IN), scans.count(ScanType.TIME_OUT)


class RacingAttendance(InMemoryAttendance):
    """Another scanner writes the same record between lookup and insert."""

    def __init__(self, winner: Optional[AttendanceRecord]):
        super().__init__()
        self._winner = winner
        self._lookups = 0

    def find_existing_record(self, student_id, session_id, scan_type):
        self._lookups += 1
        return None if self._lookups == 1 else self._winner

    def create_record(self, **kwargs):
        raise PersistenceConflict("duplicate attendance")


def build(attendance=None, *, event_active: bool = True, assigned: bool = True):
    event = Event(
        event_id="e1",
        name="Orientation",
        start_date=DAY,
        end_date=DAY,
        created_by="admin",
        is_active=event_active,
    )
    session = Session(
        session_id="s1",
        event_id="e1",
        name="Morning",
        time_in_start=at(8),
        time_in_end=at(9),
        time_out_start=at(16),
        time_out_end=at(17),
    )
    student = Student(
        student_id="st1",
        student_id_number="2024-0001",
        first_name="Ada",
        last_name="Lovelace",
        email="ada@example.com",
        year=2,
    )
    organizers = InMemoryOrganizers(
        {
            "org1": Organizer(organizer_id="org1", email="org@example.com", full_name="Org"),
            "adm": Organizer(organizer_id="adm", email="adm@example.com", full_name="Admin", role=Role.ADMIN),
        },
        {("org1", "e1")} if assigned else set(),
    )
    attendance = attendance or InMemoryAttendance()
    svc = AttendanceService(
        attendance,
        InMemorySessions({"s1": session}),
        InMemoryEvents({"e1": event}),
        InMemoryStudents({"st1": student}),
        organizers,
    )
    return svc, attendance


def test_first_scan_accepted_and_persisted():
    svc, attendance = build()

    result = svc.record_scan(organizer_id="org1", session_id="s1", student_ref="st1", scan_type=ScanType.TIME_IN, now=at(8, 15))

    assert result.outcome.kind == OutcomeKind.ACCEPTED
    assert result.outcome.attendance_id == "a1"
    assert result.status == SessionStatus.ACTIVE_TIME_IN
    assert attendance.records[("st1", "s1", ScanType.TIME_IN)].time_in == at(8, 15)


def test_second_scan_is_duplicate_and_creates_nothing():
    svc, attendance = build()
    svc.record_scan(organizer_id="org1", session_id="s1", student_ref="st1", scan_type=ScanType.TIME_IN, now=at(8, 15))

    result = svc.record_scan(organizer_id="org1", session_id="s1", student_ref="st1", scan_type=ScanType.TIME_IN, now=at(8, 20))

    assert result.outcome.is_duplicate
    assert result.outcome.existing_record.attendance_id == "a1"
    assert result.outcome.existing_record.student_name == "Ada Lovelace"
    assert len(attendance.records) == 1


def test_scan_outside_window_is_rejected_without_write():
    svc, attendance = build()

    result = svc.record_scan(organizer_id="org1", session_id="s1", student_ref="st1", scan_type=ScanType.TIME_IN, now=at(16, 30))

    assert result.outcome.is_rejected
    assert result.status == SessionStatus.ACTIVE_TIME_OUT
    assert attendance.records == {}


def test_scan_type_defaults_to_open_window():
    svc, attendance = build()

    result = svc.record_scan(organizer_id="org1", session_id="s1", student_ref="2024-0001", now=at(16, 30))

    assert result.outcome.is_accepted
    assert result.scan_type == ScanType.TIME_OUT
    assert ("st1", "s1", ScanType.TIME_OUT) in attendance.records


def test_scan_type_omitted_during_gap_is_rejected():
    svc, _ = build()

    result = svc.record_scan(organizer_id="org1", session_id="s1", student_ref="st1", now=at(12))

    assert result.outcome.is_rejected
    assert result.status == SessionStatus.INACTIVE


def test_conflict_on_insert_becomes_duplicate():
    winner = AttendanceRecord(
        attendance_id="other",
        student_id="st1",
        event_id="e1",
        session_id="s1",
        scan_type=ScanType.TIME_IN,
        time_in=at(8, 1),
        time_out=None,
    )
    svc, _ = build(RacingAttendance(winner))

    result = svc.record_scan(organizer_id="org1", session_id="s1", student_ref="st1", scan_type=ScanType.TIME_IN, now=at(8, 1))

    assert result.outcome.is_duplicate
    assert result.outcome.existing_record.attendance_id == "other"
    assert result.outcome.existing_record.student_name == "Ada Lovelace"


def test_conflict_without_prior_record_propagates():
    svc, _ = build(RacingAttendance(None))

    with pytest.raises(PersistenceConflict):
        svc.record_scan(organizer_id="org1", session_id="s1", student_ref="st1", scan_type=ScanType.TIME_IN, now=at(8, 1))


def test_unassigned_organizer_denied_but_admin_allowed():
    svc, _ = build(assigned=False)

    with pytest.raises(AuthorizationError):
        svc.record_scan(organizer_id="org1", session_id="s1", student_ref="st1", now=at(8, 30))

    result = svc.record_scan(organizer_id="adm", session_id="s1", student_ref="st1", now=at(8, 30))
    assert result.outcome.is_accepted


def test_inactive_event_and_unknown_references():
    svc, _ = build(event_active=False)
    with pytest.raises(ValidationError):
        svc.record_scan(organizer_id="org1", session_id="s1", student_ref="st1", now=at(8, 30))

    svc, _ = build()
    with pytest.raises(NotFoundError):
        svc.record_scan(organizer_id="org1", session_id="missing", student_ref="st1", now=at(8, 30))
    with pytest.raises(NotFoundError):
        svc.record_scan(organizer_id="org1", session_id="s1", student_ref="nobody", now=at(8, 30))


def test_scan_payload_parses_student_qr():
    svc, attendance = build()

    result = svc.scan_payload(organizer_id="org1", session_id="s1", raw_payload="DTP:student:st1", now=at(8, 45))

    assert result.outcome.is_accepted
    assert result.student.student_id == "st1"

    result = svc.scan_payload(
        organizer_id="org1",
        session_id="s1",
        raw_payload='{"studentIdNumber": "2024-0001", "firstName": "Ada"}',
        now=at(16, 5),
    )
    assert result.outcome.is_accepted
    assert len(attendance.records) == 2


def test_session_statistics():
    svc, _ = build()
    svc.record_scan(organizer_id="org1", session_id="s1", student_ref="st1", now=at(8, 30))
    svc.record_scan(organizer_id="org1", session_id="s1", student_ref="st1", now=at(16, 30))

    stats = svc.session_statistics("s1")

    assert stats.total_attendance == 2
    assert stats.time_in_count == 1
    assert stats.time_out_count == 1
    assert stats.attendance_rate == 50.0


def test_statistics_empty_session():
    svc, _ = build()

    stats = svc.session_statistics("s1")

    assert stats.total_attendance == 0
    assert stats.attendance_rate == 0.0


def test_statistics_count_every_record_beyond_listing_limit():
    svc, attendance = build()
    extra = DEFAULT_ATTENDANCE_LIMIT + 100
    for i in range(extra):
        for scan_type, stamp in ((ScanType.TIME_IN, at(8, 30)), (ScanType.TIME_OUT, at(16, 30))):
            attendance.create_record(
                student_id=f"st{i}",
                event_id="e1",
                session_id="s1",
                scan_type=scan_type,
                timestamp=stamp,
            )

    stats = svc.session_statistics("s1")

    assert len(svc.list_session_attendance("s1")) == DEFAULT_ATTENDANCE_LIMIT
    assert stats.total_attendance == 2 * extra
    assert stats.time_in_count == extra
    assert stats.time_out_count == extra
    assert stats.attendance_rate == 50.0


def test_statistics_for_unknown_session():
    svc, _ = build()

    with pytest.raises(NotFoundError):
        svc.session_statistics("missing")
