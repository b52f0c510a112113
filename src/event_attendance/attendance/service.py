from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import isoformat, now_utc
from ..core.constants import DEFAULT_ATTENDANCE_LIMIT
from ..core.enums import ScanType, SessionStatus
from ..core.exceptions import AuthorizationError, NotFoundError, PersistenceConflict, ValidationError
from ..events.repository import EventRepository
from ..organizers.repository import OrganizerRepository
from ..scanning.payload import parse_scan_payload
from ..sessions.model import Session
from ..sessions.repository import SessionRepository
from ..sessions.window import SessionWindowState
from ..students.model import Student
from ..students.repository import StudentRepository
from .model import AttendanceAction, AttendanceRecord, ScanOutcome, SessionStatistics
from .recorder import AttendanceRecorder
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def record_to_dict(record: AttendanceRecord) -> dict:
    return {
        "attendance_id": record.attendance_id,
        "student_id": record.student_id,
        "student_name": record.student_name,
        "event_id": record.event_id,
        "session_id": record.session_id,
        "scan_type": record.scan_type.value,
        "time_in": isoformat(record.time_in),
        "time_out": isoformat(record.time_out),
        "scanned_by": record.scanned_by,
    }


@dataclass(frozen=True)
class ScanResult:
    outcome: ScanOutcome
    scan_type: ScanType
    status: SessionStatus
    session: Session
    student: Student
    scanned_at: datetime

    def to_dict(self) -> dict:
        o = self.outcome
        return {
            "outcome": o.kind.value,
            "attendance_id": o.attendance_id,
            "reason": o.reason,
            "existing_record": record_to_dict(o.existing_record) if o.existing_record else None,
            "scan_type": self.scan_type.value,
            "session_status": self.status.value,
            "session_id": self.session.session_id,
            "scanned_at": isoformat(self.scanned_at),
            "student": {
                "student_id": self.student.student_id,
                "student_id_number": self.student.student_id_number,
                "name": self.student.display_name,
                "program": self.student.program,
                "year": self.student.year,
            },
        }


class AttendanceService:
    """Use case: record organizer scans against session time windows."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        sessions: SessionRepository,
        events: EventRepository,
        students: StudentRepository,
        organizers: OrganizerRepository,
        *,
        recorder: AttendanceRecorder | None = None,
    ):
        self._attendance = attendance
        self._sessions = sessions
        self._events = events
        self._students = students
        self._organizers = organizers
        self._recorder = recorder or AttendanceRecorder()

    def _resolve_student(self, student_ref: str) -> Student:
        ref = (student_ref or "").strip()
        if not ref:
            raise ValidationError("Student ID is required")

        student = self._students.get_by_id(ref) or self._students.get_by_id_number(ref)
        if not student:
            raise NotFoundError(f"Student {ref} not found")
        return student

    def _require_access(self, organizer_id: str, event_id: str) -> None:
        organizer = self._organizers.get_by_id(organizer_id)
        if not organizer or not organizer.is_active:
            raise AuthorizationError("Organizer account is not active")
        if organizer.is_admin:
            return
        if not self._organizers.is_assigned(organizer_id=organizer_id, event_id=event_id):
            raise AuthorizationError("Access denied to this event")

    def record_scan(
        self,
        *,
        organizer_id: str,
        session_id: str,
        student_ref: str,
        scan_type: Optional[ScanType] = None,
        now: Optional[datetime] = None,
        ip_address: Optional[str] = None,
    ) -> ScanResult:
        """Record a scan; when `scan_type` is omitted the session's open window decides it."""
        now = now or now_utc()

        session = self._sessions.get_by_id(session_id)
        if not session:
            raise NotFoundError("Session not found")

        event = self._events.get_by_id(session.event_id)
        if not event:
            raise NotFoundError("Event not found")
        if not event.is_active:
            raise ValidationError("Event is not active")

        self._require_access(organizer_id, event.event_id)
        student = self._resolve_student(student_ref)

        state = SessionWindowState.from_session(session)
        status = state.status(now)
        if scan_type is None:
            # No open window: the recorder rejects whichever type we nominate.
            scan_type = state.expected_scan_type(now) or ScanType.TIME_IN

        action = AttendanceAction(
            student_id=student.student_id,
            session_id=session.session_id,
            scan_type=scan_type,
            requested_at=now,
        )
        existing = self._attendance.find_existing_record(student.student_id, session.session_id, scan_type)
        outcome = self._recorder.evaluate(action, state, existing)

        if outcome.is_accepted:
            try:
                record = self._attendance.create_record(
                    student_id=student.student_id,
                    event_id=event.event_id,
                    session_id=session.session_id,
                    scan_type=scan_type,
                    timestamp=now,
                    scanned_by=organizer_id,
                    ip_address=ip_address,
                )
            except PersistenceConflict:
                # Lost a race with a concurrent scan of the same student.
                existing = self._attendance.find_existing_record(student.student_id, session.session_id, scan_type)
                if existing is None:
                    raise
                outcome = ScanOutcome.duplicate(existing)
            else:
                outcome = outcome.with_attendance_id(record.attendance_id)

        if outcome.is_duplicate and outcome.existing_record and not outcome.existing_record.student_name:
            outcome = replace(outcome, existing_record=replace(outcome.existing_record, student_name=student.display_name))

        if outcome.is_accepted:
            logger.info(
                "Recorded %s for student %s in session %s (attendance %s)",
                scan_type.value, student.student_id, session.session_id, outcome.attendance_id,
            )
        else:
            logger.warning(
                "Scan %s for student %s in session %s: %s",
                scan_type.value, student.student_id, session.session_id, outcome.reason or outcome.kind.value,
            )

        return ScanResult(
            outcome=outcome,
            scan_type=scan_type,
            status=status,
            session=session,
            student=student,
            scanned_at=now,
        )

    def scan_payload(
        self,
        *,
        organizer_id: str,
        session_id: str,
        raw_payload: str,
        scan_type: Optional[ScanType] = None,
        now: Optional[datetime] = None,
        ip_address: Optional[str] = None,
    ) -> ScanResult:
        payload = parse_scan_payload(raw_payload)
        return self.record_scan(
            organizer_id=organizer_id,
            session_id=session_id,
            student_ref=payload.student_ref,
            scan_type=scan_type,
            now=now,
            ip_address=ip_address,
        )

    def list_session_attendance(self, session_id: str, *, limit: int = DEFAULT_ATTENDANCE_LIMIT) -> Sequence[AttendanceRecord]:
        if not self._sessions.get_by_id(session_id):
            raise NotFoundError("Session not found")
        return self._attendance.list_for_session(session_id, limit)

    def session_statistics(self, session_id: str) -> SessionStatistics:
        if not self._sessions.get_by_id(session_id):
            raise NotFoundError("Session not found")

        # Counted in the store; the listing is capped.
        time_in, time_out = self._attendance.count_for_session(session_id)
        total = time_in + time_out
        return SessionStatistics(
            total_attendance=total,
            time_in_count=time_in,
            time_out_count=time_out,
            attendance_rate=(time_in / total) * 100 if total else 0.0,
        )
