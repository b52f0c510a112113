from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional

from ..core.enums import OutcomeKind, ScanType
from ..common.datetime_utils import now_utc


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one stored scan of a student in a session."""

    attendance_id: str
    student_id: str
    event_id: str
    session_id: str
    scan_type: ScanType
    time_in: Optional[datetime]
    time_out: Optional[datetime]
    scanned_by: Optional[str] = None
    created_at: Optional[datetime] = None
    student_name: Optional[str] = None

    @property
    def scanned_at(self) -> Optional[datetime]:
        return self.time_in if self.scan_type == ScanType.TIME_IN else self.time_out


@dataclass(frozen=True)
class AttendanceAction:
    """A single scan request; never persisted by itself."""

    student_id: str
    session_id: str
    scan_type: ScanType
    requested_at: datetime = field(default_factory=now_utc)


@dataclass(frozen=True)
class ScanOutcome:
    kind: OutcomeKind
    attendance_id: Optional[str] = None
    existing_record: Optional[AttendanceRecord] = None
    reason: Optional[str] = None

    @classmethod
    def accepted(cls, attendance_id: Optional[str] = None) -> "ScanOutcome":
        return cls(kind=OutcomeKind.ACCEPTED, attendance_id=attendance_id)

    @classmethod
    def duplicate(cls, existing_record: AttendanceRecord) -> "ScanOutcome":
        return cls(kind=OutcomeKind.DUPLICATE, existing_record=existing_record)

    @classmethod
    def rejected(cls, reason: str) -> "ScanOutcome":
        return cls(kind=OutcomeKind.REJECTED, reason=reason)

    @property
    def is_accepted(self) -> bool:
        return self.kind == OutcomeKind.ACCEPTED

    @property
    def is_duplicate(self) -> bool:
        return self.kind == OutcomeKind.DUPLICATE

    @property
    def is_rejected(self) -> bool:
        return self.kind == OutcomeKind.REJECTED

    def with_attendance_id(self, attendance_id: str) -> "ScanOutcome":
        return replace(self, attendance_id=attendance_id)


@dataclass(frozen=True)
class SessionStatistics:
    total_attendance: int
    time_in_count: int
    time_out_count: int
    attendance_rate: float
