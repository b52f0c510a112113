from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence, Tuple

from ..core.enums import ScanType
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def find_existing_record(self, student_id: str, session_id: str, scan_type: ScanType) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_record(
        self,
        *,
        student_id: str,
        event_id: str,
        session_id: str,
        scan_type: ScanType,
        timestamp: datetime,
        scanned_by: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> AttendanceRecord:
        """Insert a new scan.

        Raises PersistenceConflict when (student, session, scan_type) already exists.
        """

        raise NotImplementedError

    def list_for_session(self, session_id: str, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def count_for_session(self, session_id: str) -> Tuple[int, int]:
        """(time_in, time_out) record counts over every record of the session."""
        raise NotImplementedError
