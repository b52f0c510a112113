from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence, Tuple

from ..core.enums import ScanType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, new_id
from .model import AttendanceRecord
from .repository import AttendanceRepository

_SELECT = """
    SELECT a.attendance_id, a.student_id, a.event_id, a.session_id, a.scan_type,
           a.time_in, a.time_out, a.scanned_by, a.created_at,
           CONCAT(s.first_name, ' ', s.last_name) AS student_name
    FROM attendance a
    LEFT JOIN students s ON s.student_id = a.student_id
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=r["attendance_id"],
        student_id=r["student_id"],
        event_id=r["event_id"],
        session_id=r["session_id"],
        scan_type=ScanType(r["scan_type"]),
        time_in=r.get("time_in"),
        time_out=r.get("time_out"),
        scanned_by=r.get("scanned_by"),
        created_at=r.get("created_at"),
        student_name=r.get("student_name"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_existing_record(self, student_id: str, session_id: str, scan_type: ScanType) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE a.student_id=%s AND a.session_id=%s AND a.scan_type=%s",
                (student_id, session_id, scan_type.value),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

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
        attendance_id = new_id()
        time_in = timestamp if scan_type == ScanType.TIME_IN else None
        time_out = timestamp if scan_type == ScanType.TIME_OUT else None

        # Duplicate (student, session, scan_type) surfaces as PersistenceConflict from db_cursor.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance(attendance_id, student_id, event_id, session_id, scan_type,
                                       time_in, time_out, scanned_by, ip_address, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (attendance_id, student_id, event_id, session_id, scan_type.value,
                 time_in, time_out, scanned_by, ip_address, timestamp),
            )

        return AttendanceRecord(
            attendance_id=attendance_id,
            student_id=student_id,
            event_id=event_id,
            session_id=session_id,
            scan_type=scan_type,
            time_in=time_in,
            time_out=time_out,
            scanned_by=scanned_by,
            created_at=timestamp,
        )

    def list_for_session(self, session_id: str, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE a.session_id=%s ORDER BY a.created_at DESC LIMIT %s",
                (session_id, int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def count_for_session(self, session_id: str) -> Tuple[int, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT scan_type, COUNT(*) AS total FROM attendance WHERE session_id=%s GROUP BY scan_type",
                (session_id,),
            )
            counts = {r["scan_type"]: int(r["total"]) for r in fetchall(cur)}
        return counts.get(ScanType.TIME_IN.value, 0), counts.get(ScanType.TIME_OUT.value, 0)
