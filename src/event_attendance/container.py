from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from .attendance.factory import ScanPolicyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.recorder import AttendanceRecorder
from .attendance.service import AttendanceService
from .common.datetime_utils import now_utc
from .core.constants import MAX_WINDOW_HOURS
from .database.connection import DBConfig, DatabaseConnection
from .events.mysql_event_repository import MySQLEventRepository
from .events.service import EventService
from .organizers.mysql_organizer_repository import MySQLOrganizerRepository
from .organizers.service import OrganizerService
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.service import SessionService
from .students.mysql_student_repository import MySQLStudentRepository
from .students.service import StudentService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    events_repo: MySQLEventRepository
    sessions_repo: MySQLSessionRepository
    organizers_repo: MySQLOrganizerRepository
    students_repo: MySQLStudentRepository
    attendance_repo: MySQLAttendanceRepository

    organizer_service: OrganizerService
    event_service: EventService
    session_service: SessionService
    attendance_service: AttendanceService
    student_service: StudentService

    clock: Callable[[], datetime] = now_utc


def build_container(*, db_config: dict, max_window_hours: int = MAX_WINDOW_HOURS) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    events_repo = MySQLEventRepository(conn)
    sessions_repo = MySQLSessionRepository(conn)
    organizers_repo = MySQLOrganizerRepository(conn)
    students_repo = MySQLStudentRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)

    organizer_service = OrganizerService(organizers_repo, events_repo)
    event_service = EventService(events_repo)
    student_service = StudentService(students_repo)
    session_service = SessionService(
        sessions_repo,
        events_repo,
        organizer_service,
        max_window_hours=max_window_hours,
    )
    attendance_service = AttendanceService(
        attendance_repo,
        sessions_repo,
        events_repo,
        students_repo,
        organizers_repo,
        recorder=AttendanceRecorder(ScanPolicyFactory()),
    )

    return Container(
        conn=conn,
        events_repo=events_repo,
        sessions_repo=sessions_repo,
        organizers_repo=organizers_repo,
        students_repo=students_repo,
        attendance_repo=attendance_repo,
        organizer_service=organizer_service,
        event_service=event_service,
        session_service=session_service,
        attendance_service=attendance_service,
        student_service=student_service,
    )
