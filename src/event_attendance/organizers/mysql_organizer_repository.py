from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, new_id
from .model import Organizer
from .repository import OrganizerRepository

_COLUMNS = "o.organizer_id, o.email, o.full_name, o.role, o.is_active, o.created_at, o.last_login_at"


def _to_organizer(r: dict) -> Organizer:
    return Organizer(
        organizer_id=r["organizer_id"],
        email=r["email"],
        full_name=r["full_name"],
        role=Role(r["role"]),
        is_active=bool(r.get("is_active", True)),
        created_at=r.get("created_at"),
        last_login_at=r.get("last_login_at"),
    )


class MySQLOrganizerRepository(OrganizerRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, organizer_id: str) -> Optional[Organizer]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM organizers o WHERE o.organizer_id=%s", (organizer_id,))
            r = fetchone(cur)
            return _to_organizer(r) if r else None

    def get_by_email(self, email: str) -> Optional[Organizer]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM organizers o WHERE o.email=%s", (email,))
            r = fetchone(cur)
            return _to_organizer(r) if r else None

    def create(self, organizer: Organizer) -> Organizer:
        created = replace(organizer, organizer_id=organizer.organizer_id or new_id())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO organizers(organizer_id, email, full_name, role, is_active)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (created.organizer_id, created.email, created.full_name, created.role.value, int(created.is_active)),
            )
        return created

    def touch_last_login(self, organizer_id: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE organizers SET last_login_at=UTC_TIMESTAMP() WHERE organizer_id=%s", (organizer_id,))

    def assign(self, *, organizer_id: str, event_id: str, assigned_by: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT is_active FROM organizer_event_assignments WHERE organizer_id=%s AND event_id=%s",
                (organizer_id, event_id),
            )
            existing = fetchone(cur)
            if existing and bool(existing["is_active"]):
                return False
            cur.execute(
                """
                INSERT INTO organizer_event_assignments(organizer_id, event_id, assigned_by, is_active)
                VALUES(%s,%s,%s,1)
                ON DUPLICATE KEY UPDATE is_active=1, assigned_by=VALUES(assigned_by), assigned_at=UTC_TIMESTAMP()
                """,
                (organizer_id, event_id, assigned_by),
            )
            return True

    def unassign(self, *, organizer_id: str, event_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM organizer_event_assignments WHERE organizer_id=%s AND event_id=%s",
                (organizer_id, event_id),
            )
            return cur.rowcount > 0

    def is_assigned(self, *, organizer_id: str, event_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT 1 AS found FROM organizer_event_assignments
                WHERE organizer_id=%s AND event_id=%s AND is_active=1
                """,
                (organizer_id, event_id),
            )
            return fetchone(cur) is not None

    def list_for_event(self, event_id: str) -> Sequence[Organizer]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM organizers o
                JOIN organizer_event_assignments a ON a.organizer_id = o.organizer_id
                WHERE a.event_id=%s AND a.is_active=1
                ORDER BY o.full_name ASC
                """,
                (event_id,),
            )
            return [_to_organizer(r) for r in fetchall(cur)]

    def list_event_ids(self, organizer_id: str) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT event_id FROM organizer_event_assignments WHERE organizer_id=%s AND is_active=1",
                (organizer_id,),
            )
            return [r["event_id"] for r in fetchall(cur)]
