from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, new_id
from .model import Event
from .repository import EventRepository


def _to_event(r: dict) -> Event:
    return Event(
        event_id=r["event_id"],
        name=r["name"],
        description=r.get("description"),
        start_date=r["start_date"],
        end_date=r["end_date"],
        location=r.get("location"),
        is_active=bool(r.get("is_active", True)),
        created_by=r["created_by"],
        created_at=r.get("created_at"),
    )


class MySQLEventRepository(EventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, event_id: str) -> Optional[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT event_id, name, description, start_date, end_date, location, is_active, created_by, created_at
                FROM events
                WHERE event_id=%s
                """,
                (event_id,),
            )
            r = fetchone(cur)
            return _to_event(r) if r else None

    def list_all(self, *, active_only: bool = False) -> Sequence[Event]:
        where = "WHERE is_active=1" if active_only else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT event_id, name, description, start_date, end_date, location, is_active, created_by, created_at
                FROM events
                {where}
                ORDER BY start_date DESC
                """
            )
            return [_to_event(r) for r in fetchall(cur)]

    def create(self, event: Event) -> Event:
        created = replace(event, event_id=event.event_id or new_id())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO events(event_id, name, description, start_date, end_date, location, is_active, created_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    created.event_id,
                    created.name,
                    created.description,
                    created.start_date,
                    created.end_date,
                    created.location,
                    int(created.is_active),
                    created.created_by,
                ),
            )
        return created

    def update(self, event: Event) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE events
                SET name=%s, description=%s, start_date=%s, end_date=%s, location=%s, is_active=%s
                WHERE event_id=%s
                """,
                (
                    event.name,
                    event.description,
                    event.start_date,
                    event.end_date,
                    event.location,
                    int(event.is_active),
                    event.event_id,
                ),
            )
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 AS found FROM events WHERE event_id=%s", (event.event_id,))
            return fetchone(cur) is not None

    def delete(self, event_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM events WHERE event_id=%s", (event_id,))
            return cur.rowcount > 0
