from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, new_id, placeholders
from .model import Session
from .repository import SessionRepository

_COLUMNS = """
    session_id, event_id, name, description, time_in_start, time_in_end,
    time_out_start, time_out_end, is_active, created_at
"""


def _to_session(r: dict) -> Session:
    return Session(
        session_id=r["session_id"],
        event_id=r["event_id"],
        name=r["name"],
        description=r.get("description"),
        time_in_start=r["time_in_start"],
        time_in_end=r["time_in_end"],
        time_out_start=r.get("time_out_start"),
        time_out_end=r.get("time_out_end"),
        is_active=bool(r.get("is_active", True)),
        created_at=r.get("created_at"),
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, session_id: str) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM sessions WHERE session_id=%s", (session_id,))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def list_for_event(self, event_id: str) -> Sequence[Session]:
        return self.list_for_events([event_id])

    def list_for_events(self, event_ids: Sequence[str]) -> Sequence[Session]:
        if not event_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM sessions WHERE event_id IN ({placeholders(event_ids)}) ORDER BY time_in_start ASC",
                tuple(event_ids),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def create(self, session: Session) -> Session:
        created = replace(session, session_id=session.session_id or new_id())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO sessions(session_id, event_id, name, description, time_in_start, time_in_end,
                                     time_out_start, time_out_end, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    created.session_id,
                    created.event_id,
                    created.name,
                    created.description,
                    created.time_in_start,
                    created.time_in_end,
                    created.time_out_start,
                    created.time_out_end,
                    int(created.is_active),
                ),
            )
        return created

    def update(self, session: Session) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE sessions
                SET name=%s, description=%s, time_in_start=%s, time_in_end=%s,
                    time_out_start=%s, time_out_end=%s, is_active=%s
                WHERE session_id=%s
                """,
                (
                    session.name,
                    session.description,
                    session.time_in_start,
                    session.time_in_end,
                    session.time_out_start,
                    session.time_out_end,
                    int(session.is_active),
                    session.session_id,
                ),
            )
            # MySQL reports 0 affected rows when nothing changed; re-check existence.
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 AS found FROM sessions WHERE session_id=%s", (session.session_id,))
            return fetchone(cur) is not None

    def delete(self, session_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM sessions WHERE session_id=%s", (session_id,))
            return cur.rowcount > 0
