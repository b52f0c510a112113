from __future__ import annotations

from dataclasses import replace
from typing import Any, Optional, Sequence, Tuple

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, new_id
from .model import Student
from .repository import StudentRepository

_COLUMNS = "student_id, student_id_number, first_name, last_name, email, year, program"


def _to_student(r: dict) -> Student:
    return Student(
        student_id=r["student_id"],
        student_id_number=r["student_id_number"],
        first_name=r["first_name"],
        last_name=r["last_name"],
        email=r["email"],
        year=int(r["year"]),
        program=r.get("program"),
    )


def _search_clause(search: str) -> Tuple[str, Tuple[Any, ...]]:
    term = (search or "").strip()
    if not term:
        return "", ()
    like = f"%{term}%"
    return (
        " WHERE student_id_number LIKE %s OR first_name LIKE %s OR last_name LIKE %s OR email LIKE %s",
        (like, like, like, like),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_where(self, column: str, value: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE {column}=%s", (value,))
            r = fetchone(cur)
            return _to_student(r) if r else None

    def get_by_id(self, student_id: str) -> Optional[Student]:
        return self._get_where("student_id", student_id)

    def get_by_id_number(self, student_id_number: str) -> Optional[Student]:
        return self._get_where("student_id_number", student_id_number)

    def get_by_email(self, email: str) -> Optional[Student]:
        return self._get_where("email", email)

    def list_students(self, *, search: str = "", limit: int = 10, offset: int = 0) -> Sequence[Student]:
        where, params = _search_clause(search)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM students{where} ORDER BY last_name ASC, first_name ASC LIMIT %s OFFSET %s",
                params + (int(limit), int(offset)),
            )
            return [_to_student(r) for r in fetchall(cur)]

    def count(self, *, search: str = "") -> int:
        where, params = _search_clause(search)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM students{where}", params)
            r = fetchone(cur)
            return int(r["total"]) if r else 0

    def create(self, student: Student) -> Student:
        created = replace(student, student_id=new_id())
        # Duplicate ID number / email surfaces as PersistenceConflict from db_cursor.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO students(student_id, student_id_number, first_name, last_name, email, year, program)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (created.student_id, created.student_id_number, created.first_name, created.last_name,
                 created.email, created.year, created.program),
            )
        return created

    def update(self, student: Student) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE students
                SET student_id_number=%s, first_name=%s, last_name=%s, email=%s, year=%s, program=%s
                WHERE student_id=%s
                """,
                (student.student_id_number, student.first_name, student.last_name, student.email,
                 student.year, student.program, student.student_id),
            )
            if cur.rowcount:
                return True
            # MySQL reports 0 affected rows when nothing changed.
            cur.execute("SELECT 1 AS found FROM students WHERE student_id=%s", (student.student_id,))
            return fetchone(cur) is not None

    def delete(self, student_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM students WHERE student_id=%s", (student_id,))
            return cur.rowcount > 0
