from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Mapping, Optional, Sequence, Tuple

from ..common.validators import require_max_length, require_non_empty
from ..core.constants import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    MAX_PROGRAM_LENGTH,
    MAX_STUDENT_NAME_LENGTH,
    MAX_STUDENT_YEAR,
    MIN_STUDENT_YEAR,
)
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, PersistenceConflict, ValidationError
from .model import Student
from .repository import StudentRepository

logger = logging.getLogger(__name__)

_EDITABLE = {
    "student_id_number",
    "first_name",
    "last_name",
    "email",
    "year",
    "program",
}


def student_to_dict(student: Student) -> dict:
    return {
        "student_id": student.student_id,
        "student_id_number": student.student_id_number,
        "first_name": student.first_name,
        "last_name": student.last_name,
        "name": student.display_name,
        "email": student.email,
        "year": student.year,
        "program": student.program,
    }


def _name(value: Any, field_name: str) -> str:
    name = require_non_empty(str(value or ""), field_name)
    if len(name) < 2:
        raise ValidationError(f"{field_name} must be at least 2 characters")
    return require_max_length(name, field_name, MAX_STUDENT_NAME_LENGTH)


def _year(value: Any) -> int:
    # bool is an int subclass; reject it explicitly.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("Year must be a whole number")
    if not MIN_STUDENT_YEAR <= value <= MAX_STUDENT_YEAR:
        raise ValidationError(f"Year must be between {MIN_STUDENT_YEAR} and {MAX_STUDENT_YEAR}")
    return value


class StudentService:
    """Student registry: public self-registration and admin maintenance."""

    def __init__(self, students: StudentRepository):
        self._students = students

    def _validated(self, student: Student) -> Student:
        id_number = require_non_empty(str(student.student_id_number or ""), "Student ID number")
        if not id_number.isdigit():
            raise ValidationError("Student ID number must contain only digits")

        email = require_non_empty(str(student.email or ""), "Email").lower()
        local, _, domain = email.partition("@")
        if not local or "." not in domain:
            raise ValidationError("Invalid email format")

        program = require_max_length(
            require_non_empty(str(student.program or ""), "Program"), "Program", MAX_PROGRAM_LENGTH
        )

        return replace(
            student,
            student_id_number=id_number,
            first_name=_name(student.first_name, "First name"),
            last_name=_name(student.last_name, "Last name"),
            email=email,
            year=_year(student.year),
            program=program,
        )

    def _ensure_unique(self, student: Student) -> None:
        same_number = self._students.get_by_id_number(student.student_id_number)
        if same_number and same_number.student_id != student.student_id:
            raise PersistenceConflict("A student with this student ID number already exists")
        same_email = self._students.get_by_email(student.email)
        if same_email and same_email.student_id != student.student_id:
            raise PersistenceConflict("A student with this email already exists")

    def get(self, student_id: str) -> Student:
        student = self._students.get_by_id(student_id)
        if not student:
            raise NotFoundError("Student not found")
        return student

    def list_students(
        self, *, search: str = "", page: int = 1, limit: int = DEFAULT_PAGE_SIZE
    ) -> Tuple[Sequence[Student], int]:
        """One page of students plus the total matching `search`."""
        page = max(1, int(page))
        limit = min(max(1, int(limit)), MAX_PAGE_SIZE)
        search = (search or "").strip()
        students = self._students.list_students(search=search, limit=limit, offset=(page - 1) * limit)
        return students, self._students.count(search=search)

    def register(
        self,
        *,
        student_id_number: str,
        first_name: str,
        last_name: str,
        email: str,
        year: Any,
        program: Optional[str],
    ) -> Student:
        student = self._validated(
            Student(
                student_id="",
                student_id_number=student_id_number,
                first_name=first_name,
                last_name=last_name,
                email=email,
                year=year,
                program=program,
            )
        )
        self._ensure_unique(student)
        created = self._students.create(student)
        logger.info("Registered student %s (%s)", created.student_id, created.student_id_number)
        return created

    def create(self, *, current_role: Role, **fields: Any) -> Student:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can create students")
        return self.register(**fields)

    def update(self, *, current_role: Role, student_id: str, changes: Mapping[str, Any]) -> Student:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can edit students")

        unknown = set(changes) - _EDITABLE
        if unknown:
            raise ValidationError(f"Unknown student field(s): {', '.join(sorted(unknown))}")

        student = self._validated(replace(self.get(student_id), **changes))
        self._ensure_unique(student)
        if not self._students.update(student):
            raise NotFoundError("Student not found")
        logger.info("Updated student %s", student_id)
        return student

    def delete(self, *, current_role: Role, student_id: str) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can delete students")
        if not self._students.delete(student_id):
            raise NotFoundError("Student not found")
        logger.info("Deleted student %s", student_id)
