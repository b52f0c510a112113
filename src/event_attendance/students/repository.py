from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Student


class StudentRepository(Protocol):
    def get_by_id(self, student_id: str) -> Optional[Student]:
        raise NotImplementedError

    def get_by_id_number(self, student_id_number: str) -> Optional[Student]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Student]:
        raise NotImplementedError

    def list_students(self, *, search: str = "", limit: int = 10, offset: int = 0) -> Sequence[Student]:
        raise NotImplementedError

    def count(self, *, search: str = "") -> int:
        raise NotImplementedError

    def create(self, student: Student) -> Student:
        """Insert and return the stored student (with its generated id).

        Raises PersistenceConflict when the ID number or email is taken.
        """

        raise NotImplementedError

    def update(self, student: Student) -> bool:
        raise NotImplementedError

    def delete(self, student_id: str) -> bool:
        raise NotImplementedError
