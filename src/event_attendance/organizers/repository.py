from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Organizer


class OrganizerRepository(Protocol):
    def get_by_id(self, organizer_id: str) -> Optional[Organizer]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Organizer]:
        raise NotImplementedError

    def create(self, organizer: Organizer) -> Organizer:
        raise NotImplementedError

    def touch_last_login(self, organizer_id: str) -> None:
        raise NotImplementedError

    def assign(self, *, organizer_id: str, event_id: str, assigned_by: str) -> bool:
        """Create or re-activate an assignment.

        Returns False when an active assignment already existed.
        """

        raise NotImplementedError

    def unassign(self, *, organizer_id: str, event_id: str) -> bool:
        raise NotImplementedError

    def is_assigned(self, *, organizer_id: str, event_id: str) -> bool:
        raise NotImplementedError

    def list_for_event(self, event_id: str) -> Sequence[Organizer]:
        raise NotImplementedError

    def list_event_ids(self, organizer_id: str) -> Sequence[str]:
        raise NotImplementedError
