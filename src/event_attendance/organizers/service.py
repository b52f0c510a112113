from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from ..common.validators import require_max_length, require_non_empty
from ..core.constants import MAX_NAME_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from ..events.repository import EventRepository
from .model import Organizer
from .repository import OrganizerRepository

logger = logging.getLogger(__name__)


class OrganizerService:
    """Use cases: identify organizers and manage their event assignments."""

    def __init__(self, organizers: OrganizerRepository, events: EventRepository):
        self._organizers = organizers
        self._events = events

    def identify(self, email: str) -> Organizer:
        email = (email or "").strip().lower()
        if not email:
            raise AuthenticationError("Email is required")

        organizer = self._organizers.get_by_email(email)
        if not organizer or not organizer.is_active:
            raise AuthenticationError("No active organizer account for this email")

        self._organizers.touch_last_login(organizer.organizer_id)
        logger.info("Organizer %s signed in", organizer.organizer_id)
        return organizer

    def get(self, organizer_id: str) -> Organizer:
        organizer = self._organizers.get_by_id(organizer_id)
        if not organizer:
            raise NotFoundError("Organizer not found")
        return organizer

    def create(self, *, current_role: Role, email: str, full_name: str, role: Role = Role.ORGANIZER) -> Organizer:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can add organizers")

        email = require_non_empty(email, "Email").lower()
        if "@" not in email:
            raise ValidationError("Email is not valid")
        full_name = require_max_length(require_non_empty(full_name, "Full name"), "Full name", MAX_NAME_LENGTH)

        if self._organizers.get_by_email(email):
            raise ValidationError("An organizer with this email already exists")

        return self._organizers.create(Organizer(organizer_id="", email=email, full_name=full_name, role=role))

    def has_access(self, organizer: Organizer, event_id: str) -> bool:
        if not organizer.is_active:
            return False
        if organizer.is_admin:
            return True
        return self._organizers.is_assigned(organizer_id=organizer.organizer_id, event_id=event_id)

    def assign(self, *, current_role: Role, event_id: str, organizer_ids: Iterable[str], assigned_by: str) -> int:
        """Assign organizers to an event; returns how many were newly assigned."""
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can assign organizers")
        if not self._events.get_by_id(event_id):
            raise NotFoundError("Event not found")

        ids = [i for i in dict.fromkeys(organizer_ids) if i]
        if not ids:
            raise ValidationError("Select at least one organizer")

        added = 0
        for organizer_id in ids:
            organizer = self._organizers.get_by_id(organizer_id)
            if not organizer or not organizer.is_active:
                raise ValidationError(f"Organizer {organizer_id} is not active")
            if self._organizers.assign(organizer_id=organizer_id, event_id=event_id, assigned_by=assigned_by):
                added += 1

        logger.info("Assigned %s organizer(s) to event %s", added, event_id)
        return added

    def unassign(self, *, current_role: Role, event_id: str, organizer_id: str) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can remove organizers")
        if not self._organizers.unassign(organizer_id=organizer_id, event_id=event_id):
            raise NotFoundError("Organizer is not assigned to this event")

    def list_for_event(self, event_id: str) -> Sequence[Organizer]:
        return self._organizers.list_for_event(event_id)

    def event_ids_for(self, organizer: Organizer) -> Optional[Sequence[str]]:
        """Event ids the organizer may scan for; None means every event (admin)."""
        if organizer.is_admin:
            return None
        return self._organizers.list_event_ids(organizer.organizer_id)
