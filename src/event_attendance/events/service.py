from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from ..common.validators import optional_text, require_max_length, require_non_empty
from ..core.constants import MAX_DESCRIPTION_LENGTH, MAX_NAME_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import Event
from .repository import EventRepository

_EDITABLE = {"name", "description", "start_date", "end_date", "location", "is_active"}


class EventService:
    def __init__(self, events: EventRepository):
        self._events = events

    @staticmethod
    def _validated(event: Event) -> Event:
        name = require_max_length(require_non_empty(event.name, "Event name"), "Event name", MAX_NAME_LENGTH)
        description = require_max_length(optional_text(event.description), "Description", MAX_DESCRIPTION_LENGTH)
        if event.end_date < event.start_date:
            raise ValidationError("End date must be on or after start date")
        return replace(event, name=name, description=description, location=optional_text(event.location))

    def get(self, event_id: str) -> Event:
        event = self._events.get_by_id(event_id)
        if not event:
            raise NotFoundError("Event not found")
        return event

    def list_events(self, *, active_only: bool = False) -> Sequence[Event]:
        return self._events.list_all(active_only=active_only)

    def create(
        self,
        *,
        current_role: Role,
        created_by: str,
        name: str,
        start_date: datetime,
        end_date: datetime,
        description: Optional[str] = None,
        location: Optional[str] = None,
        is_active: bool = True,
    ) -> Event:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can create events")

        event = self._validated(
            Event(
                event_id="",
                name=name,
                description=description,
                start_date=start_date,
                end_date=end_date,
                location=location,
                is_active=bool(is_active),
                created_by=created_by,
            )
        )
        return self._events.create(event)

    def update(self, *, current_role: Role, event_id: str, changes: Mapping[str, Any]) -> Event:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can edit events")

        unknown = set(changes) - _EDITABLE
        if unknown:
            raise ValidationError(f"Unknown event field(s): {', '.join(sorted(unknown))}")

        event = self._validated(replace(self.get(event_id), **changes))
        if not self._events.update(event):
            raise ValidationError("Failed to update event")
        return event

    def delete(self, *, current_role: Role, event_id: str) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can delete events")
        if not self._events.delete(event_id):
            raise NotFoundError("Event not found")
