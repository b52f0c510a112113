from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Organizer:
    """Domain entity: a staff member who scans attendance (or an admin)."""

    organizer_id: str
    email: str
    full_name: str
    role: Role = Role.ORGANIZER
    is_active: bool = True
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True)
class OrganizerAssignment:
    organizer_id: str
    event_id: str
    assigned_by: str
    assigned_at: Optional[datetime] = None
    is_active: bool = True
