from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Session:
    """Domain entity: an attendance session of an event."""

    session_id: str
    event_id: str
    name: str
    time_in_start: datetime
    time_in_end: datetime
    time_out_start: Optional[datetime] = None
    time_out_end: Optional[datetime] = None
    description: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
