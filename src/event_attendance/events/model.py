from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Event:
    """Domain entity: an event that groups attendance sessions."""

    event_id: str
    name: str
    start_date: datetime
    end_date: datetime
    created_by: str
    description: Optional[str] = None
    location: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
