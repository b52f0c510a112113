from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles stored on organizer accounts."""

    ADMIN = "admin"
    ORGANIZER = "organizer"


class SessionStatus(str, Enum):
    """Derived label describing whether a session accepts scans right now."""

    INACTIVE = "inactive"
    UPCOMING = "upcoming"
    ACTIVE_TIME_IN = "active_time_in"
    ACTIVE_TIME_OUT = "active_time_out"
    ENDED = "ended"


class ScanType(str, Enum):
    TIME_IN = "time_in"
    TIME_OUT = "time_out"


class OutcomeKind(str, Enum):
    ACCEPTED = "accepted"
    DUPLICATE = "duplicate"
    REJECTED = "rejected"
