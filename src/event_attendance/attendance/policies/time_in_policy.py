from __future__ import annotations

from ...core.enums import ScanType, SessionStatus
from .base import ScanPolicy


class TimeInPolicy(ScanPolicy):
    """Check-in scans only while the time-in window is open."""

    scan_type = ScanType.TIME_IN

    def permits(self, status: SessionStatus) -> bool:
        return status == SessionStatus.ACTIVE_TIME_IN
