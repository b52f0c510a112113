from __future__ import annotations

from ...core.enums import ScanType, SessionStatus
from .base import ScanPolicy


class TimeOutPolicy(ScanPolicy):
    """Check-out scans only while the time-out window is open."""

    scan_type = ScanType.TIME_OUT

    def permits(self, status: SessionStatus) -> bool:
        return status == SessionStatus.ACTIVE_TIME_OUT
