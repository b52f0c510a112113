from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import ScanType
from .policies.base import ScanPolicy
from .policies.time_in_policy import TimeInPolicy
from .policies.time_out_policy import TimeOutPolicy


@dataclass
class ScanPolicyFactory:
    """Factory Pattern: choose the policy that gates a scan type."""

    def for_scan_type(self, scan_type: ScanType) -> ScanPolicy:
        if scan_type == ScanType.TIME_OUT:
            return TimeOutPolicy()
        return TimeInPolicy()
