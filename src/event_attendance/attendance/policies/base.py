from __future__ import annotations

from abc import ABC, abstractmethod

from ...core.enums import ScanType, SessionStatus


class ScanPolicy(ABC):
    """Strategy Pattern: encapsulate which session status admits a scan type."""

    scan_type: ScanType

    @abstractmethod
    def permits(self, status: SessionStatus) -> bool:
        raise NotImplementedError
