from __future__ import annotations

from typing import Optional

from ..core.constants import SESSION_NOT_ACCEPTING_REASON
from ..sessions.window import SessionWindowState
from .factory import ScanPolicyFactory
from .model import AttendanceAction, AttendanceRecord, ScanOutcome


class AttendanceRecorder:
    """Classify a scan as accepted, duplicate or rejected.

    Pure: persistence and user notification belong to the caller, which acts
    on the returned outcome. An accepted outcome carries no attendance id
    until the store has created the record.
    """

    def __init__(self, policy_factory: ScanPolicyFactory | None = None):
        self._factory = policy_factory or ScanPolicyFactory()

    def evaluate(
        self,
        action: AttendanceAction,
        state: SessionWindowState,
        existing_record: Optional[AttendanceRecord] = None,
    ) -> ScanOutcome:
        status = state.status(action.requested_at)
        policy = self._factory.for_scan_type(action.scan_type)
        if not policy.permits(status):
            return ScanOutcome.rejected(SESSION_NOT_ACCEPTING_REASON)

        if existing_record is not None:
            return ScanOutcome.duplicate(existing_record)

        return ScanOutcome.accepted()
