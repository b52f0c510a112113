"""Session attendance windows.

A session accepts check-in scans during its time-in window and, optionally,
check-out scans during a later time-out window. Everything here is a pure
function of the session fields and a reference instant ``now``; callers pass
``now`` explicitly so list views, detail headers and the scan endpoint all
classify a session the same way.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Sequence, TypeVar

from ..core.constants import MAX_WINDOW_HOURS
from ..core.enums import ScanType, SessionStatus
from ..core.exceptions import InvalidWindow


@dataclass(frozen=True)
class TimeWindow:
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise InvalidWindow(f"Window start {self.start:%Y-%m-%d %H:%M} must be before end {self.end:%Y-%m-%d %H:%M}")

    @classmethod
    def optional(cls, start: Optional[datetime], end: Optional[datetime]) -> Optional["TimeWindow"]:
        """Build a window only when both edges are stored."""
        if start is None or end is None:
            return None
        return cls(start, end)

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def contains(self, instant: datetime) -> bool:
        # Both edges inclusive.
        return self.start <= instant <= self.end

    def overlaps(self, other: "TimeWindow") -> bool:
        return self.start < other.end and other.start < self.end


@dataclass(frozen=True)
class SessionWindowState:
    time_in: TimeWindow
    time_out: Optional[TimeWindow] = None
    is_active: bool = True

    @classmethod
    def from_session(cls, session) -> "SessionWindowState":
        """Build a fresh state from stored session fields (never cached)."""
        return cls(
            time_in=TimeWindow(session.time_in_start, session.time_in_end),
            time_out=TimeWindow.optional(session.time_out_start, session.time_out_end),
            is_active=bool(session.is_active),
        )

    def status(self, now: datetime) -> SessionStatus:
        if not self.is_active:
            return SessionStatus.INACTIVE
        if now < self.time_in.start:
            return SessionStatus.UPCOMING
        if self.time_in.contains(now):
            return SessionStatus.ACTIVE_TIME_IN
        if self.time_out is not None:
            if self.time_out.contains(now):
                return SessionStatus.ACTIVE_TIME_OUT
            if now > self.time_out.end:
                return SessionStatus.ENDED
        elif now > self.time_in.end:
            return SessionStatus.ENDED
        # Between time-in end and time-out start.
        return SessionStatus.INACTIVE

    def expected_scan_type(self, now: datetime) -> Optional[ScanType]:
        return SCAN_TYPE_BY_STATUS.get(self.status(now))

    def accepts(self, scan_type: ScanType, now: datetime) -> bool:
        return self.expected_scan_type(now) == scan_type

    def time_until_start(self, now: datetime) -> Optional[timedelta]:
        if self.status(now) != SessionStatus.UPCOMING:
            return None
        return self.time_in.start - now

    def time_until_end(self, now: datetime) -> Optional[timedelta]:
        status = self.status(now)
        if status == SessionStatus.ACTIVE_TIME_IN:
            return self.time_in.end - now
        if status == SessionStatus.ACTIVE_TIME_OUT and self.time_out is not None:
            return self.time_out.end - now
        return None


SCAN_TYPE_BY_STATUS = {
    SessionStatus.ACTIVE_TIME_IN: ScanType.TIME_IN,
    SessionStatus.ACTIVE_TIME_OUT: ScanType.TIME_OUT,
}


def validate_session_windows(
    time_in: TimeWindow,
    time_out: Optional[TimeWindow],
    *,
    max_hours: int = MAX_WINDOW_HOURS,
) -> List[str]:
    """Return the rule violations for a pair of windows (empty when valid).

    Ordering of each window is already guaranteed by ``TimeWindow``.
    """
    errors: List[str] = []
    limit = timedelta(hours=max_hours)

    if time_in.duration > limit:
        errors.append(f"Time-in window cannot exceed {max_hours} hours")

    if time_out is not None:
        if time_out.start < time_in.end:
            errors.append("Time-out start must be after or equal to time-in end")
        if time_out.duration > limit:
            errors.append(f"Time-out window cannot exceed {max_hours} hours")

    return errors


def windows_overlap(a: SessionWindowState, b: SessionWindowState) -> bool:
    if a.time_in.overlaps(b.time_in):
        return True
    if a.time_out is not None and b.time_out is not None:
        return a.time_out.overlaps(b.time_out)
    return False


S = TypeVar("S")


def _with_status(sessions: Iterable[S], now: datetime, wanted: Sequence[SessionStatus]) -> List[S]:
    out: List[S] = []
    for s in sessions:
        state = SessionWindowState.from_session(s)
        if state.status(now) in wanted:
            out.append(s)
    return out


def active_sessions(sessions: Iterable[S], now: datetime) -> List[S]:
    return _with_status(sessions, now, (SessionStatus.ACTIVE_TIME_IN, SessionStatus.ACTIVE_TIME_OUT))


def upcoming_sessions(sessions: Iterable[S], now: datetime) -> List[S]:
    return _with_status(sessions, now, (SessionStatus.UPCOMING,))


def ended_sessions(sessions: Iterable[S], now: datetime) -> List[S]:
    return _with_status(sessions, now, (SessionStatus.ENDED,))


def next_active_session(sessions: Sequence[S], now: datetime) -> Optional[S]:
    """First session open for scanning, else the earliest upcoming one."""
    active = active_sessions(sessions, now)
    if active:
        return active[0]

    upcoming = upcoming_sessions(sessions, now)
    if not upcoming:
        return None
    return min(upcoming, key=lambda s: s.time_in_start)


def format_duration(value: timedelta) -> str:
    seconds = int(value.total_seconds())
    minutes, secs = divmod(seconds, 60)
    hours, mins = divmod(minutes, 60)
    days, hrs = divmod(hours, 24)

    if days > 0:
        return f"{days}d {hrs}h {mins}m"
    if hours > 0:
        return f"{hours}h {mins}m"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def format_time_until(target: datetime, now: datetime) -> str:
    diff = target - now
    if diff <= timedelta(0):
        return "Now"
    return f"in {format_duration(diff)}"
