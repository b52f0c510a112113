from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Session


class SessionRepository(Protocol):
    def get_by_id(self, session_id: str) -> Optional[Session]:
        raise NotImplementedError

    def list_for_event(self, event_id: str) -> Sequence[Session]:
        raise NotImplementedError

    def list_for_events(self, event_ids: Sequence[str]) -> Sequence[Session]:
        raise NotImplementedError

    def create(self, session: Session) -> Session:
        """Persist a new session; the returned copy carries the generated id."""

        raise NotImplementedError

    def update(self, session: Session) -> bool:
        raise NotImplementedError

    def delete(self, session_id: str) -> bool:
        raise NotImplementedError
