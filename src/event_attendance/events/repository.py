from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Event


class EventRepository(Protocol):
    def get_by_id(self, event_id: str) -> Optional[Event]:
        raise NotImplementedError

    def list_all(self, *, active_only: bool = False) -> Sequence[Event]:
        raise NotImplementedError

    def create(self, event: Event) -> Event:
        raise NotImplementedError

    def update(self, event: Event) -> bool:
        raise NotImplementedError

    def delete(self, event_id: str) -> bool:
        raise NotImplementedError
