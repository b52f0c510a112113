from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

import pytest

from event_attendance.core.enums import Role
from event_attendance.core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from event_attendance.events.model import Event
from event_attendance.organizers.model import Organizer
from event_attendance.organizers.service import OrganizerService


class InMemoryEvents:
    def get_by_id(self, event_id: str) -> Optional[Event]:
        if event_id != "e1":
            return None
        return Event(event_id="e1", name="Orientation", start_date=datetime(2025, 3, 10), end_date=datetime(2025, 3, 10), created_by="adm")


class InMemoryOrganizers:
    def __init__(self, *organizers: Organizer):
        self.organizers = {o.organizer_id: o for o in organizers}
        self.assignments: set[tuple[str, str]] = set()
        self.logins: list[str] = []

    def get_by_id(self, organizer_id: str) -> Optional[Organizer]:
        return self.organizers.get(organizer_id)

    def get_by_email(self, email: str) -> Optional[Organizer]:
        return next((o for o in self.organizers.values() if o.email == email), None)

    def create(self, organizer: Organizer) -> Organizer:
        created = replace(organizer, organizer_id=f"o{len(self.organizers) + 1}")
        self.organizers[created.organizer_id] = created
        return created

    def touch_last_login(self, organizer_id: str) -> None:
        self.logins.append(organizer_id)

    def assign(self, *, organizer_id: str, event_id: str, assigned_by: str) -> bool:
        key = (organizer_id, event_id)
        if key in self.assignments:
            return False
        self.assignments.add(key)
        return True

    def unassign(self, *, organizer_id: str, event_id: str) -> bool:
        key = (organizer_id, event_id)
        if key not in self.assignments:
            return False
        self.assignments.discard(key)
        return True

    def is_assigned(self, *, organizer_id: str, event_id: str) -> bool:
        return (organizer_id, event_id) in self.assignments

    def list_for_event(self, event_id: str):
        return [self.organizers[o] for o, e in self.assignments if e == event_id]

    def list_event_ids(self, organizer_id: str):
        return [e for o, e in self.assignments if o == organizer_id]


ORG = Organizer(organizer_id="org1", email="org@example.com", full_name="Org")
RETIRED = Organizer(organizer_id="org2", email="old@example.com", full_name="Old", is_active=False)
ADMIN = Organizer(organizer_id="adm", email="adm@example.com", full_name="Admin", role=Role.ADMIN)


def build():
    repo = InMemoryOrganizers(ORG, RETIRED, ADMIN)
    return OrganizerService(repo, InMemoryEvents()), repo


def test_identify_active_organizer_by_email():
    svc, repo = build()

    assert svc.identify("  ORG@example.com ") == ORG
    assert repo.logins == ["org1"]


@pytest.mark.parametrize("email", ["", "old@example.com", "nobody@example.com"])
def test_identify_rejects(email):
    svc, _ = build()

    with pytest.raises(AuthenticationError):
        svc.identify(email)


def test_assign_is_idempotent():
    svc, repo = build()

    assert svc.assign(current_role=Role.ADMIN, event_id="e1", organizer_ids=["org1", "org1"], assigned_by="adm") == 1
    assert svc.assign(current_role=Role.ADMIN, event_id="e1", organizer_ids=["org1"], assigned_by="adm") == 0
    assert repo.assignments == {("org1", "e1")}
    assert svc.list_for_event("e1") == [ORG]


def test_assign_rules():
    svc, _ = build()

    with pytest.raises(AuthorizationError):
        svc.assign(current_role=Role.ORGANIZER, event_id="e1", organizer_ids=["org1"], assigned_by="org1")
    with pytest.raises(NotFoundError):
        svc.assign(current_role=Role.ADMIN, event_id="nope", organizer_ids=["org1"], assigned_by="adm")
    with pytest.raises(ValidationError):
        svc.assign(current_role=Role.ADMIN, event_id="e1", organizer_ids=[], assigned_by="adm")
    with pytest.raises(ValidationError):
        svc.assign(current_role=Role.ADMIN, event_id="e1", organizer_ids=["org2"], assigned_by="adm")


def test_access_and_unassign():
    svc, _ = build()
    svc.assign(current_role=Role.ADMIN, event_id="e1", organizer_ids=["org1"], assigned_by="adm")

    assert svc.has_access(ORG, "e1")
    assert svc.has_access(ADMIN, "e1")
    assert not svc.has_access(RETIRED, "e1")
    assert svc.event_ids_for(ORG) == ["e1"]
    assert svc.event_ids_for(ADMIN) is None

    svc.unassign(current_role=Role.ADMIN, event_id="e1", organizer_id="org1")
    assert not svc.has_access(ORG, "e1")
    with pytest.raises(NotFoundError):
        svc.unassign(current_role=Role.ADMIN, event_id="e1", organizer_id="org1")


def test_create_organizer():
    svc, _ = build()

    created = svc.create(current_role=Role.ADMIN, email="New@Example.com", full_name="New Person")
    assert created.email == "new@example.com"
    assert created.role == Role.ORGANIZER

    with pytest.raises(ValidationError):
        svc.create(current_role=Role.ADMIN, email="org@example.com", full_name="Dup")
    with pytest.raises(ValidationError):
        svc.create(current_role=Role.ADMIN, email="not-an-email", full_name="X")
    with pytest.raises(AuthorizationError):
        svc.create(current_role=Role.ORGANIZER, email="x@example.com", full_name="X")
