"""Normalize scanned QR / typed text into a student reference.

Scanners deliver either a bare student id, a `DTP:student:<id>` code, or a
JSON object. The text is resolved once here into a tagged payload so the
attendance service only ever sees a student reference string.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Union

from ..core.constants import QR_SESSION_PREFIX, QR_STUDENT_PREFIX
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class StudentIdPayload:
    value: str
    kind: Literal["student_id"] = "student_id"

    @property
    def student_ref(self) -> str:
        return self.value


@dataclass(frozen=True)
class StructuredPayload:
    fields: Dict[str, Any] = field(default_factory=dict)
    kind: Literal["structured"] = "structured"

    @property
    def student_ref(self) -> str:
        ref = self.fields.get("studentId") or self.fields.get("studentIdNumber")
        if not ref or not str(ref).strip():
            raise ValidationError("QR code does not contain a student ID")
        return str(ref).strip()

    @property
    def display_name(self) -> str | None:
        first = str(self.fields.get("firstName") or "").strip()
        last = str(self.fields.get("lastName") or "").strip()
        return f"{first} {last}".strip() or None


ScanPayload = Union[StudentIdPayload, StructuredPayload]


def parse_scan_payload(raw: str) -> ScanPayload:
    text = (raw or "").strip()
    if not text:
        raise ValidationError("QR code data is empty")

    if text.startswith(QR_STUDENT_PREFIX):
        student_id = text[len(QR_STUDENT_PREFIX):].split(":", 1)[0].strip()
        if not student_id:
            raise ValidationError("Student QR code is missing the student ID")
        return StudentIdPayload(student_id)

    if text.startswith(QR_SESSION_PREFIX):
        raise ValidationError("This is a session QR code, scan a student QR code instead")

    if text.startswith(("http://", "https://")):
        raise ValidationError("URL QR codes are not student codes")

    if text.startswith("{"):
        try:
            parsed = json.loads(text)
        except ValueError:
            parsed = None
        if isinstance(parsed, dict):
            return StructuredPayload(parsed)

    return StudentIdPayload(text)
