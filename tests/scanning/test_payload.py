import pytest

from event_attendance.core.exceptions import ValidationError
from event_attendance.scanning.payload import StructuredPayload, StudentIdPayload, parse_scan_payload
from event_attendance.scanning.qr import render_png, session_qr_data, student_qr_data


def test_student_qr_code():
    payload = parse_scan_payload("  DTP:student:abc123  ")

    assert payload == StudentIdPayload("abc123")
    assert payload.kind == "student_id"
    assert payload.student_ref == "abc123"


def test_student_qr_code_ignores_trailing_segments():
    assert parse_scan_payload("DTP:student:abc123:2025").student_ref == "abc123"


@pytest.mark.parametrize(
    "raw",
    ["", "   ", "DTP:student:", "DTP:session:s1:e1", "https://example.com/x", "http://x"],
)
def test_rejected_payloads(raw):
    with pytest.raises(ValidationError):
        parse_scan_payload(raw)


def test_json_payload_is_structured():
    payload = parse_scan_payload('{"studentId": "st9", "firstName": "Grace", "lastName": "Hopper"}')

    assert isinstance(payload, StructuredPayload)
    assert payload.kind == "structured"
    assert payload.student_ref == "st9"
    assert payload.display_name == "Grace Hopper"


def test_json_payload_falls_back_to_id_number():
    assert parse_scan_payload('{"studentIdNumber": "2024-0001"}').student_ref == "2024-0001"


def test_json_payload_without_student_reference():
    payload = parse_scan_payload('{"firstName": "Grace"}')

    with pytest.raises(ValidationError):
        payload.student_ref


def test_invalid_json_and_plain_text_are_student_ids():
    assert parse_scan_payload("{not json").student_ref == "{not json"
    assert parse_scan_payload(" 2024-0001 ") == StudentIdPayload("2024-0001")


def test_generated_qr_data_round_trips_through_parser():
    assert student_qr_data("st1") == "DTP:student:st1"
    assert parse_scan_payload(student_qr_data("st1")).student_ref == "st1"
    assert session_qr_data("s1", "e1") == "DTP:session:s1:e1"


def test_render_png_returns_png_bytes():
    buf = render_png(student_qr_data("st1"))

    assert buf.read(8) == b"\x89PNG\r\n\x1a\n"
