import io
from types import SimpleNamespace

import pytest

pytest.importorskip("pyzbar.pyzbar")

from event_attendance.core.exceptions import ValidationError  # noqa: E402
from event_attendance.scanning import decoder  # noqa: E402
from event_attendance.scanning.qr import render_png  # noqa: E402


def test_non_utf8_qr_content_is_a_validation_error(monkeypatch):
    monkeypatch.setattr(decoder, "pyzbar_decode", lambda img: [SimpleNamespace(data=b"\xff\xfe\xfa")])

    with pytest.raises(ValidationError, match="not valid text"):
        decoder.decode_qr_image(render_png("DTP:student:st1"))


def test_image_without_qr_code(monkeypatch):
    monkeypatch.setattr(decoder, "pyzbar_decode", lambda img: [])

    with pytest.raises(ValidationError, match="No QR code"):
        decoder.decode_qr_image(render_png("DTP:student:st1"))


def test_unreadable_upload():
    with pytest.raises(ValidationError, match="readable image"):
        decoder.decode_qr_image(io.BytesIO(b"plain text, not a picture"))
