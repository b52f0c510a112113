from __future__ import annotations

import io

import qrcode

from ..core.constants import QR_SESSION_PREFIX, QR_STUDENT_PREFIX


def student_qr_data(student_id: str) -> str:
    return f"{QR_STUDENT_PREFIX}{student_id}"


def session_qr_data(session_id: str, event_id: str) -> str:
    return f"{QR_SESSION_PREFIX}{session_id}:{event_id}"


def render_png(data: str, *, box_size: int = 10, border: int = 2) -> io.BytesIO:
    """Render `data` as a QR PNG into an in-memory buffer (rewound)."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return buf
