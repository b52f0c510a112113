from __future__ import annotations

from flask import Flask, jsonify, request, send_file, session

from ..common.web import api_view, client_ip, json_body, login_required, parse_scan_type
from ..container import Container
from ..core.constants import DEFAULT_ATTENDANCE_LIMIT
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..scanning.qr import render_png, student_qr_data
from .service import ScanResult, record_to_dict

_STATUS_BY_OUTCOME = {"accepted": 201, "duplicate": 200, "rejected": 422}


def _scan_response(result: ScanResult):
    body = result.to_dict()
    body["success"] = result.outcome.is_accepted
    if result.outcome.is_duplicate:
        body["message"] = f"{result.student.display_name} already has a {result.scan_type.value} record for this session"
    elif result.outcome.is_rejected:
        body["message"] = f"Session is not accepting {result.scan_type.value} scans ({result.status.value})"
    else:
        body["message"] = f"{result.student.display_name} recorded ({result.scan_type.value})"
    return jsonify(body), _STATUS_BY_OUTCOME[result.outcome.kind.value]


def _required(data: dict, key: str) -> str:
    value = str(data.get(key) or "").strip()
    if not value:
        raise ValidationError(f"{key} is required")
    return value


def register(app: Flask, container: Container) -> None:
    api = api_view(app)

    @app.route("/api/organizer/attendance", methods=["POST"], endpoint="api_record_attendance")
    @login_required
    @api
    def record_attendance():
        data = json_body()
        result = container.attendance_service.record_scan(
            organizer_id=session["organizer_id"],
            session_id=_required(data, "session_id"),
            student_ref=_required(data, "student_id"),
            scan_type=parse_scan_type(data.get("scan_type")),
            now=container.clock(),
            ip_address=client_ip(),
        )
        return _scan_response(result)

    @app.route("/api/organizer/scan", methods=["POST"], endpoint="api_scan_payload")
    @login_required
    @api
    def scan_payload():
        data = json_body()
        result = container.attendance_service.scan_payload(
            organizer_id=session["organizer_id"],
            session_id=_required(data, "session_id"),
            raw_payload=str(data.get("qr_data") or ""),
            scan_type=parse_scan_type(data.get("scan_type")),
            now=container.clock(),
            ip_address=client_ip(),
        )
        return _scan_response(result)

    @app.route("/api/organizer/scan/image", methods=["POST"], endpoint="api_scan_image")
    @login_required
    @api
    def scan_image():
        session_id = _required(request.form, "session_id")
        scan_type = parse_scan_type(request.form.get("scan_type"))
        now = container.clock()

        # Check access before any window status is revealed.
        s = container.session_service.get(session_id)
        organizer = container.organizer_service.get(session["organizer_id"])
        if not container.organizer_service.has_access(organizer, s.event_id):
            raise AuthorizationError("Access denied to this event")

        if scan_type is None:
            scan_type = container.session_service.require_accepting(session_id, now=now)

        upload = request.files.get("image")
        if upload is None or not upload.filename:
            raise ValidationError("image file is required")

        # Imported here so the JSON routes work on hosts without libzbar.
        from ..scanning.decoder import decode_qr_image

        raw = decode_qr_image(upload.stream)
        app.logger.debug("Decoded QR payload from %s", upload.filename)

        result = container.attendance_service.scan_payload(
            organizer_id=session["organizer_id"],
            session_id=session_id,
            raw_payload=raw,
            scan_type=scan_type,
            now=now,
            ip_address=client_ip(),
        )
        return _scan_response(result)

    @app.route("/api/organizer/sessions/<session_id>/attendance", methods=["GET"], endpoint="api_session_attendance")
    @login_required
    @api
    def session_attendance(session_id: str):
        try:
            limit = int(request.args.get("limit", DEFAULT_ATTENDANCE_LIMIT))
        except ValueError:
            raise ValidationError("limit must be an integer")

        s = container.session_service.get(session_id)
        organizer = container.organizer_service.get(session["organizer_id"])
        if not container.organizer_service.has_access(organizer, s.event_id):
            return jsonify({"success": False, "message": "Access denied to this event"}), 403

        records = container.attendance_service.list_session_attendance(session_id, limit=max(1, limit))
        stats = container.attendance_service.session_statistics(session_id)
        return jsonify(
            {
                "session_id": session_id,
                "records": [record_to_dict(r) for r in records],
                "statistics": {
                    "total_attendance": stats.total_attendance,
                    "time_in_count": stats.time_in_count,
                    "time_out_count": stats.time_out_count,
                    "attendance_rate": round(stats.attendance_rate, 2),
                },
            }
        ), 200

    @app.route("/api/students/<student_id>/qr", methods=["GET"], endpoint="api_student_qr")
    @login_required
    @api
    def student_qr(student_id: str):
        student = container.students_repo.get_by_id(student_id)
        if not student:
            raise NotFoundError("Student not found")
        buf = render_png(student_qr_data(student.student_id))
        return send_file(buf, mimetype="image/png", download_name=f"student-{student.student_id_number}.png")
