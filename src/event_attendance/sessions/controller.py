from __future__ import annotations

from typing import Any, Dict

from flask import Flask, jsonify, request, send_file, session

from ..common.datetime_utils import parse_iso_datetime, parse_optional_datetime
from ..common.web import admin_required, api_view, current_role, json_body, json_bool, login_required
from ..container import Container
from ..core.exceptions import ValidationError
from ..scanning.qr import render_png, session_qr_data
from .service import describe_session


def _session_changes(data: Dict[str, Any]) -> Dict[str, Any]:
    changes: Dict[str, Any] = {}
    for key, value in data.items():
        if key in ("time_in_start", "time_in_end"):
            changes[key] = parse_iso_datetime(str(value), key)
        elif key in ("time_out_start", "time_out_end"):
            changes[key] = parse_optional_datetime(value, key)
        elif key == "is_active":
            changes[key] = json_bool(value, key)
        else:
            changes[key] = value
    return changes


def register(app: Flask, container: Container) -> None:
    api = api_view(app)

    def _now():
        # Lets clients preview the status at another instant.
        return parse_optional_datetime(request.args.get("now"), "now")

    @app.route("/api/admin/sessions", methods=["GET"], endpoint="api_admin_sessions")
    @admin_required
    @api
    def list_sessions():
        event_id = (request.args.get("event_id") or "").strip()
        if not event_id:
            raise ValidationError("event_id is required")
        event = container.event_service.get(event_id)
        now = _now() or container.clock()
        views = [describe_session(s, now, event_name=event.name) for s in container.session_service.list_for_event(event_id)]
        return jsonify({"sessions": [v.to_dict() for v in views]}), 200

    @app.route("/api/admin/sessions", methods=["POST"], endpoint="api_admin_sessions_create")
    @admin_required
    @api
    def create_session():
        data = json_body()
        created = container.session_service.create(
            current_role=current_role(),
            event_id=str(data.get("event_id", "")),
            name=str(data.get("name", "")),
            description=data.get("description"),
            time_in_start=parse_iso_datetime(str(data.get("time_in_start", "")), "time_in_start"),
            time_in_end=parse_iso_datetime(str(data.get("time_in_end", "")), "time_in_end"),
            time_out_start=parse_optional_datetime(data.get("time_out_start"), "time_out_start"),
            time_out_end=parse_optional_datetime(data.get("time_out_end"), "time_out_end"),
            is_active=json_bool(data.get("is_active", True), "is_active"),
        )
        view = container.session_service.status_view(created.session_id, now=container.clock())
        return jsonify({"success": True, "session": view.to_dict()}), 201

    @app.route("/api/admin/sessions/<session_id>", methods=["GET"], endpoint="api_admin_session")
    @admin_required
    @api
    def get_session(session_id: str):
        view = container.session_service.status_view(session_id, now=_now() or container.clock())
        return jsonify({"session": view.to_dict()}), 200

    @app.route("/api/admin/sessions/<session_id>", methods=["PUT"], endpoint="api_admin_session_update")
    @admin_required
    @api
    def update_session(session_id: str):
        container.session_service.update(
            current_role=current_role(),
            session_id=session_id,
            changes=_session_changes(json_body()),
        )
        view = container.session_service.status_view(session_id, now=container.clock())
        return jsonify({"success": True, "session": view.to_dict()}), 200

    @app.route("/api/admin/sessions/<session_id>", methods=["DELETE"], endpoint="api_admin_session_delete")
    @admin_required
    @api
    def delete_session(session_id: str):
        container.session_service.delete(current_role=current_role(), session_id=session_id)
        return jsonify({"success": True}), 200

    @app.route("/api/organizer/sessions", methods=["GET"], endpoint="api_organizer_sessions")
    @login_required
    @api
    def organizer_sessions():
        organizer = container.organizer_service.get(session["organizer_id"])
        views = container.session_service.list_for_organizer(organizer, now=_now() or container.clock())
        return jsonify({"sessions": [v.to_dict() for v in views]}), 200

    @app.route("/api/sessions/<session_id>/status", methods=["GET"], endpoint="api_session_status")
    @login_required
    @api
    def session_status(session_id: str):
        view = container.session_service.status_view(session_id, now=_now() or container.clock())
        return jsonify(view.to_dict()), 200

    @app.route("/api/organizer/sessions/<session_id>/qr", methods=["GET"], endpoint="api_session_qr")
    @login_required
    @api
    def session_qr(session_id: str):
        s = container.session_service.get(session_id)
        organizer = container.organizer_service.get(session["organizer_id"])
        if not container.organizer_service.has_access(organizer, s.event_id):
            return jsonify({"success": False, "message": "Access denied to this event"}), 403

        buf = render_png(session_qr_data(s.session_id, s.event_id))
        return send_file(buf, mimetype="image/png", download_name=f"session-{s.session_id}.png")
