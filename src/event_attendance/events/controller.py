from __future__ import annotations

from typing import Any, Dict

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import isoformat, parse_iso_datetime
from ..common.web import admin_required, api_view, current_role, json_body, json_bool
from ..container import Container
from .model import Event


def event_to_dict(event: Event) -> dict:
    return {
        "event_id": event.event_id,
        "name": event.name,
        "description": event.description,
        "location": event.location,
        "start_date": isoformat(event.start_date),
        "end_date": isoformat(event.end_date),
        "is_active": event.is_active,
        "created_by": event.created_by,
    }


def _event_changes(data: Dict[str, Any]) -> Dict[str, Any]:
    changes: Dict[str, Any] = {}
    for key, value in data.items():
        if key in ("start_date", "end_date"):
            changes[key] = parse_iso_datetime(str(value), key)
        elif key == "is_active":
            changes[key] = json_bool(value, key)
        else:
            changes[key] = value
    return changes


def register(app: Flask, container: Container) -> None:
    api = api_view(app)

    @app.route("/api/admin/events", methods=["GET"], endpoint="api_admin_events")
    @admin_required
    @api
    def list_events():
        active_only = request.args.get("active") in ("1", "true")
        events = container.event_service.list_events(active_only=active_only)
        return jsonify({"events": [event_to_dict(e) for e in events]}), 200

    @app.route("/api/admin/events", methods=["POST"], endpoint="api_admin_events_create")
    @admin_required
    @api
    def create_event():
        data = json_body()
        event = container.event_service.create(
            current_role=current_role(),
            created_by=session["organizer_id"],
            name=str(data.get("name", "")),
            description=data.get("description"),
            location=data.get("location"),
            start_date=parse_iso_datetime(str(data.get("start_date", "")), "start_date"),
            end_date=parse_iso_datetime(str(data.get("end_date", "")), "end_date"),
            is_active=json_bool(data.get("is_active", True), "is_active"),
        )
        app.logger.info("Event %s created by %s", event.event_id, session["organizer_id"])
        return jsonify({"success": True, "event": event_to_dict(event)}), 201

    @app.route("/api/admin/events/<event_id>", methods=["GET"], endpoint="api_admin_event")
    @admin_required
    @api
    def get_event(event_id: str):
        return jsonify({"event": event_to_dict(container.event_service.get(event_id))}), 200

    @app.route("/api/admin/events/<event_id>", methods=["PUT"], endpoint="api_admin_event_update")
    @admin_required
    @api
    def update_event(event_id: str):
        event = container.event_service.update(
            current_role=current_role(),
            event_id=event_id,
            changes=_event_changes(json_body()),
        )
        return jsonify({"success": True, "event": event_to_dict(event)}), 200

    @app.route("/api/admin/events/<event_id>", methods=["DELETE"], endpoint="api_admin_event_delete")
    @admin_required
    @api
    def delete_event(event_id: str):
        container.event_service.delete(current_role=current_role(), event_id=event_id)
        return jsonify({"success": True}), 200
