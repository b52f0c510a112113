from __future__ import annotations

from flask import Flask, jsonify, session

from ..common.datetime_utils import isoformat
from ..common.web import admin_required, api_view, current_role, json_body
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import ValidationError
from .model import Organizer


def organizer_to_dict(organizer: Organizer) -> dict:
    return {
        "organizer_id": organizer.organizer_id,
        "email": organizer.email,
        "full_name": organizer.full_name,
        "role": organizer.role.value,
        "is_active": organizer.is_active,
        "last_login_at": isoformat(organizer.last_login_at),
    }


def register(app: Flask, container: Container) -> None:
    api = api_view(app)

    @app.route("/api/health", methods=["GET"], endpoint="api_health")
    def health():
        return jsonify({"status": "ok"}), 200

    @app.route("/api/auth/login", methods=["POST"], endpoint="api_login")
    @api
    def login():
        data = json_body()
        organizer = container.organizer_service.identify(str(data.get("email", "")))

        session.clear()
        session["organizer_id"] = organizer.organizer_id
        session["name"] = organizer.full_name
        session["role"] = organizer.role.value

        app.logger.info("Signed in %s (%s)", organizer.email, organizer.role.value)
        return jsonify({"success": True, "organizer": organizer_to_dict(organizer)}), 200

    @app.route("/api/auth/logout", methods=["POST"], endpoint="api_logout")
    def logout():
        session.clear()
        return jsonify({"success": True}), 200

    @app.route("/api/admin/organizers", methods=["POST"], endpoint="api_admin_organizers_create")
    @admin_required
    @api
    def create_organizer():
        data = json_body()
        try:
            role = Role(str(data.get("role", Role.ORGANIZER.value)).lower())
        except ValueError:
            raise ValidationError("role must be 'organizer' or 'admin'")

        organizer = container.organizer_service.create(
            current_role=current_role(),
            email=str(data.get("email", "")),
            full_name=str(data.get("full_name", "")),
            role=role,
        )
        return jsonify({"success": True, "organizer": organizer_to_dict(organizer)}), 201

    @app.route("/api/admin/events/<event_id>/organizers", methods=["GET"], endpoint="api_admin_event_organizers")
    @admin_required
    @api
    def list_event_organizers(event_id: str):
        container.event_service.get(event_id)
        organizers = container.organizer_service.list_for_event(event_id)
        return jsonify({"organizers": [organizer_to_dict(o) for o in organizers]}), 200

    @app.route("/api/admin/events/<event_id>/organizers", methods=["POST"], endpoint="api_admin_event_organizers_assign")
    @admin_required
    @api
    def assign_organizers(event_id: str):
        data = json_body()
        ids = data.get("organizer_ids") or []
        if not isinstance(ids, list):
            raise ValidationError("organizer_ids must be a list")

        added = container.organizer_service.assign(
            current_role=current_role(),
            event_id=event_id,
            organizer_ids=[str(i) for i in ids],
            assigned_by=session["organizer_id"],
        )
        return jsonify({"success": True, "assigned": added}), 200

    @app.route(
        "/api/admin/events/<event_id>/organizers/<organizer_id>",
        methods=["DELETE"],
        endpoint="api_admin_event_organizers_remove",
    )
    @admin_required
    @api
    def unassign_organizer(event_id: str, organizer_id: str):
        container.organizer_service.unassign(current_role=current_role(), event_id=event_id, organizer_id=organizer_id)
        return jsonify({"success": True}), 200
