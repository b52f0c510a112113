from __future__ import annotations

from typing import Any, Dict

from flask import Flask, jsonify, request, session

from ..common.web import admin_required, api_view, current_role, json_body
from ..container import Container
from ..core.constants import DEFAULT_PAGE_SIZE
from ..core.exceptions import ValidationError
from .service import student_to_dict

_FIELDS = ("student_id_number", "first_name", "last_name", "email", "year", "program")


def _student_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: data.get(key) for key in _FIELDS}


def _int_arg(name: str, default: int) -> int:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a number")


def register(app: Flask, container: Container) -> None:
    api = api_view(app)

    @app.route("/api/public/register", methods=["POST"], endpoint="api_public_register")
    @api
    def public_register():
        student = container.student_service.register(**_student_fields(json_body()))
        return jsonify({"success": True, "student": student_to_dict(student)}), 201

    @app.route("/api/admin/students", methods=["GET"], endpoint="api_admin_students")
    @admin_required
    @api
    def list_students():
        page = _int_arg("page", 1)
        limit = _int_arg("limit", DEFAULT_PAGE_SIZE)
        students, total = container.student_service.list_students(
            search=request.args.get("search", ""),
            page=page,
            limit=limit,
        )
        return jsonify({
            "students": [student_to_dict(s) for s in students],
            "total": total,
            "page": max(1, page),
        }), 200

    @app.route("/api/admin/students", methods=["POST"], endpoint="api_admin_students_create")
    @admin_required
    @api
    def create_student():
        student = container.student_service.create(current_role=current_role(), **_student_fields(json_body()))
        app.logger.info("Student %s created by %s", student.student_id, session["organizer_id"])
        return jsonify({"success": True, "student": student_to_dict(student)}), 201

    @app.route("/api/admin/students/<student_id>", methods=["GET"], endpoint="api_admin_student")
    @admin_required
    @api
    def get_student(student_id: str):
        return jsonify({"student": student_to_dict(container.student_service.get(student_id))}), 200

    @app.route("/api/admin/students/<student_id>", methods=["PUT"], endpoint="api_admin_student_update")
    @admin_required
    @api
    def update_student(student_id: str):
        student = container.student_service.update(
            current_role=current_role(),
            student_id=student_id,
            changes=json_body(),
        )
        return jsonify({"success": True, "student": student_to_dict(student)}), 200

    @app.route("/api/admin/students/<student_id>", methods=["DELETE"], endpoint="api_admin_student_delete")
    @admin_required
    @api
    def delete_student(student_id: str):
        container.student_service.delete(current_role=current_role(), student_id=student_id)
        return jsonify({"success": True}), 200
