from __future__ import annotations

from flask import Flask, request

from ..common.validators import require_int
from ..common.web import admin_required, current_actor, json_body, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    approvals = container.approval_service

    @app.route("/admin/attendance/pending", methods=["GET"], endpoint="pending_attendance")
    @admin_required
    def pending_attendance():
        limit = request.args.get("limit")
        items = approvals.list_pending(
            actor=current_actor(),
            limit=require_int(limit, "limit", minimum=1, maximum=1000) if limit else None,
        )
        return ok(attendance=[v.to_dict() for v in items])

    @app.route("/admin/attendance/approve", methods=["POST"], endpoint="approve_attendance")
    @admin_required
    def approve_attendance():
        data = json_body()
        view = approvals.approve(
            actor=current_actor(),
            attendance_id=require_int(data.get("attendance_id"), "attendance_id"),
            bonus_amount=data.get("bonus_amount"),
        )
        return ok(attendance=view.to_dict())

    @app.route("/admin/attendance/reject", methods=["POST"], endpoint="reject_attendance")
    @admin_required
    def reject_attendance():
        data = json_body()
        view = approvals.reject(
            actor=current_actor(),
            attendance_id=require_int(data.get("attendance_id"), "attendance_id"),
            reason=data.get("reason"),
        )
        return ok(attendance=view.to_dict())

    @app.route("/admin/attendance/<int:attendance_id>/paid", methods=["POST"], endpoint="pay_attendance")
    @admin_required
    def pay_attendance(attendance_id: int):
        view = approvals.mark_paid(actor=current_actor(), attendance_id=attendance_id)
        return ok(attendance=view.to_dict())
