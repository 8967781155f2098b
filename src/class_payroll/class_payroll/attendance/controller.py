from __future__ import annotations

from flask import Flask

from ..common.web import current_actor, json_body, ok, roles_required
from ..common.validators import require_int
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    @app.route("/teacher/mark-complete", methods=["POST"], endpoint="mark_complete")
    @roles_required(Role.TEACHER, Role.ADMIN)
    def mark_complete():
        actor = current_actor()
        data = json_body()

        # Teachers complete their own classes; admins may name the teacher.
        teacher_id = data.get("teacher_id", actor.user_id) if actor.is_admin else actor.user_id
        result = container.attendance_service.mark_complete(
            actor=actor,
            teacher_id=require_int(teacher_id, "teacher_id"),
            event_id=require_int(data.get("event_id"), "event_id"),
            notes=data.get("notes"),
        )

        message = "Class was already marked complete" if result.already_completed else "Class marked complete"
        return ok(already_completed=result.already_completed, message=message, attendance=result.view.to_dict())
