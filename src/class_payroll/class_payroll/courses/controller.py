from __future__ import annotations

from flask import Flask

from ..common.web import admin_required, current_actor, ok
from ..container import Container
from ..events.mapping import event_to_dict


def register(app: Flask, container: Container) -> None:
    @app.route("/courses/<int:course_id>/events", methods=["POST"], endpoint="generate_course_events")
    @admin_required
    def generate_course_events(course_id: int):
        events, created = container.course_schedule_service.generate_events(actor=current_actor(), course_id=course_id)
        return ok(created=created, events=[event_to_dict(e) for e in events])
