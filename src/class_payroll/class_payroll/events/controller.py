from __future__ import annotations

from flask import Flask, request

from ..common.web import admin_required, current_actor, json_body, login_required, ok
from ..container import Container
from .mapping import event_to_dict


def register(app: Flask, container: Container) -> None:
    events = container.event_service

    @app.route("/events", methods=["GET"], endpoint="list_events")
    @login_required
    def list_events():
        items = events.list_events(
            teacher_id=request.args.get("teacher_id"),
            event_type=request.args.get("event_type"),
            start=request.args.get("start"),
            end=request.args.get("end"),
        )
        return ok(events=[event_to_dict(e) for e in items])

    @app.route("/events/<int:event_id>", methods=["GET"], endpoint="get_event")
    @login_required
    def get_event(event_id: int):
        return ok(event=event_to_dict(events.get(event_id)))

    @app.route("/events", methods=["POST"], endpoint="create_event")
    @admin_required
    def create_event():
        event = events.create(actor=current_actor(), payload=json_body())
        return ok(201, event=event_to_dict(event))

    @app.route("/events/<int:event_id>", methods=["PUT"], endpoint="update_event")
    @admin_required
    def update_event(event_id: int):
        event = events.update(actor=current_actor(), event_id=event_id, payload=json_body())
        return ok(event=event_to_dict(event))

    @app.route("/events/<int:event_id>", methods=["DELETE"], endpoint="delete_event")
    @admin_required
    def delete_event(event_id: int):
        events.delete(actor=current_actor(), event_id=event_id)
        return ok(message=f"Event {event_id} deleted")
