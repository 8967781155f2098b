from __future__ import annotations

from flask import Flask

from ..common.web import admin_required, current_actor, json_body, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/admin/rates", methods=["PUT"], endpoint="set_rate")
    @admin_required
    def set_rate():
        data = json_body()
        rates = container.rate_service
        rate_id = rates.set_rate(
            actor=current_actor(),
            teacher_id=data.get("teacher_id"),
            course_id=data.get("course_id"),
            amount=data.get("amount"),
        )
        return ok(rate_id=rate_id)
