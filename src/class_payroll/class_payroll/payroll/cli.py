"""
Flask CLI commands for the monthly payroll close.
"""

from __future__ import annotations

import click
from flask import Flask

from ..core.enums import Role
from ..core.exceptions import DomainError
from ..core.permissions import Actor
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.cli.command("close-month")
    @click.option("--month", type=int, required=True, help="Month to close (1-12).")
    @click.option("--year", type=int, required=True, help="Year of the month to close.")
    @click.option("--teacher-id", type=int, default=None, help="Close only this teacher.")
    @click.option("--admin-id", type=int, required=True, help="Profile id of the admin, recorded as created_by on new rows.")
    def close_month_command(month: int, year: int, teacher_id: int | None, admin_id: int) -> None:
        """Write the attendance snapshot salary rows for a month."""

        actor = Actor(user_id=admin_id, role=Role.ADMIN)
        payroll = container.payroll_service

        try:
            if teacher_id is not None:
                closed = [payroll.close_month(actor=actor, teacher_id=teacher_id, month=month, year=year)]
                skipped: list[str] = []
            else:
                closed, skipped = payroll.close_month_for_all(actor=actor, month=month, year=year)
        except DomainError as e:
            raise click.ClickException(str(e))

        for record in closed:
            click.echo(
                f"teacher {record.teacher_id}: {record.total_classes} classes, "
                f"{record.final_amount} ({record.status.value})"
            )
        for message in skipped:
            click.echo(f"skipped: {message}", err=True)

        click.echo(f"Closed {month:02d}/{year}: {len(closed)} written, {len(skipped)} skipped")
