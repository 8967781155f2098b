from __future__ import annotations

import csv
import io

from flask import Flask, request

from ..common.web import admin_required, current_actor, json_body, ok, roles_required
from ..container import Container
from ..core.enums import Role

REPORT_FIELDS = [
    "teacher_id",
    "teacher_name",
    "classes",
    "attendance_amount",
    "paid_amount",
    "ledger_amount",
    "ledger_status",
    "ledger_source",
]


def register(app: Flask, container: Container) -> None:
    payroll = container.payroll_service

    def _write_report_csv(*, rows, filename: str):
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=REPORT_FIELDS)
        writer.writeheader()
        for row in rows:
            writer.writerow(row.to_dict())

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/teacher/salary", methods=["GET"], endpoint="teacher_salary")
    @roles_required(Role.TEACHER)
    def teacher_salary():
        actor = current_actor()
        overview = payroll.teacher_salary_overview(actor=actor, teacher_id=actor.user_id)
        return ok(**overview.to_dict())

    @app.route("/admin/salaries/<int:teacher_id>", methods=["GET"], endpoint="salary_history")
    @admin_required
    def salary_history(teacher_id: int):
        records = payroll.salary_history(actor=current_actor(), teacher_id=teacher_id)
        return ok(salaries=[r.to_dict() for r in records])

    @app.route("/admin/salaries", methods=["POST"], endpoint="create_salary")
    @admin_required
    def create_salary():
        record = payroll.create_salary_record(actor=current_actor(), payload=json_body())
        return ok(201, salary=record.to_dict())

    @app.route("/admin/salaries/<int:salary_id>/status", methods=["PUT"], endpoint="update_salary_status")
    @admin_required
    def update_salary_status(salary_id: int):
        record = payroll.update_salary_status(
            actor=current_actor(),
            salary_id=salary_id,
            status=json_body().get("status"),
        )
        return ok(salary=record.to_dict())

    @app.route("/admin/salaries/<int:salary_id>", methods=["DELETE"], endpoint="delete_salary")
    @admin_required
    def delete_salary(salary_id: int):
        payroll.delete_salary_record(actor=current_actor(), salary_id=salary_id)
        return ok(message=f"Salary record {salary_id} deleted")

    @app.route("/admin/salaries/<int:salary_id>/settle", methods=["POST"], endpoint="settle_salary")
    @admin_required
    def settle_salary(salary_id: int):
        record = payroll.settle_month(actor=current_actor(), salary_id=salary_id)
        return ok(salary=record.to_dict())

    @app.route("/admin/payroll/close", methods=["POST"], endpoint="close_month")
    @admin_required
    def close_month():
        actor = current_actor()
        data = json_body()
        if data.get("teacher_id") not in (None, ""):
            record = payroll.close_month(
                actor=actor,
                teacher_id=data.get("teacher_id"),
                month=data.get("month"),
                year=data.get("year"),
            )
            return ok(salaries=[record.to_dict()], skipped=[])

        closed, skipped = payroll.close_month_for_all(actor=actor, month=data.get("month"), year=data.get("year"))
        return ok(salaries=[r.to_dict() for r in closed], skipped=skipped)

    @app.route("/admin/payroll/reconcile", methods=["GET"], endpoint="reconcile")
    @admin_required
    def reconcile():
        report = payroll.reconcile(
            actor=current_actor(),
            teacher_id=request.args.get("teacher_id"),
            month=request.args.get("month"),
            year=request.args.get("year"),
        )
        return ok(report=report.to_dict())

    @app.route("/admin/payroll/report", methods=["GET"], endpoint="payroll_report")
    @admin_required
    def payroll_report():
        rows = payroll.monthly_report(
            actor=current_actor(),
            month=request.args.get("month"),
            year=request.args.get("year"),
        )
        return ok(rows=[r.to_dict() for r in rows])

    @app.route("/admin/payroll/report.csv", methods=["GET"], endpoint="payroll_report_csv")
    @admin_required
    def payroll_report_csv():
        month = request.args.get("month")
        year = request.args.get("year")
        rows = payroll.monthly_report(actor=current_actor(), month=month, year=year)
        return _write_report_csv(rows=rows, filename=f"payroll_{int(year):04d}_{int(month):02d}.csv")
