from __future__ import annotations

from flask import Flask, request

from ..common.http import created, current_actor, json_body, login_required, ok, paginated, roles_required
from ..common.pagination import PageRequest
from ..common.validators import parse_enum, parse_int, parse_optional_date, require_field
from ..container import Container
from ..core.enums import PaymentMethod, PayrollStatus, Role
from .model import PayrollFilter


def _optional_int_arg(name: str):
    value = request.args.get(name)
    return parse_int(value, name) if value else None


def register(app: Flask, container: Container) -> None:
    service = container.payroll_service

    @app.get("/api/payroll", endpoint="payroll_list")
    @roles_required(Role.ADMIN, Role.HR)
    def payroll_list():
        args = request.args
        filters = PayrollFilter(
            employee_id=_optional_int_arg("employee"),
            month=_optional_int_arg("month"),
            year=_optional_int_arg("year"),
            status=parse_enum(PayrollStatus, args["status"], "status") if args.get("status") else None,
        )
        return paginated(service.list(current_actor(), filters, PageRequest.from_args(args)))

    @app.post("/api/payroll", endpoint="payroll_create")
    @roles_required(Role.ADMIN, Role.HR)
    def payroll_create():
        record = service.create(current_actor(), json_body())
        return created(record, message="Payroll record created successfully")

    @app.get("/api/payroll/<int:payroll_id>", endpoint="payroll_get")
    @login_required
    def payroll_get(payroll_id: int):
        return ok(service.get(current_actor(), payroll_id))

    @app.put("/api/payroll/<int:payroll_id>", endpoint="payroll_update")
    @roles_required(Role.ADMIN, Role.HR)
    def payroll_update(payroll_id: int):
        record = service.update(current_actor(), payroll_id, json_body())
        return ok(record, message="Payroll record updated successfully")

    @app.delete("/api/payroll/<int:payroll_id>", endpoint="payroll_delete")
    @roles_required(Role.ADMIN)
    def payroll_delete(payroll_id: int):
        service.delete(current_actor(), payroll_id)
        return ok(message="Payroll record deleted successfully")

    @app.post("/api/payroll/calculate/<int:employee_id>", endpoint="payroll_calculate")
    @roles_required(Role.ADMIN, Role.HR)
    def payroll_calculate(employee_id: int):
        data = json_body()
        month = parse_int(require_field(data, "month", "Month"), "month")
        year = parse_int(require_field(data, "year", "Year"), "year")
        record = service.calculate(current_actor(), employee_id, month, year)
        return created(record, message="Payroll calculated successfully")

    @app.put("/api/payroll/<int:payroll_id>/approve", endpoint="payroll_approve")
    @roles_required(Role.ADMIN, Role.HR)
    def payroll_approve(payroll_id: int):
        record = service.approve(current_actor(), payroll_id)
        return ok(record, message="Payroll approved successfully")

    @app.put("/api/payroll/<int:payroll_id>/pay", endpoint="payroll_pay")
    @roles_required(Role.ADMIN, Role.HR)
    def payroll_pay(payroll_id: int):
        data = json_body()
        record = service.mark_paid(
            current_actor(),
            payroll_id,
            payment_date=parse_optional_date(data.get("payment_date"), "payment_date"),
            payment_method=parse_enum(PaymentMethod, data["payment_method"], "payment_method")
            if data.get("payment_method")
            else None,
        )
        return ok(record, message="Payroll marked as paid")

    @app.put("/api/payroll/<int:payroll_id>/cancel", endpoint="payroll_cancel")
    @roles_required(Role.ADMIN, Role.HR)
    def payroll_cancel(payroll_id: int):
        record = service.cancel(current_actor(), payroll_id)
        return ok(record, message="Payroll cancelled successfully")

    @app.get("/api/payroll/my-payroll", endpoint="payroll_mine")
    @login_required
    def payroll_mine():
        page = PageRequest.from_args(request.args)
        return paginated(service.list_mine(current_actor(), page, year=_optional_int_arg("year")))

    @app.get("/api/payroll/<int:payroll_id>/payslip", endpoint="payroll_payslip")
    @login_required
    def payroll_payslip(payroll_id: int):
        return ok(service.payslip(current_actor(), payroll_id))

    @app.get("/api/payroll/stats/overview", endpoint="payroll_stats")
    @roles_required(Role.ADMIN, Role.HR)
    def payroll_stats():
        stats = service.stats_overview(current_actor(), _optional_int_arg("year"), _optional_int_arg("month"))
        return ok(stats)
