from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import now_local
from ..common.http import created, current_actor, json_body, login_required, ok, paginated, roles_required
from ..common.pagination import PageRequest
from ..common.validators import parse_date, parse_enum, parse_int, parse_optional_date
from ..container import Container
from ..core.enums import AttendanceStatus, Role
from .model import AttendanceFilter
from .payload import parse_check_point


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    def _self_service_leg():
        data = json_body()
        # Self-service legs are always stamped with server time.
        return parse_check_point(
            {k: v for k, v in data.items() if k != "time"},
            default_time=now_local(),
            ip_address=request.remote_addr,
        )

    @app.get("/api/attendance", endpoint="attendance_list")
    @roles_required(Role.ADMIN, Role.HR, Role.MANAGER)
    def attendance_list():
        args = request.args
        filters = AttendanceFilter(
            employee_id=parse_int(args["employee"], "employee") if args.get("employee") else None,
            work_date=parse_optional_date(args.get("date"), "date"),
            status=parse_enum(AttendanceStatus, args["status"], "status") if args.get("status") else None,
        )
        return paginated(service.list(current_actor(), filters, PageRequest.from_args(args)))

    @app.post("/api/attendance", endpoint="attendance_create")
    @roles_required(Role.ADMIN, Role.HR)
    def attendance_create():
        record = service.create_manual(current_actor(), json_body())
        return created(record, message="Attendance record created successfully")

    @app.get("/api/attendance/<int:attendance_id>", endpoint="attendance_get")
    @login_required
    def attendance_get(attendance_id: int):
        return ok(service.get(current_actor(), attendance_id))

    @app.put("/api/attendance/<int:attendance_id>", endpoint="attendance_update")
    @roles_required(Role.ADMIN, Role.HR)
    def attendance_update(attendance_id: int):
        record = service.update_record(current_actor(), attendance_id, json_body())
        return ok(record, message="Attendance record updated successfully")

    @app.delete("/api/attendance/<int:attendance_id>", endpoint="attendance_delete")
    @roles_required(Role.ADMIN, Role.HR)
    def attendance_delete(attendance_id: int):
        service.delete_record(current_actor(), attendance_id)
        return ok(message="Attendance record deleted successfully")

    @app.post("/api/attendance/check-in", endpoint="attendance_check_in")
    @login_required
    def attendance_check_in():
        record = service.check_in(current_actor(), _self_service_leg())
        return ok(record, message="Checked in successfully")

    @app.post("/api/attendance/check-out", endpoint="attendance_check_out")
    @login_required
    def attendance_check_out():
        record = service.check_out(current_actor(), _self_service_leg())
        return ok(record, message="Checked out successfully")

    @app.get("/api/attendance/my-attendance", endpoint="attendance_mine")
    @login_required
    def attendance_mine():
        return paginated(service.list_mine(current_actor(), PageRequest.from_args(request.args)))

    @app.get("/api/attendance/stats/overview", endpoint="attendance_stats")
    @roles_required(Role.ADMIN, Role.HR, Role.MANAGER)
    def attendance_stats():
        return ok(service.stats_overview(current_actor()))

    @app.get("/api/attendance/reports/export", endpoint="attendance_report")
    @roles_required(Role.ADMIN, Role.HR)
    def attendance_report():
        args = request.args
        today = now_local().date()
        start = parse_date(args["start_date"], "start_date") if args.get("start_date") else today.replace(day=1)
        end = parse_date(args["end_date"], "end_date") if args.get("end_date") else today
        department_id = parse_int(args["department"], "department") if args.get("department") else None

        report = service.build_report(current_actor(), start=start, end=end, department_id=department_id)
        if args.get("format") == "csv":
            filename = f"attendance_{start:%Y%m%d}_{end:%Y%m%d}.csv"
            return app.response_class(
                report.to_csv().encode("utf-8-sig"),
                mimetype="text/csv",
                headers={"Content-Disposition": f"attachment; filename={filename}"},
            )
        return ok(report, count=len(report.rows))
