from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_optional_date
from ..common.http import json_ok, request_payload
from ..container import Container


def client_ip() -> str:
    """Submitter address as seen behind a reverse proxy."""
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = (request.headers.get("X-Real-IP") or "").strip()
    if real_ip:
        return real_ip
    return request.remote_addr or "127.0.0.1"


def register(app: Flask, container: Container) -> None:
    gate = container.session_gate

    @app.route("/api/attendance/member", methods=["POST"], endpoint="attendance_member_submit")
    def member_submit():
        data = request_payload()
        new_id = container.member_attendance_service.submit(
            main_id=data.get("mainID"),
            member_code=data.get("memberCode"),
            ip_address=client_ip(),
        )
        return json_ok(message="Attendance recorded successfully", attendanceID=new_id)

    @app.route("/api/attendance/records", methods=["GET"], endpoint="attendance_records_list")
    @gate.login_required
    def records_list():
        rows = container.staff_attendance_service.list(
            gate.require_identity(),
            main_id=request.args.get("mainID"),
            day=parse_optional_date(request.args.get("date")),
        )
        return json_ok(records=[r.to_dict() for r in rows])

    @app.route("/api/attendance/records", methods=["POST"], endpoint="attendance_records_create")
    @gate.login_required
    def records_create():
        data = request_payload()
        record = container.staff_attendance_service.create(
            gate.require_identity(),
            main_id=data.get("mainID"),
            status=data.get("status"),
        )
        return json_ok(message="Attendance record created successfully", record=record.to_dict())

    @app.route("/api/attendance/records/<int:record_id>", methods=["DELETE"], endpoint="attendance_records_delete")
    @gate.login_required
    def records_delete(record_id: int):
        container.staff_attendance_service.delete(gate.require_identity(), record_id)
        return json_ok(message="Attendance record deleted successfully")

    @app.route("/api/attendance/member-stats", methods=["GET"], endpoint="attendance_member_stats")
    @gate.login_required
    def member_stats():
        stats = container.member_attendance_service.stats(
            gate.require_identity(),
            day=parse_optional_date(request.args.get("date")),
        )
        return json_ok(stats=[s.to_dict() for s in stats])
