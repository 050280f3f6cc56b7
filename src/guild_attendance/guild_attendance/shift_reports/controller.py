from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_optional_date
from ..common.http import json_ok, request_payload
from ..container import Container


def register(app: Flask, container: Container) -> None:
    gate = container.session_gate
    service = container.shift_report_service

    @app.route("/api/logout/submit", methods=["POST"], endpoint="shift_report_submit")
    @gate.login_required
    def submit():
        data = request_payload()
        report = service.submit(
            gate.require_identity(),
            position=data.get("position"),
            date_time=data.get("dateTime"),
            dropped_links=data.get("droppedLinks"),
            recruits=data.get("recruits"),
            nicknames_set=data.get("nicknamesSet"),
            game_handled=data.get("gameHandled"),
        )
        return json_ok(message="Logout record submitted successfully", record=report.to_dict())

    @app.route("/api/logout/records", methods=["GET"], endpoint="shift_report_records")
    @gate.login_required
    def records():
        rows = service.list_reports(
            gate.require_identity(),
            day=parse_optional_date(request.args.get("date")),
            target_user_id=request.args.get("userID"),
        )
        return json_ok(records=[r.to_dict() for r in rows])

    @app.route("/api/logout/attendance-breakdown", methods=["GET"], endpoint="shift_report_breakdown")
    @gate.login_required
    def attendance_breakdown():
        rows = service.attendance_breakdown(
            gate.require_identity(),
            day=parse_optional_date(request.args.get("date")),
        )
        return json_ok(breakdown=[r.to_dict() for r in rows])

    @app.route("/api/logout/stats", methods=["GET"], endpoint="shift_report_stats")
    @gate.login_required
    def stats():
        rows = service.stats(
            gate.require_identity(),
            start=parse_optional_date(request.args.get("startDate")),
            end=parse_optional_date(request.args.get("endDate")),
            target_user_id=request.args.get("userID"),
        )
        return json_ok(stats=[r.to_dict() for r in rows])
