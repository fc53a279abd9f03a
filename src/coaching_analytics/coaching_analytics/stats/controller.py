from __future__ import annotations

from flask import Flask, jsonify, request

from ..access.session import current_session
from ..container import Container
from .schemas import AttendanceStatsQuery, MarksStatsQuery


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/stats", methods=["GET"], endpoint="attendance_stats")
    def attendance_stats():
        session_ctx = current_session()
        query = AttendanceStatsQuery.from_args(request.args)
        stats = container.attendance_stats_service.build(session_ctx.management_id, query)
        return jsonify(stats.to_dict())

    @app.route("/api/marks/stats", methods=["GET"], endpoint="marks_stats")
    def marks_stats():
        session_ctx = current_session()
        query = MarksStatsQuery.from_args(request.args)
        stats = container.marks_stats_service.build(session_ctx.management_id, query)
        return jsonify(stats.to_dict())
