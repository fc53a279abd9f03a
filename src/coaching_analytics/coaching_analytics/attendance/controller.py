from __future__ import annotations

from flask import Flask, jsonify, request

from ..access.session import current_session
from ..container import Container
from ..core.http import json_body
from .schemas import AttendanceQuery, BulkAttendanceRequest, RecordAttendanceRequest, RemoveAttendanceRequest


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance", methods=["POST"], endpoint="record_attendance")
    def record_attendance():
        session_ctx = current_session()
        req = RecordAttendanceRequest.from_payload(json_body())
        write = container.attendance_service.record(session_ctx, req)
        return jsonify({"success": True, "message": "Attendance updated successfully", **write.to_dict()})

    @app.route("/api/attendance/bulk", methods=["POST"], endpoint="record_attendance_bulk")
    def record_attendance_bulk():
        session_ctx = current_session()
        req = BulkAttendanceRequest.from_payload(json_body())
        write = container.attendance_service.record_bulk(session_ctx, req)
        return jsonify(
            {
                "success": True,
                "message": f"Attendance saved for {write.student_count} students",
                **write.to_dict(),
            }
        )

    @app.route("/api/attendance", methods=["DELETE"], endpoint="remove_attendance")
    def remove_attendance():
        session_ctx = current_session()
        req = RemoveAttendanceRequest.from_payload(request.args)
        container.attendance_service.remove(session_ctx, req)
        return jsonify({"success": True, "message": "Attendance entry removed"})

    @app.route("/api/attendance", methods=["GET"], endpoint="list_attendance")
    def list_attendance():
        session_ctx = current_session()
        query = AttendanceQuery.from_args(request.args)
        rows = container.attendance_service.list_attendance(session_ctx.management_id, query)
        return jsonify({"attendance": [r.to_dict() for r in rows]})
