from __future__ import annotations

from flask import Flask, jsonify, request

from ..access.session import current_session
from ..container import Container
from ..core.http import json_body
from .schemas import BulkMarksRequest, DeleteMarksRequest, MarksQuery, SetMarksRequest


def register(app: Flask, container: Container) -> None:
    @app.route("/api/marks", methods=["GET"], endpoint="list_marks")
    def list_marks():
        session_ctx = current_session()
        query = MarksQuery.from_args(request.args)
        rows = container.marks_service.list_marks(session_ctx.management_id, query)
        return jsonify({"marks": [r.to_dict() for r in rows]})

    @app.route("/api/marks", methods=["PUT"], endpoint="set_marks")
    def set_marks():
        session_ctx = current_session()
        req = SetMarksRequest.from_payload(json_body())
        container.marks_service.set_marks(session_ctx, req)
        return jsonify({"success": True, "message": "Marks updated successfully"})

    @app.route("/api/marks", methods=["POST"], endpoint="set_marks_for_test")
    def set_marks_for_test():
        session_ctx = current_session()
        req = BulkMarksRequest.from_payload(json_body())
        count = container.marks_service.set_marks_for_test(session_ctx, req)
        return jsonify({"success": True, "message": "Marks saved successfully", "count": count})

    @app.route("/api/marks", methods=["DELETE"], endpoint="delete_marks")
    def delete_marks():
        session_ctx = current_session()
        req = DeleteMarksRequest.from_args(request.args)
        container.marks_service.delete_marks(session_ctx, req)
        return jsonify({"success": True, "message": "Marks deleted successfully"})
