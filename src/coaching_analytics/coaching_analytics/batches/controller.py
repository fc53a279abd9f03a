from __future__ import annotations

from flask import Flask, jsonify

from ..access.session import current_session
from ..container import Container
from .normalizer import normalize_batch_name


def register(app: Flask, container: Container) -> None:
    @app.route("/api/batches", methods=["GET"], endpoint="list_batches")
    def list_batches():
        session_ctx = current_session()
        return jsonify({"batches": container.batch_service.list_batches(session_ctx.management_id)})

    @app.route("/api/batches/<path:batch>", methods=["GET"], endpoint="get_batch")
    def get_batch(batch: str):
        session_ctx = current_session()
        # Werkzeug already decoded %XX once; "+" and double-encoded names still need it.
        name = normalize_batch_name(batch, url_encoded=True)
        overview = container.batch_service.get_batch_overview(session_ctx.management_id, name)
        return jsonify(overview.to_dict())
