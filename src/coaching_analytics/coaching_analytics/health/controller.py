from __future__ import annotations

from flask import Flask, jsonify

from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"status": "ok"})
