from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/history", methods=["GET"], endpoint="history_recent")
    def history_recent():
        limit_s = request.args.get("limit")
        limit = int(limit_s) if limit_s and limit_s.isdigit() else 0
        if limit < 1:
            limit = container.history_limit
        shifts = container.history.list_recent(limit)
        return jsonify(
            {
                "success": True,
                "shifts": [{**s.to_dict(), "break_seconds": s.break_seconds} for s in shifts],
            }
        )

    @app.route("/api/history/<shift_id>", methods=["DELETE"], endpoint="history_delete")
    def history_delete(shift_id: str):
        if not container.history.delete(shift_id):
            return jsonify({"success": False, "message": "Shift not found"}), 404
        return jsonify({"success": True})

    @app.route("/api/history", methods=["DELETE"], endpoint="history_clear")
    def history_clear():
        return jsonify({"success": True, "deleted": container.history.clear()})
