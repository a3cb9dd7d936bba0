from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..container import Container
from ..core.exceptions import ValidationError
from .model import CompensationConfig

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/compensation", methods=["GET"], endpoint="compensation_get")
    def compensation_get():
        config = container.config_provider.get()
        return jsonify({"success": True, "config": config.to_dict()})

    @app.route("/api/compensation", methods=["PUT"], endpoint="compensation_save")
    def compensation_save():
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({"success": False, "message": "Request body must be a JSON object"}), 400

        try:
            try:
                config = CompensationConfig.from_dict(data)
            except (KeyError, TypeError, ValueError) as e:
                raise ValidationError(f"Malformed compensation settings: {e}") from e
            saved = container.config_provider.save(config)
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except Exception:
            logger.exception("Saving compensation settings failed")
            return jsonify({"success": False, "message": "Internal error"}), 500

        return jsonify({"success": True, "config": saved.to_dict()})
