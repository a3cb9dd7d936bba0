from __future__ import annotations

import logging
from typing import Optional

from flask import Flask, jsonify

from ..container import Container
from .state_machine import ShiftStateMachine

logger = logging.getLogger(__name__)


def timer_payload(timer: ShiftStateMachine, *, changed: Optional[bool] = None) -> dict:
    readout = timer.readout
    snapshot = timer.snapshot
    payload = {
        "success": True,
        "state": timer.state.value,
        "is_loading": timer.is_loading,
        "shift": snapshot.to_dict() if snapshot else None,
        "elapsed_work_seconds": readout.elapsed_work_seconds,
        "elapsed_break_seconds": readout.elapsed_break_seconds,
        "automatic_break_countdown": readout.automatic_break_countdown,
        "unused_automatic_break_seconds": timer.unused_automatic_break_seconds,
        "live_earnings": readout.live_earnings,
        "effective_rate": readout.effective_rate,
        "effective_percent": readout.effective_percent,
    }
    if changed is not None:
        payload["changed"] = changed
    return payload


def register(app: Flask, container: Container) -> None:
    timer = container.timer

    def _command(name: str, action):
        try:
            result = action()
        except Exception:
            logger.exception("Timer command %s failed", name)
            return jsonify({"success": False, "message": "Internal error"}), 500
        return jsonify(timer_payload(timer, changed=bool(result)))

    @app.before_request
    def run_pending_tick():
        container.tick_scheduler.run_pending()

    @app.route("/api/timer", methods=["GET"], endpoint="timer_status")
    def timer_status():
        return jsonify(timer_payload(timer))

    @app.route("/api/timer/start", methods=["POST"], endpoint="timer_start")
    def timer_start():
        return _command("start_shift", timer.start_shift)

    @app.route("/api/timer/end", methods=["POST"], endpoint="timer_end")
    def timer_end():
        try:
            finalized = timer.end_shift()
        except Exception:
            logger.exception("Timer command end_shift failed")
            return jsonify({"success": False, "message": "Internal error"}), 500

        payload = timer_payload(timer, changed=finalized is not None)
        payload["finalized_shift"] = finalized.to_dict() if finalized else None
        return jsonify(payload)

    @app.route("/api/timer/breaks/manual/start", methods=["POST"], endpoint="timer_manual_break_start")
    def timer_manual_break_start():
        return _command("start_manual_break", timer.start_manual_break)

    @app.route("/api/timer/breaks/manual/end", methods=["POST"], endpoint="timer_manual_break_end")
    def timer_manual_break_end():
        return _command("end_manual_break", timer.end_manual_break)

    @app.route("/api/timer/breaks/scheduled/end-early", methods=["POST"], endpoint="timer_scheduled_break_end_early")
    def timer_scheduled_break_end_early():
        return _command("end_scheduled_break_early", timer.end_scheduled_break_early)

    @app.route("/api/timer/reset", methods=["POST"], endpoint="timer_reset")
    def timer_reset():
        return _command("reset_active_shift", timer.reset_active_shift)
