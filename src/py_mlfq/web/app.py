"""Flask application factory for the py-mlfq web API.

The ``create_app`` function builds a scheduler and returns a Flask app
with four endpoints:

- ``GET /api/status`` — return the scheduler snapshot.
- ``POST /api/processes`` — admit a process and return its PID.
- ``POST /api/tick`` — run one or more ticks and return their results.
- ``GET /api/log`` — return the simulation log as strings.
"""

from __future__ import annotations

import threading

from flask import Flask, Response, jsonify, request

from py_mlfq.config import SchedulerConfig
from py_mlfq.process import Process
from py_mlfq.scheduler import MLFQScheduler

_HTTP_CREATED = 201
_HTTP_BAD_REQUEST = 400
_MAX_TICKS_PER_REQUEST = 10_000


def _non_negative_int(value: object) -> bool:
    """Return True for plain non-negative ints (bools excluded)."""
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def create_app(config: SchedulerConfig | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        config: Scheduler settings (defaults to ``SchedulerConfig()``).

    Returns:
        A configured Flask application ready to serve.

    """
    scheduler = MLFQScheduler(config=config)
    # Flask serves requests on threads; queue work must never overlap
    lock = threading.Lock()

    app = Flask(__name__)

    @app.route("/api/status")
    def status() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the current snapshot of every queue."""
        with lock:
            return jsonify(scheduler.snapshot())

    @app.route("/api/processes", methods=["POST"])
    def add_process() -> tuple[Response, int]:  # pyright: ignore[reportUnusedFunction]
        """Admit a new process.

        Expects JSON body:
        ``{"cpu_time_needed": n, "blocking_time_needed": m, "name": "..."}``
        where only ``cpu_time_needed`` is required.

        Returns:
            JSON with the new ``pid`` and ``name``.

        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or "cpu_time_needed" not in data:
            return jsonify({"error": "Missing 'cpu_time_needed' field"}), _HTTP_BAD_REQUEST
        cpu = data["cpu_time_needed"]
        blocking = data.get("blocking_time_needed", 0)
        if not (_non_negative_int(cpu) and _non_negative_int(blocking)):
            return jsonify({"error": "Times must be non-negative integers"}), _HTTP_BAD_REQUEST
        process = Process(
            cpu_time_needed=cpu,
            blocking_time_needed=blocking,
            name=str(data.get("name", "")),
        )
        with lock:
            scheduler.add_new_process(process)
        return jsonify({"pid": process.pid, "name": process.name}), _HTTP_CREATED

    @app.route("/api/tick", methods=["POST"])
    def tick() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Run ticks; body ``{"ticks": n}`` is optional (default 1).

        Returns:
            JSON with one result dict per tick and the new snapshot.

        """
        data = request.get_json(silent=True) or {}
        count = data.get("ticks", 1) if isinstance(data, dict) else None
        if not _non_negative_int(count) or not 0 < count <= _MAX_TICKS_PER_REQUEST:
            msg = f"'ticks' must be an integer between 1 and {_MAX_TICKS_PER_REQUEST}"
            return jsonify({"error": msg}), _HTTP_BAD_REQUEST
        with lock:
            results = [scheduler.run_tick() for _ in range(count)]
            snapshot = scheduler.snapshot()
        return jsonify({"results": results, "status": snapshot})

    @app.route("/api/log")
    def log() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the simulation log, oldest first."""
        with lock:
            entries = [str(e) for e in scheduler.logger.entries]
        return jsonify({"entries": entries})

    return app
