"""Browser-facing JSON API for py-mlfq.

This package provides a Flask application that exposes a live
scheduler over HTTP.  It is an **optional** extra; install with::

    pip install py-mlfq[web]

The ``create_app`` factory in ``app.py`` builds a scheduler and serves:

- ``GET /api/status`` — snapshot of every queue.
- ``POST /api/processes`` — admit a new process.
- ``POST /api/tick`` — advance simulated time.
- ``GET /api/log`` — the simulation log.
"""
