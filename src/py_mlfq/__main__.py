"""Allow ``python -m py_mlfq``."""

from py_mlfq.cli import main

raise SystemExit(main())
