#!/usr/bin/env python3
"""
Container startup script.

Validates PORT, then replaces this process with gunicorn serving app.wsgi:app
under the configured PREFIX.

Usage:
    python scripts/start.py
"""

from __future__ import annotations

import os
import sys


def _port() -> str:
    port = os.environ.get("PORT", "").strip()
    if not port:
        print("WARNING: PORT not set, using default 8080", flush=True)
        port = "8080"

    try:
        port_int = int(port)
        if port_int < 1 or port_int > 65535:
            raise ValueError("Port out of range")
    except ValueError:
        print(f"ERROR: Invalid PORT value '{port}'. Must be integer 1-65535.", flush=True)
        sys.exit(1)

    return port


def main() -> None:
    port = _port()
    prefix = os.environ.get("PREFIX", "").strip().rstrip("/")

    print(f"=== Starting gunicorn on 0.0.0.0:{port} ===", flush=True)
    print(f"Health check endpoint ready at {prefix}/health-check", flush=True)

    # exec so gunicorn is PID 1 and receives signals directly
    os.execvp(
        "gunicorn",
        [
            "gunicorn",
            "app.wsgi:app",
            "--bind", f"0.0.0.0:{port}",
            "--workers", "2",
            "--timeout", "60",
            "--preload",
            "--access-logfile", "-",
            "--error-logfile", "-",
        ],
    )


if __name__ == "__main__":
    main()
