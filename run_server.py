#!/usr/bin/env python
"""
Server Entry Point

Starts the Gold Layer Reports API with uvicorn, using API_HOST, API_PORT
and LOG_LEVEL from the application settings.

Usage:
    python run_server.py            # single process
    python run_server.py --reload   # development, restarts on code changes

    gunicorn gold_reports.main:app -c gunicorn.conf.py   # production workers
"""

import argparse

import uvicorn

from gold_reports.config import get_settings


def main() -> None:
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Gold Layer Reports API Server")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    parser.add_argument("--port", type=int, default=settings.api_port, help="Port to bind")
    args = parser.parse_args()

    uvicorn.run(
        "gold_reports.main:app",
        host=settings.api_host,
        port=args.port,
        reload=args.reload,
        reload_dirs=["gold_reports"] if args.reload else None,
        log_level=settings.monitoring.log_level.lower(),
    )


if __name__ == "__main__":
    main()
