#!/usr/bin/env python
"""
Server Entry Point

Usage:
    Development:  python run_server.py --dev
    Production:   python run_server.py

    Or with Gunicorn:
    gunicorn marketplace.main:app -c gunicorn.conf.py

Host, port, worker count and log level come from the application settings
(API_HOST, API_PORT, API_WORKERS, LOG_LEVEL); ``--port`` overrides the port.
"""

import argparse
import subprocess
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from marketplace.config import Settings, get_settings


def run_dev_server(settings: Settings, port: int):
    """Run development server with auto-reload."""
    import uvicorn

    uvicorn.run(
        "marketplace.main:app",
        host=settings.api_host,
        port=port,
        reload=True,
        reload_dirs=["marketplace"],
        log_level="debug",
        access_log=True,
    )


def run_prod_server(settings: Settings, port: int):
    """Run production server with Uvicorn directly."""
    import uvicorn

    uvicorn.run(
        "marketplace.main:app",
        host=settings.api_host,
        port=port,
        workers=settings.api_workers,
        log_level=settings.monitoring.log_level.lower(),
        access_log=True,
        proxy_headers=True,
        forwarded_allow_ips="*",
        server_header=False,
        date_header=True,
    )


def run_gunicorn(port: int):
    """Run with Gunicorn."""
    subprocess.run(
        ["gunicorn", "marketplace.main:app", "-c", "gunicorn.conf.py", "--bind", f"0.0.0.0:{port}"],
        check=False,
    )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Marketplace API Server")
    parser.add_argument("--dev", action="store_true", help="Run in development mode with auto-reload")
    parser.add_argument("--gunicorn", action="store_true", help="Run with Gunicorn")
    parser.add_argument("--port", type=int, default=None, help="Port to run on (default: API_PORT)")

    args = parser.parse_args()
    settings = get_settings()
    port = args.port or settings.api_port

    if args.dev:
        print(f"Starting development server on port {port}...")
        run_dev_server(settings, port)
    elif args.gunicorn:
        print(f"Starting Gunicorn on port {port}...")
        run_gunicorn(port)
    else:
        print(f"Starting Uvicorn with {settings.api_workers} workers on port {port}...")
        run_prod_server(settings, port)
