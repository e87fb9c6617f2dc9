"""
Gunicorn Configuration

Runs the marketplace API with Uvicorn workers. Values default to the
application settings and can be overridden through BIND / WORKERS.
"""

import multiprocessing
import os

import structlog

from marketplace.config import get_settings

settings = get_settings()

# Server socket
bind = os.getenv("BIND", f"{settings.api_host}:{settings.api_port}")
backlog = 2048

# Worker processes
workers = int(os.getenv("WORKERS", settings.api_workers or multiprocessing.cpu_count() * 2 + 1))
worker_class = "uvicorn.workers.UvicornWorker"
worker_connections = 1000
max_requests = 10000
max_requests_jitter = 1000
timeout = 120
keepalive = 5
graceful_timeout = 30

# Process naming
proc_name = settings.app_name

# Logging
errorlog = "-"
loglevel = settings.monitoring.log_level.lower()
accesslog = "-"
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

logger = structlog.get_logger("gunicorn.conf")


def when_ready(server):
    logger.info("Gunicorn ready", bind=bind, workers=workers, environment=settings.app_env)


def post_fork(server, worker):
    logger.info("Worker spawned", pid=worker.pid)


def worker_abort(worker):
    logger.warning("Worker aborted", pid=worker.pid)
