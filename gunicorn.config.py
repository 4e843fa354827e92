# -*- coding: utf-8 -*-
"""

Copyright 2025
SPDX-License-Identifier: Apache-2.0

Description: GUNICORN CONFIGURATION
Reference: https://docs.gunicorn.org/en/stable/settings.html
Usage: gunicorn -c gunicorn.config.py mcpui.main:app
Notes:
- SSE sessions are held in process memory and a client's POSTs must reach the
worker that owns its stream, so exactly one worker is run.
- Streams are long-lived; the timeout only applies to silent workers, and the
keep-alive comments keep intermediaries from closing idle streams.
"""

# First-Party
# Import Pydantic Settings singleton
from mcpui.config import settings

# Bind to exactly what .env (or defaults) says
bind = f"{settings.host}:{settings.port}"

workers = 1  # Sessions are process-local; do not raise
worker_class = "uvicorn.workers.UvicornWorker"
timeout = 600
graceful_timeout = 30  # Time for the lifespan shutdown to close open streams
keepalive = 75
loglevel = settings.log_level.lower()

# pidfile = '/tmp/gunicorn-pidfile'
# errorlog = '/tmp/gunicorn-errorlog'
# accesslog = '/tmp/gunicorn-accesslog'

# server hooks


def when_ready(server):
    server.log.info("Server is ready. Spawning worker")


def post_worker_init(worker):
    worker.log.info("worker initialization completed")


def worker_int(worker):
    worker.log.info("worker received INT or QUIT signal")


def worker_exit(server, worker):
    server.log.info("Worker exit (pid: %s)", worker.pid)
