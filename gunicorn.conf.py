import os

from lifealign.config import env_int

# Auto-loaded by gunicorn from the project root; `gunicorn` alone serves the API.
wsgi_app = os.getenv("GUNICORN_APP", "lifealign:create_app()")
bind = os.getenv("GUNICORN_BIND", f"0.0.0.0:{env_int('PORT', 8000)}")

# Requests are short JSON round trips against the database, so threads beat workers.
workers = max(1, min(env_int("GUNICORN_WORKERS", env_int("WEB_CONCURRENCY", 2)), 8))
threads = max(1, min(env_int("GUNICORN_THREADS", 4), 8))
worker_class = "gthread"

timeout = env_int("GUNICORN_TIMEOUT", 30)
graceful_timeout = env_int("GUNICORN_GRACEFUL_TIMEOUT", 30)
keepalive = env_int("GUNICORN_KEEPALIVE", 5)

accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
