"""
Gunicorn configuration for the offer relay.

    gunicorn core.wsgi:application -c deployment/gunicorn/gunicorn_config.py
"""
import multiprocessing
import os

bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")
workers = int(os.getenv("GUNICORN_WORKERS", multiprocessing.cpu_count() * 2 + 1))
worker_class = "sync"
worker_tmp_dir = "/dev/shm"
max_requests = 1000
max_requests_jitter = 100
# One submission may walk the provider chain twice (owner + confirmation),
# each call bounded by EMAIL_PROVIDER_TIMEOUT, plus the Turnstile check.
timeout = int(os.getenv("GUNICORN_TIMEOUT", 90))
keepalive = 5

# Logging
accesslog = os.getenv("GUNICORN_ACCESS_LOG", "-")
errorlog = os.getenv("GUNICORN_ERROR_LOG", "-")
loglevel = os.getenv("GUNICORN_LOG_LEVEL", "info")
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

proc_name = "domain-offer-relay"

daemon = False


def on_starting(server):
    server.log.info("Starting offer relay")


def when_ready(server):
    server.log.info(f"Offer relay ready with {workers} workers")


def worker_abort(worker):
    """Called when a worker times out, typically on a hung provider call."""
    worker.log.warning("Worker aborted after exceeding the request timeout")
