"""Gunicorn production configuration for the Socialiser API.

Run from the repository root: gunicorn -c gunicorn.conf.py
"""
import multiprocessing
import os

wsgi_app = "socialiser.main:app"
chdir = os.path.join(os.path.dirname(os.path.abspath(__file__)), "backend")

bind = os.getenv("BIND", "0.0.0.0:8000")
workers = int(os.getenv("WEB_CONCURRENCY", multiprocessing.cpu_count() * 2 + 1))
worker_class = "uvicorn.workers.UvicornWorker"
# AI discovery waits on Gemini; keep the worker timeout above the model round trip.
timeout = 120
keepalive = 5
max_requests = 1000
max_requests_jitter = 100
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info")
