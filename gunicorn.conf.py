"""Gunicorn configuration for production deployment."""

# Server socket
bind = '0.0.0.0:8000'

# SQLite handles few concurrent writers; keep the worker count low
workers = 2
threads = 4
worker_class = 'gthread'

timeout = 60
graceful_timeout = 30
keepalive = 5

# Logging
accesslog = 'logs/gunicorn-access.log'
errorlog = 'logs/gunicorn-error.log'
loglevel = 'info'
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s %(D)s'

# Process naming
proc_name = 'scooterfleet'

preload_app = True

# Worker recycling
max_requests = 1000
max_requests_jitter = 50

# Security
limit_request_line = 4094
limit_request_fields = 50
limit_request_field_size = 8190
