"""
Gunicorn configuration for the storefront.
"""
import os

bind = f"0.0.0.0:{os.getenv('PORT', '8080')}"

# Threads share one process so per-cart redemption locks hold across requests
workers = int(os.getenv('GUNICORN_WORKERS', '1'))
worker_class = 'gthread'
threads = int(os.getenv('GUNICORN_THREADS', '8'))
timeout = 60
keepalive = 5

# Logging
accesslog = '-'  # stdout
errorlog = '-'   # stderr
loglevel = os.getenv('LOG_LEVEL', 'info')
capture_output = True

# Process naming
proc_name = 'storefront'

wsgi_app = 'run:app'
