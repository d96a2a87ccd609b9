import multiprocessing
import os

# Gunicorn Production Configuration
# Workers: (2x CPU Count) + 1, capped so each worker's DB pool fits the server's connection limit
workers = int(os.environ.get('WEB_CONCURRENCY', min(multiprocessing.cpu_count() * 2 + 1, 8)))
threads = 4
worker_class = 'gthread'
bind = f"0.0.0.0:{os.environ.get('PORT', '3001')}"

# Catalog calls to the POS can take up to SQUARE_TIMEOUT seconds
timeout = 60
graceful_timeout = 30
max_requests = 1000
max_requests_jitter = 100
keepalive = 5

# Logging
accesslog = '-'       # Stdout
errorlog = '-'        # Stderr
loglevel = 'info'
capture_output = True
