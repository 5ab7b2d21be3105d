import os

bind = f"0.0.0.0:{os.getenv('PORT', 8000)}"
workers = int(os.getenv('WEB_CONCURRENCY', 2))
worker_class = "uvicorn.workers.UvicornWorker"
# PDF rendering can fetch remote signatures, keep well above SIGNATURE_FETCH_TIMEOUT
timeout = int(os.getenv('GUNICORN_TIMEOUT', 60))
loglevel = os.getenv('LOG_LEVEL', 'info').lower()
accesslog = "-"
max_requests = 500
max_requests_jitter = 50
wsgi_app = "app.main:app"
