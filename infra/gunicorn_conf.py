import multiprocessing, os

wsgi_app = "app:app"
bind = f"0.0.0.0:{os.getenv('PORT','5000')}"
workers = int(os.getenv("WEB_CONCURRENCY", multiprocessing.cpu_count()))
# Books live in a per-process in-memory store; threads share it, workers do not.
threads = int(os.getenv("GUNICORN_THREADS", "4"))
timeout = 120
worker_class = "gthread"
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL","info").lower()
