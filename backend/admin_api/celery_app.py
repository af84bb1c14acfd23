from celery import Celery

from .config import REDIS_URL

celery_app = Celery(
    "admin_api_worker",
    broker=REDIS_URL,
    backend=REDIS_URL,
    include=["admin_api.tasks"]
)

# Batch jobs pace themselves; one at a time per worker process
celery_app.conf.update(
    result_expires=3600,
    worker_prefetch_multiplier=1,
)

if __name__ == "__main__":
    celery_app.start()
