from celery import Celery

from csvbridge.core.config import settings

celery_app = Celery(
    "csvbridge",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=["csvbridge.worker.tasks"],
)

celery_app.conf.update(
    task_track_started=True,
    result_expires=3600,
    broker_connection_retry_on_startup=True,
    task_default_queue="imports",
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
)
