# pizzago/celery_worker.py
from celery import Celery

from pizzago.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND, CELERY_TASK_ALWAYS_EAGER

celery_app = Celery(
    "pizzago",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# tasks have to be imported explicitly so the worker registers them
celery_app.conf.imports = (
    "pizzago.tasks.purge",
    "pizzago.services.notification_service",
)

celery_app.conf.beat_schedule = {
    "purge-expired-verifications-hourly": {
        "task": "pizzago.tasks.purge.purge_expired_verifications_task",
        "schedule": 60.0 * 60,
    },
}

celery_app.conf.timezone = "UTC"
celery_app.conf.task_always_eager = CELERY_TASK_ALWAYS_EAGER
