# bookstore/celery_worker.py
from celery import Celery

from bookstore.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    CELERY_TASK_ALWAYS_EAGER,
)

celery_app = Celery(
    "bookstore",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# tasks live next to the services that enqueue them
celery_app.conf.imports = ("bookstore.services.notification_service",)

celery_app.conf.task_always_eager = CELERY_TASK_ALWAYS_EAGER
celery_app.conf.task_eager_propagates = True
celery_app.conf.timezone = "UTC"
