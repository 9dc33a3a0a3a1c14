# cartcells/celery_worker.py
from celery import Celery

from cartcells.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    REFRESH_INTERVAL_SECONDS,
)

celery_app = Celery(
    "cartcells",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# Explicite importuj taski, żeby Celery je zarejestrował
celery_app.conf.imports = (
    "cartcells.tasks.refresh",
)

celery_app.conf.beat_schedule = {
    "refresh-carts": {
        "task": "cartcells.tasks.refresh.refresh_carts_task",
        "schedule": REFRESH_INTERVAL_SECONDS,
    },
}

celery_app.conf.timezone = "UTC"
