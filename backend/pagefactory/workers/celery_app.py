from celery import Celery
from pagefactory.core.config import get_settings
from pagefactory.core.logging import setup_logging

settings = get_settings()
setup_logging(settings)

celery_app = Celery("ai_page_factory", broker=settings.CELERY_BROKER_URL, backend=settings.CELERY_RESULT_BACKEND)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    enable_utc=True,
    task_track_started=True,
    task_routes={
        "process_page_job": {"queue": "q_orch"},
    }
)

# Load tasks
celery_app.autodiscover_tasks(["pagefactory.workers"])
