import asyncio
from celery import shared_task
from pagefactory.core.config import get_settings
from pagefactory.core.logging import get_logger
from pagefactory.services.jobs.store import JobStore
from pagefactory.services.pipeline.factory import build_coordinator

logger = get_logger("worker")


async def run_page_job(job_id: str, settings) -> str:
    # Fresh engine per task: each task runs in its own event loop
    store = JobStore.from_url(settings.DATABASE_URL)
    try:
        await store.init()
        coordinator = build_coordinator(settings, store)
        status = await coordinator.run(job_id)
        return status.value
    finally:
        await store.dispose()


@shared_task(name="process_page_job")
def process_page_job(job_id: str):
    """Run the whole provisioning pipeline for one job inside the worker."""
    settings = get_settings()
    logger.info(f"Starting pipeline for Job {job_id}")
    status = asyncio.run(run_page_job(job_id, settings))
    logger.info(f"Job {job_id} finished with status {status}")
    return {"job_id": job_id, "status": status}
