import asyncio
from typing import Set
from pagefactory.core.logging import get_logger

logger = get_logger("launcher")


class LocalPipelineLauncher:
    """Runs each job as a detached asyncio task in the API process."""

    def __init__(self, coordinator):
        self.coordinator = coordinator
        self._tasks: Set[asyncio.Task] = set()

    def launch(self, job_id: str) -> None:
        task = asyncio.create_task(self.coordinator.run(job_id), name=f"pipeline-{job_id}")
        # The loop only keeps weak references to tasks
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def wait_idle(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


class CeleryPipelineLauncher:
    """Hands jobs to the Celery worker (queue q_orch)."""

    def launch(self, job_id: str) -> None:
        from pagefactory.workers.celery_app import celery_app

        celery_app.send_task("process_page_job", args=[job_id])
        logger.info(f"[{job_id}] Queued pipeline on Celery")

    async def wait_idle(self) -> None:
        return None


def build_launcher(settings, coordinator):
    if settings.PIPELINE_EXECUTOR == "celery":
        return CeleryPipelineLauncher()
    if settings.PIPELINE_EXECUTOR != "local":
        raise ValueError(f"Unknown PIPELINE_EXECUTOR '{settings.PIPELINE_EXECUTOR}'")
    return LocalPipelineLauncher(coordinator)
