from typing import Any, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker
from pagefactory.core.errors import DuplicateJobId, JobNotFound, InvalidStatusTransition
from pagefactory.core.logging import get_logger
from pagefactory.db.session import create_engine, create_session_factory, init_models
from pagefactory.models.job import Job, JobStatus
from pagefactory.services.jobs.lifecycle import check_transition

logger = get_logger("job_store")

UPDATABLE_FIELDS = frozenset({
    "status",
    "generated_artifact",
    "result_url",
    "failure_message",
    "hosting_project_id",
    "hosting_deployment_id",
})


class JobStore:
    """
    Durable per-job record. Every write commits before returning, so a
    status read from another request or process sees it immediately.
    """

    def __init__(self, engine: AsyncEngine, session_factory: Optional[async_sessionmaker] = None):
        self.engine = engine
        self.session_factory = session_factory or create_session_factory(engine)

    @classmethod
    def from_url(cls, database_url: str) -> "JobStore":
        return cls(create_engine(database_url))

    async def init(self) -> None:
        await init_models(self.engine)

    async def dispose(self) -> None:
        await self.engine.dispose()

    async def create(self, job_id: str, prompt: str, repo_slug: str) -> Job:
        async with self.session_factory() as session:
            if await session.get(Job, job_id) is not None:
                raise DuplicateJobId(f"Job {job_id} already exists")
            job = Job(id=job_id, prompt=prompt, repo_slug=repo_slug, status=JobStatus.PENDING.value)
            session.add(job)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise DuplicateJobId(f"Job {job_id} or slug {repo_slug} already exists") from e
        logger.info(f"Job {job_id} created (slug: {repo_slug})")
        return job

    async def get(self, job_id: str) -> Job:
        async with self.session_factory() as session:
            job = await session.get(Job, job_id)
            if job is None:
                raise JobNotFound(f"Job {job_id} not found")
            return job

    async def update(self, job_id: str, **fields: Any) -> Job:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        async with self.session_factory() as session:
            job = await session.get(Job, job_id)
            if job is None:
                raise JobNotFound(f"Job {job_id} not found")

            current = JobStatus(job.status)
            target = JobStatus(fields["status"]) if fields.get("status") is not None else current
            if target != current:
                check_transition(current, target)
            elif current.is_terminal:
                raise InvalidStatusTransition(f"Job {job_id} is already {current.value}")
            if fields.get("result_url") and target != JobStatus.DEPLOYED:
                raise InvalidStatusTransition("result_url can only be set together with 'deployed'")

            for name, value in fields.items():
                if name == "status":
                    value = target.value
                setattr(job, name, value)
            await session.commit()

        if target != current:
            logger.info(f"Job {job_id}: {current.value} -> {target.value}")
        return job
