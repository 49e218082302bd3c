import asyncio
from typing import Awaitable, Type, TypeVar
from pagefactory.core.errors import (
    DeployTriggerFailed,
    DeploymentFailed,
    DomainBindFailed,
    GenerationFailed,
    PageFactoryError,
    ProjectCreateFailed,
    RepoCreateFailed,
    RepoProvisionFailed,
    StageError,
)
from pagefactory.core.logging import get_logger
from pagefactory.models.job import JobStatus
from pagefactory.services.repo.workspace import job_workspace

logger = get_logger("pipeline")

T = TypeVar("T")


class PipelineCoordinator:
    """
    Drives one job from prompt to live URL. Each stage's result is written
    to the job store before the next stage starts; any failure ends the job
    in `failed` and is never raised to the caller.
    """

    def __init__(self, settings, store, generator, repos, deployer, watcher):
        self.settings = settings
        self.store = store
        self.generator = generator
        self.repos = repos
        self.deployer = deployer
        self.watcher = watcher

    async def _stage(self, name: str, awaitable: Awaitable[T], error: Type[StageError]) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.settings.STAGE_TIMEOUT_SECONDS)
        except asyncio.TimeoutError as e:
            raise error(f"{name} timed out after {self.settings.STAGE_TIMEOUT_SECONDS}s") from e

    async def run(self, job_id: str) -> JobStatus:
        stage = JobStatus.PENDING
        deployment_id = None
        try:
            job = await self.store.get(job_id)
            prompt, slug = job.prompt, job.repo_slug
            logger.info(f"[{job_id}] Starting pipeline for prompt: \"{prompt[:50]}...\"")

            stage = JobStatus.GENERATING_CODE
            await self.store.update(job_id, status=stage)
            artifact = await self._stage("AI generation", self.generator.generate(prompt), GenerationFailed)
            await self.store.update(job_id, status=JobStatus.CODE_GENERATED, generated_artifact=artifact)

            async with job_workspace(self.settings.WORKSPACE_ROOT, job_id) as workspace:
                stage = JobStatus.CREATING_REPO
                await self.store.update(job_id, status=stage)
                repo = await self._stage("Repository creation", self.repos.create_remote(slug, prompt), RepoCreateFailed)

                stage = JobStatus.PUSHING_CODE
                await self.store.update(job_id, status=stage)
                repo = await self._stage(
                    "Code push", self.repos.push_initial(job_id, repo, artifact, workspace), RepoProvisionFailed
                )

                stage = JobStatus.DEPLOYING
                await self.store.update(job_id, status=stage)
                project = await self._stage("Project creation", self.deployer.create_project(slug), ProjectCreateFailed)
                await self.store.update(job_id, hosting_project_id=project.id)
                domain = await self._stage("Domain binding", self.deployer.bind_domain(project, slug), DomainBindFailed)
                await self._stage(
                    "Build trigger",
                    self.deployer.force_trigger(job_id, repo.working_dir, repo.branch, prompt),
                    DeployTriggerFailed,
                )

                deployment = await self.watcher.wait_until_ready(project)
                deployment_id = deployment.uid

            url = f"https://{domain}"
            await self.store.update(
                job_id, status=JobStatus.DEPLOYED, result_url=url, hosting_deployment_id=deployment_id
            )
            logger.info(f"[{job_id}] Page deployed successfully: {url}")
            return JobStatus.DEPLOYED

        except DeploymentFailed as e:
            return await self._fail(job_id, stage, e, deployment_id=e.deployment_id)
        except PageFactoryError as e:
            return await self._fail(job_id, stage, e)
        except Exception as e:
            logger.exception(f"[{job_id}] Unexpected error during stage {stage.value}")
            return await self._fail(job_id, stage, e)

    async def _fail(self, job_id: str, stage: JobStatus, error: Exception, deployment_id=None) -> JobStatus:
        message = str(error) or error.__class__.__name__
        logger.error(f"[{job_id}] Pipeline FAILED at {stage.value}: {message}")
        fields = {"status": JobStatus.FAILED, "failure_message": message}
        if deployment_id:
            fields["hosting_deployment_id"] = deployment_id
        try:
            await self.store.update(job_id, **fields)
        except Exception as e:
            logger.error(f"[{job_id}] Could not record failure: {e}")
        return JobStatus.FAILED
