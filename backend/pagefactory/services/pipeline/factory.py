from pagefactory.services.codegen.generator import CodeGenerator
from pagefactory.services.deploy.provisioner import DeploymentProvisioner
from pagefactory.services.deploy.vercel import VercelClient
from pagefactory.services.deploy.watcher import DeploymentWatcher
from pagefactory.services.jobs.store import JobStore
from pagefactory.services.llm.client import LLMClient
from pagefactory.services.pipeline.coordinator import PipelineCoordinator
from pagefactory.services.repo.git import GitRunner
from pagefactory.services.repo.github import GitHubClient
from pagefactory.services.repo.provisioner import RepositoryProvisioner


def build_coordinator(settings, store: JobStore) -> PipelineCoordinator:
    """Wire the production collaborators from one settings object."""
    git = GitRunner(timeout=settings.GIT_TIMEOUT_SECONDS)
    github = GitHubClient(
        username=settings.GITHUB_USERNAME,
        token=settings.GITHUB_PAT,
        api_url=settings.GITHUB_API_URL,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )
    vercel = VercelClient(
        token=settings.VERCEL_API_TOKEN,
        team_id=settings.VERCEL_TEAM_ID,
        api_url=settings.VERCEL_API_URL,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )
    return PipelineCoordinator(
        settings=settings,
        store=store,
        generator=CodeGenerator(LLMClient.from_settings(settings)),
        repos=RepositoryProvisioner(settings, github, git),
        deployer=DeploymentProvisioner(settings, vercel, git),
        watcher=DeploymentWatcher(
            vercel,
            interval=settings.DEPLOYMENT_POLL_INTERVAL_SECONDS,
            max_retries=settings.DEPLOYMENT_POLL_MAX_RETRIES,
            log_scope=settings.VERCEL_TEAM_ID or settings.GITHUB_USERNAME,
        ),
    )
