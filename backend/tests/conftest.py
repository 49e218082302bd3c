import os
from types import SimpleNamespace
from typing import List, Optional

import pytest
from loguru import logger

from pagefactory.core.config import load_settings
from pagefactory.services.deploy.vercel import Deployment, ProjectRef
from pagefactory.services.jobs.store import JobStore
from pagefactory.services.repo.provisioner import RemoteRepoRef


@pytest.fixture
def settings(tmp_path):
    return load_settings(
        _env_file=None,
        FRONTEND_URL="http://localhost:3000",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'jobs.db'}",
        LLM_API_KEY="test-llm-key",
        GITHUB_USERNAME="octo",
        GITHUB_PAT="ghp_secret",
        VERCEL_API_TOKEN="vercel-token",
        VERCEL_DOMAIN="pages.example.com",
        BOILERPLATE_REPO_URL="https://github.com/octo/nextjs-lp-boilerplate.git",
        WORKSPACE_ROOT=str(tmp_path / "work"),
        FORCE_TRIGGER_DELAY_SECONDS=0,
        DEPLOYMENT_POLL_INTERVAL_SECONDS=0,
        DEPLOYMENT_POLL_MAX_RETRIES=5,
        STAGE_TIMEOUT_SECONDS=10,
        LOG_FILE=None,
    )


@pytest.fixture
async def store(settings):
    job_store = JobStore.from_url(settings.DATABASE_URL)
    await job_store.init()
    yield job_store
    await job_store.dispose()


@pytest.fixture
def log_messages():
    messages: List[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="WARNING")
    yield messages
    logger.remove(handler_id)


# Fakes for the pipeline collaborators

class FakeGenerator:
    def __init__(self, code: str = "const LandingPage: React.FC = () => null;\n\nexport default LandingPage;", error: Optional[Exception] = None):
        self.code = code
        self.error = error
        self.prompts: List[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.code


class FakeRepos:
    def __init__(self, branch: str = "main", error: Optional[Exception] = None):
        self.branch = branch
        self.error = error
        self.calls: List[str] = []
        self.workspaces: List[str] = []

    async def create_remote(self, repo_slug: str, prompt: str) -> RemoteRepoRef:
        self.calls.append("create_remote")
        if self.error:
            raise self.error
        return RemoteRepoRef(name=repo_slug, full_name=f"octo/{repo_slug}", html_url="", branch=self.branch)

    async def push_initial(self, job_id, repo, artifact, workspace) -> RemoteRepoRef:
        self.calls.append("push_initial")
        self.workspaces.append(workspace)
        repo_dir = os.path.join(workspace, repo.name)
        os.makedirs(repo_dir)
        with open(os.path.join(repo_dir, "page.tsx"), "w") as f:
            f.write(artifact)
        return RemoteRepoRef(
            name=repo.name, full_name=repo.full_name, html_url="", branch=repo.branch, working_dir=repo_dir
        )


class FakeDeployer:
    def __init__(self, domain_suffix: str = "pages.example.com"):
        self.domain_suffix = domain_suffix
        self.calls: List[str] = []

    async def create_project(self, repo_slug: str) -> ProjectRef:
        self.calls.append("create_project")
        return ProjectRef(id="prj_123", name=repo_slug)

    async def bind_domain(self, project: ProjectRef, repo_slug: str) -> str:
        self.calls.append("bind_domain")
        return f"{repo_slug}.{self.domain_suffix}"

    async def force_trigger(self, job_id, working_dir, branch, prompt=""):
        self.calls.append("force_trigger")


class FakeWatcher:
    def __init__(self, deployment: Optional[Deployment] = None, error: Optional[Exception] = None):
        self.deployment = deployment or Deployment(uid="dpl_1", state="READY")
        self.error = error
        self.projects: List[ProjectRef] = []

    async def wait_until_ready(self, project: ProjectRef) -> Deployment:
        self.projects.append(project)
        if self.error:
            raise self.error
        return self.deployment


class RecordingStore:
    """Delegates to a real JobStore and remembers every status written."""

    def __init__(self, inner: JobStore):
        self.inner = inner
        self.statuses: List[str] = []

    async def create(self, *args, **kwargs):
        return await self.inner.create(*args, **kwargs)

    async def get(self, job_id):
        return await self.inner.get(job_id)

    async def update(self, job_id, **fields):
        job = await self.inner.update(job_id, **fields)
        if fields.get("status") is not None:
            self.statuses.append(job.status)
        return job


@pytest.fixture
def fakes():
    return SimpleNamespace(
        generator=FakeGenerator(),
        repos=FakeRepos(),
        deployer=FakeDeployer(),
        watcher=FakeWatcher(),
    )
