import os
import re
import shutil
import httpx
from dataclasses import dataclass, field
from pagefactory.core.errors import GitCommandError, RepoCreateFailed, RepoProvisionFailed, UpstreamAPIError
from pagefactory.core.logging import get_logger
from pagefactory.services.repo.git import GitRunner, authenticated_url
from pagefactory.services.repo.github import GitHubClient

logger = get_logger("repo_provisioner")

INITIAL_COMMIT_MESSAGE = "feat: AI generated initial landing page code"


@dataclass(frozen=True)
class RemoteRepoRef:
    name: str
    full_name: str
    html_url: str
    branch: str
    working_dir: str = ""
    push_url: str = field(default="", repr=False)


def repo_description(prompt: str) -> str:
    summary = re.sub(r"\s+", " ", prompt[:100]).strip()
    return f'AI Generated Landing Page for prompt: "{summary}"'


class RepositoryProvisioner:
    def __init__(self, settings, github: GitHubClient, git: GitRunner):
        self.settings = settings
        self.github = github
        self.git = git

    def remote_url(self, repo_slug: str) -> str:
        host = self.settings.GITHUB_GIT_HOST.rstrip("/")
        url = f"{host}/{self.settings.GITHUB_USERNAME}/{repo_slug}.git"
        return authenticated_url(url, self.settings.GITHUB_USERNAME, self.settings.GITHUB_PAT)

    def boilerplate_url(self) -> str:
        return authenticated_url(
            self.settings.BOILERPLATE_REPO_URL, self.settings.GITHUB_USERNAME, self.settings.GITHUB_PAT
        )

    async def create_remote(self, repo_slug: str, prompt: str) -> RemoteRepoRef:
        try:
            data = await self.github.create_repository(repo_slug, repo_description(prompt), private=True)
        except UpstreamAPIError as e:
            raise RepoCreateFailed(f"GitHub repo creation failed: {e.status_code} - {e.body}") from e
        except httpx.HTTPError as e:
            raise RepoCreateFailed(f"Failed to create GitHub repo: {e}") from e

        owner = self.settings.GITHUB_USERNAME
        return RemoteRepoRef(
            name=repo_slug,
            full_name=data.get("full_name") or f"{owner}/{repo_slug}",
            html_url=data.get("html_url") or f"https://github.com/{owner}/{repo_slug}",
            branch=self.settings.BOILERPLATE_REPO_BRANCH,
        )

    async def push_initial(self, job_id: str, repo: RemoteRepoRef, artifact: str, workspace: str) -> RemoteRepoRef:
        """
        Assemble boilerplate + artifact as a brand-new single-commit history in
        `workspace/<repo name>` and push it to the new remote.
        """
        repo_dir = os.path.join(workspace, repo.name)
        branch = repo.branch
        push_url = self.remote_url(repo.name)
        try:
            if os.path.exists(repo_dir):
                shutil.rmtree(repo_dir)

            logger.info(f"[{job_id}] Cloning boilerplate ({branch}) into {repo_dir}")
            await self.git.clone(self.boilerplate_url(), repo_dir, branch)

            # Keep the boilerplate contents, not its history
            shutil.rmtree(os.path.join(repo_dir, ".git"), ignore_errors=True)

            await self.git.init(repo_dir)
            await self.git.set_identity(repo_dir, self.settings.GITHUB_USERNAME, self.settings.git_commit_email)

            entrypoint = os.path.join(repo_dir, self.settings.BOILERPLATE_ENTRYPOINT)
            os.makedirs(os.path.dirname(entrypoint), exist_ok=True)
            with open(entrypoint, "w", encoding="utf-8") as f:
                f.write(artifact)
            logger.info(f"[{job_id}] Injected generated code into {self.settings.BOILERPLATE_ENTRYPOINT}")

            await self.git.add(repo_dir)
            await self.git.use_branch(repo_dir, branch)
            await self.git.commit(repo_dir, INITIAL_COMMIT_MESSAGE)

            await self.git.set_remote(repo_dir, "origin", push_url)
            await self.git.push(repo_dir, "origin", branch)
            logger.info(f"[{job_id}] Pushed initial commit to {repo.full_name}")
        except GitCommandError as e:
            logger.error(f"[{job_id}] Git stdout (detail): {e.stdout}")
            logger.error(f"[{job_id}] Git stderr (detail): {e.stderr}")
            raise RepoProvisionFailed(f"Failed to setup repo and push code: {e}", e.stdout, e.stderr) from e
        except OSError as e:
            raise RepoProvisionFailed(f"Failed to setup repo and push code: {e}") from e

        return RemoteRepoRef(
            name=repo.name,
            full_name=repo.full_name,
            html_url=repo.html_url,
            branch=branch,
            working_dir=repo_dir,
            push_url=push_url,
        )

    async def provision(self, job_id: str, repo_slug: str, artifact: str, workspace: str, prompt: str = "") -> RemoteRepoRef:
        repo = await self.create_remote(repo_slug, prompt)
        return await self.push_initial(job_id, repo, artifact, workspace)
