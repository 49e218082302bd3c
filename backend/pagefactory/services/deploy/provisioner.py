import asyncio
import os
from datetime import datetime, timezone
import httpx
from jinja2 import Environment, FileSystemLoader
from pagefactory.core.errors import (
    DeployTriggerFailed,
    DomainBindFailed,
    GitCommandError,
    ProjectCreateFailed,
    UpstreamAPIError,
)
from pagefactory.core.logging import get_logger
from pagefactory.services.deploy.vercel import ProjectRef, VercelClient
from pagefactory.services.repo.git import GitRunner

logger = get_logger("deploy_provisioner")

TRIGGER_COMMIT_MESSAGE = "chore: Trigger deployment with README update"


class DeploymentProvisioner:
    def __init__(self, settings, vercel: VercelClient, git: GitRunner):
        self.settings = settings
        self.vercel = vercel
        self.git = git
        template_dir = os.path.join(os.path.dirname(__file__), 'templates')
        self.env = Environment(loader=FileSystemLoader(template_dir), keep_trailing_newline=True)

    def domain_for(self, repo_slug: str) -> str:
        return f"{repo_slug}.{self.settings.VERCEL_DOMAIN}"

    def build_config(self) -> dict:
        return {
            "framework": self.settings.HOSTING_FRAMEWORK,
            "installCommand": self.settings.HOSTING_INSTALL_COMMAND,
            "buildCommand": self.settings.HOSTING_BUILD_COMMAND,
            "outputDirectory": self.settings.HOSTING_OUTPUT_DIRECTORY,
        }

    async def create_project(self, repo_slug: str) -> ProjectRef:
        git_repo = f"{self.settings.GITHUB_USERNAME}/{repo_slug}"
        try:
            project = await self.vercel.create_project(repo_slug, git_repo, self.build_config())
        except (UpstreamAPIError, httpx.HTTPError, KeyError) as e:
            raise ProjectCreateFailed(f"Vercel project creation failed: {e}") from e
        logger.info(f"Vercel project created with ID: {project.id}")
        return project

    async def bind_domain(self, project: ProjectRef, repo_slug: str) -> str:
        domain = self.domain_for(repo_slug)
        try:
            await self.vercel.add_domain(project.id, domain)
        except (UpstreamAPIError, httpx.HTTPError) as e:
            raise DomainBindFailed(f"Adding domain {domain} failed: {e}") from e
        logger.info(f"Added custom domain {domain} to project {project.id}")
        return domain

    def render_marker(self, job_id: str, prompt: str = "") -> str:
        template = self.env.get_template('README.md.j2')
        return template.render(
            job_id=job_id,
            prompt=prompt,
            generated_at=datetime.now(timezone.utc).isoformat(timespec="seconds"),
        )

    async def force_trigger(self, job_id: str, working_dir: str, branch: str, prompt: str = "") -> None:
        """
        Push one more commit so the platform's git webhook fires; project
        creation alone does not always start a build.
        """
        # Give the platform a moment to register the repository before the push
        await asyncio.sleep(self.settings.FORCE_TRIGGER_DELAY_SECONDS)

        readme_path = os.path.join(working_dir, "README.md")
        try:
            with open(readme_path, "w", encoding="utf-8") as f:
                f.write(self.render_marker(job_id, prompt))
            await self.git.add(working_dir, ["README.md"])
            await self.git.commit(working_dir, TRIGGER_COMMIT_MESSAGE)
            await self.git.push(working_dir, "origin", branch)
        except GitCommandError as e:
            raise DeployTriggerFailed(f"Trigger commit push failed: {e}") from e
        except OSError as e:
            raise DeployTriggerFailed(f"Could not write trigger marker: {e}") from e
        logger.info(f"[{job_id}] Pushed README update to trigger a build")
