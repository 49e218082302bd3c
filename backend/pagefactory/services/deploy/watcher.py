import asyncio
from typing import Optional
from tenacity import AsyncRetrying, RetryError, retry_if_result, stop_after_attempt, wait_fixed
import httpx
from pagefactory.core.errors import DeploymentFailed, DeploymentTimeout, UpstreamAPIError
from pagefactory.core.logging import get_logger
from pagefactory.services.deploy.vercel import Deployment, ProjectRef, VercelClient

logger = get_logger("deployment_watcher")


def _not_finished(deployment: Optional[Deployment]) -> bool:
    # An empty list is indexing lag, not a failure
    return deployment is None or not deployment.is_terminal


class DeploymentWatcher:
    def __init__(self, vercel: VercelClient, interval: float = 5.0, max_retries: int = 40, log_scope: str = ""):
        self.vercel = vercel
        self.interval = interval
        self.max_retries = max_retries
        self.log_scope = log_scope

    def inspect_url(self, project: ProjectRef, deployment_id: str) -> str:
        return f"https://vercel.com/{self.log_scope}/{project.name}/deployments/{deployment_id}"

    async def _latest(self, project: ProjectRef) -> Optional[Deployment]:
        try:
            deployments = await self.vercel.list_deployments(project.id)
        except (UpstreamAPIError, httpx.HTTPError) as e:
            raise DeploymentFailed(f"Could not read deployments for project {project.id}: {e}") from e
        if not deployments:
            logger.info(f"No deployments listed yet for project {project.id}")
            return None
        latest = deployments[0]
        logger.info(f"Latest deployment {latest.uid} for {project.id}: {latest.state}")
        return latest

    async def wait_until_ready(self, project: ProjectRef) -> Deployment:
        """
        Poll until the newest deployment reaches READY, ERROR or CANCELED,
        checking at most `max_retries` times.
        """
        seen = {}

        async def poll() -> Optional[Deployment]:
            deployment = await self._latest(project)
            if deployment is not None:
                seen["last"] = deployment
            return deployment

        await asyncio.sleep(self.interval)
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_fixed(self.interval),
            retry=retry_if_result(_not_finished),
        )
        try:
            deployment = await retrying(poll)
        except RetryError as e:
            last = seen.get("last")
            raise DeploymentTimeout(
                f"Deployment timed out after {self.max_retries} status checks"
                + (f" (last state {last.state}, deployment {last.uid})" if last else ""),
                deployment_id=last.uid if last else None,
            ) from e

        if deployment.state != "READY":
            url = self.inspect_url(project, deployment.uid)
            logger.error(f"Deployment {deployment.uid} FAILED, check logs at {url}")
            raise DeploymentFailed(
                f"Deployment {deployment.uid} failed with status {deployment.state}. See logs at {url}",
                deployment_id=deployment.uid,
            )
        return deployment
