from typing import Any, Dict, Optional
import httpx
from pagefactory.core.errors import UpstreamAPIError
from pagefactory.core.logging import get_logger

logger = get_logger("github")


class GitHubClient:
    def __init__(
        self,
        username: str,
        token: str,
        api_url: str = "https://api.github.com",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.username = username
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
        self.headers = {
            "Authorization": f"token {token}",
            "Accept": "application/vnd.github.v3+json",
            # GitHub rejects requests without a User-Agent
            "User-Agent": username,
        }

    async def create_repository(self, name: str, description: str, private: bool = True) -> Dict[str, Any]:
        """Create a blank repository (no README, license or .gitignore) for the user."""
        payload = {
            "name": name,
            "description": description,
            "private": private,
            "auto_init": False,
        }
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(f"{self.api_url}/user/repos", headers=self.headers, json=payload)

        if response.status_code not in (200, 201):
            logger.error(f"GitHub repo creation failed: {response.status_code} - {response.text}")
            raise UpstreamAPIError("GitHub", response.status_code, response.text)

        logger.info(f"GitHub repository created: {self.username}/{name}")
        return response.json()
