from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import json
import httpx
from pagefactory.core.errors import UpstreamAPIError
from pagefactory.core.logging import get_logger

logger = get_logger("vercel")

TERMINAL_STATES = frozenset({"READY", "ERROR", "CANCELED"})


@dataclass(frozen=True)
class ProjectRef:
    id: str
    name: str


@dataclass(frozen=True)
class Deployment:
    uid: str
    state: str
    url: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Deployment":
        return cls(
            uid=data.get("uid") or data.get("id") or "",
            state=(data.get("state") or data.get("readyState") or "UNKNOWN").upper(),
            url=data.get("url"),
        )


def _truncate(payload: Any, limit: int = 200) -> str:
    text = payload if isinstance(payload, str) else json.dumps(payload)
    return text if len(text) <= limit else text[:limit] + "..."


class VercelClient:
    def __init__(
        self,
        token: str,
        team_id: Optional[str] = None,
        api_url: str = "https://api.vercel.com",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.team_id = team_id
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    async def _request(self, method: str, path: str, body: Optional[Dict[str, Any]] = None, params: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        params = dict(params or {})
        if self.team_id:
            params["teamId"] = self.team_id

        logger.debug(f"[Vercel API Call] {method} {path}" + (f" body={_truncate(body)}" if body else ""))
        async with httpx.AsyncClient(base_url=self.api_url, timeout=self.timeout, transport=self.transport) as client:
            response = await client.request(method, path, headers=self.headers, json=body, params=params)

        if response.is_error:
            logger.error(f"Vercel API Error ({path}): {response.status_code} - {response.text}")
            raise UpstreamAPIError("Vercel", response.status_code, response.text)

        data = response.json()
        logger.debug(f"[Vercel API Call] Success response: {_truncate(data)}")
        return data

    async def create_project(self, name: str, git_repo: str, build: Dict[str, str]) -> ProjectRef:
        body = {
            "name": name,
            "gitRepository": {"type": "github", "repo": git_repo},
            **build,
        }
        data = await self._request("POST", "/v9/projects", body)
        return ProjectRef(id=data["id"], name=data.get("name", name))

    async def add_domain(self, project_id: str, domain: str) -> Dict[str, Any]:
        return await self._request("POST", f"/v9/projects/{project_id}/domains", {"name": domain})

    async def list_deployments(self, project_id: str) -> List[Deployment]:
        """Deployments for the project, most recent first."""
        data = await self._request("GET", "/v6/deployments", params={"projectId": project_id})
        return [Deployment.from_api(d) for d in data.get("deployments", [])]
