from functools import lru_cache
from typing import Optional
import tempfile
import os

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from pagefactory.core.errors import ConfigurationError


class Settings(BaseSettings):
    PROJECT_NAME: str = "AI Page Factory"
    PORT: int = 8080

    # Caller origin allowed by CORS
    FRONTEND_URL: str

    # Database
    DATABASE_URL: str

    # LLM
    LLM_API_KEY: str
    LLM_MODEL: str = "glm-4-plus"
    LLM_TEMPERATURE: float = 0.3
    LLM_MAX_TOKENS: int = 10000
    LLM_TIMEOUT: int = 180

    # Source host
    GITHUB_USERNAME: str
    GITHUB_PAT: str
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_GIT_HOST: str = "https://github.com"

    # Hosting platform
    VERCEL_API_TOKEN: str
    VERCEL_DOMAIN: str
    VERCEL_TEAM_ID: Optional[str] = None
    VERCEL_API_URL: str = "https://api.vercel.com"

    # Boilerplate contract (Next.js App Router)
    BOILERPLATE_REPO_URL: str
    BOILERPLATE_REPO_BRANCH: str = "main"
    BOILERPLATE_ENTRYPOINT: str = "src/app/page.tsx"
    HOSTING_FRAMEWORK: str = "nextjs"
    HOSTING_INSTALL_COMMAND: str = "npm install"
    HOSTING_BUILD_COMMAND: str = "npm run build"
    HOSTING_OUTPUT_DIRECTORY: str = ".next"

    # Pipeline pacing
    WORKSPACE_ROOT: str = os.path.join(tempfile.gettempdir(), "pagefactory")
    FORCE_TRIGGER_DELAY_SECONDS: float = 5.0
    DEPLOYMENT_POLL_INTERVAL_SECONDS: float = 5.0
    DEPLOYMENT_POLL_MAX_RETRIES: int = 40
    STAGE_TIMEOUT_SECONDS: float = 600.0
    GIT_TIMEOUT_SECONDS: float = 180.0
    HTTP_TIMEOUT_SECONDS: float = 30.0

    # Execution: "local" runs jobs as asyncio tasks, "celery" hands them to a worker
    PIPELINE_EXECUTOR: str = "local"
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/0"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = "logs/app.log"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        frozen=True,
    )

    @property
    def git_commit_email(self) -> str:
        return f"{self.GITHUB_USERNAME}@users.noreply.github.com"


def load_settings(**overrides) -> Settings:
    """
    Build settings from the environment (and .env), failing fast with the
    full list of missing required names.
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        missing = [
            str(err["loc"][0]) for err in e.errors() if err.get("type") == "missing"
        ]
        if missing:
            raise ConfigurationError(
                "Missing required configuration: " + ", ".join(missing)
            ) from e
        raise ConfigurationError(f"Invalid configuration: {e}") from e


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
