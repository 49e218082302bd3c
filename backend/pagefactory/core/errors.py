from typing import Optional


class PageFactoryError(Exception):
    """Base class for every error raised by the orchestrator."""


class ConfigurationError(PageFactoryError):
    pass


class PromptValidationError(PageFactoryError):
    pass


class DuplicateJobId(PageFactoryError):
    pass


class JobNotFound(PageFactoryError):
    pass


class InvalidStatusTransition(PageFactoryError):
    pass


class UpstreamAPIError(PageFactoryError):
    """Non-success response from GitHub or Vercel."""

    def __init__(self, service: str, status_code: int, body: str):
        self.service = service
        self.status_code = status_code
        self.body = body
        super().__init__(f"{service} API call failed: {status_code} - {body}")


class GitCommandError(PageFactoryError):
    def __init__(self, command: str, returncode: Optional[int], stdout: str = "", stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        detail = (stderr or stdout).strip()
        super().__init__(f"'{command}' exited with {returncode}: {detail}")


# Pipeline stage failures

class StageError(PageFactoryError):
    stage = "pipeline"


class GenerationFailed(StageError):
    stage = "generating_code"


class RepoProvisionFailed(StageError):
    stage = "pushing_code"

    def __init__(self, message: str, stdout: str = "", stderr: str = ""):
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(message)


class RepoCreateFailed(RepoProvisionFailed):
    stage = "creating_repo"


class ProjectCreateFailed(StageError):
    stage = "deploying"


class DomainBindFailed(StageError):
    stage = "deploying"


class DeployTriggerFailed(StageError):
    stage = "deploying"


class DeploymentFailed(StageError):
    stage = "deploying"

    def __init__(self, message: str, deployment_id: Optional[str] = None):
        self.deployment_id = deployment_id
        super().__init__(message)


class DeploymentTimeout(DeploymentFailed):
    pass
