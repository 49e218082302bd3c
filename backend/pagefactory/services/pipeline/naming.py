import uuid

SLUG_PREFIX = "ai-lp-"


def new_job_id() -> str:
    return str(uuid.uuid4())


def derive_repo_slug(job_id: str) -> str:
    """Repository, hosting-project and subdomain name for a job; fixed for its lifetime."""
    return SLUG_PREFIX + job_id.replace("-", "")[:8].lower()
