from typing import Optional
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pagefactory.core.errors import JobNotFound, PromptValidationError
from pagefactory.core.logging import get_logger
from pagefactory.schemas.page import GenerateAccepted, GenerateRequest, PageStatus
from pagefactory.services.pipeline.naming import derive_repo_slug, new_job_id

logger = get_logger("pages_api")
router = APIRouter()

PLACEHOLDER_CODE = """// Please wait... AI is generating your code and deploying.
// This preview will update once code is generated.
// Your live URL will appear above this editor when deployment is complete.
// This process can take 1-3 minutes.
"""


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post("/generate-and-deploy", status_code=202, response_model=GenerateAccepted)
async def generate_and_deploy(request: Request, body: Optional[GenerateRequest] = None):
    prompt = (body.prompt if body else None) or ""
    if not prompt.strip():
        raise PromptValidationError("Prompt is required.")

    store = request.app.state.store
    job_id = new_job_id()
    repo_slug = derive_repo_slug(job_id)
    logger.info(f"[{job_id}] Initiating new generation for prompt: \"{prompt[:50]}...\"")

    try:
        await store.create(job_id, prompt, repo_slug)
    except Exception as e:
        logger.error(f"[{job_id}] Could not create job record: {e}")
        return _error(500, "Could not create project record in database.")

    # The pipeline outlives this request; the caller polls /status/{id}
    request.app.state.launcher.launch(job_id)

    return GenerateAccepted(
        id=job_id,
        message="Generation and deployment process initiated.",
        code=PLACEHOLDER_CODE,
    )


@router.get("/status/{job_id}", response_model=PageStatus, response_model_exclude_none=True)
async def get_status(job_id: str, request: Request):
    try:
        job = await request.app.state.store.get(job_id)
    except JobNotFound:
        return _error(404, "Page not found.")
    except Exception as e:
        logger.error(f"[{job_id}] Status fetch error: {e}")
        return _error(500, "Failed to retrieve status from database.")

    return PageStatus(
        id=job.id,
        status=job.status,
        url=job.result_url,
        message=job.failure_message,
        generated_code=job.generated_artifact,
    )
