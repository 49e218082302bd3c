from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pagefactory.api.api import api_router
from pagefactory.core.config import Settings, get_settings
from pagefactory.core.errors import PromptValidationError
from pagefactory.core.logging import get_logger, setup_logging
from pagefactory.services.jobs.store import JobStore
from pagefactory.services.pipeline.factory import build_coordinator
from pagefactory.services.pipeline.launcher import build_launcher

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await app.state.store.init()
    logger.info("Orchestrator ready")
    yield
    await app.state.launcher.wait_idle()
    await app.state.store.dispose()


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[JobStore] = None,
    coordinator=None,
    launcher=None,
) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)

    store = store or JobStore.from_url(settings.DATABASE_URL)
    if launcher is None:
        coordinator = coordinator or build_coordinator(settings, store)
        launcher = build_launcher(settings, coordinator)

    app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.launcher = launcher

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL.strip()],
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )
    app.include_router(api_router)

    @app.exception_handler(PromptValidationError)
    async def prompt_validation_handler(request: Request, exc: PromptValidationError):
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.get("/", response_class=PlainTextResponse)
    def root():
        return "AI Page Factory orchestrator is running!"

    logger.info(f"Orchestrator will allow CORS from: '{settings.FRONTEND_URL.strip()}'")
    return app


if __name__ == "__main__":
    import sys
    import uvicorn
    from pagefactory.core.errors import ConfigurationError

    try:
        application = create_app()
    except ConfigurationError as e:
        print(f"CRITICAL ERROR: {e}", file=sys.stderr)
        sys.exit(1)
    uvicorn.run(application, host="0.0.0.0", port=application.state.settings.PORT)
