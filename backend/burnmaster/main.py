"""FastAPI application entry point."""
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from burnmaster.core.config import get_settings
from burnmaster.core.logging import setup_logging
from burnmaster.services.history import RoastGate, RoastHistory

# Setup logging
logger = setup_logging("main")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialize services at startup, clean up at shutdown."""
    app.state.roast_gate = RoastGate()
    app.state.roast_history = RoastHistory()
    try:
        from burnmaster.core.client import build_genai_client
        from burnmaster.services.caricature import CaricatureService
        from burnmaster.services.roast import RoastPipeline
        from burnmaster.services.text import RoastTextService

        settings = get_settings()
        app.state.roast_history = RoastHistory(limit=settings.history_limit)
        client = build_genai_client(settings)

        app.state.roast_pipeline = RoastPipeline(
            text_service=RoastTextService(
                client=client,
                model=settings.text_model,
                timeout_seconds=settings.request_timeout_seconds,
            ),
            caricature_service=CaricatureService(
                client=client,
                model=settings.image_model,
                timeout_seconds=settings.request_timeout_seconds,
            ),
        )
        logger.info("Services initialized successfully")
    except Exception as exc:
        logger.error(
            "Service initialization failed, running in degraded mode",
            exc_info=True,
            extra={"error_type": type(exc).__name__},
        )
        # Continue without the pipeline; POST /api/roast returns 503 until fixed

    yield
    app.state.roast_pipeline = None


# Create FastAPI app
app = FastAPI(
    title="Burnmaster Pro",
    description="Personalized insult laboratory backed by Gemini",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configuration
try:
    _frontend_port = get_settings().frontend_port
except ValueError:
    # Credentials missing: lifespan logs the failure, the app still serves /health
    _frontend_port = 3000
app.add_middleware(
    CORSMiddleware,
    allow_origins=[f"http://localhost:{_frontend_port}"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
from burnmaster.api.roast import router as roast_router  # noqa: E402

app.include_router(roast_router)


@app.get("/health")
async def health_check(request: Request) -> dict:
    """Health check endpoint.

    Reports initialization status of the roast pipeline.
    Always returns HTTP 200; check `services.roast_pipeline` for actual status.
    """
    pipeline = getattr(request.app.state, "roast_pipeline", None)

    logger.info("Health check requested")
    return {
        "status": "ok",
        "version": app.version,
        "services": {
            "roast_pipeline": "ok" if pipeline is not None else "unavailable",
        },
    }
