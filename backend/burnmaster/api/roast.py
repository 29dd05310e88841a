"""Roast API router."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from burnmaster.models.roast import (
    FOCUS_LABELS,
    STYLE_LABELS,
    GeneratedRoast,
    OptionItem,
    RoastOptions,
    RoastSettings,
)
from burnmaster.services.history import GenerationInProgressError, RoastGate, RoastHistory
from burnmaster.services.roast import RoastPipeline
from burnmaster.services.text import GenerationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/roast", tags=["roast"])

GENERATION_FAILED_DETAIL = "The roast was too hot even for the AI. Try again."


def get_roast_pipeline(request: Request) -> RoastPipeline:
    """FastAPI dependency: retrieve RoastPipeline from app.state.

    Returns HTTP 503 if the pipeline was not initialized at startup
    (e.g. missing Gemini credentials).
    """
    pipeline: RoastPipeline | None = getattr(request.app.state, "roast_pipeline", None)
    if pipeline is None:
        raise HTTPException(
            status_code=503,
            detail="Roast generator unavailable. Service not initialized.",
        )
    return pipeline


def get_roast_history(request: Request) -> RoastHistory:
    """FastAPI dependency: the process-wide RoastHistory (created lazily)."""
    history: RoastHistory | None = getattr(request.app.state, "roast_history", None)
    if history is None:
        history = RoastHistory()
        request.app.state.roast_history = history
    return history


def get_roast_gate(request: Request) -> RoastGate:
    """FastAPI dependency: the process-wide one-in-flight guard (created lazily)."""
    gate: RoastGate | None = getattr(request.app.state, "roast_gate", None)
    if gate is None:
        gate = RoastGate()
        request.app.state.roast_gate = gate
    return gate


@router.post("", response_model=GeneratedRoast)
async def generate_roast(
    body: RoastSettings,
    pipeline: RoastPipeline = Depends(get_roast_pipeline),
    history: RoastHistory = Depends(get_roast_history),
    gate: RoastGate = Depends(get_roast_gate),
) -> GeneratedRoast:
    """Generate a roast and record it in history.

    Raises:
        HTTPException 409: Another roast is still being generated.
        HTTPException 503: Text generation failed; history is untouched.
        HTTPException 422: Validation error (handled by FastAPI automatically).
    """
    try:
        async with gate.hold():
            roast = await pipeline.generate(body)
    except GenerationInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except GenerationError as exc:
        logger.error(
            "generate_roast failed",
            exc_info=True,
            extra={"error_type": type(exc).__name__},
        )
        raise HTTPException(status_code=503, detail=GENERATION_FAILED_DETAIL) from exc

    history.add(roast)
    return roast


@router.get("/history", response_model=list[GeneratedRoast])
async def get_history(
    limit: int = 0,
    history: RoastHistory = Depends(get_roast_history),
) -> list[GeneratedRoast]:
    """Return recent roasts, newest first.

    Args:
        limit: Maximum number of roasts to return (0 = all retained).
    """
    return history.recent(limit)


@router.delete("/history", status_code=204)
async def clear_history(history: RoastHistory = Depends(get_roast_history)) -> Response:
    """Forget every roast in this session."""
    history.clear()
    return Response(status_code=204)


@router.get("/options", response_model=RoastOptions)
async def get_options() -> RoastOptions:
    """List styles and focuses with display labels, plus form defaults."""
    defaults = {
        name: field.default
        for name, field in RoastSettings.model_fields.items()
        if not field.is_required() and name != "image"
    }
    return RoastOptions(
        styles=[OptionItem(value=s.value, label=label) for s, label in STYLE_LABELS.items()],
        focuses=[OptionItem(value=f.value, label=label) for f, label in FOCUS_LABELS.items()],
        defaults=defaults,
    )
