"""Guide endpoints: run the full pipeline and export a guide to PDF."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from src.api.models import ErrorResponse, GuideResponse, ProcessRequest
from src.config import settings
from src.export.document import export_document
from src.export.render import GuideView, load_thumbnail
from src.guide.enricher import step_image_url
from src.guide.pipeline import GuidePipeline, PipelineTracker, ProgressUpdate, build_pipeline

logger = logging.getLogger(__name__)

router = APIRouter()


def get_pipeline() -> GuidePipeline:
    """Build a pipeline per request; returns 501 when Gemini is not configured."""
    if not settings.gemini_api_key:
        raise HTTPException(
            status_code=501,
            detail="Guide generation requires GEMINI_API_KEY, which is not configured.",
        )
    return build_pipeline(settings)


def _log_progress(update: ProgressUpdate) -> None:
    logger.info("[%3d%%] %s: %s", update.progress, update.stage.value, update.message)


@router.post(
    "/api/guides",
    response_model=GuideResponse,
    responses={code: {"model": ErrorResponse} for code in (400, 422, 500, 501, 502, 504)},
)
async def create_guide(request: ProcessRequest) -> GuideResponse:
    """Generate a complete, enriched step-by-step guide for a video.

    All-or-nothing: any fatal stage returns a single error message and no guide.
    """
    if not request.url or not request.url.strip():
        raise HTTPException(status_code=400, detail="URL is required")

    pipeline = get_pipeline()
    guide = await pipeline.run(
        request.url,
        request.manual_transcript,
        tracker=PipelineTracker(on_progress=_log_progress),
    )
    return GuideResponse.from_guide(guide)


@router.post("/api/guides/export")
async def export_guide(body: GuideResponse) -> Response:
    """Render a guide and return it as a single-page PDF attachment."""
    guide = body.to_guide()

    thumbnail = None
    if guide.steps:
        thumbnail = await load_thumbnail(step_image_url(guide.video_id))

    view = GuideView(guide, thumbnail)
    # Rasterizing and PDF encoding are CPU-bound; keep them off the event loop.
    document = await asyncio.to_thread(export_document, view, guide.title, settings.export_scale)

    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={"Content-Disposition": f'attachment; filename="{document.filename}"'},
    )
