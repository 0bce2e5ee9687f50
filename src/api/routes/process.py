"""Process endpoint: resolve a video, fetch its metadata and transcript."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, HTTPException

from src.api.models import ErrorResponse, ProcessRequest, ProcessResponse
from src.config import settings
from src.guide.errors import PipelineTimeoutError
from src.guide.pipeline import fetch_video_inputs
from src.guide.resolver import resolve_video_id
from src.guide.transcript import TranscriptAcquirer
from src.pipeline_config import PipelineConfig

logger = logging.getLogger(__name__)

router = APIRouter()


def get_transcript_acquirer() -> TranscriptAcquirer:
    return TranscriptAcquirer(preferred_language=settings.transcript_language)


@router.post(
    "/api/process",
    response_model=ProcessResponse,
    responses={code: {"model": ErrorResponse} for code in (400, 422, 500, 502, 504)},
)
async def process_video(request: ProcessRequest) -> ProcessResponse:
    """Return title, author, thumbnail and the annotated transcript for a URL.

    Metadata lookup never fails the request. Transcript exhaustion returns 502
    with a message pointing the user at manual mode.
    """
    if not request.url or not request.url.strip():
        raise HTTPException(status_code=400, detail="URL is required")

    video_id = resolve_video_id(request.url)
    acquirer = get_transcript_acquirer()

    config = PipelineConfig.from_settings(settings)
    try:
        metadata, transcript = await asyncio.wait_for(
            fetch_video_inputs(
                video_id,
                acquirer,
                request.manual_transcript,
                metadata_timeout=config.metadata_timeout_seconds,
            ),
            config.timeout_seconds,
        )
    except asyncio.TimeoutError as exc:
        logger.warning("Processing %s timed out after %ss", video_id, config.timeout_seconds)
        raise PipelineTimeoutError() from exc

    return ProcessResponse(
        title=metadata.title,
        author=metadata.author,
        thumbnail=metadata.thumbnail_url,
        transcript=transcript,
        video_id=video_id,
    )
