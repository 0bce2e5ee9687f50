"""End-to-end guide pipeline: resolve -> (metadata | transcript) -> synthesize -> enrich."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

import httpx

from src.config import Settings
from src.guide.enricher import enrich_steps
from src.guide.errors import GuideError, PipelineCancelledError, PipelineTimeoutError
from src.guide.metadata import fetch_metadata
from src.guide.models import GuideData, VideoMetadata
from src.guide.resolver import resolve_video_id
from src.guide.synthesizer import GuideSynthesizer
from src.guide.transcript import CaptionProvider, TranscriptAcquirer
from src.pipeline_config import PipelineConfig

logger = logging.getLogger(__name__)


class PipelineStage(str, Enum):
    """States of a single guide-generation run."""

    IDLE = "idle"
    RESOLVING = "resolving"
    FETCHING_TRANSCRIPT = "fetching_transcript"
    SYNTHESIZING = "synthesizing"
    ENRICHING = "enriching"
    READY = "ready"
    FAILED = "failed"


STAGE_PROGRESS: dict[PipelineStage, int] = {
    PipelineStage.IDLE: 0,
    PipelineStage.RESOLVING: 5,
    PipelineStage.FETCHING_TRANSCRIPT: 10,
    PipelineStage.SYNTHESIZING: 50,
    PipelineStage.ENRICHING: 90,
    PipelineStage.READY: 100,
}

STAGE_STATUS: dict[PipelineStage, str] = {
    PipelineStage.IDLE: "",
    PipelineStage.RESOLVING: "Resolving video URL...",
    PipelineStage.FETCHING_TRANSCRIPT: "Analyzing video content...",
    PipelineStage.SYNTHESIZING: "AI is generating your guide steps...",
    PipelineStage.ENRICHING: "Adding images and video links...",
    PipelineStage.READY: "Guide generated!",
}

_TRANSITIONS: dict[PipelineStage, frozenset[PipelineStage]] = {
    PipelineStage.IDLE: frozenset({PipelineStage.RESOLVING}),
    PipelineStage.RESOLVING: frozenset({PipelineStage.FETCHING_TRANSCRIPT, PipelineStage.FAILED}),
    PipelineStage.FETCHING_TRANSCRIPT: frozenset({PipelineStage.SYNTHESIZING, PipelineStage.FAILED}),
    PipelineStage.SYNTHESIZING: frozenset({PipelineStage.ENRICHING, PipelineStage.FAILED}),
    PipelineStage.ENRICHING: frozenset({PipelineStage.READY, PipelineStage.FAILED}),
    PipelineStage.READY: frozenset(),
    PipelineStage.FAILED: frozenset(),
}


@dataclass(frozen=True)
class ProgressUpdate:
    stage: PipelineStage
    progress: int
    message: str


ProgressCallback = Callable[[ProgressUpdate], None]


class PipelineTracker:
    """Finite state machine for one run, reporting coarse progress.

    Progress never decreases while a run is in flight; a failure keeps the last
    percentage and carries the user-facing error message. ``reset()`` discards
    the run entirely and returns to IDLE at 0%.
    """

    def __init__(self, on_progress: ProgressCallback | None = None) -> None:
        self.on_progress = on_progress
        self.stage = PipelineStage.IDLE
        self.progress = 0
        self.error: str | None = None

    def _transition(self, stage: PipelineStage) -> None:
        if stage not in _TRANSITIONS[self.stage]:
            raise RuntimeError(f"Invalid pipeline transition {self.stage.value} -> {stage.value}")
        self.stage = stage

    def _emit(self, message: str) -> None:
        if self.on_progress is not None:
            self.on_progress(ProgressUpdate(self.stage, self.progress, message))

    def advance(self, stage: PipelineStage) -> None:
        self._transition(stage)
        self.progress = max(self.progress, STAGE_PROGRESS[stage])
        self._emit(STAGE_STATUS[stage])

    def fail(self, message: str) -> None:
        self._transition(PipelineStage.FAILED)
        self.error = message
        self._emit(message)

    def reset(self) -> None:
        self.stage = PipelineStage.IDLE
        self.progress = 0
        self.error = None
        self._emit(STAGE_STATUS[PipelineStage.IDLE])


def _check_cancelled(cancel_event: asyncio.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise PipelineCancelledError()


async def fetch_video_inputs(
    video_id: str,
    acquirer: TranscriptAcquirer,
    manual_transcript: str | None = None,
    *,
    http_client: httpx.AsyncClient | None = None,
    metadata_timeout: float = 10.0,
) -> tuple[VideoMetadata, str]:
    """Fetch metadata and the transcript concurrently.

    The metadata lookup never fails on its own. If the transcript fails or
    the caller is cancelled, the lookup is cancelled and awaited before the
    error propagates, so no request outlives the call.
    """
    metadata_task = asyncio.create_task(
        fetch_metadata(video_id, client=http_client, timeout=metadata_timeout)
    )
    try:
        transcript = await acquirer.acquire(video_id, manual_transcript)
    except BaseException:
        metadata_task.cancel()
        await asyncio.wait({metadata_task})
        raise
    return await metadata_task, transcript


class GuidePipeline:
    """Orchestrates one all-or-nothing guide-generation run.

    Every intermediate value (ID, metadata, transcript, raw steps) is local
    to a call of ``run``; a failed run never yields a partial ``GuideData``.
    """

    def __init__(
        self,
        synthesizer: GuideSynthesizer,
        acquirer: TranscriptAcquirer | None = None,
        config: PipelineConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or PipelineConfig()
        self.synthesizer = synthesizer
        self.acquirer = acquirer or TranscriptAcquirer(
            preferred_language=self.config.preferred_language
        )
        self.http_client = http_client

    async def _run_stages(
        self,
        url: str,
        manual_transcript: str | None,
        tracker: PipelineTracker,
        cancel_event: asyncio.Event | None,
    ) -> GuideData:
        # 1. Resolve (purely syntactic, before any network call)
        tracker.advance(PipelineStage.RESOLVING)
        video_id = resolve_video_id(url)

        # 2. Metadata and transcript are independent; metadata never fails
        _check_cancelled(cancel_event)
        tracker.advance(PipelineStage.FETCHING_TRANSCRIPT)
        metadata, transcript = await fetch_video_inputs(
            video_id,
            self.acquirer,
            manual_transcript,
            http_client=self.http_client,
            metadata_timeout=self.config.metadata_timeout_seconds,
        )

        # 3. Synthesize
        _check_cancelled(cancel_event)
        tracker.advance(PipelineStage.SYNTHESIZING)
        candidates = await self.synthesizer.synthesize(transcript)

        # 4. Enrich
        _check_cancelled(cancel_event)
        tracker.advance(PipelineStage.ENRICHING)
        steps = enrich_steps(video_id, candidates)

        return GuideData(
            title=metadata.title,
            author=metadata.author,
            thumbnail_url=metadata.thumbnail_url,
            video_id=video_id,
            steps=steps,
        )

    async def run(
        self,
        url: str,
        manual_transcript: str | None = None,
        *,
        tracker: PipelineTracker | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> GuideData:
        """Run the full pipeline for a URL.

        Args:
            url: Any supported YouTube URL form.
            manual_transcript: Optional user-pasted transcript; bypasses caption fetching.
            tracker: Receives stage transitions and progress; a fresh one is used if omitted.
            cancel_event: Checked before every network-bound stage.

        Raises:
            GuideError: Exactly one fatal error, carrying the user-facing message.
        """
        tracker = tracker or PipelineTracker()
        timeout = self.config.timeout_seconds
        try:
            stages = self._run_stages(url, manual_transcript, tracker, cancel_event)
            if timeout:
                guide = await asyncio.wait_for(stages, timeout)
            else:
                guide = await stages
        except asyncio.TimeoutError as exc:
            error = PipelineTimeoutError()
            logger.warning("Guide generation for %r timed out after %ss", url, timeout)
            tracker.fail(error.message)
            raise error from exc
        except GuideError as exc:
            logger.warning("Guide generation for %r failed: %s", url, exc.message)
            tracker.fail(exc.message)
            raise
        except asyncio.CancelledError:
            tracker.fail(PipelineCancelledError.default_message)
            raise
        except Exception:
            logger.exception("Unexpected error while generating guide for %r", url)
            tracker.fail(GuideError.default_message)
            raise

        tracker.advance(PipelineStage.READY)
        logger.info("Generated guide for %s with %d steps", guide.video_id, len(guide.steps))
        return guide


def build_pipeline(
    settings: Settings,
    *,
    caption_provider: CaptionProvider | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> GuidePipeline:
    """Wire a pipeline from application settings.

    This is the one place the Gemini key is read from configuration; it is
    then passed explicitly into the synthesizer.
    """
    config = PipelineConfig.from_settings(settings)
    synthesizer = GuideSynthesizer(
        api_key=settings.gemini_api_key,
        model=settings.gemini_model,
        validation=config.step_validation,
    )
    acquirer = TranscriptAcquirer(caption_provider, preferred_language=config.preferred_language)
    return GuidePipeline(synthesizer, acquirer, config, http_client)


async def run_pipeline(
    url: str,
    manual_transcript: str | None = None,
    *,
    synthesizer: GuideSynthesizer,
    config: PipelineConfig | None = None,
    caption_provider: CaptionProvider | None = None,
    on_progress: ProgressCallback | None = None,
    cancel_event: asyncio.Event | None = None,
) -> GuideData:
    """Functional entry point: build a one-off pipeline and run it."""
    config = config or PipelineConfig()
    acquirer = TranscriptAcquirer(caption_provider, preferred_language=config.preferred_language)
    pipeline = GuidePipeline(synthesizer, acquirer, config)
    return await pipeline.run(
        url,
        manual_transcript,
        tracker=PipelineTracker(on_progress),
        cancel_event=cancel_event,
    )
