"""Transcript acquisition: manual override, then a two-tier caption fallback ladder."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from youtube_transcript_api import YouTubeTranscriptApi

from src.guide.errors import TranscriptError
from src.guide.models import TranscriptLine, render_transcript

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CaptionItem:
    """One caption cue as delivered by a caption provider."""

    text: str
    start: float


class CaptionProvider(Protocol):
    """Anything that can fetch captions for a video.

    ``language=None`` means "whatever the provider offers by default".
    Implementations raise on failure.
    """

    def fetch(self, video_id: str, language: str | None) -> list[CaptionItem]: ...


class YouTubeCaptionProvider:
    """Caption provider backed by ``youtube-transcript-api``."""

    def __init__(self, api: YouTubeTranscriptApi | None = None) -> None:
        self._api = api or YouTubeTranscriptApi()

    def fetch(self, video_id: str, language: str | None) -> list[CaptionItem]:
        if language:
            snippets: Iterable = self._api.fetch(video_id, languages=[language])
        else:
            # First listed track: manual tracks are listed before generated ones
            track = next(iter(self._api.list(video_id)), None)
            if track is None:
                raise LookupError(f"No caption tracks listed for {video_id}")
            snippets = track.fetch()
        return [CaptionItem(text=s.text, start=s.start) for s in snippets]


def to_transcript_lines(items: Iterable[CaptionItem]) -> list[TranscriptLine]:
    """Map caption items to lines with whole-second offsets, keeping caption order."""
    lines: list[TranscriptLine] = []
    for item in items:
        text = " ".join(item.text.split())
        if not text:
            continue
        lines.append(TranscriptLine(offset_seconds=max(int(item.start), 0), text=text))
    return lines


@dataclass(frozen=True)
class TranscriptAttempt:
    """Tagged result of a single rung of the fallback ladder."""

    strategy: str
    lines: tuple[TranscriptLine, ...] = ()
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class CaptionStrategy:
    """Fetch captions from a provider, optionally pinned to one language."""

    def __init__(self, provider: CaptionProvider, language: str | None = None) -> None:
        self.provider = provider
        self.language = language

    @property
    def name(self) -> str:
        return f"captions[{self.language or 'default'}]"

    def attempt(self, video_id: str) -> TranscriptAttempt:
        try:
            items = self.provider.fetch(video_id, self.language)
        except Exception as exc:
            return TranscriptAttempt(strategy=self.name, error=f"{type(exc).__name__}: {exc}")

        lines = to_transcript_lines(items)
        if not lines:
            return TranscriptAttempt(strategy=self.name, error="no caption lines returned")
        return TranscriptAttempt(strategy=self.name, lines=tuple(lines))


class TranscriptAcquirer:
    """Obtain the annotated transcript blob for a video.

    Policy:

    1. A non-empty manual override is returned verbatim; nothing remote is called.
    2. Captions in the preferred language.
    3. Captions in the provider's default language.
    4. ``TranscriptError`` telling the user to switch to manual mode.
    """

    def __init__(
        self,
        provider: CaptionProvider | None = None,
        preferred_language: str = "en",
    ) -> None:
        provider = provider or YouTubeCaptionProvider()
        self.strategies: list[CaptionStrategy] = [
            CaptionStrategy(provider, preferred_language),
            CaptionStrategy(provider, None),
        ]

    def fetch_remote(self, video_id: str) -> str:
        """Walk the ladder and return the first successful transcript blob."""
        attempts: list[TranscriptAttempt] = []
        for strategy in self.strategies:
            logger.info("Fetching transcript for %s via %s", video_id, strategy.name)
            attempt = strategy.attempt(video_id)
            attempts.append(attempt)
            if attempt.ok:
                logger.info(
                    "Transcript fetched for %s via %s (%d lines)",
                    video_id,
                    attempt.strategy,
                    len(attempt.lines),
                )
                return render_transcript(list(attempt.lines))
            logger.warning(
                "Transcript attempt %s failed for %s: %s",
                attempt.strategy,
                video_id,
                attempt.error,
            )

        logger.error("All transcript attempts failed for %s (%d tried)", video_id, len(attempts))
        raise TranscriptError()

    async def acquire(self, video_id: str, manual_override: str | None = None) -> str:
        if manual_override:
            logger.info("Using manual transcript provided by user for %s", video_id)
            return manual_override
        # The caption library is blocking; keep it off the event loop.
        return await asyncio.to_thread(self.fetch_remote, video_id)


async def acquire_transcript(
    video_id: str,
    manual_override: str | None = None,
    *,
    provider: CaptionProvider | None = None,
    preferred_language: str = "en",
) -> str:
    """Convenience wrapper around ``TranscriptAcquirer.acquire``."""
    acquirer = TranscriptAcquirer(provider, preferred_language)
    return await acquirer.acquire(video_id, manual_override)
