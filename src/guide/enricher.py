"""Deterministic media links for guide steps. No I/O."""

from __future__ import annotations

from src.guide.models import GuideStep, StepCandidate


def step_image_url(video_id: str) -> str:
    # Same image for every step: frames are never extracted
    return f"https://img.youtube.com/vi/{video_id}/hqdefault.jpg"


def step_video_url(video_id: str, timestamp: int) -> str:
    return f"https://www.youtube.com/watch?v={video_id}&t={timestamp}s"


def enrich_step(video_id: str, candidate: StepCandidate) -> GuideStep:
    """Attach the thumbnail and deep-linked video URL to a step candidate."""
    return GuideStep(
        title=candidate.title,
        description=candidate.description,
        timestamp_seconds=candidate.timestamp,
        image_url=step_image_url(video_id),
        video_url=step_video_url(video_id, candidate.timestamp),
    )


def enrich_steps(video_id: str, candidates: list[StepCandidate]) -> tuple[GuideStep, ...]:
    return tuple(enrich_step(video_id, c) for c in candidates)
