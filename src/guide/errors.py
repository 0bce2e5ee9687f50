"""Fatal error taxonomy for the guide pipeline.

Each error carries the single human-readable message shown to the caller.
Metadata failures have no error type here: they never abort a run.
"""

from __future__ import annotations


class GuideError(Exception):
    """Base class for errors that abort a guide-generation run."""

    default_message = "Failed to process video"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ResolutionError(GuideError):
    """The URL could not be mapped to an 11-character video identifier."""

    default_message = "Invalid YouTube URL"


class TranscriptError(GuideError):
    """Every transcript source was exhausted."""

    default_message = (
        "Could not fetch transcript for this video. Please try 'Manual Script' mode "
        "and paste the transcript yourself."
    )


class SynthesisError(GuideError):
    """The model call failed or its output could not be parsed into steps."""

    default_message = "Failed to parse AI response."


class PipelineTimeoutError(GuideError):
    default_message = "Guide generation timed out. Please try again."


class PipelineCancelledError(GuideError):
    default_message = "Guide generation was cancelled."
