"""Pipeline configuration: policy enums and PipelineConfig dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.config import Settings


class StepValidationPolicy(str, Enum):
    """How synthesized steps with blank titles or negative timestamps are treated."""

    PASS_THROUGH = "pass_through"
    CLAMP = "clamp"
    REJECT = "reject"


@dataclass(frozen=True)
class PipelineConfig:
    """Immutable configuration for one guide-generation run.

    Defaults mirror the observed behaviour of the service: English captions
    first, model output passed through untouched, no end-to-end timeout.
    """

    preferred_language: str = "en"
    step_validation: StepValidationPolicy = StepValidationPolicy.PASS_THROUGH
    metadata_timeout_seconds: float = 10.0
    timeout_seconds: float | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> PipelineConfig:
        return cls(
            preferred_language=settings.transcript_language,
            step_validation=settings.step_validation,
            metadata_timeout_seconds=settings.metadata_timeout_seconds,
            timeout_seconds=settings.pipeline_timeout_seconds or None,
        )
