"""Gemini-powered synthesis of tutorial steps under a fixed JSON response schema."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from src.guide.errors import SynthesisError
from src.guide.models import StepCandidate
from src.pipeline_config import StepValidationPolicy

logger = logging.getLogger(__name__)

# Response schema enforced by Gemini structured output
GUIDE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "steps": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "title": {"type": "STRING"},
                    "description": {"type": "STRING"},
                    "timestamp": {"type": "NUMBER"},
                },
                "required": ["title", "description", "timestamp"],
            },
        },
    },
    "required": ["steps"],
}

_PROMPT_TEMPLATE = """\
Based on the following video transcript/summary, create a comprehensive step-by-step tutorial guide.

For each step, provide:
1. A concise, bold title.
2. A detailed, helpful description (Markdown allowed).
3. A numerical timestamp in seconds (integer).

Source Content:
{transcript}
"""


def build_prompt(transcript: str) -> str:
    return _PROMPT_TEMPLATE.format(transcript=transcript)


def _to_candidate(raw: Any) -> StepCandidate:
    if not isinstance(raw, dict):
        raise SynthesisError()
    try:
        title = raw["title"]
        description = raw["description"]
        timestamp = raw["timestamp"]
    except KeyError as exc:
        raise SynthesisError() from exc
    if not isinstance(title, str) or not isinstance(description, str):
        raise SynthesisError()
    if isinstance(timestamp, bool):
        raise SynthesisError()
    try:
        seconds = int(float(timestamp))
    except (TypeError, ValueError, OverflowError) as exc:
        raise SynthesisError() from exc
    return StepCandidate(title=title, description=description, timestamp=seconds)


def parse_steps(text: str | None) -> list[StepCandidate]:
    """Parse the model's JSON text into step candidates.

    Empty text is treated as ``{"steps": []}``. Malformed JSON is never repaired.

    Raises:
        SynthesisError: If the text is not JSON or does not have the schema's shape.
    """
    try:
        data = json.loads(text or '{"steps": []}')
    except json.JSONDecodeError as exc:
        logger.error("JSON parse error in model response: %r", text)
        raise SynthesisError() from exc

    steps = data.get("steps") if isinstance(data, dict) else None
    if not isinstance(steps, list):
        logger.error("Model response has no steps array: %r", text)
        raise SynthesisError()

    try:
        return [_to_candidate(step) for step in steps]
    except SynthesisError:
        logger.error("Model response contains a malformed step: %r", text)
        raise


def apply_validation_policy(
    candidates: list[StepCandidate],
    policy: StepValidationPolicy,
) -> list[StepCandidate]:
    """Apply the configured treatment of blank titles and negative timestamps.

    Order is never changed; timestamps are not required to be monotonic.
    """
    if policy is StepValidationPolicy.PASS_THROUGH:
        return candidates

    result: list[StepCandidate] = []
    for index, step in enumerate(candidates, start=1):
        blank_title = not step.title.strip()
        negative = step.timestamp < 0
        if policy is StepValidationPolicy.REJECT and (blank_title or negative):
            logger.error("Rejecting step %d: blank_title=%s timestamp=%d", index, blank_title, step.timestamp)
            raise SynthesisError("The AI returned an invalid guide step. Please try again.")
        if blank_title or negative:
            step = StepCandidate(
                title=f"Step {index}" if blank_title else step.title,
                description=step.description,
                timestamp=max(step.timestamp, 0),
            )
        result.append(step)
    return result


class GuideSynthesizer:
    """Turn a transcript blob into ordered step candidates using Gemini.

    The API key (or a ready-made client) is injected at construction time so
    nothing reads credentials from the environment at call sites.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gemini-2.5-flash",
        *,
        client: genai.Client | None = None,
        validation: StepValidationPolicy = StepValidationPolicy.PASS_THROUGH,
    ) -> None:
        if client is None:
            if not api_key:
                raise ValueError("GuideSynthesizer requires an api_key or a client")
            client = genai.Client(api_key=api_key)
        self._client = client
        self.model = model
        self.validation = validation

    async def synthesize(self, transcript: str) -> list[StepCandidate]:
        """Generate step candidates for a transcript. Attempted exactly once.

        Raises:
            SynthesisError: If the model call fails or its output is unusable.
        """
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=GUIDE_SCHEMA,
        )
        try:
            response = await self._client.aio.models.generate_content(
                model=self.model,
                contents=build_prompt(transcript),
                config=config,
            )
        except (genai_errors.APIError, httpx.HTTPError) as exc:
            logger.error("Gemini request failed: %s", exc)
            raise SynthesisError("The AI service is unavailable. Please try again later.") from exc

        candidates = parse_steps(response.text)
        logger.info("Model returned %d steps", len(candidates))
        return apply_validation_policy(candidates, self.validation)
