"""Fakes for the guide pipeline tests (no network, no API keys)."""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx

from src.guide.synthesizer import GuideSynthesizer
from src.guide.transcript import CaptionItem

VIDEO_ID = "abcdefghijk"


class FakeCaptionProvider:
    """Caption provider keyed by requested language; records every call.

    A language missing from ``responses`` raises, like a video without that track.
    """

    def __init__(self, responses: dict[str | None, list[CaptionItem] | Exception] | None = None) -> None:
        self.responses = responses or {}
        self.calls: list[tuple[str, str | None]] = []

    def fetch(self, video_id: str, language: str | None) -> list[CaptionItem]:
        self.calls.append((video_id, language))
        result = self.responses.get(language, LookupError(f"no captions for {language}"))
        if isinstance(result, Exception):
            raise result
        return result


def make_gemini_client(text: str | None) -> MagicMock:
    """A stand-in for ``genai.Client`` whose async generate_content returns ``text``."""
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(return_value=MagicMock(text=text))
    return client


def steps_json(*steps: dict[str, Any]) -> str:
    return json.dumps({"steps": list(steps)})


def make_synthesizer(text: str | None, **kwargs: Any) -> GuideSynthesizer:
    return GuideSynthesizer(client=make_gemini_client(text), **kwargs)


def oembed_transport(status: int = 200, body: Any = None) -> httpx.MockTransport:
    if body is None:
        body = {
            "title": "How to Bake Bread",
            "author_name": "Chef Sam",
            "thumbnail_url": "https://i.ytimg.com/vi/abcdefghijk/hqdefault.jpg",
        }

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json=body)

    return httpx.MockTransport(handler)

