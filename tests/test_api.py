"""Tests for API endpoints (no external API keys required)."""

from __future__ import annotations

import asyncio
from collections.abc import Iterator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from src.api.main import app
from src.config import settings
from src.guide.errors import PipelineTimeoutError
from src.guide.models import VideoMetadata
from src.guide.pipeline import GuidePipeline
from src.guide.transcript import CaptionItem, TranscriptAcquirer
from tests.fakes import FakeCaptionProvider, make_synthesizer, steps_json

client = TestClient(app)
client_no_raise = TestClient(app, raise_server_exceptions=False)

METADATA = VideoMetadata(
    title="How to Bake Bread",
    author="Chef Sam",
    thumbnail_url="https://i.ytimg.com/vi/abcdefghijk/hqdefault.jpg",
)


@pytest.fixture
def provider() -> Iterator[FakeCaptionProvider]:
    """Route /api/process through a fake caption provider."""
    fake = FakeCaptionProvider({"en": [CaptionItem("Intro", 0.0), CaptionItem("Knead", 61.4)]})
    with patch("src.api.routes.process.get_transcript_acquirer", return_value=TranscriptAcquirer(fake)):
        yield fake


@pytest.fixture
def metadata() -> Iterator[AsyncMock]:
    with patch("src.guide.pipeline.fetch_metadata", new=AsyncMock(return_value=METADATA)) as mock_metadata:
        yield mock_metadata


def _patch_pipeline(model_text: str):
    pipeline = GuidePipeline(make_synthesizer(model_text), TranscriptAcquirer(FakeCaptionProvider()))
    return patch("src.api.routes.guides.get_pipeline", return_value=pipeline)


def test_health():
    response = client.get("/health")
    assert response.status_code == 200


# ---------------------------------------------------------------------------
# POST /api/process
# ---------------------------------------------------------------------------


class TestProcessEndpoint:
    def test_missing_url_returns_400(self, provider: FakeCaptionProvider) -> None:
        response = client.post("/api/process", json={})
        assert response.status_code == 400
        assert response.json() == {"error": "URL is required"}

    def test_blank_url_returns_400(self, provider: FakeCaptionProvider) -> None:
        response = client.post("/api/process", json={"url": "   "})
        assert response.status_code == 400

    def test_invalid_url_returns_422(self, provider: FakeCaptionProvider, metadata: AsyncMock) -> None:
        response = client.post("/api/process", json={"url": "not a url"})
        assert response.status_code == 422
        assert response.json() == {"error": "Invalid YouTube URL"}
        metadata.assert_not_awaited()
        assert provider.calls == []

    def test_success_with_captions(self, provider: FakeCaptionProvider, metadata: AsyncMock) -> None:
        response = client.post("/api/process", json={"url": "https://youtu.be/abcdefghijk"})
        assert response.status_code == 200, response.text
        assert response.json() == {
            "title": "How to Bake Bread",
            "author": "Chef Sam",
            "thumbnail": "https://i.ytimg.com/vi/abcdefghijk/hqdefault.jpg",
            "transcript": "[0s] Intro\n[61s] Knead",
            "videoId": "abcdefghijk",
        }

    def test_manual_transcript_skips_captions(self, provider: FakeCaptionProvider, metadata: AsyncMock) -> None:
        response = client.post(
            "/api/process",
            json={"url": "https://youtu.be/abcdefghijk", "manualTranscript": "my own notes"},
        )
        assert response.status_code == 200
        assert response.json()["transcript"] == "my own notes"
        assert provider.calls == []

    def test_transcript_failure_returns_502(self, metadata: AsyncMock) -> None:
        empty = FakeCaptionProvider()
        with patch(
            "src.api.routes.process.get_transcript_acquirer",
            return_value=TranscriptAcquirer(empty),
        ):
            response = client.post("/api/process", json={"url": "https://youtu.be/abcdefghijk"})
        assert response.status_code == 502
        assert "Manual Script" in response.json()["error"]
        assert len(empty.calls) == 2

    def test_unexpected_error_returns_500(self, provider: FakeCaptionProvider) -> None:
        with patch("src.guide.pipeline.fetch_metadata", new=AsyncMock(side_effect=RuntimeError("boom"))):
            response = client_no_raise.post("/api/process", json={"url": "https://youtu.be/abcdefghijk"})
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to process video"}

    def test_slow_transcript_returns_504(self, metadata: AsyncMock) -> None:
        async def hang(video_id: str, manual_override: str | None = None) -> str:
            await asyncio.sleep(5)
            return ""

        acquirer = MagicMock()
        acquirer.acquire = AsyncMock(side_effect=hang)
        with (
            patch("src.api.routes.process.get_transcript_acquirer", return_value=acquirer),
            patch.object(settings, "pipeline_timeout_seconds", 0.05),
        ):
            response = client.post("/api/process", json={"url": "https://youtu.be/abcdefghijk"})
        assert response.status_code == 504
        assert response.json() == {"error": PipelineTimeoutError.default_message}


# ---------------------------------------------------------------------------
# POST /api/guides
# ---------------------------------------------------------------------------


class TestGuidesEndpoint:
    def test_no_api_key_returns_501(self) -> None:
        with patch("src.api.routes.guides.settings") as mock_settings:
            mock_settings.gemini_api_key = ""
            response = client.post("/api/guides", json={"url": "https://youtu.be/abcdefghijk"})
        assert response.status_code == 501
        assert "not configured" in response.json()["error"]

    def test_end_to_end(self, metadata: AsyncMock) -> None:
        with _patch_pipeline(steps_json({"title": "Intro", "description": "...", "timestamp": 0})):
            response = client.post(
                "/api/guides",
                json={"url": "https://youtu.be/abcdefghijk", "manualTranscript": "[0s] Intro\n[30s] Step one"},
            )
        assert response.status_code == 200, response.text
        data = response.json()
        assert data["videoId"] == "abcdefghijk"
        assert data["author"] == "Chef Sam"
        assert len(data["steps"]) == 1
        step = data["steps"][0]
        assert step["timestamp"] == 0
        assert "abcdefghijk&t=0s" in step["videoUrl"]
        assert step["imageUrl"] == "https://img.youtube.com/vi/abcdefghijk/hqdefault.jpg"

    def test_missing_url_returns_400(self) -> None:
        with _patch_pipeline(steps_json()) as mock_get_pipeline:
            response = client.post("/api/guides", json={"manualTranscript": "x"})
        assert response.status_code == 400
        mock_get_pipeline.assert_not_called()

    def test_malformed_model_output_returns_502(self, metadata: AsyncMock) -> None:
        with _patch_pipeline("{definitely not json"):
            response = client.post(
                "/api/guides",
                json={"url": "https://youtu.be/abcdefghijk", "manualTranscript": "[0s] Intro"},
            )
        assert response.status_code == 502
        assert response.json() == {"error": "Failed to parse AI response."}


# ---------------------------------------------------------------------------
# POST /api/guides/export
# ---------------------------------------------------------------------------


class TestExportEndpoint:
    body = {
        "title": "How to: Bake Bread!",
        "author": "Chef Sam",
        "thumbnail": "https://i.ytimg.com/vi/abcdefghijk/hqdefault.jpg",
        "videoId": "abcdefghijk",
        "steps": [
            {
                "title": "Intro",
                "description": "**Welcome** to the bakery",
                "timestamp": 0,
                "imageUrl": "https://img.youtube.com/vi/abcdefghijk/hqdefault.jpg",
                "videoUrl": "https://www.youtube.com/watch?v=abcdefghijk&t=0s",
            }
        ],
    }

    def test_returns_pdf_attachment(self) -> None:
        with patch("src.api.routes.guides.load_thumbnail", new=AsyncMock(return_value=None)) as mock_thumb:
            response = client.post("/api/guides/export", json=self.body)

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert (
            response.headers["content-disposition"]
            == 'attachment; filename="How_to__Bake_Bread__Guide.pdf"'
        )
        assert response.content.startswith(b"%PDF")
        mock_thumb.assert_awaited_once_with("https://img.youtube.com/vi/abcdefghijk/hqdefault.jpg")

    def test_invalid_body_returns_422(self) -> None:
        response = client.post("/api/guides/export", json={"title": "x"})
        assert response.status_code == 422
