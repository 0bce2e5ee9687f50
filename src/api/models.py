"""Pydantic request/response schemas for the TubeGuide API.

Field names are camelCase on the wire to match the browser client.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from src.guide.models import GuideData, GuideStep


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProcessRequest(CamelModel):
    """Request body for /api/process and /api/guides.

    ``url`` is optional at the schema level so a missing URL gets the
    explicit 400 rather than a generic validation error.
    """

    url: str | None = None
    manual_transcript: str | None = None


class ProcessResponse(CamelModel):
    """Video metadata plus the annotated transcript."""

    title: str
    author: str
    thumbnail: str
    transcript: str
    video_id: str


class GuideStepModel(CamelModel):
    title: str
    description: str
    timestamp: int
    image_url: str
    video_url: str


class GuideResponse(CamelModel):
    """A finished guide. Also accepted as the body of /api/guides/export."""

    title: str
    author: str
    thumbnail: str
    video_id: str
    steps: list[GuideStepModel] = []

    @classmethod
    def from_guide(cls, guide: GuideData) -> GuideResponse:
        return cls(
            title=guide.title,
            author=guide.author,
            thumbnail=guide.thumbnail_url,
            video_id=guide.video_id,
            steps=[
                GuideStepModel(
                    title=s.title,
                    description=s.description,
                    timestamp=s.timestamp_seconds,
                    image_url=s.image_url,
                    video_url=s.video_url,
                )
                for s in guide.steps
            ],
        )

    def to_guide(self) -> GuideData:
        return GuideData(
            title=self.title,
            author=self.author,
            thumbnail_url=self.thumbnail,
            video_id=self.video_id,
            steps=tuple(
                GuideStep(
                    title=s.title,
                    description=s.description,
                    timestamp_seconds=s.timestamp,
                    image_url=s.image_url,
                    video_url=s.video_url,
                )
                for s in self.steps
            ),
        )


class ErrorResponse(BaseModel):
    error: str
