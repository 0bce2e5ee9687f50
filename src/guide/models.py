"""Data models for the guide-generation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_TITLE = "YouTube Video"
DEFAULT_AUTHOR = "Unknown Creator"


def default_thumbnail_url(video_id: str) -> str:
    """Max-resolution thumbnail URL used when oEmbed gives us nothing."""
    return f"https://img.youtube.com/vi/{video_id}/maxresdefault.jpg"


@dataclass(frozen=True)
class VideoMetadata:
    """Cosmetic video metadata; every field always has a usable value."""

    title: str
    author: str
    thumbnail_url: str

    @classmethod
    def defaults(cls, video_id: str) -> VideoMetadata:
        return cls(
            title=DEFAULT_TITLE,
            author=DEFAULT_AUTHOR,
            thumbnail_url=default_thumbnail_url(video_id),
        )


@dataclass(frozen=True)
class TranscriptLine:
    """A single caption line with its whole-second offset."""

    offset_seconds: int
    text: str

    def render(self) -> str:
        return f"[{self.offset_seconds}s] {self.text}"


def render_transcript(lines: list[TranscriptLine]) -> str:
    """Join caption lines into the annotated ``[Ns] text`` blob, in caption order."""
    return "\n".join(line.render() for line in lines)


@dataclass(frozen=True)
class StepCandidate:
    """A tutorial step as returned by the model, before enrichment."""

    title: str
    description: str
    timestamp: int


@dataclass(frozen=True)
class GuideStep:
    """A fully enriched tutorial step."""

    title: str
    description: str
    timestamp_seconds: int
    image_url: str
    video_url: str


@dataclass(frozen=True)
class GuideData:
    """The finished guide. Only ever built after every fatal stage succeeded."""

    title: str
    author: str
    thumbnail_url: str
    video_id: str
    steps: tuple[GuideStep, ...] = field(default_factory=tuple)
