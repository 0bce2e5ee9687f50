"""Pillow rendering of a finished guide, used as the source view for PDF export."""

from __future__ import annotations

import logging
import re
from io import BytesIO

import httpx
from PIL import Image, ImageDraw, ImageFont

from src.guide.models import GuideData

logger = logging.getLogger(__name__)

PAGE_WIDTH = 800
MARGIN = 48
THUMB_SIZE = (320, 180)

BACKGROUND = (10, 10, 10)
TEXT = (244, 244, 245)
MUTED = (161, 161, 170)
ACCENT = (16, 185, 129)
CARD = (24, 24, 27)

_MD_MARKERS = re.compile(r"(\*\*|__|`|^#{1,6}\s*)", re.MULTILINE)
_MD_LINK = re.compile(r"\[([^\]]+)\]\([^)]+\)")


def strip_markdown(text: str) -> str:
    """Reduce markdown to plain text suitable for drawing."""
    text = _MD_LINK.sub(r"\1", text)
    text = _MD_MARKERS.sub("", text)
    lines = []
    for line in text.splitlines():
        stripped = line.lstrip()
        if stripped.startswith(("- ", "* ")):
            line = "• " + stripped[2:]
        lines.append(line.rstrip())
    return "\n".join(lines).strip()


def format_timestamp(seconds: int) -> str:
    seconds = max(seconds, 0)
    hours, rem = divmod(seconds, 3600)
    minutes, secs = divmod(rem, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def _font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    return ImageFont.load_default(size=size)


def _wrap(text: str, font: ImageFont.FreeTypeFont | ImageFont.ImageFont, max_width: float) -> list[str]:
    """Greedy word wrap by rendered pixel width."""
    measure = ImageDraw.Draw(Image.new("RGB", (1, 1)))
    wrapped: list[str] = []
    for paragraph in text.split("\n"):
        words = paragraph.split()
        if not words:
            wrapped.append("")
            continue
        line = words[0]
        for word in words[1:]:
            trial = f"{line} {word}"
            if measure.textlength(trial, font=font) <= max_width:
                line = trial
            else:
                wrapped.append(line)
                line = word
        wrapped.append(line)
    return wrapped


class GuideView:
    """Single continuous rendering of a guide: header, then one card per step.

    Rendering is done twice per rasterization: once without a canvas to
    measure the total height, then onto an image of exactly that size.
    """

    def __init__(self, guide: GuideData, thumbnail: Image.Image | None = None, width: int = PAGE_WIDTH) -> None:
        self.guide = guide
        self.thumbnail = thumbnail
        self.width = width

    def _text(
        self,
        draw: ImageDraw.ImageDraw | None,
        y: int,
        text: str,
        size: int,
        fill: tuple[int, int, int],
        scale: int,
        indent: int = 0,
    ) -> int:
        font = _font(size * scale)
        left = (MARGIN + indent) * scale
        max_width = (self.width - 2 * MARGIN - indent) * scale
        line_height = int(size * 1.45) * scale
        for line in _wrap(text, font, max_width):
            if draw is not None and line:
                draw.text((left, y), line, font=font, fill=fill)
            y += line_height
        return y

    def _thumbnail(self, canvas: Image.Image | None, draw: ImageDraw.ImageDraw | None, y: int, scale: int) -> int:
        w, h = THUMB_SIZE[0] * scale, THUMB_SIZE[1] * scale
        left = MARGIN * scale
        if draw is not None and canvas is not None:
            if self.thumbnail is not None:
                thumb = self.thumbnail.convert("RGB").resize((w, h), Image.Resampling.LANCZOS)
                canvas.paste(thumb, (left, y))
            else:
                draw.rectangle((left, y, left + w, y + h), fill=CARD, outline=MUTED, width=scale)
                font = _font(14 * scale)
                draw.text((left + 16 * scale, y + h // 2 - 8 * scale), "Video thumbnail", font=font, fill=MUTED)
        return y + h

    def _render(self, canvas: Image.Image | None, scale: int) -> int:
        draw = ImageDraw.Draw(canvas) if canvas is not None else None
        guide = self.guide
        y = MARGIN * scale

        y = self._text(draw, y, guide.title, 28, TEXT, scale)
        y = self._text(draw, y + 4 * scale, f"by {guide.author}", 15, MUTED, scale)
        y += 12 * scale
        if draw is not None:
            draw.line(
                (MARGIN * scale, y, (self.width - MARGIN) * scale, y),
                fill=ACCENT,
                width=2 * scale,
            )
        y += 24 * scale

        if not guide.steps:
            y = self._text(draw, y, "No steps were generated for this video.", 15, MUTED, scale)

        for index, step in enumerate(guide.steps, start=1):
            y = self._text(draw, y, f"STEP {index}", 12, ACCENT, scale)
            y = self._text(draw, y, strip_markdown(step.title), 20, TEXT, scale)
            y = self._text(
                draw,
                y,
                f"Watch at {format_timestamp(step.timestamp_seconds)}: {step.video_url}",
                12,
                MUTED,
                scale,
            )
            y = self._thumbnail(canvas, draw, y + 8 * scale, scale)
            y = self._text(draw, y + 12 * scale, strip_markdown(step.description), 15, TEXT, scale)
            y += 28 * scale

        return y + MARGIN * scale

    def rasterize(self, scale: int = 1) -> Image.Image:
        """Render the view at ``scale`` times its logical size."""
        if scale < 1:
            raise ValueError(f"scale must be >= 1, got {scale}")
        height = self._render(None, scale)
        canvas = Image.new("RGB", (self.width * scale, height), BACKGROUND)
        self._render(canvas, scale)
        return canvas


async def load_thumbnail(
    url: str,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = 10.0,
) -> Image.Image | None:
    """Download a thumbnail for the view; ``None`` (placeholder) on any failure."""
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=timeout) as own_client:
                response = await own_client.get(url)
        else:
            response = await client.get(url)
        response.raise_for_status()
        image = Image.open(BytesIO(response.content))
        image.load()
        return image
    except (httpx.HTTPError, OSError) as exc:
        logger.warning("Thumbnail download failed for %s, using placeholder: %s", url, exc)
        return None
