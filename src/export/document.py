"""Export a rendered guide view to a single-page PDF sized to the raster."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from io import BytesIO
from typing import Protocol

from PIL import Image

logger = logging.getLogger(__name__)

DEFAULT_SCALE = 2
FILENAME_SUFFIX = "_Guide.pdf"


class RenderedView(Protocol):
    """An already laid-out view that can be captured as a raster image."""

    def rasterize(self, scale: int) -> Image.Image: ...


@dataclass(frozen=True)
class ExportedDocument:
    filename: str
    content: bytes
    page_width: float  # points
    page_height: float  # points
    media_type: str = "application/pdf"


def export_filename(guide_title: str) -> str:
    """Filesystem-safe filename: every non-alphanumeric character becomes ``_``."""
    return re.sub(r"[^a-zA-Z0-9]", "_", guide_title) + FILENAME_SUFFIX


def export_document(
    view: RenderedView,
    guide_title: str,
    scale: int = DEFAULT_SCALE,
) -> ExportedDocument:
    """Capture ``view`` at ``scale``x and embed it as one continuous PDF page.

    The page is sized to the raster's logical dimensions (pixels / scale), so
    the oversampled pixels raise print fidelity without changing page size.
    There is no pagination: long guides produce one tall page.
    """
    if scale < 1:
        raise ValueError(f"scale must be >= 1, got {scale}")

    image = view.rasterize(scale).convert("RGB")

    buffer = BytesIO()
    image.save(buffer, format="PDF", resolution=72.0 * scale)
    content = buffer.getvalue()

    filename = export_filename(guide_title)
    logger.info(
        "Exported %s (%dx%d px at %dx, %d bytes)",
        filename,
        image.width,
        image.height,
        scale,
        len(content),
    )
    return ExportedDocument(
        filename=filename,
        content=content,
        page_width=image.width / scale,
        page_height=image.height / scale,
    )
