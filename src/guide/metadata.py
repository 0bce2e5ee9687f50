"""Video metadata via YouTube oEmbed, with safe per-field defaults."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from src.guide.models import VideoMetadata

logger = logging.getLogger(__name__)

OEMBED_URL = "https://www.youtube.com/oembed"


async def fetch_metadata(
    video_id: str,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = 10.0,
) -> VideoMetadata:
    """Fetch title, author and thumbnail for a video.

    Uses the public oEmbed endpoint rather than the watch page. Never raises: on any transport error, non-2xx
    status, malformed body or missing field the corresponding default from
    ``VideoMetadata.defaults`` is used and a warning is logged.

    Args:
        video_id: Resolved 11-character video ID.
        client: Optional shared async client (injected in tests).
        timeout: Request timeout in seconds when no client is supplied.
    """
    defaults = VideoMetadata.defaults(video_id)
    params = {
        "url": f"https://www.youtube.com/watch?v={video_id}",
        "format": "json",
    }

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=timeout) as own_client:
                response = await own_client.get(OEMBED_URL, params=params)
        else:
            response = await client.get(OEMBED_URL, params=params)
        response.raise_for_status()
        data: Any = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("oEmbed fetch failed for %s, using fallbacks: %s", video_id, exc)
        return defaults

    if not isinstance(data, dict):
        logger.warning("oEmbed returned a non-object body for %s, using fallbacks", video_id)
        return defaults

    missing = [key for key in ("title", "author_name", "thumbnail_url") if not data.get(key)]
    if missing:
        logger.warning("oEmbed response for %s missing %s, using fallbacks", video_id, missing)

    return VideoMetadata(
        title=str(data.get("title") or defaults.title),
        author=str(data.get("author_name") or defaults.author),
        thumbnail_url=str(data.get("thumbnail_url") or defaults.thumbnail_url),
    )
