"""Resolve YouTube URLs of every common shape to a canonical video ID."""

from __future__ import annotations

import re
from urllib.parse import parse_qs, urlparse

from src.guide.errors import ResolutionError

VIDEO_ID_RE = re.compile(r"[A-Za-z0-9_-]{11}")

# Permissive fallback for strings that are not absolute URLs,
# e.g. "youtube.com/watch?v=..." or "www.youtube.com/embed/...".
_FALLBACK_RE = re.compile(
    r"^.*((youtu\.be/)|(v/)|(/u/\w/)|(embed/)|(watch\?))\??v?=?([^#&?]*).*"
)

# Canonical-host path prefixes that carry the ID as the next path segment
_PATH_FORMS = ("shorts", "embed", "live")


def _from_structured(host: str, path: str, query: str) -> str | None:
    host = host.lower()
    if host in ("youtu.be", "www.youtu.be"):
        return path.lstrip("/").split("/", 1)[0]

    if host == "youtube.com" or host.endswith(".youtube.com"):
        segments = [s for s in path.split("/") if s]
        if len(segments) >= 2 and segments[0] in _PATH_FORMS:
            return segments[1]
        values = parse_qs(query).get("v")
        return values[0] if values else None

    return None


def _from_pattern(url: str) -> str | None:
    match = _FALLBACK_RE.match(url)
    if match and len(match.group(7)) == 11:
        return match.group(7)
    return None


def resolve_video_id(url: str) -> str:
    """Extract the 11-character video ID from a YouTube URL.

    Supports ``youtu.be/<id>``, ``youtube.com/watch?v=<id>`` and the
    ``/shorts/``, ``/embed/`` and ``/live/`` path forms. Strings that do not
    parse as absolute URLs are matched against a permissive pattern instead.
    This is purely syntactic: no network access.

    Raises:
        ResolutionError: If no form matches or the token is not a valid ID.
    """
    candidate = url.strip()
    try:
        parsed = urlparse(candidate)
    except ValueError:
        parsed = None

    if parsed is not None and parsed.scheme and parsed.netloc:
        video_id = _from_structured(parsed.hostname or "", parsed.path, parsed.query)
    else:
        video_id = _from_pattern(candidate)

    if not video_id or not VIDEO_ID_RE.fullmatch(video_id):
        raise ResolutionError()
    return video_id
