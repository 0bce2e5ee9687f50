"""Tests for YouTube URL -> video ID resolution."""

from __future__ import annotations

import pytest

from src.guide.errors import ResolutionError
from src.guide.resolver import resolve_video_id


class TestAcceptedForms:
    @pytest.mark.parametrize(
        "url",
        [
            "https://youtu.be/abcdefghijk",
            "https://youtu.be/abcdefghijk?si=tracking123",
            "https://www.youtube.com/watch?v=abcdefghijk",
            "https://youtube.com/watch?v=abcdefghijk&t=42s",
            "https://m.youtube.com/watch?feature=share&v=abcdefghijk",
            "https://www.youtube.com/shorts/abcdefghijk",
            "https://www.youtube.com/embed/abcdefghijk",
            "https://www.youtube.com/live/abcdefghijk?feature=share",
        ],
    )
    def test_all_forms_agree(self, url: str) -> None:
        assert resolve_video_id(url) == "abcdefghijk"

    def test_surrounding_whitespace_ignored(self) -> None:
        assert resolve_video_id("  https://youtu.be/abcdefghijk \n") == "abcdefghijk"

    def test_ids_with_dash_and_underscore(self) -> None:
        assert resolve_video_id("https://youtu.be/dQw4w9WgXc_") == "dQw4w9WgXc_"
        assert resolve_video_id("https://www.youtube.com/watch?v=-_abc123XYZ") == "-_abc123XYZ"


class TestPatternFallback:
    """Strings without a scheme fall back to the permissive pattern."""

    @pytest.mark.parametrize(
        "url",
        [
            "youtube.com/watch?v=abcdefghijk",
            "www.youtube.com/embed/abcdefghijk",
            "youtu.be/abcdefghijk",
        ],
    )
    def test_schemeless(self, url: str) -> None:
        assert resolve_video_id(url) == "abcdefghijk"

    def test_schemeless_wrong_length(self) -> None:
        with pytest.raises(ResolutionError):
            resolve_video_id("youtube.com/watch?v=short")


class TestRejected:
    @pytest.mark.parametrize(
        "url",
        [
            "not a url",
            "",
            "https://youtu.be/abcdefghij",  # 10 chars
            "https://youtu.be/abcdefghijkl",  # 12 chars
            "https://www.youtube.com/watch?v=abcdefghijkl",
            "https://www.youtube.com/shorts/abc",
            "https://www.youtube.com/watch",
            "https://www.youtube.com/channel/UC1234567890",
            "https://vimeo.com/abcdefghijk",
            "https://youtu.be/abc$efghijk",
        ],
    )
    def test_invalid(self, url: str) -> None:
        with pytest.raises(ResolutionError) as exc_info:
            resolve_video_id(url)
        assert exc_info.value.message == "Invalid YouTube URL"
