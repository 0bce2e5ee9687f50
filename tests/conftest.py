from __future__ import annotations

import pytest

from src.guide.transcript import CaptionItem


@pytest.fixture
def english_captions() -> list[CaptionItem]:
    return [
        CaptionItem(text="Welcome to the tutorial", start=0.0),
        CaptionItem(text="First, preheat the oven", start=12.7),
        CaptionItem(text="Then mix the flour", start=30.2),
    ]
