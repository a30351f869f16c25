"""Stand-ins for the vision model and the cache clock."""

from datetime import datetime, timedelta, timezone

import orjson

TREE_IMAGE_URL = "https://storage.example.com/tree-images/oak-grove.jpg"


def model_answer(**overrides) -> str:
    """JSON text as the vision model would return it."""
    answer = {
        "tree_count": 12,
        "land_cover_class": "temperate_forest",
        "estimated_area_hectares": 0.03,
        "confidence": "high",
        "analysis_notes": "Twelve mature oaks along a field edge",
    }
    answer.update(overrides)
    return orjson.dumps(answer).decode()


class FakeVisionClient:
    """Replaces VisionModelClient; records every image it is asked about."""

    model = "test/vision-model"

    def __init__(self, content: str | None = None, error: Exception | None = None):
        self.content = content if content is not None else model_answer()
        self.error = error
        self.calls: list[str] = []
        self.is_configured = True

    async def analyze_image(self, image_reference: str) -> str:
        self.calls.append(image_reference)
        if self.error is not None:
            raise self.error
        return self.content


class FakeClock:
    """Controllable replacement for the cache's UTC clock."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta
