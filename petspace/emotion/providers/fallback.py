"""Local fallback provider used when no remote provider produced a result."""
import asyncio
import logging
import random

from petspace.emotion.image import ImagePayload
from petspace.emotion.models import EMOTIONS, EmotionScores
from petspace.emotion.providers.base import BaseEmotionProvider
from petspace.emotion.scoring import round_score

logger = logging.getLogger(__name__)


class FallbackProvider(BaseEmotionProvider):
    """Random but valid distribution. Never fails."""

    name = "fallback"

    def __init__(self, rng: random.Random | None = None, delay: float = 0.0) -> None:
        self.rng = rng or random.Random()
        self.delay = delay

    def generate(self) -> EmotionScores:
        values = [self.rng.random() for _ in EMOTIONS]
        total = sum(values)
        if total <= 0:
            return EmotionScores(**{name: 0.2 for name in EMOTIONS})
        return EmotionScores(**{name: round_score(v / total) for name, v in zip(EMOTIONS, values)})

    async def analyze(self, image: ImagePayload) -> EmotionScores:
        if self.delay > 0:
            await asyncio.sleep(self.delay)
        return self.generate()
