from abc import ABC, abstractmethod

from petspace.emotion.image import ImagePayload
from petspace.emotion.models import EmotionScores


class BaseEmotionProvider(ABC):
    """Abstract base class for emotion providers in the fallback chain."""

    name: str = "provider"

    @property
    def is_configured(self) -> bool:
        """Whether the provider has what it needs to be attempted."""
        return True

    @abstractmethod
    async def analyze(self, image: ImagePayload) -> EmotionScores:
        """Score the image or raise ProviderError."""
        pass
