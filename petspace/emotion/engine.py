"""Emotion Engine - provider fallback chain."""
import logging
import random

import httpx

from petspace.core.config import ProviderConfig
from petspace.emotion.errors import ProviderError, ProviderNotConfiguredError
from petspace.emotion.image import ImagePayload
from petspace.emotion.models import EmotionScores
from petspace.emotion.providers import BaseEmotionProvider, FallbackProvider, build_providers

logger = logging.getLogger(__name__)


class EmotionEngine:
    """Tries each provider in order and returns the first usable scores.

    Each provider gets exactly one attempt. The chain always ends with a
    FallbackProvider, so analyze() resolves even with no credentials.
    """

    def __init__(self, providers: list[BaseEmotionProvider]) -> None:
        providers = list(providers)
        if not providers or not isinstance(providers[-1], FallbackProvider):
            providers.append(FallbackProvider())
        self.providers = providers

    @classmethod
    def from_config(
        cls,
        config: ProviderConfig,
        client: httpx.AsyncClient,
        rng: random.Random | None = None,
    ) -> "EmotionEngine":
        return cls(build_providers(config, client, rng=rng))

    @property
    def configured(self) -> dict[str, bool]:
        return {p.name: p.is_configured for p in self.providers}

    async def analyze(self, image: ImagePayload) -> EmotionScores:
        for provider in self.providers:
            if not provider.is_configured:
                logger.debug(f"Skipping {provider.name}: not configured")
                continue
            try:
                scores = await provider.analyze(image)
            except ProviderNotConfiguredError as e:
                logger.debug(f"Skipping {provider.name}: {e}")
                continue
            except ProviderError as e:
                logger.warning(f"{provider.name} failed, trying next provider: {e}")
                continue

            if isinstance(provider, FallbackProvider):
                logger.warning("No provider produced a result, using fallback analysis")
            else:
                logger.info(f"Emotion scored by {provider.name} (dominant={scores.dominant})")
            return scores

        # Unreachable while the chain ends in a FallbackProvider
        raise RuntimeError("Emotion provider chain exhausted")
