import random

import httpx

from petspace.core.config import ProviderConfig
from petspace.emotion.providers.base import BaseEmotionProvider as BaseEmotionProvider
from petspace.emotion.providers.fallback import FallbackProvider
from petspace.emotion.providers.gemini import GeminiProvider
from petspace.emotion.providers.vision import GoogleVisionProvider


def build_providers(
    config: ProviderConfig,
    client: httpx.AsyncClient,
    rng: random.Random | None = None,
) -> list[BaseEmotionProvider]:
    """Factory for the provider chain in priority order, fallback last."""
    rng = rng or random.Random()
    return [
        GoogleVisionProvider(
            client,
            api_key=config.vision_api_key,
            endpoint=config.vision_endpoint,
            max_results=config.vision_max_results,
            rng=rng,
        ),
        GeminiProvider(
            client,
            api_key=config.gemini_api_key,
            base_url=config.gemini_base_url,
            model=config.gemini_model,
            temperature=config.gemini_temperature,
            top_k=config.gemini_top_k,
            top_p=config.gemini_top_p,
            max_output_tokens=config.gemini_max_output_tokens,
            safety_threshold=config.gemini_safety_threshold,
        ),
        FallbackProvider(rng=rng, delay=config.fallback_delay),
    ]
