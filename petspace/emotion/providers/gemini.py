"""Gemini multimodal provider."""
import json
import logging
import math
import re
from typing import Any

import httpx

from petspace.emotion.errors import ProviderError, ProviderNotConfiguredError
from petspace.emotion.image import ImagePayload
from petspace.emotion.models import EMOTIONS, EmotionScores
from petspace.emotion.providers.base import BaseEmotionProvider
from petspace.emotion.scoring import normalize_scores

logger = logging.getLogger(__name__)

RE_JSON_OBJECT = re.compile(r"\{[^}]*\}")
DEFAULT_SCORE = 0.2

HARM_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)

EMOTION_PROMPT = """Analyze the emotion of the animal (dog or cat) in this image.

Give each of the following 5 emotions a score between 0.0 and 1.0 (all values must add up to 1.0):

1. happiness: wagging tail, open mouth, relaxed expression
2. sadness: drooping ears, drooping eyes, gloomy expression
3. anxiety: watchful look, tense posture, signs of stress
4. sleepiness: closing eyes, resting posture, drowsy look
5. curiosity: perked-up ears, focused look, exploring posture

Reply ONLY with JSON in exactly this format:
{
  "happiness": 0.3,
  "sadness": 0.1,
  "anxiety": 0.2,
  "sleepiness": 0.1,
  "curiosity": 0.3
}

If no animal is visible or it is unclear, distribute evenly (0.2 each)."""


def _coerce_score(value: Any) -> float:
    """Numeric value (or numeric string) -> float; anything else -> DEFAULT_SCORE."""
    if value is None or isinstance(value, bool):
        return DEFAULT_SCORE
    try:
        score = float(value)
    except (TypeError, ValueError):
        return DEFAULT_SCORE
    return score if math.isfinite(score) else DEFAULT_SCORE


def parse_emotion_reply(text: str) -> dict[str, float]:
    """Pull the first {...} block out of a model reply and read the five scores."""
    match = RE_JSON_OBJECT.search(text or "")
    if not match:
        raise ProviderError("No JSON object in Gemini reply")
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise ProviderError(f"Failed to parse JSON from Gemini reply: {e}") from e

    return {name: _coerce_score(data.get(name)) for name in EMOTIONS}


class GeminiProvider(BaseEmotionProvider):
    """Asks a Gemini model to score the image and parses its JSON reply."""

    name = "gemini"

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str | None,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        model: str = "gemini-1.5-flash",
        temperature: float = 0.4,
        top_k: int = 32,
        top_p: float = 1.0,
        max_output_tokens: int = 4096,
        safety_threshold: str = "BLOCK_MEDIUM_AND_ABOVE",
    ) -> None:
        self.client = client
        self.api_key = api_key
        self.url = f"{base_url.rstrip('/')}/models/{model}:generateContent"
        self.generation_config = {
            "temperature": temperature,
            "topK": top_k,
            "topP": top_p,
            "maxOutputTokens": max_output_tokens,
        }
        self.safety_settings = [
            {"category": category, "threshold": safety_threshold} for category in HARM_CATEGORIES
        ]

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def build_request(self, image: ImagePayload) -> dict[str, Any]:
        return {
            "contents": [
                {
                    "parts": [
                        {"text": EMOTION_PROMPT},
                        {"inline_data": {"mime_type": image.mime_type, "data": image.base64}},
                    ]
                }
            ],
            "generationConfig": self.generation_config,
            "safetySettings": self.safety_settings,
        }

    async def analyze(self, image: ImagePayload) -> EmotionScores:
        if not self.is_configured:
            raise ProviderNotConfiguredError("GEMINI_API_KEY is not set")

        try:
            response = await self.client.post(
                self.url,
                params={"key": self.api_key},
                json=self.build_request(image),
            )
            response.raise_for_status()
            result = response.json()
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                f"Gemini API error: {e.response.status_code} {e.response.reason_phrase}"
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(f"Gemini API call failed: {e!r}") from e
        except ValueError as e:
            raise ProviderError(f"Gemini API returned invalid JSON: {e}") from e

        candidates = result.get("candidates") if isinstance(result, dict) else None
        if not candidates:
            raise ProviderError("No response from Gemini API")

        try:
            text = candidates[0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError("Gemini candidate has no text") from e
        if not isinstance(text, str):
            raise ProviderError("Gemini candidate has no text")

        logger.debug(f"Gemini reply: {text[:200]!r}")
        return normalize_scores(parse_emotion_reply(text))
