"""Google Cloud Vision face/object detection provider."""
import logging
import random
from typing import Any

import httpx

from petspace.emotion.errors import NoSignalError, ProviderError, ProviderNotConfiguredError
from petspace.emotion.image import ImagePayload
from petspace.emotion.models import EmotionScores
from petspace.emotion.providers.base import BaseEmotionProvider
from petspace.emotion.scoring import likelihood_score, normalize_scores

logger = logging.getLogger(__name__)

PET_OBJECT_NAMES = frozenset({"Dog", "Cat", "Animal"})
PET_CURIOSITY_BOOST = 0.2
SLEEPINESS_PLACEHOLDER_MAX = 0.3


def scores_from_annotations(
    faces: list[dict[str, Any]],
    objects: list[dict[str, Any]],
    rng: random.Random,
) -> dict[str, float]:
    """Raw (pre-normalization) scores from the first face and any pet objects.

    Vision has no drowsiness attribute, so sleepiness is a random
    placeholder below 0.3. Raises NoSignalError when no face was found.
    """
    if not faces:
        raise NoSignalError("No face detected")

    face = faces[0]
    raw = {
        "happiness": likelihood_score(face.get("joyLikelihood")),
        "sadness": likelihood_score(face.get("sorrowLikelihood")),
        "anxiety": likelihood_score(face.get("angerLikelihood")),
        "sleepiness": rng.random() * SLEEPINESS_PLACEHOLDER_MAX,
        "curiosity": likelihood_score(face.get("surpriseLikelihood")),
    }

    if any(obj.get("name") in PET_OBJECT_NAMES for obj in objects):
        raw["curiosity"] = min(raw["curiosity"] + PET_CURIOSITY_BOOST, 1.0)

    return raw


class GoogleVisionProvider(BaseEmotionProvider):
    """Maps Vision face likelihoods onto the five pet emotions."""

    name = "google_vision"

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str | None,
        endpoint: str = "https://vision.googleapis.com/v1/images:annotate",
        max_results: int = 10,
        rng: random.Random | None = None,
    ) -> None:
        self.client = client
        self.api_key = api_key
        self.endpoint = endpoint
        self.max_results = max_results
        self.rng = rng or random.Random()

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def build_request(self, image: ImagePayload) -> dict[str, Any]:
        return {
            "requests": [
                {
                    "image": {"content": image.base64},
                    "features": [
                        {"type": "FACE_DETECTION", "maxResults": self.max_results},
                        {"type": "OBJECT_LOCALIZATION", "maxResults": self.max_results},
                    ],
                }
            ]
        }

    async def analyze(self, image: ImagePayload) -> EmotionScores:
        if not self.is_configured:
            raise ProviderNotConfiguredError("GOOGLE_VISION_API_KEY is not set")

        try:
            response = await self.client.post(
                self.endpoint,
                params={"key": self.api_key},
                json=self.build_request(image),
            )
            response.raise_for_status()
            result = response.json()
        except httpx.HTTPStatusError as e:
            raise ProviderError(f"Vision API returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ProviderError(f"Vision API call failed: {e!r}") from e
        except ValueError as e:
            raise ProviderError(f"Vision API returned invalid JSON: {e}") from e

        responses = result.get("responses") if isinstance(result, dict) else None
        annotation = responses[0] if isinstance(responses, list) and responses else {}
        if not isinstance(annotation, dict):
            raise ProviderError("Unexpected Vision API response shape")

        if annotation.get("error"):
            raise ProviderError(f"Vision API error: {annotation['error']}")

        faces = annotation.get("faceAnnotations") or []
        objects = annotation.get("localizedObjectAnnotations") or []
        try:
            raw = scores_from_annotations(faces, objects, self.rng)
        except (AttributeError, KeyError, TypeError) as e:
            raise ProviderError(f"Unreadable Vision annotations: {e!r}") from e
        logger.debug(f"Vision found {len(faces)} faces, {len(objects)} objects")

        return normalize_scores(raw)
