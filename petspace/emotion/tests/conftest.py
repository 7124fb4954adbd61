import base64
import io
import random

import httpx
import pytest
from PIL import Image

from petspace.emotion.image import ImagePayload


class FixedRandom(random.Random):
    """Random source that always returns the same value."""

    def __init__(self, value: float) -> None:
        super().__init__()
        self.value = value

    def random(self) -> float:
        return self.value


def _encode(fmt: str) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), color=(200, 150, 100)).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def png_bytes():
    return _encode("PNG")


@pytest.fixture
def jpeg_bytes():
    return _encode("JPEG")


@pytest.fixture
def png_base64(png_bytes):
    return base64.b64encode(png_bytes).decode("ascii")


@pytest.fixture
def image(jpeg_bytes):
    return ImagePayload(content=jpeg_bytes, mime_type="image/jpeg", extension="jpg")


@pytest.fixture
def zero_rng():
    return FixedRandom(0.0)


@pytest.fixture
def mock_client():
    """Factory for an AsyncClient whose requests go to `handler`."""

    def factory(handler):
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return factory


@pytest.fixture
def vision_face():
    """Vision response with one happy face and a dog."""
    return {
        "responses": [
            {
                "faceAnnotations": [
                    {
                        "joyLikelihood": "VERY_LIKELY",
                        "sorrowLikelihood": "VERY_UNLIKELY",
                        "angerLikelihood": "VERY_UNLIKELY",
                        "surpriseLikelihood": "POSSIBLE",
                    }
                ],
                "localizedObjectAnnotations": [{"name": "Dog", "score": 0.93}],
            }
        ]
    }


@pytest.fixture
def gemini_reply():
    """Build a Gemini generateContent response around the given text."""

    def factory(text):
        return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}

    return factory
