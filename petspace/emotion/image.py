"""Image decoding and validation."""
import base64
import binascii
import io
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError

from petspace.emotion.errors import InvalidImageError

# Pillow format name -> (mime type, file extension)
FORMATS = {
    "JPEG": ("image/jpeg", "jpg"),
    "PNG": ("image/png", "png"),
    "WEBP": ("image/webp", "webp"),
    "GIF": ("image/gif", "gif"),
    "BMP": ("image/bmp", "bmp"),
}


@dataclass(frozen=True)
class ImagePayload:
    content: bytes
    mime_type: str = "image/jpeg"
    extension: str = "jpg"

    @property
    def base64(self) -> str:
        return base64.b64encode(self.content).decode("ascii")


def decode_base64_image(data: str) -> ImagePayload:
    """Decode a base64 (or data URL) string into a validated image payload."""
    if "," in data and data.lstrip().startswith("data:"):
        data = data.split(",", 1)[1]
    try:
        content = base64.b64decode("".join(data.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidImageError(f"Invalid base64 image: {e}") from e
    return load_image(content)


def load_image(content: bytes) -> ImagePayload:
    """Check that the bytes are an image Pillow understands and detect its type."""
    if not content:
        raise InvalidImageError("Empty image payload")
    try:
        with Image.open(io.BytesIO(content)) as image:
            image_format = image.format
            image.verify()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        raise InvalidImageError(f"Unreadable image: {e}") from e

    mime_type, extension = FORMATS.get(image_format or "", ("image/jpeg", "jpg"))
    return ImagePayload(content=content, mime_type=mime_type, extension=extension)
