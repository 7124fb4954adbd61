"""Image storage for analyzed photos."""
import logging
import re
import time
from pathlib import Path

from petspace.emotion.errors import StorageError
from petspace.emotion.image import ImagePayload

logger = logging.getLogger(__name__)

RE_UNSAFE = re.compile(r"[^A-Za-z0-9_-]")


class LocalImageStorage:
    """Writes images under `<root>/<bucket>/` and serves them from a public base URL."""

    def __init__(self, root: Path, public_base_url: str, bucket: str = "images") -> None:
        self.bucket_dir = Path(root) / bucket
        self.public_base_url = public_base_url.rstrip("/")

    def object_key(self, user_id: str, image: ImagePayload) -> str:
        safe_user = RE_UNSAFE.sub("_", user_id) or "anonymous"
        return f"emotions/{safe_user}/{int(time.time() * 1000)}.{image.extension}"

    def upload(self, user_id: str, image: ImagePayload) -> str:
        """Store the image and return its object key."""
        key = self.object_key(user_id, image)
        path = self.bucket_dir / key
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(image.content)
        except OSError as e:
            raise StorageError(f"Failed to write {key}: {e}") from e
        logger.info(f"Stored image {key} ({len(image.content)} bytes)")
        return key

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}/{key}"
