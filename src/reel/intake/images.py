"""Local image intake: turns image files into opaque data URIs for slides."""

import base64
import logging
import mimetypes
from pathlib import Path
from typing import Iterable, Optional

logger = logging.getLogger("ReelMCP.intake.images")

# A few formats mimetypes does not know on every platform.
_EXTRA_TYPES = {
    ".webp": "image/webp",
    ".avif": "image/avif",
}


class ImageLoader:
    """Reads image files as data URIs. No decoding happens here."""

    def __init__(self, max_bytes: Optional[int] = None):
        self.max_bytes = max_bytes

    @staticmethod
    def guess_mime(path: Path) -> Optional[str]:
        mime, _ = mimetypes.guess_type(path.name)
        return mime or _EXTRA_TYPES.get(path.suffix.lower())

    def load(self, path: str | Path) -> str:
        """Return `data:<mime>;base64,<payload>` for an image file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Image not found: {path}")

        mime = self.guess_mime(path)
        if not mime or not mime.startswith("image/"):
            raise ValueError(f"Not an image file: {path.name}")

        data = path.read_bytes()
        if self.max_bytes is not None and len(data) > self.max_bytes:
            raise ValueError(
                f"Image {path.name} is {len(data)} bytes; limit is {self.max_bytes}"
            )

        logger.info(f"Loaded {path.name} ({len(data)} bytes, {mime})")
        return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"

    def load_many(self, paths: Iterable[str | Path]) -> list[str]:
        return [self.load(p) for p in paths]
