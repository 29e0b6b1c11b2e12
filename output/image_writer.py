from __future__ import annotations

import logging
import os

from PIL import Image

from rendering.pixel_buffer import PixelBuffer
from utils.errors import EncodingError

logger = logging.getLogger(__name__)


class PillowImageWriter:
    """Encodes PixelBuffers to PNG files, creating parent directories as needed."""

    format = "PNG"

    def write(self, buffer: PixelBuffer, path: str) -> str:
        try:
            parent = os.path.dirname(path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            img = Image.fromarray(buffer.to_rgb())
            img.save(path, format=self.format)
        except (OSError, ValueError) as e:
            raise EncodingError(f"could not write {path}: {e}") from e
        logger.debug("Wrote %dx%d image to %s", buffer.width, buffer.height, path)
        return path
