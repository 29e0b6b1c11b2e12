from __future__ import annotations

import logging
import os
from typing import Sequence

import imageio.v2 as imageio

from utils.errors import EncodingError

logger = logging.getLogger(__name__)


class ImageioVideoEncoder:
    """
    Assembles an ordered list of frame files into an H.264 video using
    imageio's ffmpeg plugin.
    """

    def __init__(self, codec: str = "libx264", pixelformat: str = "yuv420p", quality: int = 8):
        self.codec = codec
        self.pixelformat = pixelformat
        self.quality = quality

    def encode(self, frame_paths: Sequence[str], fps: int, output_path: str) -> str:
        if not frame_paths:
            raise EncodingError("no frames to encode")
        try:
            parent = os.path.dirname(output_path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            writer = imageio.get_writer(output_path, fps=fps, codec=self.codec,
                                        quality=self.quality, pixelformat=self.pixelformat)
            try:
                for path in frame_paths:
                    writer.append_data(imageio.imread(path))
            finally:
                writer.close()
        except (OSError, ValueError, RuntimeError) as e:
            raise EncodingError(f"could not encode {output_path}: {e}") from e
        logger.info("Encoded %d frames at %d fps to %s", len(frame_paths), fps, output_path)
        return output_path
