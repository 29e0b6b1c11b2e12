from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from coloring.schemes import coloring_for
from fractals.parameters import RenderParameters
from fractals.viewport import adapt_to_aspect_ratio
from rendering.calculation_info import CalculationInformation
from rendering.engines.base import BaseRenderEngine
from rendering.pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)


@dataclass
class RenderedImage:
    params: RenderParameters    # as rendered, after aspect correction
    grid: np.ndarray
    buffer: PixelBuffer
    info: CalculationInformation


class SingleImageEngine(BaseRenderEngine):
    """
    The per-unit pipeline every render mode goes through:
    aspect correction -> escape-time grid -> colours -> packed buffer -> image file.
    """

    def produce(self, params: RenderParameters, adapt: bool = True) -> RenderedImage:
        """Compute and colour one image without writing it; info is left unfinished."""
        info = CalculationInformation(params.resolution_x, params.resolution_y, params.method.name)
        info.start()
        if adapt:
            params = params.with_viewport(*adapt_to_aspect_ratio(
                params.resolution_x, params.resolution_y,
                params.top, params.bottom, params.left, params.right))

        grid, label = self.executor.compute_labeled(params)
        info.method = label
        info.mark_computed()

        rgb = coloring_for(params.coloring).apply(grid, params.iterations)
        return RenderedImage(params, grid, PixelBuffer.from_rgb(rgb), info)

    def render(self, params: RenderParameters, adapt: bool = True,
               path: Optional[str] = None) -> CalculationInformation:
        image = self.produce(params, adapt=adapt)
        image.info.path = self.writer.write(image.buffer, path or params.output_path)
        image.info.finish()
        logger.debug("%s -> %s", image.info, image.info.path)
        return image.info
