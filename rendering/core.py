from __future__ import annotations

import logging
from typing import Optional, Callable, Any, List, Tuple

from fractals.parameters import RenderParameters, validate_parameters
from output.image_writer import PillowImageWriter
from output.video import ImageioVideoEncoder
from rendering.calculation_info import CalculationInformation
from rendering.engines.animation import (AnimationEngine, DEFAULT_FPS, DEFAULT_DURATION,
                                         DEFAULT_END_X, DEFAULT_END_Y, DEFAULT_END_ZOOM)
from rendering.engines.matrix import MatrixEngine
from rendering.engines.single import SingleImageEngine
from rendering.executor import RenderExecutor

logger = logging.getLogger(__name__)


class Renderer:

    """
    Facade that binds together:
      - the render executor (backend selection, kernels),
      - the engines for the three render modes,
      - the image writer and video encoder.
    """

    def __init__(
        self,
        *,
        executor: Optional[RenderExecutor] = None,
        writer: Optional[PillowImageWriter] = None,
        encoder: Optional[ImageioVideoEncoder] = None,
        on_event: Optional[Callable[[Any], None]] = None,
        max_workers: int = 1,
    ):
        # Execution & resource ownership
        self.executor = executor or RenderExecutor()
        writer = writer or PillowImageWriter()

        # Strategies
        self.single = SingleImageEngine(self.executor, writer)
        self.matrix = MatrixEngine(self.executor, writer, on_event, max_workers)
        self.animation = AnimationEngine(self.executor, writer, on_event, max_workers, encoder=encoder)

    def close(self) -> None:
        self.executor.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # ----------------------------
    # Render entry points
    # ----------------------------

    def render_single(self, params: RenderParameters) -> CalculationInformation:
        validate_parameters(params)
        info = self.single.render(params)
        logger.info("%s", info)
        return info

    def render_matrix(self, params: RenderParameters,
                      dimension_size: int) -> Tuple[CalculationInformation, List[CalculationInformation]]:
        return self.matrix.render_matrix(params, dimension_size)

    def render_animation(
        self,
        params: RenderParameters,
        fps: int = DEFAULT_FPS,
        duration: int = DEFAULT_DURATION,
        end_x: float = DEFAULT_END_X,
        end_y: float = DEFAULT_END_Y,
        end_zoom: float = DEFAULT_END_ZOOM,
        *,
        clean_directory: bool = True,
        encode_video: bool = True,
    ) -> Tuple[CalculationInformation, List[CalculationInformation]]:
        return self.animation.render_animation(params, fps, duration, end_x, end_y, end_zoom,
                                               clean_directory=clean_directory,
                                               encode_video=encode_video)
