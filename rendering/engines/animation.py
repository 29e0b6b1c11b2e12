from __future__ import annotations

import logging
import os
import shutil
from datetime import datetime
from typing import List, Tuple, Optional

from fractals.parameters import RenderParameters, validate_animation
from fractals.viewport import adapt_to_aspect_ratio
from output.video import ImageioVideoEncoder
from rendering.calculation_info import CalculationInformation
from rendering.engines.single import SingleImageEngine
from rendering.events import FrameEvent

logger = logging.getLogger(__name__)

ANIMATION_SUBDIR = "Animation"
ANIMATION_LABEL = "RenderAnimation"

# half the side of the frame square at zoom 1
FRAME_HALF_SPAN = 1.5

DEFAULT_FPS = 30
DEFAULT_DURATION = 10
DEFAULT_END_X = 0.36024044343761435
DEFAULT_END_Y = -0.6413130610648031
DEFAULT_END_ZOOM = 3e15


def start_zoom_for(base: RenderParameters) -> float:
    """Zoom level of the aspect-corrected base viewport; a height of 3 is zoom 1."""
    top, bottom, _, _ = adapt_to_aspect_ratio(
        base.resolution_x, base.resolution_y, base.top, base.bottom, base.left, base.right)
    return 1 / ((top - bottom) / 3)


def zoom_levels(start_zoom: float, end_zoom: float, frame_count: int) -> List[float]:
    """
    Geometric zoom progression from start_zoom to end_zoom over frame_count frames.
    A single frame stays at start_zoom.
    """
    if frame_count < 1:
        raise ValueError(f"frame_count must be positive, got {frame_count}")
    if frame_count == 1:
        return [start_zoom]
    zoom_step = (end_zoom / start_zoom) ** (1.0 / (frame_count - 1))
    return [start_zoom * zoom_step ** i for i in range(frame_count)]


def frame_viewport(end_x: float, end_y: float, zoom: float) -> Tuple[float, float, float, float]:
    """(top, bottom, left, right) of the square centered on the focus point at `zoom`."""
    half = FRAME_HALF_SPAN / zoom
    return end_y + half, end_y - half, end_x - half, end_x + half


def video_filename(base: RenderParameters, fps: int, duration: int, end_x: float, end_y: float) -> str:
    return (f"Animation_{base.resolution_x}x{base.resolution_y}_{duration}s_{fps}Fps_"
            f"{end_x:.3f}x{end_y:.3f}.mp4")


class AnimationEngine(SingleImageEngine):
    """
    Renders a zoom sequence into <directory>/Animation and hands the frames to a
    video encoder.
    """

    def __init__(self, *args, encoder: Optional[ImageioVideoEncoder] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.encoder = encoder or ImageioVideoEncoder()

    def render_animation(
        self,
        base: RenderParameters,
        fps: int = DEFAULT_FPS,
        duration: int = DEFAULT_DURATION,
        end_x: float = DEFAULT_END_X,
        end_y: float = DEFAULT_END_Y,
        end_zoom: float = DEFAULT_END_ZOOM,
        *,
        clean_directory: bool = True,
        encode_video: bool = True,
    ) -> Tuple[CalculationInformation, List[CalculationInformation]]:
        validate_animation(base, fps, duration, end_zoom)
        frame_dir = os.path.join(base.directory, ANIMATION_SUBDIR)
        if clean_directory and os.path.isdir(frame_dir):
            shutil.rmtree(frame_dir)

        start = datetime.now()
        frame_count = fps * duration
        zooms = zoom_levels(start_zoom_for(base), end_zoom, frame_count)
        logger.info("Rendering %d frames at %dx%d towards (%r, %r), zoom %.6g -> %.6g",
                    frame_count, base.resolution_x, base.resolution_y, end_x, end_y, zooms[0], zooms[-1])

        def run(i: int) -> CalculationInformation:
            p = (base.with_viewport(*frame_viewport(end_x, end_y, zooms[i]))
                 .with_output(directory=frame_dir,
                              filename=f"{base.resolution_x}x{base.resolution_y}_{i}.png"))
            info = self.render(p, adapt=True)
            self.emit(FrameEvent(index=i, count=frame_count, zoom=zooms[i], info=info))
            logger.debug("Frame %d/%d: %s", i + 1, frame_count, info)
            return info

        infos = self.run_units(run, range(frame_count))

        video_path = None
        if encode_video:
            video_path = self.encoder.encode(
                [info.path for info in infos], fps,
                os.path.join(base.directory, video_filename(base, fps, duration, end_x, end_y)))
            if clean_directory:
                shutil.rmtree(frame_dir)

        aggregate = CalculationInformation.aggregate(
            base.resolution_x, base.resolution_y, ANIMATION_LABEL, start, infos)
        aggregate.path = video_path or frame_dir
        logger.info("%s", aggregate)
        return aggregate, infos
