from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Optional, Callable, Any, List, Tuple

from fractals.parameters import (RenderParameters, DEFAULT_DIRECTORY, validate_parameters,
                                 validate_matrix, validate_animation)
from rendering.calculation_info import CalculationInformation
from rendering.core import Renderer
from rendering.engines.animation import (DEFAULT_FPS, DEFAULT_DURATION, DEFAULT_END_X,
                                         DEFAULT_END_Y, DEFAULT_END_ZOOM)
from output.telemetry import JsonTelemetrySink
from utils.enums import CalculationMethod, ColoringScheme
from utils.errors import MandelbakerError, InvalidParameterError

logger = logging.getLogger(__name__)

RESOLUTION_PRESETS = {
    "2160p": (3840, 2160),
    "1440p": (2560, 1440),
    "1080p": (1920, 1080),
    "720p": (1280, 720),
    "480p": (854, 480),
    "360p": (640, 360),
}


class RenderParametersBuilder:
    """
    Fluent builder for RenderParameters.
    """
    def __init__(self, base: Optional[RenderParameters] = None):
        p = base or RenderParameters()
        self._fields = asdict(p)

    def resolution(self, width: int, height: int) -> 'RenderParametersBuilder':
        self._fields["resolution_x"] = width
        self._fields["resolution_y"] = height
        return self

    def preset(self, name: str) -> 'RenderParametersBuilder':
        try:
            w, h = RESOLUTION_PRESETS[name.lower()]
        except KeyError:
            raise InvalidParameterError(
                f"unknown resolution preset {name!r}, expected one of {', '.join(RESOLUTION_PRESETS)}") from None
        return self.resolution(w, h)

    def iterations(self, value: int) -> 'RenderParametersBuilder':
        self._fields["iterations"] = value
        return self

    def viewport(self, top: float, bottom: float, left: float, right: float) -> 'RenderParametersBuilder':
        self._fields.update(top=top, bottom=bottom, left=left, right=right)
        return self

    def method(self, method: CalculationMethod | str) -> 'RenderParametersBuilder':
        self._fields["method"] = method
        return self

    def coloring(self, scheme: ColoringScheme | str) -> 'RenderParametersBuilder':
        self._fields["coloring"] = scheme
        return self

    def output(self, directory: Optional[str] = None, filename: Optional[str] = None) -> 'RenderParametersBuilder':
        self._fields["directory"] = directory or DEFAULT_DIRECTORY
        self._fields["filename"] = filename
        return self

    def build(self) -> RenderParameters:
        return RenderParameters(**self._fields)


class RenderAPI:
    """
    Facade for the three render modes: validates parameters at the boundary,
    persists timing telemetry and logs failures with the stage they occurred in.
    """
    def __init__(self, renderer: Optional[Renderer] = None, telemetry_dir: Optional[str] = None,
                 **renderer_kwargs: Any):
        self.renderer: Renderer = renderer or Renderer(**renderer_kwargs)
        self.telemetry = JsonTelemetrySink(telemetry_dir) if telemetry_dir else None

    @staticmethod
    def configure(base: Optional[RenderParameters] = None) -> RenderParametersBuilder:
        """
        Starts a fluent parameter builder.

        Args:
            base (RenderParameters): Optional parameter set to start from.

        Returns:
            RenderParametersBuilder: A builder for render parameters.
        """
        return RenderParametersBuilder(base)

    def on_event(self, cb: Callable[[Any], None]) -> None:
        """Receive TileEvent / FrameEvent progress notifications."""
        self.renderer.matrix.on_event = cb
        self.renderer.animation.on_event = cb

    def close(self) -> None:
        self.renderer.close()

    # ----------- Render modes ----------------------------

    def render_single(self, params: RenderParameters) -> CalculationInformation:
        """
        Renders one image to params.output_path.

        Args:
            params (RenderParameters): What to render and where to write it.

        Returns:
            CalculationInformation: The timing record of the render.
        """
        def run():
            validate_parameters(params)
            info = self.renderer.render_single(params)
            self._persist("RenderSingle", info, [], params)
            return info
        return self._guard(run)

    def render_matrix(self, params: RenderParameters,
                      dimension_size: int) -> Tuple[CalculationInformation, List[CalculationInformation]]:
        """
        Renders the viewport as dimension_size x dimension_size tiles.

        Args:
            params (RenderParameters): The full-image parameters.
            dimension_size (int): Tiles per side.

        Returns:
            tuple: The aggregate record and one record per tile in index order.
        """
        def run():
            validate_matrix(params, dimension_size)
            aggregate, infos = self.renderer.render_matrix(params, dimension_size)
            self._persist("RenderMatrix", aggregate, infos, params, dimension_size=dimension_size)
            return aggregate, infos
        return self._guard(run)

    def render_animation(self, params: RenderParameters, fps: int = DEFAULT_FPS,
                         duration: int = DEFAULT_DURATION, end_x: float = DEFAULT_END_X,
                         end_y: float = DEFAULT_END_Y, end_zoom: float = DEFAULT_END_ZOOM,
                         *, clean_directory: bool = True, encode_video: bool = True
                         ) -> Tuple[CalculationInformation, List[CalculationInformation]]:
        """
        Renders a zoom sequence towards (end_x, end_y) and encodes it to video.

        Args:
            params (RenderParameters): Resolution, start viewport and output directory.
            fps (int): Frames per second, 1 to 120.
            duration (int): Length in seconds, 1 to 36000.
            end_x (float): Real part of the zoom focus.
            end_y (float): Imaginary part of the zoom focus.
            end_zoom (float): Zoom level of the last frame.

        Returns:
            tuple: The aggregate record and one record per frame in order.
        """
        def run():
            validate_animation(params, fps, duration, end_zoom)
            aggregate, infos = self.renderer.render_animation(
                params, fps, duration, end_x, end_y, end_zoom,
                clean_directory=clean_directory, encode_video=encode_video)
            self._persist("RenderAnimation", aggregate, infos, params, fps=fps, duration=duration,
                          end_x=end_x, end_y=end_y, end_zoom=end_zoom)
            return aggregate, infos
        return self._guard(run)

    # ----------- helpers ---------------------------------

    def _persist(self, kind: str, aggregate: CalculationInformation,
                 units: List[CalculationInformation], params: RenderParameters, **extra: Any) -> None:
        if self.telemetry is None:
            return
        fields = {k: (v.name if hasattr(v, "name") else v) for k, v in asdict(params).items()}
        self.telemetry.write(kind, aggregate, units, {**fields, **extra})

    @staticmethod
    def _guard(fn: Callable[[], Any]) -> Any:
        try:
            return fn()
        except MandelbakerError as e:
            logger.error("%s", e.describe())
            raise
