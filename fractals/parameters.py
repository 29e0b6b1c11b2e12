from __future__ import annotations

import math
import numbers
import os
from dataclasses import dataclass, replace
from typing import Optional

from fractals.base import Viewport, RenderSettings
from utils.enums import CalculationMethod, ColoringScheme
from utils.errors import InvalidParameterError

# 24 bpp rasters sized with signed 32-bit arithmetic
MAX_DIMENSION = 65_535
MAX_PIXELS = 715_776_516
MAX_ITERATIONS = 2 ** 31 - 1
# the cap travels in the float32 parameter vector for GPU_FLOAT
MAX_FLOAT32_ITERATIONS = 2 ** 24

MIN_FPS, MAX_FPS = 1, 120
MIN_DURATION, MAX_DURATION = 1, 10 * 3600

DEFAULT_DIRECTORY = os.environ.get("MANDELBAKER_OUTPUT", "output")


def normalize_filename(filename: Optional[str]) -> Optional[str]:
    """
    Blank names mean "derive a name from the resolution"; anything else gets
    a .png suffix if it does not already carry one.
    """
    if filename is None or not filename.strip():
        return None
    filename = filename.strip()
    if filename.lower().endswith(".png"):
        if len(filename) <= 4:
            return None
        return filename
    return filename + ".png"


@dataclass(frozen=True)
class RenderParameters:
    """
    Immutable description of one render unit.
    Tiles and animation frames derive fresh instances through the with_* helpers
    instead of mutating a shared object.
    """
    resolution_x: int = 1000
    resolution_y: int = 1000
    iterations: int = 255
    top: float = 1.5
    bottom: float = -1.5
    left: float = -2.0
    right: float = 1.0
    method: CalculationMethod = CalculationMethod.CPU
    coloring: ColoringScheme = ColoringScheme.HSV
    directory: str = DEFAULT_DIRECTORY
    filename: Optional[str] = None

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "method", CalculationMethod.parse(self.method))
            object.__setattr__(self, "coloring", ColoringScheme.parse(self.coloring))
        except ValueError as e:
            raise InvalidParameterError(str(e)) from None
        object.__setattr__(self, "filename", normalize_filename(self.filename))

    # ---- derived views ---------------------------------------------------

    @property
    def viewport(self) -> Viewport:
        return Viewport(self.top, self.bottom, self.left, self.right,
                        self.resolution_x, self.resolution_y)

    @property
    def settings(self) -> RenderSettings:
        return RenderSettings(max_iter=self.iterations, precision=self.method.precision)

    @property
    def output_name(self) -> str:
        return self.filename or f"{self.resolution_x}x{self.resolution_y}.png"

    @property
    def output_path(self) -> str:
        return os.path.join(self.directory, self.output_name)

    # ---- derivation ------------------------------------------------------

    def with_viewport(self, top: float, bottom: float, left: float, right: float) -> "RenderParameters":
        return replace(self, top=top, bottom=bottom, left=left, right=right)

    def with_resolution(self, resolution_x: int, resolution_y: int) -> "RenderParameters":
        return replace(self, resolution_x=resolution_x, resolution_y=resolution_y)

    def with_output(self, directory: Optional[str] = None, filename: Optional[str] = None) -> "RenderParameters":
        return replace(self,
                       directory=self.directory if directory is None else directory,
                       filename=filename)


def _is_positive_int(value) -> bool:
    """Whole numbers >= 1, given as int or as an integral float; rejects NaN and inf."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return math.isfinite(value) and int(value) == value and value >= 1


def validate_resolution(resolution_x: int, resolution_y: int) -> None:
    for name, value in (("resolution_x", resolution_x), ("resolution_y", resolution_y)):
        if not _is_positive_int(value):
            raise InvalidParameterError(f"{name} must be a positive integer, got {value}")
        if value > MAX_DIMENSION:
            raise InvalidParameterError(
                f"{name}={value} exceeds the maximum pixel dimension of {MAX_DIMENSION}")
    pixels = int(resolution_x) * int(resolution_y)
    if pixels > MAX_PIXELS:
        raise InvalidParameterError(
            f"{resolution_x}x{resolution_y} = {pixels} pixels exceeds the maximum of {MAX_PIXELS} pixels")


def validate_parameters(p: RenderParameters) -> RenderParameters:
    """
    Rejects parameter sets that must never reach a kernel.
    Raises InvalidParameterError naming the violated limit; returns p otherwise.
    """
    validate_resolution(p.resolution_x, p.resolution_y)

    if not _is_positive_int(p.iterations):
        raise InvalidParameterError(f"iterations must be a positive integer, got {p.iterations}")
    if p.iterations > MAX_ITERATIONS:
        raise InvalidParameterError(f"iterations={p.iterations} exceeds {MAX_ITERATIONS}")
    if p.method is CalculationMethod.GPU_FLOAT and p.iterations > MAX_FLOAT32_ITERATIONS:
        raise InvalidParameterError(
            f"iterations={p.iterations} exceeds {MAX_FLOAT32_ITERATIONS}, the largest cap "
            f"representable exactly in single precision")

    bounds = {"top": p.top, "bottom": p.bottom, "left": p.left, "right": p.right}
    for name, value in bounds.items():
        if not math.isfinite(value):
            raise InvalidParameterError(f"{name} must be finite, got {value}")
    if not p.top > p.bottom:
        raise InvalidParameterError(f"degenerate viewport: top ({p.top}) must be greater than bottom ({p.bottom})")
    if not p.right > p.left:
        raise InvalidParameterError(f"degenerate viewport: right ({p.right}) must be greater than left ({p.left})")
    return p


def validate_matrix(p: RenderParameters, dimension_size: int) -> None:
    validate_parameters(p)
    if not _is_positive_int(dimension_size):
        raise InvalidParameterError(f"dimension_size must be a positive integer, got {dimension_size}")
    if p.resolution_x // dimension_size < 1 or p.resolution_y // dimension_size < 1:
        raise InvalidParameterError(
            f"dimension_size={dimension_size} leaves tiles without pixels at "
            f"{p.resolution_x}x{p.resolution_y}")


def validate_animation(p: RenderParameters, fps: int, duration: int, end_zoom: float) -> None:
    validate_parameters(p)
    if not _is_positive_int(fps) or not MIN_FPS <= fps <= MAX_FPS:
        raise InvalidParameterError(f"fps must be an integer between {MIN_FPS} and {MAX_FPS}, got {fps}")
    if not _is_positive_int(duration) or not MIN_DURATION <= duration <= MAX_DURATION:
        raise InvalidParameterError(
            f"duration must be an integer between {MIN_DURATION} and {MAX_DURATION} seconds, got {duration}")
    if not math.isfinite(end_zoom) or end_zoom <= 0:
        raise InvalidParameterError(f"end_zoom must be a positive finite number, got {end_zoom}")
