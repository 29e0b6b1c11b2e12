from dataclasses import dataclass

from rendering.calculation_info import CalculationInformation


@dataclass(frozen=True)
class TileEvent:
    x: int
    y: int
    index: int          # y * dimension_size + x
    count: int          # tiles in the matrix
    info: CalculationInformation


@dataclass(frozen=True)
class FrameEvent:
    index: int
    count: int          # frames in the sequence
    zoom: float
    info: CalculationInformation
