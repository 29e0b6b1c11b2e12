from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import List, Tuple

from fractals.parameters import RenderParameters, validate_matrix
from fractals.viewport import adapt_to_aspect_ratio
from rendering.calculation_info import CalculationInformation
from rendering.engines.single import SingleImageEngine
from rendering.events import TileEvent

logger = logging.getLogger(__name__)

MATRIX_SUBDIR = "Matrix"
MATRIX_LABEL = "RenderMatrix"


def tile_bounds(top: float, bottom: float, left: float, right: float,
                dimension_size: int, x: int, y: int) -> Tuple[float, float, float, float]:
    """
    Bounds of tile (x, y) in an N x N split; y counts rows from the top.
    Adjacent tiles share their edges.
    """
    n = dimension_size
    tile_top = top - (top - bottom) / n * y
    tile_bottom = tile_top - (top - bottom) / n
    tile_left = left + (right - left) / n * x
    tile_right = tile_left + (right - left) / n
    return tile_top, tile_bottom, tile_left, tile_right


def tile_parameters(base: RenderParameters, dimension_size: int) -> List[Tuple[int, int, RenderParameters]]:
    """
    (x, y, parameters) for every tile in index order y * N + x.
    The base viewport is aspect-corrected once; tiles are not corrected again.
    """
    n = dimension_size
    top, bottom, left, right = adapt_to_aspect_ratio(
        base.resolution_x, base.resolution_y, base.top, base.bottom, base.left, base.right)
    tile_w, tile_h = base.resolution_x // n, base.resolution_y // n
    directory = os.path.join(base.directory, MATRIX_SUBDIR)

    tiles = []
    for y in range(n):
        for x in range(n):
            p = (base.with_resolution(tile_w, tile_h)
                 .with_viewport(*tile_bounds(top, bottom, left, right, n, x, y))
                 .with_output(directory=directory, filename=f"{tile_w}x{tile_h}_{y * n + x}.png"))
            tiles.append((x, y, p))
    return tiles


class MatrixEngine(SingleImageEngine):
    """
    Splits a render into N x N independently written tiles under <directory>/Matrix.
    """

    def render_matrix(self, base: RenderParameters,
                      dimension_size: int) -> Tuple[CalculationInformation, List[CalculationInformation]]:
        validate_matrix(base, dimension_size)
        start = datetime.now()
        tiles = tile_parameters(base, dimension_size)
        count = len(tiles)
        logger.info("Rendering %dx%d matrix of %dx%d tiles (%s)", dimension_size, dimension_size,
                    tiles[0][2].resolution_x, tiles[0][2].resolution_y, base.method.name)

        def run(tile: Tuple[int, int, RenderParameters]) -> CalculationInformation:
            x, y, p = tile
            info = self.render(p, adapt=False)
            self.emit(TileEvent(x=x, y=y, index=y * dimension_size + x, count=count, info=info))
            logger.debug("Tile %d/%d: %s", y * dimension_size + x + 1, count, info)
            return info

        infos = self.run_units(run, tiles)
        aggregate = CalculationInformation.aggregate(
            base.resolution_x, base.resolution_y, MATRIX_LABEL, start, infos)
        aggregate.path = os.path.join(base.directory, MATRIX_SUBDIR)
        logger.info("%s", aggregate)
        return aggregate, infos
