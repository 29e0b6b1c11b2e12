import math
import os

import pytest

from api.render_api import RenderParametersBuilder
from fractals.parameters import (RenderParameters, validate_parameters, validate_matrix,
                                 validate_animation, normalize_filename, MAX_DIMENSION)
from utils.enums import CalculationMethod, ColoringScheme
from utils.errors import InvalidParameterError


def test_defaults():
    p = RenderParameters()
    assert (p.resolution_x, p.resolution_y, p.iterations) == (1000, 1000, 255)
    assert (p.top, p.bottom, p.left, p.right) == (1.5, -1.5, -2.0, 1.0)
    assert p.method is CalculationMethod.CPU
    assert p.coloring is ColoringScheme.HSV
    assert p.output_name == "1000x1000.png"
    assert validate_parameters(p) is p


@pytest.mark.parametrize("raw, expected", [
    (None, None),
    ("   ", None),
    ("mandel", "mandel.png"),
    ("mandel.png", "mandel.png"),
    (".png", None),
])
def test_normalize_filename(raw, expected):
    assert normalize_filename(raw) == expected


def test_output_path_uses_directory_and_filename(tmp_path):
    p = RenderParameters(directory=str(tmp_path), filename="x")
    assert p.output_path == os.path.join(str(tmp_path), "x.png")


def test_methods_parse_from_cli_spelling():
    assert RenderParameters(method="gpu-double").method is CalculationMethod.GPU_DOUBLE
    assert RenderParameters(method="GPU_FLOAT").method.precision == "f32"
    assert RenderParameters(coloring="legacy").coloring is ColoringScheme.LEGACY
    with pytest.raises(InvalidParameterError):
        RenderParameters(method="quantum")


@pytest.mark.parametrize("changes", [
    {"resolution_x": 0},
    {"resolution_y": -3},
    {"resolution_x": MAX_DIMENSION + 1},
    {"resolution_x": math.nan},
    {"resolution_y": math.inf},
    {"resolution_x": 12.5},
    {"resolution_x": 40000, "resolution_y": 40000},
    {"iterations": 0},
    {"iterations": 2 ** 31},
    {"iterations": math.nan},
    {"top": -2.0},
    {"left": 1.0},
    {"right": math.nan},
    {"top": math.inf},
    {"method": CalculationMethod.GPU_FLOAT, "iterations": 2 ** 24 + 1},
])
def test_invalid_parameters_are_rejected(changes):
    with pytest.raises(InvalidParameterError) as exc:
        validate_parameters(RenderParameters(**changes))
    assert exc.value.describe().startswith("parameter validation failed: ")


def test_largest_raster_is_accepted():
    validate_parameters(RenderParameters(resolution_x=MAX_DIMENSION, resolution_y=10000))


def test_matrix_limits():
    p = RenderParameters(resolution_x=10, resolution_y=10)
    validate_matrix(p, 10)
    with pytest.raises(InvalidParameterError):
        validate_matrix(p, 0)
    with pytest.raises(InvalidParameterError):
        validate_matrix(p, 11)


@pytest.mark.parametrize("fps, duration, end_zoom", [
    (0, 10, 1e3), (121, 10, 1e3), (30, 0, 1e3), (30, 36001, 1e3),
    (30, 10, 0.0), (30, 10, math.inf), (math.nan, 10, 1e3),
])
def test_animation_limits(fps, duration, end_zoom):
    with pytest.raises(InvalidParameterError):
        validate_animation(RenderParameters(), fps, duration, end_zoom)


def test_derived_parameters_do_not_alias():
    base = RenderParameters()
    tile = base.with_resolution(10, 20).with_viewport(1.0, 0.0, 0.0, 1.0).with_output(filename="t")
    assert (base.resolution_x, base.top, base.filename) == (1000, 1.5, None)
    assert (tile.resolution_x, tile.resolution_y, tile.top, tile.filename) == (10, 20, 1.0, "t.png")
    assert tile.directory == base.directory


def test_builder_and_presets(tmp_path):
    p = (RenderParametersBuilder()
         .preset("1080p")
         .iterations(500)
         .viewport(1.0, -1.0, -1.0, 1.0)
         .method("gpu-float")
         .coloring("legacy")
         .output(str(tmp_path), "shot")
         .build())
    assert (p.resolution_x, p.resolution_y) == (1920, 1080)
    assert p.iterations == 500
    assert p.method is CalculationMethod.GPU_FLOAT
    assert p.output_path == os.path.join(str(tmp_path), "shot.png")

    with pytest.raises(InvalidParameterError):
        RenderParametersBuilder().preset("999p")
