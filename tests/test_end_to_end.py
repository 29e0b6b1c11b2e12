import os

import numpy as np
from PIL import Image

from api.render_api import RenderAPI
from fractals.parameters import RenderParameters
from rendering.engines.single import SingleImageEngine
from rendering.core import Renderer


def scenario(tmp_path):
    return RenderParameters(resolution_x=100, resolution_y=100, iterations=50,
                            top=1.5, bottom=-1.5, left=-2.0, right=1.0,
                            method="cpu", directory=str(tmp_path))


def test_hundred_pixel_scenario_buffer(tmp_path, executor):
    image = SingleImageEngine(executor).produce(scenario(tmp_path))

    assert image.buffer.data.size == 100 * 100 * 3
    rgb = image.buffer.to_rgb()
    assert rgb.shape == (100, 100, 3)
    black = rgb.sum(axis=2) == 0
    assert black.any()
    assert (~black).any()
    assert np.array_equal(black, image.grid == 50)


def test_hundred_pixel_scenario_file_and_record(tmp_path, executor):
    info = Renderer(executor=executor).render_single(scenario(tmp_path))

    assert info.path == os.path.join(str(tmp_path), "100x100.png")
    with Image.open(info.path) as img:
        assert img.size == (100, 100)
        assert img.mode == "RGB"
    assert (info.resolution_x, info.resolution_y, info.method) == (100, 100, "CPU")
    assert info.start_time <= info.compute_done_time <= info.end_time


def test_api_persists_telemetry(tmp_path, executor):
    telemetry = tmp_path / "telemetry"
    api = RenderAPI(telemetry_dir=str(telemetry), executor=executor)
    info = api.render_single(scenario(tmp_path).with_output(filename="scenario"))

    assert os.path.basename(info.path) == "scenario.png"
    files = os.listdir(telemetry)
    assert len(files) == 1
    assert files[0].startswith("RenderSingle_100x100_")
