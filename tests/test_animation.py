import os

import pytest

from fractals.parameters import RenderParameters
from rendering.engines.animation import (AnimationEngine, frame_viewport, start_zoom_for,
                                         video_filename, zoom_levels)
from rendering.events import FrameEvent
from utils.errors import InvalidParameterError


class RecordingEncoder:
    def __init__(self):
        self.calls = []

    def encode(self, frame_paths, fps, output_path):
        assert all(os.path.exists(p) for p in frame_paths)
        self.calls.append((list(frame_paths), fps, output_path))
        return output_path


def test_zoom_endpoints_and_monotonicity():
    zooms = zoom_levels(1.0, 3e15, 300)
    assert len(zooms) == 300
    assert zooms[0] == 1.0
    assert zooms[-1] == pytest.approx(3e15, rel=1e-9)
    assert all(a < b for a, b in zip(zooms, zooms[1:]))


def test_zoom_out_is_monotonic_too():
    zooms = zoom_levels(4.0, 0.5, 10)
    assert zooms[-1] == pytest.approx(0.5)
    assert all(a > b for a, b in zip(zooms, zooms[1:]))


def test_single_frame_stays_at_start_zoom():
    assert zoom_levels(2.5, 1e9, 1) == [2.5]
    with pytest.raises(ValueError):
        zoom_levels(1.0, 2.0, 0)


def test_start_zoom_comes_from_the_corrected_viewport():
    assert start_zoom_for(RenderParameters()) == 1.0
    # 1:2 raster doubles the corrected height, halving the zoom
    assert start_zoom_for(RenderParameters(resolution_x=500, resolution_y=1000)) == pytest.approx(0.5)


def test_frame_viewport_is_centered_on_the_focus():
    top, bottom, left, right = frame_viewport(0.25, -0.5, 2.0)
    assert (top, bottom, left, right) == (0.25, -1.25, -0.5, 1.0)


def test_video_filename():
    p = RenderParameters(resolution_x=1280, resolution_y=720)
    assert (video_filename(p, 30, 10, 0.36024044343761435, -0.6413130610648031)
            == "Animation_1280x720_10s_30Fps_0.360x-0.641.mp4")


def test_frames_are_rendered_and_encoded(tmp_path, executor):
    encoder = RecordingEncoder()
    events = []
    engine = AnimationEngine(executor, on_event=events.append, encoder=encoder)
    base = RenderParameters(resolution_x=32, resolution_y=24, iterations=30, directory=str(tmp_path))

    aggregate, infos = engine.render_animation(base, fps=3, duration=1, end_x=-0.75, end_y=0.1,
                                               end_zoom=50.0, clean_directory=False)

    frame_dir = os.path.join(str(tmp_path), "Animation")
    assert [os.path.basename(i.path) for i in infos] == ["32x24_0.png", "32x24_1.png", "32x24_2.png"]
    assert sorted(os.listdir(frame_dir)) == ["32x24_0.png", "32x24_1.png", "32x24_2.png"]
    assert [e.index for e in events] == [0, 1, 2]
    assert all(isinstance(e, FrameEvent) for e in events)
    assert events[-1].zoom == pytest.approx(50.0)

    (paths, fps, output), = encoder.calls
    assert paths == [i.path for i in infos]
    assert fps == 3
    assert output == os.path.join(str(tmp_path), "Animation_32x24_1s_3Fps_-0.750x0.100.mp4")
    assert aggregate.path == output
    assert aggregate.method == "RenderAnimation"
    assert aggregate.start_time <= aggregate.compute_done_time <= aggregate.end_time


def test_clean_directory_removes_stale_and_consumed_frames(tmp_path, executor):
    frame_dir = tmp_path / "Animation"
    frame_dir.mkdir()
    (frame_dir / "stale.png").write_bytes(b"old")

    encoder = RecordingEncoder()
    engine = AnimationEngine(executor, encoder=encoder)
    base = RenderParameters(resolution_x=16, resolution_y=16, iterations=10, directory=str(tmp_path))
    engine.render_animation(base, fps=2, duration=1, end_zoom=10.0, clean_directory=True)

    frames, _, _ = encoder.calls[0]
    assert [os.path.basename(p) for p in frames] == ["16x16_0.png", "16x16_1.png"]
    assert not frame_dir.exists()


def test_frames_only_without_video(tmp_path, executor):
    encoder = RecordingEncoder()
    engine = AnimationEngine(executor, encoder=encoder, max_workers=2)
    base = RenderParameters(resolution_x=16, resolution_y=16, iterations=10, directory=str(tmp_path))
    aggregate, infos = engine.render_animation(base, fps=4, duration=1, end_zoom=10.0, encode_video=False)

    assert encoder.calls == []
    assert len(infos) == 4
    assert aggregate.path == os.path.join(str(tmp_path), "Animation")
    assert all(os.path.exists(i.path) for i in infos)


def test_invalid_animation_is_rejected_before_rendering(tmp_path, executor):
    engine = AnimationEngine(executor, encoder=RecordingEncoder())
    with pytest.raises(InvalidParameterError):
        engine.render_animation(RenderParameters(directory=str(tmp_path)), fps=0, duration=1)
    assert not (tmp_path / "Animation").exists()
