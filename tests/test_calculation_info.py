from datetime import datetime, timedelta

import pytest

from rendering.calculation_info import CalculationInformation
from utils.errors import CalculationStateError

T0 = datetime(2024, 5, 1, 12, 0, 0)


def finished(compute_s, encode_s, start=T0):
    info = CalculationInformation(10, 10, "CPU")
    info.start(start)
    info.mark_computed(start + timedelta(seconds=compute_s))
    info.finish(start + timedelta(seconds=compute_s + encode_s))
    return info


def test_durations():
    info = finished(1.5, 0.25)
    assert info.computation_duration == 1.5
    assert info.encoding_duration == 0.25
    assert info.total_duration == pytest.approx(info.computation_duration + info.encoding_duration)
    assert info.start_time <= info.compute_done_time <= info.end_time


def test_out_of_order_transitions_are_rejected():
    info = CalculationInformation(1, 1, "CPU")
    with pytest.raises(CalculationStateError):
        info.mark_computed()
    with pytest.raises(CalculationStateError):
        info.finish()
    info.start()
    with pytest.raises(CalculationStateError):
        info.start()
    with pytest.raises(CalculationStateError):
        info.finish()


def test_timestamps_never_go_backwards():
    info = CalculationInformation(1, 1, "CPU").start(T0)
    info.mark_computed(T0 - timedelta(seconds=5))
    info.finish(T0 - timedelta(seconds=10))
    assert info.start_time == info.compute_done_time == info.end_time == T0


def test_live_clock_keeps_order():
    info = CalculationInformation(1, 1, "CPU").start().mark_computed().finish()
    assert info.start_time <= info.compute_done_time <= info.end_time
    assert info.is_finished


def test_aggregate_sums_child_computation():
    children = [finished(1.0, 0.5), finished(2.0, 0.5)]
    agg = CalculationInformation.aggregate(20, 20, "RenderMatrix", T0, children,
                                           end=T0 + timedelta(seconds=10))
    assert agg.computation_duration == 3.0
    assert agg.total_duration == 10.0
    assert agg.method == "RenderMatrix"


def test_aggregate_is_clamped_when_units_overlap():
    children = [finished(4.0, 0.0) for _ in range(4)]
    agg = CalculationInformation.aggregate(20, 20, "RenderMatrix", T0, children,
                                           end=T0 + timedelta(seconds=5))
    assert agg.compute_done_time == agg.end_time
    assert agg.encoding_duration == 0.0


def test_summary_and_dict():
    info = finished(2.0, 1.0)
    assert str(info) == "10x10 with CPU: Total = 3.0s, Calculation = 2.0s, Printing = 1.0s"
    d = info.to_dict()
    assert d["method"] == "CPU"
    assert d["start_time"] == T0.isoformat()
    assert d["total_duration"] == 3.0
