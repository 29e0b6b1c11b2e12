import csv

import numpy as np
import pytest

from benchmarking import benchmark
from utils.enums import CalculationMethod


def test_parse_resolution_list():
    assert benchmark.parse_resolution_list("800x600, 1280X720,") == [(800, 600), (1280, 720)]
    assert benchmark.parse_resolution_list("") == [(800, 600), (1280, 720), (1920, 1080)]


def test_parse_methods():
    assert benchmark.parse_methods("cpu,gpu-double") == [CalculationMethod.CPU, CalculationMethod.GPU_DOUBLE]


def test_benchmark_params_are_aspect_corrected():
    p = benchmark.benchmark_params(CalculationMethod.CPU, 400, 200, 50)
    assert (p.right - p.left) / (p.top - p.bottom) == pytest.approx(2.0)


def test_grids_agree():
    a = np.zeros((2, 3), dtype=np.int32)
    b = a.copy()
    b[1, 2] = 7
    assert benchmark.grids_agree(None, a) == "n/a"
    assert benchmark.grids_agree(a, a.copy()) == "equal"
    assert benchmark.grids_agree(a, b) == "1 px differ"


def test_cpu_run_writes_csv(tmp_path, monkeypatch):
    monkeypatch.setattr(benchmark, "configure_logging", lambda verbose: None)
    out = tmp_path / "bench.csv"
    code = benchmark.main(["--methods", "cpu", "--res", "40x30", "--iterations", "20",
                           "--runs", "1", "--csv", str(out)])
    assert code == 0

    with open(out, newline="") as fh:
        rows = list(csv.reader(fh))
    assert rows[0] == ["Hardware Summary"]
    header = rows.index(["Resolution", "Method", "Backend", "Time (s)", "Pixels/s", "Matches CPU"])
    [result] = rows[header + 1:]
    assert result[:3] == ["40x30", "CPU", "CPU"]
    assert float(result[3]) >= 0
    assert result[5] == "n/a"
