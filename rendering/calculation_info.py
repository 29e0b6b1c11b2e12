from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Sequence, Dict, Any

from utils.errors import CalculationStateError


@dataclass
class CalculationInformation:
    """
    Timing record of one render unit (single image, tile, frame) or of a
    composite render. Stages must be marked in order start -> computed -> finished;
    timestamps never decrease.
    """
    resolution_x: int
    resolution_y: int
    method: str
    start_time: Optional[datetime] = None
    compute_done_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    path: Optional[str] = None

    # ---- transitions -----------------------------------------------------

    def start(self, at: Optional[datetime] = None) -> "CalculationInformation":
        if self.start_time is not None:
            raise CalculationStateError("start() called twice")
        self.start_time = at or datetime.now()
        return self

    def mark_computed(self, at: Optional[datetime] = None) -> "CalculationInformation":
        if self.start_time is None:
            raise CalculationStateError("mark_computed() called before start()")
        if self.compute_done_time is not None:
            raise CalculationStateError("mark_computed() called twice")
        self.compute_done_time = max(at or datetime.now(), self.start_time)
        return self

    def finish(self, at: Optional[datetime] = None) -> "CalculationInformation":
        if self.compute_done_time is None:
            raise CalculationStateError("finish() called before mark_computed()")
        if self.end_time is not None:
            raise CalculationStateError("finish() called twice")
        self.end_time = max(at or datetime.now(), self.compute_done_time)
        return self

    @property
    def is_finished(self) -> bool:
        return self.end_time is not None

    # ---- durations (seconds) --------------------------------------------

    @property
    def computation_duration(self) -> float:
        return self._seconds(self.start_time, self.compute_done_time)

    @property
    def encoding_duration(self) -> float:
        return self._seconds(self.compute_done_time, self.end_time)

    @property
    def total_duration(self) -> float:
        return self._seconds(self.start_time, self.end_time)

    @staticmethod
    def _seconds(a: Optional[datetime], b: Optional[datetime]) -> float:
        if a is None or b is None:
            return 0.0
        return (b - a).total_seconds()

    # ---- composite -------------------------------------------------------

    @classmethod
    def aggregate(cls, resolution_x: int, resolution_y: int, method: str, start: datetime,
                  children: Sequence["CalculationInformation"],
                  end: Optional[datetime] = None) -> "CalculationInformation":
        """
        Composite record: compute_done is start plus the summed child computation
        time (a pseudo-timestamp), clamped to end when units overlapped.
        """
        end = max(end or datetime.now(), start)
        computed = start + timedelta(seconds=sum(c.computation_duration for c in children))
        info = cls(resolution_x, resolution_y, method)
        info.start(start)
        info.mark_computed(min(computed, end))
        info.finish(end)
        return info

    # ---- presentation ----------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        def iso(t: Optional[datetime]) -> Optional[str]:
            return t.isoformat() if t else None
        return {
            "resolution_x": self.resolution_x,
            "resolution_y": self.resolution_y,
            "method": self.method,
            "path": self.path,
            "start_time": iso(self.start_time),
            "compute_done_time": iso(self.compute_done_time),
            "end_time": iso(self.end_time),
            "computation_duration": self.computation_duration,
            "encoding_duration": self.encoding_duration,
            "total_duration": self.total_duration,
        }

    def __str__(self) -> str:
        return (f"{self.resolution_x}x{self.resolution_y} with {self.method}: "
                f"Total = {self.total_duration}s, Calculation = {self.computation_duration}s, "
                f"Printing = {self.encoding_duration}s")
