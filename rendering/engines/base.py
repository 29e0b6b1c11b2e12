from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Callable, Iterable, List, TypeVar, Any

from rendering.executor import RenderExecutor
from output.image_writer import PillowImageWriter

T = TypeVar("T")
R = TypeVar("R")


class BaseRenderEngine:
    """
    Base class for the render engines (single image, matrix, animation).

    Responsibilities:
      - Decide *how* a request decomposes into render units,
      - Emit progress events via on_event (if given),
      - Delegate *execution* to an executor and encoding to a writer.
    """

    def __init__(
        self,
        executor: Optional[RenderExecutor] = None,
        writer: Optional[PillowImageWriter] = None,
        on_event: Optional[Callable[[Any], None]] = None,
        max_workers: int = 1,
    ) -> None:
        self.executor = executor or RenderExecutor()
        self.writer = writer or PillowImageWriter()
        self.on_event = on_event
        self.max_workers = max(1, int(max_workers))

    def emit(self, event: Any) -> None:
        cb = self.on_event
        if callable(cb):
            cb(event)

    def run_units(self, fn: Callable[[T], R], items: Iterable[T]) -> List[R]:
        """
        Run independent units, sequentially or on a thread pool.
        Results come back in submission order; the first failure propagates.
        """
        items = list(items)
        if self.max_workers == 1 or len(items) <= 1:
            return [fn(item) for item in items]
        with ThreadPoolExecutor(max_workers=self.max_workers) as ex:
            futures = [ex.submit(fn, item) for item in items]
            return [f.result() for f in futures]
