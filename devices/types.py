from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Dict


@dataclass(frozen=True)
class DeviceInfo:
    """
    One compute device reported by a provider. `device_id` is the ordinal the
    matching backend accepts (None for the CPU); `extra` holds provider
    specific facts such as core counts and the "fp64" capability flag.
    """
    backend: str
    device_id: Optional[int]
    name: str
    vendor: Optional[str] = None
    driver: Optional[str] = None
    compute_capability: Optional[str] = None
    memory_total_mb: Optional[int] = None
    memory_free_mb: Optional[int] = None
    score: float = 0.0
    is_available: bool = True
    extra: Dict[str, object] = field(default_factory=dict)

    @property
    def supports_fp64(self) -> bool:
        # providers that do not report the flag are assumed capable
        return bool(self.extra.get("fp64", True))

    def describe(self) -> str:
        ident = "" if self.device_id is None else f"#{self.device_id} "
        memory = f", {self.memory_total_mb} MB" if self.memory_total_mb else ""
        return f"[{self.backend}] {ident}{self.name}{memory} (score {self.score:.2f})"
