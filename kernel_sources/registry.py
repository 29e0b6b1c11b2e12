from __future__ import annotations
from typing import Dict, Any, List

# [fractal][op][BACKEND][precision] -> kernel metadata
_REGISTRY: Dict[str, Dict[str, Dict[str, Dict[str, Dict[str, Any]]]]] = {}


def register_kernel(fractal: str, op_name: str, backend: str, precision: str, **meta: Any) -> None:
    """
    Called by the kernel modules at import time. `meta` carries at least
    func, dtype and arg_order; backends read block size and build options from it.
    """
    by_backend = _REGISTRY.setdefault(fractal, {}).setdefault(op_name, {})
    by_backend.setdefault(backend.upper(), {})[precision] = meta


def lookup_kernel(backend: str, fractal: str, op_name: str, precision: str) -> Dict[str, Any]:
    be = backend.upper()
    try:
        return _REGISTRY[fractal][op_name][be][precision]
    except KeyError:
        raise KeyError(f"No {precision} '{op_name}' kernel for {fractal} on {be}") from None


def registered_precisions(backend: str, fractal: str, op_name: str) -> List[str]:
    """Precision tags registered so far; empty until the kernel module was imported."""
    return sorted(_REGISTRY.get(fractal, {}).get(op_name, {}).get(backend.upper(), {}))
