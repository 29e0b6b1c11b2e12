from __future__ import annotations
import importlib
from typing import Dict, Any

from kernel_sources.registry import lookup_kernel


KERNEL_ROOT = "kernel_sources"


def _module_name(backend: str, fractal: str, operation: str) -> str:
    return f"{KERNEL_ROOT}.{backend.lower()}.{fractal.lower()}.{operation.lower()}"


def load_kernel(backend: str, fractal: str, operation: str, precision: str) -> Dict[str, Any]:
    """
    Import the kernel module by convention (its import registers the kernels)
    and return the registered metadata for the requested precision.
    Raises ImportError if the backend's toolkit is missing, KeyError if the
    module does not register the requested kernel.
    """
    importlib.import_module(_module_name(backend, fractal, operation))
    meta = lookup_kernel(backend, fractal, operation, precision)
    _validate_meta(backend, meta, f"registry[{fractal}.{operation}:{backend}/{precision}]")
    return meta


def _validate_meta(backend: str, meta: Dict[str, Any], where: str) -> None:
    if "arg_order" not in meta or not isinstance(meta["arg_order"], (list, tuple)):
        raise KeyError(f"{where} must provide an 'arg_order' list")
    if "func" not in meta:
        raise KeyError(f"{where} must provide 'func'")
    if backend.upper() == "OPENCL":
        if "src" not in meta["func"] or "kernel_name" not in meta["func"]:
            raise KeyError(f"{where} must provide 'src' and 'kernel_name' for OpenCL")
    if "dtype" not in meta:
        raise KeyError(f"{where} must provide the parameter 'dtype'")
