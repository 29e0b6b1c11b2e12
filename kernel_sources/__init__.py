# Escape-time kernels, one module per backend under <backend>/<fractal>/<op>.py
from .loader import load_kernel
from .registry import register_kernel, lookup_kernel, registered_precisions

__all__ = ["load_kernel", "register_kernel", "lookup_kernel", "registered_precisions"]
__version__ = "0.3.0"
