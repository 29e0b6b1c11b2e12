from __future__ import annotations


class MandelbakerError(Exception):
    """
    Base class for render failures.
    Every error names the pipeline stage that failed so callers can report
    "<stage> failed: <message>" without inspecting the exception type.
    """
    stage: str = "render"

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        super().__init__(message)
        if stage is not None:
            self.stage = stage

    def describe(self) -> str:
        return f"{self.stage} failed: {self}"


class InvalidParameterError(MandelbakerError, ValueError):
    stage = "parameter validation"


class AcceleratorInitError(MandelbakerError):
    """No device, unsupported capability or kernel compilation failure."""
    stage = "device initialization"

    def __init__(self, message: str, *, backend: str | None = None) -> None:
        super().__init__(message)
        self.backend = backend


class AcceleratorRuntimeError(MandelbakerError):
    """Kernel dispatch or device-to-host transfer failed."""
    stage = "computation"


class EncodingError(MandelbakerError):
    stage = "encoding"


class CalculationStateError(MandelbakerError, RuntimeError):
    stage = "timing"
