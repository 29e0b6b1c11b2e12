from enum import Enum, auto


class BackendType(Enum):
    AUTO = auto()
    OPENCL = auto()
    CUDA = auto()


class CalculationMethod(Enum):
    CPU = auto()
    GPU_FLOAT = auto()
    GPU_DOUBLE = auto()

    @property
    def precision(self) -> str:
        return "f32" if self is CalculationMethod.GPU_FLOAT else "f64"

    @property
    def uses_accelerator(self) -> bool:
        return self is not CalculationMethod.CPU

    @classmethod
    def parse(cls, value: "str | CalculationMethod") -> "CalculationMethod":
        if isinstance(value, cls):
            return value
        key = str(value).strip().upper().replace("-", "_")
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"Unknown calculation method: {value!r}") from None


class ColoringScheme(Enum):
    HSV = auto()
    LEGACY = auto()

    @classmethod
    def parse(cls, value: "str | ColoringScheme") -> "ColoringScheme":
        if isinstance(value, cls):
            return value
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown coloring scheme: {value!r}") from None
