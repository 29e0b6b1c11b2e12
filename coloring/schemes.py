from coloring.base import ColoringStrategy
from coloring.hsv import HsvColoring
from coloring.legacy import LegacyModuloColoring
from utils.enums import ColoringScheme

_SCHEMES = {
    ColoringScheme.HSV: HsvColoring,
    ColoringScheme.LEGACY: LegacyModuloColoring,
}

_instances: dict = {}


def coloring_for(scheme: "ColoringScheme | str") -> ColoringStrategy:
    """Shared strategy instance for a scheme; HSV unless legacy is asked for explicitly."""
    scheme = ColoringScheme.parse(scheme)
    if scheme not in _instances:
        _instances[scheme] = _SCHEMES[scheme]()
    return _instances[scheme]
