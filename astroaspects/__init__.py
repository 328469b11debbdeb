# astroaspects/__init__.py
from astroaspects.core.aspects import (
    AspectCalculator,
    AspectData,
    FormedAspect,
    InvalidArgumentError,
    PointRef,
    angular_gap,
    compare_aspects_by_precision,
    precision_key,
)
from astroaspects.core.constants import DEFAULT_ASPECTS, radians_to_degree
from astroaspects.version import VERSION

__all__ = [
    "AspectCalculator",
    "AspectData",
    "FormedAspect",
    "InvalidArgumentError",
    "PointRef",
    "angular_gap",
    "compare_aspects_by_precision",
    "precision_key",
    "DEFAULT_ASPECTS",
    "radians_to_degree",
    "VERSION",
]
