# astroaspects/core/aspects.py
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence

from astroaspects.core.constants import DEFAULT_ASPECTS, FULL_CIRCLE_DEG, HALF_CIRCLE_DEG

__all__ = [
    "AspectCalculator",
    "AspectData",
    "FormedAspect",
    "PointRef",
    "InvalidArgumentError",
    "angular_gap",
    "compare_aspects_by_precision",
    "precision_key",
]

log = logging.getLogger(__name__)

# name -> [position] or [position, speed]
Points = Mapping[str, Sequence[float]]


class InvalidArgumentError(ValueError):
    """Raised when the engine is constructed without a reference point set."""


# ─────────────────────────────────────────────────────────────────────────────
# Core math helpers
# ─────────────────────────────────────────────────────────────────────────────

def angular_gap(point: float, to_point: float) -> float:
    """Separation on the shorter arc, in [0, 180]."""
    gap = abs(point - to_point) % FULL_CIRCLE_DEG
    if gap > HALF_CIRCLE_DEG:
        gap = FULL_CIRCLE_DEG - gap
    return gap

_PRECISION_QUANTUM = Decimal("0.0001")

def _format_precision(value: float) -> str:
    """
    Four decimals, ties rounded away from zero (0.03125 -> "0.0313",
    -0.03125 -> "-0.0313"). Decimal(float) is exact, so only true binary
    ties are affected. Adding 0.0 turns -0.0 into 0.0.
    """
    quantized = Decimal(value + 0.0).quantize(_PRECISION_QUANTUM, rounding=ROUND_HALF_UP)
    return f"{quantized:f}"

# ─────────────────────────────────────────────────────────────────────────────
# Catalog entries & results
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class AspectData:
    name: str
    degree: float          # exact separation, 0..180
    orbit: float           # total window width, centred on `degree`
    color: str = ""
    line_style: str = ""

    @classmethod
    def from_mapping(cls, name: str, raw: Mapping[str, Any]) -> "AspectData":
        return cls(
            name=name,
            degree=raw["degree"],
            orbit=raw["orbit"],
            color=raw.get("color", ""),
            line_style=raw.get("lineStyle", raw.get("line_style", "")),
        )

    @property
    def orbit_min(self) -> float:
        return self.degree - (self.orbit / 2)

    @property
    def orbit_max(self) -> float:
        return self.degree + (self.orbit / 2)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "degree": self.degree,
            "color": self.color,
            "orbit": self.orbit,
            "lineStyle": self.line_style,
        }


@dataclass(frozen=True)
class PointRef:
    name: str
    position: float

    def as_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "position": self.position}


@dataclass(frozen=True)
class FormedAspect:
    point: PointRef
    to_point: PointRef
    aspect: AspectData
    precision: str         # 4 decimals; sign carries approach/separation in transit mode

    def as_dict(self) -> Dict[str, Any]:
        return {
            "point": self.point.as_dict(),
            "toPoint": self.to_point.as_dict(),
            "aspect": self.aspect.as_dict(),
            "precision": self.precision,
        }


def precision_key(formed: FormedAspect) -> float:
    return float(formed.precision)

def compare_aspects_by_precision(a: FormedAspect, b: FormedAspect) -> float:
    """Comparator by numeric precision (negative when `a` sorts first)."""
    return precision_key(a) - precision_key(b)

def _coerce_catalog(catalog: Mapping[str, Any]) -> Dict[str, AspectData]:
    out: Dict[str, AspectData] = {}
    for name, raw in catalog.items():
        if isinstance(raw, AspectData):
            out[name] = raw if raw.name == name else replace(raw, name=name)
        else:
            out[name] = AspectData.from_mapping(name, raw)
    return out

# ─────────────────────────────────────────────────────────────────────────────
# Engine
# ─────────────────────────────────────────────────────────────────────────────

class AspectCalculator:
    """
    Aspects calculator bound to a reference chart.

    to_points: {"Sun": [0], "Moon": [90], "Neptune": [120], "As": [30]}
    settings:  optional mapping; its "ASPECTS" entry (name -> {degree, orbit,
               color, lineStyle}) replaces the default nine-aspect catalog.

    The reference points and the catalog are read-only after construction,
    so one instance can serve any number of radix()/transit() calls.
    """

    def __init__(self, to_points: Optional[Points], settings: Optional[Mapping[str, Any]] = None):
        if to_points is None:
            raise InvalidArgumentError("Param 'toPoint' must not be empty.")

        self.settings: Dict[str, Any] = dict(settings or {})
        if self.settings.get("ASPECTS") is None:
            self.settings["ASPECTS"] = DEFAULT_ASPECTS
            log.debug("No ASPECTS in settings; using default catalog")

        self.aspects: Dict[str, AspectData] = _coerce_catalog(self.settings["ASPECTS"])
        self.to_points: Points = to_points

    def get_to_points(self) -> Points:
        return self.to_points

    def radix(self, points: Optional[Points]) -> List[FormedAspect]:
        """
        Radix aspects. `points` is usually the same chart as `to_points`
        without the special points (As, Ds, Mc, Ic, ...). A point is never
        aspected to a reference point of the same name.
        """
        if points is None:
            return []

        aspects: List[FormedAspect] = []
        for point, p_data in points.items():
            for to_point, t_data in self.to_points.items():
                if point == to_point:
                    continue
                for aspect in self.aspects.values():
                    if self.has_aspect(p_data[0], t_data[0], aspect):
                        precision = self.calc_precision(p_data[0], t_data[0], aspect.degree)
                        aspects.append(FormedAspect(
                            point=PointRef(point, p_data[0]),
                            to_point=PointRef(to_point, t_data[0]),
                            aspect=aspect,
                            precision=_format_precision(precision),
                        ))

        aspects.sort(key=precision_key)
        log.debug("radix: %d x %d points -> %d aspects", len(points), len(self.to_points), len(aspects))
        return aspects

    def transit(self, points: Optional[Points]) -> List[FormedAspect]:
        """
        Transit aspects. `points` are transiting bodies with speed:
        {"Sun": [0, 1], "Uranus": [90, -1]}.

        Precision is negative while the transit approaches exactness and
        positive once it separates; retrograde motion flips the sign.
        """
        if points is None:
            return []

        aspects: List[FormedAspect] = []
        for point, p_data in points.items():
            speed = p_data[1] if len(p_data) > 1 else None
            for to_point, t_data in self.to_points.items():
                for aspect in self.aspects.values():
                    if not self.has_aspect(p_data[0], t_data[0], aspect):
                        continue

                    precision = self.calc_precision(p_data[0], t_data[0], aspect.degree)

                    # -1: approaching, +1: moving away
                    if self.is_transit_point_approaching_to_aspect(aspect.degree, t_data[0], p_data[0]):
                        precision *= -1

                    if speed and speed < 0:
                        precision *= -1

                    aspects.append(FormedAspect(
                        point=PointRef(point, p_data[0]),
                        to_point=PointRef(to_point, t_data[0]),
                        aspect=aspect,
                        precision=_format_precision(precision),
                    ))

        aspects.sort(key=precision_key)
        log.debug("transit: %d x %d points -> %d aspects", len(points), len(self.to_points), len(aspects))
        return aspects

    @staticmethod
    def has_aspect(point: float, to_point: float, aspect: AspectData) -> bool:
        """True when the shorter-arc gap lies inside the closed orb window."""
        gap = angular_gap(point, to_point)
        return aspect.orbit_min <= gap <= aspect.orbit_max

    @staticmethod
    def calc_precision(point: float, to_point: float, aspect: float) -> float:
        """Unsigned distance in degrees between the actual gap and the exact aspect angle."""
        return abs(angular_gap(point, to_point) - aspect)

    @staticmethod
    def is_transit_point_approaching_to_aspect(aspect: float, to_point: float, point: float) -> bool:
        """
        Project one of the two points forward by the aspect angle so both
        sit on the same side of the exact position, choosing the side that
        does not cross 0°/360°, then compare.
        """
        if (point - to_point) > 0:
            if (point - to_point) > HALF_CIRCLE_DEG:
                point = (point + aspect) % FULL_CIRCLE_DEG
            else:
                to_point = (to_point + aspect) % FULL_CIRCLE_DEG
        else:
            if (to_point - point) > HALF_CIRCLE_DEG:
                to_point = (to_point + aspect) % FULL_CIRCLE_DEG
            else:
                point = (point + aspect) % FULL_CIRCLE_DEG

        _point, _to_point = point, to_point
        if abs(_point - _to_point) > HALF_CIRCLE_DEG:
            _point, _to_point = to_point, point

        return (_point - _to_point) < 0
