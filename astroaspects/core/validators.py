# astroaspects/core/validators.py
from __future__ import annotations

import math
from typing import Any, Dict, List, Optional, Tuple, Union

# ───────────────────────── errors ─────────────────────────

class ValidationError(ValueError):
    """Structured validator error compatible with routes.py (has .errors())."""
    def __init__(self, details: Union[str, Dict[str, Any], List[Dict[str, Any]]]):
        if isinstance(details, str):
            self._details = [{"loc": [], "msg": details, "type": "value_error"}]
            super().__init__(details)
        elif isinstance(details, dict):
            self._details = [details]
            super().__init__(details.get("msg", "validation_error"))
        else:
            self._details = list(details)
            super().__init__(self._details[0]["msg"] if self._details else "validation_error")

    def errors(self) -> List[Dict[str, Any]]:
        return list(self._details)


# ───────────────────────── helpers ─────────────────────────

def _err(loc: List[str] | str, msg: str, typ: str = "value_error") -> Dict[str, Any]:
    return {"loc": [loc] if isinstance(loc, str) else loc, "msg": msg, "type": typ}

def _as_number(v: Any) -> Optional[float]:
    # bool is an int subclass; reject it explicitly
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return None
    if not math.isfinite(v):
        return None
    return v


# ───────────────────────── atomic parsers ─────────────────────────

def parse_points(value: Any, loc: str) -> Optional[Dict[str, List[float]]]:
    """
    Accept {"Sun": [12.5], "Mars": [200.1, -0.3]} and return it with numbers
    checked. None passes through (the engine decides what absence means).
    """
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ValidationError(_err(loc, "must be an object of name -> [position, speed?]", "type_error.dict"))

    errors: List[Dict[str, Any]] = []
    out: Dict[str, List[float]] = {}
    for name, row in value.items():
        if not isinstance(row, list) or not (1 <= len(row) <= 2):
            errors.append(_err([loc, name], "must be [position] or [position, speed]", "type_error.list"))
            continue
        nums = [_as_number(x) for x in row]
        if any(n is None for n in nums):
            errors.append(_err([loc, name], "position and speed must be finite numbers"))
            continue
        out[str(name)] = nums  # type: ignore[assignment]
    if errors:
        raise ValidationError(errors)
    return out

def parse_catalog(value: Any) -> Optional[Dict[str, Dict[str, Any]]]:
    """Accept {"square": {"degree": 90, "orbit": 8, "color": "...", "lineStyle": "..."}}."""
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ValidationError(_err("aspects", "must be an object of name -> aspect definition", "type_error.dict"))

    errors: List[Dict[str, Any]] = []
    out: Dict[str, Dict[str, Any]] = {}
    for name, raw in value.items():
        if not isinstance(raw, dict):
            errors.append(_err(["aspects", name], "must be an object", "type_error.dict"))
            continue
        missing = [k for k in ("degree", "orbit") if _as_number(raw.get(k)) is None]
        if missing:
            errors.append(_err(["aspects", name], f"numeric {', '.join(missing)} required"))
            continue
        out[str(name)] = dict(raw)
    if errors:
        raise ValidationError(errors)
    return out


# ───────────────────────── payload parsers ─────────────────────────

def parse_aspects_payload(body: Dict[str, Any]) -> Tuple[Optional[Dict[str, List[float]]],
                                                         Optional[Dict[str, List[float]]],
                                                         Optional[Dict[str, Dict[str, Any]]]]:
    """
    Body of /api/aspects/{radix,transit}:
      {"toPoints": {...}, "points": {...}, "aspects": {...}?}
    Returns (to_points, points, catalog). Errors from all fields are collected.
    """
    errors: List[Dict[str, Any]] = []
    parsed: Dict[str, Any] = {}
    for key, fn in (("toPoints", lambda v: parse_points(v, "toPoints")),
                    ("points", lambda v: parse_points(v, "points")),
                    ("aspects", parse_catalog)):
        try:
            parsed[key] = fn(body.get(key))
        except ValidationError as e:
            errors.extend(e.errors())
    if errors:
        raise ValidationError(errors)
    return parsed["toPoints"], parsed["points"], parsed["aspects"]
