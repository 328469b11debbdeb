# astroaspects/core/constants.py
# -*- coding: utf-8 -*-
"""
Core constants & small helpers

Purpose
-------
Single source of truth for:
- the default aspect catalog (angle, orb width, display styling)
- circle constants used by the aspect engine
- tiny angle helpers

Design
------
- Pure-Python, no external dependencies.
- Safe to import from any core module.
- Catalog entries are plain dicts so they serialize to YAML/JSON unchanged;
  treat them as immutable by convention.
"""

from __future__ import annotations
from typing import Any, Dict, Tuple
import math

__all__ = [
    # aspects
    "DEFAULT_ASPECTS", "ASPECT_NAMES",
    # circle
    "HALF_CIRCLE_DEG", "FULL_CIRCLE_DEG",
    # helpers
    "radians_to_degree",
]

# ── tiny angle helpers (no external imports) ──────────────────────────────────
def radians_to_degree(radians: float) -> float:
    """Convert an angle in radians to degrees."""
    return math.degrees(radians)

# ── circle ────────────────────────────────────────────────────────────────────
HALF_CIRCLE_DEG: float = radians_to_degree(math.pi)        # 180°
FULL_CIRCLE_DEG: float = radians_to_degree(2 * math.pi)    # 360°

# ── aspect catalog ────────────────────────────────────────────────────────────
# `orbit` is the TOTAL width of the window, split evenly around `degree`.
# Line styles are SVG dash patterns or keywords understood by chart renderers.
DEFAULT_ASPECTS: Dict[str, Dict[str, Any]] = {
    "opposition":   {"degree": 180, "orbit": 10, "color": "#ff0000", "lineStyle": "solid"},   # long red
    "square":       {"degree": 90,  "orbit": 8,  "color": "#ff0000", "lineStyle": "short"},   # short red
    "trine":        {"degree": 120, "orbit": 8,  "color": "#0000ff", "lineStyle": "solid"},   # long blue
    "sextile":      {"degree": 60,  "orbit": 8,  "color": "#0000ff", "lineStyle": "short"},   # short blue
    "quincunx":     {"degree": 150, "orbit": 8,  "color": "#00ff00", "lineStyle": "5,5"},     # dashed green
    "semisextile":  {"degree": 30,  "orbit": 8,  "color": "#00ff00", "lineStyle": "2,2"},     # dotted green
    "semisquare":   {"degree": 45,  "orbit": 8,  "color": "#0000ff", "lineStyle": "1,1"},     # dotted blue
    "sesquisquare": {"degree": 135, "orbit": 8,  "color": "#0000ff", "lineStyle": "6,2"},     # long dotted blue
    "conjunction":  {"degree": 0,   "orbit": 10, "color": "transparent", "lineStyle": "dashed"},
}

ASPECT_NAMES: Tuple[str, ...] = tuple(DEFAULT_ASPECTS.keys())
