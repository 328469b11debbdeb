# astroaspects/api/routes.py
"""
Aspects API Routes
- Radix & transit aspects over caller-supplied positions
- Active aspect catalog

Notes:
- Positions are taken as-is (degrees, [0, 360)); nothing here computes ephemerides.
- A request-level "aspects" object overrides the configured catalog for that call only.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import BadRequest

from astroaspects.core.aspects import AspectCalculator, FormedAspect, InvalidArgumentError
from astroaspects.core.validators import ValidationError, parse_aspects_payload
from astroaspects.utils.config import aspect_settings
from astroaspects.utils.metrics import MET_ASPECTS, MET_REJECTED

log = logging.getLogger(__name__)
api = Blueprint("aspects_api", __name__)


# ───────────────────────── helpers ─────────────────────────
def _json_error(code: str, details: Any = None, http: int = 400):
    out: Dict[str, Any] = {"ok": False, "error": code}
    if details is not None:
        out["details"] = details
    return jsonify(out), http


def _body_json() -> Dict[str, Any]:
    data = request.get_json(force=True, silent=False)
    if not isinstance(data, dict):
        raise BadRequest("JSON body must be an object")
    return data


def _configured_settings() -> Dict[str, Any]:
    return aspect_settings(getattr(current_app, "cfg", None))


def _run(mode: str):
    try:
        to_points, points, catalog = parse_aspects_payload(_body_json())
    except ValidationError as e:
        MET_REJECTED.labels(reason="validation").inc()
        return _json_error("validation_error", e.errors(), 400)

    settings = {"ASPECTS": catalog} if catalog is not None else _configured_settings()
    try:
        calc = AspectCalculator(to_points, settings)
    except InvalidArgumentError as e:
        MET_REJECTED.labels(reason="invalid_argument").inc()
        return _json_error("invalid_argument", str(e), 400)

    formed: List[FormedAspect] = calc.radix(points) if mode == "radix" else calc.transit(points)
    MET_ASPECTS.labels(mode=mode).inc(len(formed))
    log.debug("%s: %d aspects", mode, len(formed))
    return jsonify({
        "ok": True,
        "mode": mode,
        "count": len(formed),
        "aspects": [f.as_dict() for f in formed],
    }), 200


# ───────────────────────── aspects ─────────────────────────
@api.post("/api/aspects/radix")
def radix():
    return _run("radix")


@api.post("/api/aspects/transit")
def transit():
    return _run("transit")


@api.get("/api/aspects/catalog")
def catalog():
    # Build an engine with an empty chart just to resolve the catalog the same way requests do
    calc = AspectCalculator({}, _configured_settings())
    return jsonify({
        "ok": True,
        "aspects": {name: a.as_dict() for name, a in calc.aspects.items()},
    }), 200
