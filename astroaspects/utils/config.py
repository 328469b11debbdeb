# astroaspects/utils/config.py
import json
import logging
import os
from typing import Optional

import yaml

from astroaspects.core.validators import parse_catalog

log = logging.getLogger(__name__)


class AttrDict(dict):
    """Dict that also supports attribute access: cfg.log_level and cfg['log_level'] both work."""
    def __getattr__(self, item):
        try:
            return self[item]
        except KeyError as e:
            raise AttributeError(item) from e
    def __setattr__(self, key, value):
        self[key] = value

def _to_attr(obj):
    if isinstance(obj, dict):
        return AttrDict({k: _to_attr(v) for k, v in obj.items()})
    if isinstance(obj, list):
        return [_to_attr(x) for x in obj]
    return obj

def _load_json(path):
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object of aspect definitions")
    return data

def load_config(path: Optional[str]):
    """
    Load YAML config from `path` (None: environment only) and apply overrides:
      - ASTRO_ASPECTS    path to a JSON object that replaces the ASPECTS catalog
      - ASTRO_LOG_LEVEL  overrides config['log_level']
    The resulting ASPECTS block is checked with parse_catalog; a bad entry
    raises ValidationError (a ValueError) naming it.
    Returns an AttrDict for convenient access.
    """
    data = {}
    if path is not None:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path}: expected a YAML mapping at top level")

    level = os.getenv("ASTRO_LOG_LEVEL")
    if level:
        data["log_level"] = level.upper()

    aspects_path = os.getenv("ASTRO_ASPECTS")
    if aspects_path:
        data["ASPECTS"] = _load_json(aspects_path)
        log.debug("ASPECTS catalog replaced from %s", aspects_path)

    if data.get("ASPECTS") is not None:
        data["ASPECTS"] = parse_catalog(data["ASPECTS"])

    return _to_attr(data)

def aspect_settings(cfg) -> dict:
    """Settings mapping for AspectCalculator; {} lets the engine fall back to its defaults."""
    if not cfg:
        return {}
    catalog = cfg.get("ASPECTS")
    if not catalog:
        return {}
    return {"ASPECTS": {name: dict(entry) for name, entry in catalog.items()}}
