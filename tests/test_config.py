# tests/test_config.py
from __future__ import annotations

import json
from pathlib import Path

import pytest

from astroaspects.core.aspects import AspectCalculator
from astroaspects.core.constants import DEFAULT_ASPECTS
from astroaspects.core.validators import ValidationError
from astroaspects.main import create_app
from astroaspects.utils.config import AttrDict, aspect_settings, load_config

SHIPPED = Path(__file__).resolve().parents[1] / "config" / "defaults.yaml"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("ASTRO_ASPECTS", raising=False)
    monkeypatch.delenv("ASTRO_LOG_LEVEL", raising=False)
    yield


def _write_yaml(tmp_path: Path, text: str) -> str:
    p = tmp_path / "cfg.yaml"
    p.write_text(text, encoding="utf-8")
    return str(p)


def test_load_config_attr_access(tmp_path) -> None:
    path = _write_yaml(tmp_path, "log_level: DEBUG\nASPECTS:\n  square: {degree: 90, orbit: 6}\n")
    cfg = load_config(path)
    assert isinstance(cfg, AttrDict)
    assert cfg.log_level == "DEBUG"
    assert cfg.ASPECTS.square.orbit == 6
    with pytest.raises(AttributeError):
        _ = cfg.missing


def test_empty_yaml_is_empty_config(tmp_path) -> None:
    assert load_config(_write_yaml(tmp_path, "")) == {}


def test_missing_file_raises(tmp_path) -> None:
    with pytest.raises(OSError):
        load_config(str(tmp_path / "nope.yaml"))


def test_env_overrides(tmp_path, monkeypatch) -> None:
    catalog = {"quintile": {"degree": 72, "orbit": 4, "color": "#123456", "lineStyle": "solid"}}
    jpath = tmp_path / "aspects.json"
    jpath.write_text(json.dumps(catalog), encoding="utf-8")
    monkeypatch.setenv("ASTRO_ASPECTS", str(jpath))
    monkeypatch.setenv("ASTRO_LOG_LEVEL", "warning")

    cfg = load_config(_write_yaml(tmp_path, "log_level: INFO\nASPECTS:\n  square: {degree: 90, orbit: 6}\n"))
    assert cfg.log_level == "WARNING"
    assert list(cfg.ASPECTS) == ["quintile"]


def test_env_catalog_must_be_object(tmp_path, monkeypatch) -> None:
    jpath = tmp_path / "aspects.json"
    jpath.write_text("[1, 2]", encoding="utf-8")
    monkeypatch.setenv("ASTRO_ASPECTS", str(jpath))
    with pytest.raises(ValueError):
        load_config(_write_yaml(tmp_path, "log_level: INFO\n"))


def test_shipped_defaults_match_builtin_catalog() -> None:
    cfg = load_config(str(SHIPPED))
    assert cfg.ASPECTS == DEFAULT_ASPECTS


def test_aspect_settings_feed_the_engine(tmp_path) -> None:
    cfg = load_config(_write_yaml(tmp_path, "ASPECTS:\n  square: {degree: 90, orbit: 6, lineStyle: short}\n"))
    settings = aspect_settings(cfg)
    assert settings == {"ASPECTS": {"square": {"degree": 90, "orbit": 6, "lineStyle": "short"}}}
    out = AspectCalculator({"Moon": [93]}, settings).radix({"Sun": [0]})
    assert [(f.aspect.name, f.precision) for f in out] == [("square", "3.0000")]


@pytest.mark.parametrize("cfg", [None, {}, AttrDict(log_level="INFO"), AttrDict(ASPECTS={})])
def test_aspect_settings_without_catalog(cfg) -> None:
    assert aspect_settings(cfg) == {}


# ──────────────────────────────────────────────────────────────────────────────
# Catalog checks & app fallback
# ──────────────────────────────────────────────────────────────────────────────

def test_env_catalog_entry_without_degree_is_rejected(tmp_path, monkeypatch) -> None:
    jpath = tmp_path / "aspects.json"
    jpath.write_text(json.dumps({"square": {"orbit": 8}}), encoding="utf-8")
    monkeypatch.setenv("ASTRO_ASPECTS", str(jpath))
    with pytest.raises(ValidationError) as ei:
        load_config(_write_yaml(tmp_path, "log_level: INFO\n"))
    assert ei.value.errors()[0]["loc"] == ["aspects", "square"]


def test_yaml_catalog_entry_must_be_mapping(tmp_path) -> None:
    with pytest.raises(ValueError):
        load_config(_write_yaml(tmp_path, "ASPECTS:\n  square: 90\n"))


def test_yaml_top_level_must_be_mapping(tmp_path) -> None:
    with pytest.raises(ValueError):
        load_config(_write_yaml(tmp_path, "- 1\n- 2\n"))


def test_env_only_config_without_file(tmp_path, monkeypatch) -> None:
    jpath = tmp_path / "aspects.json"
    jpath.write_text(json.dumps({"trine": {"degree": 120, "orbit": 2}}), encoding="utf-8")
    monkeypatch.setenv("ASTRO_ASPECTS", str(jpath))
    assert list(load_config(None).ASPECTS) == ["trine"]
    assert load_config(None) != {}


def test_app_falls_back_to_defaults_on_bad_env_catalog(tmp_path, monkeypatch) -> None:
    jpath = tmp_path / "aspects.json"
    jpath.write_text(json.dumps({"square": {"orbit": 8}}), encoding="utf-8")
    monkeypatch.setenv("ASTRO_ASPECTS", str(jpath))
    c = create_app(_write_yaml(tmp_path, "log_level: INFO\n")).test_client()

    rv = c.post("/api/aspects/radix", json={"toPoints": {"Moon": [90]}, "points": {"Sun": [0]}})
    assert rv.status_code == 200
    assert [a["aspect"]["name"] for a in rv.get_json()["aspects"]] == ["square"]
    catalog = c.get("/api/aspects/catalog")
    assert catalog.status_code == 200
    assert set(catalog.get_json()["aspects"]) == set(DEFAULT_ASPECTS)


def test_app_honours_env_catalog_when_file_missing(tmp_path, monkeypatch) -> None:
    jpath = tmp_path / "aspects.json"
    jpath.write_text(json.dumps({"trine": {"degree": 120, "orbit": 2}}), encoding="utf-8")
    monkeypatch.setenv("ASTRO_ASPECTS", str(jpath))
    c = create_app(str(tmp_path / "missing.yaml")).test_client()
    assert list(c.get("/api/aspects/catalog").get_json()["aspects"]) == ["trine"]
    rv = c.post("/api/aspects/radix", json={"toPoints": {"Moon": [90]}, "points": {"Sun": [0]}})
    assert rv.get_json()["count"] == 0
