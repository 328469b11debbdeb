# astroaspects/main.py
from __future__ import annotations

import hmac
import logging
import os
from time import perf_counter
from typing import Any, Dict, Tuple

import yaml
from flask import Flask, Response, current_app, jsonify, request
from flask_cors import CORS
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from astroaspects.api.routes import api as _aspects_bp
from astroaspects.utils.config import load_config
from astroaspects.utils.metrics import GAUGE_APP_UP, MET_REQUESTS, REQ_LATENCY
from astroaspects.version import VERSION

UNMATCHED_ROUTE = "unmatched"

# ───────────────────────── helpers: config & logging ─────────────────────────
def _load_app_config(cfg_path: str) -> Tuple[Dict[str, Any], str | None]:
    """
    Returns (cfg, problem). A missing file still honours ASTRO_ASPECTS /
    ASTRO_LOG_LEVEL; an invalid file or catalog falls back to the built-in one.
    """
    try:
        return load_config(cfg_path), None
    except OSError as e:
        problem = f"{cfg_path} not readable ({e.strerror or e}); environment overrides only"
        try:
            return load_config(None), problem
        except ValueError as env_err:
            return {}, f"{problem}; ASTRO_ASPECTS rejected ({env_err})"
    except (ValueError, yaml.YAMLError) as e:
        return {}, f"{cfg_path} rejected ({e}); ASTRO_ASPECTS and file catalog ignored"

def _configure_logging(app: Flask, level: str | None = None) -> None:
    gerr = logging.getLogger("gunicorn.error")
    if gerr.handlers:
        app.logger.handlers = gerr.handlers
        app.logger.setLevel(gerr.level)
    else:
        logging.basicConfig(level=level or os.environ.get("LOG_LEVEL", "INFO"))

def _route_label() -> str:
    # Rule templates only: raw paths would mint a series per unknown URL
    rule = request.url_rule
    return rule.rule if rule is not None else UNMATCHED_ROUTE

# ───────────────────────── errors ─────────────────────────
def _error_body(code: str, status: int, **details: Any):
    return jsonify({"ok": False, "error": code, "details": {"route": _route_label(), **details}}), status

def _register_errors(app: Flask) -> None:
    @app.errorhandler(HTTPException)
    def _http(e: HTTPException):
        app.logger.warning("%s %s -> %s (%s)", request.method, _route_label(), e.code, e.description)
        return _error_body("http_error", e.code or 500, name=e.name, message=e.description)

    @app.errorhandler(Exception)
    def _any(e: Exception):
        app.logger.exception("Unhandled %s on %s %s", type(e).__name__, request.method, _route_label())
        return _error_body("internal_error", 500, type=type(e).__name__, message=str(e))

# ───────────────────────── health & metrics ─────────────────────────
def _register_health(app: Flask) -> None:
    @app.route("/", methods=["GET"])
    def root():
        return jsonify(ok=True, service="astroaspects", health="/health"), 200

    @app.route("/health", methods=["GET"])
    @app.route("/healthz", methods=["GET"])
    def health():
        return jsonify(ok=True, status="ok", version=VERSION), 200

def _metrics_credentials() -> Tuple[str, str]:
    metrics_cfg = current_app.cfg.get("metrics") or {}  # type: ignore[attr-defined]
    return (
        os.getenv("METRICS_USER") or str(metrics_cfg.get("user", "")),
        os.getenv("METRICS_PASS") or str(metrics_cfg.get("password", "")),
    )

def _metrics_auth_ok() -> bool:
    user, pw = _metrics_credentials()
    auth = request.authorization
    if not (user and pw and auth and auth.type == "basic"):
        return False
    return (hmac.compare_digest((auth.username or "").encode(), user.encode())
            and hmac.compare_digest((auth.password or "").encode(), pw.encode()))

def _register_metrics(app: Flask) -> None:
    @app.route("/metrics", methods=["GET"])
    def metrics_endpoint():
        if not _metrics_auth_ok():
            return Response("Unauthorized", 401, {"WWW-Authenticate": 'Basic realm="metrics"'})
        GAUGE_APP_UP.set(1.0)
        return Response(generate_latest(REGISTRY), mimetype=CONTENT_TYPE_LATEST)

def _register_request_metrics(app: Flask) -> None:
    @app.before_request
    def _start_timer():
        request._t0 = perf_counter()  # type: ignore[attr-defined]

    @app.after_request
    def _record(resp):
        label = _route_label()
        MET_REQUESTS.labels(route=label).inc()
        t0 = getattr(request, "_t0", None)
        if t0 is not None:
            REQ_LATENCY.labels(route=label).observe(perf_counter() - t0)
        return resp

# ───────────────────────── app factory ─────────────────────────
def create_app(config_path: str | None = None) -> Flask:
    app = Flask(__name__)
    app.json.sort_keys = False
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)  # type: ignore

    cfg_path = config_path or os.environ.get("ASTRO_CONFIG", "config/defaults.yaml")
    app.cfg, cfg_problem = _load_app_config(cfg_path)  # type: ignore[attr-defined]

    _configure_logging(app, app.cfg.get("log_level"))  # type: ignore[attr-defined]
    if cfg_problem:
        app.logger.warning("Config: %s", cfg_problem)

    _register_health(app)
    _register_errors(app)
    _register_metrics(app)
    _register_request_metrics(app)
    app.register_blueprint(_aspects_bp)

    # Seed one series per known route so dashboards see zeros before traffic
    for rule in app.url_map.iter_rules():
        if rule.endpoint != "static":
            MET_REQUESTS.labels(route=rule.rule).inc(0)
    MET_REQUESTS.labels(route=UNMATCHED_ROUTE).inc(0)
    GAUGE_APP_UP.set(1.0)

    # CORS for browser UIs
    allowed_origin = os.environ.get("CORS_ALLOW_ORIGIN") or "*"
    CORS(
        app,
        resources={r"/.*": {"origins": allowed_origin}},
        supports_credentials=False,
        methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=600,
    )

    app.logger.info(
        "App initialized; version=%s; config=%s; aspects=%s",
        VERSION, cfg_path, "configured" if app.cfg.get("ASPECTS") else "default",  # type: ignore[attr-defined]
    )
    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=int(os.environ.get("PORT", 5000)))
