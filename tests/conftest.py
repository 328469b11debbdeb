# tests/conftest.py
from __future__ import annotations

"""
Pytest configuration for the astroaspects suite.

- Registers Hypothesis profiles for local dev and CI.
- Provides an engine bound to a small natal chart and a Flask test client.
"""

import os
import pytest
from hypothesis import settings, HealthCheck

from astroaspects.core.aspects import AspectCalculator


# ──────────────────────────────────────────────────────────────────────────────
# Hypothesis profiles
# ──────────────────────────────────────────────────────────────────────────────
settings.register_profile(
    "dev",
    settings(
        deadline=None,           # avoid flaky timeouts on slower runners
        max_examples=80,
        suppress_health_check=[HealthCheck.too_slow],
    ),
)
settings.register_profile(
    "ci",
    settings(
        deadline=None,
        max_examples=200,        # a bit more coverage in CI
        suppress_health_check=[HealthCheck.too_slow],
    ),
)

_profile = (
    "ci"
    if (os.getenv("CI") or os.getenv("GITHUB_ACTIONS"))
    else os.getenv("HYPOTHESIS_PROFILE", "dev")
)
settings.load_profile(_profile)


def pytest_report_header(config: pytest.Config) -> str:
    return f"Hypothesis profile: '{_profile}'"


# ──────────────────────────────────────────────────────────────────────────────
# Global fixtures
# ──────────────────────────────────────────────────────────────────────────────

NATAL = {
    "Sun": [10.0],
    "Moon": [100.0],
    "Mercury": [355.0],
    "Venus": [40.0],
    "Mars": [190.0],
}


@pytest.fixture
def natal():
    return {k: list(v) for k, v in NATAL.items()}


@pytest.fixture
def calc(natal):
    return AspectCalculator(natal)


@pytest.fixture
def app(monkeypatch, tmp_path):
    # Point the app at a path that does not exist so it runs on the built-in catalog
    monkeypatch.delenv("ASTRO_ASPECTS", raising=False)
    from astroaspects.main import create_app
    application = create_app(str(tmp_path / "missing.yaml"))
    application.testing = True
    return application


@pytest.fixture
def client(app):
    return app.test_client()
