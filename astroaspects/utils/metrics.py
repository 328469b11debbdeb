# astroaspects/utils/metrics.py
from __future__ import annotations

from typing import Final

from prometheus_client import Counter, Gauge, Histogram

# Shared by main.py (request hooks) and api/routes.py (aspect counts); keep names stable!
MET_REQUESTS: Final = Counter("astro_api_requests_total", "API requests", ["route"])
REQ_LATENCY: Final = Histogram("astro_request_seconds", "API request latency", ["route"])
MET_ASPECTS: Final = Counter("astro_aspects_formed_total", "Formed aspects returned", ["mode"])
MET_REJECTED: Final = Counter("astro_payload_rejected_total", "Rejected aspect payloads", ["reason"])
GAUGE_APP_UP: Final = Gauge("astro_app_up", "1 if app is running")
