from __future__ import annotations

import os

APP_VERSION = os.getenv("APP_VERSION", "0.1.0")

GEO_API_URL = os.getenv("GEO_API_URL", "https://ipwho.is/")
GEO_CACHE_TTL_SECONDS = int(os.getenv("GEO_CACHE_TTL", str(24 * 60 * 60)))  # 24 hours
GEO_TIMEOUT_SECONDS = float(os.getenv("GEO_TIMEOUT", "2"))
GEO_CACHE_MAX_ENTRIES = int(os.getenv("GEO_CACHE_MAX_ENTRIES", "0"))  # 0 or less = unbounded

STATS_DB_FILE = os.getenv("STATS_DB_FILE", "data/stats.db")
