"""Constants used across pywebcompat."""

from __future__ import annotations

from typing import Final, Literal

SERVER_NAME: Final[str] = "web-compat"

BCD_URL: Final[str] = "https://unpkg.com/@mdn/browser-compat-data/data.json"
WEB_FEATURES_URL: Final[str] = "https://unpkg.com/web-features/data.json"
BCD_FILENAME: Final[str] = "bcd.json"
WEB_FEATURES_FILENAME: Final[str] = "web-features.json"

BCD_CATEGORIES: Final[tuple[str, ...]] = (
    "api",
    "css",
    "html",
    "http",
    "javascript",
    "mathml",
    "svg",
    "webassembly",
    "webdriver",
    "webextensions",
    "manifests",
)

# Levels below a category root that the path index walks into.
BCD_MAX_TRAVERSE_DEPTH: Final[int] = 4
BCD_METADATA_KEYS: Final[frozenset[str]] = frozenset({"__compat", "__meta"})

BASELINE_BROWSERS: Final[tuple[str, ...]] = (
    "chrome",
    "chrome_android",
    "edge",
    "firefox",
    "firefox_android",
    "safari",
    "safari_ios",
)

DESKTOP_BROWSERS: Final[tuple[str, ...]] = (
    "chrome",
    "edge",
    "firefox",
    "safari",
)

BaselineStatus = Literal["high", "low", False]

BASELINE_LABEL_MAP: Final[dict[object, str]] = {
    "high": "✅ Widely Available",
    "low": "🟡 Newly Available",
    False: "❌ Not Baseline",
}

RESPONSE_FORMAT_MARKDOWN: Final[str] = "markdown"
RESPONSE_FORMAT_JSON: Final[str] = "json"

CHARACTER_LIMIT: Final[int] = 25000
DEFAULT_LIMIT: Final[int] = 20
MAX_LIMIT: Final[int] = 100
MIN_SEARCH_QUERY_LENGTH: Final[int] = 1
MAX_SEARCH_QUERY_LENGTH: Final[int] = 200
MIN_COMPARE_FEATURES: Final[int] = 2
MAX_COMPARE_FEATURES: Final[int] = 5
MAX_RELATED_FEATURES_SHOWN: Final[int] = 10

TRUNCATION_NOTICE: Final[str] = (
    "\n\n---\n> ⚠️ Response truncated. Use `limit` or `offset` parameters to narrow results."
)

DEFAULT_TIMEOUT_SECONDS: Final[float] = 30.0
