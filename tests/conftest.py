from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from webcompat.config import Settings
from webcompat.data import BcdData, Datasets, WebFeaturesData
from webcompat.service import WebCompat


def _compat(support: dict[str, Any], **extra: Any) -> dict[str, Any]:
    return {"__compat": {"support": support, **extra}}


def bcd_document() -> dict[str, Any]:
    return {
        "__meta": {"version": "5.6.0", "timestamp": "2024-10-01T00:00:00.000Z"},
        "browsers": {
            "chrome": {
                "name": "Chrome",
                "type": "desktop",
                "releases": {
                    "119": {"status": "retired", "release_date": "2023-10-31"},
                    "120": {"status": "current", "release_date": "2023-12-05"},
                    "121": {"status": "beta"},
                },
            },
            "firefox": {
                "name": "Firefox",
                "type": "desktop",
                "releases": {"121": {"status": "current", "release_date": "2023-12-19"}},
            },
            "safari_ios": {
                "name": "Safari on iOS",
                "type": "mobile",
                "releases": {"17": {"status": "retired"}},
            },
        },
        "api": {
            "fetch": _compat(
                {
                    "chrome": {"version_added": "42"},
                    "edge": {"version_added": "14"},
                    "firefox": {"version_added": "39"},
                    "safari": {"version_added": "10.1"},
                },
                mdn_url="https://developer.mozilla.org/docs/Web/API/Window/fetch",
                spec_url="https://fetch.spec.whatwg.org/#fetch-method",
                status={"experimental": False, "standard_track": True, "deprecated": False},
            ),
            "PushManager": {
                **_compat(
                    {
                        "chrome": {"version_added": "42"},
                        "firefox": [
                            {"version_added": "44"},
                            {"version_added": "42", "flags": [{"type": "preference", "name": "x"}]},
                        ],
                        "safari": {"version_added": "16", "partial_implementation": True},
                    },
                    mdn_url="https://developer.mozilla.org/docs/Web/API/PushManager",
                    spec_url=["https://w3c.github.io/push-api/#pushmanager-interface"],
                    status={"experimental": False, "standard_track": True, "deprecated": False},
                ),
                "subscribe": _compat({"chrome": {"version_added": "42"}}),
            },
            "OldThing": _compat(
                {"chrome": {"version_added": "1", "version_removed": "50", "prefix": "webkit"}},
                status={"experimental": False, "standard_track": False, "deprecated": True},
            ),
            "FlaggedApi": _compat(
                {
                    "chrome": [
                        {
                            "version_added": "100",
                            "flags": [{"type": "preference", "name": "#enable-flagged"}],
                        },
                        {"version_added": "110"},
                    ],
                    "firefox": [
                        {
                            "version_added": "90",
                            "flags": [{"type": "preference", "name": "dom.flagged.enabled"}],
                        }
                    ],
                    "safari": {"version_added": False},
                },
                status={"experimental": True, "standard_track": True, "deprecated": False},
            ),
        },
        "css": {
            "properties": {
                "grid": _compat(
                    {
                        "chrome": {"version_added": "57"},
                        "firefox": {"version_added": "52"},
                        "safari": {"version_added": "10.1"},
                    },
                    mdn_url="https://developer.mozilla.org/docs/Web/CSS/grid",
                ),
                "anchor-name": _compat({"chrome": {"version_added": "120"}}),
                "text-wrap": _compat({"chrome": {"version_added": "120.0"}}),
            },
            "deep": {
                "l2": {
                    "l3": {
                        "l4": {
                            "l5": {
                                **_compat({"chrome": {"version_added": "999"}}),
                                "l6": _compat({"chrome": {"version_added": "120"}}),
                            }
                        }
                    }
                }
            },
        },
        "html": {
            "elements": {
                "dialog": _compat(
                    {
                        "chrome": {
                            "version_added": "37",
                            "notes": ["Needs a polyfill before 37.", "Modal only."],
                        },
                        "firefox": {"version_added": "98", "notes": "Single note."},
                    }
                )
            }
        },
        "javascript": {
            "builtins": {
                "Array": {"at": _compat({"chrome": {"version_added": "92"}})},
            }
        },
    }


def features_document() -> dict[str, Any]:
    return {
        "features": {
            "fetch": {
                "kind": "feature",
                "name": "Fetch",
                "description": "The fetch() method makes asynchronous HTTP requests.",
                "group": "networking",
                "spec": ["https://fetch.spec.whatwg.org/", "https://example.org/fetch-2"],
                "caniuse": "fetch",
                "compat_features": ["api.fetch"],
                "status": {
                    "baseline": "high",
                    "baseline_low_date": "2017-03-27",
                    "baseline_high_date": "2019-09-27",
                    "support": {"chrome": "42", "edge": "14", "firefox": "39", "safari": "10.1"},
                },
            },
            "push": {
                "kind": "feature",
                "name": "Push",
                "description": "Push messages are delivered to service workers.",
                "group": ["notifications", "pwa"],
                "spec": "https://w3c.github.io/push-api/",
                "compat_features": ["api.PushManager", "api.PushManager.subscribe"],
                "status": {
                    "baseline": "low",
                    "baseline_low_date": "2023-03-27",
                    "support": {"chrome": "42", "firefox": "44", "safari": "16.4"},
                },
            },
            "push-legacy": {
                "kind": "feature",
                "name": "Legacy push",
                "compat_features": ["api.PushManager"],
                "status": {"baseline": False, "support": {}},
            },
            "grid": {
                "kind": "feature",
                "name": "Grid",
                "description": "CSS grid is a two-dimensional layout system.",
                "group": "css",
                "compat_features": ["css.properties.grid"],
                "status": {
                    "baseline": "high",
                    "baseline_low_date": "2017-10-17",
                    "baseline_high_date": "2020-04-17",
                    "support": {"chrome": "57", "firefox": "52", "safari": "10.1"},
                },
            },
            "anchor-positioning": {
                "kind": "feature",
                "name": "Anchor positioning",
                "group": "css",
                "compat_features": ["css.properties.anchor-name"],
                "status": {"baseline": False, "support": {"chrome": "125"}},
            },
            "old-push": {"kind": "moved", "redirect_target": "push"},
        },
        "groups": {
            "css": {"name": "CSS"},
            "networking": {"name": "Networking"},
            "notifications": {"name": "Notifications"},
            "pwa": {"name": "Progressive web apps"},
        },
    }


@pytest.fixture
def datasets() -> Datasets:
    return Datasets(
        bcd=BcdData(bcd_document()),
        features=WebFeaturesData.from_document(features_document()),
    )


@pytest.fixture
def compat(datasets: Datasets) -> WebCompat:
    return WebCompat(datasets)


@pytest.fixture
def offline_settings(tmp_path: Path) -> Settings:
    """Settings pointing at fixture files written under tmp_path."""
    bcd_path = tmp_path / "bcd.json"
    features_path = tmp_path / "web-features.json"
    bcd_path.write_text(json.dumps(bcd_document()), encoding="utf-8")
    features_path.write_text(json.dumps(features_document()), encoding="utf-8")
    return Settings(
        data_dir=tmp_path,
        bcd_path=bcd_path,
        features_path=features_path,
        offline=True,
    )
