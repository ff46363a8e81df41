from __future__ import annotations

import pytest

from webcompat import service
from webcompat.config import Settings
from webcompat.data import Datasets
from webcompat.model import BaselineInfo
from webcompat.service import WebCompat


def test_get_feature_compat_attaches_baseline(compat: WebCompat) -> None:
    result = compat.get_feature_compat("api.PushManager")

    assert result is not None
    assert result.baseline == BaselineInfo(status="low", low_date="2023-03-27")
    assert result.spec_url == ("https://w3c.github.io/push-api/#pushmanager-interface",)
    assert result.support["safari"].partial_implementation is True

    without = compat.get_feature_compat("api.OldThing")
    assert without is not None
    assert without.baseline is None


def test_compare_features_reports_missing(compat: WebCompat) -> None:
    result = compat.compare_features(["api.fetch", "api.Nope", "css.properties.grid"], ["chrome"])

    assert [item.id for item in result.features] == ["api.fetch", "css.properties.grid"]
    assert result.not_found == ["api.Nope"]
    assert list(result.features[1].support) == ["chrome"]


def test_compare_features_none_found(compat: WebCompat) -> None:
    result = compat.compare_features(["a.b", "c.d"])

    assert result.features == []
    assert result.not_found == ["a.b", "c.d"]


def test_facade_delegates(compat: WebCompat) -> None:
    assert compat.search_features("grid").items[0].id == "css.properties.grid"
    assert compat.find_by_browser_version("chrome", "92").items[0].id == (
        "javascript.builtins.Array.at"
    )
    assert compat.list_categories() == compat.bcd.list_categories()
    assert [browser.id for browser in compat.list_browsers()][:1] == ["chrome"]


def test_get_default_loads_once(
    monkeypatch: pytest.MonkeyPatch, datasets: Datasets, offline_settings: Settings
) -> None:
    calls: list[Settings] = []

    def _fake_load(settings: Settings) -> Datasets:
        calls.append(settings)
        return datasets

    monkeypatch.setattr(service, "_DEFAULT", None)
    monkeypatch.setattr(service, "load_datasets", _fake_load)

    first = service.get_default(offline_settings)
    second = service.get_default()

    assert first is second
    assert calls == [offline_settings]


def test_get_default_reads_files(
    monkeypatch: pytest.MonkeyPatch, offline_settings: Settings
) -> None:
    monkeypatch.setattr(service, "_DEFAULT", None)

    compat = service.get_default(offline_settings)

    assert compat.get_baseline_status("grid") is not None
    assert compat.find_web_feature_id("api.fetch") == "fetch"
