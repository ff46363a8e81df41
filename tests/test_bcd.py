from __future__ import annotations

import threading
import time
from typing import Any

import pytest

from webcompat.bcd import BcdService, collect_feature_paths, normalize_support
from webcompat.data import BcdData
from webcompat.model import (
    BaselineInfo,
    CompatRecord,
    Flag,
    SupportStatement,
    parse_support_entry,
)
from webcompat.service import WebCompat


def _bcd(compat: WebCompat) -> BcdService:
    return compat.bcd


def test_normalize_support_variants() -> None:
    flagged = SupportStatement(version_added="90", flags=(Flag(type="preference", name="x"),))
    plain = SupportStatement(version_added="110")

    assert normalize_support(None) is None
    assert normalize_support(plain) is plain
    assert normalize_support((flagged, plain)) is plain
    assert normalize_support((flagged,)) is flagged
    assert normalize_support(()) is None


def test_empty_flags_list_still_counts_as_flagged() -> None:
    entry = parse_support_entry(
        [{"version_added": "1", "flags": []}, {"version_added": "2", "flags": []}]
    )

    statement = normalize_support(entry)

    assert statement is not None
    assert statement.version_added == "1"


def test_collect_feature_paths_skips_metadata_and_scalars() -> None:
    node: dict[str, Any] = {
        "__compat": {"support": {}},
        "__meta": {"version": "1"},
        "a": {"__compat": {"support": {}}},
        "group": {"b": {"__compat": {"support": {}}}},
        "scalar": "ignored",
    }
    results: list[str] = []

    collect_feature_paths(node, "api", results)

    assert results == ["api.a", "api.group.b"]


def test_path_index_respects_depth_bound(compat: WebCompat) -> None:
    css_paths = _bcd(compat).paths_for("css")

    assert "css.deep.l2.l3.l4.l5" in css_paths
    assert "css.deep.l2.l3.l4.l5.l6" not in css_paths
    # Grouping nodes without a record are walked but never listed.
    assert "css.properties" not in css_paths
    assert css_paths[:3] == [
        "css.properties.grid",
        "css.properties.anchor-name",
        "css.properties.text-wrap",
    ]


def test_path_index_is_built_once(compat: WebCompat) -> None:
    service = _bcd(compat)
    first = service.path_index()

    assert service.path_index() is first
    assert list(first) == ["api", "css", "html", "javascript"]
    assert first["api"] == [
        "api.fetch",
        "api.PushManager",
        "api.PushManager.subscribe",
        "api.OldThing",
        "api.FlaggedApi",
    ]


def test_paths_for_unknown_category_is_empty(compat: WebCompat) -> None:
    assert _bcd(compat).paths_for("svg") == []


@pytest.mark.parametrize(
    "path",
    ["api.nope", "api", "css.properties", "api.fetch.nope", "api.fetch.__compat.support"],
)
def test_lookup_misses(compat: WebCompat, path: str) -> None:
    assert _bcd(compat).lookup(path) is None


def test_lookup_deep_path_outside_index(compat: WebCompat) -> None:
    record = _bcd(compat).lookup("css.deep.l2.l3.l4.l5.l6")

    assert record is not None
    assert record.support["chrome"] == SupportStatement(version_added="120")


def test_get_feature_compat_defaults(compat: WebCompat) -> None:
    result = _bcd(compat).get_feature_compat("api.fetch")

    assert result is not None
    assert list(result.support) == ["chrome", "edge", "firefox", "safari"]
    assert result.support["safari"].version_added == "10.1"
    assert result.description is None
    assert result.baseline is None
    assert result.mdn_url == "https://developer.mozilla.org/docs/Web/API/Window/fetch"


def test_get_feature_compat_prefers_flag_free_statement(compat: WebCompat) -> None:
    result = _bcd(compat).get_feature_compat("api.FlaggedApi")

    assert result is not None
    assert result.support["chrome"].version_added == "110"
    assert result.support["chrome"].flags is None
    assert result.support["firefox"].version_added == "90"
    assert result.support["firefox"].flags is True
    assert result.support["safari"].version_added is False
    assert "edge" not in result.support
    assert result.description == "⚠️ Experimental"


def test_get_feature_compat_browser_filter_and_details(compat: WebCompat) -> None:
    service = _bcd(compat)

    old = service.get_feature_compat("api.OldThing", ["chrome", "netscape"])
    assert old is not None
    assert list(old.support) == ["chrome"]
    assert old.support["chrome"].version_removed == "50"
    assert old.support["chrome"].prefix == "webkit"
    assert old.description == "⛔ Deprecated"

    dialog = service.get_feature_compat("html.elements.dialog", ["chrome", "firefox"])
    assert dialog is not None
    assert dialog.support["chrome"].notes == "Needs a polyfill before 37.; Modal only."
    assert dialog.support["firefox"].notes == "Single note."


def test_get_feature_compat_uses_baseline_resolver(compat: WebCompat) -> None:
    seen: list[str] = []

    def _resolve(path: str) -> BaselineInfo:
        seen.append(path)
        return BaselineInfo(status="low", low_date="2024-01-01")

    result = _bcd(compat).get_feature_compat("api.fetch", resolve_baseline=_resolve)

    assert result is not None
    assert result.baseline == BaselineInfo(status="low", low_date="2024-01-01")
    assert seen == ["api.fetch"]


def test_get_feature_compat_unknown(compat: WebCompat) -> None:
    assert _bcd(compat).get_feature_compat("api.Nope") is None


def test_search_is_case_insensitive_and_ordered(compat: WebCompat) -> None:
    page = _bcd(compat).search("PUSH")

    assert [item.id for item in page.items] == ["api.PushManager", "api.PushManager.subscribe"]
    assert page.total == 2
    assert page.has_more is False
    first = page.items[0]
    assert first.description == "MDN: https://developer.mozilla.org/docs/Web/API/PushManager"
    assert first.standard_track is True
    assert page.items[1].description is None


def test_search_category_filter_and_pagination(compat: WebCompat) -> None:
    service = _bcd(compat)

    assert [item.id for item in service.search("grid", "css").items] == ["css.properties.grid"]
    assert service.search("grid", "api").total == 0

    page = service.search("api.", limit=2, offset=0)
    assert page.total == 5
    assert len(page.items) == 2
    assert page.has_more is True
    assert page.next_offset == 2

    beyond = service.search("api.", limit=2, offset=50)
    assert beyond.items == []
    assert beyond.total == 5
    assert beyond.has_more is False


def test_find_by_browser_version_matches_exact_strings(compat: WebCompat) -> None:
    service = _bcd(compat)

    page = service.find_by_browser_version("chrome", "120")
    assert [match.id for match in page.items] == ["css.properties.anchor-name"]

    assert service.find_by_browser_version("chrome", "120.0").items[0].id == (
        "css.properties.text-wrap"
    )
    assert service.find_by_browser_version("chrome", "120", "api").total == 0
    assert service.find_by_browser_version("opera", "42").total == 0


def test_find_by_browser_version_uses_normalized_statement(compat: WebCompat) -> None:
    service = _bcd(compat)

    assert [m.id for m in service.find_by_browser_version("firefox", "44").items] == [
        "api.PushManager"
    ]
    # Only the flagged statement says 42.
    assert service.find_by_browser_version("firefox", "42").total == 0

    page = service.find_by_browser_version("chrome", "42", limit=2)
    assert page.total == 3
    assert page.has_more is True
    assert page.items[0].version_added == "42"


def test_list_browsers(compat: WebCompat) -> None:
    service = _bcd(compat)
    browsers = service.list_browsers()

    by_id = {browser.id: browser for browser in browsers}
    assert list(by_id) == ["chrome", "firefox", "safari_ios"]
    assert by_id["chrome"].current_version == "120"
    assert by_id["chrome"].release_date == "2023-12-05"
    assert by_id["safari_ios"].type == "mobile"
    assert by_id["safari_ios"].current_version is None
    assert service.list_browsers() is browsers


def test_list_browsers_without_browser_section() -> None:
    assert BcdService(BcdData({"api": {}})).list_browsers() == []


def test_list_categories(compat: WebCompat) -> None:
    categories = _bcd(compat).list_categories()

    assert categories[0] == "api"
    assert "manifests" in categories
    assert len(categories) == 11


def test_every_indexed_path_resolves(compat: WebCompat) -> None:
    service = _bcd(compat)

    for path in service.paths_for():
        assert service.lookup(path) is not None, path


def test_consecutive_pages_are_disjoint(compat: WebCompat) -> None:
    service = _bcd(compat)

    first = service.search(".", limit=3, offset=0)
    second = service.search(".", limit=3, offset=3)
    both = service.search(".", limit=6, offset=0)

    assert not {item.id for item in first.items} & {item.id for item in second.items}
    assert first.items + second.items == both.items


def test_path_index_built_once_under_concurrent_access(
    monkeypatch: pytest.MonkeyPatch, compat: WebCompat
) -> None:
    service = _bcd(compat)
    original = service._build_path_index
    calls: list[int] = []

    def _counting_build() -> dict[str, list[str]]:
        calls.append(1)
        time.sleep(0.05)
        return original()

    monkeypatch.setattr(service, "_build_path_index", _counting_build)
    barrier = threading.Barrier(8)
    results: list[dict[str, list[str]]] = []

    def _worker() -> None:
        barrier.wait()
        results.append(service.path_index())

    threads = [threading.Thread(target=_worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(calls) == 1
    assert len(results) == 8
    assert all(result is results[0] for result in results)


def test_find_by_browser_version_parses_only_the_requested_browser(
    monkeypatch: pytest.MonkeyPatch, compat: WebCompat
) -> None:
    def _no_full_records(cls: type[CompatRecord], raw: object) -> CompatRecord:
        raise AssertionError("full record parsed")

    monkeypatch.setattr(CompatRecord, "from_raw", classmethod(_no_full_records))

    page = _bcd(compat).find_by_browser_version("chrome", "110")

    assert [match.id for match in page.items] == ["api.FlaggedApi"]
