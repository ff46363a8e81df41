"""Markdown renderers for query results."""

from __future__ import annotations

from typing import Any

from .constants import (
    BASELINE_LABEL_MAP,
    CHARACTER_LIMIT,
    MAX_RELATED_FEATURES_SHOWN,
    TRUNCATION_NOTICE,
)
from .model import (
    BaselineFeatureResult,
    BrowserInfo,
    CompareResult,
    FeatureCompatResult,
    Page,
    SearchItem,
    VersionMatch,
)


def baseline_label(status: object) -> str:
    if status in ("high", "low"):
        return BASELINE_LABEL_MAP[status]
    return BASELINE_LABEL_MAP[False]


def format_version(version_added: str | bool | None) -> str:
    if version_added is True:
        return "Yes"
    if version_added is False or version_added is None:
        return "❌ No"
    return f"{version_added}+"


def _more_hint(page: Page[Any]) -> list[str]:
    if not page.has_more:
        return []
    return [
        "",
        f"> {page.total - len(page.items)} more results available. "
        "Use `offset` parameter to paginate.",
    ]


def _found_line(page: Page[Any]) -> str:
    return f"Found **{page.total}** features (showing {len(page.items)})"


def render_compat(result: FeatureCompatResult) -> str:
    """Render a single feature's compatibility summary."""
    lines = [f"# {result.id}", ""]

    status_parts: list[str] = []
    if result.status is not None:
        if result.status.standard_track:
            status_parts.append("Standard Track")
        if result.status.experimental:
            status_parts.append("⚠️ Experimental")
        if result.status.deprecated:
            status_parts.append("⛔ Deprecated")
    if status_parts:
        lines.append(f"**Status**: {' | '.join(status_parts)}")

    if result.baseline is not None:
        since = f" ({result.baseline.low_date}~)" if result.baseline.low_date else ""
        lines.append(f"**Baseline**: {baseline_label(result.baseline.status)}{since}")
    lines.append("")

    lines.extend(
        ["## Browser Support", "", "| Browser | Version | Notes |", "|---------|---------|-------|"]
    )
    for browser_id, data in result.support.items():
        notes: list[str] = []
        if data.partial_implementation:
            notes.append("Partial")
        if data.flags:
            notes.append("Flag required")
        if data.prefix:
            notes.append(f"Prefix: {data.prefix}")
        if data.version_removed:
            notes.append(f"Removed in {data.version_removed}")
        version = format_version(data.version_added)
        lines.append(f"| {browser_id} | {version} | {', '.join(notes)} |")
    lines.append("")

    if result.mdn_url:
        lines.append(f"📖 [MDN]({result.mdn_url})")
    if result.spec_url:
        spec_url = result.spec_url[0] if isinstance(result.spec_url, tuple) else result.spec_url
        lines.append(f"📋 [Spec]({spec_url})")

    return "\n".join(lines)


def render_search(page: Page[SearchItem], query: str) -> str:
    lines = [f'# Search Results: "{query}"', "", _found_line(page), ""]
    lines.append("| Feature ID | Standard | Experimental | Deprecated |")
    lines.append("|------------|----------|--------------|------------|")
    for item in page.items:
        lines.append(
            f"| `{item.id}` | {'✅' if item.standard_track else '❌'} | "
            f"{'⚠️' if item.experimental else '—'} | {'⛔' if item.deprecated else '—'} |"
        )
    lines.extend(_more_hint(page))
    return "\n".join(lines)


def render_baseline(result: BaselineFeatureResult) -> str:
    """Render one web feature's Baseline detail."""
    lines = [
        f"# {result.name}",
        "",
        f"**ID**: `{result.id}`",
        f"**Baseline**: {baseline_label(result.baseline.status)}",
    ]
    if result.baseline.low_date:
        lines.append(f"**Newly Available since**: {result.baseline.low_date}")
    if result.baseline.high_date:
        lines.append(f"**Widely Available since**: {result.baseline.high_date}")
    lines.append("")

    if result.description:
        lines.extend([result.description, ""])

    lines.extend(["## Browser Support", "", "| Browser | Version |", "|---------|---------|"])
    for browser, version in result.browser_support.items():
        lines.append(f"| {browser} | {version}+ |")
    lines.append("")

    if result.compat_features:
        lines.extend(["## Related BCD Features", ""])
        for bcd_path in result.compat_features[:MAX_RELATED_FEATURES_SHOWN]:
            lines.append(f"- `{bcd_path}`")
        hidden = len(result.compat_features) - MAX_RELATED_FEATURES_SHOWN
        if hidden > 0:
            lines.append(f"- ... and {hidden} more")
        lines.append("")

    if result.spec:
        lines.append(f"📋 [Spec]({result.spec})")

    return "\n".join(lines)


def render_baseline_list(
    page: Page[BaselineFeatureResult], status_filter: str | None = None
) -> str:
    title = f"Baseline Features ({status_filter})" if status_filter else "Baseline Features"
    lines = [f"# {title}", "", _found_line(page), ""]
    lines.append("| Feature | Baseline | Since |")
    lines.append("|---------|----------|-------|")
    for item in page.items:
        since = item.baseline.low_date or "—"
        label = baseline_label(item.baseline.status)
        lines.append(f"| {item.name} (`{item.id}`) | {label} | {since} |")
    lines.extend(_more_hint(page))
    return "\n".join(lines)


def render_compare(result: CompareResult) -> str:
    """Render a side-by-side table across the union of browsers."""
    lines = ["# Feature Comparison", ""]

    if result.not_found:
        missing = ", ".join(f"`{feature_id}`" for feature_id in result.not_found)
        lines.extend([f"> ⚠️ Not found: {missing}", ""])

    browsers = sorted({browser for item in result.features for browser in item.support})

    lines.append("| Browser " + " ".join(f"| `{item.id}`" for item in result.features) + " |")
    lines.append("|---" + "".join("|---" for _ in result.features) + "|")
    for browser_id in browsers:
        cells: list[str] = []
        for item in result.features:
            data = item.support.get(browser_id)
            if data is None:
                cells.append("| — ")
                continue
            extras = ("🚩" if data.flags else "") + ("⚠️" if data.partial_implementation else "")
            version = format_version(data.version_added)
            cells.append(f"| {version}{' ' + extras if extras else ''} ")
        lines.append(f"| {browser_id} {''.join(cells)}|")
    lines.append("")

    if any(item.baseline is not None for item in result.features):
        lines.extend(["## Baseline Status", ""])
        for item in result.features:
            label = baseline_label(item.baseline.status) if item.baseline else "No data"
            lines.append(f"- `{item.id}`: {label}")
        lines.append("")

    return "\n".join(lines)


def render_browsers(browsers: list[BrowserInfo]) -> str:
    lines = ["# Tracked Browsers", "", f"Total: **{len(browsers)}** browsers", ""]

    grouped: dict[str, list[BrowserInfo]] = {}
    for browser in browsers:
        grouped.setdefault(browser.type or "unknown", []).append(browser)

    for browser_type, members in grouped.items():
        lines.extend(
            [
                f"## {browser_type[:1].upper()}{browser_type[1:]}",
                "",
                "| ID | Name | Current Version | Release Date |",
                "|----|------|-----------------|--------------|",
            ]
        )
        for browser in members:
            lines.append(
                f"| {browser.id} | {browser.name} | {browser.current_version or '—'} | "
                f"{browser.release_date or '—'} |"
            )
        lines.append("")

    return "\n".join(lines)


def render_version_matches(browser: str, version: str, page: Page[VersionMatch]) -> str:
    lines = [f"# Features added in {browser} {version}", "", _found_line(page), ""]
    lines.extend(["| Feature ID |", "|------------|"])
    for item in page.items:
        lines.append(f"| `{item.id}` |")
    lines.extend(_more_hint(page))
    return "\n".join(lines)


def truncate_if_needed(text: str, limit: int = CHARACTER_LIMIT) -> str:
    """Cap a response at limit characters, appending a pagination hint."""
    if len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_NOTICE
