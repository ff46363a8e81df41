"""BCD (Browser Compat Data) queries.

Feature paths are dotted keys into the BCD tree (``api.PushManager``,
``css.properties.grid``). Search and version queries run over a path index
that is built once per process by walking each category to a bounded depth.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
import logging
import threading

from .constants import (
    BCD_CATEGORIES,
    BCD_MAX_TRAVERSE_DEPTH,
    BCD_METADATA_KEYS,
    DESKTOP_BROWSERS,
)
from .data import BcdData, BcdNode, is_node
from .model import (
    BaselineInfo,
    BrowserInfo,
    CompatRecord,
    FeatureCompatResult,
    Page,
    SearchItem,
    SupportEntry,
    SupportStatement,
    SupportSummary,
    VersionMatch,
    paginate,
    parse_support_entry,
)

LOGGER = logging.getLogger(__name__)

BaselineResolver = Callable[[str], BaselineInfo | None]


def normalize_support(entry: SupportEntry | None) -> SupportStatement | None:
    """Collapse one browser's support into a single statement.

    Prefers the first statement without a flag requirement, falling back to the
    first statement in document order.
    """
    if entry is None:
        return None
    if isinstance(entry, SupportStatement):
        return entry
    for statement in entry:
        if statement.flags is None:
            return statement
    return entry[0] if entry else None


def collect_feature_paths(
    node: BcdNode,
    prefix: str,
    results: list[str],
    max_depth: int = BCD_MAX_TRAVERSE_DEPTH,
    current_depth: int = 0,
) -> None:
    """Append every path below node that carries a __compat record, in key order."""
    if current_depth > max_depth:
        return

    for key, child in node.items():
        if key in BCD_METADATA_KEYS or not is_node(child):
            continue
        path = f"{prefix}.{key}"
        if "__compat" in child:
            results.append(path)
        # Grouping nodes such as css.properties have no record of their own.
        collect_feature_paths(child, path, results, max_depth, current_depth + 1)


def _summarize(statement: SupportStatement) -> SupportSummary:
    notes = statement.notes
    return SupportSummary(
        version_added=statement.version_added,
        version_removed=statement.version_removed,
        flags=True if statement.flags is not None else None,
        partial_implementation=statement.partial_implementation,
        prefix=statement.prefix,
        notes="; ".join(notes) if isinstance(notes, tuple) else notes,
    )


def _describe(record: CompatRecord) -> str | None:
    if record.status is None:
        return None
    if record.status.deprecated:
        return "⛔ Deprecated"
    if record.status.experimental:
        return "⚠️ Experimental"
    return None


class BcdService:
    """Queries over one BCD document; owns the lazily built path index."""

    def __init__(self, data: BcdData) -> None:
        self._data = data
        self._lock = threading.Lock()
        self._path_index: dict[str, list[str]] | None = None
        self._browsers: list[BrowserInfo] | None = None

    def _raw_compat(self, path: str) -> BcdNode | None:
        current: object = self._data.root
        for part in path.split("."):
            if not is_node(current):
                return None
            current = current.get(part)

        if not is_node(current):
            return None
        raw = current.get("__compat")
        return raw if is_node(raw) else None

    def lookup(self, path: str) -> CompatRecord | None:
        """Resolve a dotted path to its compatibility record, or None."""
        raw = self._raw_compat(path)
        return CompatRecord.from_raw(raw) if raw is not None else None

    def path_index(self) -> dict[str, list[str]]:
        """Return the category -> feature paths index, building it on first use."""
        if self._path_index is not None:
            return self._path_index
        with self._lock:
            if self._path_index is None:
                self._path_index = self._build_path_index()
        return self._path_index

    def _build_path_index(self) -> dict[str, list[str]]:
        index: dict[str, list[str]] = {}
        for category in BCD_CATEGORIES:
            node = self._data.category(category)
            if node is None:
                continue
            paths: list[str] = []
            collect_feature_paths(node, category, paths)
            index[category] = paths
        LOGGER.debug(
            "Built BCD path index: %d paths across %d categories",
            sum(len(paths) for paths in index.values()),
            len(index),
        )
        return index

    def paths_for(self, category: str | None = None) -> list[str]:
        """Indexed paths of one category, or of every category in fixed order."""
        index = self.path_index()
        categories = [category] if category else list(BCD_CATEGORIES)
        paths: list[str] = []
        for name in categories:
            paths.extend(index.get(name, []))
        return paths

    def get_feature_compat(
        self,
        path: str,
        browsers: Sequence[str] | None = None,
        *,
        resolve_baseline: BaselineResolver | None = None,
    ) -> FeatureCompatResult | None:
        """Compatibility summary for one feature, or None when the path is unknown."""
        record = self.lookup(path)
        if record is None:
            return None

        support: dict[str, SupportSummary] = {}
        for browser_id in browsers if browsers is not None else DESKTOP_BROWSERS:
            statement = normalize_support(record.support.get(browser_id))
            if statement is not None:
                support[browser_id] = _summarize(statement)

        return FeatureCompatResult(
            id=path,
            support=support,
            description=_describe(record),
            mdn_url=record.mdn_url,
            spec_url=record.spec_url,
            status=record.status,
            baseline=resolve_baseline(path) if resolve_baseline else None,
        )

    def search(
        self,
        query: str,
        category: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Page[SearchItem]:
        """Case-insensitive substring search over indexed paths."""
        needle = query.lower()
        matches = [path for path in self.paths_for(category) if needle in path.lower()]
        page = paginate(matches, limit, offset)

        items: list[SearchItem] = []
        for path in page.items:
            record = self.lookup(path)
            status = record.status if record else None
            items.append(
                SearchItem(
                    id=path,
                    description=f"MDN: {record.mdn_url}" if record and record.mdn_url else None,
                    deprecated=status.deprecated if status else False,
                    experimental=status.experimental if status else False,
                    standard_track=status.standard_track if status else False,
                )
            )
        return Page(items=items, total=page.total, offset=page.offset)

    def find_by_browser_version(
        self,
        browser: str,
        version: str,
        category: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Page[VersionMatch]:
        """Features whose version_added for browser equals version exactly."""
        matches: list[VersionMatch] = []
        for path in self.paths_for(category):
            raw = self._raw_compat(path)
            support = raw.get("support") if raw is not None else None
            if not is_node(support):
                continue
            statement = normalize_support(parse_support_entry(support.get(browser)))
            if statement is None:
                continue
            added = statement.version_added
            if isinstance(added, str) and added == version:
                matches.append(VersionMatch(id=path, version_added=added))
        return paginate(matches, limit, offset)

    def list_browsers(self) -> list[BrowserInfo]:
        """Tracked browsers with their current release, cached."""
        if self._browsers is not None:
            return self._browsers

        result: list[BrowserInfo] = []
        for browser_id, browser in self._data.browsers().items():
            if not is_node(browser):
                continue
            current_version: str | None = None
            release_date: str | None = None
            releases = browser.get("releases")
            if is_node(releases):
                for release_version, release in releases.items():
                    if is_node(release) and release.get("status") == "current":
                        current_version = release_version
                        release_date = release.get("release_date")
                        break
            result.append(
                BrowserInfo(
                    id=browser_id,
                    name=str(browser.get("name", browser_id)),
                    type=str(browser.get("type", "unknown")),
                    current_version=current_version,
                    release_date=release_date if isinstance(release_date, str) else None,
                )
            )

        self._browsers = result
        return result

    @staticmethod
    def list_categories() -> list[str]:
        return list(BCD_CATEGORIES)
