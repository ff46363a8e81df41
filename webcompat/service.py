"""Query facade over both datasets."""

from __future__ import annotations

from collections.abc import Sequence
import threading

from .bcd import BcdService
from .config import Settings
from .data import Datasets, load_datasets
from .features import UNSET, FeaturesService, StatusFilter
from .model import (
    BaselineFeatureResult,
    BrowserInfo,
    CompareResult,
    FeatureCompatResult,
    Group,
    Page,
    SearchItem,
    VersionMatch,
)


class WebCompat:
    """Long-lived owner of both datasets and their derived indices."""

    def __init__(self, datasets: Datasets) -> None:
        self.bcd = BcdService(datasets.bcd)
        self.features = FeaturesService(datasets.features)

    def get_feature_compat(
        self, path: str, browsers: Sequence[str] | None = None
    ) -> FeatureCompatResult | None:
        return self.bcd.get_feature_compat(
            path, browsers, resolve_baseline=self.features.baseline_for_bcd_path
        )

    def compare_features(
        self, paths: Sequence[str], browsers: Sequence[str] | None = None
    ) -> CompareResult:
        """Resolve each path independently; unknown ones are reported, not fatal."""
        found: list[FeatureCompatResult] = []
        not_found: list[str] = []
        for path in paths:
            result = self.get_feature_compat(path, browsers)
            if result is None:
                not_found.append(path)
            else:
                found.append(result)
        return CompareResult(features=found, not_found=not_found)

    def search_features(
        self, query: str, category: str | None = None, limit: int = 20, offset: int = 0
    ) -> Page[SearchItem]:
        return self.bcd.search(query, category, limit, offset)

    def get_baseline_status(self, feature_id: str) -> BaselineFeatureResult | None:
        return self.features.get_baseline_status(feature_id)

    def list_by_baseline(
        self,
        status: StatusFilter = UNSET,
        group: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Page[BaselineFeatureResult]:
        return self.features.list_by_baseline(status, group, limit, offset)

    def search_web_features(
        self, query: str, limit: int = 20, offset: int = 0
    ) -> Page[BaselineFeatureResult]:
        return self.features.search(query, limit, offset)

    def find_web_feature_id(self, bcd_path: str) -> str | None:
        return self.features.find_web_feature_id(bcd_path)

    def find_by_browser_version(
        self,
        browser: str,
        version: str,
        category: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Page[VersionMatch]:
        return self.bcd.find_by_browser_version(browser, version, category, limit, offset)

    def list_browsers(self) -> list[BrowserInfo]:
        return self.bcd.list_browsers()

    def list_categories(self) -> list[str]:
        return self.bcd.list_categories()

    def list_groups(self) -> list[Group]:
        return self.features.list_groups()


_DEFAULT: WebCompat | None = None
_DEFAULT_LOCK = threading.Lock()


def get_default(settings: Settings | None = None) -> WebCompat:
    """Process-wide instance, loaded from the configured dataset files on first use."""
    global _DEFAULT
    if _DEFAULT is not None:
        return _DEFAULT
    with _DEFAULT_LOCK:
        if _DEFAULT is None:
            _DEFAULT = WebCompat(load_datasets(settings or Settings.from_env()))
    return _DEFAULT
