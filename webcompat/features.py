"""web-features (Baseline) queries and the BCD cross-reference index."""

from __future__ import annotations

from collections.abc import Callable
import logging
import threading
from typing import Final, Union

from .constants import BaselineStatus
from .data import WebFeaturesData
from .model import BaselineFeatureResult, BaselineInfo, Group, Page, WebFeature, paginate

LOGGER = logging.getLogger(__name__)


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


# Distinguishes "no status filter" from an explicit False (not Baseline) filter.
UNSET: Final = _Unset()

# None and UNSET both mean "no status filter".
StatusFilter = Union[BaselineStatus, _Unset, None]


def to_baseline_result(feature: WebFeature) -> BaselineFeatureResult:
    return BaselineFeatureResult(
        id=feature.id,
        name=feature.name,
        description=feature.description,
        baseline=BaselineInfo(
            status=feature.baseline,
            low_date=feature.baseline_low_date,
            high_date=feature.baseline_high_date,
        ),
        browser_support=dict(feature.support),
        compat_features=list(feature.compat_features),
        spec=feature.spec[0] if feature.spec else None,
        group=feature.groups[0] if feature.groups else None,
        caniuse=list(feature.caniuse),
    )


class FeaturesService:
    """Queries over the web-features map; owns the BCD -> web feature reverse index."""

    def __init__(self, data: WebFeaturesData) -> None:
        self._data = data
        self._lock = threading.Lock()
        self._bcd_index: dict[str, str] | None = None

    def bcd_index(self) -> dict[str, str]:
        """Map every referenced BCD path to its web feature id, building it on first use."""
        if self._bcd_index is not None:
            return self._bcd_index
        with self._lock:
            if self._bcd_index is None:
                self._bcd_index = self._build_bcd_index()
        return self._bcd_index

    def _build_bcd_index(self) -> dict[str, str]:
        index: dict[str, str] = {}
        for feature in self._data:
            for bcd_path in feature.compat_features:
                # First writer wins when two features list the same path.
                if bcd_path in index:
                    LOGGER.debug(
                        "BCD path %s claimed by %s and %s", bcd_path, index[bcd_path], feature.id
                    )
                    continue
                index[bcd_path] = feature.id
        LOGGER.debug("Built BCD cross-reference index with %d paths", len(index))
        return index

    def find_web_feature_id(self, bcd_path: str) -> str | None:
        return self.bcd_index().get(bcd_path)

    def get_baseline_status(self, feature_id: str) -> BaselineFeatureResult | None:
        feature = self._data.get(feature_id)
        if feature is None:
            return None
        return to_baseline_result(feature)

    def baseline_for_bcd_path(self, bcd_path: str) -> BaselineInfo | None:
        """Baseline triple of the web feature that references bcd_path, if any."""
        feature_id = self.find_web_feature_id(bcd_path)
        if feature_id is None:
            return None
        result = self.get_baseline_status(feature_id)
        return result.baseline if result else None

    def _filtered(
        self, predicate: Callable[[WebFeature], bool], limit: int, offset: int
    ) -> Page[BaselineFeatureResult]:
        matches = [feature for feature in self._data if predicate(feature)]
        page = paginate(matches, limit, offset)
        return Page(
            items=[to_baseline_result(feature) for feature in page.items],
            total=page.total,
            offset=page.offset,
        )

    def list_by_baseline(
        self,
        status: StatusFilter = UNSET,
        group: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Page[BaselineFeatureResult]:
        """Filter by Baseline status ("high", "low" or False) and/or group."""
        filter_status = status is not None and status is not UNSET

        def _matches(feature: WebFeature) -> bool:
            if filter_status and feature.baseline != status:
                return False
            if group and group not in feature.groups:
                return False
            return True

        return self._filtered(_matches, limit, offset)

    def search(self, query: str, limit: int = 20, offset: int = 0) -> Page[BaselineFeatureResult]:
        """Case-insensitive substring search over id, name and description."""
        needle = query.lower()

        def _matches(feature: WebFeature) -> bool:
            return (
                needle in feature.id.lower()
                or needle in feature.name.lower()
                or needle in (feature.description or "").lower()
            )

        return self._filtered(_matches, limit, offset)

    def list_groups(self) -> list[Group]:
        return [Group(id=group_id, name=name) for group_id, name in self._data.groups.items()]
