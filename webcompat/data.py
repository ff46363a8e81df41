"""Dataset adapters and loaders for BCD and web-features JSON documents."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
import json
import logging
from pathlib import Path
from typing import Any, TypeGuard

from .config import Settings
from .exceptions import DatasetFormatError, DatasetNotFoundError
from .http import download_dataset, use_shared_client
from .model import WebFeature

LOGGER = logging.getLogger(__name__)

BcdNode = Mapping[str, Any]

# web-features redirect stubs, not features in their own right.
_NON_FEATURE_KINDS = frozenset({"moved", "split"})


def is_node(value: object) -> TypeGuard[Mapping[str, Any]]:
    """A BCD tree node is any mapping; leaves carry a __compat record."""
    return isinstance(value, Mapping)


class BcdData:
    """Read-only view over the BCD tree document."""

    def __init__(self, document: Mapping[str, Any]) -> None:
        self._root = document

    @property
    def root(self) -> BcdNode:
        return self._root

    def category(self, name: str) -> BcdNode | None:
        node = self._root.get(name)
        return node if is_node(node) else None

    def browsers(self) -> Mapping[str, Any]:
        browsers = self._root.get("browsers")
        return browsers if is_node(browsers) else {}

    def version(self) -> str | None:
        meta = self._root.get("__meta")
        if is_node(meta) and isinstance(meta.get("version"), str):
            return meta["version"]
        return None


class WebFeaturesData:
    """Read-only view over the web-features map and its groups."""

    def __init__(
        self,
        features: Mapping[str, Any],
        groups: Mapping[str, Any] | None = None,
    ) -> None:
        self._features: dict[str, WebFeature] = {}
        for feature_id, raw in features.items():
            if not isinstance(raw, Mapping) or raw.get("kind") in _NON_FEATURE_KINDS:
                continue
            self._features[feature_id] = WebFeature.from_raw(feature_id, raw)

        self._groups: dict[str, str] = {}
        for group_id, raw_group in (groups or {}).items():
            name = raw_group.get("name") if isinstance(raw_group, Mapping) else None
            self._groups[group_id] = name if isinstance(name, str) else group_id

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> WebFeaturesData:
        """Accept a {"features", "groups"} document or a bare features map."""
        features = document.get("features")
        if isinstance(features, Mapping):
            groups = document.get("groups")
            return cls(features, groups if isinstance(groups, Mapping) else None)
        return cls(document)

    def get(self, feature_id: str) -> WebFeature | None:
        return self._features.get(feature_id)

    def __iter__(self) -> Iterator[WebFeature]:
        return iter(self._features.values())

    def __len__(self) -> int:
        return len(self._features)

    @property
    def groups(self) -> dict[str, str]:
        return dict(self._groups)


@dataclass(frozen=True)
class Datasets:
    bcd: BcdData
    features: WebFeaturesData


def _read_json(name: str, path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise DatasetNotFoundError(name, str(path))
    try:
        with path.open(encoding="utf-8") as handle:
            payload = json.load(handle)
    except json.JSONDecodeError as exc:
        raise DatasetFormatError(name, str(path), reason=f"not valid JSON ({exc.msg})") from exc
    except OSError as exc:
        raise DatasetFormatError(name, str(path), reason=str(exc)) from exc
    if not isinstance(payload, dict):
        raise DatasetFormatError(name, str(path), reason="top-level value is not an object")
    return payload


def load_bcd(path: Path) -> BcdData:
    """Load the BCD data.json file."""
    LOGGER.debug("Loading BCD from %s", path)
    return BcdData(_read_json("BCD", path))


def load_web_features(path: Path) -> WebFeaturesData:
    """Load the web-features data.json file."""
    LOGGER.debug("Loading web-features from %s", path)
    return WebFeaturesData.from_document(_read_json("web-features", path))


def ensure_datasets(settings: Settings, *, force: bool = False) -> list[Path]:
    """Download missing datasets (or all of them when force) into their configured paths."""
    targets = [
        (settings.bcd_url, settings.bcd_path),
        (settings.features_url, settings.features_path),
    ]
    pending = [(url, path) for url, path in targets if force or not path.is_file()]
    if not pending or settings.offline:
        return []

    downloaded: list[Path] = []
    with use_shared_client(timeout=settings.timeout):
        for url, path in pending:
            LOGGER.info("Downloading %s", url)
            downloaded.append(download_dataset(url, path, timeout=settings.timeout))
    return downloaded


def load_datasets(settings: Settings) -> Datasets:
    """Load both datasets, downloading missing files unless running offline."""
    ensure_datasets(settings)
    bcd = load_bcd(settings.bcd_path)
    features = load_web_features(settings.features_path)
    LOGGER.info(
        "Loaded BCD %s and %d web features",
        bcd.version() or "(unknown version)",
        len(features),
    )
    return Datasets(bcd=bcd, features=features)
