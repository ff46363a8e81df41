"""Data models for BCD records, web features and query results."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, Generic, TypeVar

from .constants import BaselineStatus

T = TypeVar("T")

# Fields emitted as null in JSON output instead of being left out.
_NULLABLE = {"nullable": True}


def _str_or_none(value: object) -> str | None:
    return value if isinstance(value, str) else None


def _version(value: object) -> str | bool | None:
    if isinstance(value, (str, bool)):
        return value
    return None


def _str_tuple(value: object) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)):
        return tuple(item for item in value if isinstance(item, str))
    return ()


@dataclass(frozen=True)
class Flag:
    type: str
    name: str
    value_to_set: str | None = None


@dataclass(frozen=True)
class SupportStatement:
    version_added: str | bool | None
    version_removed: str | bool | None = None
    prefix: str | None = None
    alternative_name: str | None = None
    # None means no flag requirement at all.
    flags: tuple[Flag, ...] | None = None
    partial_implementation: bool | None = None
    notes: str | tuple[str, ...] | None = None

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> SupportStatement:
        raw_flags = raw.get("flags")
        flags: tuple[Flag, ...] | None = None
        if isinstance(raw_flags, list):
            flags = tuple(
                Flag(
                    type=str(item.get("type", "")),
                    name=str(item.get("name", "")),
                    value_to_set=_str_or_none(item.get("value_to_set")),
                )
                for item in raw_flags
                if isinstance(item, Mapping)
            )

        raw_notes = raw.get("notes")
        notes: str | tuple[str, ...] | None
        if isinstance(raw_notes, list):
            notes = _str_tuple(raw_notes)
        else:
            notes = _str_or_none(raw_notes)

        partial = raw.get("partial_implementation")
        return cls(
            version_added=_version(raw.get("version_added")),
            version_removed=_version(raw.get("version_removed")),
            prefix=_str_or_none(raw.get("prefix")),
            alternative_name=_str_or_none(raw.get("alternative_name")),
            flags=flags,
            partial_implementation=partial if isinstance(partial, bool) else None,
            notes=notes,
        )


# One browser's support: a single statement, or alternatives in document order.
SupportEntry = SupportStatement | tuple[SupportStatement, ...]


def parse_support_entry(raw: object) -> SupportEntry | None:
    """Convert a raw BCD support value into the single/multiple variant."""
    if isinstance(raw, Mapping):
        return SupportStatement.from_raw(raw)
    if isinstance(raw, list):
        return tuple(SupportStatement.from_raw(item) for item in raw if isinstance(item, Mapping))
    return None


@dataclass(frozen=True)
class CompatStatus:
    experimental: bool
    standard_track: bool
    deprecated: bool

    @classmethod
    def from_raw(cls, raw: object) -> CompatStatus | None:
        if not isinstance(raw, Mapping):
            return None
        return cls(
            experimental=bool(raw.get("experimental", False)),
            standard_track=bool(raw.get("standard_track", False)),
            deprecated=bool(raw.get("deprecated", False)),
        )


@dataclass(frozen=True)
class CompatRecord:
    mdn_url: str | None
    spec_url: str | tuple[str, ...] | None
    status: CompatStatus | None
    support: dict[str, SupportEntry]
    tags: tuple[str, ...] = ()

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> CompatRecord:
        raw_spec = raw.get("spec_url")
        spec_url: str | tuple[str, ...] | None
        if isinstance(raw_spec, list):
            spec_url = _str_tuple(raw_spec) or None
        else:
            spec_url = _str_or_none(raw_spec)

        support: dict[str, SupportEntry] = {}
        raw_support = raw.get("support")
        if isinstance(raw_support, Mapping):
            for browser_id, value in raw_support.items():
                entry = parse_support_entry(value)
                if entry is not None:
                    support[browser_id] = entry

        return cls(
            mdn_url=_str_or_none(raw.get("mdn_url")),
            spec_url=spec_url,
            status=CompatStatus.from_raw(raw.get("status")),
            support=support,
            tags=_str_tuple(raw.get("tags")),
        )


@dataclass(frozen=True)
class WebFeature:
    id: str
    name: str
    description: str | None
    compat_features: tuple[str, ...]
    groups: tuple[str, ...]
    caniuse: tuple[str, ...]
    spec: tuple[str, ...]
    baseline: BaselineStatus
    baseline_low_date: str | None
    baseline_high_date: str | None
    support: dict[str, str]

    @classmethod
    def from_raw(cls, feature_id: str, raw: Mapping[str, Any]) -> WebFeature:
        status = raw.get("status")
        status_map: Mapping[str, Any] = status if isinstance(status, Mapping) else {}

        raw_baseline = status_map.get("baseline", False)
        baseline: BaselineStatus = raw_baseline if raw_baseline in ("high", "low") else False

        raw_browser_support = status_map.get("support")
        browser_support: dict[str, str] = {}
        if isinstance(raw_browser_support, Mapping):
            browser_support = {
                str(browser): str(version) for browser, version in raw_browser_support.items()
            }

        name = raw.get("name")
        return cls(
            id=feature_id,
            name=name if isinstance(name, str) and name else feature_id,
            description=_str_or_none(raw.get("description")),
            compat_features=_str_tuple(raw.get("compat_features")),
            groups=_str_tuple(raw.get("group")),
            caniuse=_str_tuple(raw.get("caniuse")),
            spec=_str_tuple(raw.get("spec")),
            baseline=baseline,
            baseline_low_date=_str_or_none(status_map.get("baseline_low_date")),
            baseline_high_date=_str_or_none(status_map.get("baseline_high_date")),
            support=browser_support,
        )


@dataclass(frozen=True)
class SupportSummary:
    version_added: str | bool | None
    version_removed: str | bool | None = None
    flags: bool | None = None
    partial_implementation: bool | None = None
    prefix: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class BaselineInfo:
    status: BaselineStatus
    low_date: str | None = field(default=None, metadata=_NULLABLE)
    high_date: str | None = field(default=None, metadata=_NULLABLE)


@dataclass(frozen=True)
class FeatureCompatResult:
    id: str
    support: dict[str, SupportSummary]
    description: str | None = None
    mdn_url: str | None = None
    spec_url: str | tuple[str, ...] | None = None
    status: CompatStatus | None = None
    baseline: BaselineInfo | None = field(default=None, metadata=_NULLABLE)


@dataclass(frozen=True)
class SearchItem:
    id: str
    deprecated: bool
    experimental: bool
    standard_track: bool
    description: str | None = None


@dataclass(frozen=True)
class BaselineFeatureResult:
    id: str
    name: str
    baseline: BaselineInfo
    browser_support: dict[str, str]
    compat_features: list[str]
    description: str | None = None
    spec: str | None = None
    group: str | None = None
    caniuse: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class VersionMatch:
    id: str
    version_added: str


@dataclass(frozen=True)
class BrowserInfo:
    id: str
    name: str
    type: str
    current_version: str | None = None
    release_date: str | None = None


@dataclass(frozen=True)
class Group:
    id: str
    name: str


@dataclass(frozen=True)
class CompareResult:
    features: list[FeatureCompatResult]
    not_found: list[str]


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T]
    total: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.total > self.offset + len(self.items)

    @property
    def next_offset(self) -> int | None:
        return self.offset + len(self.items) if self.has_more else None


def paginate(matches: list[T], limit: int, offset: int) -> Page[T]:
    """Slice matches into a page; out-of-range offsets give an empty page."""
    return Page(items=matches[offset : offset + limit], total=len(matches), offset=offset)


def to_jsonable(value: Any) -> Any:
    """Convert result dataclasses into plain JSON-ready structures.

    Unset optional fields are left out; fields marked nullable stay as null.
    """
    if is_dataclass(value) and not isinstance(value, type):
        output: dict[str, Any] = {}
        for item in fields(value):
            raw = getattr(value, item.name)
            if raw is None and not item.metadata.get("nullable"):
                continue
            output[item.name] = to_jsonable(raw)
        return output
    if isinstance(value, dict):
        return {key: to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    return value
