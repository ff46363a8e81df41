"""Environment-driven settings."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import os
from pathlib import Path

import click

from .constants import (
    BCD_FILENAME,
    BCD_URL,
    DEFAULT_TIMEOUT_SECONDS,
    WEB_FEATURES_FILENAME,
    WEB_FEATURES_URL,
)

ENV_PREFIX = "WEBCOMPAT_"


def _flag(value: str | None) -> bool:
    return (value or "").strip() == "1"


def _timeout(value: str | None) -> float:
    if not value:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        parsed = float(value)
    except ValueError:
        return DEFAULT_TIMEOUT_SECONDS
    return parsed if parsed > 0 else DEFAULT_TIMEOUT_SECONDS


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    bcd_path: Path
    features_path: Path
    bcd_url: str = BCD_URL
    features_url: str = WEB_FEATURES_URL
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    offline: bool = False
    debug: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from WEBCOMPAT_* environment variables."""
        env = os.environ if environ is None else environ

        raw_dir = env.get(f"{ENV_PREFIX}DATA_DIR")
        data_dir = Path(raw_dir).expanduser() if raw_dir else Path(click.get_app_dir("webcompat"))

        raw_bcd = env.get(f"{ENV_PREFIX}BCD_PATH")
        raw_features = env.get(f"{ENV_PREFIX}FEATURES_PATH")

        return cls(
            data_dir=data_dir,
            bcd_path=Path(raw_bcd).expanduser() if raw_bcd else data_dir / BCD_FILENAME,
            features_path=(
                Path(raw_features).expanduser()
                if raw_features
                else data_dir / WEB_FEATURES_FILENAME
            ),
            bcd_url=env.get(f"{ENV_PREFIX}BCD_URL") or BCD_URL,
            features_url=env.get(f"{ENV_PREFIX}FEATURES_URL") or WEB_FEATURES_URL,
            timeout=_timeout(env.get(f"{ENV_PREFIX}TIMEOUT")),
            offline=_flag(env.get(f"{ENV_PREFIX}OFFLINE")),
            debug=_flag(env.get(f"{ENV_PREFIX}DEBUG")),
        )
