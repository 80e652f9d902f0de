"""
Configuration for bfcm-report.

Layers, lowest precedence first:

  ``config/default.toml``   committed defaults
  ``config/local.toml``     per-machine tweaks, merged table by table
  ``.env``                  loaded into the environment if present
  ``BFCM_REPORT_*`` vars    final say, see ``_ENV_OVERRIDES``

Call ``load_config()`` to get a frozen ``AppConfig``.

Source credentials only ever come from the environment (or ``.env``):
``BFCM_REPORT_CLIENT_ID`` and ``BFCM_REPORT_CLIENT_SECRET`` are copied into
``SourcesConfig``, and the HTTP fetchers read them from there.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

# ── Section models ────────────────────────────────────────────────────────────


# Recommendations shown per report, whatever the config asks for.
MAX_RECOMMENDATIONS = 8


class ReportConfig(BaseModel):
    """Report window and output-shaping settings."""

    model_config = ConfigDict(frozen=True)

    max_window_days: int = 90
    max_recommendations: int = MAX_RECOMMENDATIONS
    comparison_label: str = "YoY"
    peak_timezone: Optional[str] = None

    @field_validator("max_window_days", "max_recommendations")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Value must be >= 1, got {v}.")
        return v

    @field_validator("max_recommendations")
    @classmethod
    def validate_recommendation_cap(cls, v: int) -> int:
        if v > MAX_RECOMMENDATIONS:
            raise ValueError(
                f"max_recommendations must be <= {MAX_RECOMMENDATIONS}, got {v}."
            )
        return v

    @field_validator("peak_timezone")
    @classmethod
    def validate_timezone(cls, v: Optional[str]) -> Optional[str]:
        if v in (None, ""):
            return None
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone '{v}'.") from exc
        return v


class BenchmarksConfig(BaseModel):
    """Industry reference values quoted in insights and recommendation rules."""

    model_config = ConfigDict(frozen=True)

    conversion_rate: float = 2.5   # percent of sessions
    repeat_rate: float = 27.0      # percent of customers
    aov: float = 75.0              # currency units


class SourcesConfig(BaseModel):
    """Analytics source connection settings."""

    model_config = ConfigDict(frozen=True)

    base_url: Optional[str] = None
    timeout_seconds: float = 120.0
    fixture_path: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {v}.")
        return v

    @property
    def has_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret)


_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LoggingConfig(BaseModel):
    """Where log records go and how they are rendered."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""          # empty: stderr only
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def normalise_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Log level must be one of {list(_LOG_LEVELS)}, got '{v}'.")
        return level


class AppConfig(BaseModel):
    """Everything a report run needs, after all config layers are merged.

    Built by ``load_config()`` and handed to the CLI, ``generate_report()``
    and the rule engine.  Nothing below this object reads ``os.environ``.
    """

    model_config = ConfigDict(frozen=True)

    report: ReportConfig = ReportConfig()
    benchmarks: BenchmarksConfig = BenchmarksConfig()
    sources: SourcesConfig = SourcesConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loading ───────────────────────────────────────────────────────────────────

_ENV_PREFIX = "BFCM_REPORT_"

# Env var suffix → (section, key) in the raw TOML dict.
_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "LOG_LEVEL": ("logging", "level"),
    "SOURCES_BASE_URL": ("sources", "base_url"),
    "FIXTURE_PATH": ("sources", "fixture_path"),
    "CLIENT_ID": ("sources", "client_id"),
    "CLIENT_SECRET": ("sources", "client_secret"),
}

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _repo_root() -> Path:
    """Directory holding ``pyproject.toml``; falls back to the package parent."""
    here = Path(__file__).resolve().parent
    for directory in (here, *here.parents[:4]):
        if (directory / "pyproject.toml").is_file():
            return directory
    return here.parent


def _read_toml(path: Path) -> dict[str, Any]:
    with path.open("rb") as fh:
        return tomllib.load(fh)


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Build an ``AppConfig`` from TOML files, ``.env`` and the environment.

    Args:
        config_path: TOML file to start from.  When omitted the repo's
            ``config/default.toml`` is used.  A ``local.toml`` next to it,
            if present, is merged on top.

    Raises:
        FileNotFoundError:        ``config_path`` does not exist.
        pydantic.ValidationError: A merged value is out of range.
    """
    root = _repo_root()
    load_dotenv(dotenv_path=root / ".env", override=False)

    path = Path(config_path) if config_path is not None else root / "config" / "default.toml"
    if not path.is_file():
        raise FileNotFoundError(
            f"Config file not found: {path}\n"
            "Pass --config with a TOML file or restore config/default.toml."
        )

    raw = _read_toml(path)
    local = path.with_name("local.toml")
    if local.is_file():
        raw = _deep_merge(raw, _read_toml(local))

    raw = _apply_env_overrides(raw, os.environ)
    return AppConfig.model_validate(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return ``base`` with ``override`` laid over it; nested tables merge key by key."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            value = _deep_merge(current, value)
        merged[key] = value
    return merged


def _apply_env_overrides(raw: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    """Copy non-empty ``BFCM_REPORT_*`` variables into ``raw``.

    ``BFCM_REPORT_DEBUG`` is read as a flag (``1``/``true``/``yes``/``on``).
    """
    for suffix, (section, key) in _ENV_OVERRIDES.items():
        value = environ.get(_ENV_PREFIX + suffix)
        if value:
            raw.setdefault(section, {})[key] = value

    flag = environ.get(_ENV_PREFIX + "DEBUG")
    if flag:
        raw["debug"] = flag.strip().lower() in _TRUTHY
    return raw
