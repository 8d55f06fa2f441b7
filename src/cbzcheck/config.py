# ABOUTME: Checker configuration: tolerance band, timestamp sentinel, lookup and report settings.
# ABOUTME: Policy data lives here, optionally loaded from a TOML file, so it can be tuned without code changes.

import logging
import tomllib
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from cbzcheck.metadata.http import DEFAULT_REQUEST_INTERVAL, DEFAULT_TIMEOUT
from cbzcheck.metadata.normalizer import RomanizationTable

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".cbzcheck" / "config.toml"

# Earliest timestamp a ZIP entry can hold: "no real time recorded".
ZIP_EPOCH = datetime(1980, 1, 1, 0, 0, 0)


class ConfigError(Exception):
    """Raised when a configuration file is unreadable or has invalid values."""


@dataclass
class PagePolicy:
    """Rules applied to every page image."""

    tolerance_percent: int = 10
    allow_double_page: bool = True
    timestamp_sentinel: datetime = ZIP_EPOCH


@dataclass
class CheckerConfig:
    """Settings for one checker run.

    romanization holds extra variant -> canonical entries merged over the
    built-in table.
    """

    pages: PagePolicy = field(default_factory=PagePolicy)
    timeout: float = DEFAULT_TIMEOUT
    request_interval: float = DEFAULT_REQUEST_INTERVAL
    keep_going: bool = False
    show_clean: bool = False
    romanization: dict[str, str] = field(default_factory=dict)

    def romanization_table(self) -> RomanizationTable:
        return RomanizationTable.default(self.romanization)


_SECTIONS = {"pages", "lookup", "report", "romanization"}


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ConfigError(f"[{name}] must be a table")
    return dict(section)


def _take(section: dict[str, Any], name: str, key: str, kinds: tuple[type, ...], default: Any) -> Any:
    """Pop a typed value from a config table, falling back to default."""
    if key not in section:
        return default
    value = section.pop(key)
    # bool is an int subclass; never accept it for numeric settings.
    if isinstance(value, bool) and bool not in kinds:
        raise ConfigError(f"{name}.{key} must be {kinds[0].__name__}, got bool")
    if not isinstance(value, kinds):
        raise ConfigError(f"{name}.{key} must be {kinds[0].__name__}, got {type(value).__name__}")
    return value


def _reject_unknown(section: dict[str, Any], name: str) -> None:
    if section:
        keys = ", ".join(sorted(section))
        raise ConfigError(f"unknown key(s) in [{name}]: {keys}")


def _parse_sentinel(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    try:
        return datetime.fromisoformat(value).replace(tzinfo=None)
    except ValueError as exc:
        raise ConfigError(f"pages.timestamp_sentinel is not a datetime: {value!r}") from exc


def config_from_dict(data: dict[str, Any]) -> CheckerConfig:
    """Build a CheckerConfig from parsed TOML data.

    Raises:
        ConfigError: On unknown sections or keys, or values of the wrong type.
    """
    unknown = set(data) - _SECTIONS
    if unknown:
        raise ConfigError(f"unknown section(s): {', '.join(sorted(unknown))}")

    defaults = CheckerConfig()

    pages = _section(data, "pages")
    tolerance = _take(pages, "pages", "tolerance_percent", (int,), defaults.pages.tolerance_percent)
    if tolerance < 0:
        raise ConfigError("pages.tolerance_percent must not be negative")
    policy = PagePolicy(
        tolerance_percent=tolerance,
        allow_double_page=_take(
            pages, "pages", "allow_double_page", (bool,), defaults.pages.allow_double_page
        ),
        timestamp_sentinel=_parse_sentinel(
            _take(
                pages,
                "pages",
                "timestamp_sentinel",
                (str, datetime),
                defaults.pages.timestamp_sentinel,
            )
        ),
    )
    _reject_unknown(pages, "pages")

    lookup = _section(data, "lookup")
    timeout = float(_take(lookup, "lookup", "timeout", (float, int), defaults.timeout))
    interval = float(
        _take(lookup, "lookup", "request_interval", (float, int), defaults.request_interval)
    )
    keep_going = _take(lookup, "lookup", "keep_going", (bool,), defaults.keep_going)
    _reject_unknown(lookup, "lookup")

    report = _section(data, "report")
    show_clean = _take(report, "report", "show_clean", (bool,), defaults.show_clean)
    _reject_unknown(report, "report")

    romanization = _section(data, "romanization")
    for variant, canonical in romanization.items():
        if not isinstance(canonical, str):
            raise ConfigError(f"romanization.{variant} must be str")

    return CheckerConfig(
        pages=policy,
        timeout=timeout,
        request_interval=interval,
        keep_going=keep_going,
        show_clean=show_clean,
        romanization=romanization,
    )


def load_config(path: Path | None = None) -> CheckerConfig:
    """Load configuration from a TOML file.

    With no path, the default location is used if it exists; otherwise the
    built-in defaults are returned. An explicit path must exist.

    Raises:
        ConfigError: If the file cannot be read or parsed, or holds invalid values.
    """
    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return CheckerConfig()
        path = DEFAULT_CONFIG_PATH

    try:
        with path.open("rb") as fp:
            data = tomllib.load(fp)
    except OSError as exc:
        raise ConfigError(f"cannot read config {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"invalid TOML in {path}: {exc}") from exc

    logger.debug("Loaded config from %s", path)
    return config_from_dict(data)
