"""Configuration management for dayplan."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .core.search import DEFAULT_LIMIT
from .core.views import ViewName, ViewOptions

logger = logging.getLogger(__name__)

DAYPLAN_HOME = Path(os.environ.get("DAYPLAN_HOME", Path.home() / "dayplan"))
CONFIG_FILE = DAYPLAN_HOME / "config" / "dayplan.conf"
DATA_DIR = DAYPLAN_HOME / "data"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass
class Config:
    """dayplan configuration."""

    database_path: str = ""
    timezone: str = "UTC"
    show_completed: bool = False
    default_view: ViewName = ViewName.TODAY
    search_limit: int = DEFAULT_LIMIT

    @property
    def db_path(self) -> Path:
        if self.database_path:
            return Path(self.database_path).expanduser()
        return DATA_DIR / "dayplan.db"

    def view_options(self, include_completed: bool | None = None, view: ViewName | None = None) -> ViewOptions:
        """Per-request view options, with CLI flags overriding config."""
        return ViewOptions(
            include_completed=self.show_completed if include_completed is None else include_completed,
            current_view=view or self.default_view,
        )


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from an unquoted value."""
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from dayplan.conf (KEY=value lines)."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "database_path":
                config.database_path = value
            case "timezone":
                try:
                    ZoneInfo(value)
                    config.timezone = value
                except (ZoneInfoNotFoundError, ValueError):
                    logger.warning(f"Unknown TIMEZONE {value!r}, using {config.timezone}")
            case "show_completed":
                if value.lower() in _TRUE:
                    config.show_completed = True
                elif value.lower() in _FALSE:
                    config.show_completed = False
                else:
                    logger.warning(f"Invalid SHOW_COMPLETED {value!r}, expected true/false")
            case "default_view":
                try:
                    view = ViewName(value.lower())
                except ValueError:
                    view = None
                # The list view needs a list, so it can't be the default
                if view is None or view == ViewName.LIST:
                    logger.warning(f"Unknown DEFAULT_VIEW {value!r}, using {config.default_view.value}")
                else:
                    config.default_view = view
            case "search_limit":
                try:
                    config.search_limit = max(int(value), 1)
                except ValueError:
                    logger.warning(f"Invalid SEARCH_LIMIT {value!r}, using {config.search_limit}")

    return config
