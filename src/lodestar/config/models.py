"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (LODESTAR__SECTION__KEY)
3. YAML config (~/.config/lodestar/config.yaml or an explicit path)
4. Built-in defaults (this file)

Environment Variable Format:
    LODESTAR__<SECTION>__<KEY>=<VALUE>

Examples:
    LODESTAR__LOGGING__LEVEL=DEBUG
    LODESTAR__DISCOVERY__REFRESH_INTERVAL_SEC=120
    LODESTAR__SEARCH__DEFAULT_LIMIT=20
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
RootKind = Literal["shallow", "standard", "deep"]

_DEPTH_BY_KIND: dict[str, int] = {"shallow": 1, "standard": 2, "deep": 3}


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        LODESTAR__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every skipped root and dropped bundle.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class RootConfig(BaseModel):
    """One location the scanner walks.

    ``kind`` picks the default recursion depth: shallow roots are read one
    level deep, standard application folders two, roots known to nest deeply
    three. An explicit ``depth`` wins over ``kind``.
    """

    path: str
    kind: RootKind = "standard"
    depth: int | None = Field(default=None, ge=1, le=8)

    @property
    def resolved_path(self) -> Path:
        return Path(self.path).expanduser()

    @property
    def effective_depth(self) -> int:
        return self.depth if self.depth is not None else _DEPTH_BY_KIND[self.kind]


def _default_roots() -> list[RootConfig]:
    return [
        RootConfig(path="/Applications", kind="standard"),
        RootConfig(path="/System/Applications", kind="standard"),
        RootConfig(path="/System/Library/CoreServices/Applications", kind="shallow"),
        RootConfig(path="/usr/local", kind="deep"),
        RootConfig(path="~/Applications", kind="standard"),
        RootConfig(path="/usr/share/applications", kind="shallow"),
        RootConfig(path="~/.local/share/applications", kind="shallow"),
    ]


class DiscoveryConfig(BaseModel):
    """Resource discovery configuration.

    Env vars:
        LODESTAR__DISCOVERY__MAX_WORKERS: Parallel per-root scan workers
        LODESTAR__DISCOVERY__REFRESH_INTERVAL_SEC: Periodic rescan interval
    """

    roots: list[RootConfig] = Field(default_factory=_default_roots)
    exclude_patterns: list[str] = Field(
        default_factory=list,
        description="Extra directory-name substrings to prune, on top of the built-in denylist.",
    )
    max_workers: int = Field(
        default=4,
        ge=1,
        description="Upper bound on concurrent per-root scan tasks.",
    )
    refresh_interval_sec: float = Field(
        default=60.0,
        gt=0,
        description="Seconds between periodic rescans. "
        "TRADEOFF: Lower values pick up installs sooner but walk the disk more often.",
    )


class MatcherConfig(BaseModel):
    """Fuzzy matcher tuning.

    Env vars:
        LODESTAR__MATCHER__WINDOW: Characters of text considered for fuzzy alignment
        LODESTAR__MATCHER__DISTANCE: Offset at which the proximity penalty saturates
        LODESTAR__MATCHER__THRESHOLD: Minimum raw similarity accepted
    """

    window: int = Field(default=32, ge=1)
    distance: int = Field(default=100, ge=1)
    threshold: float = Field(default=0.3, ge=0.0, le=1.0)
    proximity_weight: float = Field(default=0.5, ge=0.0, le=1.0)


class SearchConfig(BaseModel):
    """Search defaults.

    Env vars:
        LODESTAR__SEARCH__DEFAULT_LIMIT: Default result count
        LODESTAR__SEARCH__PROVIDER_LIMIT: Results each provider contributes to a merge
    """

    default_limit: int = Field(default=10, ge=1)
    provider_limit: int = Field(default=30, ge=1)


class AssetsConfig(BaseModel):
    """Icon cache configuration.

    Env vars:
        LODESTAR__ASSETS__ICON_SIZE: Icon edge length in pixels
    """

    icon_size: int = Field(default=24, ge=8, le=512)
    max_workers: int = Field(default=2, ge=1)


class WatcherConfig(BaseModel):
    """Root watcher configuration.

    Env vars:
        LODESTAR__WATCHER__ENABLED: Trigger rescans on filesystem changes
        LODESTAR__WATCHER__DEBOUNCE_SEC: Quiet window before a rescan is requested
    """

    enabled: bool = True
    debounce_sec: float = Field(default=0.5, gt=0)
    max_debounce_wait_sec: float = Field(default=2.0, gt=0)


class LodestarConfig(BaseModel):
    """Root configuration for Lodestar."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    matcher: MatcherConfig = Field(default_factory=MatcherConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    assets: AssetsConfig = Field(default_factory=AssetsConfig)
    watcher: WatcherConfig = Field(default_factory=WatcherConfig)
