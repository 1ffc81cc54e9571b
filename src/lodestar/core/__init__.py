"""Core module exports."""

from lodestar.core.errors import (
    AssetError,
    ConfigError,
    ErrorCode,
    InternalError,
    LodestarError,
    ScanError,
)
from lodestar.core.excludes import HARDCODED_SUBSTRINGS, ExclusionRules
from lodestar.core.logging import (
    clear_scan_id,
    configure_logging,
    get_logger,
    get_scan_id,
    set_scan_id,
)

__all__ = [
    # Errors
    "AssetError",
    "ConfigError",
    "ErrorCode",
    "InternalError",
    "LodestarError",
    "ScanError",
    # Excludes
    "HARDCODED_SUBSTRINGS",
    "ExclusionRules",
    # Logging
    "clear_scan_id",
    "configure_logging",
    "get_logger",
    "get_scan_id",
    "set_scan_id",
]
