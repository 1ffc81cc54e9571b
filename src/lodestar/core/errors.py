"""Lodestar error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Scan / catalog build
- 4xxx: Assets
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_MISSING_REQUIRED = 2003
    CONFIG_FILE_NOT_FOUND = 2004

    # Scan (3xxx)
    SCAN_NO_READABLE_ROOTS = 3001
    SCAN_ROOT_UNREADABLE = 3002
    RESOURCE_MALFORMED = 3003

    # Assets (4xxx)
    ASSET_LOAD_FAILED = 4001

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class LodestarError(Exception):
    """Base error with structured context for log lines and CLI output."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(LodestarError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def missing_required(cls, field: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_MISSING_REQUIRED,
            message=f"Missing required config field: {field}",
            details={"field": field},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class ScanError(LodestarError):
    """Discovery and catalog build errors."""

    @classmethod
    def no_readable_roots(cls, roots: list[str]) -> "ScanError":
        return cls(
            code=ErrorCode.SCAN_NO_READABLE_ROOTS,
            message=f"None of the {len(roots)} configured roots could be read",
            retryable=True,
            details={"roots": roots},
        )

    @classmethod
    def root_unreadable(cls, root: str, reason: str) -> "ScanError":
        return cls(
            code=ErrorCode.SCAN_ROOT_UNREADABLE,
            message=f"Cannot read root {root}: {reason}",
            retryable=True,
            details={"root": root, "reason": reason},
        )

    @classmethod
    def malformed(cls, location: str, reason: str) -> "ScanError":
        return cls(
            code=ErrorCode.RESOURCE_MALFORMED,
            message=f"Malformed resource at {location}: {reason}",
            details={"location": location, "reason": reason},
        )


class AssetError(LodestarError):
    """Asset (icon) loading errors."""

    @classmethod
    def load_failed(cls, resource_id: str, reason: str) -> "AssetError":
        return cls(
            code=ErrorCode.ASSET_LOAD_FAILED,
            message=f"Failed to load asset for {resource_id}: {reason}",
            retryable=True,
            details={"resource_id": resource_id, "reason": reason},
        )


class InternalError(LodestarError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
