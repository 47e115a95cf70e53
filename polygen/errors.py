"""Error taxonomy shared by every compilation stage."""

from __future__ import annotations

from enum import Enum
from typing import List, Sequence


class ErrorKind(str, Enum):
    """Stable identifiers recorded in results and reports."""

    SPEC_INVALID = "SpecInvalid"
    SCHEMA_VERSION_UNSUPPORTED = "SchemaVersionUnsupported"
    TEMPLATE_MISSING = "TemplateMissing"
    TARGET_TIMEOUT = "TargetTimeout"
    RUN_TIMEOUT = "RunTimeout"
    RUN_CANCELLED = "RunCancelled"
    TARGET_NOT_FOUND = "TargetNotFound"
    TRANSIENT_FAILURE = "TransientFailure"
    GENERATION_ERROR = "GenerationError"
    CONFIG_ERROR = "ConfigError"


class PolygenError(RuntimeError):
    """Base class for polygen failures."""

    kind: ErrorKind = ErrorKind.GENERATION_ERROR


class SpecInvalid(PolygenError):
    """Raised when a specification is structurally invalid."""

    kind = ErrorKind.SPEC_INVALID

    def __init__(self, message: str, problems: Sequence[str] | None = None) -> None:
        super().__init__(message)
        self.problems: List[str] = list(problems or [])


class SchemaVersionUnsupported(PolygenError):
    """Raised before any work starts when the schema version is unknown."""

    kind = ErrorKind.SCHEMA_VERSION_UNSUPPORTED

    def __init__(self, version: object, supported: Sequence[str]) -> None:
        supported_text = ", ".join(supported)
        super().__init__(
            f"Specification schema version {version!r} is not supported (supported: {supported_text})"
        )
        self.version = version
        self.supported = tuple(supported)


class TargetNotFound(PolygenError, LookupError):
    """Raised when a target id is not registered in the catalog."""

    kind = ErrorKind.TARGET_NOT_FOUND

    def __init__(self, target_id: str) -> None:
        super().__init__(f"Unknown compilation target '{target_id}'")
        self.target_id = target_id


class TransientGenerationError(PolygenError):
    """A per-target failure that may succeed when retried (e.g. template source unavailable)."""

    kind = ErrorKind.TRANSIENT_FAILURE


class TargetTimeout(PolygenError):
    """A single target exceeded its time budget."""

    kind = ErrorKind.TARGET_TIMEOUT


class RunTimeout(PolygenError):
    """The whole run exceeded its wall-clock budget."""

    kind = ErrorKind.RUN_TIMEOUT


class RunCancelled(PolygenError):
    """The run was cancelled by its caller."""

    kind = ErrorKind.RUN_CANCELLED


class ConfigError(PolygenError):
    """Raised when the configuration file cannot be parsed."""

    kind = ErrorKind.CONFIG_ERROR


__all__ = [
    "ConfigError",
    "ErrorKind",
    "PolygenError",
    "RunCancelled",
    "RunTimeout",
    "SchemaVersionUnsupported",
    "SpecInvalid",
    "TargetNotFound",
    "TargetTimeout",
    "TransientGenerationError",
]
