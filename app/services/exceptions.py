"""Domain-specific exceptions."""

from __future__ import annotations

from enum import Enum
from typing import Sequence


class ServiceError(Exception):
    pass


class ExtractionFailure(str, Enum):
    MARKER_NOT_FOUND = "marker_not_found"
    TERMINATOR_NOT_FOUND = "terminator_not_found"
    INVALID_JSON = "invalid_json"


class ExtractionError(ServiceError):
    """Embedded JSON could not be pulled out of an HTML document."""

    def __init__(self, reason: ExtractionFailure, message: str | None = None) -> None:
        self.reason = reason
        super().__init__(message or reason.value)


class ProviderErrorKind(str, Enum):
    HTTP_STATUS = "http_status"
    SCHEMA_MISMATCH = "schema_mismatch"
    TIMEOUT = "timeout"
    NETWORK_FAILURE = "network_failure"


class ProviderError(ServiceError):
    """A single provider round trip failed.

    ``detail`` holds the status code for ``HTTP_STATUS`` and the dotted path of
    the missing or malformed field for ``SCHEMA_MISMATCH``.
    """

    def __init__(
        self,
        provider: str,
        kind: ProviderErrorKind,
        detail: str | int | None = None,
    ) -> None:
        self.provider = provider
        self.kind = kind
        self.detail = detail
        suffix = f" ({detail})" if detail not in (None, "") else ""
        super().__init__(f"{provider}: {kind.value}{suffix}")


class AggregationFailure(str, Enum):
    ALL_PROVIDERS_FAILED = "all_providers_failed"


class AggregationError(ServiceError):
    def __init__(
        self,
        reason: AggregationFailure = AggregationFailure.ALL_PROVIDERS_FAILED,
        failures: Sequence[BaseException] = (),
    ) -> None:
        self.reason = reason
        self.failures = list(failures)
        super().__init__(f"{reason.value}: {len(self.failures)} provider(s) failed")


class CacheProductionError(ServiceError):
    """Wraps whatever a cache producer raised while computing ``key``."""

    def __init__(self, key: str, cause: BaseException) -> None:
        self.key = key
        self.cause = cause
        super().__init__(f"producer for {key!r} failed: {cause}")


__all__ = [
    "AggregationError",
    "AggregationFailure",
    "CacheProductionError",
    "ExtractionError",
    "ExtractionFailure",
    "ProviderError",
    "ProviderErrorKind",
    "ServiceError",
]
