from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    FETCH_FAILED = "FETCH_FAILED"
    STRUCTURE_INVALID = "STRUCTURE_INVALID"
    PARSE_EMPTY = "PARSE_EMPTY"
    ENRICHMENT_REQUEST_FAILED = "ENRICHMENT_REQUEST_FAILED"
    ENRICHMENT_EMPTY = "ENRICHMENT_EMPTY"
    PERSISTENCE_FAILED = "PERSISTENCE_FAILED"


class ReadmeHubError(Exception):
    """Base class for every expected failure of the refresh pipeline.

    Raised inside the pipeline stages and caught by the refresh orchestrator,
    which logs it and abandons the attempt. Read operations never see it.
    """

    default_code: ErrorCode = ErrorCode.FETCH_FAILED
    default_recoverable: bool = False

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode | None = None,
        recoverable: bool | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code or self.default_code
        self.message = message
        self.recoverable = self.default_recoverable if recoverable is None else recoverable


class FetchError(ReadmeHubError):
    """The upstream README could not be downloaded."""

    default_code = ErrorCode.FETCH_FAILED
    default_recoverable = True


class StructureError(ReadmeHubError):
    """A required section heading is missing from the README."""

    default_code = ErrorCode.STRUCTURE_INVALID


class ParseError(ReadmeHubError):
    """A section is present but yielded no usable entities."""

    default_code = ErrorCode.PARSE_EMPTY


class EnrichmentError(ReadmeHubError):
    """A GraphQL request failed, or a whole enrichment batch came back empty."""

    default_code = ErrorCode.ENRICHMENT_EMPTY
    default_recoverable = True


class PersistenceError(ReadmeHubError):
    """The snapshot store rejected a write or returned a malformed record."""

    default_code = ErrorCode.PERSISTENCE_FAILED
