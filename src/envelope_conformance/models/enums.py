"""Enumeration definitions for envelope conformance checking.

This module contains the closed sets used across the checker: finding
severities, status-code categories, envelope shapes and rule identifiers.
"""

from enum import Enum


class Severity(str, Enum):
    """Defines how serious a finding is.

    Attributes:
        WARNING: Advisory only; never fails a run.
        ERROR: A conformance violation; any error fails the run.
    """

    WARNING = "warning"
    ERROR = "error"


class StatusCategory(str, Enum):
    """Defines the coarse category of an HTTP status code.

    Attributes:
        SUCCESS: 2xx and 3xx responses.
        CLIENT_ERROR: 4xx responses.
        SERVER_ERROR: 5xx responses.
    """

    SUCCESS = "success"
    CLIENT_ERROR = "client_error"
    SERVER_ERROR = "server_error"


class ShapeKind(str, Enum):
    """Defines the envelope variant a response body was classified as.

    Attributes:
        SUCCESS: `{success: true, code, data}`.
        PAGINATED: A success envelope carrying `metadata.pagination`.
        ERROR: `{success: false, code, message, errors}`.
        BARE: `{data, metadata?}` without the `success`/`code` pair.
        BARE_PAGINATED: A bare envelope carrying `metadata.pagination`.
        INDETERMINATE: No usable `success` discriminator was found.
        EMPTY: No body, as expected for 204 and 304 responses.
    """

    SUCCESS = "success"
    PAGINATED = "paginated"
    ERROR = "error"
    BARE = "bare"
    BARE_PAGINATED = "bare_paginated"
    INDETERMINATE = "indeterminate"
    EMPTY = "empty"


class RuleId(str, Enum):
    """Identifiers of the rules a finding can report as violated."""

    MISSING_DISCRIMINATOR = "missing success discriminator"
    MISSING_FIELD = "missing-field"
    TYPE_MISMATCH = "type-mismatch"
    CODE_MISMATCH = "code-mismatch"
    UNKNOWN_STATUS_CODE = "unknown-status-code"
    STATUS_CATEGORY_MISMATCH = "status-category-mismatch"
    NAMING_CONVENTION = "naming-convention"
    DATA_SCHEMA = "data-schema"
    PATH_CONVENTION = "path-convention"
    VERSION_PREFIX = "version-prefix"
    INVALID_JSON = "invalid-json"
    REQUEST_FAILED = "request-failed"


class OutputFormat(str, Enum):
    """Report renderings offered by the CLI."""

    TEXT = "text"
    MARKDOWN = "markdown"
    JSON = "json"
