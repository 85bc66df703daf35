"""Envelope shapes and their required fields.

Every response body is classified into exactly one ShapeKind by a single
discriminator step, then checked by the function registered for that kind.
Field types use JSON Schema semantics (via jsonschema's type checker), so a
boolean never passes as an integer.
"""

from dataclasses import dataclass
from typing import Any, Callable, Mapping

from jsonschema import Draft202012Validator

from envelope_conformance.models.enums import RuleId, Severity, ShapeKind
from envelope_conformance.models.finding import Finding
from envelope_conformance.utils import MISSING, pointer, resolve

TYPE_CHECKER = Draft202012Validator.TYPE_CHECKER

PAGINATION_TOKENS = ("metadata", "pagination")


@dataclass(frozen=True)
class FieldSpec:
    """A required field and the JSON types it may hold.

    Attributes:
        tokens: Keys leading to the field from the envelope root.
        types: Accepted JSON Schema type names; empty accepts any value.
    """

    tokens: tuple[str, ...]
    types: tuple[str, ...] = ()

    @property
    def path(self) -> str:
        return pointer(self.tokens)

    def accepts(self, value: Any) -> bool:
        if not self.types:
            return True
        return any(TYPE_CHECKER.is_type(value, t) for t in self.types)


_SUCCESS_FIELDS = (
    FieldSpec(("success",), ("boolean",)),
    FieldSpec(("code",), ("integer",)),
    FieldSpec(("data",)),
)

_PAGINATION_FIELDS = (
    FieldSpec(("metadata",), ("object",)),
    FieldSpec(PAGINATION_TOKENS, ("object",)),
    FieldSpec(PAGINATION_TOKENS + ("count",), ("integer",)),
    FieldSpec(PAGINATION_TOKENS + ("total",), ("integer",)),
    FieldSpec(PAGINATION_TOKENS + ("currentPage",), ("integer",)),
    FieldSpec(PAGINATION_TOKENS + ("totalPages",), ("integer",)),
)

_ERROR_FIELDS = (
    FieldSpec(("success",), ("boolean",)),
    FieldSpec(("code",), ("integer",)),
    FieldSpec(("message",), ("string",)),
    FieldSpec(("errors",), ("object", "array")),
)

_BARE_FIELDS = (FieldSpec(("data",)),)

REQUIRED_FIELDS: Mapping[ShapeKind, tuple[FieldSpec, ...]] = {
    ShapeKind.SUCCESS: _SUCCESS_FIELDS,
    ShapeKind.PAGINATED: _SUCCESS_FIELDS + _PAGINATION_FIELDS,
    ShapeKind.ERROR: _ERROR_FIELDS,
    ShapeKind.BARE: _BARE_FIELDS,
    ShapeKind.BARE_PAGINATED: _BARE_FIELDS + _PAGINATION_FIELDS,
    ShapeKind.INDETERMINATE: (),
    ShapeKind.EMPTY: (),
}


def has_pagination(body: Mapping[str, Any]) -> bool:
    return resolve(body, PAGINATION_TOKENS) is not MISSING


def discriminate(body: Any, *, allow_bare: bool = False) -> ShapeKind:
    """Decides which envelope variant a body represents.

    Args:
        body: The decoded JSON body.
        allow_bare: Whether `{data, metadata}` bodies without a `success`
            discriminator are an accepted variant.

    Returns:
        The resolved ShapeKind; INDETERMINATE when `success` is absent or
        not a boolean and the bare variant does not apply.
    """
    if not isinstance(body, Mapping):
        return ShapeKind.INDETERMINATE

    success = body.get("success", MISSING)
    if success is True:
        return ShapeKind.PAGINATED if has_pagination(body) else ShapeKind.SUCCESS
    if success is False:
        return ShapeKind.ERROR
    if allow_bare and success is MISSING and "data" in body:
        return ShapeKind.BARE_PAGINATED if has_pagination(body) else ShapeKind.BARE
    return ShapeKind.INDETERMINATE


def check_fields(body: Mapping[str, Any], specs: tuple[FieldSpec, ...]) -> list[Finding]:
    """Checks presence and type of each required field, in order.

    A field whose parent is missing or mistyped is skipped, so one broken
    object yields a single finding rather than one per child.
    """
    findings: list[Finding] = []
    broken: list[tuple[str, ...]] = []
    for spec in specs:
        if any(spec.tokens[: len(b)] == b for b in broken):
            continue
        value = resolve(body, spec.tokens)
        if value is MISSING:
            broken.append(spec.tokens)
            findings.append(
                Finding(
                    path=spec.path,
                    rule=RuleId.MISSING_FIELD,
                    severity=Severity.ERROR,
                    message=f"Required field {spec.path!r} is missing",
                )
            )
        elif not spec.accepts(value):
            broken.append(spec.tokens)
            findings.append(
                Finding(
                    path=spec.path,
                    rule=RuleId.TYPE_MISMATCH,
                    severity=Severity.ERROR,
                    message=(
                        f"Field {spec.path!r} must be {' or '.join(spec.types)}, "
                        f"got {_json_type_name(value)}"
                    ),
                )
            )
    return findings


def check_success(body: Mapping[str, Any]) -> list[Finding]:
    return check_fields(body, REQUIRED_FIELDS[ShapeKind.SUCCESS])


def check_paginated(body: Mapping[str, Any]) -> list[Finding]:
    return check_fields(body, REQUIRED_FIELDS[ShapeKind.PAGINATED])


def check_error(body: Mapping[str, Any]) -> list[Finding]:
    return check_fields(body, REQUIRED_FIELDS[ShapeKind.ERROR])


def check_bare(body: Mapping[str, Any]) -> list[Finding]:
    return check_fields(body, REQUIRED_FIELDS[ShapeKind.BARE])


def check_bare_paginated(body: Mapping[str, Any]) -> list[Finding]:
    return check_fields(body, REQUIRED_FIELDS[ShapeKind.BARE_PAGINATED])


def check_indeterminate(body: Any) -> list[Finding]:
    """Reports the missing discriminator; nothing else can be checked reliably."""
    if not isinstance(body, Mapping):
        return [
            Finding(
                path="",
                rule=RuleId.MISSING_DISCRIMINATOR,
                severity=Severity.ERROR,
                message=f"Response body must be a JSON object, got {_json_type_name(body)}",
            )
        ]
    if "success" in body:
        message = (
            f"Field 'success' must be a boolean, got {_json_type_name(body['success'])}"
        )
    else:
        message = "Field 'success' is missing; the envelope shape cannot be determined"
    return [
        Finding(
            path="/success",
            rule=RuleId.MISSING_DISCRIMINATOR,
            severity=Severity.ERROR,
            message=message,
        )
    ]


def check_empty(body: Any) -> list[Finding]:
    return []


SHAPE_CHECKS: Mapping[ShapeKind, Callable[[Any], list[Finding]]] = {
    ShapeKind.SUCCESS: check_success,
    ShapeKind.PAGINATED: check_paginated,
    ShapeKind.ERROR: check_error,
    ShapeKind.BARE: check_bare,
    ShapeKind.BARE_PAGINATED: check_bare_paginated,
    ShapeKind.INDETERMINATE: check_indeterminate,
    ShapeKind.EMPTY: check_empty,
}


def _json_type_name(value: Any) -> str:
    for name in ("null", "boolean", "integer", "number", "string", "array", "object"):
        if TYPE_CHECKER.is_type(value, name):
            return name
    return type(value).__name__
