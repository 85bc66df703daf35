"""The envelope validator.

Checks a decoded response body, together with the HTTP status it was served
with, against the documented envelope conventions. Validation is a pure
function of its inputs: no I/O, no shared state, every violation collected
in one pass.
"""

import re
from typing import Any, Mapping, Optional

from jsonschema.validators import validator_for

from envelope_conformance.config import CheckerSettings
from envelope_conformance.errors import UnknownStatusCode
from envelope_conformance.models.enums import (
    RuleId,
    Severity,
    ShapeKind,
    StatusCategory,
)
from envelope_conformance.models.finding import Finding
from envelope_conformance.rules.naming import CAMEL_CASE, check_naming
from envelope_conformance.rules.status_table import StatusRuleTable, category_for
from envelope_conformance.utils import join_pointer
from envelope_conformance.validation.shapes import (
    SHAPE_CHECKS,
    TYPE_CHECKER,
    discriminate,
)

# Responses that carry no body by definition
NO_BODY_STATUSES = frozenset({204, 304})

_SUCCESS_SHAPES = frozenset(
    {
        ShapeKind.SUCCESS,
        ShapeKind.PAGINATED,
        ShapeKind.BARE,
        ShapeKind.BARE_PAGINATED,
    }
)


class EnvelopeValidator:
    """Validates response bodies against the envelope conventions.

    Findings are returned in discovery order: discriminator, required
    fields, status cross-checks, naming, then the optional data schema.
    """

    def __init__(
        self,
        table: Optional[StatusRuleTable] = None,
        *,
        allow_bare_envelope: bool = False,
        naming_depth: int = 2,
        naming_pattern: Optional[re.Pattern[str]] = None,
    ):
        """Initializes the validator.

        Args:
            table: Status rule table used for cross-checks. Defaults to the
                documented 14-entry table.
            allow_bare_envelope: Accept `{data, metadata}` bodies without
                `success`/`code`.
            naming_depth: Number of object levels checked for camelCase keys.
            naming_pattern: Regex keys must fully match.
        """
        self.table = StatusRuleTable.default() if table is None else table
        self.allow_bare_envelope = allow_bare_envelope
        self.naming_depth = naming_depth
        self.naming_pattern = naming_pattern or CAMEL_CASE

    @classmethod
    def from_settings(
        cls, settings: CheckerSettings, table: Optional[StatusRuleTable] = None
    ) -> "EnvelopeValidator":
        return cls(
            table,
            allow_bare_envelope=settings.allow_bare_envelope,
            naming_depth=settings.naming_depth,
            naming_pattern=re.compile(settings.naming_pattern),
        )

    def classify(self, body: Any, http_status: Optional[int] = None) -> ShapeKind:
        if body is None and http_status in NO_BODY_STATUSES:
            return ShapeKind.EMPTY
        return discriminate(body, allow_bare=self.allow_bare_envelope)

    def validate(
        self,
        http_status: int,
        body: Any,
        data_schema: Optional[Mapping[str, Any]] = None,
    ) -> list[Finding]:
        """Validates one response.

        Args:
            http_status: The HTTP status code the body was served with.
            body: The decoded JSON body.
            data_schema: Optional JSON Schema for the `data` payload.

        Returns:
            Every finding, in discovery order. Empty when the response
            conforms.
        """
        return self.inspect(http_status, body, data_schema)[1]

    def inspect(
        self,
        http_status: int,
        body: Any,
        data_schema: Optional[Mapping[str, Any]] = None,
    ) -> tuple[ShapeKind, list[Finding]]:
        """Like validate(), but also returns the resolved envelope shape."""
        shape = self.classify(body, http_status)
        if shape == ShapeKind.EMPTY:
            return shape, []

        findings = list(SHAPE_CHECKS[shape](body))
        findings.extend(self._check_status(http_status, body, shape))
        findings.extend(
            check_naming(body, depth=self.naming_depth, pattern=self.naming_pattern)
        )
        if data_schema is not None and shape != ShapeKind.INDETERMINATE:
            findings.extend(self._check_data_schema(body, data_schema))
        return shape, findings

    def _check_status(
        self, http_status: int, body: Any, shape: ShapeKind
    ) -> list[Finding]:
        findings: list[Finding] = []

        try:
            rule = self.table.lookup(http_status)
        except UnknownStatusCode as e:
            rule = None
            findings.append(
                Finding(
                    path="",
                    rule=RuleId.UNKNOWN_STATUS_CODE,
                    severity=Severity.WARNING,
                    message=str(e),
                )
            )

        code = body.get("code") if isinstance(body, Mapping) else None
        if TYPE_CHECKER.is_type(code, "integer") and code != http_status:
            expected = f"{http_status} ({rule.alias})" if rule else str(http_status)
            findings.append(
                Finding(
                    path="/code",
                    rule=RuleId.CODE_MISMATCH,
                    severity=Severity.WARNING,
                    message=f"Body code {code} differs from HTTP status {expected}",
                )
            )

        category = rule.category if rule else category_for(http_status)
        if shape in _SUCCESS_SHAPES and category != StatusCategory.SUCCESS:
            findings.append(
                Finding(
                    path="/success" if shape in (ShapeKind.SUCCESS, ShapeKind.PAGINATED) else "",
                    rule=RuleId.STATUS_CATEGORY_MISMATCH,
                    severity=Severity.WARNING,
                    message=f"Success envelope served with error status {http_status}",
                )
            )
        elif shape == ShapeKind.ERROR and category == StatusCategory.SUCCESS:
            findings.append(
                Finding(
                    path="/success",
                    rule=RuleId.STATUS_CATEGORY_MISMATCH,
                    severity=Severity.WARNING,
                    message=f"Error envelope served with success status {http_status}",
                )
            )

        return findings

    def _check_data_schema(
        self, body: Mapping[str, Any], schema: Mapping[str, Any]
    ) -> list[Finding]:
        if "data" not in body:
            return []
        validator = validator_for(schema)(schema)
        return [
            Finding(
                path=join_pointer("/data", *error.absolute_path),
                rule=RuleId.DATA_SCHEMA,
                severity=Severity.ERROR,
                message=error.message,
            )
            for error in validator.iter_errors(body["data"])
        ]
