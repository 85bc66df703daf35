"""Data model for a single conformance finding."""

from pydantic import Field

from envelope_conformance.models.base import JsonPointer, ModelBase
from envelope_conformance.models.enums import RuleId, Severity


class Finding(ModelBase):
    """One reported conformance violation.

    Attributes:
        path: JSON pointer (RFC 6901) to the offending field; "" is the root.
        rule: Identifier of the rule that was violated.
        severity: Warning (advisory) or Error (fails the run).
        message: Human-readable explanation of the violation.
    """

    path: JsonPointer = Field(
        ...,
        description='JSON pointer to the offending field; "" is the document root.',
    )
    rule: RuleId = Field(..., description="Identifier of the violated rule.")
    severity: Severity = Field(
        ..., description="Warning (advisory) or Error (fails the run)."
    )
    message: str = Field(
        default="", description="Human-readable explanation of the violation."
    )

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def render(self) -> str:
        location = self.path or "/"
        text = f"[{self.severity.value}] {self.rule.value} at {location}"
        if self.message:
            text += f": {self.message}"
        return text
