"""Data model for the aggregated result of a conformance run."""

from pydantic import Field

from envelope_conformance.models.base import ModelBase


class ConformanceSummary(ModelBase):
    """Totals over every sample checked in one run.

    Attributes:
        checked: Number of samples checked.
        passed: Samples with no Error findings.
        failed: Samples with at least one Error finding.
        errors: Total Error findings.
        warnings: Total Warning findings.
        by_rule: Finding counts keyed by rule identifier.
        exit_code: 0 when no Error was found, 1 otherwise.
    """

    checked: int = Field(default=0, ge=0)
    passed: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    errors: int = Field(default=0, ge=0)
    warnings: int = Field(default=0, ge=0)
    by_rule: dict[str, int] = Field(
        default_factory=dict,
        description="Finding counts keyed by rule identifier.",
    )
    exit_code: int = Field(
        default=0, description="0 when no Error was found, 1 otherwise."
    )

    @property
    def ok(self) -> bool:
        return self.exit_code == 0
