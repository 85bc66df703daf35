"""Data model for entries of the status-code rule table."""

from pydantic import Field

from envelope_conformance.models.base import ModelBase
from envelope_conformance.models.enums import StatusCategory


class StatusRule(ModelBase):
    """A documented HTTP status code with its alias and category.

    Attributes:
        code: The HTTP status code.
        alias: Human-readable name of the status (e.g., 'Not Found').
        category: Whether the status signals success, a client or a server error.
    """

    code: int = Field(..., ge=100, le=599, description="The HTTP status code.")
    alias: str = Field(
        ...,
        min_length=1,
        description="Human-readable name of the status (e.g., 'Not Found').",
    )
    category: StatusCategory = Field(
        ...,
        description="Whether the status signals success, a client or a server error.",
    )

    @property
    def is_error(self) -> bool:
        return self.category != StatusCategory.SUCCESS
