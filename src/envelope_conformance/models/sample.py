"""Data models for response samples and their check results.

A sample is one HTTP response to check: either a documented example loaded
from a collection file or a response fetched from a live endpoint.
"""

from typing import Any, Optional

from pydantic import Field

from envelope_conformance.models.base import ModelBase
from envelope_conformance.models.enums import ShapeKind
from envelope_conformance.models.finding import Finding


class ResponseSample(ModelBase):
    """A decoded HTTP response together with where it came from.

    Attributes:
        name: Label used in reports (e.g., 'List users').
        method: HTTP method of the originating request.
        path: Request path (e.g., '/v1/users'); may be empty.
        status: HTTP status code the body was served with.
        body: The decoded JSON body.
        data_schema: Optional JSON Schema the `data` payload must satisfy.
        load_findings: Findings raised while obtaining the sample
            (e.g., an undecodable body), reported ahead of validation.
    """

    name: str = Field(..., min_length=1, description="Label used in reports.")
    method: str = Field(
        default="GET", description="HTTP method of the originating request."
    )
    path: str = Field(default="", description="Request path, e.g. '/v1/users'.")
    status: int = Field(
        ..., ge=100, le=599, description="HTTP status the body was served with."
    )
    body: Any = Field(default=None, description="The decoded JSON body.")
    data_schema: Optional[dict[str, Any]] = Field(
        default=None,
        description="Optional JSON Schema the `data` payload must satisfy.",
    )
    load_findings: tuple[Finding, ...] = Field(
        default=(),
        description="Findings raised while obtaining the sample.",
    )

    @property
    def label(self) -> str:
        if self.path:
            return f"{self.name} ({self.method.upper()} {self.path})"
        return self.name


class SampleResult(ModelBase):
    """The outcome of checking one sample.

    Attributes:
        name: The sample's label.
        method: HTTP method of the originating request.
        path: Request path of the originating request.
        status: HTTP status the body was served with.
        shape: The envelope variant the body was classified as.
        findings: Findings in discovery order.
    """

    name: str
    method: str = "GET"
    path: str = ""
    status: int
    shape: ShapeKind
    findings: tuple[Finding, ...] = Field(default=())

    @property
    def errors(self) -> list[Finding]:
        return [f for f in self.findings if f.is_error]

    @property
    def warnings(self) -> list[Finding]:
        return [f for f in self.findings if not f.is_error]

    @property
    def passed(self) -> bool:
        return not self.errors
