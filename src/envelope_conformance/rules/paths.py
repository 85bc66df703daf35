"""Resource-path conventions for endpoint URLs.

Literal path segments are lowercase kebab-case nouns, parameters are
written as `{id}` or `:id`, and paths carry no trailing slash. Versioned
APIs put the version (`v1`, `v2`, ...) in the first segment.
"""

import re
from urllib.parse import urlsplit

from envelope_conformance.models.enums import RuleId, Severity
from envelope_conformance.models.finding import Finding

_KEBAB_SEGMENT = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")
_PARAM_SEGMENT = re.compile(r"^(\{[A-Za-z_][A-Za-z0-9_]*\}|:[A-Za-z_][A-Za-z0-9_]*)$")
_VERSION_SEGMENT = re.compile(r"^v[0-9]+$")
_POSTMAN_VARIABLE = re.compile(r"^\{\{[^}]+\}\}$")


def check_path(path: str, *, version_prefix_required: bool = False) -> list[Finding]:
    """Checks an endpoint path against the naming conventions.

    Args:
        path: A request path or full URL. Query string and fragment are
            ignored.
        version_prefix_required: Whether the first segment must be `v<N>`.

    Returns:
        Warning findings; path rules are advisory.
    """
    if not path:
        return []

    route = urlsplit(path).path if "://" in path else path.split("?", 1)[0]
    route = route.split("#", 1)[0]
    segments = [s for s in route.split("/") if s]
    # Postman keeps the host variable in the path, e.g. {{baseUrl}}/v1/users.
    if segments and _POSTMAN_VARIABLE.match(segments[0]):
        segments = segments[1:]

    findings: list[Finding] = []

    if version_prefix_required and (
        not segments or not _VERSION_SEGMENT.match(segments[0])
    ):
        findings.append(
            Finding(
                path="",
                rule=RuleId.VERSION_PREFIX,
                severity=Severity.WARNING,
                message=f"Path {route!r} does not start with a version segment (e.g. /v1)",
            )
        )

    for segment in segments:
        if _PARAM_SEGMENT.match(segment) or _POSTMAN_VARIABLE.match(segment):
            continue
        if not _KEBAB_SEGMENT.match(segment):
            findings.append(
                Finding(
                    path="",
                    rule=RuleId.PATH_CONVENTION,
                    severity=Severity.WARNING,
                    message=f"Segment {segment!r} of {route!r} is not lowercase kebab-case",
                )
            )

    if len(route) > 1 and route.endswith("/"):
        findings.append(
            Finding(
                path="",
                rule=RuleId.PATH_CONVENTION,
                severity=Severity.WARNING,
                message=f"Path {route!r} has a trailing slash",
            )
        )

    return findings
