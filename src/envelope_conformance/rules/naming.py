"""Field-naming checks for response bodies.

Object keys must be camelCase. Only the outer levels of a body are checked.
"""

import re
from typing import Any, Mapping, Optional

from envelope_conformance.models.enums import RuleId, Severity
from envelope_conformance.models.finding import Finding
from envelope_conformance.utils import join_pointer

CAMEL_CASE = re.compile(r"^[a-z][a-zA-Z0-9]*$")


def check_naming(
    body: Any,
    *,
    depth: int = 2,
    pattern: Optional[re.Pattern[str]] = None,
) -> list[Finding]:
    """Checks object keys in the top `depth` nesting levels.

    Level 1 holds the envelope's own keys. Objects found directly under a
    level-1 key, or as items of an array directly under it, hold level-2
    keys, and so on.

    Args:
        body: The decoded JSON body.
        depth: Number of object levels to inspect.
        pattern: Compiled regex keys must fully match. Defaults to camelCase.

    Returns:
        One naming-convention finding per offending key, in document order.
    """
    regex = pattern or CAMEL_CASE
    findings: list[Finding] = []
    _walk(body, "", 1, depth, regex, findings)
    return findings


def _walk(
    node: Any,
    base: str,
    level: int,
    depth: int,
    regex: re.Pattern[str],
    findings: list[Finding],
) -> None:
    if level > depth:
        return

    if isinstance(node, list):
        for index, item in enumerate(node):
            if isinstance(item, Mapping):
                _walk(item, join_pointer(base, index), level, depth, regex, findings)
        return

    if not isinstance(node, Mapping):
        return

    for key, value in node.items():
        location = join_pointer(base, key)
        if not isinstance(key, str) or not regex.fullmatch(key):
            findings.append(
                Finding(
                    path=location,
                    rule=RuleId.NAMING_CONVENTION,
                    severity=Severity.ERROR,
                    message=f"Key {key!r} does not match {regex.pattern}",
                )
            )
        _walk(value, location, level + 1, depth, regex, findings)
