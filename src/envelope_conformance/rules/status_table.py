"""The documented status-code table.

Maps each HTTP status code the style guide documents to its alias and
category. The table is built once and handed to the validator explicitly.
"""

from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional

from envelope_conformance.errors import UnknownStatusCode
from envelope_conformance.models.enums import StatusCategory
from envelope_conformance.models.status_rule import StatusRule

_DOCUMENTED_STATUSES: tuple[tuple[int, str, StatusCategory], ...] = (
    (200, "OK", StatusCategory.SUCCESS),
    (201, "Created", StatusCategory.SUCCESS),
    (204, "No Content", StatusCategory.SUCCESS),
    (304, "Not Modified", StatusCategory.SUCCESS),
    (400, "Bad Request", StatusCategory.CLIENT_ERROR),
    (401, "Unauthorized", StatusCategory.CLIENT_ERROR),
    (403, "Forbidden", StatusCategory.CLIENT_ERROR),
    (404, "Not Found", StatusCategory.CLIENT_ERROR),
    (405, "Method Not Allowed", StatusCategory.CLIENT_ERROR),
    (408, "Request Timeout", StatusCategory.CLIENT_ERROR),
    (410, "Gone", StatusCategory.CLIENT_ERROR),
    (422, "Unprocessable Entity", StatusCategory.CLIENT_ERROR),
    (429, "Too Many Requests", StatusCategory.CLIENT_ERROR),
    (500, "Internal Server Error", StatusCategory.SERVER_ERROR),
)


def category_for(code: int) -> StatusCategory:
    """Derives the coarse category of any status code from its class.

    Args:
        code: An HTTP status code.

    Returns:
        SERVER_ERROR for 5xx, CLIENT_ERROR for 4xx, SUCCESS otherwise.
    """
    if code >= 500:
        return StatusCategory.SERVER_ERROR
    if code >= 400:
        return StatusCategory.CLIENT_ERROR
    return StatusCategory.SUCCESS


class StatusRuleTable:
    """Immutable lookup of documented status codes."""

    def __init__(self, rules: Iterable[StatusRule]):
        """Initializes the table.

        Args:
            rules: The rules to index. Codes must be unique.

        Raises:
            ValueError: If two rules share a status code.
        """
        index: dict[int, StatusRule] = {}
        for rule in rules:
            if rule.code in index:
                raise ValueError(f"Duplicate status code in rule table: {rule.code}")
            index[rule.code] = rule
        self._rules: Mapping[int, StatusRule] = MappingProxyType(index)

    @classmethod
    def default(cls) -> "StatusRuleTable":
        """Builds the table of the 14 documented status codes."""
        return cls(
            StatusRule(code=code, alias=alias, category=category)
            for code, alias, category in _DOCUMENTED_STATUSES
        )

    @property
    def rules(self) -> Mapping[int, StatusRule]:
        """Read-only view of the table keyed by status code."""
        return self._rules

    def lookup(self, code: int) -> StatusRule:
        """Retrieves the documented rule for a status code.

        Args:
            code: The HTTP status code.

        Returns:
            The matching StatusRule.

        Raises:
            UnknownStatusCode: If the code is not documented.
        """
        try:
            return self._rules[code]
        except KeyError:
            raise UnknownStatusCode(code) from None

    def get(self, code: int) -> Optional[StatusRule]:
        return self._rules.get(code)

    def __contains__(self, code: object) -> bool:
        return code in self._rules

    def __iter__(self) -> Iterator[StatusRule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)
