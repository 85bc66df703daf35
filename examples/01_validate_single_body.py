"""Validating single response bodies.

This example demonstrates how to:
1. Build the documented status table and a validator.
2. Validate a paginated success body, an error body and a snake_case body.
3. Look up the documented alias of a status code.
"""

from envelope_conformance.rules.status_table import StatusRuleTable
from envelope_conformance.validation.validator import EnvelopeValidator


def run_example():
    table = StatusRuleTable.default()
    validator = EnvelopeValidator(table)

    paginated = {
        "success": True,
        "code": 200,
        "data": [],
        "metadata": {
            "pagination": {
                "count": 5,
                "total": 618,
                "currentPage": 2,
                "totalPages": 124,
            }
        },
    }
    print("Paginated body findings:", validator.validate(200, paginated))

    not_found = {"success": False, "code": 200, "message": "Not Found", "errors": {}}
    for finding in validator.validate(404, not_found):
        print(finding.render())

    snake = {"success": True, "code": 200, "data": {"owner_id": 3}}
    for finding in validator.validate(200, snake):
        print(finding.render())

    rule = table.lookup(404)
    print(f"{rule.code} -> {rule.alias} ({rule.category.value})")


if __name__ == "__main__":
    run_example()
