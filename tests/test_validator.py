import re

import pytest

from envelope_conformance.models.enums import RuleId, Severity, ShapeKind
from envelope_conformance.rules.status_table import StatusRuleTable
from envelope_conformance.validation.validator import EnvelopeValidator

PAGINATED_BODY = {
    "success": True,
    "code": 200,
    "data": [],
    "metadata": {
        "pagination": {"count": 5, "total": 618, "currentPage": 2, "totalPages": 124}
    },
}


@pytest.fixture
def validator():
    return EnvelopeValidator(StatusRuleTable.default())


def rules_of(findings):
    return [f.rule for f in findings]


class TestDocumentedShapes:
    def test_exact_success_body_has_no_findings(self, validator):
        body = {"success": True, "code": 200, "data": {"id": 1, "ownerId": 3}}
        assert validator.validate(200, body) == []

    def test_created_success_body(self, validator):
        body = {"success": True, "code": 201, "data": {"id": 9}}
        assert validator.validate(201, body) == []

    def test_pagination_example_has_no_findings(self, validator):
        assert validator.validate(200, PAGINATED_BODY) == []
        assert validator.classify(PAGINATED_BODY) == ShapeKind.PAGINATED

    def test_not_found_error_body_has_no_findings(self, validator):
        body = {"success": False, "code": 404, "message": "Not Found", "errors": {}}
        assert validator.validate(404, body) == []

    def test_errors_may_be_a_list(self, validator):
        body = {"success": False, "code": 429, "message": "Slow down", "errors": []}
        assert validator.validate(429, body) == []

    def test_no_content_without_body(self, validator):
        shape, findings = validator.inspect(204, None)
        assert shape == ShapeKind.EMPTY
        assert findings == []


class TestRequiredFields:
    def test_error_without_message_yields_one_missing_field(self, validator):
        body = {"success": False, "code": 400, "errors": {"email": "required"}}
        findings = validator.validate(400, body)
        assert len(findings) == 1
        assert findings[0].rule == RuleId.MISSING_FIELD
        assert findings[0].path == "/message"
        assert findings[0].severity == Severity.ERROR

    def test_success_without_data(self, validator):
        findings = validator.validate(200, {"success": True, "code": 200})
        assert [(f.rule, f.path) for f in findings] == [(RuleId.MISSING_FIELD, "/data")]

    def test_null_data_counts_as_present(self, validator):
        assert validator.validate(200, {"success": True, "code": 200, "data": None}) == []

    def test_code_as_string_is_a_type_mismatch(self, validator):
        findings = validator.validate(200, {"success": True, "code": "200", "data": {}})
        assert len(findings) == 1
        assert findings[0].rule == RuleId.TYPE_MISMATCH
        assert findings[0].path == "/code"
        assert "integer" in findings[0].message

    def test_boolean_is_not_an_integer(self, validator):
        findings = validator.validate(200, {"success": True, "code": True, "data": {}})
        assert rules_of(findings) == [RuleId.TYPE_MISMATCH]

    def test_errors_must_be_object_or_array(self, validator):
        body = {"success": False, "code": 400, "message": "Bad", "errors": "oops"}
        findings = validator.validate(400, body)
        assert [(f.rule, f.path) for f in findings] == [(RuleId.TYPE_MISMATCH, "/errors")]

    def test_pagination_fields_checked_in_order(self, validator):
        body = {
            "success": True,
            "code": 200,
            "data": [],
            "metadata": {"pagination": {"count": 5, "total": 618, "currentPage": "2"}},
        }
        findings = validator.validate(200, body)
        assert [(f.rule, f.path) for f in findings] == [
            (RuleId.TYPE_MISMATCH, "/metadata/pagination/currentPage"),
            (RuleId.MISSING_FIELD, "/metadata/pagination/totalPages"),
        ]

    def test_mistyped_pagination_hides_its_children(self, validator):
        body = {"success": True, "code": 200, "data": [], "metadata": {"pagination": []}}
        findings = validator.validate(200, body)
        assert [(f.rule, f.path) for f in findings] == [
            (RuleId.TYPE_MISMATCH, "/metadata/pagination")
        ]

    def test_every_violation_is_collected(self, validator):
        body = {"success": False, "code": 404}
        findings = validator.validate(404, body)
        assert [f.path for f in findings] == ["/message", "/errors"]


class TestDiscriminator:
    def test_missing_success_is_an_error(self, validator):
        findings = validator.validate(200, {"code": 200, "data": {}})
        assert len(findings) == 1
        assert findings[0].rule == RuleId.MISSING_DISCRIMINATOR
        assert findings[0].rule.value == "missing success discriminator"
        assert findings[0].severity == Severity.ERROR
        assert findings[0].path == "/success"

    def test_non_boolean_success_is_indeterminate(self, validator):
        body = {"success": "yes", "code": 200, "data": 1}
        assert validator.classify(body) == ShapeKind.INDETERMINATE
        findings = validator.validate(200, body)
        assert rules_of(findings) == [RuleId.MISSING_DISCRIMINATOR]
        assert "boolean" in findings[0].message

    def test_naming_still_checked_when_indeterminate(self, validator):
        findings = validator.validate(200, {"Data": {}, "code": 200})
        assert rules_of(findings) == [RuleId.MISSING_DISCRIMINATOR, RuleId.NAMING_CONVENTION]
        assert findings[1].path == "/Data"

    def test_non_object_body(self, validator):
        findings = validator.validate(200, [1, 2, 3])
        assert len(findings) == 1
        assert findings[0].rule == RuleId.MISSING_DISCRIMINATOR
        assert findings[0].path == ""

    def test_empty_body_with_content_status(self, validator):
        shape, findings = validator.inspect(200, None)
        assert shape == ShapeKind.INDETERMINATE
        assert rules_of(findings) == [RuleId.MISSING_DISCRIMINATOR]


class TestStatusCrossChecks:
    def test_code_mismatch_is_a_single_warning(self, validator):
        body = {"success": False, "code": 200, "message": "Not Found", "errors": {}}
        findings = validator.validate(404, body)
        assert len(findings) == 1
        assert findings[0].rule == RuleId.CODE_MISMATCH
        assert findings[0].severity == Severity.WARNING
        assert findings[0].path == "/code"
        assert "Not Found" in findings[0].message

    def test_unknown_status_is_a_warning(self, validator):
        body = {"success": False, "code": 418, "message": "Teapot", "errors": []}
        findings = validator.validate(418, body)
        assert rules_of(findings) == [RuleId.UNKNOWN_STATUS_CODE]
        assert findings[0].severity == Severity.WARNING

    def test_success_envelope_with_error_status(self, validator):
        findings = validator.validate(500, {"success": True, "code": 500, "data": None})
        assert rules_of(findings) == [RuleId.STATUS_CATEGORY_MISMATCH]
        assert findings[0].severity == Severity.WARNING

    def test_error_envelope_with_success_status(self, validator):
        body = {"success": False, "code": 200, "message": "x", "errors": {}}
        findings = validator.validate(200, body)
        assert rules_of(findings) == [RuleId.STATUS_CATEGORY_MISMATCH]

    @pytest.mark.parametrize("status", [200, 404, 500])
    def test_empty_table_is_used_as_given(self, status):
        validator = EnvelopeValidator(StatusRuleTable([]))
        assert len(validator.table) == 0
        body = {"success": True, "code": status, "data": {"id": 1}}
        if status >= 400:
            body = {"success": False, "code": status, "message": "x", "errors": {}}
        findings = validator.validate(status, body)
        assert rules_of(findings) == [RuleId.UNKNOWN_STATUS_CODE]

    def test_warnings_only_never_contain_errors(self, validator):
        body = {"success": False, "code": 200, "message": "Not Found", "errors": {}}
        assert not any(f.is_error for f in validator.validate(404, body))


class TestNaming:
    def test_snake_case_key_in_data(self, validator):
        findings = validator.validate(200, {"success": True, "code": 200, "data": {"owner_id": 3}})
        assert len(findings) == 1
        assert findings[0].rule == RuleId.NAMING_CONVENTION
        assert findings[0].rule.value == "naming-convention"
        assert findings[0].path == "/data/owner_id"

    def test_camel_case_key_in_data(self, validator):
        assert validator.validate(200, {"success": True, "code": 200, "data": {"ownerId": 3}}) == []

    def test_objects_in_data_arrays(self, validator):
        body = {"success": True, "code": 200, "data": [{"id": 1}, {"first_name": "Ada"}]}
        findings = validator.validate(200, body)
        assert [f.path for f in findings] == ["/data/1/first_name"]

    def test_third_level_not_checked_by_default(self, validator):
        body = {"success": True, "code": 200, "data": {"item": {"deep_key": 1}}}
        assert validator.validate(200, body) == []

    def test_naming_depth_is_configurable(self):
        validator = EnvelopeValidator(naming_depth=3)
        body = {"success": True, "code": 200, "data": {"item": {"deep_key": 1}}}
        findings = validator.validate(200, body)
        assert [f.path for f in findings] == ["/data/item/deep_key"]

    def test_custom_naming_pattern(self):
        validator = EnvelopeValidator(naming_pattern=re.compile(r"^[a-z][a-z0-9_]*$"))
        body = {"success": True, "code": 200, "data": {"owner_id": 3}}
        assert validator.validate(200, body) == []


class TestBareEnvelope:
    def test_bare_body_rejected_by_default(self, validator):
        findings = validator.validate(200, {"data": {"orderId": 7}, "metadata": {}})
        assert rules_of(findings) == [RuleId.MISSING_DISCRIMINATOR]

    def test_bare_body_accepted_when_enabled(self):
        validator = EnvelopeValidator(allow_bare_envelope=True)
        body = {"data": {"orderId": 7}, "metadata": {}}
        assert validator.classify(body) == ShapeKind.BARE
        assert validator.validate(200, body) == []

    def test_bare_paginated_checks_pagination(self):
        validator = EnvelopeValidator(allow_bare_envelope=True)
        body = {
            "data": [],
            "metadata": {"pagination": {"total": 1, "currentPage": 1, "totalPages": 1}},
        }
        assert validator.classify(body) == ShapeKind.BARE_PAGINATED
        findings = validator.validate(200, body)
        assert [(f.rule, f.path) for f in findings] == [
            (RuleId.MISSING_FIELD, "/metadata/pagination/count")
        ]

    def test_bare_without_data_is_still_indeterminate(self):
        validator = EnvelopeValidator(allow_bare_envelope=True)
        assert validator.classify({"metadata": {}}) == ShapeKind.INDETERMINATE


class TestDataSchema:
    def test_data_schema_violation(self, validator):
        schema = {"type": "object", "required": ["id"]}
        findings = validator.validate(200, {"success": True, "code": 200, "data": {}}, schema)
        assert len(findings) == 1
        assert findings[0].rule == RuleId.DATA_SCHEMA
        assert findings[0].path == "/data"
        assert "'id' is a required property" in findings[0].message

    def test_data_schema_nested_path(self, validator):
        schema = {"type": "array", "items": {"type": "object", "properties": {"id": {"type": "integer"}}}}
        body = {"success": True, "code": 200, "data": [{"id": 1}, {"id": "two"}]}
        findings = validator.validate(200, body, schema)
        assert [f.path for f in findings] == ["/data/1/id"]

    def test_data_schema_satisfied(self, validator):
        schema = {"type": "object", "required": ["id"]}
        assert validator.validate(200, {"success": True, "code": 200, "data": {"id": 1}}, schema) == []


def test_findings_follow_discovery_order(validator):
    body = {"success": False, "code": 200, "Message": "gone"}
    findings = validator.validate(404, body)
    assert rules_of(findings) == [
        RuleId.MISSING_FIELD,
        RuleId.MISSING_FIELD,
        RuleId.CODE_MISMATCH,
        RuleId.NAMING_CONVENTION,
    ]


@pytest.mark.parametrize(
    "status,body",
    [
        (200, PAGINATED_BODY),
        (404, {"success": False, "code": 200, "Message": "gone"}),
        (418, {"owner_id": 1}),
        (200, "not an object"),
    ],
)
def test_validate_is_idempotent(validator, status, body):
    assert validator.validate(status, body) == validator.validate(status, body)


def test_validate_does_not_mutate_body(validator):
    body = {"success": True, "code": 200, "data": {"owner_id": 3}}
    snapshot = repr(body)
    validator.validate(200, body)
    assert repr(body) == snapshot
