"""
tests/test_sanitize.py — Unit tests for request sanitization and field validation.
"""

import math

import pytest

from botengine.security.sanitize import (
    MAX_COLLECTION_ITEMS,
    MAX_STRING_LENGTH,
    sanitize_input,
    sanitize_value,
    strip_markup,
    validate_field,
    validate_fields,
    validate_request_data,
)


# ── Sanitization ──────────────────────────────────────────────────────────────

class TestStripMarkup:
    def test_removes_tags(self):
        assert strip_markup("<b>Ravi</b> Kumar") == "Ravi Kumar"

    def test_drops_script_contents(self):
        assert strip_markup("Hi<script>alert('x')</script>") == "Hi"

    def test_plain_text_unchanged(self):
        assert strip_markup("Just text") == "Just text"


class TestSanitizeValue:
    def test_strings_trimmed_and_bounded(self):
        assert sanitize_value("  hello  ") == "hello"
        assert len(sanitize_value("a" * 5000)) == MAX_STRING_LENGTH

    def test_numbers_out_of_bounds_become_zero(self):
        assert sanitize_value(2_000_000) == 0
        assert sanitize_value(-2_000_000) == 0
        assert sanitize_value(math.inf) == 0
        assert sanitize_value(1200) == 1200

    def test_booleans_and_none_preserved(self):
        assert sanitize_value(True) is True
        assert sanitize_value(None) is None

    def test_lists_truncated(self):
        assert len(sanitize_value(list(range(100)))) == MAX_COLLECTION_ITEMS

    def test_nested_objects_cleaned(self):
        cleaned = sanitize_value({"<i>name</i>": "<b>Asha</b>", "inner": {"note": " <p>hi</p> "}})
        assert cleaned == {"name": "Asha", "inner": {"note": "hi"}}

    def test_objects_bounded(self):
        big = {f"k{i}": i for i in range(80)}
        assert len(sanitize_value(big)) == MAX_COLLECTION_ITEMS


class TestSanitizeInput:
    def test_non_dict_body_becomes_empty(self):
        assert sanitize_input(["a"]) == {}
        assert sanitize_input(None) == {}

    def test_dict_body_cleaned(self):
        assert sanitize_input({"botType": " <em>kavya</em> "}) == {"botType": "kavya"}


# ── Field rules ───────────────────────────────────────────────────────────────

class TestValidateField:
    @pytest.mark.parametrize("name,value", [
        ("email", "asha@example.com"),
        ("phone", "9876543210"),
        ("phone", "+91 98765 43210"),
        ("pincode", "560034"),
        ("name", "Asha D'Souza"),
        ("botType", "Kavya"),
        ("projectType", "Commercial"),
        ("finishTier", "Economy"),
        ("clientType", "salon"),
        ("timeline", "rush"),
        ("areaSqft", 1200),
        ("areaSqft", "1200"),
        ("sessionId", "session_1234567"),
        ("clientId", "tener_interiors"),
        ("responses", {}),
        ("marketingConsent", False),
        ("spaceType", "office"),
        ("flooring", "marble-granite"),
        ("kitchen", "semi-modular"),
    ])
    def test_valid_values(self, name, value):
        assert validate_field(name, value) is None

    @pytest.mark.parametrize("name,value", [
        ("email", "not-an-email"),
        ("phone", "12345"),
        ("phone", "5876543210"),
        ("pincode", "5600"),
        ("name", "A"),
        ("name", "R0b0t"),
        ("botType", "hal"),
        ("projectType", "residential"),
        ("clientType", "plumber"),
        ("timeline", "yesterday"),
        ("areaSqft", 50),
        ("areaSqft", 60000),
        ("areaSqft", "big"),
        ("sessionId", "short"),
        ("clientId", "bad id!"),
        ("responses", "a string"),
        ("userData", []),
        ("marketingConsent", "yes"),
        ("spaceType", "garage"),
        ("paint", "glitter"),
        ("requirements", "x" * 501),
    ])
    def test_invalid_values(self, name, value):
        assert validate_field(name, value) is not None

    def test_unknown_field_length_limit(self):
        assert validate_field("notes", "x" * 1000) is None
        assert validate_field("notes", "x" * 1001) == "Field notes is too long"

    def test_validate_fields_skips_empty_values(self):
        assert validate_fields({"pincode": "", "email": None, "phone": "9876543210"}) == []
        assert validate_fields({"pincode": "12"}) == ["Pincode must be 6 digits"]


class TestValidateRequestData:
    def test_valid_request(self):
        result = validate_request_data(
            {"responses": {}, "botType": "kavya", "clientType": "interiors"},
            required=("responses", "botType", "clientType"),
            optional=("sessionId",),
        )
        assert result.is_valid is True
        assert result.errors == []

    def test_missing_required_field(self):
        result = validate_request_data({"botType": "kavya"}, required=("responses", "botType"))
        assert result.is_valid is False
        assert "Missing required field: responses" in result.errors

    def test_unexpected_field(self):
        result = validate_request_data({"pincode": "400001", "admin": True}, required=("pincode",))
        assert result.errors == ["Unexpected field: admin"]

    def test_rule_failures_reported_together(self):
        result = validate_request_data(
            {"pincode": "40", "serviceType": "x" * 2000},
            required=("pincode",),
            optional=("serviceType",),
        )
        assert len(result.errors) == 2

    def test_non_dict_body(self):
        result = validate_request_data("nope", required=("pincode",))
        assert result.errors == ["Missing required field: pincode"]
