# (c) Copyright Datacraft, 2026
"""Tests for attribute value checks and JSON Schema output."""
import pytest

from craft.core.exceptions import ValidationError
from craft.core.features.attributes.db.orm import Attribute
from craft.core.features.attributes.validator import check_constraints, json_schema, validate_value


def make_attribute(data_type="string", **fields):
	values = {
		"id": "attr",
		"name": "attr",
		"display_name": "Attr",
		"description": None,
		"data_type": data_type,
		"is_required": False,
		"is_multi_value": False,
		"default_value": None,
		"constraints": {},
		"validation": {},
		**fields,
	}
	return Attribute(**values)


def test_required_and_default():
	required = make_attribute(is_required=True)
	assert validate_value(required, "").errors == ["Value is required"]

	optional = make_attribute(default_value="guest")
	result = validate_value(optional, None)
	assert result.valid is True
	assert result.normalized_value == "guest"


def test_string_constraints():
	attribute = make_attribute(constraints={"min_length": 3, "max_length": 5, "pattern": "^[a-z]+$"})

	assert validate_value(attribute, "abcd").valid is True
	assert validate_value(attribute, "ab").errors == ["Value must be at least 3 characters"]
	assert validate_value(attribute, "ABCDEF").errors == [
		"Value cannot exceed 5 characters",
		"Value does not match required pattern",
	]
	assert validate_value(attribute, 42).errors == ["Value must be a string"]


def test_number_is_normalised():
	attribute = make_attribute("number", constraints={"min_value": 18, "max_value": 65})

	result = validate_value(attribute, "42")
	assert result.valid is True
	assert result.normalized_value == 42
	assert validate_value(attribute, 12).errors == ["Value must be at least 18"]
	assert validate_value(attribute, 70.5).errors == ["Value cannot exceed 65"]
	assert validate_value(attribute, "forty").errors == ["Value must be a valid number"]
	assert validate_value(attribute, True).errors == ["Value must be a valid number"]


def test_boolean_date_and_containers():
	assert validate_value(make_attribute("boolean"), "true").normalized_value is True
	assert validate_value(make_attribute("boolean"), "no").normalized_value is False

	date = validate_value(make_attribute("date"), "2024-01-15T10:00:00Z")
	assert date.valid is True
	assert date.normalized_value == "2024-01-15T10:00:00+00:00"
	assert validate_value(make_attribute("date"), "not a date").errors == ["Value must be a valid date"]

	assert validate_value(make_attribute("array"), {"a": 1}).errors == ["Value must be an array"]
	assert validate_value(make_attribute("object"), [1]).errors == ["Value must be an object"]


def test_enum_and_formats():
	level = make_attribute(constraints={"enum_values": ["low", "high"]})
	assert validate_value(level, "medium").errors == ["Value must be one of: low, high"]

	email = make_attribute(constraints={"format": "email"})
	assert validate_value(email, "dana@example.com").valid is True
	assert validate_value(email, "dana").errors == ["Value must be a valid email"]

	flagged = make_attribute(validation={"is_url": True})
	assert validate_value(flagged, "https://example.com/docs").valid is True
	assert validate_value(flagged, "example").valid is False

	ip = make_attribute(constraints={"format": "ipv4"})
	assert validate_value(ip, "10.0.0.1").valid is True
	assert validate_value(ip, "::1").valid is False


def test_multi_value_checks_each_item():
	attribute = make_attribute("number", is_multi_value=True, constraints={"max_value": 10})

	result = validate_value(attribute, ["3", 12])
	assert result.normalized_value == [3, 12]
	assert result.errors == ["Value cannot exceed 10"]


def test_check_constraints():
	check_constraints("string", {"min_length": 1, "min_value": None})
	with pytest.raises(ValidationError, match="String type cannot have numeric value constraints"):
		check_constraints("string", {"min_value": 1})
	with pytest.raises(ValidationError, match="Number type cannot have string constraints"):
		check_constraints("number", {"pattern": "x"})
	with pytest.raises(ValidationError, match="Boolean type can only have enum constraints"):
		check_constraints("boolean", {"max_length": 2})
	with pytest.raises(ValidationError, match="Invalid pattern"):
		check_constraints("string", {"pattern": "("})


def test_json_schema():
	attributes = [
		make_attribute(
			name="department",
			display_name="Department",
			is_required=True,
			constraints={"enum_values": ["hr", "it"], "max_length": 10},
		),
		make_attribute("date", name="hired", display_name="Hired"),
		make_attribute("number", name="scores", display_name="Scores", is_multi_value=True, default_value=0),
	]

	schema = json_schema(attributes)

	assert schema["required"] == ["department"]
	assert schema["properties"]["department"] == {
		"type": "string",
		"title": "Department",
		"maxLength": 10,
		"enum": ["hr", "it"],
	}
	assert schema["properties"]["hired"]["format"] == "date-time"
	assert schema["properties"]["scores"] == {
		"type": "array",
		"title": "Scores",
		"items": {"type": "number", "title": "Scores", "default": 0},
	}
