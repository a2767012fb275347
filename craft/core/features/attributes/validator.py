# (c) Copyright Datacraft, 2026
"""
Checks of candidate values against an attribute definition, and the
JSON Schema view of a set of definitions.

The declared data type is checked first and the value normalised
(numeric strings become numbers, dates become ISO strings). Length,
range, pattern, enum and format constraints are checked on the
normalised value. Multi-value attributes check every item of a list.
"""
import ipaddress
import logging
import math
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import AnyUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from craft.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^\+?[\d\s\-()]{10,}$")

_dates = TypeAdapter(datetime)
_urls = TypeAdapter(AnyUrl)


@dataclass
class ValueResult:
	valid: bool
	errors: list[str] = field(default_factory=list)
	normalized_value: Any = None


def check_constraints(data_type: str, constraints: dict[str, Any]) -> None:
	"""Reject constraints that make no sense for ``data_type``."""
	def has(*names: str) -> bool:
		return any(constraints.get(name) is not None for name in names)

	if data_type == "string" and has("min_value", "max_value"):
		raise ValidationError("String type cannot have numeric value constraints")
	if data_type == "number" and has("min_length", "max_length", "pattern"):
		raise ValidationError("Number type cannot have string constraints")
	if data_type == "boolean" and has("min_length", "max_length", "min_value", "max_value", "pattern", "format"):
		raise ValidationError("Boolean type can only have enum constraints")
	pattern = constraints.get("pattern")
	if pattern:
		try:
			re.compile(pattern)
		except re.error as e:
			raise ValidationError(f"Invalid pattern: {e}")


def _is_empty(value: Any) -> bool:
	return value is None or value == ""


def _valid_format(fmt: str, value: str) -> bool:
	match fmt:
		case "email":
			return bool(EMAIL_RE.match(value))
		case "phone":
			return bool(PHONE_RE.match(value))
		case "url":
			try:
				_urls.validate_python(value)
			except PydanticValidationError:
				return False
			return True
		case "ipv4" | "ipv6":
			try:
				address = ipaddress.ip_address(value)
			except ValueError:
				return False
			return address.version == (4 if fmt == "ipv4" else 6)
	return True


def _formats(constraints: dict[str, Any], validation: dict[str, Any]) -> list[str]:
	formats = [constraints["format"]] if constraints.get("format") else []
	for flag, fmt in (("is_email", "email"), ("is_url", "url"), ("is_phone_number", "phone")):
		if validation.get(flag) and fmt not in formats:
			formats.append(fmt)
	return formats


def _to_number(value: Any) -> int | float | None:
	if isinstance(value, bool):
		return None
	if isinstance(value, (int, float)):
		number = value
	elif isinstance(value, str):
		try:
			number = float(value.strip())
		except ValueError:
			return None
	else:
		return None
	if math.isnan(number) or math.isinf(number):
		return None
	if isinstance(number, float) and number.is_integer() and not isinstance(value, float):
		return int(number)
	return number


def _check_one(attribute, value: Any, errors: list[str]) -> Any:
	constraints = attribute.constraints or {}
	normalized = value

	match attribute.data_type:
		case "string":
			if not isinstance(value, str):
				errors.append("Value must be a string")
			else:
				min_length = constraints.get("min_length")
				max_length = constraints.get("max_length")
				if min_length is not None and len(value) < min_length:
					errors.append(f"Value must be at least {min_length} characters")
				if max_length is not None and len(value) > max_length:
					errors.append(f"Value cannot exceed {max_length} characters")
				if constraints.get("pattern") and not re.search(constraints["pattern"], value):
					errors.append("Value does not match required pattern")
		case "number":
			normalized = _to_number(value)
			if normalized is None:
				errors.append("Value must be a valid number")
			else:
				min_value = constraints.get("min_value")
				max_value = constraints.get("max_value")
				if min_value is not None and normalized < min_value:
					errors.append(f"Value must be at least {min_value:g}")
				if max_value is not None and normalized > max_value:
					errors.append(f"Value cannot exceed {max_value:g}")
		case "boolean":
			if not isinstance(value, bool):
				normalized = value in ("true", "1", 1)
		case "date":
			try:
				normalized = _dates.validate_python(value).isoformat()
			except PydanticValidationError:
				errors.append("Value must be a valid date")
		case "array":
			if not isinstance(value, list):
				errors.append("Value must be an array")
		case "object":
			if not isinstance(value, dict):
				errors.append("Value must be an object")

	enum_values = constraints.get("enum_values") or []
	if enum_values and normalized not in enum_values:
		errors.append(f"Value must be one of: {', '.join(str(v) for v in enum_values)}")

	if isinstance(normalized, str):
		for fmt in _formats(constraints, attribute.validation or {}):
			if not _valid_format(fmt, normalized):
				errors.append(f"Value must be a valid {fmt}")
	return normalized


def validate_value(attribute, value: Any) -> ValueResult:
	"""Check ``value`` against ``attribute`` and return the normalised value."""
	if _is_empty(value):
		if attribute.is_required:
			return ValueResult(valid=False, errors=["Value is required"])
		return ValueResult(valid=True, normalized_value=attribute.default_value)

	errors: list[str] = []
	if attribute.is_multi_value and attribute.data_type != "array" and isinstance(value, list):
		normalized = [_check_one(attribute, item, errors) for item in value]
	else:
		normalized = _check_one(attribute, value, errors)

	logger.debug(f"Attribute {attribute.id} value check: {len(errors)} errors")
	return ValueResult(valid=not errors, errors=errors, normalized_value=normalized)


JSON_TYPES = {"date": "string"}

CONSTRAINT_KEYWORDS = (
	("min_length", "minLength"),
	("max_length", "maxLength"),
	("min_value", "minimum"),
	("max_value", "maximum"),
	("pattern", "pattern"),
	("format", "format"),
)


def json_schema(attributes) -> dict[str, Any]:
	"""JSON Schema of an object carrying ``attributes``, keyed by attribute name."""
	schema: dict[str, Any] = {"type": "object", "properties": {}, "required": []}
	for attribute in attributes:
		constraints = attribute.constraints or {}
		prop: dict[str, Any] = {
			"type": JSON_TYPES.get(attribute.data_type, attribute.data_type),
			"title": attribute.display_name,
		}
		if attribute.data_type == "date":
			prop["format"] = "date-time"
		if attribute.description:
			prop["description"] = attribute.description
		for key, keyword in CONSTRAINT_KEYWORDS:
			if constraints.get(key) is not None:
				prop[keyword] = constraints[key]
		if constraints.get("enum_values"):
			prop["enum"] = list(constraints["enum_values"])
		if attribute.default_value is not None:
			prop["default"] = attribute.default_value

		if attribute.is_multi_value:
			prop = {"type": "array", "items": prop, "title": prop["title"]}
			if attribute.description:
				prop["description"] = attribute.description
		schema["properties"][attribute.name] = prop
		if attribute.is_required:
			schema["required"].append(attribute.name)
	return schema
