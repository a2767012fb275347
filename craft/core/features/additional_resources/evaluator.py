# (c) Copyright Datacraft, 2026
"""
Evaluation of additional resource rules against a caller supplied context.

A resource without rules is always available. Otherwise every rule must
pass (AND).
"""
import logging
from dataclasses import dataclass
from operator import gt as operator_gt
from operator import lt as operator_lt
from typing import Any

from craft.core.features.policies.models import lookup_path

logger = logging.getLogger(__name__)


@dataclass
class RuleResult:
	field: str
	operator: str
	expected: Any
	actual: Any
	passed: bool

	def to_dict(self) -> dict:
		return {
			"field": self.field,
			"operator": self.operator,
			"expected": self.expected,
			"actual": self.actual,
			"passed": self.passed,
		}


def _fold(value: Any, case_insensitive: bool) -> Any:
	if case_insensitive and isinstance(value, str):
		return value.lower()
	return value


def _ordered(compare, *values: Any) -> bool:
	try:
		return bool(compare(*values))
	except TypeError:
		return False


def check_rule(actual: Any, operator: str, expected: Any, case_insensitive: bool = False) -> bool:
	"""Apply one evaluation rule operator."""
	match operator:
		case "equals":
			return _fold(actual, case_insensitive) == _fold(expected, case_insensitive)
		case "not_equals":
			return _fold(actual, case_insensitive) != _fold(expected, case_insensitive)
		case "in":
			if not isinstance(expected, list):
				return False
			return _fold(actual, case_insensitive) in [_fold(v, case_insensitive) for v in expected]
		case "not_in":
			if not isinstance(expected, list):
				return False
			return _fold(actual, case_insensitive) not in [_fold(v, case_insensitive) for v in expected]
		case "contains":
			if isinstance(actual, str) and isinstance(expected, str):
				return expected.lower() in actual.lower()
			if isinstance(actual, list):
				return expected in actual
			return False
		case "greater_than":
			return actual is not None and _ordered(operator_gt, actual, expected)
		case "less_than":
			return actual is not None and _ordered(operator_lt, actual, expected)
		case "between":
			if not isinstance(expected, list) or len(expected) != 2 or actual is None:
				return False
			low, high = expected
			return _ordered(lambda a, lo, hi: lo <= a <= hi, actual, low, high)
	return False


def evaluate_rules(rules: list[dict], context: dict[str, Any]) -> tuple[bool, list[RuleResult]]:
	"""Evaluate ``rules`` against ``context``; returns the result and per rule detail."""
	results = []
	for rule in rules:
		actual = lookup_path(context, rule["field"])
		passed = check_rule(
			actual,
			rule.get("operator", "equals"),
			rule.get("value"),
			bool(rule.get("case_insensitive")),
		)
		results.append(
			RuleResult(
				field=rule["field"],
				operator=rule.get("operator", "equals"),
				expected=rule.get("value"),
				actual=actual,
				passed=passed,
			)
		)
	result = all(r.passed for r in results)
	logger.debug(f"Evaluated {len(results)} rules: {result}")
	return result, results
