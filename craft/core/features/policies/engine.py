# (c) Copyright Datacraft, 2026
"""
Policy Evaluation Engine for ABAC.

Decides Allow/Deny for a subject performing an action on a resource in
an environment, by matching the request against stored policies.

Evaluation strategy:
1. Keep the policies that apply to the request: subject, resource and
   action scopes match, at least one rule matches (when rules exist),
   every global condition holds and every required additional resource
   attribute is present.
2. Order them by priority (lower number first), Deny before Allow on
   equal priority.
3. Any applicable Deny wins. Otherwise the first Allow wins.
4. Default to Deny when nothing applies.
"""
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .models import (
	AttributeCondition,
	ConditionOperator,
	EvaluationRequest,
	EvaluationTarget,
	NEGATIVE_OPERATORS,
	Policy,
	PolicyCondition,
	PolicyEffect,
	PolicyRule,
	RuleTarget,
	WILDCARD,
	lookup_path,
)

logger = logging.getLogger(__name__)

DAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


@dataclass
class PolicyDecision:
	"""Result of policy evaluation."""
	decision: PolicyEffect
	reason: str = ""
	matched_policy: Policy | None = None
	applicable_policies: list[str] = field(default_factory=list)
	evaluated_policies: int = 0
	evaluation_time_ms: float = 0.0

	@property
	def allowed(self) -> bool:
		return self.decision == PolicyEffect.ALLOW

	def to_dict(self) -> dict:
		return {
			"decision": self.decision.value,
			"allowed": self.allowed,
			"reason": self.reason,
			"matched_policy_id": self.matched_policy.id if self.matched_policy else None,
			"matched_policy_name": self.matched_policy.name if self.matched_policy else None,
			"applicable_policies": self.applicable_policies,
			"evaluated_policies": self.evaluated_policies,
			"evaluation_time_ms": self.evaluation_time_ms,
		}


def default_environment(now: datetime | None = None) -> dict[str, Any]:
	"""Clock attributes merged under caller supplied environment values."""
	now = now or datetime.now(timezone.utc)
	return {
		"timestamp": now.isoformat(),
		"date": now.date().isoformat(),
		"time": now.strftime("%H:%M"),
		"hour": now.hour,
		"day_of_week": DAYS[now.weekday()],
		"is_weekend": now.weekday() >= 5,
	}


def _as_number(value: Any) -> float | None:
	if isinstance(value, bool):
		return None
	if isinstance(value, (int, float)):
		return float(value)
	if isinstance(value, str):
		try:
			return float(value)
		except ValueError:
			return None
	return None


def _ordered(actual: Any, expected: Any) -> tuple[Any, Any] | None:
	"""Coerce a pair for ordering comparisons, ``None`` when incomparable."""
	a, b = _as_number(actual), _as_number(expected)
	if a is not None and b is not None:
		return a, b
	if isinstance(actual, str) and isinstance(expected, str):
		return actual, expected
	return None


def _as_list(value: Any) -> list:
	if isinstance(value, (list, tuple, set)):
		return list(value)
	return [value]


def compare(actual: Any, operator: ConditionOperator, expected: Any) -> bool:
	"""Compare values using the given operator."""
	if actual is None:
		return operator in NEGATIVE_OPERATORS

	match operator:
		case ConditionOperator.EQUALS:
			return actual == expected
		case ConditionOperator.NOT_EQUALS:
			return actual != expected
		case ConditionOperator.CONTAINS:
			if isinstance(actual, str):
				return isinstance(expected, str) and expected in actual
			if isinstance(actual, (list, tuple, set)):
				return expected in actual
			return False
		case ConditionOperator.NOT_CONTAINS:
			return not compare(actual, ConditionOperator.CONTAINS, expected)
		case ConditionOperator.IN:
			options = _as_list(expected)
			if isinstance(actual, (list, tuple, set)):
				return any(a in options for a in actual)
			return actual in options
		case ConditionOperator.NOT_IN:
			return not compare(actual, ConditionOperator.IN, expected)
		case ConditionOperator.INCLUDES:
			if not isinstance(actual, (list, tuple, set)):
				return actual == expected
			return all(e in actual for e in _as_list(expected))
		case ConditionOperator.NOT_INCLUDES:
			return not compare(actual, ConditionOperator.INCLUDES, expected)
		case ConditionOperator.GREATER_THAN:
			pair = _ordered(actual, expected)
			return pair is not None and pair[0] > pair[1]
		case ConditionOperator.LESS_THAN:
			pair = _ordered(actual, expected)
			return pair is not None and pair[0] < pair[1]
		case ConditionOperator.GREATER_THAN_OR_EQUAL:
			pair = _ordered(actual, expected)
			return pair is not None and pair[0] >= pair[1]
		case ConditionOperator.LESS_THAN_OR_EQUAL:
			pair = _ordered(actual, expected)
			return pair is not None and pair[0] <= pair[1]

	return False


class PolicyEngine:
	"""Stateless evaluator over a loaded set of policies."""

	def __init__(self, policies: list[Policy] | None = None):
		self._policies: list[Policy] = policies or []

	def load_policies(self, policies: list[Policy]):
		"""Load a list of policies, replacing existing ones."""
		self._policies = list(policies)

	@property
	def policies(self) -> list[Policy]:
		return list(self._policies)

	def evaluate(self, request: EvaluationRequest, policy_id: str | None = None) -> PolicyDecision:
		"""
		Evaluate the loaded policies against ``request``.

		With ``policy_id`` only that policy is considered, whatever its
		status. Otherwise only active policies take part.
		"""
		start = time.perf_counter()

		if policy_id is not None:
			candidates = [p for p in self._policies if p.id == policy_id]
		else:
			candidates = [p for p in self._policies if p.is_active]

		applicable = [p for p in candidates if self.is_applicable(p, request)]
		applicable.sort(key=lambda p: (p.priority, 0 if p.effect == PolicyEffect.DENY else 1))

		decision = self._decide(applicable)
		decision.applicable_policies = [p.id for p in applicable]
		decision.evaluated_policies = len(candidates)
		decision.evaluation_time_ms = round((time.perf_counter() - start) * 1000, 3)

		logger.debug(
			f"Evaluated {len(candidates)} policies for {request.subject.id or request.subject.type} "
			f"{request.action} {request.resource.id or request.resource.type}: "
			f"{decision.decision.value} ({decision.reason})"
		)
		return decision

	def _decide(self, applicable: list[Policy]) -> PolicyDecision:
		if not applicable:
			return PolicyDecision(
				decision=PolicyEffect.DENY,
				reason="No applicable policies found",
			)

		for policy in applicable:
			if policy.effect == PolicyEffect.DENY:
				return PolicyDecision(
					decision=PolicyEffect.DENY,
					matched_policy=policy,
					reason=f"Denied by policy: {policy.name}",
				)

		policy = applicable[0]
		return PolicyDecision(
			decision=PolicyEffect.ALLOW,
			matched_policy=policy,
			reason=f"Allowed by policy: {policy.name}",
		)

	def is_applicable(self, policy: Policy, request: EvaluationRequest) -> bool:
		if not self._in_scope(policy.subjects, request.subject):
			return False
		if not self._in_scope(policy.resources, request.resource):
			return False
		if policy.actions and WILDCARD not in policy.actions and request.action not in policy.actions:
			return False

		if policy.rules and not any(self.rule_matches(r, request) for r in policy.rules):
			return False

		if not all(self.condition_holds(c, request) for c in policy.conditions):
			return False

		for requirement in policy.additional_resources:
			values = request.additional_resources.get(requirement.id)
			if values is None:
				return False
			if not all(values.get(attr) for attr in requirement.attributes):
				return False

		return True

	def _in_scope(self, scope: list[str], target: EvaluationTarget) -> bool:
		if not scope or WILDCARD in scope:
			return True
		return any(v is not None and v in scope for v in (target.id, target.type))

	def rule_matches(self, rule: PolicyRule, request: EvaluationRequest) -> bool:
		if rule.action and rule.action != WILDCARD and rule.action != request.action:
			return False
		if not self._target_matches(rule.subject, request.subject, request):
			return False
		if not self._target_matches(rule.object, request.resource, request):
			return False
		return all(self.condition_holds(c, request) for c in rule.conditions)

	def _target_matches(
		self,
		rule_target: RuleTarget,
		target: EvaluationTarget,
		request: EvaluationRequest,
	) -> bool:
		if rule_target.type and rule_target.type != WILDCARD:
			if rule_target.type not in (target.type, target.id):
				return False
		return all(self._attribute_holds(a, target, request) for a in rule_target.attributes)

	def _attribute_holds(
		self,
		attribute: AttributeCondition,
		target: EvaluationTarget,
		request: EvaluationRequest,
	) -> bool:
		expected = self._resolve_value(attribute.value, request)
		return compare(target.get(attribute.name), attribute.operator, expected)

	def condition_holds(self, condition: PolicyCondition, request: EvaluationRequest) -> bool:
		actual = self.resolve(condition.field, request)
		expected = self._resolve_value(condition.value, request)
		return compare(actual, condition.operator, expected)

	def _resolve_value(self, value: Any, request: EvaluationRequest) -> Any:
		# "$subject.department" references another attribute of the request
		if isinstance(value, str) and value.startswith("$") and len(value) > 1:
			return self.resolve(value[1:], request)
		return value

	def resolve(self, path: str, request: EvaluationRequest) -> Any:
		"""Read a dotted attribute path from the request."""
		head, _, rest = path.partition(".")
		match head:
			case "subject":
				return request.subject.get(rest) if rest else request.subject.id
			case "resource" | "object":
				return request.resource.get(rest) if rest else request.resource.id
			case "action":
				return request.action
			case "environment":
				return lookup_path(request.environment, rest) if rest else None
			case "additional" | "additional_resources":
				resource_id, _, attr = rest.partition(".")
				values = request.additional_resources.get(resource_id)
				if values is None:
					return None
				return lookup_path(values, attr) if attr else values
		# bare names are environment attributes
		return lookup_path(request.environment, path)
