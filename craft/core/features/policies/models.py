# (c) Copyright Datacraft, 2026
"""Policy domain models for the ABAC engine."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class PolicyEffect(str, Enum):
	"""Policy decision effect."""
	ALLOW = "Allow"
	DENY = "Deny"


class PolicyStatus(str, Enum):
	"""Policy lifecycle status."""
	ACTIVE = "Active"
	INACTIVE = "Inactive"
	DRAFT = "Draft"


class ConditionOperator(str, Enum):
	"""Operators for rule attributes and policy conditions."""
	EQUALS = "equals"
	NOT_EQUALS = "not_equals"
	CONTAINS = "contains"
	NOT_CONTAINS = "not_contains"
	IN = "in"
	NOT_IN = "not_in"
	INCLUDES = "includes"
	NOT_INCLUDES = "not_includes"
	GREATER_THAN = "greater_than"
	LESS_THAN = "less_than"
	GREATER_THAN_OR_EQUAL = "greater_than_or_equal"
	LESS_THAN_OR_EQUAL = "less_than_or_equal"


# Operators that hold when the attribute is absent
NEGATIVE_OPERATORS = frozenset({
	ConditionOperator.NOT_EQUALS,
	ConditionOperator.NOT_CONTAINS,
	ConditionOperator.NOT_IN,
	ConditionOperator.NOT_INCLUDES,
})

WILDCARD = "*"


@dataclass
class AttributeCondition:
	"""``name operator value`` test on one side of a rule."""
	name: str
	operator: ConditionOperator
	value: Any

	@classmethod
	def from_dict(cls, data: dict) -> "AttributeCondition":
		return cls(
			name=data["name"],
			operator=ConditionOperator(data.get("operator", "equals")),
			value=data.get("value"),
		)


@dataclass
class PolicyCondition:
	"""Condition on a dotted context path such as ``environment.hour``."""
	field: str
	operator: ConditionOperator
	value: Any

	def to_dict(self) -> dict:
		return {
			"field": self.field,
			"operator": self.operator.value,
			"value": self.value,
		}

	@classmethod
	def from_dict(cls, data: dict) -> "PolicyCondition":
		return cls(
			field=data["field"],
			operator=ConditionOperator(data.get("operator", "equals")),
			value=data.get("value"),
		)


@dataclass
class RuleTarget:
	"""Subject or object side of a rule."""
	type: str = ""
	attributes: list[AttributeCondition] = field(default_factory=list)

	@classmethod
	def from_dict(cls, data: dict | None) -> "RuleTarget":
		data = data or {}
		return cls(
			type=data.get("type") or "",
			attributes=[AttributeCondition.from_dict(a) for a in data.get("attributes") or []],
		)


@dataclass
class PolicyRule:
	id: str
	subject: RuleTarget = field(default_factory=RuleTarget)
	action: str = ""
	object: RuleTarget = field(default_factory=RuleTarget)
	conditions: list[PolicyCondition] = field(default_factory=list)

	@classmethod
	def from_dict(cls, data: dict) -> "PolicyRule":
		action = data.get("action") or {}
		if isinstance(action, str):
			action_name = action
		else:
			action_name = action.get("name") or ""
		return cls(
			id=data.get("id") or "",
			subject=RuleTarget.from_dict(data.get("subject")),
			action=action_name,
			object=RuleTarget.from_dict(data.get("object")),
			conditions=[PolicyCondition.from_dict(c) for c in data.get("conditions") or []],
		)


@dataclass
class AdditionalResourceRequirement:
	id: str
	attributes: list[str] = field(default_factory=list)


@dataclass
class Policy:
	"""Engine view of a stored policy."""
	id: str
	name: str
	effect: PolicyEffect
	status: PolicyStatus = PolicyStatus.DRAFT
	priority: int = 1
	rules: list[PolicyRule] = field(default_factory=list)
	subjects: list[str] = field(default_factory=list)
	resources: list[str] = field(default_factory=list)
	actions: list[str] = field(default_factory=list)
	additional_resources: list[AdditionalResourceRequirement] = field(default_factory=list)
	conditions: list[PolicyCondition] = field(default_factory=list)
	workspace_id: str | None = None

	@property
	def is_active(self) -> bool:
		return self.status == PolicyStatus.ACTIVE

	@classmethod
	def from_orm(cls, model) -> "Policy":
		return cls(
			id=model.id,
			name=model.name,
			effect=PolicyEffect(model.effect),
			status=PolicyStatus(model.status),
			priority=model.priority or 1,
			rules=[PolicyRule.from_dict(r) for r in model.rules or []],
			subjects=list(model.subjects or []),
			resources=list(model.resources or []),
			actions=list(model.actions or []),
			additional_resources=[
				AdditionalResourceRequirement(id=a["id"], attributes=list(a.get("attributes") or []))
				for a in model.additional_resources or []
			],
			conditions=[PolicyCondition.from_dict(c) for c in model.conditions or []],
			workspace_id=model.workspace_id,
		)


@dataclass
class EvaluationTarget:
	"""Subject or resource presented for evaluation."""
	id: str | None = None
	type: str | None = None
	attributes: dict[str, Any] = field(default_factory=dict)

	def get(self, name: str) -> Any:
		if name == "id":
			return self.id
		if name == "type":
			return self.type
		return lookup_path(self.attributes, name)


@dataclass
class EvaluationRequest:
	subject: EvaluationTarget
	resource: EvaluationTarget
	action: str
	environment: dict[str, Any] = field(default_factory=dict)
	additional_resources: dict[str, dict[str, Any]] = field(default_factory=dict)


def lookup_path(data: dict[str, Any], path: str) -> Any:
	"""Resolve ``a.b.c`` inside nested dicts, ``None`` when absent."""
	if path in data:
		return data[path]
	current: Any = data
	for part in path.split("."):
		if isinstance(current, dict) and part in current:
			current = current[part]
		else:
			return None
	return current
