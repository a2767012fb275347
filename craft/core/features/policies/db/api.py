# (c) Copyright Datacraft, 2026
"""Database operations for policy management."""
from typing import Any, Iterable, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from craft.core.db import crud
from craft.core.pagination import (
	PaginationParams,
	json_contains_any,
	paginate,
	scope_clause,
	search_clause,
	split_csv,
)
from craft.core.utils import generate_id

from ..models import PolicyEffect, PolicyStatus
from ..views import PolicyParams
from .orm import PolicyModel

SEARCH_FIELDS = (PolicyModel.name, PolicyModel.description, PolicyModel.id)


def _with_rule_ids(rules: list[dict]) -> list[dict]:
	for rule in rules:
		if not rule.get("id"):
			rule["id"] = generate_id("rule")
	return rules


class PolicyDB:
	"""Database operations for policies."""

	def __init__(self, session: AsyncSession):
		self.session = session

	# --- Policy CRUD ---

	async def get_policy(self, policy_id: str) -> PolicyModel | None:
		"""Get a policy by ID."""
		return await self.session.get(PolicyModel, policy_id)

	async def get_policy_by_name(self, environment_id: str, name: str) -> PolicyModel | None:
		stmt = select(PolicyModel).where(
			PolicyModel.environment_id == environment_id,
			PolicyModel.name == name,
		)
		return (await self.session.execute(stmt)).scalar_one_or_none()

	async def list_policies(
		self,
		params: PaginationParams,
		filters: PolicyParams,
		workspace_ids: set[str] | None,
	) -> tuple[list[PolicyModel], int]:
		stmt = select(PolicyModel)

		clause = scope_clause(PolicyModel.workspace_id, workspace_ids)
		if clause is not None:
			stmt = stmt.where(clause)

		if filters.workspace_id:
			stmt = stmt.where(PolicyModel.workspace_id == filters.workspace_id)
		if filters.application_id:
			stmt = stmt.where(PolicyModel.application_id == filters.application_id)
		if filters.environment_id:
			stmt = stmt.where(PolicyModel.environment_id == filters.environment_id)
		if filters.effect:
			stmt = stmt.where(PolicyModel.effect == filters.effect.value)
		if filters.status:
			stmt = stmt.where(PolicyModel.status == filters.status.value)
		if filters.priority is not None:
			stmt = stmt.where(PolicyModel.priority >= filters.priority)
		if filters.created_by:
			stmt = stmt.where(PolicyModel.created_by == filters.created_by)

		clause = json_contains_any(PolicyModel.tags, split_csv(filters.tags))
		if clause is not None:
			stmt = stmt.where(clause)
		clause = search_clause(params.search, SEARCH_FIELDS)
		if clause is not None:
			stmt = stmt.where(clause)

		return await paginate(self.session, stmt, PolicyModel, params)

	async def create_policy(self, data: dict[str, Any], created_by: str) -> PolicyModel:
		"""Create a new policy from validated API data."""
		meta = data.pop("metadata", None) or {}
		if not data.get("id"):
			data.pop("id", None)
		data["rules"] = _with_rule_ids(data.get("rules") or [])
		model = PolicyModel(**data, created_by=created_by, last_modified_by=created_by)
		model.apply_meta(meta)
		self.session.add(model)
		await self.session.flush()
		return model

	async def update_policy(
		self,
		model: PolicyModel,
		updates: dict[str, Any],
		modified_by: str,
	) -> dict[str, Any]:
		"""Apply ``updates`` to ``model`` and return the changed fields."""
		if updates.get("rules") is not None:
			updates["rules"] = _with_rule_ids(updates["rules"])
		changes = crud.apply_updates(model, updates, modified_by)
		await self.session.flush()
		return changes

	async def delete_policy(self, model: PolicyModel) -> None:
		await self.session.delete(model)
		await self.session.flush()

	async def get_many(self, ids: Sequence[str], workspace_ids: set[str] | None) -> list[PolicyModel]:
		return await crud.get_many(self.session, PolicyModel, ids, workspace_ids)

	async def delete_many(self, ids: Sequence[str]) -> int:
		return await crud.delete_many(self.session, PolicyModel, ids)

	# --- Lookups ---

	async def get_by_field(
		self,
		params: PaginationParams,
		workspace_ids: set[str] | None,
		**equals: Any,
	) -> tuple[list[PolicyModel], int]:
		stmt = select(PolicyModel)
		for key, value in equals.items():
			stmt = stmt.where(getattr(PolicyModel, key) == value)
		clause = scope_clause(PolicyModel.workspace_id, workspace_ids)
		if clause is not None:
			stmt = stmt.where(clause)
		return await paginate(self.session, stmt, PolicyModel, params)

	async def get_evaluation_candidates(
		self,
		workspace_ids: set[str] | None,
		policy_id: str | None = None,
		workspace_id: str | None = None,
		application_id: str | None = None,
		environment_id: str | None = None,
	) -> list[PolicyModel]:
		"""Active policies in scope, or the single requested policy."""
		stmt = select(PolicyModel)
		if policy_id:
			stmt = stmt.where(PolicyModel.id == policy_id)
		else:
			stmt = stmt.where(PolicyModel.status == PolicyStatus.ACTIVE.value)
		clause = scope_clause(PolicyModel.workspace_id, workspace_ids)
		if clause is not None:
			stmt = stmt.where(clause)
		if workspace_id:
			stmt = stmt.where(PolicyModel.workspace_id == workspace_id)
		if application_id:
			stmt = stmt.where(PolicyModel.application_id == application_id)
		if environment_id:
			stmt = stmt.where(PolicyModel.environment_id == environment_id)
		stmt = stmt.order_by(PolicyModel.priority, PolicyModel.created_at)
		return list((await self.session.execute(stmt)).scalars().all())

	async def find_referencing(self, kind: str, values: Sequence[str]) -> list[PolicyModel]:
		"""
		Policies that reference a subject, resource or action.

		``kind`` is ``subject``, ``resource`` or ``action``. A policy refers
		to one of ``values`` through its scope list or through a rule.
		"""
		values = [v for v in values if v]
		if not values:
			return []
		list_column = {
			"subject": PolicyModel.subjects,
			"resource": PolicyModel.resources,
			"action": PolicyModel.actions,
		}[kind]

		# Rules are JSON documents, so the match is done on the decoded values
		candidates = (await self.session.execute(select(PolicyModel))).scalars().all()

		wanted = set(values)
		return [p for p in candidates if _references(p, kind, list_column.key, wanted)]

	async def attribute_usage(
		self, keys: Iterable[tuple[str, str]]
	) -> dict[tuple[str, str], list[PolicyModel]]:
		"""Policies naming an attribute, per ``(workspace_id, attribute name)``."""
		usage: dict[tuple[str, str], list[PolicyModel]] = {key: [] for key in keys}
		if not usage:
			return usage
		stmt = (
			select(PolicyModel)
			.where(PolicyModel.workspace_id.in_(sorted({workspace for workspace, _ in usage})))
			.order_by(PolicyModel.name)
		)
		for policy in (await self.session.execute(stmt)).scalars():
			for name in _attribute_names(policy):
				key = (policy.workspace_id, name)
				if key in usage:
					usage[key].append(policy)
		return usage

	# --- Analytics ---

	async def get_stats(self, workspace_ids: set[str] | None) -> dict:
		base = select(PolicyModel)
		clause = scope_clause(PolicyModel.workspace_id, workspace_ids)
		if clause is not None:
			base = base.where(clause)
		sub = base.subquery()

		total = (await self.session.execute(select(func.count()).select_from(sub))).scalar_one()
		by_status = dict(
			(await self.session.execute(select(sub.c.status, func.count()).group_by(sub.c.status))).all()
		)
		by_effect = dict(
			(await self.session.execute(select(sub.c.effect, func.count()).group_by(sub.c.effect))).all()
		)
		pmin, pmax, pavg = (
			await self.session.execute(
				select(func.min(sub.c.priority), func.max(sub.c.priority), func.avg(sub.c.priority))
			)
		).one()

		return {
			"total": total,
			"active": by_status.get(PolicyStatus.ACTIVE.value, 0),
			"draft": by_status.get(PolicyStatus.DRAFT.value, 0),
			"inactive": by_status.get(PolicyStatus.INACTIVE.value, 0),
			"allow": by_effect.get(PolicyEffect.ALLOW.value, 0),
			"deny": by_effect.get(PolicyEffect.DENY.value, 0),
			"priority": {
				"min": pmin,
				"max": pmax,
				"avg": round(float(pavg), 2) if pavg is not None else None,
			},
		}


def _references(policy: PolicyModel, kind: str, list_attr: str, wanted: set[str]) -> bool:
	if wanted.intersection(getattr(policy, list_attr) or []):
		return True
	for rule in policy.rules or []:
		if kind == "subject":
			value = (rule.get("subject") or {}).get("type")
		elif kind == "resource":
			value = (rule.get("object") or {}).get("type")
		else:
			action = rule.get("action") or {}
			value = action.get("name") if isinstance(action, dict) else action
		if value in wanted:
			return True
	return False


def _attribute_names(policy: PolicyModel) -> set[str]:
	"""Attribute names used by rule targets and by condition fields."""
	names: set[str] = set()
	conditions = list(policy.conditions or [])
	for rule in policy.rules or []:
		for side in ("subject", "object"):
			for attribute in (rule.get(side) or {}).get("attributes") or []:
				names.add(attribute.get("name"))
		conditions.extend(rule.get("conditions") or [])
	for condition in conditions:
		field = condition.get("field") or ""
		# "subject.department" names "department"
		names.update({field, field.rsplit(".", 1)[-1]})
	names.discard(None)
	names.discard("")
	return names
