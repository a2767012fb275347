# (c) Copyright Datacraft, 2026
"""Policy service for access control decisions."""
import logging

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from craft.core.features.activities import (
	ActivityCategory,
	ActivityType,
	Severity,
	record_activity,
)
from craft.core.features.users.db.orm import User

from .db import PolicyDB
from .engine import PolicyDecision, PolicyEngine, default_environment
from .models import EvaluationRequest, EvaluationTarget, Policy
from .views import EvaluateRequest

logger = logging.getLogger(__name__)


class PolicyService:
	"""
	Loads stored policies into a :class:`PolicyEngine` and evaluates
	requests against them.

	Usage:
		service = PolicyService(session)
		decision = await service.evaluate(data, user)
		if not decision.allowed:
			...
	"""

	def __init__(self, session: AsyncSession):
		self.session = session
		self.db = PolicyDB(session)

	async def load_engine(
		self,
		workspace_ids: set[str] | None,
		data: EvaluateRequest,
	) -> PolicyEngine:
		models = await self.db.get_evaluation_candidates(
			workspace_ids,
			policy_id=data.policy_id,
			workspace_id=data.workspace_id,
			application_id=data.application_id,
			environment_id=data.environment_id,
		)
		policies = [Policy.from_orm(m) for m in models]
		logger.debug(f"Loaded {len(policies)} candidate policies")
		return PolicyEngine(policies)

	@staticmethod
	def to_request(data: EvaluateRequest) -> EvaluationRequest:
		environment = default_environment()
		environment.update(data.environment)
		return EvaluationRequest(
			subject=EvaluationTarget(**data.subject.model_dump()),
			resource=EvaluationTarget(**data.resource.model_dump()),
			action=data.action,
			environment=environment,
			additional_resources=data.additional_resources,
		)

	@staticmethod
	def activity_workspace(
		data: EvaluateRequest,
		decision: PolicyDecision,
		candidates: list[Policy],
		workspace_ids: set[str] | None,
	) -> str | None:
		"""
		Workspace an evaluation is logged under.

		The matched policy wins, then the requested workspace when the
		caller may see it, then the one workspace all candidates share,
		then the caller's first assigned workspace.
		"""
		if decision.matched_policy and decision.matched_policy.workspace_id:
			return decision.matched_policy.workspace_id
		if data.workspace_id and (workspace_ids is None or data.workspace_id in workspace_ids):
			return data.workspace_id
		shared = {p.workspace_id for p in candidates if p.workspace_id}
		if len(shared) == 1:
			return shared.pop()
		if workspace_ids:
			return sorted(workspace_ids)[0]
		return None

	async def evaluate(
		self,
		data: EvaluateRequest,
		user: User,
		workspace_ids: set[str] | None,
		request: Request | None = None,
	) -> PolicyDecision:
		"""Evaluate ``data`` and record an authorization activity."""
		engine = await self.load_engine(workspace_ids, data)
		decision = engine.evaluate(self.to_request(data), policy_id=data.policy_id)

		workspace_id = self.activity_workspace(data, decision, engine.policies, workspace_ids)
		if workspace_id is None and workspace_ids is not None:
			# unscoped rows are visible in every workspace
			logger.info(f"Evaluation by {user.email} not recorded: user has no workspace")
			return decision

		subject = data.subject.id or data.subject.type or "unknown"
		resource = data.resource.id or data.resource.type or "unknown"
		record_activity(
			self.session,
			user,
			type=ActivityType.AUTHORIZATION,
			category=ActivityCategory.SECURITY,
			action="evaluated",
			resource_type="policy",
			resource_id=decision.matched_policy.id if decision.matched_policy else resource,
			resource_name=decision.matched_policy.name if decision.matched_policy else None,
			description=f"Access {decision.decision.value.lower()} for {subject} to {data.action} {resource}",
			severity=Severity.LOW if decision.allowed else Severity.MEDIUM,
			workspace_id=workspace_id,
			application_id=data.application_id,
			environment_id=data.environment_id,
			request=request,
			additional_data=decision.to_dict(),
		)
		return decision
