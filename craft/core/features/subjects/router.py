# (c) Copyright Datacraft, 2026
"""Subject endpoints."""
import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from craft.core.db import crud, tree
from craft.core.db.engine import get_session
from craft.core.exceptions import ConflictError, NotFoundError, ValidationError
from craft.core.features.activities import Severity, record_change
from craft.core.features.auth.dependencies import (
	AdminUser,
	CurrentUser,
	can_access_workspace,
	ensure_workspace_access,
	visible_workspaces,
)
from craft.core.features.hierarchy.db.api import validate_hierarchy
from craft.core.features.policies.db import PolicyDB
from craft.core.features.users.db.orm import User
from craft.core.pagination import PaginationParams, build_meta
from craft.core.schemas import ApiResponse, BulkDeleteResult, BulkIds, BulkUpdateResult
from craft.core.utils import in_use_message

from .db import api as db_api
from .db.orm import Subject as SubjectModel
from .schema import (
	Subject,
	SubjectBulkUpdate,
	SubjectCreate,
	SubjectParams,
	SubjectStats,
	SubjectType,
	SubjectUpdate,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/subjects", tags=["subjects"])


def _dump(subject: SubjectModel, children: list[str] | None = None) -> dict[str, Any]:
	data = Subject.model_validate(subject).model_dump()
	data["children"] = children or []
	return data


async def _page(session: AsyncSession, items: list[SubjectModel], params: PaginationParams, total: int):
	cmap = await tree.children_map(session, SubjectModel, items)
	return ApiResponse(
		data=[_dump(s, cmap[s.id]) for s in items],
		pagination=build_meta(params.page, params.limit, total),
	)


async def _visible_subject(session: AsyncSession, user: User, subject_id: str) -> SubjectModel:
	subject = await db_api.get_subject(session, subject_id)
	if subject is None or not can_access_workspace(user, subject.workspace_id):
		raise NotFoundError("Subject")
	return subject


async def _referencing_policies(session: AsyncSession, subject: SubjectModel) -> int:
	policies = await PolicyDB(session).find_referencing("subject", [subject.id, subject.name])
	return len(policies)


@router.get("", response_model=ApiResponse[list[Subject]])
async def list_subjects(
	params: Annotated[PaginationParams, Depends()],
	filters: Annotated[SubjectParams, Depends()],
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	items, total = await db_api.list_subjects(session, params, filters, visible_workspaces(user))
	return await _page(session, items, params, total)


@router.post("", response_model=ApiResponse[Subject], status_code=status.HTTP_201_CREATED)
async def create_subject(
	data: SubjectCreate,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	ensure_workspace_access(user, data.workspace_id)
	await validate_hierarchy(session, data.workspace_id, data.application_id, data.environment_id)

	if data.id and await db_api.get_subject(session, data.id):
		raise ConflictError("Subject with this ID already exists")
	if await db_api.find_duplicate(session, data.environment_id, data.display_name, data.email):
		raise ConflictError("Subject with this display name or email already exists")
	await tree.check_parent(session, SubjectModel, None, data.parent_id, "Subject", data.workspace_id)

	subject = db_api.create_subject(session, data.model_dump(mode="json"), created_by=user.email)
	await session.flush()
	record_change(session, user, subject, resource_type="subject", action="created")
	await session.commit()
	logger.info(f"Subject created: {subject.id} by {user.email}")
	return ApiResponse(data=_dump(subject), message="Subject created successfully")


@router.get("/stats", response_model=ApiResponse[SubjectStats])
async def get_subject_stats(
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	stats = await db_api.subject_stats(session, visible_workspaces(user))
	return ApiResponse(data=SubjectStats(**stats))


@router.get("/type/{subject_type}", response_model=ApiResponse[list[Subject]])
async def get_subjects_by_type(
	subject_type: SubjectType,
	params: Annotated[PaginationParams, Depends()],
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	"""Active subjects of one type."""
	items, total = await db_api.list_by_type(
		session, subject_type.value, params, visible_workspaces(user)
	)
	return await _page(session, items, params, total)


@router.put("/bulk/update", response_model=ApiResponse[BulkUpdateResult])
async def bulk_update_subjects(
	data: SubjectBulkUpdate,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	subjects = await crud.get_many(session, SubjectModel, data.ids, visible_workspaces(user))
	updates = data.updates.model_dump(exclude_unset=True, mode="json")
	if updates.get("parent_id"):
		for subject in subjects:
			await tree.check_parent(
				session, SubjectModel, subject.id, updates["parent_id"], "Subject", subject.workspace_id
			)

	modified = 0
	for subject in subjects:
		changes = crud.apply_updates(subject, dict(updates), user.email)
		if changes:
			modified += 1
			record_change(session, user, subject, resource_type="subject", action="updated", changes=changes)
	await session.commit()
	return ApiResponse(
		data=BulkUpdateResult(matched_count=len(subjects), modified_count=modified),
		message=f"{modified} subjects updated",
	)


@router.delete("/bulk/delete", response_model=ApiResponse[BulkDeleteResult])
async def bulk_delete_subjects(
	data: BulkIds,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	"""Delete subjects, skipping system subjects and those used by policies."""
	subjects = await crud.get_many(session, SubjectModel, data.ids, visible_workspaces(user))
	deletable = []
	for subject in subjects:
		if subject.is_system or await _referencing_policies(session, subject):
			continue
		deletable.append(subject)
		record_change(session, user, subject, resource_type="subject", action="deleted", severity=Severity.MEDIUM)

	deleted_ids = [s.id for s in deletable]
	deleted = await crud.delete_many(session, SubjectModel, deleted_ids)
	await session.commit()
	return ApiResponse(
		data=BulkDeleteResult(
			deleted_count=deleted,
			requested_ids=data.ids,
			deleted_ids=deleted_ids,
			skipped_ids=[i for i in data.ids if i not in deleted_ids],
		),
		message=f"{deleted} subjects deleted",
	)


@router.get("/{subject_id}", response_model=ApiResponse[Subject])
async def get_subject(
	subject_id: str,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
):
	subject = await _visible_subject(session, user, subject_id)
	children = await tree.get_children(session, SubjectModel, subject)
	return ApiResponse(data=_dump(subject, [c.id for c in children]))


@router.get("/{subject_id}/hierarchy", response_model=ApiResponse[dict])
async def get_subject_hierarchy(
	subject_id: str,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: CurrentUser,
	depth: int = Query(3, ge=1, le=10),
):
	"""Subject with its descendants expanded ``depth`` levels."""
	subject = await _visible_subject(session, user, subject_id)
	data = await tree.build_tree(
		session,
		SubjectModel,
		subject,
		depth,
		lambda s: Subject.model_validate(s).model_dump(mode="json", exclude={"children"}),
	)
	return ApiResponse(data=data)


@router.put("/{subject_id}", response_model=ApiResponse[Subject])
async def update_subject(
	subject_id: str,
	data: SubjectUpdate,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	subject = await _visible_subject(session, user, subject_id)
	updates = data.model_dump(exclude_unset=True, mode="json")

	if "parent_id" in updates:
		await tree.check_parent(
			session, SubjectModel, subject.id, updates["parent_id"], "Subject", subject.workspace_id
		)
	display_name = updates.get("display_name")
	email = updates.get("email")
	duplicate = await db_api.find_duplicate(
		session,
		subject.environment_id,
		display_name if display_name != subject.display_name else None,
		email if email != subject.email else None,
		exclude_id=subject.id,
	)
	if duplicate:
		raise ConflictError("Subject with this display name or email already exists")

	changes = crud.apply_updates(subject, updates, user.email)
	record_change(session, user, subject, resource_type="subject", action="updated", changes=changes)
	await session.commit()
	children = await tree.get_children(session, SubjectModel, subject)
	return ApiResponse(data=_dump(subject, [c.id for c in children]), message="Subject updated successfully")


@router.delete("/{subject_id}", response_model=ApiResponse[None])
async def delete_subject(
	subject_id: str,
	session: Annotated[AsyncSession, Depends(get_session)],
	user: AdminUser,
):
	subject = await _visible_subject(session, user, subject_id)
	if subject.is_system:
		raise ValidationError("System subjects cannot be deleted")

	count = await _referencing_policies(session, subject)
	if count:
		raise ConflictError(
			in_use_message(subject.display_name, "subject", count),
			details={"policy_count": count},
		)

	record_change(session, user, subject, resource_type="subject", action="deleted", severity=Severity.MEDIUM)
	await session.delete(subject)
	await session.commit()
	logger.info(f"Subject deleted: {subject_id} by {user.email}")
	return ApiResponse(message="Subject deleted successfully")
