# (c) Copyright Datacraft, 2026
"""
Parent/child helpers for self referencing records.

Subjects, resources and actions point at their parent through a plain
``parent_id`` string. Children are derived by querying on it. A parent
and its children always share one ``workspace_id``, so every child
query is limited to the parent's workspace.
"""
from typing import Any, Callable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from craft.core.exceptions import NotFoundError, ValidationError


async def get_children(session: AsyncSession, model, node) -> list:
	stmt = (
		select(model)
		.where(model.parent_id == node.id, model.workspace_id == node.workspace_id)
		.order_by(model.id)
	)
	result = await session.execute(stmt)
	return list(result.scalars().all())


async def count_children(session: AsyncSession, model, node) -> int:
	stmt = select(func.count()).where(
		model.parent_id == node.id,
		model.workspace_id == node.workspace_id,
	)
	return (await session.execute(stmt)).scalar_one()


async def children_map(session: AsyncSession, model, nodes: list) -> dict[str, list[str]]:
	"""Child ids keyed by parent id for a page of records."""
	mapping: dict[str, list[str]] = {node.id: [] for node in nodes}
	if not nodes:
		return mapping
	workspaces = {node.id: node.workspace_id for node in nodes}
	stmt = (
		select(model.parent_id, model.id, model.workspace_id)
		.where(model.parent_id.in_(list(workspaces)))
		.order_by(model.id)
	)
	for parent_id, child_id, workspace_id in (await session.execute(stmt)).all():
		if workspaces[parent_id] == workspace_id:
			mapping[parent_id].append(child_id)
	return mapping


async def creates_cycle(
	session: AsyncSession,
	model,
	node_id: str,
	new_parent_id: str,
) -> bool:
	"""True when ``node_id`` is ``new_parent_id`` or one of its ancestors."""
	seen: set[str] = set()
	current: str | None = new_parent_id
	while current is not None and current not in seen:
		if current == node_id:
			return True
		seen.add(current)
		current = (
			await session.execute(select(model.parent_id).where(model.id == current))
		).scalar_one_or_none()
	return False


async def build_tree(
	session: AsyncSession,
	model,
	node,
	depth: int,
	serialize: Callable[[Any], dict],
	_seen: set[str] | None = None,
) -> dict:
	"""Serialize ``node`` with ``children`` expanded ``depth`` levels deep."""
	seen = _seen if _seen is not None else set()
	seen.add(node.id)
	data = serialize(node)
	children = await get_children(session, model, node)
	data["children_ids"] = [c.id for c in children]
	data["children"] = []
	if depth <= 1:
		return data

	for child in children:
		if child.id in seen:
			continue
		data["children"].append(
			await build_tree(session, model, child, depth - 1, serialize, seen)
		)
	return data


async def build_forest(
	session: AsyncSession,
	roots: list,
	model,
	depth: int,
	serialize: Callable[[Any], dict],
) -> list[dict]:
	seen: set[str] = set()
	return [
		await build_tree(session, model, root, depth, serialize, seen)
		for root in roots
	]


async def check_parent(
	session: AsyncSession,
	model,
	node_id: str | None,
	parent_id: str | None,
	label: str,
	workspace_id: str,
) -> None:
	"""
	Validate a new ``parent_id`` for ``node_id``; ``node_id`` is None on create.

	The parent must live in ``workspace_id``, the workspace of the node.
	A parent elsewhere is reported as missing.
	"""
	if not parent_id:
		return
	if node_id is not None and parent_id == node_id:
		raise ValidationError(f"{label} cannot be its own parent")
	parent = await session.get(model, parent_id)
	if parent is None or parent.workspace_id != workspace_id:
		raise NotFoundError(f"Parent {label.lower()}")
	if node_id is not None and await creates_cycle(session, model, node_id, parent_id):
		raise ValidationError(f"Setting this parent would create a circular {label.lower()} hierarchy")
