# (c) Copyright Datacraft, 2026
"""Tests for resource endpoints."""
from sqlalchemy import update

from conftest import auth_headers
from craft.core.features.resources.db.orm import Resource as ResourceModel

RESOURCES = "/api/v1/resources"


async def create_resource(client, headers, hierarchy, resource_id, **fields):
	payload = {
		**hierarchy,
		"id": resource_id,
		"name": resource_id.replace("-", " "),
		"type": "document",
		"uri": f"/docs/{resource_id}",
		**fields,
	}
	response = await client.post(RESOURCES, headers=headers, json=payload)
	assert response.status_code == 201, response.text
	return response.json()["data"]


async def test_create_resource_defaults(client, admin_headers, hierarchy):
	resource = await create_resource(
		client, admin_headers, hierarchy, "handbook",
		metadata={"size": 2048, "mime_type": "application/pdf"},
	)

	assert resource["permissions"] == {
		"read": True,
		"write": False,
		"delete": False,
		"execute": False,
		"admin": False,
	}
	assert resource["metadata"]["classification"] == "internal"
	assert resource["metadata"]["size"] == 2048
	assert resource["metadata"]["mime_type"] == "application/pdf"

	duplicate = await client.post(
		RESOURCES,
		headers=admin_headers,
		json={**hierarchy, "id": "handbook", "name": "x", "type": "file", "uri": "/x"},
	)
	assert duplicate.status_code == 409


async def test_resource_requires_uri(client, admin_headers, hierarchy):
	response = await client.post(
		RESOURCES,
		headers=admin_headers,
		json={**hierarchy, "id": "no-uri", "name": "No uri", "type": "api"},
	)

	assert response.status_code == 400
	assert response.json()["details"][0]["field"] == "uri"


async def test_delete_resource_with_children(client, admin_headers, hierarchy):
	await create_resource(client, admin_headers, hierarchy, "shared", type="folder")
	await create_resource(client, admin_headers, hierarchy, "report", parent_id="shared")

	blocked = await client.delete(f"{RESOURCES}/shared", headers=admin_headers)
	assert blocked.status_code == 409
	assert blocked.json()["error"] == (
		"Cannot delete resource with children. Delete or reassign children first."
	)

	assert (await client.delete(f"{RESOURCES}/report", headers=admin_headers)).status_code == 200
	assert (await client.delete(f"{RESOURCES}/shared", headers=admin_headers)).status_code == 200


async def test_delete_resource_in_use(client, admin_headers, hierarchy):
	await create_resource(client, admin_headers, hierarchy, "payroll", display_name="Payroll DB", type="database")
	policy = await client.post(
		"/api/v1/policies",
		headers=admin_headers,
		json={
			**hierarchy,
			"name": "payroll access",
			"effect": "Deny",
			"rules": [{"object": {"type": "payroll"}, "action": {"name": "read"}}],
		},
	)
	assert policy.status_code == 201

	response = await client.delete(f"{RESOURCES}/payroll", headers=admin_headers)

	assert response.status_code == 409
	assert response.json()["error"] == (
		'Unable to delete "Payroll DB" - This resource is currently being used in 1 policy'
	)


async def test_resource_tree(client, admin_headers, hierarchy):
	await create_resource(client, admin_headers, hierarchy, "root-a", type="folder")
	await create_resource(client, admin_headers, hierarchy, "child-a", parent_id="root-a")
	await create_resource(client, admin_headers, hierarchy, "grandchild-a", parent_id="child-a")
	await create_resource(client, admin_headers, hierarchy, "root-b", type="folder")

	forest = await client.get(f"{RESOURCES}/tree", headers=admin_headers)
	roots = forest.json()["data"]
	assert [r["id"] for r in roots] == ["root-a", "root-b"]
	assert roots[0]["children"][0]["id"] == "child-a"
	assert roots[0]["children"][0]["children"][0]["id"] == "grandchild-a"

	shallow = await client.get(
		f"{RESOURCES}/tree",
		headers=admin_headers,
		params={"root_id": "root-a", "depth": 1, "include_permissions": False},
	)
	node = shallow.json()["data"][0]
	assert node["children_ids"] == ["child-a"]
	assert node["children"] == []
	assert "permissions" not in node


async def test_filters_and_stats(client, admin_headers, hierarchy):
	await create_resource(
		client, admin_headers, hierarchy, "secret-plan",
		metadata={"classification": "restricted", "size": 100, "tags": ["plans"]},
	)
	await create_resource(client, admin_headers, hierarchy, "billing-api", type="api", metadata={"size": 50})

	restricted = await client.get(f"{RESOURCES}/classification/restricted", headers=admin_headers)
	assert [r["id"] for r in restricted.json()["data"]] == ["secret-plan"]

	apis = await client.get(f"{RESOURCES}/type/api", headers=admin_headers)
	assert [r["id"] for r in apis.json()["data"]] == ["billing-api"]

	tagged = await client.get(RESOURCES, headers=admin_headers, params={"tags": "plans"})
	assert [r["id"] for r in tagged.json()["data"]] == ["secret-plan"]

	stats = await client.get(f"{RESOURCES}/stats", headers=admin_headers)
	data = stats.json()["data"]
	assert data["total"] == 2
	assert data["total_size"] == 150
	assert data["by_type"] == {"document": 1, "api": 1}
	assert data["by_classification"] == {"restricted": 1, "internal": 1}


async def test_bulk_delete_skips_parents(client, admin_headers, hierarchy):
	await create_resource(client, admin_headers, hierarchy, "parent", type="folder")
	await create_resource(client, admin_headers, hierarchy, "kid", parent_id="parent")
	await create_resource(client, admin_headers, hierarchy, "loner")

	response = await client.request(
		"DELETE",
		f"{RESOURCES}/bulk/delete",
		headers=admin_headers,
		json={"ids": ["parent", "loner"]},
	)

	result = response.json()["data"]
	assert result["deleted_ids"] == ["loner"]
	assert result["skipped_ids"] == ["parent"]


async def test_parent_must_share_workspace(
	client, admin_headers, make_user, hierarchy, other_hierarchy, db_session
):
	other_admin = await make_user("admin", [other_hierarchy["workspace_id"]])
	other_headers = auth_headers(other_admin)
	await create_resource(client, other_headers, other_hierarchy, "secret-root", type="folder")

	response = await client.post(
		RESOURCES,
		headers=admin_headers,
		json={**hierarchy, "id": "intruder", "name": "intruder", "type": "file", "uri": "/x", "parent_id": "secret-root"},
	)
	assert response.status_code == 404
	assert response.json()["error"] == "Parent resource not found"

	await create_resource(client, admin_headers, hierarchy, "intruder")
	moved = await client.put(f"{RESOURCES}/intruder", headers=admin_headers, json={"parent_id": "secret-root"})
	assert moved.status_code == 404

	# a row left pointing across workspaces stays invisible to the other side
	await db_session.execute(
		update(ResourceModel).where(ResourceModel.id == "intruder").values(parent_id="secret-root")
	)
	await db_session.commit()

	forest = await client.get(f"{RESOURCES}/tree", headers=other_headers)
	assert forest.json()["data"][0]["children_ids"] == []
	fetched = await client.get(f"{RESOURCES}/secret-root", headers=other_headers)
	assert fetched.json()["data"]["children"] == []
	deleted = await client.delete(f"{RESOURCES}/secret-root", headers=other_headers)
	assert deleted.status_code == 200


async def test_tag_filter_matches_literal_tags(client, admin_headers, hierarchy):
	await create_resource(client, admin_headers, hierarchy, "menu", metadata={"tags": ["café"]})
	await create_resource(client, admin_headers, hierarchy, "axb-doc", metadata={"tags": ["axb"]})
	await create_resource(client, admin_headers, hierarchy, "quota", metadata={"tags": ["100%"]})

	accented = await client.get(RESOURCES, headers=admin_headers, params={"tags": "café"})
	assert [r["id"] for r in accented.json()["data"]] == ["menu"]

	wildcard = await client.get(RESOURCES, headers=admin_headers, params={"tags": "a_b"})
	assert wildcard.json()["data"] == []

	percent = await client.get(RESOURCES, headers=admin_headers, params={"tags": "100%"})
	assert [r["id"] for r in percent.json()["data"]] == ["quota"]
	assert (await client.get(RESOURCES, headers=admin_headers, params={"tags": "%"})).json()["data"] == []


async def test_update_clears_nullable_fields(client, admin_headers, hierarchy):
	await create_resource(client, admin_headers, hierarchy, "folder", type="folder")
	await create_resource(
		client, admin_headers, hierarchy, "notes",
		description="Meeting notes", display_name="Notes", parent_id="folder",
	)

	response = await client.put(
		f"{RESOURCES}/notes",
		headers=admin_headers,
		json={"description": None, "display_name": None, "parent_id": None, "name": None},
	)

	data = response.json()["data"]
	assert data["description"] is None
	assert data["display_name"] is None
	assert data["parent_id"] is None
	assert data["name"] == "notes"
