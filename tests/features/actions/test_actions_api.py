# (c) Copyright Datacraft, 2026
"""Tests for action endpoints."""
ACTIONS = "/api/v1/actions"


async def create_action(client, headers, hierarchy, name, **fields):
	payload = {**hierarchy, "name": name, "display_name": name.title(), "category": "read", **fields}
	response = await client.post(ACTIONS, headers=headers, json=payload)
	assert response.status_code == 201, response.text
	return response.json()["data"]


async def test_create_action(client, admin_headers, hierarchy):
	action = await create_action(
		client, admin_headers, hierarchy, "read",
		http_method="GET",
		endpoint="/documents/{id}",
		resource_types=["document"],
	)

	assert action["id"].startswith("action-")
	assert action["type"] == "atomic"
	assert action["risk_level"] == "low"
	assert action["http_method"] == "GET"

	duplicate = await client.post(
		ACTIONS,
		headers=admin_headers,
		json={**hierarchy, "name": "read", "display_name": "Read again", "category": "read"},
	)
	assert duplicate.status_code == 409


async def test_composite_action_needs_members(client, admin_headers, hierarchy):
	empty = await client.post(
		ACTIONS,
		headers=admin_headers,
		json={**hierarchy, "name": "manage", "display_name": "Manage", "category": "admin", "type": "composite"},
	)
	assert empty.status_code == 400

	missing = await client.post(
		ACTIONS,
		headers=admin_headers,
		json={
			**hierarchy,
			"name": "manage",
			"display_name": "Manage",
			"category": "admin",
			"type": "composite",
			"composite_actions": ["nope"],
		},
	)
	assert missing.status_code == 404
	assert missing.json()["details"] == {"missing_ids": ["nope"]}

	read = await create_action(client, admin_headers, hierarchy, "read")
	write = await create_action(client, admin_headers, hierarchy, "write", category="write")
	manage = await create_action(
		client, admin_headers, hierarchy, "manage",
		category="admin",
		type="composite",
		composite_actions=[read["id"], write["id"]],
	)
	assert manage["composite_actions"] == [read["id"], write["id"]]


async def test_actions_for_resource_type(client, admin_headers, hierarchy):
	await create_action(client, admin_headers, hierarchy, "view", resource_types=["document"])
	await create_action(client, admin_headers, hierarchy, "audit", resource_types=["*"])
	await create_action(client, admin_headers, hierarchy, "query", resource_types=["database"])

	with_generic = await client.get(f"{ACTIONS}/resource/document", headers=admin_headers)
	assert {a["name"] for a in with_generic.json()["data"]} == {"view", "audit"}

	specific = await client.get(
		f"{ACTIONS}/resource/document",
		headers=admin_headers,
		params={"include_generic": False},
	)
	assert [a["name"] for a in specific.json()["data"]] == ["view"]


async def test_category_risk_and_stats(client, admin_headers, hierarchy):
	await create_action(client, admin_headers, hierarchy, "view")
	await create_action(client, admin_headers, hierarchy, "purge", category="delete", risk_level="critical")

	deletes = await client.get(f"{ACTIONS}/category/delete", headers=admin_headers)
	assert [a["name"] for a in deletes.json()["data"]] == ["purge"]

	critical = await client.get(f"{ACTIONS}/risk/critical", headers=admin_headers)
	assert [a["name"] for a in critical.json()["data"]] == ["purge"]

	stats = (await client.get(f"{ACTIONS}/stats", headers=admin_headers)).json()["data"]
	assert stats["total"] == 2
	assert stats["custom"] == 2
	assert stats["system"] == 0
	assert stats["by_category"] == {"read": 1, "delete": 1}
	assert stats["by_risk_level"] == {"low": 1, "critical": 1}


async def test_action_hierarchy(client, admin_headers, hierarchy):
	parent = await create_action(client, admin_headers, hierarchy, "write", category="write")
	child = await create_action(client, admin_headers, hierarchy, "append", category="write", parent_id=parent["id"])

	response = await client.get(f"{ACTIONS}/{parent['id']}/hierarchy", headers=admin_headers)

	data = response.json()["data"]
	assert data["children_ids"] == [child["id"]]
	assert data["children"][0]["name"] == "append"


async def test_delete_action_in_use(client, admin_headers, hierarchy):
	action = await create_action(client, admin_headers, hierarchy, "export", display_name="Export")
	await client.post(
		"/api/v1/policies",
		headers=admin_headers,
		json={**hierarchy, "name": "no exports", "effect": "Deny", "actions": ["export"]},
	)

	response = await client.delete(f"{ACTIONS}/{action['id']}", headers=admin_headers)

	assert response.status_code == 409
	assert response.json()["details"] == {"policy_count": 1}

	bulk = await client.request(
		"DELETE",
		f"{ACTIONS}/bulk/delete",
		headers=admin_headers,
		json={"ids": [action["id"]]},
	)
	assert bulk.json()["data"]["deleted_count"] == 0
	assert bulk.json()["data"]["skipped_ids"] == [action["id"]]


async def test_bulk_rename_is_rejected(client, admin_headers, hierarchy):
	one = await create_action(client, admin_headers, hierarchy, "one")
	two = await create_action(client, admin_headers, hierarchy, "two")

	response = await client.put(
		f"{ACTIONS}/bulk/update",
		headers=admin_headers,
		json={"ids": [one["id"], two["id"]], "updates": {"name": "same"}},
	)
	assert response.status_code == 400

	response = await client.put(
		f"{ACTIONS}/bulk/update",
		headers=admin_headers,
		json={"ids": [one["id"], two["id"]], "updates": {"risk_level": "high"}},
	)
	assert response.json()["data"] == {"matched_count": 2, "modified_count": 2}
