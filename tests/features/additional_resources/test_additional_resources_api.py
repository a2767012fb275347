# (c) Copyright Datacraft, 2026
"""Tests for additional resource endpoints."""
ADDITIONAL = "/api/v1/additional-resources"


async def create_additional(client, headers, hierarchy, name, type="condition", **fields):
	payload = {**hierarchy, "name": name, "display_name": name.title(), "type": type, **fields}
	response = await client.post(ADDITIONAL, headers=headers, json=payload)
	assert response.status_code == 201, response.text
	return response.json()["data"]


async def test_create_uses_slug_id(client, admin, admin_headers, hierarchy):
	resource = await create_additional(
		client, admin_headers, hierarchy, "Business Hours",
		attributes={"timezone": "UTC"},
	)

	assert resource["id"] == "business_hours"
	assert resource["metadata"]["priority"] == "medium"
	assert resource["metadata"]["created_by"] == admin.email
	assert resource["evaluation_count"] == 0

	duplicate = await client.post(
		ADDITIONAL,
		headers=admin_headers,
		json={**hierarchy, "name": "business hours", "display_name": "Again", "type": "state"},
	)
	assert duplicate.status_code == 409


async def test_update_attributes(client, admin_headers, hierarchy):
	resource = await create_additional(
		client, admin_headers, hierarchy, "change freeze",
		type="state",
		attributes={"region": "eu", "reason": "audit"},
	)
	url = f"{ADDITIONAL}/{resource['id']}/attributes"

	merged = await client.patch(
		url,
		headers=admin_headers,
		json={"attributes": {"reason": None, "until": "friday"}},
	)
	assert merged.json()["data"]["attributes"] == {"region": "eu", "until": "friday"}

	replaced = await client.patch(
		url,
		headers=admin_headers,
		json={"attributes": {"active": True}, "operation": "replace"},
	)
	assert replaced.json()["data"]["attributes"] == {"active": True}


async def test_evaluate_rules(client, admin_headers, hierarchy):
	resource = await create_additional(
		client, admin_headers, hierarchy, "office hours",
		evaluation_rules=[
			{"field": "time.hour", "operator": "between", "value": [9, 17]},
			{"field": "location", "operator": "equals", "value": "HQ", "case_insensitive": True},
		],
	)
	url = f"{ADDITIONAL}/{resource['id']}/evaluate"

	passing = await client.post(url, headers=admin_headers, json={"context": {"time": {"hour": 10}, "location": "hq"}})
	data = passing.json()["data"]
	assert data["id"] == "office_hours"
	assert data["result"] is True
	assert data["evaluation_count"] == 1
	assert data["evaluated_at"]
	assert [r["passed"] for r in data["rule_results"]] == [True, True]

	failing = await client.post(url, headers=admin_headers, json={"context": {"time": {"hour": 20}}})
	data = failing.json()["data"]
	assert data["result"] is False
	assert data["evaluation_count"] == 2
	assert data["rule_results"][0]["actual"] == 20
	assert data["rule_results"][1]["actual"] is None


async def test_by_type_and_stats(client, admin_headers, hierarchy):
	await create_additional(client, admin_headers, hierarchy, "weekday")
	await create_additional(client, admin_headers, hierarchy, "holiday", active=False)
	await create_additional(
		client, admin_headers, hierarchy, "manager signoff",
		type="approval", metadata={"priority": "high"},
	)

	conditions = await client.get(f"{ADDITIONAL}/type/condition", headers=admin_headers)
	body = conditions.json()
	assert body["count"] == 1
	assert [r["name"] for r in body["data"]] == ["weekday"]

	listing = await client.get(ADDITIONAL, headers=admin_headers, params={"type": "approval"})
	assert [r["name"] for r in listing.json()["data"]] == ["manager signoff"]

	stats = (await client.get(f"{ADDITIONAL}/stats", headers=admin_headers)).json()["data"]
	assert stats == {
		"total": 3,
		"active": 2,
		"inactive": 1,
		"by_type": {"condition": 2, "approval": 1},
		"by_priority": {"medium": 2, "high": 1},
	}


async def test_system_resources_cannot_be_deleted(client, admin_headers, hierarchy):
	system = await create_additional(
		client, admin_headers, hierarchy, "built in",
		metadata={"is_system": True},
	)
	plain = await create_additional(client, admin_headers, hierarchy, "plain")

	response = await client.delete(f"{ADDITIONAL}/{system['id']}", headers=admin_headers)
	assert response.status_code == 400

	bulk = await client.request(
		"DELETE",
		f"{ADDITIONAL}/bulk/delete",
		headers=admin_headers,
		json={"ids": [system["id"], plain["id"]]},
	)
	result = bulk.json()["data"]
	assert result["deleted_ids"] == [plain["id"]]
	assert result["skipped_ids"] == [system["id"]]

	gone = await client.get(f"{ADDITIONAL}/{plain['id']}", headers=admin_headers)
	assert gone.status_code == 404


async def test_basic_user_can_evaluate_but_not_create(client, admin_headers, basic_headers, hierarchy):
	resource = await create_additional(client, admin_headers, hierarchy, "open")

	evaluated = await client.post(f"{ADDITIONAL}/{resource['id']}/evaluate", headers=basic_headers, json={})
	assert evaluated.json()["data"]["result"] is True
	assert evaluated.json()["data"]["rule_results"] == []

	response = await client.post(
		ADDITIONAL,
		headers=basic_headers,
		json={**hierarchy, "name": "nope", "display_name": "Nope", "type": "status"},
	)
	assert response.status_code == 403
