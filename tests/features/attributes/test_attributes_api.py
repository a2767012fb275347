# (c) Copyright Datacraft, 2026
"""Tests for attribute catalog endpoints."""
from conftest import auth_headers

ATTRIBUTES = "/api/v1/attributes"


async def create_attribute(client, headers, hierarchy, name, data_type="string", categories=("subject",), **fields):
	payload = {
		**hierarchy,
		"name": name,
		"display_name": name.replace("_", " ").title(),
		"categories": list(categories),
		"data_type": data_type,
		**fields,
	}
	response = await client.post(ATTRIBUTES, headers=headers, json=payload)
	assert response.status_code == 201, response.text
	return response.json()["data"]


async def test_create_attribute(client, admin, admin_headers, hierarchy):
	attribute = await create_attribute(
		client, admin_headers, hierarchy, "department",
		constraints={"enum_values": ["hr", "engineering"]},
		metadata={"tags": ["org"]},
	)

	assert attribute["id"] == "department"
	assert attribute["scope"] == "environment"
	assert attribute["inheritance_rules"]["can_override"] is True
	assert attribute["metadata"]["created_by"] == admin.email
	assert attribute["metadata"]["tags"] == ["org"]
	assert attribute["policy_count"] == 0

	duplicate = await client.post(
		ATTRIBUTES,
		headers=admin_headers,
		json={**hierarchy, "name": "department", "display_name": "Again", "categories": ["resource"], "data_type": "string"},
	)
	assert duplicate.status_code == 409


async def test_create_rejects_bad_definitions(client, admin_headers, hierarchy):
	base = {**hierarchy, "name": "age", "display_name": "Age"}

	no_category = await client.post(
		ATTRIBUTES, headers=admin_headers, json={**base, "categories": [], "data_type": "number"}
	)
	assert no_category.status_code == 400

	mixed = await client.post(
		ATTRIBUTES,
		headers=admin_headers,
		json={**base, "categories": ["subject"], "data_type": "number", "constraints": {"max_length": 3}},
	)
	assert mixed.status_code == 400
	assert mixed.json()["error"] == "Number type cannot have string constraints"

	bad_default = await client.post(
		ATTRIBUTES,
		headers=admin_headers,
		json={
			**base,
			"categories": ["subject"],
			"data_type": "number",
			"constraints": {"min_value": 18},
			"default_value": 5,
		},
	)
	assert bad_default.status_code == 400
	assert bad_default.json()["details"] == ["Value must be at least 18"]


async def test_validate_value(client, admin_headers, basic_headers, hierarchy):
	attribute = await create_attribute(
		client, admin_headers, hierarchy, "clearance", "number",
		constraints={"min_value": 1, "max_value": 5},
	)
	url = f"{ATTRIBUTES}/{attribute['id']}/validate"

	ok = await client.post(url, headers=basic_headers, json={"value": "3"})
	assert ok.json()["data"] == {"valid": True, "errors": [], "normalized_value": 3}

	high = await client.post(url, headers=basic_headers, json={"value": 9})
	assert high.json()["data"]["valid"] is False
	assert high.json()["data"]["errors"] == ["Value cannot exceed 5"]

	await client.put(f"{ATTRIBUTES}/{attribute['id']}", headers=admin_headers, json={"active": False})
	inactive = await client.post(url, headers=basic_headers, json={"value": 3})
	assert inactive.status_code == 404


async def test_category_listing_and_schema(client, admin_headers, hierarchy):
	await create_attribute(client, admin_headers, hierarchy, "department", is_required=True)
	await create_attribute(client, admin_headers, hierarchy, "sensitivity", categories=["resource"])
	await create_attribute(client, admin_headers, hierarchy, "owner", categories=["subject", "resource"])
	await create_attribute(client, admin_headers, hierarchy, "retired", active=False)

	subjects = await client.get(f"{ATTRIBUTES}/category/subject", headers=admin_headers)
	assert [a["name"] for a in subjects.json()["data"]] == ["department", "owner"]
	assert subjects.json()["pagination"]["total"] == 2

	bad = await client.get(f"{ATTRIBUTES}/category/planet", headers=admin_headers)
	assert bad.status_code == 400

	schema = (await client.get(f"{ATTRIBUTES}/schema/resource", headers=admin_headers)).json()["data"]
	assert schema["type"] == "object"
	assert sorted(schema["properties"]) == ["owner", "sensitivity"]
	assert schema["required"] == []

	filtered = await client.get(ATTRIBUTES, headers=admin_headers, params={"categories": "resource"})
	assert [a["name"] for a in filtered.json()["data"]] == ["owner", "sensitivity"]


async def test_update_attribute(client, admin_headers, hierarchy):
	attribute = await create_attribute(
		client, admin_headers, hierarchy, "level", description="Seniority", default_value="junior",
	)
	url = f"{ATTRIBUTES}/{attribute['id']}"

	updated = await client.put(url, headers=admin_headers, json={"description": None, "default_value": None})
	data = updated.json()["data"]
	assert data["description"] is None
	assert data["default_value"] is None

	conflicting = await client.put(url, headers=admin_headers, json={"constraints": {"min_value": 1}})
	assert conflicting.status_code == 400


async def test_delete_attribute_in_use(client, admin_headers, hierarchy):
	attribute = await create_attribute(client, admin_headers, hierarchy, "department")
	spare = await create_attribute(client, admin_headers, hierarchy, "nickname")
	response = await client.post(
		"/api/v1/policies",
		headers=admin_headers,
		json={
			**hierarchy,
			"name": "engineers only",
			"effect": "Allow",
			"rules": [{
				"subject": {
					"type": "employee",
					"attributes": [{"name": "department", "operator": "equals", "value": "engineering"}],
				},
			}],
		},
	)
	assert response.status_code == 201, response.text

	fetched = (await client.get(f"{ATTRIBUTES}/{attribute['id']}", headers=admin_headers)).json()["data"]
	assert fetched["policy_count"] == 1
	assert fetched["used_in_policies"][0]["name"] == "engineers only"

	blocked = await client.delete(f"{ATTRIBUTES}/{attribute['id']}", headers=admin_headers)
	assert blocked.status_code == 409
	assert blocked.json()["error"] == (
		'Unable to delete "Department" - This attribute is currently being used in 1 policy'
	)

	bulk = await client.request(
		"DELETE",
		f"{ATTRIBUTES}/bulk/delete",
		headers=admin_headers,
		json={"ids": [attribute["id"], spare["id"]]},
	)
	result = bulk.json()["data"]
	assert result["deleted_ids"] == [spare["id"]]
	assert result["skipped_ids"] == [attribute["id"]]


async def test_system_attribute_cannot_be_deleted(client, admin_headers, hierarchy):
	attribute = await create_attribute(client, admin_headers, hierarchy, "email", metadata={"is_system": True})

	response = await client.delete(f"{ATTRIBUTES}/{attribute['id']}", headers=admin_headers)

	assert response.status_code == 400
	assert response.json()["error"] == "Cannot delete system attributes"


async def test_bulk_update_and_stats(client, admin_headers, hierarchy):
	one = await create_attribute(client, admin_headers, hierarchy, "region")
	two = await create_attribute(client, admin_headers, hierarchy, "score", "number", categories=["resource"])

	response = await client.put(
		f"{ATTRIBUTES}/bulk/update",
		headers=admin_headers,
		json={"ids": [one["id"], two["id"]], "updates": {"is_required": True}},
	)
	assert response.json()["data"] == {"matched_count": 2, "modified_count": 2}

	stats = (await client.get(f"{ATTRIBUTES}/stats", headers=admin_headers)).json()["data"]
	assert stats == {
		"total": 2,
		"active": 2,
		"required": 2,
		"custom": 2,
		"system": 0,
		"by_category": {
			"subject": {"count": 1, "required": 1},
			"resource": {"count": 1, "required": 1},
		},
		"by_data_type": {"string": 1, "number": 1},
	}


async def test_attributes_are_scoped_to_workspaces(client, admin_headers, make_user, hierarchy):
	attribute = await create_attribute(client, admin_headers, hierarchy, "department")
	outsider = auth_headers(await make_user("admin", []))

	assert (await client.get(ATTRIBUTES, headers=outsider)).json()["data"] == []
	missing = await client.get(f"{ATTRIBUTES}/{attribute['id']}", headers=outsider)
	assert missing.status_code == 404

	response = await client.post(
		ATTRIBUTES,
		headers=outsider,
		json={**hierarchy, "name": "x", "display_name": "X", "categories": ["subject"], "data_type": "string"},
	)
	assert response.status_code == 403
