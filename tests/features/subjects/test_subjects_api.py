# (c) Copyright Datacraft, 2026
"""Tests for subject endpoints."""
SUBJECTS = "/api/v1/subjects"


async def create_subject(client, headers, hierarchy, **fields):
	response = await client.post(SUBJECTS, headers=headers, json={**hierarchy, **fields})
	assert response.status_code == 201, response.text
	return response.json()["data"]


async def reference_in_policy(client, headers, hierarchy, subject_id):
	response = await client.post(
		"/api/v1/policies",
		headers=headers,
		json={**hierarchy, "name": f"uses {subject_id}", "effect": "Allow", "subjects": [subject_id]},
	)
	assert response.status_code == 201, response.text


async def test_create_subject(client, admin, admin_headers, hierarchy):
	subject = await create_subject(
		client, admin_headers, hierarchy,
		display_name="Alice Smith",
		email="alice@example.com",
		department="engineering",
		metadata={"tags": ["staff"], "owner": "hr"},
	)

	assert subject["id"].startswith("subject-")
	assert subject["name"] == "alicesmith"
	assert subject["type"] == "user"
	assert subject["status"] == "active"
	assert subject["children"] == []
	assert subject["metadata"]["created_by"] == admin.email
	assert subject["metadata"]["tags"] == ["staff"]
	assert subject["metadata"]["owner"] == "hr"
	assert subject["metadata"]["version"] == "1.0.0"

	fetched = await client.get(f"{SUBJECTS}/{subject['id']}", headers=admin_headers)
	assert fetched.status_code == 200
	assert fetched.json()["data"]["email"] == "alice@example.com"


async def test_duplicate_subject_in_environment(client, admin_headers, hierarchy):
	await create_subject(client, admin_headers, hierarchy, display_name="Alice", email="alice@example.com")

	same_email = await client.post(
		SUBJECTS,
		headers=admin_headers,
		json={**hierarchy, "display_name": "Someone Else", "email": "alice@example.com"},
	)
	assert same_email.status_code == 409

	same_id = await client.post(
		SUBJECTS,
		headers=admin_headers,
		json={**hierarchy, "id": "fixed-id", "display_name": "Bob"},
	)
	assert same_id.status_code == 201
	again = await client.post(
		SUBJECTS,
		headers=admin_headers,
		json={**hierarchy, "id": "fixed-id", "display_name": "Carol"},
	)
	assert again.status_code == 409


async def test_unknown_subject(client, admin_headers):
	response = await client.get(f"{SUBJECTS}/missing", headers=admin_headers)

	assert response.status_code == 404
	assert response.json() == {"success": False, "error": "Subject not found", "code": "NOT_FOUND"}


async def test_missing_environment(client, admin_headers, hierarchy):
	response = await client.post(
		SUBJECTS,
		headers=admin_headers,
		json={**hierarchy, "environment_id": "nowhere", "display_name": "Alice"},
	)

	assert response.status_code == 404
	assert response.json()["error"] == "Environment not found"


async def test_list_and_filter_subjects(client, admin_headers, hierarchy):
	await create_subject(client, admin_headers, hierarchy, display_name="Alice", department="engineering")
	await create_subject(client, admin_headers, hierarchy, display_name="Ops Team", type="group")
	await create_subject(client, admin_headers, hierarchy, display_name="Billing Bot", type="service", active=False)

	everything = await client.get(SUBJECTS, headers=admin_headers)
	assert everything.json()["pagination"]["total"] == 3

	groups = await client.get(SUBJECTS, headers=admin_headers, params={"type": "group"})
	assert [s["display_name"] for s in groups.json()["data"]] == ["Ops Team"]

	found = await client.get(SUBJECTS, headers=admin_headers, params={"search": "engin"})
	assert [s["display_name"] for s in found.json()["data"]] == ["Alice"]

	services = await client.get(f"{SUBJECTS}/type/service", headers=admin_headers)
	assert services.json()["data"] == []

	stats = await client.get(f"{SUBJECTS}/stats", headers=admin_headers)
	assert stats.json()["data"] == {
		"total": 3,
		"active": 2,
		"by_type": {"user": 1, "group": 1, "service": 1},
	}


async def test_update_subject(client, admin_headers, hierarchy):
	subject = await create_subject(client, admin_headers, hierarchy, display_name="Alice")

	response = await client.put(
		f"{SUBJECTS}/{subject['id']}",
		headers=admin_headers,
		json={"role": "manager", "metadata": {"tags": ["lead"]}},
	)

	assert response.status_code == 200
	data = response.json()["data"]
	assert data["role"] == "manager"
	assert data["display_name"] == "Alice"
	assert data["metadata"]["tags"] == ["lead"]


async def test_subject_hierarchy_and_cycles(client, admin_headers, hierarchy):
	parent = await create_subject(client, admin_headers, hierarchy, display_name="Engineering", type="group")
	child = await create_subject(
		client, admin_headers, hierarchy,
		display_name="Platform", type="group", parent_id=parent["id"],
	)

	fetched = await client.get(f"{SUBJECTS}/{parent['id']}", headers=admin_headers)
	assert fetched.json()["data"]["children"] == [child["id"]]

	tree = await client.get(f"{SUBJECTS}/{parent['id']}/hierarchy", headers=admin_headers)
	assert [c["id"] for c in tree.json()["data"]["children"]] == [child["id"]]

	cycle = await client.put(
		f"{SUBJECTS}/{parent['id']}",
		headers=admin_headers,
		json={"parent_id": child["id"]},
	)
	assert cycle.status_code == 400

	own = await client.put(
		f"{SUBJECTS}/{parent['id']}",
		headers=admin_headers,
		json={"parent_id": parent["id"]},
	)
	assert own.status_code == 400
	assert own.json()["error"] == "Subject cannot be its own parent"

	detached = await client.put(
		f"{SUBJECTS}/{child['id']}",
		headers=admin_headers,
		json={"parent_id": None},
	)
	assert detached.json()["data"]["parent_id"] is None


async def test_delete_subject_in_use(client, admin_headers, hierarchy):
	subject = await create_subject(client, admin_headers, hierarchy, display_name="Alice")
	await reference_in_policy(client, admin_headers, hierarchy, subject["id"])

	response = await client.delete(f"{SUBJECTS}/{subject['id']}", headers=admin_headers)

	assert response.status_code == 409
	assert response.json()["error"] == (
		'Unable to delete "Alice" - This subject is currently being used in 1 policy'
	)


async def test_delete_system_subject(client, admin_headers, hierarchy):
	subject = await create_subject(
		client, admin_headers, hierarchy,
		display_name="Root", metadata={"is_system": True},
	)

	response = await client.delete(f"{SUBJECTS}/{subject['id']}", headers=admin_headers)

	assert response.status_code == 400


async def test_bulk_update_and_delete(client, admin_headers, hierarchy):
	alice = await create_subject(client, admin_headers, hierarchy, display_name="Alice")
	bob = await create_subject(client, admin_headers, hierarchy, display_name="Bob")
	carol = await create_subject(client, admin_headers, hierarchy, display_name="Carol")
	await reference_in_policy(client, admin_headers, hierarchy, carol["id"])

	updated = await client.put(
		f"{SUBJECTS}/bulk/update",
		headers=admin_headers,
		json={"ids": [alice["id"], bob["id"], "missing"], "updates": {"status": "inactive"}},
	)
	assert updated.json()["data"] == {"matched_count": 2, "modified_count": 2}

	deleted = await client.request(
		"DELETE",
		f"{SUBJECTS}/bulk/delete",
		headers=admin_headers,
		json={"ids": [alice["id"], carol["id"]]},
	)
	result = deleted.json()["data"]
	assert result["deleted_count"] == 1
	assert result["deleted_ids"] == [alice["id"]]
	assert result["skipped_ids"] == [carol["id"]]

	remaining = await client.get(SUBJECTS, headers=admin_headers)
	assert {s["id"] for s in remaining.json()["data"]} == {bob["id"], carol["id"]}


async def test_basic_user_reads_but_cannot_write(client, admin_headers, basic_headers, hierarchy):
	await create_subject(client, admin_headers, hierarchy, display_name="Alice")

	listing = await client.get(SUBJECTS, headers=basic_headers)
	assert listing.json()["pagination"]["total"] == 1

	response = await client.post(SUBJECTS, headers=basic_headers, json={**hierarchy, "display_name": "Eve"})
	assert response.status_code == 403


async def test_create_outside_assigned_workspace(client, admin_headers, hierarchy):
	response = await client.post(
		SUBJECTS,
		headers=admin_headers,
		json={**hierarchy, "workspace_id": "someone-elses", "display_name": "Mallory"},
	)

	assert response.status_code == 403
	assert response.json()["error"] == "Access denied to this workspace"


async def test_delete_subject_named_in_rule_with_accents(client, admin_headers, hierarchy):
	subject = await create_subject(client, admin_headers, hierarchy, display_name="José García")
	assert subject["name"] == "joségarcía"
	response = await client.post(
		"/api/v1/policies",
		headers=admin_headers,
		json={
			**hierarchy,
			"name": "josé reads",
			"effect": "Allow",
			"rules": [{"subject": {"type": "joségarcía"}, "action": {"name": "read"}}],
		},
	)
	assert response.status_code == 201, response.text

	deleted = await client.delete(f"{SUBJECTS}/{subject['id']}", headers=admin_headers)

	assert deleted.status_code == 409
	assert "currently being used in 1 policy" in deleted.json()["error"]
