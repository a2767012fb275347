# (c) Copyright Datacraft, 2026
"""Tests for user administration endpoints."""
USERS = "/api/v1/users"


async def create_user(client, headers, email, **fields):
	payload = {"email": email, "name": email.split("@")[0], "password": "s3cret-pass", **fields}
	response = await client.post(USERS, headers=headers, json=payload)
	assert response.status_code == 201, response.text
	return response.json()["data"]


async def test_only_super_admin(client, admin_headers):
	response = await client.get(USERS, headers=admin_headers)

	assert response.status_code == 403
	assert response.json()["details"]["required_roles"] == ["super_admin"]


async def test_create_user(client, super_admin_headers, hierarchy):
	user = await create_user(
		client, super_admin_headers, "Dana@Example.com",
		role="admin",
		assigned_workspaces=[hierarchy["workspace_id"]],
	)

	assert user["email"] == "dana@example.com"
	assert user["role"] == "admin"
	assert user["assigned_workspaces"] == [hierarchy["workspace_id"]]
	assert "hashed_password" not in user

	duplicate = await client.post(
		USERS,
		headers=super_admin_headers,
		json={"email": "dana@example.com", "name": "Dana", "password": "another-pass"},
	)
	assert duplicate.status_code == 409

	login = await client.post("/api/v1/auth/login", json={"email": "dana@example.com", "password": "s3cret-pass"})
	assert login.status_code == 200


async def test_update_user(client, super_admin_headers):
	user = await create_user(client, super_admin_headers, "erin@example.com")

	response = await client.put(
		f"{USERS}/{user['id']}",
		headers=super_admin_headers,
		json={"name": "Erin Ops", "department": "operations"},
	)

	data = response.json()["data"]
	assert data["name"] == "Erin Ops"
	assert data["department"] == "operations"
	assert data["email"] == "erin@example.com"


async def test_change_role(client, super_admin, super_admin_headers):
	user = await create_user(client, super_admin_headers, "frank@example.com")

	promoted = await client.put(f"{USERS}/{user['id']}/role", headers=super_admin_headers, json={"role": "admin"})
	assert promoted.json()["data"]["role"] == "admin"

	own = await client.put(f"{USERS}/{super_admin.id}/role", headers=super_admin_headers, json={"role": "basic"})
	assert own.status_code == 400
	assert own.json()["error"] == "You cannot change your own role"


async def test_assign_workspaces(client, super_admin_headers, hierarchy):
	user = await create_user(client, super_admin_headers, "gina@example.com")
	url = f"{USERS}/{user['id']}/workspaces"

	missing = await client.put(
		url,
		headers=super_admin_headers,
		json={"workspace_ids": [hierarchy["workspace_id"], "ghost"]},
	)
	assert missing.status_code == 404
	assert missing.json()["details"] == {"missing_ids": ["ghost"]}

	assigned = await client.put(
		url,
		headers=super_admin_headers,
		json={"workspace_ids": [hierarchy["workspace_id"], hierarchy["workspace_id"]]},
	)
	assert assigned.json()["data"]["assigned_workspaces"] == [hierarchy["workspace_id"]]


async def test_toggle_status(client, super_admin, super_admin_headers):
	user = await create_user(client, super_admin_headers, "hal@example.com")

	toggled = await client.put(f"{USERS}/{user['id']}/toggle-status", headers=super_admin_headers)
	assert toggled.json()["data"]["active"] is False
	assert toggled.json()["message"] == "User deactivated successfully"

	login = await client.post("/api/v1/auth/login", json={"email": "hal@example.com", "password": "s3cret-pass"})
	assert login.status_code == 401

	own = await client.put(f"{USERS}/{super_admin.id}/toggle-status", headers=super_admin_headers)
	assert own.status_code == 400


async def test_delete_user(client, super_admin, super_admin_headers):
	user = await create_user(client, super_admin_headers, "ivy@example.com")

	deleted = await client.delete(f"{USERS}/{user['id']}", headers=super_admin_headers)
	assert deleted.status_code == 200
	missing = await client.get(f"{USERS}/{user['id']}", headers=super_admin_headers)
	assert missing.status_code == 404

	own = await client.delete(f"{USERS}/{super_admin.id}", headers=super_admin_headers)
	assert own.status_code == 400


async def test_list_and_stats(client, super_admin_headers):
	await create_user(client, super_admin_headers, "jo@example.com", department="finance")
	await create_user(client, super_admin_headers, "kim@example.com", role="admin", active=False)

	finance = await client.get(USERS, headers=super_admin_headers, params={"department": "finance"})
	assert [u["email"] for u in finance.json()["data"]] == ["jo@example.com"]

	inactive = await client.get(USERS, headers=super_admin_headers, params={"active": False})
	assert [u["email"] for u in inactive.json()["data"]] == ["kim@example.com"]

	stats = (await client.get(f"{USERS}/stats", headers=super_admin_headers)).json()["data"]
	assert stats == {
		"total": 3,
		"active": 2,
		"by_role": {"super_admin": 1, "basic": 1, "admin": 1},
	}
