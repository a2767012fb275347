# (c) Copyright Datacraft, 2026
"""Tests for registration, login and account endpoints."""
from conftest import PASSWORD, auth_headers

AUTH = "/api/v1/auth"


async def test_register_returns_token_for_basic_user(client):
	response = await client.post(
		f"{AUTH}/register",
		json={"name": "Grace Hopper", "email": "Grace@Example.com", "password": "s3cure-pass"},
	)

	assert response.status_code == 201
	data = response.json()["data"]
	assert data["token_type"] == "bearer"
	assert data["expires_in"] > 0
	assert data["user"]["email"] == "grace@example.com"
	assert data["user"]["role"] == "basic"
	assert "hashed_password" not in data["user"]

	profile = await client.get(
		f"{AUTH}/profile",
		headers={"Authorization": f"Bearer {data['token']}"},
	)
	assert profile.status_code == 200
	assert profile.json()["data"]["name"] == "Grace Hopper"


async def test_register_duplicate_email(client, admin):
	response = await client.post(
		f"{AUTH}/register",
		json={"name": "Someone", "email": admin.email, "password": "s3cure-pass"},
	)

	assert response.status_code == 409
	assert response.json()["code"] == "CONFLICT"


async def test_register_rejects_short_password(client):
	response = await client.post(
		f"{AUTH}/register",
		json={"name": "Shorty", "email": "short@example.com", "password": "123"},
	)

	assert response.status_code == 400
	body = response.json()
	assert body["code"] == "VALIDATION_ERROR"
	assert body["details"][0]["field"] == "password"


async def test_login(client, admin):
	response = await client.post(f"{AUTH}/login", json={"email": admin.email, "password": PASSWORD})

	assert response.status_code == 200
	body = response.json()
	assert body["message"] == "Login successful"
	assert body["data"]["user"]["id"] == admin.id
	assert body["data"]["user"]["last_login"] is not None


async def test_login_wrong_password(client, admin):
	response = await client.post(f"{AUTH}/login", json={"email": admin.email, "password": "wrong-password"})

	assert response.status_code == 401
	assert response.json()["error"] == "Invalid email or password"
	assert response.headers["WWW-Authenticate"] == "Bearer"


async def test_login_inactive_account(client, make_user):
	user = await make_user("basic", active=False)

	response = await client.post(f"{AUTH}/login", json={"email": user.email, "password": PASSWORD})

	assert response.status_code == 401
	assert response.json()["error"] == "Account is inactive"


async def test_change_password(client, admin, admin_headers):
	response = await client.post(
		f"{AUTH}/change-password",
		headers=admin_headers,
		json={"current_password": PASSWORD, "new_password": "brand-new-pass"},
	)
	assert response.status_code == 200

	old = await client.post(f"{AUTH}/login", json={"email": admin.email, "password": PASSWORD})
	assert old.status_code == 401
	new = await client.post(f"{AUTH}/login", json={"email": admin.email, "password": "brand-new-pass"})
	assert new.status_code == 200


async def test_change_password_requires_current_password(client, admin_headers):
	response = await client.post(
		f"{AUTH}/change-password",
		headers=admin_headers,
		json={"current_password": "not-my-password", "new_password": "brand-new-pass"},
	)

	assert response.status_code == 401


async def test_validate_token(client, admin):
	valid = await client.post(f"{AUTH}/validate-token", headers=auth_headers(admin))
	assert valid.json()["data"]["valid"] is True
	assert valid.json()["data"]["user"]["email"] == admin.email

	anonymous = await client.post(f"{AUTH}/validate-token")
	assert anonymous.json()["data"] == {"valid": False, "user": None}
