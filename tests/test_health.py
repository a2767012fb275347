# (c) Copyright Datacraft, 2026
"""Tests for health, version and the error envelope."""
from craft.core.version import __version__


async def test_health(client):
	response = await client.get("/health")

	assert response.status_code == 200
	body = response.json()
	assert body["success"] is True
	assert body["data"]["status"] == "ok"
	assert body["data"]["version"] == __version__
	assert response.headers["X-Content-Type-Options"] == "nosniff"


async def test_version_under_api_prefix(client):
	response = await client.get("/api/v1/version")

	assert response.status_code == 200
	assert response.json()["data"] == {"version": __version__}


async def test_unauthenticated_request_is_rejected(client):
	response = await client.get("/api/v1/subjects")

	assert response.status_code == 401
	body = response.json()
	assert body["success"] is False
	assert body["code"] == "AUTHENTICATION_ERROR"
	assert body["error"] == "Access token required"


async def test_invalid_token_is_rejected(client):
	response = await client.get(
		"/api/v1/subjects",
		headers={"Authorization": "Bearer not-a-token"},
	)

	assert response.status_code == 401
	assert response.json()["error"] == "Invalid token"
