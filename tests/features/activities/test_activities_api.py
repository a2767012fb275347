# (c) Copyright Datacraft, 2026
"""Tests for the activity audit log endpoints."""
import csv
import io

from conftest import PASSWORD, auth_headers

ACTIVITIES = "/api/v1/activities"


def activity_payload(**fields):
	return {
		"type": "data_modification",
		"category": "operation",
		"action": "imported",
		"resource": {"type": "dataset", "id": "ds-1", "name": "Customers"},
		"description": "Customer dataset imported",
		**fields,
	}


async def test_changes_are_recorded(client, admin, admin_headers, hierarchy):
	await client.post("/api/v1/subjects", headers=admin_headers, json={**hierarchy, "display_name": "Alice"})

	response = await client.get(ACTIVITIES, headers=admin_headers)

	activities = response.json()["data"]
	assert len(activities) == 1
	activity = activities[0]
	assert activity["type"] == "resource_management"
	assert activity["category"] == "administration"
	assert activity["action"] == "created"
	assert activity["description"] == "Subject 'Alice' created"
	assert activity["actor"]["email"] == admin.email
	assert activity["resource"]["type"] == "subject"
	assert activity["workspace_id"] == hierarchy["workspace_id"]
	assert activity["tags"] == ["administration", "low-priority"]


async def test_create_activity(client, admin, admin_headers):
	response = await client.post(
		ACTIVITIES,
		headers={**admin_headers, "User-Agent": "pytest-agent"},
		json=activity_payload(severity="high"),
	)

	assert response.status_code == 201
	activity = response.json()["data"]
	assert activity["actor"]["id"] == admin.id
	assert activity["actor"]["type"] == "user"
	assert activity["metadata"]["user_agent"] == "pytest-agent"
	assert activity["tags"] == ["operation", "high-priority"]

	fetched = await client.get(f"{ACTIVITIES}/{activity['id']}", headers=admin_headers)
	assert fetched.json()["data"]["description"] == "Customer dataset imported"


async def test_create_activity_in_foreign_workspace(client, admin_headers):
	response = await client.post(
		ACTIVITIES,
		headers=admin_headers,
		json=activity_payload(workspace_id="someone-elses"),
	)

	assert response.status_code == 403


async def test_filter_activities(client, admin_headers):
	await client.post(ACTIVITIES, headers=admin_headers, json=activity_payload(severity="critical"))
	await client.post(
		ACTIVITIES,
		headers=admin_headers,
		json=activity_payload(action="exported", description="Quarterly report exported"),
	)

	critical = await client.get(ACTIVITIES, headers=admin_headers, params={"severity": "critical"})
	assert [a["severity"] for a in critical.json()["data"]] == ["critical"]

	both = await client.get(
		ACTIVITIES,
		headers=admin_headers,
		params=[("severity", "critical"), ("severity", "low")],
	)
	assert both.json()["pagination"]["total"] == 2

	found = await client.get(ACTIVITIES, headers=admin_headers, params={"search": "quarterly"})
	assert [a["action"] for a in found.json()["data"]] == ["exported"]


async def test_activity_stats(client, admin_headers):
	await client.post(ACTIVITIES, headers=admin_headers, json=activity_payload())
	await client.post(ACTIVITIES, headers=admin_headers, json=activity_payload(category="security", severity="high"))

	stats = (await client.get(f"{ACTIVITIES}/stats", headers=admin_headers)).json()["data"]

	assert stats["total"] == 2
	assert stats["recent_count"] == 2
	assert stats["by_category"] == {"operation": 1, "security": 1}
	assert stats["by_severity"] == {"low": 1, "high": 1}


async def test_export_csv(client, admin_headers):
	await client.post(ACTIVITIES, headers=admin_headers, json=activity_payload())

	response = await client.post(f"{ACTIVITIES}/export", headers=admin_headers, json={"format": "csv"})

	assert response.status_code == 200
	assert response.headers["content-type"].startswith("text/csv")
	assert response.headers["content-disposition"].startswith("attachment; filename=activities_")
	rows = list(csv.reader(io.StringIO(response.text)))
	assert rows[0] == ["Timestamp", "Type", "Category", "Action", "Actor", "Resource", "Severity", "Description"]
	assert rows[1][1:] == [
		"data_modification",
		"operation",
		"imported",
		"Test admin",
		"Customers",
		"low",
		"Customer dataset imported",
	]


async def test_export_json_with_filters(client, admin_headers):
	await client.post(ACTIVITIES, headers=admin_headers, json=activity_payload())
	await client.post(ACTIVITIES, headers=admin_headers, json=activity_payload(category="security"))

	response = await client.post(
		f"{ACTIVITIES}/export",
		headers=admin_headers,
		json={"format": "json", "filters": {"category": ["security"]}},
	)

	data = response.json()["data"]
	assert len(data) == 1
	assert data[0]["category"] == "security"


async def test_activities_scoped_to_workspaces(client, admin_headers, make_user, hierarchy):
	await client.post("/api/v1/subjects", headers=admin_headers, json={**hierarchy, "display_name": "Alice"})
	outsider = await make_user("basic", [])

	response = await client.get(ACTIVITIES, headers=auth_headers(outsider))

	assert response.json()["data"] == []


async def test_activity_defaults_to_assigned_workspace(client, admin_headers, make_user, hierarchy):
	created = await client.post(ACTIVITIES, headers=admin_headers, json=activity_payload())
	assert created.json()["data"]["workspace_id"] == hierarchy["workspace_id"]

	unassigned = await make_user("admin", [])
	response = await client.post(ACTIVITIES, headers=auth_headers(unassigned), json=activity_payload())
	assert response.status_code == 403

	outsider = await client.get(ACTIVITIES, headers=auth_headers(unassigned))
	assert outsider.json()["data"] == []


async def test_sign_in_events_visible_to_super_admins_only(
	client, admin, admin_headers, basic_headers, super_admin_headers
):
	login = await client.post("/api/v1/auth/login", json={"email": admin.email, "password": PASSWORD})
	assert login.status_code == 200

	everything = (await client.get(ACTIVITIES, headers=super_admin_headers)).json()["data"]
	sign_in = [a for a in everything if a["type"] == "authentication"]
	assert len(sign_in) == 1
	assert sign_in[0]["workspace_id"] is None

	for headers in (admin_headers, basic_headers):
		listed = (await client.get(ACTIVITIES, headers=headers, params={"type": "authentication"})).json()["data"]
		assert listed == []
		fetched = await client.get(f"{ACTIVITIES}/{sign_in[0]['id']}", headers=headers)
		assert fetched.status_code == 404
