from fastapi.testclient import TestClient

from citybuild.core.config import Settings
from citybuild.main import create_app


def test_integrity_on_seed_is_clean(client):
    r = client.get("/api/v1/dev/integrity")
    assert r.status_code == 200
    body = r.json()
    assert body["isValid"] is True
    assert body["stats"] == {
        "users": 16,
        "projects": 6,
        "bids": 14,
        "notifications": 15,
        "loans": 4,
        "orders": 5,
        "payments": 2,
        "inventory": 4,
    }


def test_export_then_import_roundtrip(client):
    snapshot = client.get("/api/v1/dev/export").json()
    assert len(snapshot["users"]) == 16
    assert snapshot["theme"] == "light"

    snapshot["projects"] = snapshot["projects"][:2]
    r = client.post("/api/v1/dev/import", json=snapshot)
    assert r.status_code == 200
    report = r.json()
    assert report["stats"]["projects"] == 2
    # bids on the dropped projects now dangle
    assert report["isValid"] is False
    assert any("non-existent project" in issue for issue in report["issues"])


def test_import_bad_payload_leaves_data_alone(client):
    r = client.post("/api/v1/dev/import", json={"users": [{"id": "x"}]})
    assert r.status_code == 422
    assert r.json()["detail"] == "Invalid data format"
    assert client.get("/api/v1/dev/integrity").json()["stats"]["users"] == 16


def test_generate_and_reset(client):
    r = client.post("/api/v1/dev/generate", json={"seed": 5, "numGcs": 2, "projectsPerGc": 2})
    assert r.status_code == 200
    report = r.json()
    assert report["isValid"] is True
    assert report["stats"]["projects"] == 4

    reset = client.post("/api/v1/dev/reset").json()
    assert reset["stats"]["projects"] == 6


def test_dev_routes_hidden_in_production():
    settings = Settings(environment="production", mock_api_latency_scale=0, jwt_secret_key="test-secret")
    with TestClient(create_app(settings)) as c:
        assert c.get("/api/v1/dev/integrity").status_code == 404
        assert c.get("/api/v1/health").status_code == 200


def test_import_naive_timestamps_then_update(client, login):
    snapshot = client.get("/api/v1/dev/export").json()
    for project in snapshot["projects"]:
        project["createdAt"] = project["createdAt"].rstrip("Z")
        project["updatedAt"] = project["updatedAt"].rstrip("Z")
    assert client.post("/api/v1/dev/import", json=snapshot).status_code == 200

    headers = login("john.contractor@example.com")
    r = client.put("/api/v1/projects/proj-1", json={"timeline": "20 months"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["timeline"] == "20 months"

    listed = client.get("/api/v1/projects", headers=headers)
    assert listed.status_code == 200
    assert "proj-1" in {p["id"] for p in listed.json()["items"]}
