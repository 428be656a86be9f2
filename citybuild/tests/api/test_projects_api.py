GC1 = "john.contractor@example.com"
GC2 = "maria.builder@example.com"
SUB1 = "mike.plumber@example.com"


def test_list_projects_filters(client, login):
    r = client.get("/api/v1/projects", params={"gcId": "gc-1", "status": "bidding"}, headers=login(SUB1))
    assert r.status_code == 200
    body = r.json()
    assert body["count"] == 3
    assert [p["id"] for p in body["items"]] == ["proj-6", "proj-3", "proj-1"]


def test_list_projects_rejects_bad_status(client, login):
    r = client.get("/api/v1/projects", params={"status": "paused"}, headers=login(SUB1))
    assert r.status_code == 422


def test_create_project_as_gc(client, login):
    payload = {"name": "Library", "description": "Branch library", "gcId": "gc-1", "status": "bidding"}
    r = client.post("/api/v1/projects", json=payload, headers=login(GC1))
    assert r.status_code == 201
    created = r.json()
    assert created["gcId"] == "gc-1"
    assert created["createdAt"] == created["updatedAt"]


def test_create_project_for_another_gc_is_forbidden(client, login):
    payload = {"name": "Library", "description": "Branch library", "gcId": "gc-2"}
    assert client.post("/api/v1/projects", json=payload, headers=login(GC1)).status_code == 403


def test_subcontractor_cannot_create_project(client, login):
    payload = {"name": "Library", "description": "Branch library", "gcId": "sub-1"}
    assert client.post("/api/v1/projects", json=payload, headers=login(SUB1)).status_code == 403


def test_update_project_owner_only(client, login):
    r = client.put("/api/v1/projects/proj-3", json={"timeline": "10 months"}, headers=login(GC1))
    assert r.status_code == 200
    assert r.json()["timeline"] == "10 months"

    assert client.put("/api/v1/projects/proj-3", json={"timeline": "1 day"}, headers=login(GC2)).status_code == 403
    assert client.put("/api/v1/projects/proj-404", json={}, headers=login(GC1)).status_code == 404


def test_upload_plan_file(client, login):
    headers = login(GC1)
    r = client.post(
        "/api/v1/projects/proj-1/files",
        files={"file": ("site.pdf", b"%PDF-1.4 tiny", "application/pdf")},
        data={"category": "plans"},
        headers=headers,
    )
    assert r.status_code == 201
    body = r.json()
    assert body["file"]["url"] == "/mock/uploads/site.pdf"
    assert body["file"]["category"] == "plans"
    assert len(body["project"]["planFiles"]) == 3


def test_upload_rejects_type_and_size(client, login):
    headers = login(GC1)
    wrong = client.post(
        "/api/v1/projects/proj-1/files",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=headers,
    )
    assert wrong.status_code == 415

    big = client.post(
        "/api/v1/projects/proj-1/files",
        files={"file": ("huge.pdf", b"0" * (11 * 1024 * 1024), "application/pdf")},
        headers=headers,
    )
    assert big.status_code == 413

    # nothing was attached
    project = client.get("/api/v1/projects/proj-1", headers=headers).json()
    assert len(project["planFiles"]) == 2


def test_bid_review_sorted(client, login):
    headers = login(GC1)
    r = client.get("/api/v1/projects/proj-1/bids/review", params={"sortBy": "amount"}, headers=headers)
    assert r.status_code == 200
    body = r.json()
    amounts = [b["amount"] for b in body["bids"]]
    assert amounts == sorted(amounts)
    assert body["statistics"]["count"] == 4
    assert all("contractor" in b for b in body["bids"])

    bad = client.get("/api/v1/projects/proj-1/bids/review", params={"sortBy": "cheapest"}, headers=headers)
    assert bad.status_code == 422


def test_bid_review_other_gc_forbidden(client, login):
    r = client.get("/api/v1/projects/proj-1/bids/review", headers=login(GC2))
    assert r.status_code == 403
