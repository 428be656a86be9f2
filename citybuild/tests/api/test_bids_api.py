GC1 = "john.contractor@example.com"
GC2 = "maria.builder@example.com"
SUB1 = "mike.plumber@example.com"
SUB5 = "climate.control@example.com"


def test_list_bids_by_project(client, login):
    r = client.get("/api/v1/bids", params={"projectId": "proj-1"}, headers=login(GC1))
    assert r.status_code == 200
    assert r.json()["count"] == 4


def test_submit_bid(client, login):
    payload = {
        "projectId": "proj-5",
        "subcontractorId": "sub-5",
        "amount": 99_000,
        "timeline": "10 weeks",
        "description": "Rooftop units",
    }
    r = client.post("/api/v1/bids", json=payload, headers=login(SUB5))
    assert r.status_code == 201
    assert r.json()["status"] == "pending"

    # only as yourself
    payload["subcontractorId"] = "sub-1"
    assert client.post("/api/v1/bids", json=payload, headers=login(SUB5)).status_code == 403


def test_submit_bid_validation(client, login):
    payload = {"projectId": "proj-5", "subcontractorId": "sub-5", "amount": 0, "timeline": "1 week", "description": "x"}
    assert client.post("/api/v1/bids", json=payload, headers=login(SUB5)).status_code == 422


def test_submit_bid_on_active_project_conflicts(client, login):
    payload = {"projectId": "proj-2", "subcontractorId": "sub-1", "amount": 10, "timeline": "1 week", "description": "x"}
    assert client.post("/api/v1/bids", json=payload, headers=login(SUB1)).status_code == 409


def test_gc_cannot_submit_bid(client, login):
    payload = {"projectId": "proj-5", "subcontractorId": "gc-1", "amount": 10, "timeline": "1 week", "description": "x"}
    assert client.post("/api/v1/bids", json=payload, headers=login(GC1)).status_code == 403


def test_award_is_exclusive(client, login):
    headers = login(GC1)
    r = client.post("/api/v1/bids/bid-13/award", headers=headers)
    assert r.status_code == 200
    assert r.json()["status"] == "awarded"

    assert client.post("/api/v1/bids/bid-14/award", headers=headers).status_code == 409
    # repeating the same award is fine
    assert client.post("/api/v1/bids/bid-13/award", headers=headers).status_code == 200

    project = client.get("/api/v1/projects/proj-6", headers=headers).json()
    assert project["status"] == "awarded"


def test_award_requires_project_owner(client, login):
    assert client.post("/api/v1/bids/bid-13/award", headers=login(GC2)).status_code == 403
    assert client.post("/api/v1/bids/bid-13/award", headers=login(SUB1)).status_code == 403
    assert client.post("/api/v1/bids/bid-404/award", headers=login(GC1)).status_code == 404


def test_reject_with_and_without_feedback(client, login):
    headers = login(GC1)
    r = client.post("/api/v1/bids/bid-7/reject", json={"feedback": "Scope incomplete"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["status"] == "rejected"

    assert client.post("/api/v1/bids/bid-8/reject", headers=headers).status_code == 200
    assert client.post("/api/v1/bids/bid-3/reject", headers=headers).status_code == 409


def test_clarify_pending_bid(client, login):
    headers = login(GC1)
    r = client.post("/api/v1/bids/bid-1/clarify", json={"message": "Include permits?"}, headers=headers)
    assert r.status_code == 201
    assert r.json()["userId"] == "sub-1"

    done = client.post("/api/v1/bids/bid-4/clarify", json={"message": "?"}, headers=headers)
    assert done.status_code == 409


def test_patch_bid_by_submitter(client, login):
    headers = login(SUB1)
    r = client.patch("/api/v1/bids/bid-1", json={"amount": 121_000}, headers=headers)
    assert r.status_code == 200
    assert r.json()["amount"] == 121_000

    status_change = client.patch("/api/v1/bids/bid-1", json={"status": "awarded"}, headers=headers)
    assert status_change.status_code == 422

    assert client.patch("/api/v1/bids/bid-2", json={"amount": 1}, headers=headers).status_code == 403


def test_patch_decided_bid_conflicts(client, login):
    headers = login(SUB1)
    r = client.patch("/api/v1/bids/bid-5", json={"amount": 1}, headers=headers)
    assert r.status_code == 409

    bids = client.get("/api/v1/bids", params={"projectId": "proj-2"}, headers=login(GC1)).json()
    bid5 = next(b for b in bids["items"] if b["id"] == "bid-5")
    assert bid5["amount"] == 95_000
    assert bid5["status"] == "awarded"
