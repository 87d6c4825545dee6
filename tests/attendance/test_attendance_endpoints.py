from __future__ import annotations

from datetime import datetime

from qr_attendance.workers.model import Worker


def _check_in(admin_client, client, clock):
    secret = admin_client.post("/tokens/issue", json={"workerId": 1, "actionType": "arrival"}).get_json()[0]["secret"]
    clock.set(datetime(2026, 3, 2, 9, 5))
    assert client.post("/tokens/redeem", json={"secret": secret}).status_code == 200


def test_summary_defaults_to_today(admin_client, client, clock, repos):
    repos.workers.add(Worker(worker_id=2, owner_id=10, name="Absent One"))
    _check_in(admin_client, client, clock)

    resp = admin_client.get("/attendance/summary")

    assert resp.status_code == 200
    data = resp.get_json()
    assert data["date"] == "2026-03-02"
    assert {w["workerId"]: w["status"] for w in data["workers"]} == {1: "in", 2: "absent"}
    assert data["totals"]["total"] == 2


def test_summary_rejects_bad_date(admin_client):
    assert admin_client.get("/attendance/summary?date=02/03/2026").status_code == 400


def test_history_endpoint(admin_client, client, clock, repos):
    repos.workers.add(Worker(worker_id=7, owner_id=99, name="Elsewhere"))
    _check_in(admin_client, client, clock)

    resp = admin_client.get("/workers/1/history")

    assert resp.status_code == 200
    (record,) = resp.get_json()["records"]
    assert record["workDate"] == "2026-03-02"
    assert record["status"] == "in"
    assert admin_client.get("/workers/7/history").status_code == 403
    assert admin_client.get("/workers/404/history").status_code == 404


def test_permission_request_flow(admin_client, repos):
    created = admin_client.post(
        "/permission-requests", json={"workerId": 1, "requestDate": "2026-03-02", "reason": "clinic"}
    )
    assert created.status_code == 201
    request_id = created.get_json()["requestId"]

    decided = admin_client.post(f"/permission-requests/{request_id}/decision", json={"approve": True})
    assert decided.status_code == 200
    assert decided.get_json()["status"] == "APPROVED"

    again = admin_client.post(f"/permission-requests/{request_id}/decision", json={"approve": False})
    assert again.status_code == 400

    summary = admin_client.get("/attendance/summary?date=2026-03-02").get_json()
    assert summary["workers"][0]["status"] == "on_permission"


def test_permission_request_validation(admin_client):
    assert admin_client.post("/permission-requests", json={"workerId": 1, "requestDate": "soon"}).status_code == 400
    assert admin_client.post("/permission-requests/1/decision", json={"approve": "yes"}).status_code == 400
