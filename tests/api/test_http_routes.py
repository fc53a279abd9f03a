import pytest

from coaching_analytics.main import create_app


@pytest.fixture
def client(world, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container=world.container)
    return app.test_client()


def _login(client, *, role="admin", email="owner@example.com", management_id="m1"):
    with client.session_transaction() as sess:
        sess["management_id"] = management_id
        sess["role"] = role
        sess["email"] = email


def test_health_needs_no_session(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok"}


def test_reads_without_session_are_unauthorized(client):
    resp = client.get("/api/attendance/stats")
    assert resp.status_code == 401
    assert resp.get_json() == {"success": False, "error": "Unauthorized"}


def test_record_attendance_then_list_it(client, world):
    _login(client)

    resp = client.post("/api/attendance", json={"studentId": "S1", "status": "present", "date": "2024-01-10"})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True
    assert body["day"] == "Wednesday"

    resp = client.get("/api/attendance?date=2024-01-10&batch=Batch%20-%207")
    assert resp.status_code == 200
    (row,) = resp.get_json()["attendance"]
    assert row["studentId"] == "S1"
    assert row["status"] == "present"


def test_invalid_payload_is_bad_request(client):
    _login(client)
    resp = client.post("/api/attendance", json={"studentId": "S1", "status": "sleeping"})
    assert resp.status_code == 400
    assert resp.get_json()["success"] is False


def test_non_json_body_is_bad_request(client):
    _login(client)
    resp = client.post("/api/attendance", data="nope", content_type="text/plain")
    assert resp.status_code == 400


def test_wrong_coach_is_forbidden(client):
    _login(client, role="user", email="asha@example.com")
    resp = client.put("/api/marks", json={"testId": "T1", "studentId": "S1", "marks": 50})
    assert resp.status_code == 403


def test_unknown_test_is_not_found(client):
    _login(client)
    resp = client.put("/api/marks", json={"testId": "NOPE", "studentId": "S1", "marks": 50})
    assert resp.status_code == 404


def test_bulk_marks_out_of_range_is_rejected(client, world):
    _login(client)
    resp = client.post(
        "/api/marks",
        json={
            "testId": "T1",
            "classId": "C1",
            "subjectId": "SUB1",
            "students": [{"studentId": "S1", "marks": 120, "maxMarks": 100}],
        },
    )
    assert resp.status_code == 400
    assert world.marks.get_by_test("m1", "T1") is None


def test_marks_stats_route(client):
    _login(client)
    client.put("/api/marks", json={"testId": "T1", "studentId": "S1", "marks": 75})

    resp = client.get("/api/marks/stats?batch=Batch-7")

    assert resp.status_code == 200
    assert resp.get_json()["stats"]["averagePercentage"] == 75.0


def test_batches_routes(client):
    _login(client, role="user", email="ravi@example.com")

    assert client.get("/api/batches").get_json() == {"batches": ["Batch-7", "Batch-8", "Batch-9", "Batch-10"]}

    resp = client.get("/api/batches/Batch+-+7")
    assert resp.status_code == 200
    assert resp.get_json()["batch"] == "Batch-7"
