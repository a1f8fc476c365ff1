from __future__ import annotations

import pytest

from src.gym_attendance.gym_attendance.main import create_app
from src.gym_attendance.gym_attendance.core.exceptions import StorageError, TransientStorageError
from tests.fakes import GYM, OTHER_GYM, FixedClock, InMemoryAttendance, make_container


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def container(clock):
    return make_container(clock)


@pytest.fixture
def app(container):
    return create_app("config.testing", container=container)


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, *, user_id, role, facility_id=GYM):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role
        if facility_id is not None:
            sess["facility_id"] = facility_id


def test_requires_login(client):
    resp = client.post("/api/attendance", json={"action": "checkIn"})
    assert resp.status_code == 401
    assert resp.get_json()["code"] == "UNAUTHORIZED"


def test_member_check_in_and_out(client):
    login(client, user_id=101, role="member")

    resp = client.post("/api/attendance", json={"action": "checkIn"})
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["subjectId"] == 1
    assert body["status"] == "in"
    assert body["checkInTime"] == "2026-03-10T06:00:00Z"

    resp = client.post("/api/attendance", json={"action": "checkIn"})
    assert resp.status_code == 409
    assert resp.get_json() == {
        "success": False,
        "status": "error",
        "code": "ALREADY_IN_GYM",
        "message": "Already checked in. Please check out first.",
    }

    resp = client.post("/api/attendance", json={"action": "checkOut"})
    assert resp.status_code == 200
    assert resp.get_json()["exitType"] == "manual"

    resp = client.post("/api/attendance", json={"action": "checkOut"})
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "NOT_IN_GYM"


def test_invalid_action(client):
    login(client, user_id=101, role="member")
    resp = client.post("/api/attendance", json={"action": "dance"})
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "VALIDATION_ERROR"


def test_staff_must_name_subject_in_own_gym(client):
    login(client, user_id=109, role="trainer")

    assert client.post("/api/attendance", json={"action": "checkIn"}).status_code == 400
    assert client.post("/api/attendance", json={"action": "checkIn", "subjectId": "abc"}).status_code == 400
    assert client.post("/api/attendance", json={"action": "checkIn", "subjectId": 20}).status_code == 403
    assert client.post("/api/attendance", json={"action": "checkIn", "subjectId": 999}).status_code == 404
    assert client.post("/api/attendance", json={"action": "checkIn", "subjectId": 30}).status_code == 400

    resp = client.post("/api/attendance", json={"action": "checkIn", "subjectId": 2})
    assert resp.status_code == 201
    assert resp.get_json()["subjectId"] == 2


def test_staff_without_gym(client):
    login(client, user_id=1, role="admin", facility_id=None)
    resp = client.get("/api/attendance/today")
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "User must be associated with a gym"


def test_member_cannot_see_dashboard(client):
    login(client, user_id=101, role="member")
    assert client.get("/api/attendance/today").status_code == 403
    assert client.get("/api/attendance").status_code == 403


def test_dashboard(client, container):
    service = container.attendance_service
    for subject_id in (1, 2, 3):
        service.check_in(subject_id, GYM)
    service.check_out(3, GYM)

    login(client, user_id=1, role="admin")
    body = client.get("/api/attendance/today?days=3").get_json()

    assert body["date"] == "2026-03-10"
    assert body["todayCheckIns"] == 3
    assert body["currentlyInside"] == 2
    assert body["pollSeconds"] == 5
    assert [d["date"] for d in body["history"]] == ["2026-03-08", "2026-03-09", "2026-03-10"]
    assert {r["subjectName"] for r in body["records"]} == {"Subject 1", "Subject 2", "Subject 3"}


def test_list_and_stats(client, container):
    container.attendance_service.check_in(1, GYM)
    container.attendance_service.check_in(2, GYM)
    login(client, user_id=109, role="trainer")

    assert len(client.get("/api/attendance").get_json()) == 2
    assert len(client.get("/api/attendance?subjectId=2&dateFrom=2026-03-10").get_json()) == 1
    assert client.get("/api/attendance?dateFrom=10-03-2026").status_code == 400

    assert client.get("/api/attendance/stats?period=week").get_json() == {
        "totalCheckIns": 2,
        "uniqueMembers": 2,
        "currentlyInGym": 2,
    }
    assert client.get("/api/attendance/stats?period=year").status_code == 400

    history = client.get("/api/attendance/history?days=2").get_json()
    assert history == [{"date": "2026-03-09", "checkins": 0}, {"date": "2026-03-10", "checkins": 2}]


def test_subject_history_access(client, container):
    container.attendance_service.check_in(1, GYM)

    login(client, user_id=101, role="member")
    assert len(client.get("/api/subjects/1/attendance").get_json()) == 1
    assert client.get("/api/subjects/2/attendance").status_code == 403

    login(client, user_id=109, role="trainer")
    assert client.get("/api/subjects/1/attendance").status_code == 200
    assert client.get("/api/subjects/20/attendance").status_code == 403
    assert client.get("/api/subjects/999/attendance").status_code == 404

    login(client, user_id=1, role="superadmin", facility_id=OTHER_GYM)
    assert client.get("/api/subjects/1/attendance").status_code == 200


def test_member_today_and_checkout(client, clock):
    login(client, user_id=101, role="member")

    assert client.get("/api/member/attendance/today").get_json()["status"] == "not_checked_in"

    client.post("/api/attendance", json={"action": "checkIn"})
    today = client.get("/api/member/attendance/today").get_json()
    assert today["status"] == "in_gym"
    assert today["message"] == "You're currently in the gym"

    clock.advance(minutes=45)
    resp = client.post("/api/member/attendance/checkout")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "checked_out"
    assert resp.get_json()["record"]["checkOutTime"] == "2026-03-10T06:45:00Z"

    history = client.get("/api/member/attendance/history").get_json()
    assert [r["status"] for r in history] == ["out"]


def test_member_without_profile(client):
    login(client, user_id=555, role="member")
    resp = client.post("/api/attendance", json={"action": "checkIn"})
    assert resp.status_code == 404


def test_qr_flow(client):
    login(client, user_id=1, role="admin")
    config = client.get("/api/admin/attendance/qr/config").get_json()
    assert config["gymId"] == GYM
    assert config["isEnabled"] is True

    login(client, user_id=101, role="member")
    resp = client.post("/api/member/attendance/scan", json={"qrData": config["qrData"]})
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "checked_in"
    assert resp.get_json()["record"]["source"] == "qr_scan"

    resp = client.post("/api/member/attendance/scan", json={"qrData": config["qrData"]})
    assert resp.status_code == 409

    resp = client.post("/api/member/attendance/scan", json={"qrData": "garbage"})
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "INVALID_QR"


def test_qr_admin_endpoints(client):
    login(client, user_id=1, role="admin")
    first = client.get("/api/admin/attendance/qr/config").get_json()

    rotated = client.post("/api/admin/attendance/qr/generate").get_json()
    assert rotated["qrData"] != first["qrData"]

    assert client.post("/api/admin/attendance/qr/toggle", json={"isEnabled": "no"}).status_code == 400
    toggled = client.post("/api/admin/attendance/qr/toggle", json={"isEnabled": False}).get_json()
    assert toggled == {"gymId": GYM, "isEnabled": False, "lastRotatedAt": "2026-03-10T06:00:00Z"}

    image = client.get("/api/admin/attendance/qr/image")
    assert image.status_code == 200
    assert image.mimetype == "image/png"
    assert image.data.startswith(b"\x89PNG")


def test_scan_image_requires_file(client):
    login(client, user_id=101, role="member")
    resp = client.post("/api/member/attendance/scan/image", data={})
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Image file is required"


def test_unknown_route_is_json(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.get_json()["code"] == "NOT_FOUND"


def test_unknown_session_role_is_forbidden(client):
    login(client, user_id=101, role="janitor")

    resp = client.post("/api/attendance", json={"action": "checkIn"})
    assert resp.status_code == 403
    assert resp.get_json()["code"] == "FORBIDDEN"
    assert client.get("/api/subjects/1/attendance").status_code == 403


class BrokenAttendance(InMemoryAttendance):
    def __init__(self, exc):
        super().__init__()
        self.exc = exc
        self.calls = 0

    def get_open(self, *, subject_id, facility_id):
        self.calls += 1
        raise self.exc("Table 'attendance_records' is marked as crashed")


@pytest.mark.parametrize("exc, calls", [(StorageError, 1), (TransientStorageError, 2)])
def test_storage_failures_map_to_generic_500(clock, exc, calls):
    repo = BrokenAttendance(exc)
    client = create_app("config.testing", container=make_container(clock, attendance=repo)).test_client()
    login(client, user_id=101, role="member")

    resp = client.post("/api/attendance", json={"action": "checkIn"})

    assert resp.status_code == 500
    assert resp.get_json() == {
        "success": False,
        "status": "error",
        "code": "STORAGE_ERROR",
        "message": "Temporary system error, please retry",
    }
    assert repo.calls == calls
