from conftest import login, logout, signup


def test_student_request_admin_approves(client):
    signup(client, "admin1", "adminpw", "admin")
    logout(client)

    assert signup(client, "s1", "p1").status_code == 302
    logout(client)
    assert login(client, "s1", "p1").status_code == 302

    resp = client.post("/appointments/request", data={
        "resource_id": "r1",
        "doctor_id": "d1",
        "preferred_date": "2030-03-14",
        "preferred_time": "09:30",
        "message": "Follow-up on sleep issues",
        # ignored: the student comes from the session
        "student_id": "999",
    })
    assert resp.status_code == 201
    record = resp.get_json()["appointment"]
    assert record["status"] == "pending"
    assert record["student_username"] == "s1"
    mine = client.get("/student/appointments").get_json()["appointments"]
    assert [a["id"] for a in mine] == [record["id"]]
    logout(client)

    assert login(client, "admin1", "adminpw", "admin").status_code == 302
    queue = client.get("/admin/appointments?status=pending").get_json()["appointments"]
    assert [a["id"] for a in queue] == [record["id"]]

    resp = client.post(f"/admin/appointments/approve/{record['id']}")
    assert resp.status_code == 200
    approved = resp.get_json()["appointment"]
    assert approved["status"] == "approved"
    assert approved["assigned_doctor_id"] == "d1"
    assert approved["assigned_doctor_name"] == "Dr. Asha Mehta"
    assert approved["approved_by"] == "admin1"

    resp = client.post(f"/admin/appointments/decline/{record['id']}")
    assert resp.status_code == 409

    summary = client.get("/admin").get_json()["summary"]
    assert summary["appointments"]["approved"] == 1


def test_student_cannot_approve(client):
    signup(client, "s1", "p1")
    resp = client.post("/admin/appointments/approve/whatever")
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/admin/login")


def test_anonymous_cannot_request(client):
    resp = client.post("/appointments/request", data={"preferred_date": "2030-01-01"})
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/student/login")


def test_approve_unknown_request_is_404(client):
    signup(client, "admin1", "adminpw", "admin")
    resp = client.post("/admin/appointments/approve/missing")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "Appointment request not found"


def test_invalid_request_is_400(client):
    signup(client, "s1", "p1")
    resp = client.post("/appointments/request", json={"resource_id": "r1"})
    assert resp.status_code == 400
