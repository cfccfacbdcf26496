def student_payload(**overrides):
    data = {
        "id": "a",
        "fullName": "Rahul Sharma",
        "mobile": "9876543210",
        "seatNumber": 25,
        "planType": "6H",
        "duration": "1 Month",
        "startDate": "2025-05-03",
        "assignedSlots": ["S1"],
        "lockerRequired": True,
        "email": "rahul.sharma@example.com",
    }
    data.update(overrides)
    return data


def test_root(client):
    assert client.get("/").status_code == 200


def test_slots(client):
    body = client.get("/slots").json()
    assert [s["id"] for s in body] == ["S1", "S2", "S3", "S4"]
    assert body[0]["label"] == "Morning"


def test_add_student_and_seat_view(client):
    res = client.post("/students", json=student_payload())
    assert res.status_code == 201
    body = res.json()
    assert body["endDate"] == "2025-06-03"
    assert body["amountPaid"] == 899
    assert "password" not in body

    seats = client.get("/seats").json()
    assert len(seats) == 121
    seat = seats[24]
    assert seat["isLockerTaken"] is True
    assert [o["id"] for o in seat["occupants"]] == ["a"]
    assert seat["freeSlots"] == ["S2", "S3", "S4"]


def test_slot_conflict_is_409(client):
    client.post("/students", json=student_payload())
    res = client.post("/students", json=student_payload(
        id="b", mobile="1", planType="8H", assignedSlots=["S1", "S2"], lockerRequired=False,
    ))
    assert res.status_code == 409
    assert res.json()["reason"] == "SLOT_OVERLAP"
    assert res.json()["slots"] == ["S1"]


def test_locker_conflict_is_409(client):
    client.post("/students", json=student_payload())
    res = client.post("/students", json=student_payload(id="c", mobile="2", assignedSlots=["S2"]))
    assert res.status_code == 409
    assert res.json()["reason"] == "LOCKER_OVERLAP"


def test_slot_count_mismatch_is_422(client):
    res = client.post("/students", json=student_payload(planType="14H", assignedSlots=["S1"]))
    assert res.status_code == 422
    assert client.get("/students").json() == []


def test_unknown_enum_rejected_at_boundary(client):
    assert client.post("/students", json=student_payload(planType="10H")).status_code == 422
    assert client.post("/students", json=student_payload(assignedSlots=["S9"])).status_code == 422


def test_availability_endpoint(client):
    client.post("/students", json=student_payload())
    body = client.get("/seats/25/availability", params={"slots": ["S1"], "locker": "true"}).json()
    assert body == {"seatNumber": 25, "slots": ["S1"], "slotsAvailable": False, "lockerAvailable": False}

    body = client.get("/seats/25/availability", params={"slots": ["S1"], "exclude": "a", "locker": "true"}).json()
    assert body["slotsAvailable"] is True
    assert body["lockerAvailable"] is True


def test_update_renewal_and_transactions(client):
    client.post("/students", json=student_payload())

    res = client.put("/students/a", json=student_payload(startDate="2025-06-03", amountPaid=950))
    assert res.status_code == 200

    client.put("/students/a", json=student_payload(startDate="2025-06-03", amountPaid=950, email="r@x.in"))

    txs = client.get("/transactions").json()
    assert [t["type"] for t in txs] == ["RENEWAL", "ADMISSION"]
    assert txs[0]["amount"] == 950

    revenue = client.get("/reports/revenue").json()
    assert revenue == [{"month": "2025-06", "revenue": 950}, {"month": "2025-05", "revenue": 899}]


def test_update_unknown_is_404(client):
    assert client.put("/students/zzz", json=student_payload(id="zzz")).status_code == 404


def test_delete_is_idempotent(client):
    client.post("/students", json=student_payload())
    assert client.delete("/students/a").status_code == 200
    assert client.delete("/students/a").status_code == 200
    assert client.get("/students/a").status_code == 404
    assert client.get("/seats/25").json()["occupants"] == []


def test_expiring(client):
    client.post("/students", json=student_payload())
    client.post("/students", json=student_payload(id="b", mobile="5", seatNumber=3, startDate="2025-05-07"))

    ids = [s["id"] for s in client.get("/students/expiring", params={"today": "2025-06-01"}).json()]
    assert ids == ["a"]


def test_deactivate_and_purge(client):
    client.post("/students", json=student_payload(startDate="2025-01-01"))
    assert client.post("/students/a/deactivate").json()["isActive"] is False
    assert client.get("/students", params={"active": "false"}).json()[0]["id"] == "a"

    assert client.post("/maintenance/purge", params={"today": "2025-06-01"}).json() == {"removed": 1}
    assert client.get("/students").json() == []


def test_quote(client):
    body = client.get("/plans/quote", params={"plan_type": "24H", "duration": "3 Months", "locker_required": "true"}).json()
    assert body == {
        "planType": "24H", "duration": "3 Months", "lockerRequired": True, "slotCount": 4, "amount": 5100,
    }


def test_admission_flow(client):
    res = client.post("/admissions", json={
        "fullName": "Meera", "mobile": "9000011111", "planType": "8H",
        "duration": "1 Month", "preferredSlots": ["S3", "S4"],
    })
    assert res.status_code == 201
    req_id = res.json()["id"]

    res = client.post(f"/admissions/{req_id}/approve", json={"seatNumber": 40, "startDate": "2025-06-01", "password": "pw"})
    assert res.status_code == 201
    assert res.json()["assignedSlots"] == ["S3", "S4"]

    assert client.get("/admissions", params={"status": "APPROVED"}).json()[0]["id"] == req_id
    assert client.post(f"/admissions/{req_id}/reject").status_code == 422

    login = client.post("/login", json={"mobile": "9000011111", "password": "pw"}).json()
    assert login["role"] == "STUDENT"
    assert login["user"]["seatNumber"] == 40


def test_login_failures(client):
    assert client.post("/login", json={"mobile": "admin", "password": "admin"}).json() == {"role": "ADMIN", "user": None}
    assert client.post("/login", json={"mobile": "x", "password": "y"}).status_code == 401


def test_backup_round_trip(client):
    client.post("/students", json=student_payload())
    doc = client.get("/backup").json()
    client.delete("/students/a")

    assert client.post("/backup", json=doc).json()["students"] == 1
    assert client.get("/students/a").status_code == 200


def test_exports(client, tmp_path, monkeypatch):
    from library_seats import config

    monkeypatch.setattr(config, "EXPORT_DIR", tmp_path)
    assert client.get("/export/students/pdf").status_code == 404

    client.post("/students", json=student_payload())
    res = client.get("/export/students/pdf")
    assert res.status_code == 200
    assert res.content.startswith(b"%PDF")
    assert client.get("/export/students/excel").status_code == 200
