from datetime import datetime, timezone

from models import db, Slot, Student


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.get_json() == {"status": "ok"}
    assert r.headers["X-Content-Type-Options"] == "nosniff"


def test_template_endpoints(client, make_season):
    make_season()

    r = client.post("/seasons/verano-2026/templates", json={
        "day_type": "lun-mier-vier", "time_slot": "06:00-08:00", "capacity": 12, "category_id": "adultos",
    })
    assert r.status_code == 201
    created = r.get_json()
    assert [t["timeSlot"] for t in created] == ["06:00-07:00", "07:00-08:00"]

    r = client.post("/seasons/verano-2026/templates", json={
        "day_type": "lun-mier-vier", "time_slot": "06:30-07:00", "capacity": 12,
    })
    assert r.status_code == 409

    r = client.patch(f"/templates/{created[0]['id']}", json={"capacity": 6})
    assert r.status_code == 200
    assert r.get_json()["capacity"] == 6

    r = client.get("/seasons/verano-2026/templates?day_type=mar-juev")
    assert r.get_json() == []

    r = client.get("/seasons/verano-2026/templates/grouped")
    assert list(r.get_json()) == ["06:00-07:00", "07:00-08:00"]

    r = client.delete(f"/templates/{created[1]['id']}")
    assert r.status_code == 200
    assert client.get(f"/templates/{created[1]['id']}").status_code == 404


def test_generate_requires_confirmation(client, make_season, make_template):
    make_season()
    make_template()

    r = client.post("/seasons/verano-2026/generate-slots", json={"start": "2026-03-02", "end": "2026-03-08"})
    assert r.status_code == 409
    assert Slot.query.count() == 0

    r = client.post("/seasons/verano-2026/generate-slots",
                    json={"start": "2026-03-02", "end": "2026-03-08", "confirm": True})
    assert r.status_code == 201
    assert r.get_json() == {"created": 3}

    r = client.post("/seasons/verano-2026/generate-slots",
                    json={"start": "2026-03-08", "end": "2026-03-02", "confirm": True})
    assert r.status_code == 400


def test_booking_flow_over_http(client, make_slot, make_student):
    make_slot(capacity=1)
    make_student("70000001")
    slot_id = "2026-03-02_06:00-07:00"

    r = client.post(f"/slots/{slot_id}/lock", json={"student_id": "70000001", "temp_name": "Ana"})
    assert r.status_code == 201
    assert r.get_json()["studentId"] == "70000001"

    r = client.post(f"/slots/{slot_id}/lock", json={"student_id": "70000002"})
    assert r.status_code == 409
    assert r.get_json() == {"error": "Slot full"}

    r = client.post(f"/slots/{slot_id}/confirm", json={"student_id": "70000001"})
    assert r.status_code == 200
    body = r.get_json()
    assert body["attendeeIds"] == ["70000001"]
    assert body["availability"]["free"] == 0

    r = client.get("/slots?start=2026-03-02&end=2026-03-02")
    assert [s["id"] for s in r.get_json()] == [slot_id]

    r = client.post(f"/slots/{slot_id}/cancel", json={"student_id": "70000001"})
    assert r.status_code == 200
    assert r.get_json()["attendeeIds"] == []

    r = client.post(f"/slots/{slot_id}/cancel", json={"student_id": "70000001"})
    assert r.status_code == 404


def test_booking_input_errors(client, make_student):
    make_student("70000001", credits=0)

    assert client.post("/slots/2026-03-02_06-07/lock", json={}).status_code == 400
    assert client.get("/slots/2026-03-02_06-07").status_code == 404
    assert client.get("/slots?start=03/02/2026").status_code == 400

    r = client.post("/slots/2026-03-02_06-07/confirm", json={"student_id": "70000001", "slot_data": "x"})
    assert r.status_code == 400

    r = client.post("/slots/2026-03-02_06-07/confirm",
                    json={"student_id": "70000001", "slot_data": {"capacity": 12}})
    assert r.status_code == 402
    assert db.session.get(Slot, "2026-03-02_06-07") is None


def test_release_over_http(client, make_slot):
    make_slot(capacity=2)
    slot_id = "2026-03-02_06:00-07:00"

    r = client.post(f"/slots/{slot_id}/release", json={"student_id": "70000001"})
    assert r.status_code == 404


def test_seed_and_sweep_endpoints(client, make_student):
    make_student("70000001", age=30, credits=2, fixed_schedule=[{"dayId": "LUN", "timeId": "06-07"}])

    r = client.post("/slots/seed", json={"start": "2026-03-02", "days": 1})
    assert r.status_code == 201
    assert r.get_json() == {"written": 15}

    assert client.post("/slots/seed", json={"start": "2026-03-02", "days": 0}).status_code == 400

    r = client.post("/settlement/sweep")
    assert r.status_code == 200
    assert set(r.get_json()) == {"scanned", "settledSlots", "charged", "missingStudents", "failedSlots"}


def test_logs_endpoint(client, make_season, make_template):
    make_season()
    make_template()
    client.post("/seasons/verano-2026/generate-slots",
                json={"start": "2026-03-02", "end": "2026-03-08", "confirm": True})

    r = client.get("/logs?limit=5")
    assert r.status_code == 200
    entries = r.get_json()
    assert len(entries) == 1
    assert entries[0]["type"] == "SUCCESS"
    assert entries[0]["metadata"]["season_id"] == "verano-2026"

    today = datetime.now(timezone.utc).date().isoformat()
    assert len(client.get(f"/logs?date={today}").get_json()) == 1
    assert client.get("/logs?date=yesterday").status_code == 400


def test_student_credit_untouched_by_lock(client, make_slot, make_student):
    make_slot(capacity=2)
    make_student("70000001", credits=1)

    client.post("/slots/2026-03-02_06:00-07:00/lock", json={"student_id": "70000001"})
    assert db.session.get(Student, "70000001").remaining_credits == 1
