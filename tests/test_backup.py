import json

import pytest

from library_seats import backup
from library_seats.admissions import AdmissionService
from library_seats.errors import ConflictError, ValidationError
from library_seats.models import AdmissionRequest, PlanDuration, PlanType


def test_snapshot_round_trip(engine, store, make_student):
    photo = "P" * 70
    a = engine.add_student(make_student(photo=photo, locker_required=True))
    engine.add_student(make_student(assigned_slots=["S2"]))
    AdmissionService(engine).submit_request(AdmissionRequest(
        full_name="Req", mobile="7000000000", plan_type=PlanType.SIX_HOURS,
        duration=PlanDuration.ONE_MONTH, preferred_slots=["S4"],
    ))

    doc = json.loads(json.dumps(backup.export_snapshot(store)))
    assert doc["students"][0]["assigned_slots"] in (["S1"], ["S2"])
    assert "photo" not in doc["students"][0]

    engine.delete_student(a.id)
    restored = backup.import_snapshot(store, doc)

    assert restored == 2
    assert store.get(a.id, with_attachments=True).photo == photo
    assert len(store.transactions()) == 2
    assert [r.full_name for r in store.requests()] == ["Req"]


def test_import_rejects_double_booked_roster(store, make_student, engine):
    engine.add_student(make_student())
    doc = backup.export_snapshot(store)
    clash = dict(doc["students"][0], id="other", mobile="123")
    doc["students"].append(clash)

    with pytest.raises(ConflictError):
        backup.import_snapshot(store, doc)
    assert len(store.load()) == 1


def test_import_rejects_malformed_document(store):
    with pytest.raises(ValidationError):
        backup.import_snapshot(store, {"nothing": []})
    with pytest.raises(ValidationError):
        backup.import_snapshot(store, {"students": [{"full_name": "x"}]})


@pytest.mark.parametrize("overrides", [
    {"plan_type": "24H", "seat_number": 7},
    {"seat_number": 999},
])
def test_import_rejects_students_breaking_plan_or_seat_rules(store, make_student, engine, overrides):
    kept = engine.add_student(make_student())
    doc = backup.export_snapshot(store)
    doc["students"].append(dict(doc["students"][0], id="other", mobile="123", **overrides))

    with pytest.raises(ValidationError):
        backup.import_snapshot(store, doc)
    assert [s.id for s in store.load()] == [kept.id]
    assert len(store.transactions()) == 1
