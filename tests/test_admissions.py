from datetime import date

import pytest

from library_seats.admissions import AdmissionService
from library_seats.errors import ConflictError, NotFoundError, ValidationError
from library_seats.models import AdmissionRequest, PlanDuration, PlanType, RequestStatus, Slot, TransactionType


@pytest.fixture
def service(engine):
    return AdmissionService(engine)


def make_request(**overrides):
    data = dict(
        full_name="Priya Nair",
        mobile="9123400000",
        plan_type=PlanType.EIGHT_HOURS,
        duration=PlanDuration.THREE_MONTHS,
        preferred_slots=["S2", "S3"],
        photo="P" * 80,
    )
    data.update(overrides)
    return AdmissionRequest(**data)


def test_submit_and_list(service, store):
    req = service.submit_request(make_request())

    listed = service.list_requests()
    assert [r.id for r in listed] == [req.id]
    assert listed[0].status is RequestStatus.PENDING
    assert listed[0].preferred_slots == {Slot.S2, Slot.S3}
    assert store.attachments(req.id)["photo"] == "P" * 80


def test_approve_promotes_to_student(service, store):
    req = service.submit_request(make_request())

    student = service.approve_request(req.id, seat_number=12, start_date=date(2025, 6, 1))

    assert student.is_active
    assert student.seat_number == 12
    assert student.assigned_slots == {Slot.S2, Slot.S3}
    assert student.amount_paid == 2700
    assert store.get(student.id, with_attachments=True).photo == "P" * 80
    assert store.attachments(req.id)["photo"] is None
    assert service.list_requests(RequestStatus.APPROVED)[0].id == req.id
    assert [t.type for t in store.transactions()] == [TransactionType.ADMISSION]


def test_approve_with_conflict_keeps_request_pending(service, engine, make_student):
    engine.add_student(make_student(seat_number=12, assigned_slots=["S3"]))
    req = service.submit_request(make_request())

    with pytest.raises(ConflictError):
        service.approve_request(req.id, seat_number=12)

    assert service.list_requests(RequestStatus.PENDING)[0].id == req.id

    # a different pair of slots on the same seat works
    student = service.approve_request(req.id, seat_number=12, assigned_slots=["S1", "S2"])
    assert student.assigned_slots == {Slot.S1, Slot.S2}


def test_cannot_approve_twice(service):
    req = service.submit_request(make_request())
    service.approve_request(req.id, seat_number=1)

    with pytest.raises(ValidationError):
        service.approve_request(req.id, seat_number=2)


def test_reject_and_delete(service):
    req = service.submit_request(make_request())
    rejected = service.reject_request(req.id)
    assert rejected.status is RequestStatus.REJECTED

    with pytest.raises(ValidationError):
        service.approve_request(req.id, seat_number=1)

    service.delete_request(req.id)
    assert service.list_requests() == []


def test_unknown_request(service):
    with pytest.raises(NotFoundError):
        service.approve_request("req_missing", seat_number=1)


def test_blank_request_rejected(service):
    with pytest.raises(ValidationError):
        service.submit_request(make_request(full_name=" "))
