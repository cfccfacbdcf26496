"""
Services for pending admission requests and their promotion to students
"""
import logging
from datetime import date

from library_seats.errors import NotFoundError, ValidationError
from library_seats.models import AdmissionRequest, RequestStatus, Student

logger = logging.getLogger(__name__)


class AdmissionService:
    """Public admission forms waiting for an admin to pick a seat"""

    def __init__(self, engine):
        self.engine = engine
        self.store = engine.store

    def submit_request(self, request: AdmissionRequest) -> AdmissionRequest:
        if not request.full_name.strip() or not request.mobile.strip():
            raise ValidationError("Full name and mobile are required.")
        request.status = RequestStatus.PENDING

        with self.store.mutate() as roster:
            roster.save_request(request)
            roster.attachments.put(request.id, request.photo, request.id_proof)

        logger.info(f"Admission request {request.id} received from {request.full_name}")
        return request

    def list_requests(self, status=None) -> list:
        requests = self.store.requests()
        if status is not None:
            requests = [r for r in requests if r.status == RequestStatus(status)]
        return requests

    def _pending(self, roster, request_id) -> AdmissionRequest:
        request = roster.get_request(request_id)
        if request is None:
            raise NotFoundError("Admission request", request_id)
        if request.status != RequestStatus.PENDING:
            raise ValidationError(f"Request {request_id} is already {request.status.value}.")
        return request

    def approve_request(self, request_id, seat_number, assigned_slots=None,
                        start_date=None, **student_fields) -> Student:
        """
        Turn a pending request into an active student on the given seat.

        Args:
            request_id: pending request to promote
            seat_number: seat chosen by the admin
            assigned_slots: slots to hold; defaults to the slots the applicant preferred
            start_date: first day of the plan; defaults to today
            student_fields: any other Student field (password_hash, payment_mode...)

        Returns:
            Student: the admitted student
        """
        with self.store.reading() as roster:
            request = self._pending(roster, request_id)

        student = Student(
            full_name=request.full_name,
            mobile=request.mobile,
            email=request.email,
            address=request.address,
            id_proof_type=request.id_proof_type,
            seat_number=seat_number,
            plan_type=request.plan_type,
            duration=request.duration,
            locker_required=request.locker_required,
            assigned_slots=request.preferred_slots if assigned_slots is None else assigned_slots,
            start_date=start_date or date.today(),
            **student_fields,
        )

        # conflicts surface here and leave the request pending
        student = self.engine.add_student(student)

        with self.store.mutate() as roster:
            request = self._pending(roster, request_id)
            request.status = RequestStatus.APPROVED
            roster.save_request(request)
            roster.attachments.move(request_id, student.id)

        logger.info(f"Admission request {request_id} approved as student {student.id}")
        return student

    def reject_request(self, request_id) -> AdmissionRequest:
        with self.store.mutate() as roster:
            request = self._pending(roster, request_id)
            request.status = RequestStatus.REJECTED
            roster.save_request(request)
        logger.info(f"Admission request {request_id} rejected")
        return request

    def delete_request(self, request_id) -> None:
        with self.store.mutate() as roster:
            roster.remove_request(request_id)
