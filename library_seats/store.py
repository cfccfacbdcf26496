"""
store.py
Persistence for the roster, the transaction ledger, attachments and
admission requests, on top of SQLAlchemy sessions.

Writers go through RosterStore.mutate(): one lock, one session, one commit.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from library_seats.database import SessionLocal
from library_seats.db_models import AdmissionRequestDB, AttachmentDB, StudentDB, TransactionDB
from library_seats.errors import StorageError
from library_seats.models import AdmissionRequest, Student, Transaction

logger = logging.getLogger(__name__)

# base64 payloads shorter than this are placeholders, not images
MIN_ATTACHMENT_LENGTH = 50

STUDENT_FIELDS = (
    "id", "full_name", "mobile", "email", "password_hash", "address", "parent_name",
    "parent_mobile", "gender", "id_proof_type", "seat_number", "locker_required",
    "plan_type", "duration", "start_date", "amount_paid", "payment_mode", "is_active",
)


def _plain(value):
    return getattr(value, "value", value)


def student_to_row(student: Student, row: StudentDB | None = None) -> StudentDB:
    row = row or StudentDB()
    for name in STUDENT_FIELDS:
        setattr(row, name, _plain(getattr(student, name)))
    row.amount_paid = student.amount_paid or 0
    row.end_date = student.end_date
    row.assigned_slots = [s.value for s in student.sorted_slots()]
    return row


def student_from_row(row: StudentDB) -> Student:
    data = {name: getattr(row, name) for name in STUDENT_FIELDS}
    data["assigned_slots"] = row.assigned_slots or []
    return Student(**data)


def transaction_to_row(tx: Transaction) -> TransactionDB:
    return TransactionDB(
        id=tx.id,
        student_id=tx.student_id,
        student_name=tx.student_name,
        seat_number=tx.seat_number,
        type=_plain(tx.type),
        amount=tx.amount,
        date=tx.date,
        plan_type=_plain(tx.plan_type),
        duration=_plain(tx.duration),
        payment_mode=_plain(tx.payment_mode),
    )


def transaction_from_row(row: TransactionDB) -> Transaction:
    return Transaction(
        id=row.id,
        student_id=row.student_id,
        student_name=row.student_name,
        seat_number=row.seat_number,
        type=row.type,
        amount=row.amount,
        date=row.date,
        plan_type=row.plan_type,
        duration=row.duration,
        payment_mode=row.payment_mode,
    )


def request_to_row(req: AdmissionRequest, row: AdmissionRequestDB | None = None) -> AdmissionRequestDB:
    row = row or AdmissionRequestDB()
    row.id = req.id
    row.full_name = req.full_name
    row.mobile = req.mobile
    row.email = req.email
    row.address = req.address
    row.plan_type = req.plan_type.value
    row.duration = req.duration.value
    row.locker_required = req.locker_required
    row.preferred_slots = sorted(s.value for s in req.preferred_slots)
    row.id_proof_type = req.id_proof_type
    row.status = req.status.value
    row.timestamp = req.timestamp
    return row


def request_from_row(row: AdmissionRequestDB) -> AdmissionRequest:
    return AdmissionRequest(
        id=row.id,
        full_name=row.full_name,
        mobile=row.mobile,
        email=row.email,
        address=row.address,
        plan_type=row.plan_type,
        duration=row.duration,
        locker_required=row.locker_required,
        preferred_slots=row.preferred_slots or [],
        id_proof_type=row.id_proof_type,
        status=row.status,
        timestamp=row.timestamp,
    )


class TransactionLog:
    """Append-only ledger of admissions and renewals"""

    def __init__(self, session):
        self.session = session

    def append(self, tx: Transaction) -> None:
        self.session.add(transaction_to_row(tx))

    def list(self) -> list[Transaction]:
        rows = (
            self.session.query(TransactionDB)
            .order_by(TransactionDB.date.desc(), TransactionDB.created_at.desc())
            .all()
        )
        return [transaction_from_row(r) for r in rows]

    def clear(self) -> None:
        self.session.query(TransactionDB).delete()


class AttachmentStore:
    """Photo and ID proof payloads, keyed by student or request id"""

    def __init__(self, session):
        self.session = session

    def put(self, owner_id, photo=None, id_proof=None) -> None:
        """
        Store new payloads; an empty or placeholder payload keeps what is
        already there.
        """
        photo = photo if photo and len(photo) > MIN_ATTACHMENT_LENGTH else None
        id_proof = id_proof if id_proof and len(id_proof) > MIN_ATTACHMENT_LENGTH else None
        if photo is None and id_proof is None:
            return

        row = self.session.get(AttachmentDB, owner_id)
        if row is None:
            row = AttachmentDB(owner_id=owner_id)
            self.session.add(row)
        if photo is not None:
            row.photo = photo
        if id_proof is not None:
            row.id_proof = id_proof
        self.session.flush()

    def get(self, owner_id) -> dict:
        row = self.session.get(AttachmentDB, owner_id)
        if row is None:
            return {"photo": None, "id_proof": None}
        return {"photo": row.photo, "id_proof": row.id_proof}

    def delete(self, owner_id) -> None:
        self.session.query(AttachmentDB).filter(AttachmentDB.owner_id == owner_id).delete()

    def move(self, from_id, to_id) -> None:
        payload = self.get(from_id)
        self.delete(from_id)
        self.put(to_id, **payload)

    def all(self) -> dict:
        return {
            row.owner_id: {"photo": row.photo, "id_proof": row.id_proof}
            for row in self.session.query(AttachmentDB).all()
        }

    def clear(self) -> None:
        self.session.query(AttachmentDB).delete()


class RosterSession:
    """
    The roster as seen inside one unit of work. Nothing is visible to other
    readers until the surrounding RosterStore.mutate() block commits.
    """

    def __init__(self, session):
        self.session = session
        self.transactions = TransactionLog(session)
        self.attachments = AttachmentStore(session)

    # --- students ---

    def students(self) -> list[Student]:
        return [student_from_row(r) for r in self.session.query(StudentDB).all()]

    def on_seat(self, seat_number, active_only=True) -> list[Student]:
        query = self.session.query(StudentDB).filter(StudentDB.seat_number == seat_number)
        if active_only:
            query = query.filter(StudentDB.is_active.is_(True))
        return [student_from_row(r) for r in query.all()]

    def get(self, student_id) -> Student | None:
        row = self.session.get(StudentDB, student_id)
        return student_from_row(row) if row else None

    def find_by_mobile(self, mobile) -> Student | None:
        row = self.session.query(StudentDB).filter(StudentDB.mobile == mobile).first()
        return student_from_row(row) if row else None

    def add(self, student: Student) -> None:
        self.session.add(student_to_row(student))
        self.session.flush()

    def replace(self, student: Student) -> None:
        row = self.session.get(StudentDB, student.id)
        student_to_row(student, row)
        self.session.flush()

    def remove(self, student_id) -> bool:
        removed = self.session.query(StudentDB).filter(StudentDB.id == student_id).delete()
        self.attachments.delete(student_id)
        return bool(removed)

    def replace_all(self, students) -> None:
        self.session.query(StudentDB).delete()
        for s in students:
            self.session.add(student_to_row(s))
        self.session.flush()

    # --- admission requests ---

    def requests(self) -> list[AdmissionRequest]:
        rows = self.session.query(AdmissionRequestDB).order_by(AdmissionRequestDB.timestamp).all()
        return [request_from_row(r) for r in rows]

    def get_request(self, request_id) -> AdmissionRequest | None:
        row = self.session.get(AdmissionRequestDB, request_id)
        return request_from_row(row) if row else None

    def save_request(self, req: AdmissionRequest) -> None:
        row = self.session.get(AdmissionRequestDB, req.id)
        if row is None:
            self.session.add(request_to_row(req))
        else:
            request_to_row(req, row)
        self.session.flush()

    def remove_request(self, request_id) -> bool:
        removed = (
            self.session.query(AdmissionRequestDB)
            .filter(AdmissionRequestDB.id == request_id)
            .delete()
        )
        self.attachments.delete(request_id)
        return bool(removed)

    def replace_all_requests(self, requests) -> None:
        self.session.query(AdmissionRequestDB).delete()
        for req in requests:
            self.session.add(request_to_row(req))
        self.session.flush()


class RosterStore:
    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory
        self._lock = threading.RLock()

    @contextmanager
    def reading(self):
        session = self.session_factory()
        try:
            yield RosterSession(session)
        except SQLAlchemyError as e:
            logger.exception("Roster read failed")
            raise StorageError(f"Roster read failed: {e}") from e
        finally:
            session.close()

    @contextmanager
    def mutate(self):
        """
        Serialize a read-check-write sequence. Commits when the block exits
        cleanly and rolls everything back otherwise.
        """
        with self._lock:
            session = self.session_factory()
            try:
                yield RosterSession(session)
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                logger.exception("Roster write failed, rolled back")
                raise StorageError(f"Roster write failed: {e}") from e
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()

    def load(self) -> list[Student]:
        with self.reading() as roster:
            return roster.students()

    def save(self, students) -> None:
        with self.mutate() as roster:
            roster.replace_all(students)

    def get(self, student_id, with_attachments=False) -> Student | None:
        with self.reading() as roster:
            student = roster.get(student_id)
            if student and with_attachments:
                payload = roster.attachments.get(student_id)
                student.photo = payload["photo"]
                student.id_proof = payload["id_proof"]
            return student

    def transactions(self) -> list[Transaction]:
        with self.reading() as roster:
            return roster.transactions.list()

    def attachments(self, owner_id) -> dict:
        with self.reading() as roster:
            return roster.attachments.get(owner_id)

    def requests(self) -> list[AdmissionRequest]:
        with self.reading() as roster:
            return roster.requests()
