"""
allocator.py
Seat allocation engine: every change to a student's seat, slots or locker
passes through here and is checked against the students already on that seat.

A seat holds up to four students, one per slot, and one locker.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import replace
from datetime import date, timedelta

from library_seats import config, plans
from library_seats.errors import ConflictError, ConflictReason, NotFoundError, ValidationError
from library_seats.models import Seat, Slot, Student, Transaction, TransactionType

logger = logging.getLogger(__name__)


def _as_slots(slots) -> frozenset:
    try:
        return frozenset(Slot(s) for s in slots)
    except ValueError as e:
        raise ValidationError(f"Unknown slot: {e}") from e


def overlapping_slots(occupants, requested, exclude_id=None) -> frozenset:
    """Slots in `requested` already held by an active occupant other than `exclude_id`"""
    requested = _as_slots(requested)
    taken = set()
    for occupant in occupants:
        if not occupant.is_active or occupant.id == exclude_id:
            continue
        taken |= occupant.assigned_slots & requested
    return frozenset(taken)


def locker_holder(occupants, exclude_id=None) -> Student | None:
    for occupant in occupants:
        if occupant.is_active and occupant.locker_required and occupant.id != exclude_id:
            return occupant
    return None


def student_errors(student: Student, total_seats) -> list[str]:
    errors = []
    if not (student.full_name or "").strip():
        errors.append("Full name is required.")
    if not (student.mobile or "").strip():
        errors.append("Mobile is required.")
    if not 1 <= student.seat_number <= total_seats:
        errors.append(f"Seat number must be between 1 and {total_seats}.")
    required = plans.required_slot_count(student.plan_type)
    if len(student.assigned_slots) != required:
        errors.append(
            f"Plan {student.plan_type.value} needs {required} slot(s), "
            f"got {len(student.assigned_slots)}."
        )
    if student.amount_paid is not None and student.amount_paid < 0:
        errors.append("Amount paid cannot be negative.")
    return errors


def validate_student(student: Student, total_seats=None) -> None:
    errors = student_errors(student, total_seats or config.TOTAL_SEATS)
    if errors:
        raise ValidationError(errors)


def find_conflicts(students) -> list[ConflictError]:
    """
    Check a whole roster for double-booked slots and lockers; used when a
    roster arrives in bulk rather than one admission at a time.
    """
    by_seat = defaultdict(list)
    for s in students:
        if s.is_active:
            by_seat[s.seat_number].append(s)

    conflicts = []
    for seat_number, occupants in sorted(by_seat.items()):
        held = set()
        for s in occupants:
            clash = held & s.assigned_slots
            if clash:
                conflicts.append(ConflictError(ConflictReason.SLOT_OVERLAP, seat_number, clash))
            held |= s.assigned_slots
        if sum(1 for s in occupants if s.locker_required) > 1:
            conflicts.append(ConflictError(ConflictReason.LOCKER_OVERLAP, seat_number))
    return conflicts


class SeatAllocationEngine:
    def __init__(self, store, total_seats=None, expiry_window_days=None,
                 purge_after_days=None, today=date.today):
        self.store = store
        self.total_seats = total_seats or config.TOTAL_SEATS
        self.expiry_window_days = (
            config.EXPIRY_WINDOW_DAYS if expiry_window_days is None else expiry_window_days
        )
        self.purge_after_days = (
            config.PURGE_AFTER_DAYS if purge_after_days is None else purge_after_days
        )
        self.today = today

    # ---------- policy ----------

    @staticmethod
    def required_slot_count(plan_type) -> int:
        return plans.required_slot_count(plan_type)

    def validate(self, student: Student) -> None:
        validate_student(student, self.total_seats)

    # ---------- availability ----------

    def check_slot_availability(self, seat_number, requested_slots, exclude_student_id=None) -> bool:
        with self.store.reading() as roster:
            occupants = roster.on_seat(seat_number)
        return not overlapping_slots(occupants, requested_slots, exclude_student_id)

    def check_locker_availability(self, seat_number, exclude_student_id=None) -> bool:
        with self.store.reading() as roster:
            occupants = roster.on_seat(seat_number)
        return locker_holder(occupants, exclude_student_id) is None

    def _ensure_available(self, roster, student: Student, exclude_id=None) -> None:
        occupants = roster.on_seat(student.seat_number)

        clash = overlapping_slots(occupants, student.assigned_slots, exclude_id)
        if clash:
            logger.warning(
                f"Slot overlap on seat {student.seat_number} for {student.id}: "
                f"{sorted(s.value for s in clash)}"
            )
            raise ConflictError(ConflictReason.SLOT_OVERLAP, student.seat_number, clash)

        if student.locker_required and locker_holder(occupants, exclude_id):
            logger.warning(f"Locker overlap on seat {student.seat_number} for {student.id}")
            raise ConflictError(ConflictReason.LOCKER_OVERLAP, student.seat_number)

    def _ensure_unique_mobile(self, roster, student: Student) -> None:
        other = roster.find_by_mobile(student.mobile)
        if other and other.id != student.id:
            raise ValidationError(f"Mobile {student.mobile} is already registered.")

    # ---------- mutations ----------

    def add_student(self, student: Student) -> Student:
        self.validate(student)
        student = replace(student, is_active=True)
        if student.amount_paid is None:
            student.amount_paid = plans.quote(student.plan_type, student.duration, student.locker_required)

        with self.store.mutate() as roster:
            if roster.get(student.id):
                raise ValidationError(f"Student id {student.id} already exists.")
            self._ensure_unique_mobile(roster, student)
            self._ensure_available(roster, student)

            roster.add(student.without_attachments())
            roster.attachments.put(student.id, student.photo, student.id_proof)
            roster.transactions.append(Transaction.for_student(student, TransactionType.ADMISSION))

        logger.info(
            f"Admitted {student.full_name} ({student.id}) to seat {student.seat_number} "
            f"slots {[s.value for s in student.sorted_slots()]}"
        )
        return student

    def update_student(self, student: Student) -> Student:
        self.validate(student)
        student = replace(student)

        with self.store.mutate() as roster:
            prior = roster.get(student.id)
            if prior is None:
                raise NotFoundError("Student", student.id)

            if student.password_hash is None:
                student.password_hash = prior.password_hash
            if student.amount_paid is None:
                student.amount_paid = plans.quote(student.plan_type, student.duration, student.locker_required)

            self._ensure_unique_mobile(roster, student)
            if student.is_active:
                self._ensure_available(roster, student, exclude_id=student.id)

            roster.replace(student.without_attachments())
            roster.attachments.put(student.id, student.photo, student.id_proof)

            renewed = student.start_date != prior.start_date
            if renewed:
                roster.transactions.append(Transaction.for_student(student, TransactionType.RENEWAL))

        if renewed:
            logger.info(f"Renewed {student.id} from {student.start_date} to {student.end_date}")
        elif (prior.seat_number, prior.assigned_slots) != (student.seat_number, student.assigned_slots):
            logger.info(f"Moved {student.id} to seat {student.seat_number} without a billing event")
        else:
            logger.info(f"Updated {student.id}")
        return student

    def delete_student(self, student_id) -> None:
        with self.store.mutate() as roster:
            removed = roster.remove(student_id)
        if removed:
            logger.info(f"Deleted student {student_id}")

    def deactivate(self, student_id) -> Student:
        with self.store.mutate() as roster:
            student = roster.get(student_id)
            if student is None:
                raise NotFoundError("Student", student_id)
            student.is_active = False
            roster.replace(student)
        logger.info(f"Deactivated student {student_id}")
        return student

    def purge_inactive(self, today=None) -> int:
        """
        Remove inactive students whose plan ended at least `purge_after_days`
        ago, together with their attachments. Returns how many were removed.
        """
        threshold = (today or self.today()) - timedelta(days=self.purge_after_days)
        with self.store.mutate() as roster:
            stale = [s for s in roster.students() if not s.is_active and s.end_date <= threshold]
            for s in stale:
                roster.remove(s.id)
        logger.info(f"Purged {len(stale)} inactive student(s) ended on or before {threshold}")
        return len(stale)

    # ---------- views ----------

    def get_seats_status(self) -> list[Seat]:
        by_seat = defaultdict(list)
        for s in self.store.load():
            if s.is_active:
                by_seat[s.seat_number].append(s)

        return [
            Seat(
                id=seat_id,
                occupants=by_seat.get(seat_id, []),
                is_locker_taken=any(o.locker_required for o in by_seat.get(seat_id, [])),
            )
            for seat_id in range(1, self.total_seats + 1)
        ]

    def get_seat(self, seat_number) -> Seat:
        if not 1 <= seat_number <= self.total_seats:
            raise NotFoundError("Seat", seat_number)
        with self.store.reading() as roster:
            occupants = roster.on_seat(seat_number)
        return Seat(
            id=seat_number,
            occupants=occupants,
            is_locker_taken=any(o.locker_required for o in occupants),
        )

    def free_slots(self, seat_number) -> list[Slot]:
        return self.get_seat(seat_number).free_slots

    def get_expiring_students(self, today=None) -> list[Student]:
        today = today or self.today()
        until = today + timedelta(days=self.expiry_window_days)
        return [
            s for s in self.store.load()
            if s.is_active and today <= s.end_date <= until
        ]
