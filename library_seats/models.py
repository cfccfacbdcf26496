"""
models.py
Domain types: closed enumerations for plans, slots and payments, and the
records the allocation engine works with.
"""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime


class PlanType(str, enum.Enum):
    SIX_HOURS = "6H"
    EIGHT_HOURS = "8H"
    FOURTEEN_HOURS = "14H"
    TWENTY_FOUR_HOURS = "24H"

    @property
    def hours(self) -> int:
        return int(self.value[:-1])

    @classmethod
    def _missing_(cls, value):
        # older exports spell the plan out, e.g. "6 Hours"
        if isinstance(value, str) and value.lower().endswith("hours"):
            return cls(value.split()[0] + "H")
        return None


class PlanDuration(str, enum.Enum):
    ONE_MONTH = "1 Month"
    THREE_MONTHS = "3 Months"
    SIX_MONTHS = "6 Months"

    @property
    def months(self) -> int:
        return int(self.value.split()[0])

    @classmethod
    def _missing_(cls, value):
        for member in cls:
            if str(value).strip() == str(member.months):
                return member
        return None


class Slot(str, enum.Enum):
    S1 = "S1"
    S2 = "S2"
    S3 = "S3"
    S4 = "S4"

    @property
    def label(self) -> str:
        return SLOT_WINDOWS[self][0]

    @property
    def time(self) -> str:
        return SLOT_WINDOWS[self][1]


# Four 6-hour windows covering the whole day
SLOT_WINDOWS = {
    Slot.S1: ("Morning", "7 AM – 1 PM"),
    Slot.S2: ("Afternoon", "1 PM – 7 PM"),
    Slot.S3: ("Evening", "7 PM – 1 AM"),
    Slot.S4: ("Night", "1 AM – 7 AM"),
}


class PaymentMode(str, enum.Enum):
    CASH = "CASH"
    ONLINE = "ONLINE"
    PENDING = "PENDING"


class Gender(str, enum.Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"


class TransactionType(str, enum.Enum):
    ADMISSION = "ADMISSION"
    RENEWAL = "RENEWAL"


class RequestStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


def new_id(prefix: str = "") -> str:
    return f"{prefix}{uuid.uuid4().hex[:12]}"


@dataclass
class Student:
    full_name: str
    mobile: str
    seat_number: int
    plan_type: PlanType
    duration: PlanDuration
    start_date: date
    assigned_slots: frozenset = frozenset()
    locker_required: bool = False
    amount_paid: int | None = None
    payment_mode: PaymentMode = PaymentMode.CASH
    is_active: bool = True
    id: str = field(default_factory=new_id)

    email: str | None = None
    address: str | None = None
    parent_name: str | None = None
    parent_mobile: str | None = None
    gender: Gender | None = None
    id_proof_type: str | None = None
    password_hash: str | None = None

    # binary payloads, persisted apart from the roster row
    photo: str | None = None
    id_proof: str | None = None

    def __post_init__(self):
        self.plan_type = PlanType(self.plan_type)
        self.duration = PlanDuration(self.duration)
        self.payment_mode = PaymentMode(self.payment_mode)
        if self.gender is not None:
            self.gender = Gender(self.gender)
        if isinstance(self.start_date, str):
            self.start_date = date.fromisoformat(self.start_date)
        self.assigned_slots = frozenset(Slot(s) for s in self.assigned_slots)

    @property
    def end_date(self) -> date:
        from library_seats.plans import add_months

        return add_months(self.start_date, self.duration.months)

    def sorted_slots(self) -> list[Slot]:
        return sorted(self.assigned_slots, key=lambda s: s.value)

    def without_attachments(self) -> Student:
        return replace(self, photo=None, id_proof=None)


@dataclass(frozen=True)
class Transaction:
    student_id: str
    student_name: str
    seat_number: int
    type: TransactionType
    amount: int
    date: date
    plan_type: PlanType
    duration: PlanDuration
    payment_mode: PaymentMode = PaymentMode.CASH
    id: str = field(default_factory=lambda: new_id("tx_"))

    def __post_init__(self):
        # frozen: rows and snapshots hand back plain strings
        object.__setattr__(self, "type", TransactionType(self.type))
        object.__setattr__(self, "plan_type", PlanType(self.plan_type))
        object.__setattr__(self, "duration", PlanDuration(self.duration))
        object.__setattr__(self, "payment_mode", PaymentMode(self.payment_mode))
        if isinstance(self.date, str):
            object.__setattr__(self, "date", date.fromisoformat(self.date))

    @classmethod
    def for_student(cls, student: Student, tx_type: TransactionType) -> Transaction:
        return cls(
            student_id=student.id,
            student_name=student.full_name,
            seat_number=student.seat_number,
            type=tx_type,
            amount=student.amount_paid or 0,
            date=student.start_date,
            plan_type=student.plan_type,
            duration=student.duration,
            payment_mode=student.payment_mode,
        )


@dataclass(frozen=True)
class Seat:
    id: int
    occupants: list
    is_locker_taken: bool

    @property
    def taken_slots(self) -> frozenset:
        return frozenset(s for o in self.occupants for s in o.assigned_slots)

    @property
    def free_slots(self) -> list[Slot]:
        return [s for s in Slot if s not in self.taken_slots]


@dataclass
class AdmissionRequest:
    full_name: str
    mobile: str
    plan_type: PlanType
    duration: PlanDuration
    locker_required: bool = False
    preferred_slots: frozenset = frozenset()
    email: str | None = None
    address: str | None = None
    id_proof_type: str | None = None
    status: RequestStatus = RequestStatus.PENDING
    timestamp: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=lambda: new_id("req_"))

    photo: str | None = None
    id_proof: str | None = None

    def __post_init__(self):
        self.plan_type = PlanType(self.plan_type)
        self.duration = PlanDuration(self.duration)
        self.status = RequestStatus(self.status)
        self.preferred_slots = frozenset(Slot(s) for s in self.preferred_slots)
