"""
Wire schemas for the HTTP API.

Fields are snake_case in Python and camelCase on the wire:
- StudentIn / StudentOut  -> students
- SeatOut                 -> derived seat view
- TransactionOut          -> ledger entries
- AdmissionRequestIn/Out  -> public admission forms
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from library_seats.models import (
    AdmissionRequest,
    Gender,
    PaymentMode,
    PlanDuration,
    PlanType,
    RequestStatus,
    Slot,
    Student,
    TransactionType,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SlotOut(CamelModel):
    id: Slot
    label: str
    time: str

    @classmethod
    def from_slot(cls, slot: Slot):
        return cls(id=slot, label=slot.label, time=slot.time)


# ---------- Students ----------

class StudentIn(CamelModel):
    id: Optional[str] = Field(None, description="Generated when omitted")
    full_name: str = Field(..., min_length=1)
    mobile: str = Field(..., min_length=1, description="Login id, unique")
    seat_number: int = Field(..., ge=1)
    plan_type: PlanType
    duration: PlanDuration
    start_date: date
    assigned_slots: List[Slot]
    locker_required: bool = False
    amount_paid: Optional[int] = Field(None, ge=0, description="Quoted from the price table when omitted")
    payment_mode: PaymentMode = PaymentMode.CASH
    is_active: bool = True

    email: Optional[str] = None
    address: Optional[str] = None
    parent_name: Optional[str] = None
    parent_mobile: Optional[str] = None
    gender: Optional[Gender] = None
    id_proof_type: Optional[str] = None
    password: Optional[str] = Field(None, description="Plain text, stored hashed")

    photo_url: Optional[str] = Field(None, description="Base64 image")
    id_proof_url: Optional[str] = Field(None, description="Base64 image")

    def to_student(self, password_hash=None, student_id=None) -> Student:
        data = self.model_dump(exclude={"id", "password", "photo_url", "id_proof_url"})
        if student_id or self.id:
            data["id"] = student_id or self.id
        return Student(
            **data,
            password_hash=password_hash,
            photo=self.photo_url,
            id_proof=self.id_proof_url,
        )


class StudentOut(CamelModel):
    id: str
    full_name: str
    mobile: str
    seat_number: int
    plan_type: PlanType
    duration: PlanDuration
    start_date: date
    end_date: date
    assigned_slots: List[Slot]
    locker_required: bool
    amount_paid: int
    payment_mode: PaymentMode
    is_active: bool

    email: Optional[str] = None
    address: Optional[str] = None
    parent_name: Optional[str] = None
    parent_mobile: Optional[str] = None
    gender: Optional[Gender] = None
    id_proof_type: Optional[str] = None

    photo_url: Optional[str] = None
    id_proof_url: Optional[str] = None

    @classmethod
    def from_student(cls, s: Student):
        return cls(
            id=s.id,
            full_name=s.full_name,
            mobile=s.mobile,
            seat_number=s.seat_number,
            plan_type=s.plan_type,
            duration=s.duration,
            start_date=s.start_date,
            end_date=s.end_date,
            assigned_slots=s.sorted_slots(),
            locker_required=s.locker_required,
            amount_paid=s.amount_paid or 0,
            payment_mode=s.payment_mode,
            is_active=s.is_active,
            email=s.email,
            address=s.address,
            parent_name=s.parent_name,
            parent_mobile=s.parent_mobile,
            gender=s.gender,
            id_proof_type=s.id_proof_type,
            photo_url=s.photo,
            id_proof_url=s.id_proof,
        )


# ---------- Seats ----------

class SeatOut(CamelModel):
    id: int
    is_locker_taken: bool
    occupants: List[StudentOut]
    free_slots: List[Slot]

    @classmethod
    def from_seat(cls, seat):
        return cls(
            id=seat.id,
            is_locker_taken=seat.is_locker_taken,
            occupants=[StudentOut.from_student(o) for o in seat.occupants],
            free_slots=seat.free_slots,
        )


class AvailabilityOut(CamelModel):
    seat_number: int
    slots: List[Slot]
    slots_available: bool
    locker_available: Optional[bool] = None


class QuoteOut(CamelModel):
    plan_type: PlanType
    duration: PlanDuration
    locker_required: bool
    slot_count: int
    amount: int


# ---------- Ledger ----------

class TransactionOut(CamelModel):
    id: str
    student_id: str
    student_name: str
    seat_number: int
    type: TransactionType
    amount: int
    date: date
    plan_type: PlanType
    duration: PlanDuration
    payment_mode: PaymentMode


class RevenueRow(CamelModel):
    month: str
    revenue: int


# ---------- Admissions ----------

class AdmissionRequestIn(CamelModel):
    full_name: str = Field(..., min_length=1)
    mobile: str = Field(..., min_length=1)
    plan_type: PlanType
    duration: PlanDuration
    locker_required: bool = False
    preferred_slots: List[Slot] = []
    email: Optional[str] = None
    address: Optional[str] = None
    id_proof_type: Optional[str] = None
    photo_url: Optional[str] = None
    id_proof_url: Optional[str] = None

    def to_request(self) -> AdmissionRequest:
        data = self.model_dump(exclude={"photo_url", "id_proof_url"})
        return AdmissionRequest(**data, photo=self.photo_url, id_proof=self.id_proof_url)


class AdmissionRequestOut(CamelModel):
    id: str
    full_name: str
    mobile: str
    plan_type: PlanType
    duration: PlanDuration
    locker_required: bool
    preferred_slots: List[Slot]
    email: Optional[str] = None
    address: Optional[str] = None
    id_proof_type: Optional[str] = None
    status: RequestStatus
    timestamp: datetime

    @classmethod
    def from_request(cls, r: AdmissionRequest):
        return cls(
            id=r.id,
            full_name=r.full_name,
            mobile=r.mobile,
            plan_type=r.plan_type,
            duration=r.duration,
            locker_required=r.locker_required,
            preferred_slots=sorted(r.preferred_slots, key=lambda s: s.value),
            email=r.email,
            address=r.address,
            id_proof_type=r.id_proof_type,
            status=r.status,
            timestamp=r.timestamp,
        )


class ApproveRequest(CamelModel):
    seat_number: int = Field(..., ge=1)
    assigned_slots: Optional[List[Slot]] = None
    start_date: Optional[date] = None
    password: Optional[str] = None
    payment_mode: PaymentMode = PaymentMode.CASH
    gender: Optional[Gender] = None


# ---------- Misc ----------

class LoginRequest(CamelModel):
    mobile: str
    password: str


class LoginOut(CamelModel):
    role: str
    user: Optional[StudentOut] = None


class ImportRequest(CamelModel):
    file_path: str
