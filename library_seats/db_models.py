from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, Integer, JSON, String, Text

from library_seats.database import Base


class StudentDB(Base):
    __tablename__ = "students"

    id = Column(String, primary_key = True, index = True)
    full_name = Column(String, nullable = False)
    mobile = Column(String, unique = True, nullable = False)
    email = Column(String, nullable = True)
    password_hash = Column(String, nullable = True)
    address = Column(String, nullable = True)
    parent_name = Column(String, nullable = True)
    parent_mobile = Column(String, nullable = True)
    gender = Column(String, nullable = True)
    id_proof_type = Column(String, nullable = True)

    seat_number = Column(Integer, index = True, nullable = False)
    locker_required = Column(Boolean, nullable = False, default = False)
    plan_type = Column(String, nullable = False)
    duration = Column(String, nullable = False)
    start_date = Column(Date, nullable = False)
    # always written from start_date + duration, kept for date range queries
    end_date = Column(Date, nullable = False)
    amount_paid = Column(Integer, nullable = False, default = 0)
    payment_mode = Column(String, nullable = False, default = "CASH")

    # store slots like: ["S1","S2"]
    assigned_slots = Column(JSON, nullable = False, default = list)
    is_active = Column(Boolean, nullable = False, default = True)

    created_at = Column(DateTime, default = datetime.now)


class TransactionDB(Base):
    __tablename__ = "transactions"

    id = Column(String, primary_key = True, index = True)
    # no foreign key: the ledger outlives purged students
    student_id = Column(String, index = True, nullable = False)
    student_name = Column(String, nullable = False)
    seat_number = Column(Integer, nullable = False)
    type = Column(String, nullable = False)
    amount = Column(Integer, nullable = False)
    date = Column(Date, nullable = False)
    plan_type = Column(String, nullable = False)
    duration = Column(String, nullable = False)
    payment_mode = Column(String, nullable = False, default = "CASH")

    created_at = Column(DateTime, default = datetime.now)


class AttachmentDB(Base):
    __tablename__ = "attachments"

    # student id or admission request id
    owner_id = Column(String, primary_key = True)
    photo = Column(Text, nullable = True)
    id_proof = Column(Text, nullable = True)


class AdmissionRequestDB(Base):
    __tablename__ = "admission_requests"

    id = Column(String, primary_key = True, index = True)
    full_name = Column(String, nullable = False)
    mobile = Column(String, nullable = False)
    email = Column(String, nullable = True)
    address = Column(String, nullable = True)
    plan_type = Column(String, nullable = False)
    duration = Column(String, nullable = False)
    locker_required = Column(Boolean, nullable = False, default = False)
    preferred_slots = Column(JSON, nullable = False, default = list)
    id_proof_type = Column(String, nullable = True)
    status = Column(String, nullable = False, default = "PENDING")
    timestamp = Column(DateTime, default = datetime.now)
