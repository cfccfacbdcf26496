import logging
from dataclasses import asdict
from datetime import date
from typing import List, Optional

from fastapi import Body, Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from library_seats import auth, backup, config, plans, reports
from library_seats.admissions import AdmissionService
from library_seats.allocator import SeatAllocationEngine
from library_seats.database import SessionLocal, init_db
from library_seats.errors import ConflictError, NotFoundError, StorageError, ValidationError
from library_seats.models import PlanDuration, PlanType, RequestStatus, Slot
from library_seats.schemas import (
    AdmissionRequestIn,
    AdmissionRequestOut,
    ApproveRequest,
    AvailabilityOut,
    ImportRequest,
    LoginOut,
    LoginRequest,
    QuoteOut,
    RevenueRow,
    SeatOut,
    SlotOut,
    StudentIn,
    StudentOut,
    TransactionOut,
)
from library_seats.store import RosterStore
from library_seats.student_import import import_students_excel

config.configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title = "Library Seat Manager API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

init_db()

roster_store = RosterStore(SessionLocal)


def get_store():
    return roster_store


def get_engine(store: RosterStore = Depends(get_store)):
    return SeatAllocationEngine(store)


def get_admissions(engine: SeatAllocationEngine = Depends(get_engine)):
    return AdmissionService(engine)


# ---------- Error mapping ----------

@app.exception_handler(ConflictError)
def conflict_handler(request: Request, exc: ConflictError):
    return JSONResponse(
        status_code=409,
        content={"detail": str(exc), "reason": exc.reason.value, "slots": exc.slots},
    )


@app.exception_handler(NotFoundError)
def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
def validation_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": exc.errors})


@app.exception_handler(StorageError)
def storage_handler(request: Request, exc: StorageError):
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.get("/")
def root():
    return {"message": "Library Seat Manager API is running !"}


# ---------- Seats & slots ----------

@app.get("/slots", response_model=List[SlotOut])
def get_slots():
    return [SlotOut.from_slot(s) for s in Slot]


@app.get("/seats", response_model=List[SeatOut])
def get_seats(engine: SeatAllocationEngine = Depends(get_engine)):
    return [SeatOut.from_seat(seat) for seat in engine.get_seats_status()]


@app.get("/seats/{seat_number}", response_model=SeatOut)
def get_seat(seat_number: int, engine: SeatAllocationEngine = Depends(get_engine)):
    return SeatOut.from_seat(engine.get_seat(seat_number))


@app.get("/seats/{seat_number}/availability", response_model=AvailabilityOut)
def seat_availability(
    seat_number: int,
    slots: List[Slot] = Query(...),
    exclude: Optional[str] = None,
    locker: bool = False,
    engine: SeatAllocationEngine = Depends(get_engine),
):
    return AvailabilityOut(
        seat_number=seat_number,
        slots=slots,
        slots_available=engine.check_slot_availability(seat_number, slots, exclude),
        locker_available=engine.check_locker_availability(seat_number, exclude) if locker else None,
    )


@app.get("/plans/quote", response_model=QuoteOut)
def plan_quote(plan_type: PlanType, duration: PlanDuration, locker_required: bool = False):
    return QuoteOut(
        plan_type=plan_type,
        duration=duration,
        locker_required=locker_required,
        slot_count=plans.required_slot_count(plan_type),
        amount=plans.quote(plan_type, duration, locker_required),
    )


# ---------- Students ----------

@app.get("/students", response_model=List[StudentOut])
def get_students(active: Optional[bool] = None, store: RosterStore = Depends(get_store)):
    students = store.load()
    if active is not None:
        students = [s for s in students if s.is_active == active]
    return [StudentOut.from_student(s) for s in sorted(students, key=lambda s: s.start_date, reverse=True)]


@app.get("/students/expiring", response_model=List[StudentOut])
def get_expiring_students(today: Optional[date] = None, engine: SeatAllocationEngine = Depends(get_engine)):
    students = engine.get_expiring_students(today)
    return [StudentOut.from_student(s) for s in sorted(students, key=lambda s: s.end_date)]


@app.post("/students/import")
def import_students(req: ImportRequest, engine: SeatAllocationEngine = Depends(get_engine)):
    try:
        result = import_students_excel(req.file_path, engine)
    except (OSError, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"Excel read failed: {str(e)}")

    return {
        "message": "Student import completed ✅",
        "inserted": result["inserted"],
        "skipped": result["skipped"],
    }


@app.get("/students/{student_id}", response_model=StudentOut)
def get_student(student_id: str, store: RosterStore = Depends(get_store)):
    student = store.get(student_id, with_attachments=True)
    if not student:
        raise NotFoundError("Student", student_id)
    return StudentOut.from_student(student)


@app.post("/students", response_model=StudentOut, status_code=201)
def add_student(payload: StudentIn, engine: SeatAllocationEngine = Depends(get_engine)):
    password_hash = auth.hash_password(payload.password) if payload.password else None
    student = engine.add_student(payload.to_student(password_hash))
    return StudentOut.from_student(student)


@app.put("/students/{student_id}", response_model=StudentOut)
def update_student(student_id: str, payload: StudentIn, engine: SeatAllocationEngine = Depends(get_engine)):
    password_hash = auth.hash_password(payload.password) if payload.password else None
    student = engine.update_student(payload.to_student(password_hash, student_id=student_id))
    return StudentOut.from_student(student)


@app.delete("/students/{student_id}")
def delete_student(student_id: str, engine: SeatAllocationEngine = Depends(get_engine)):
    engine.delete_student(student_id)
    return {"message": "Student deleted", "id": student_id}


@app.post("/students/{student_id}/deactivate", response_model=StudentOut)
def deactivate_student(student_id: str, engine: SeatAllocationEngine = Depends(get_engine)):
    return StudentOut.from_student(engine.deactivate(student_id))


# ---------- Ledger & reports ----------

@app.get("/transactions", response_model=List[TransactionOut])
def get_transactions(store: RosterStore = Depends(get_store)):
    return [TransactionOut(**asdict(tx)) for tx in store.transactions()]


@app.get("/reports/revenue", response_model=List[RevenueRow])
def revenue_report(store: RosterStore = Depends(get_store)):
    df = reports.revenue_summary_by_month(store.transactions())
    return [RevenueRow(month=r["month"], revenue=int(r["revenue"])) for r in df.to_dict("records")]


@app.get("/export/students/excel")
def export_students_excel(store: RosterStore = Depends(get_store)):
    students = store.load()
    if not students:
        raise HTTPException(status_code=404, detail="No students to export")

    file_path = reports.export_roster_excel(students)
    return FileResponse(
        path=str(file_path),
        filename=file_path.name,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )


@app.get("/export/students/pdf")
def export_students_pdf(store: RosterStore = Depends(get_store)):
    students = [s for s in store.load() if s.is_active]
    if not students:
        raise HTTPException(status_code=404, detail="No active students to export")

    file_path = reports.export_roster_pdf(students)
    return FileResponse(
        path=str(file_path),
        filename=file_path.name,
        media_type="application/pdf"
    )


# ---------- Admissions ----------

@app.get("/admissions", response_model=List[AdmissionRequestOut])
def list_admissions(status: Optional[RequestStatus] = None, service: AdmissionService = Depends(get_admissions)):
    return [AdmissionRequestOut.from_request(r) for r in service.list_requests(status)]


@app.post("/admissions", response_model=AdmissionRequestOut, status_code=201)
def submit_admission(payload: AdmissionRequestIn, service: AdmissionService = Depends(get_admissions)):
    return AdmissionRequestOut.from_request(service.submit_request(payload.to_request()))


@app.post("/admissions/{request_id}/approve", response_model=StudentOut, status_code=201)
def approve_admission(request_id: str, payload: ApproveRequest, service: AdmissionService = Depends(get_admissions)):
    extra = {"payment_mode": payload.payment_mode, "gender": payload.gender}
    if payload.password:
        extra["password_hash"] = auth.hash_password(payload.password)
    student = service.approve_request(
        request_id,
        seat_number=payload.seat_number,
        assigned_slots=payload.assigned_slots,
        start_date=payload.start_date,
        **extra,
    )
    return StudentOut.from_student(student)


@app.post("/admissions/{request_id}/reject", response_model=AdmissionRequestOut)
def reject_admission(request_id: str, service: AdmissionService = Depends(get_admissions)):
    return AdmissionRequestOut.from_request(service.reject_request(request_id))


@app.delete("/admissions/{request_id}")
def delete_admission(request_id: str, service: AdmissionService = Depends(get_admissions)):
    service.delete_request(request_id)
    return {"message": "Admission request deleted", "id": request_id}


# ---------- Maintenance ----------

@app.post("/maintenance/purge")
def purge_inactive(today: Optional[date] = None, engine: SeatAllocationEngine = Depends(get_engine)):
    return {"removed": engine.purge_inactive(today)}


@app.get("/backup")
def export_backup(store: RosterStore = Depends(get_store)):
    return backup.export_snapshot(store)


@app.post("/backup")
def import_backup(doc: dict = Body(...), store: RosterStore = Depends(get_store)):
    imported = backup.import_snapshot(store, doc)
    return {"message": "Backup restored ✅", "students": imported}


@app.post("/login", response_model=LoginOut)
def login(payload: LoginRequest, store: RosterStore = Depends(get_store)):
    result = auth.login(payload.mobile, payload.password, store)
    if result is None:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    role, student = result
    return LoginOut(role=role, user=StudentOut.from_student(student) if student else None)
