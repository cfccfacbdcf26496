"""
Sample roster for local runs: python -m library_seats.seed
"""
import random
from datetime import date, timedelta

from library_seats import auth, config
from library_seats.allocator import SeatAllocationEngine
from library_seats.database import SessionLocal, init_db
from library_seats.errors import ConflictError
from library_seats.models import PlanDuration, PlanType, Slot, Student
from library_seats.plans import required_slot_count
from library_seats.store import RosterStore

NAMES = [
    "Aarav", "Vivaan", "Aditya", "Vihaan", "Arjun", "Sai", "Reyansh", "Ayaan",
    "Krishna", "Ishaan", "Diya", "Saanvi", "Ananya", "Aadhya", "Pari", "Riya",
]


def insert_sample_data(engine, count=30, seed=None, today=None):
    """
    Admit up to `count` random students. Picks that clash with a seat
    already taken are skipped, so fewer may be admitted.
    """
    rng = random.Random(seed)
    today = today or date.today()
    admitted = []
    password_hash = auth.hash_password("pass")

    for i in range(count):
        plan = rng.choice(list(PlanType))
        slots = rng.sample(list(Slot), required_slot_count(plan))
        student = Student(
            id=f"seed_{i}",
            full_name=f"{rng.choice(NAMES)} Test",
            mobile=f"98765{10000 + i}",
            email=f"student{i}@example.com",
            seat_number=rng.randint(1, min(80, engine.total_seats)),
            plan_type=plan,
            duration=rng.choice(list(PlanDuration)),
            start_date=today - timedelta(days=rng.randint(0, 60)),
            assigned_slots=slots,
            locker_required=rng.random() < 0.2,
            password_hash=password_hash,
        )
        try:
            admitted.append(engine.add_student(student))
        except ConflictError:
            continue
    return admitted


def main():
    config.configure_logging()
    init_db()
    engine = SeatAllocationEngine(RosterStore(SessionLocal))
    insert_sample_data(engine)

    print("\n--- Seat Occupancy ---")
    for seat in engine.get_seats_status():
        if not seat.occupants:
            continue
        holders = ", ".join(
            f"{o.full_name} [{'/'.join(s.value for s in o.sorted_slots())}]" for o in seat.occupants
        )
        locker = " | locker taken" if seat.is_locker_taken else ""
        print(f"Seat {seat.id}: {holders}{locker}")


if __name__ == "__main__":
    main()
