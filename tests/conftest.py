import itertools
import os

# keep the API module's default database in memory
os.environ.setdefault("LIBRARY_DATABASE_URL", "sqlite://")
os.environ.setdefault("LIBRARY_LOG_LEVEL", "WARNING")

from datetime import date

import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from library_seats.allocator import SeatAllocationEngine
from library_seats.database import init_db, make_engine
from library_seats.models import PlanDuration, PlanType, Student
from library_seats.store import RosterStore

TODAY = date(2025, 6, 1)


@pytest.fixture
def db_engine():
    db_engine = make_engine("sqlite://", poolclass=StaticPool)
    init_db(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def store(db_engine):
    return RosterStore(sessionmaker(autocommit=False, autoflush=False, bind=db_engine))


@pytest.fixture
def engine(store):
    return SeatAllocationEngine(store, total_seats=121, today=lambda: TODAY)


@pytest.fixture
def make_student():
    counter = itertools.count(1)

    def _make(**overrides):
        n = next(counter)
        data = dict(
            id=f"stu_{n}",
            full_name=f"Student {n}",
            mobile=f"90000{n:05d}",
            seat_number=25,
            plan_type=PlanType.SIX_HOURS,
            duration=PlanDuration.ONE_MONTH,
            start_date=date(2025, 1, 1),
            assigned_slots=["S1"],
        )
        data.update(overrides)
        return Student(**data)

    return _make


@pytest.fixture
def client(store, engine):
    from fastapi.testclient import TestClient

    from library_seats.main_api import app, get_engine, get_store

    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_engine] = lambda: engine
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
