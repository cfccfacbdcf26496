import logging

import pandas as pd

from library_seats.errors import ConflictError, ValidationError
from library_seats.models import Student

logger = logging.getLogger(__name__)

REQUIRED_COLS = {"full_name", "mobile", "seat_number", "plan_type", "duration", "start_date", "slots"}


def _truthy(value):
    if isinstance(value, str):
        return value.strip().lower() in ("1", "y", "yes", "true")
    return bool(value) and not pd.isna(value)


def _optional(row, column):
    value = row.get(column)
    if value is None or pd.isna(value):
        return None
    return str(value).strip() or None


def student_from_excel_row(row):
    return Student(
        full_name = str(row["full_name"]).strip(),
        mobile = str(row["mobile"]).strip(),
        seat_number = int(row["seat_number"]),
        plan_type = str(row["plan_type"]).strip(),
        duration = str(row["duration"]).strip(),
        start_date = pd.Timestamp(row["start_date"]).date(),
        assigned_slots = [s.strip() for s in str(row["slots"]).split(",") if s.strip()],
        locker_required = _truthy(row.get("locker_required", False)),
        email = _optional(row, "email"),
        parent_name = _optional(row, "parent_name"),
        parent_mobile = _optional(row, "parent_mobile"),
    )


def import_students_excel(file_path, engine):
    """
    Admit every row of the sheet through the engine. Rows that are malformed
    or clash with a seat already taken are skipped and reported.
    """
    df = pd.read_excel(file_path)

    if not REQUIRED_COLS.issubset(df.columns):
        missing = REQUIRED_COLS - set(df.columns)
        raise ValidationError(f"Missing columns: {sorted(missing)}")

    inserted = 0
    skipped = []

    for index, row in df.iterrows():
        try:
            engine.add_student(student_from_excel_row(row))
            inserted += 1
        except (ValueError, ValidationError, ConflictError) as e:
            logger.warning(f"Row {index + 2} skipped: {e}")
            skipped.append({"row": index + 2, "reason": str(e)})

    return {"inserted": inserted, "skipped": skipped}
