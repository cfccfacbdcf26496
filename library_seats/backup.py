"""
Whole-database JSON snapshots: export everything, or replace everything.
"""
import logging
from dataclasses import asdict
from datetime import date, datetime

from library_seats import config
from library_seats.allocator import find_conflicts, student_errors
from library_seats.errors import ValidationError
from library_seats.models import AdmissionRequest, Student, Transaction

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


def _jsonable(value):
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, frozenset):
        return sorted(getattr(v, "value", v) for v in value)
    return getattr(value, "value", value)


def _record(obj, drop=("photo", "id_proof")):
    return {k: _jsonable(v) for k, v in asdict(obj).items() if k not in drop}


def export_snapshot(store) -> dict:
    with store.reading() as roster:
        return {
            "version": SNAPSHOT_VERSION,
            "exported_at": datetime.now().isoformat(timespec="seconds"),
            "students": [_record(s) for s in roster.students()],
            "transactions": [_record(t, drop=()) for t in roster.transactions.list()],
            "attachments": roster.attachments.all(),
            "admission_requests": [_record(r) for r in roster.requests()],
        }


def import_snapshot(store, doc: dict, total_seats=None) -> int:
    """
    Replace the whole data set with `doc`. Rejected without writing anything
    if the document is malformed, a student breaks the seat or plan rules,
    or its roster double-books a slot or locker.
    """
    if not isinstance(doc, dict) or not isinstance(doc.get("students"), list):
        raise ValidationError("Snapshot must contain a 'students' list.")

    try:
        students = [Student(**s) for s in doc["students"]]
        transactions = [Transaction(**t) for t in doc.get("transactions", [])]
        requests = [
            AdmissionRequest(**{**r, "timestamp": datetime.fromisoformat(r["timestamp"])})
            for r in doc.get("admission_requests", [])
        ]
    except (TypeError, ValueError, KeyError) as e:
        raise ValidationError(f"Malformed snapshot: {e}") from e

    total_seats = total_seats or config.TOTAL_SEATS
    errors = [
        f"{s.id}: {message}"
        for s in students
        for message in student_errors(s, total_seats)
    ]
    if errors:
        raise ValidationError(errors)

    conflicts = find_conflicts(students)
    if conflicts:
        raise conflicts[0]

    with store.mutate() as roster:
        roster.replace_all(students)
        roster.replace_all_requests(requests)
        roster.transactions.clear()
        for tx in transactions:
            roster.transactions.append(tx)
        roster.attachments.clear()
        for owner_id, payload in (doc.get("attachments") or {}).items():
            roster.attachments.put(owner_id, payload.get("photo"), payload.get("id_proof"))

    logger.info(f"Imported snapshot with {len(students)} student(s), {len(transactions)} transaction(s)")
    return len(students)
