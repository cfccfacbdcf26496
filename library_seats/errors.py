"""
Errors raised by the allocation engine and its stores.
"""
import enum


class ConflictReason(str, enum.Enum):
    SLOT_OVERLAP = "SLOT_OVERLAP"
    LOCKER_OVERLAP = "LOCKER_OVERLAP"


class SeatManagerError(Exception):
    """Base class for everything the engine reports to its caller"""
    pass


class ConflictError(SeatManagerError):
    """A slot or locker on the seat is already held by another active student"""

    def __init__(self, reason, seat_number, slots=()):
        self.reason = ConflictReason(reason)
        self.seat_number = seat_number
        self.slots = sorted(getattr(s, "value", s) for s in slots)
        if self.reason is ConflictReason.SLOT_OVERLAP:
            message = f"Seat {seat_number}: slot(s) {', '.join(self.slots)} already taken"
        else:
            message = f"Seat {seat_number}: locker already taken"
        super().__init__(message)


class NotFoundError(SeatManagerError):
    def __init__(self, kind, key):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} {key!r} not found")


class ValidationError(SeatManagerError):
    """Malformed input, rejected before any conflict check"""

    def __init__(self, errors):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class StorageError(SeatManagerError):
    """The persistence layer failed; nothing from the operation was kept"""
    pass
