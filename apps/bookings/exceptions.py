"""
Custom exceptions for the booking engine.
Raised in engine.py / commit.py and caught in views.py for clean error handling.

Each exception carries a stable `code` for API clients and the HTTP status
the views answer with.
"""


class BookingEngineError(Exception):
    """Base exception for all booking engine errors."""
    code = 'BOOKING_ERROR'
    http_status = 400


# ── Lookups ───────────────────────────────────────────────────────────────────

class NotFoundError(BookingEngineError):
    code = 'NOT_FOUND'
    http_status = 404


class ShiftNotFoundError(NotFoundError):
    """Raised when the referenced shift does not exist."""


class ServiceNotFoundError(NotFoundError):
    """Raised when the referenced service does not exist (or is not bookable)."""


# ── State conflicts ───────────────────────────────────────────────────────────

class InactiveError(BookingEngineError):
    code = 'INACTIVE'
    http_status = 422


class ShiftInactiveError(InactiveError):
    """Raised when the shift has been deactivated."""


class ServiceInactiveError(InactiveError):
    """Raised when the service has been deactivated."""


class ShiftMismatchError(BookingEngineError):
    """Raised when the shift's location or staff member differs from the request."""
    code = 'MISMATCH'
    http_status = 422


class ServiceNotQualifiedError(BookingEngineError):
    """Raised when the shift is not qualified for the requested service."""
    code = 'NOT_QUALIFIED'
    http_status = 422


class InvalidTimeRangeError(BookingEngineError):
    """Raised when a requested range does not start before it ends."""
    code = 'INVALID_RANGE'
    http_status = 422


class OutsideShiftHoursError(BookingEngineError):
    """Raised when the requested interval leaves the shift or overlaps a staff break."""
    code = 'OUTSIDE_HOURS'
    http_status = 422


class LeadTimeError(BookingEngineError):
    """Raised when the slot starts earlier than now + the service lead time."""
    code = 'LEAD_TIME'
    http_status = 422


class InvalidAddonError(BookingEngineError):
    """Raised when an add-on is unknown, inactive, foreign to the service or mispriced."""
    code = 'INVALID_ADDON'
    http_status = 422


# ── Concurrency conflicts ─────────────────────────────────────────────────────

class SlotConflictError(BookingEngineError):
    """Base for conflicts the client resolves by picking another slot."""
    http_status = 409


class SlotBookedError(SlotConflictError):
    """Raised when a live booking already covers part of the requested interval."""
    code = 'SLOT_BOOKED'


class SlotLockedError(SlotConflictError):
    """Raised when another session holds an active lock on an overlapping interval."""
    code = 'SLOT_LOCKED'


class SlotTakenError(SlotConflictError):
    """Raised when the booking insert loses the race to a concurrent commit."""
    code = 'SLOT_TAKEN'
