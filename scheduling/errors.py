"""Error kinds raised by the scheduling core.

Every error carries a message that can be shown to staff as-is and the HTTP
status the blueprints answer with.
"""


class SchedulingError(Exception):
    status_code = 400
    default_message = "Scheduling error"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


# ---------- generation / templates ----------

class NoTemplatesError(SchedulingError):
    status_code = 409
    default_message = "No schedule templates exist for this season"


class SeasonNotFoundError(SchedulingError):
    status_code = 404
    default_message = "Season not found"


class TemplateNotFoundError(SchedulingError):
    status_code = 404
    default_message = "Schedule template not found"


class InvalidTimeSlotError(SchedulingError):
    default_message = "Invalid time format. Use HH:MM-HH:MM (e.g. 14:00-15:30)"


class TemplateOverlapError(SchedulingError):
    status_code = 409
    default_message = "Time block overlaps an existing template"


class InvalidDateRangeError(SchedulingError):
    default_message = "Invalid date range"


# ---------- booking ----------

class SlotNotFoundError(SchedulingError):
    status_code = 404
    default_message = "Slot does not exist"


class StudentNotFoundError(SchedulingError):
    status_code = 404
    default_message = "Student not found"


class SlotFullError(SchedulingError):
    status_code = 409
    default_message = "Slot full"


class BreakSlotError(SchedulingError):
    status_code = 409
    default_message = "Cannot book a break slot"


class AlreadyBookedError(SchedulingError):
    status_code = 409
    default_message = "Student is already booked in this slot"


class AlreadyLockedError(SchedulingError):
    status_code = 409
    default_message = "Student already has a reservation in progress"


class LockExpiredError(SchedulingError):
    status_code = 410
    default_message = "Reservation expired. Please try again"


class LockNotFoundError(SchedulingError):
    status_code = 404
    default_message = "Student holds no reservation on this slot"


class HasDebtError(SchedulingError):
    status_code = 402
    default_message = "Student has outstanding debt and cannot book"


class InsufficientCreditsError(SchedulingError):
    status_code = 402
    default_message = "Insufficient class credits"


class MissingSlotDataError(SchedulingError):
    status_code = 404
    default_message = "Slot does not exist and no slot data was supplied"


class NotBookedError(SchedulingError):
    status_code = 404
    default_message = "Student is not booked in this slot"


class TransactionConflictError(SchedulingError):
    status_code = 503
    default_message = "Too many concurrent changes, please retry"
