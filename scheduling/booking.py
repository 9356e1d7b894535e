"""Booking engine: lock / release / confirm / cancel against one slot.

Per (slot, student):

    UNBOOKED -> LOCKED -> CONFIRMED
    LOCKED -> UNBOOKED      (expiry or release)
    CONFIRMED -> UNBOOKED   (cancel)

Every operation is one transaction over the slot row (and the student row
where needed). Expired locks are never evicted by a timer; they are dropped
from the lock list whenever a transaction rewrites it, and ignored by every
capacity check.

Credits are not touched here. The settlement sweep charges one credit per
attendee once the class has ended.
"""
import logging
from datetime import timedelta

from flask import current_app

from models import db
from models.attendance import Attendance
from models.slot import Slot
from models.student import Student
from scheduling import students as student_directory
from scheduling.catalog import get_catalog
from scheduling.errors import (
    AlreadyBookedError,
    AlreadyLockedError,
    BreakSlotError,
    HasDebtError,
    InsufficientCreditsError,
    InvalidTimeSlotError,
    LockExpiredError,
    LockNotFoundError,
    MissingSlotDataError,
    NotBookedError,
    SlotFullError,
    SlotNotFoundError,
    StudentNotFoundError,
)
from scheduling.keys import SlotKey, TimeRange
from scheduling.transaction import locked_get, run_transaction
from scheduling.worker import request_sweep
from utils.audit import add_log
from utils.dates import from_ms, to_ms, utc_now

logger = logging.getLogger(__name__)


def _now_ms(now=None) -> int:
    return to_ms(now or utc_now())


def _key(slot_id) -> str:
    if isinstance(slot_id, SlotKey):
        return str(slot_id)
    try:
        return str(SlotKey.parse(slot_id))
    except ValueError:
        raise SlotNotFoundError() from None


def is_lock_active(lock: dict, now_ms: int) -> bool:
    return lock["expiresAt"] >= now_ms


def active_locks(slot: Slot, now_ms: int) -> list:
    return [l for l in (slot.locks or []) if is_lock_active(l, now_ms)]


def availability(slot: Slot, now=None) -> dict:
    """Read-only view: seats taken by attendees and live locks."""
    locks = active_locks(slot, _now_ms(now))
    taken = len(slot.attendee_ids or []) + len(locks)
    return {
        "capacity": slot.capacity,
        "attendees": len(slot.attendee_ids or []),
        "activeLocks": len(locks),
        "free": max(slot.capacity - taken, 0),
    }


def get_slot(slot_id):
    return db.session.get(Slot, _key(slot_id))


def get_range_slots(start, end):
    return (
        Slot.query
        .filter(Slot.date >= start, Slot.date <= end)
        .order_by(Slot.date.asc(), Slot.time_slot.asc())
        .all()
    )


def _require_slot(key: str) -> Slot:
    slot = locked_get(Slot, key)
    if slot is None:
        raise SlotNotFoundError()
    return slot


def lock_slot(slot_id, student_id: str, temp_name=None, now=None) -> dict:
    """Reserve one seat for ``LOCK_TTL_MINUTES`` (15 by default)."""
    key = _key(slot_id)
    ttl = timedelta(minutes=current_app.config.get("LOCK_TTL_MINUTES", 15))

    def work():
        slot = _require_slot(key)
        if slot.is_break:
            raise BreakSlotError()
        now_ms = _now_ms(now)
        valid = active_locks(slot, now_ms)

        if len(slot.attendee_ids or []) + len(valid) >= slot.capacity:
            raise SlotFullError()
        if student_id in (slot.attendee_ids or []):
            raise AlreadyBookedError()
        if any(l["studentId"] == student_id for l in valid):
            raise AlreadyLockedError()

        lock = {"studentId": student_id, "expiresAt": now_ms + int(ttl.total_seconds() * 1000)}
        if temp_name:
            lock["tempName"] = temp_name

        # writing the filtered list prunes stale locks as a side effect
        slot.locks = valid + [lock]
        return lock

    lock = run_transaction(work)
    logger.info("Slot %s locked for %s until %s", key, student_id, from_ms(lock["expiresAt"]).isoformat())
    return lock


def release_lock(slot_id, student_id: str, now=None) -> None:
    key = _key(slot_id)

    def work():
        slot = _require_slot(key)
        valid = active_locks(slot, _now_ms(now))
        if not any(l["studentId"] == student_id for l in valid):
            raise LockNotFoundError()
        slot.locks = [l for l in valid if l["studentId"] != student_id]

    run_transaction(work)
    logger.info("Slot %s lock released for %s", key, student_id)


def _virtual_slot(key: str, fallback: dict) -> Slot:
    """Materialize a slot that generation never created."""
    parsed = SlotKey.parse(key)

    capacity = fallback.get("capacity")
    if capacity is None or isinstance(capacity, bool):
        raise MissingSlotDataError("Slot data must include a capacity")
    try:
        capacity = int(capacity)
    except (TypeError, ValueError):
        raise MissingSlotDataError("Slot capacity must be a whole number") from None
    if capacity < 0:
        raise MissingSlotDataError("Slot capacity must not be negative")

    time_slot = fallback.get("timeSlot")
    if time_slot:
        try:
            time_slot = str(TimeRange.parse(time_slot))
        except ValueError:
            raise InvalidTimeSlotError() from None
    else:
        band = get_catalog().band(parsed.band)
        if band is not None:
            time_slot = band.time_slot
        else:
            try:
                time_slot = str(TimeRange.parse(parsed.band))
            except ValueError:
                raise MissingSlotDataError("Slot data must include a timeSlot") from None

    return Slot(
        id=key,
        date=parsed.date,
        time_id=fallback.get("timeId") or parsed.band,
        time_slot=time_slot,
        day_type=fallback.get("dayType") or get_catalog().day_type_for(parsed.date).value,
        season_id=fallback.get("seasonId"),
        category_id=fallback.get("categoryId"),
        schedule_template_id=fallback.get("scheduleTemplateId"),
        capacity=capacity,
        is_break=bool(fallback.get("isBreak", False)),
        origin="booking",
        attendee_ids=[],
        locks=[],
        attendees_deducted=[],
    )


def confirm_booking(slot_id, student_id: str, fallback=None, checked_by=None, now=None) -> Slot:
    """Turn the student's lock (or a free seat) into a confirmed attendance.

    ``fallback`` carries slot data (capacity, categoryId, ...) used to create
    the slot on the spot when it was never generated.
    """
    key = _key(slot_id)

    def work():
        slot = locked_get(Slot, key)
        student = locked_get(Student, student_id)
        if student is None:
            raise StudentNotFoundError()

        created = False
        if slot is None:
            if not fallback:
                raise MissingSlotDataError()
            slot = _virtual_slot(key, fallback)
            created = True

        if slot.is_break:
            raise BreakSlotError()

        if student.has_debt:
            raise HasDebtError()
        if student.remaining_credits <= 0:
            raise InsufficientCreditsError()

        attendees = list(slot.attendee_ids or [])
        if student_id in attendees:
            raise AlreadyBookedError()

        now_ms = _now_ms(now)
        mine = next((l for l in (slot.locks or []) if l["studentId"] == student_id), None)
        valid = active_locks(slot, now_ms)
        if mine is not None:
            if not is_lock_active(mine, now_ms):
                raise LockExpiredError()
        elif len(attendees) + len(valid) >= slot.capacity:
            raise SlotFullError()

        slot.locks = [l for l in valid if l["studentId"] != student_id]
        slot.attendee_ids = attendees + [student_id]
        if created:
            db.session.add(slot)

        db.session.add(Attendance(student_id=student_id, slot_id=key, checked_by=checked_by))
        return slot, student.full_name

    slot, student_name = run_transaction(work)

    add_log(f"Student {student_name} booked into {key}", "SUCCESS", metadata={"slot_id": key, "student_id": student_id})
    request_sweep()
    return slot


def cancel_booking(slot_id, student_id: str) -> Slot:
    """Remove a confirmed attendee. No credit is refunded."""
    key = _key(slot_id)

    def work():
        slot = _require_slot(key)
        attendees = list(slot.attendee_ids or [])
        if student_id not in attendees:
            raise NotBookedError()
        slot.attendee_ids = [a for a in attendees if a != student_id]
        return slot, student_id in (slot.attendees_deducted or [])

    slot, already_charged = run_transaction(work)

    student = student_directory.get_by_id(student_id)
    who = student.full_name if student else student_id
    meta = {"slot_id": key, "student_id": student_id}

    if already_charged:
        # TODO: refund policy for sessions already settled is pending a product decision
        logger.warning("Cancelled already-settled booking %s for %s; no refund issued", key, student_id)
        add_log(f"Booking {key} for {who} cancelled after settlement; credit not refunded", "WARNING", metadata=meta)
    else:
        add_log(f"Booking {key} for {who} cancelled", "INFO", metadata=meta)

    request_sweep()
    return slot
