"""Settlement sweep: charge one credit per attendee once a class has ended.

The slot's ``attendees_deducted`` list is the only guard against charging
twice, so the sweep can be re-run at any time. Each slot is settled in its
own transaction; a failure on one slot is logged and the sweep moves on.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from flask import current_app

from models import db
from models.slot import Slot
from models.student import Student
from scheduling.keys import TimeRange
from scheduling.transaction import locked_get, run_transaction
from utils.audit import add_log
from utils.dates import academy_tz, as_utc, utc_now

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    scanned: int = 0
    settled_slots: int = 0
    charged: int = 0
    missing_students: int = 0
    failed_slots: list = field(default_factory=list)

    def to_dict(self):
        return {
            "scanned": self.scanned,
            "settledSlots": self.settled_slots,
            "charged": self.charged,
            "missingStudents": self.missing_students,
            "failedSlots": list(self.failed_slots),
        }


def slot_end(slot: Slot, tz) -> datetime:
    """Wall-clock instant the slot's time band ends, in the academy zone."""
    end = TimeRange.parse(slot.time_slot).end_time
    return datetime.combine(slot.date, end, tzinfo=tz)


def settle_slot(slot_id: str, now: datetime, tz):
    """Charge pending attendees of one ended slot.

    Returns (charged, missing) or None when there was nothing to do.
    """
    def work():
        slot = locked_get(Slot, slot_id)
        # gone (regenerated) or not over yet
        if slot is None or slot_end(slot, tz) > now:
            return None

        deducted = list(slot.attendees_deducted or [])
        pending = []
        for sid in slot.attendee_ids or []:
            if sid not in deducted and sid not in pending:
                pending.append(sid)
        if not pending:
            return None

        charged = missing = 0
        for sid in pending:
            student = locked_get(Student, sid)
            if student is None:
                # marked anyway so the sweep does not retry it forever
                logger.warning("Student %s in slot %s no longer exists; marked settled without charge", sid, slot_id)
                missing += 1
                continue
            student.remaining_credits = student.remaining_credits - 1
            charged += 1

        slot.attendees_deducted = deducted + pending
        return charged, missing

    return run_transaction(work)


def run_settlement_sweep(now=None) -> SweepResult:
    """Scan slots dated in the last ``SETTLEMENT_WINDOW_DAYS`` days up to today."""
    tz = academy_tz()
    now = as_utc(now or utc_now()).astimezone(tz)
    today = now.date()
    window = current_app.config.get("SETTLEMENT_WINDOW_DAYS", 7)

    slot_ids = [
        sid for (sid,) in (
            db.session.query(Slot.id)
            .filter(Slot.date >= today - timedelta(days=window), Slot.date <= today)
            .order_by(Slot.date.asc(), Slot.id.asc())
            .all()
        )
    ]

    result = SweepResult(scanned=len(slot_ids))
    for slot_id in slot_ids:
        try:
            outcome = settle_slot(slot_id, now, tz)
        except Exception:
            logger.exception("Settlement failed for slot %s", slot_id)
            result.failed_slots.append(slot_id)
            continue

        if outcome is None:
            continue
        charged, missing = outcome
        result.settled_slots += 1
        result.charged += charged
        result.missing_students += missing
        logger.info("Settled slot %s: charged %d attendee(s), %d missing", slot_id, charged, missing)

    if result.settled_slots or result.failed_slots:
        add_log(
            f"Settlement sweep charged {result.charged} credit(s) across {result.settled_slots} slot(s)",
            "WARNING" if result.failed_slots else "SUCCESS",
            metadata=result.to_dict(),
        )
    return result
