"""Slot generation strategies.

``TemplateSlotGenerator`` rebuilds a date range from a season's templates
(destructive: existing slots in the range, and their bookings, are dropped).
``RuleSlotGenerator`` is the bootstrap path: it uses the static age rules of
the catalog and pre-fills attendees from students' fixed weekly schedules,
upserting by key.

Both write in bulk without a transaction; a failed run is repaired by
running it again.
"""
import logging
from datetime import date, timedelta

from models import db
from models.slot import Slot
from scheduling import students as student_directory
from scheduling import templates as template_store
from scheduling.catalog import ScheduleCatalog
from scheduling.errors import InvalidDateRangeError, NoTemplatesError
from scheduling.keys import SlotKey
from scheduling.seasons import require_season, season_date_range
from utils.audit import add_log

logger = logging.getLogger(__name__)


def iter_days(start: date, end: date):
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def _check_range(start: date, end: date):
    if start is None or end is None or start > end:
        raise InvalidDateRangeError("start date must not be after end date")


class SlotGenerator:
    origin = None

    def __init__(self, catalog: ScheduleCatalog):
        self.catalog = catalog

    def generate(self, start: date, end: date) -> int:
        raise NotImplementedError


class TemplateSlotGenerator(SlotGenerator):
    origin = "template"

    def __init__(self, catalog: ScheduleCatalog, season_id: str):
        super().__init__(catalog)
        self.season_id = season_id

    def generate(self, start: date, end: date) -> int:
        _check_range(start, end)
        require_season(self.season_id)

        templates = template_store.get_by_season(self.season_id)
        if not templates:
            raise NoTemplatesError()

        in_range = (Slot.date >= start, Slot.date <= end)
        lost = sum(
            len(ids or [])
            for (ids,) in db.session.query(Slot.attendee_ids).filter(*in_range).all()
        )
        removed = Slot.query.filter(*in_range).delete(synchronize_session="fetch")
        if lost:
            logger.warning(
                "Regenerating %s..%s drops %d existing booking(s) across %d slot(s)",
                start, end, lost, removed,
            )

        created = 0
        for day in iter_days(start, end):
            day_type = self.catalog.day_type_for(day).value
            seen = set()
            for template in templates:
                if template.day_type != day_type:
                    continue
                key = str(SlotKey(day, template.time_slot))
                if key in seen:
                    logger.warning("Duplicate template band %s on %s skipped", template.time_slot, day)
                    continue
                seen.add(key)

                db.session.add(Slot(
                    id=key,
                    date=day,
                    time_id=template.time_slot,
                    time_slot=template.time_slot,
                    day_type=day_type,
                    season_id=self.season_id,
                    category_id=template.category_id,
                    schedule_template_id=template.id,
                    capacity=template.capacity,
                    is_break=bool(template.is_break),
                    origin=self.origin,
                    attendee_ids=[],
                    locks=[],
                    attendees_deducted=[],
                ))
                created += 1

        db.session.commit()

        add_log(
            f"{created} daily slots generated from templates ({start} to {end})",
            "SUCCESS",
            metadata={"season_id": self.season_id, "removed": removed, "bookings_dropped": lost},
        )
        return created


class RuleSlotGenerator(SlotGenerator):
    origin = "rules"

    def generate(self, start: date, end: date) -> int:
        _check_range(start, end)
        active_students = student_directory.get_active()

        written = 0
        for day in iter_days(start, end):
            day_id = self.catalog.day_id_for(day)
            per_day = 0
            for band in self.catalog.bands:
                rule = self.catalog.rule_for(day_id, band.id)
                # capacity 0 marks a break; nothing to book
                if not rule or rule.capacity <= 0:
                    continue

                attendees = []
                for s in active_students:
                    if not student_directory.has_fixed_class(s, day_id, band.id):
                        continue
                    age = student_directory.age_of(s, day)
                    if age is not None and rule.allowed_ages and age not in rule.allowed_ages:
                        logger.info("Student %s (age %d) not eligible for %s, not pre-filled", s.id, age, rule.id)
                        continue
                    attendees.append(s.id)

                if len(attendees) > rule.capacity:
                    logger.warning(
                        "%d fixed-schedule students for %s on %s exceed capacity %d; extra dropped",
                        len(attendees), band.id, day, rule.capacity,
                    )
                    attendees = attendees[:rule.capacity]

                self._upsert(SlotKey(day, band.id), band, rule.capacity, attendees)
                per_day += 1

            logger.debug("Day %s (%s): generated %d slots", day, day_id, per_day)
            written += per_day

        db.session.commit()
        if written:
            add_log(f"Generated {written} slots with pre-filled students", "SUCCESS")
        return written

    def _upsert(self, key: SlotKey, band, capacity: int, attendees: list):
        slot = db.session.get(Slot, str(key))
        if slot is None:
            slot = Slot(id=str(key), date=key.date, origin=self.origin, attendees_deducted=[])
            db.session.add(slot)
        slot.time_id = band.id
        slot.time_slot = band.time_slot
        slot.day_type = self.catalog.day_type_for(key.date).value
        slot.capacity = capacity
        slot.is_break = False
        slot.attendee_ids = attendees
        slot.locks = []


def generate_daily_slots(catalog, season_id: str, start: date, end: date) -> int:
    return TemplateSlotGenerator(catalog, season_id).generate(start, end)


def generate_for_season(catalog, season_id: str) -> int:
    start, end = season_date_range(require_season(season_id))
    return generate_daily_slots(catalog, season_id, start, end)


def generate_from_rules(catalog, start: date, days: int) -> int:
    if days < 1:
        raise InvalidDateRangeError("days must be at least 1")
    return RuleSlotGenerator(catalog).generate(start, start + timedelta(days=days - 1))


def clear_slots() -> int:
    """Delete every daily slot (maintenance)."""
    removed = Slot.query.delete(synchronize_session="fetch")
    db.session.commit()
    add_log(f"{removed} daily slots deleted", "WARNING")
    return removed
