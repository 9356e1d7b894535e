"""Schedule template store: per-season rules (day type, time band) -> slot shape."""
import logging
import uuid
from collections import OrderedDict
from typing import Optional

from models import db
from models.schedule_template import ScheduleTemplate
from scheduling.catalog import DayType
from scheduling.errors import (
    InvalidTimeSlotError,
    SchedulingError,
    TemplateNotFoundError,
    TemplateOverlapError,
)
from scheduling.keys import TimeRange
from scheduling.seasons import require_season
from utils.audit import add_log

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("day_type", "time_slot", "category_id", "capacity", "is_break")


def _parse_range(time_slot: str) -> TimeRange:
    try:
        return TimeRange.parse(time_slot)
    except ValueError:
        raise InvalidTimeSlotError() from None


def _check_day_type(day_type) -> str:
    try:
        return DayType.parse(day_type).value
    except ValueError:
        raise SchedulingError(f"Unknown day type: {day_type}") from None


def _check_capacity(capacity) -> int:
    try:
        capacity = int(capacity)
    except (TypeError, ValueError):
        raise SchedulingError("capacity must be an integer") from None
    if capacity < 0:
        raise SchedulingError("capacity must not be negative")
    return capacity


def get_all():
    return ScheduleTemplate.query.order_by(ScheduleTemplate.time_slot.asc()).all()


def get_by_season(season_id: str):
    return (
        ScheduleTemplate.query
        .filter_by(season_id=season_id)
        .order_by(ScheduleTemplate.time_slot.asc())
        .all()
    )


def get_by_id(template_id: str) -> Optional[ScheduleTemplate]:
    return db.session.get(ScheduleTemplate, template_id)


def get_by_day_type(season_id: str, day_type: str):
    return (
        ScheduleTemplate.query
        .filter_by(season_id=season_id, day_type=_check_day_type(day_type))
        .order_by(ScheduleTemplate.time_slot.asc())
        .all()
    )


def create(season_id, day_type, time_slot, category_id=None, capacity=0, is_break=False):
    """Create one template, or several when the range is longer than an hour.

    Ranges over 60 minutes are cut into 1-hour blocks (the last one may be
    shorter). A non-break block may not overlap an existing non-break
    template of the same season and day type.
    """
    require_season(season_id)
    day_type = _check_day_type(day_type)
    capacity = _check_capacity(capacity)
    chunks = _parse_range(time_slot).split(60)

    if not is_break:
        existing = [
            _parse_range(t.time_slot)
            for t in ScheduleTemplate.query.filter_by(
                season_id=season_id, day_type=day_type, is_break=False
            ).all()
        ]
        for chunk in chunks:
            if any(chunk.overlaps(r) for r in existing):
                raise TemplateOverlapError(
                    f"Time block {chunk} overlaps an existing template"
                )

    return create_bulk([
        {
            "season_id": season_id,
            "day_type": day_type,
            "time_slot": str(chunk),
            "category_id": None if is_break else category_id,
            "capacity": capacity,
            "is_break": bool(is_break),
        }
        for chunk in chunks
    ])


def create_bulk(items):
    """Insert templates as given (no splitting, no overlap check)."""
    rows = []
    for item in items:
        rows.append(ScheduleTemplate(
            id=str(uuid.uuid4()),
            season_id=item["season_id"],
            day_type=_check_day_type(item["day_type"]),
            time_slot=str(_parse_range(item["time_slot"])),
            category_id=item.get("category_id"),
            capacity=_check_capacity(item.get("capacity", 0)),
            is_break=bool(item.get("is_break", False)),
        ))
    db.session.add_all(rows)
    db.session.commit()
    logger.info("Created %d schedule template(s)", len(rows))
    return rows


def update(template_id: str, **changes) -> ScheduleTemplate:
    """Edit in place. Edits never split ranges or re-check overlaps."""
    template = get_by_id(template_id)
    if not template:
        raise TemplateNotFoundError()

    for name, value in changes.items():
        if name not in EDITABLE_FIELDS:
            raise SchedulingError(f"Field not editable: {name}")
        if name == "day_type":
            value = _check_day_type(value)
        elif name == "time_slot":
            value = str(_parse_range(value))
        elif name == "capacity":
            value = _check_capacity(value)
        elif name == "is_break":
            value = bool(value)
        setattr(template, name, value)

    db.session.commit()
    return template


def delete(template_id: str) -> None:
    """Hard delete. Slots already generated from it are left alone."""
    template = get_by_id(template_id)
    if not template:
        raise TemplateNotFoundError()
    db.session.delete(template)
    db.session.commit()
    logger.info("Deleted schedule template %s", template_id)


def duplicate_for_season(source_season_id: str, target_season_id: str) -> int:
    require_season(source_season_id)
    require_season(target_season_id)

    source = get_by_season(source_season_id)
    create_bulk([
        {
            "season_id": target_season_id,
            "day_type": t.day_type,
            "time_slot": t.time_slot,
            "category_id": t.category_id,
            "capacity": t.capacity,
            "is_break": t.is_break,
        }
        for t in source
    ])
    add_log(
        f"{len(source)} schedule templates duplicated from {source_season_id} to {target_season_id}",
        "SUCCESS",
    )
    return len(source)


def get_grouped_by_time_slot(season_id: str):
    grouped = OrderedDict()
    for t in get_by_season(season_id):
        grouped.setdefault(t.time_slot, []).append(t)
    return grouped
