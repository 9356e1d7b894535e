from dataclasses import replace
from datetime import date

import pytest

from models import db, Slot, SystemLog
from scheduling import generator
from scheduling.catalog import AgeRule
from scheduling.errors import InvalidDateRangeError, NoTemplatesError, SeasonNotFoundError

MONDAY = date(2026, 3, 2)
SUNDAY = date(2026, 3, 8)


def test_generates_one_slot_per_matching_day(catalog, make_season, make_template):
    make_season()
    make_template(day_type="lun-mier-vier", time_slot="06:00-07:00", capacity=12)

    created = generator.generate_daily_slots(catalog, "verano-2026", MONDAY, SUNDAY)

    assert created == 3
    slots = Slot.query.order_by(Slot.date).all()
    assert [s.id for s in slots] == [
        "2026-03-02_06:00-07:00",
        "2026-03-04_06:00-07:00",
        "2026-03-06_06:00-07:00",
    ]
    for s in slots:
        assert s.capacity == 12
        assert s.attendee_ids == []
        assert s.origin == "template"
        assert s.day_type == "lun-mier-vier"


def test_regeneration_replaces_range_and_drops_bookings(catalog, make_season, make_template):
    make_season()
    make_template(day_type="lun-mier-vier", time_slot="06:00-07:00")
    make_template(day_type="mar-juev", time_slot="07:00-08:00")

    assert generator.generate_daily_slots(catalog, "verano-2026", MONDAY, SUNDAY) == 5

    slot = db.session.get(Slot, "2026-03-02_06:00-07:00")
    slot.attendee_ids = ["70000001"]
    db.session.commit()

    assert generator.generate_daily_slots(catalog, "verano-2026", MONDAY, SUNDAY) == 5
    assert Slot.query.count() == 5
    assert db.session.get(Slot, "2026-03-02_06:00-07:00").attendee_ids == []


def test_regeneration_leaves_slots_outside_range(catalog, make_season, make_template, make_slot):
    make_season()
    make_template()
    make_slot(day=date(2026, 3, 9), attendees=["70000001"])

    generator.generate_daily_slots(catalog, "verano-2026", MONDAY, SUNDAY)

    kept = db.session.get(Slot, "2026-03-09_06:00-07:00")
    assert kept.attendee_ids == ["70000001"]


def test_no_templates(catalog, make_season):
    make_season()
    with pytest.raises(NoTemplatesError):
        generator.generate_daily_slots(catalog, "verano-2026", MONDAY, SUNDAY)
    assert Slot.query.count() == 0


def test_bad_range_and_unknown_season(catalog, make_season, make_template):
    make_season()
    make_template()
    with pytest.raises(InvalidDateRangeError):
        generator.generate_daily_slots(catalog, "verano-2026", SUNDAY, MONDAY)
    with pytest.raises(SeasonNotFoundError):
        generator.generate_daily_slots(catalog, "otono-2026", MONDAY, SUNDAY)


def test_generate_for_season_covers_whole_months(catalog, make_season, make_template):
    make_season(start_month="2026-02", end_month="2026-02")
    make_template(day_type="sab-dom", time_slot="08:00-09:00")

    # February 2026 has 4 Saturdays and 4 Sundays
    assert generator.generate_for_season(catalog, "verano-2026") == 8
    first = Slot.query.order_by(Slot.date).first()
    assert first.date == date(2026, 2, 1)


def test_rules_prefill_fixed_schedule_students_by_age(catalog, make_student):
    lun_six = [{"dayId": "LUN", "timeId": "06-07"}]
    make_student("70000001", "Adulto", age=30, fixed_schedule=lun_six)
    make_student("70000002", "Nino", age=9, fixed_schedule=lun_six)
    make_student("70000003", "Sin edad", fixed_schedule=lun_six)
    make_student("70000004", "Inactivo", age=30, fixed_schedule=lun_six, active=False)

    written = generator.generate_from_rules(catalog, MONDAY, 1)

    # every Monday band except the break
    assert written == 15
    slot = db.session.get(Slot, "2026-03-02_06-07")
    assert slot.attendee_ids == ["70000001", "70000003"]
    assert slot.time_slot == "06:00-07:00"
    assert slot.origin == "rules"
    assert db.session.get(Slot, "2026-03-02_14-1430") is None


def test_rules_on_weekend_and_age_from_birth_date(catalog, make_student):
    make_student("70000001", "Bebe", birth_date=date(2024, 1, 10),
                 fixed_schedule=[{"dayId": "DOM", "timeId": "14:30-15:30"}])

    assert generator.generate_from_rules(catalog, SUNDAY, 1) == 11
    assert db.session.get(Slot, "2026-03-08_14:30-15:30").attendee_ids == ["70000001"]


def test_rules_upsert_keeps_settlement_marks(catalog, make_student):
    make_student("70000001", age=30, fixed_schedule=[{"dayId": "LUN", "timeId": "06-07"}])
    generator.generate_from_rules(catalog, MONDAY, 1)

    slot = db.session.get(Slot, "2026-03-02_06-07")
    slot.attendees_deducted = ["70000001"]
    slot.locks = [{"studentId": "70000009", "expiresAt": 0}]
    db.session.commit()

    generator.generate_from_rules(catalog, MONDAY, 1)

    slot = db.session.get(Slot, "2026-03-02_06-07")
    assert slot.attendees_deducted == ["70000001"]
    assert slot.locks == []
    assert Slot.query.count() == 15


def test_rules_prefill_is_capped_at_capacity(catalog, make_student):
    tiny = replace(catalog, rules=(AgeRule("T", "06-07", ("LUN",), 1),))
    for i in range(3):
        make_student(f"7000000{i}", age=30, fixed_schedule=[{"dayId": "LUN", "timeId": "06-07"}])

    assert generator.generate_from_rules(tiny, MONDAY, 1) == 1
    assert db.session.get(Slot, "2026-03-02_06-07").attendee_ids == ["70000000"]


def test_rules_reject_empty_window(catalog):
    with pytest.raises(InvalidDateRangeError):
        generator.generate_from_rules(catalog, MONDAY, 0)


def test_clear_slots(make_slot):
    make_slot()
    make_slot(day=date(2026, 3, 3))

    assert generator.clear_slots() == 2
    assert Slot.query.count() == 0
    assert SystemLog.query.filter_by(type="WARNING").count() == 1
