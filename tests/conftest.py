# tests/conftest.py
from datetime import date

import pytest

from app import create_app
from models import db, Season, ScheduleTemplate, Slot, Student
from scheduling.keys import SlotKey


@pytest.fixture(scope="function")
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'test.db'}",
        "SCHEDULER_ENABLED": False,
        "ACADEMY_TIMEZONE": "America/Lima",
        "LOCK_TTL_MINUTES": 15,
        "SETTLEMENT_WINDOW_DAYS": 7,
        "TRANSACTION_MAX_RETRIES": 5,
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def catalog(app):
    return app.extensions["schedule_catalog"]


# ---------- factories ----------
@pytest.fixture
def make_season(app):
    def _make_season(season_id="verano-2026", name="Verano 2026",
                     start_month="2026-01", end_month="2026-03", is_active=False):
        s = Season(id=season_id, name=name, start_month=start_month,
                   end_month=end_month, is_active=is_active)
        db.session.add(s)
        db.session.commit()
        return s
    return _make_season


@pytest.fixture
def make_template(app):
    counter = {"n": 0}

    def _make_template(season_id="verano-2026", day_type="lun-mier-vier",
                       time_slot="06:00-07:00", capacity=12,
                       category_id="adultos", is_break=False):
        counter["n"] += 1
        t = ScheduleTemplate(
            id=f"tpl-{counter['n']}",
            season_id=season_id,
            day_type=day_type,
            time_slot=time_slot,
            category_id=category_id,
            capacity=capacity,
            is_break=is_break,
        )
        db.session.add(t)
        db.session.commit()
        return t
    return _make_template


@pytest.fixture
def make_student(app):
    def _make_student(student_id="70000001", full_name="Ana Quispe", credits=4,
                      has_debt=False, fixed_schedule=None, age=None,
                      birth_date=None, active=True):
        s = Student(
            id=student_id,
            full_name=full_name,
            remaining_credits=credits,
            has_debt=has_debt,
            fixed_schedule=fixed_schedule or [],
            age=age,
            birth_date=birth_date,
            active=active,
        )
        db.session.add(s)
        db.session.commit()
        return s
    return _make_student


@pytest.fixture
def make_slot(app):
    def _make_slot(day=date(2026, 3, 2), time_slot="06:00-07:00", capacity=2,
                   attendees=None, locks=None, deducted=None, band=None):
        band = band or time_slot
        slot = Slot(
            id=str(SlotKey(day, band)),
            date=day,
            time_id=band,
            time_slot=time_slot,
            day_type="lun-mier-vier",
            capacity=capacity,
            is_break=False,
            origin="template",
            attendee_ids=list(attendees or []),
            locks=list(locks or []),
            attendees_deducted=list(deducted or []),
        )
        db.session.add(slot)
        db.session.commit()
        return slot
    return _make_slot
