"""Read side of the student directory used by the scheduling core."""
from datetime import date
from typing import Optional

from models import db
from models.student import Student


def get_active():
    return Student.query.filter_by(active=True).order_by(Student.id.asc()).all()


def get_by_id(student_id: str) -> Optional[Student]:
    return db.session.get(Student, student_id)


def age_of(student: Student, today: date) -> Optional[int]:
    if student.age is not None:
        return student.age
    if not student.birth_date:
        return None
    b = student.birth_date
    return today.year - b.year - ((today.month, today.day) < (b.month, b.day))


def has_fixed_class(student: Student, day_id: str, time_id: str) -> bool:
    return any(
        fs.get("dayId") == day_id and fs.get("timeId") == time_id
        for fs in (student.fixed_schedule or [])
    )
