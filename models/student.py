from datetime import datetime
from models.db import db

class Student(db.Model):
    __tablename__ = "students"

    id = db.Column(db.String(32), primary_key=True)  # DNI
    full_name = db.Column(db.String(160), nullable=False)
    active = db.Column(db.Boolean, default=True, nullable=False, index=True)

    remaining_credits = db.Column(db.Integer, nullable=False, default=0)
    has_debt = db.Column(db.Boolean, nullable=False, default=False)

    # [{"dayId": "LUN", "timeId": "07-08"}, ...]
    fixed_schedule = db.Column(db.JSON, nullable=False, default=list)

    birth_date = db.Column(db.Date, nullable=True)
    age = db.Column(db.Integer, nullable=True)  # manual override

    version = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __mapper_args__ = {"version_id_col": version}
