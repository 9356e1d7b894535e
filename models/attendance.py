from datetime import datetime
from models.db import db

class Attendance(db.Model):
    __tablename__ = "attendances"

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.String(32), nullable=False, index=True)
    slot_id = db.Column(db.String(64), nullable=False, index=True)
    checked_by = db.Column(db.String(64), nullable=True)  # staff user id

    timestamp = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
