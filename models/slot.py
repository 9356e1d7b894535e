from datetime import datetime
from models.db import db

class Slot(db.Model):
    """One bookable (date, time band) unit, keyed "YYYY-MM-DD_<band>"."""
    __tablename__ = "daily_slots"

    id = db.Column(db.String(64), primary_key=True)

    date = db.Column(db.Date, nullable=False, index=True)
    time_id = db.Column(db.String(16), nullable=False)      # band id, e.g. "06-07" or "14:30-15:30"
    time_slot = db.Column(db.String(11), nullable=False)    # "HH:MM-HH:MM"
    day_type = db.Column(db.String(20), nullable=True)

    season_id = db.Column(db.String(64), nullable=True, index=True)
    category_id = db.Column(db.String(64), nullable=True)
    schedule_template_id = db.Column(db.String(36), nullable=True)  # templates are hard deleted, no FK

    capacity = db.Column(db.Integer, nullable=False, default=0)
    is_break = db.Column(db.Boolean, nullable=False, default=False)

    # template | rules | booking
    origin = db.Column(db.String(20), nullable=False, default="template")

    attendee_ids = db.Column(db.JSON, nullable=False, default=list)
    locks = db.Column(db.JSON, nullable=False, default=list)  # [{studentId, tempName?, expiresAt(ms)}]
    attendees_deducted = db.Column(db.JSON, nullable=False, default=list)

    version = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.CheckConstraint("capacity >= 0", name="ck_slot_capacity"),
    )

    __mapper_args__ = {"version_id_col": version}

    def to_dict(self):
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "timeId": self.time_id,
            "timeSlot": self.time_slot,
            "dayType": self.day_type,
            "seasonId": self.season_id,
            "categoryId": self.category_id,
            "scheduleTemplateId": self.schedule_template_id,
            "capacity": self.capacity,
            "isBreak": self.is_break,
            "origin": self.origin,
            "attendeeIds": list(self.attendee_ids or []),
            "locks": list(self.locks or []),
            "attendeesDeducted": list(self.attendees_deducted or []),
        }
