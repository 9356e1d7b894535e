from datetime import datetime
from models.db import db

class ScheduleTemplate(db.Model):
    __tablename__ = "schedule_templates"

    id = db.Column(db.String(36), primary_key=True)
    season_id = db.Column(db.String(64), db.ForeignKey("seasons.id"), nullable=False, index=True)

    day_type = db.Column(db.String(20), nullable=False)   # lun-mier-vier, mar-juev, sab-dom
    time_slot = db.Column(db.String(11), nullable=False)  # "HH:MM-HH:MM"
    category_id = db.Column(db.String(64), nullable=True)  # null for breaks
    capacity = db.Column(db.Integer, nullable=False, default=0)
    is_break = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.CheckConstraint("capacity >= 0", name="ck_template_capacity"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "seasonId": self.season_id,
            "dayType": self.day_type,
            "timeSlot": self.time_slot,
            "categoryId": self.category_id,
            "capacity": self.capacity,
            "isBreak": self.is_break,
        }
