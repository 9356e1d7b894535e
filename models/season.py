from datetime import datetime
from models.db import db

class Season(db.Model):
    __tablename__ = "seasons"

    id = db.Column(db.String(64), primary_key=True)  # e.g. "verano-2026"
    name = db.Column(db.String(120), nullable=False)

    # month boundaries, "YYYY-MM"
    start_month = db.Column(db.String(7), nullable=False)
    end_month = db.Column(db.String(7), nullable=False)

    is_active = db.Column(db.Boolean, default=False, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "startMonth": self.start_month,
            "endMonth": self.end_month,
            "isActive": self.is_active,
        }
