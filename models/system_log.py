from datetime import datetime
from models.db import db

LOG_TYPES = ("INFO", "SUCCESS", "WARNING", "ERROR")

class SystemLog(db.Model):
    __tablename__ = "system_logs"

    id = db.Column(db.Integer, primary_key=True)
    text = db.Column(db.String(500), nullable=False)
    type = db.Column(db.String(10), nullable=False, default="INFO")

    ip = db.Column(db.String(64), nullable=True)  # only set inside a request
    metadata_json = db.Column(db.Text, nullable=True)

    timestamp = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
