import json
import logging
from datetime import datetime, timedelta

from flask import has_request_context, request
from models import db
from models.system_log import SystemLog, LOG_TYPES

logger = logging.getLogger(__name__)


def add_log(text: str, type: str = "INFO", metadata=None):
    """Append an entry to the activity feed.

    Never raises: a failed log write must not break the calling flow.
    """
    if type not in LOG_TYPES:
        type = "INFO"

    ip = None
    if has_request_context():
        ip = request.headers.get("X-Forwarded-For", request.remote_addr)

    row = SystemLog(
        text=text[:500],
        type=type,
        ip=ip,
        metadata_json=json.dumps(metadata, default=str) if metadata else None,
    )
    try:
        db.session.add(row)
        db.session.commit()
    except Exception:
        db.session.rollback()
        logger.exception("Failed to write system log: %s", text)


def get_recent_logs(limit: int = 20):
    return (
        SystemLog.query
        .order_by(SystemLog.timestamp.desc(), SystemLog.id.desc())
        .limit(limit)
        .all()
    )


def get_logs_by_date(day):
    start = datetime(day.year, day.month, day.day)
    end = start + timedelta(days=1)
    return (
        SystemLog.query
        .filter(SystemLog.timestamp >= start, SystemLog.timestamp < end)
        .order_by(SystemLog.timestamp.desc(), SystemLog.id.desc())
        .all()
    )
