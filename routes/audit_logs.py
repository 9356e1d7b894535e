import json

from flask import Blueprint, jsonify, request
from utils.audit import get_logs_by_date, get_recent_logs
from utils.dates import parse_date

logs_bp = Blueprint("logs", __name__)


@logs_bp.get("/logs")
def list_logs():
    # optional: date (YYYY-MM-DD) for one day, otherwise the most recent entries
    date_str = request.args.get("date")
    if date_str:
        try:
            rows = get_logs_by_date(parse_date(date_str))
        except ValueError:
            return jsonify(error="Invalid date. Use YYYY-MM-DD"), 400
    else:
        limit = request.args.get("limit", type=int) or 20
        limit = max(1, min(limit, 500))
        rows = get_recent_logs(limit)

    return jsonify([
        {
            "id": r.id,
            "text": r.text,
            "type": r.type,
            "timestamp": r.timestamp.isoformat(),
            "ip": r.ip,
            "metadata": json.loads(r.metadata_json) if r.metadata_json else {},
        }
        for r in rows
    ]), 200
