from flask import Blueprint, request, jsonify

from scheduling import generator
from scheduling import templates as template_store
from scheduling.catalog import get_catalog
from scheduling.errors import SeasonNotFoundError, TemplateNotFoundError
from scheduling.seasons import get_active_season, season_date_range
from utils.dates import academy_tz, parse_date, utc_now

templates_bp = Blueprint("templates", __name__)

REGENERATE_WARNING = (
    "Regenerating deletes every existing slot in the range, bookings included. "
    "Resend with confirm=true to proceed."
)


def _parse_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


# ---------- seasons ----------
@templates_bp.get("/seasons/active")
def active_season():
    season = get_active_season(utc_now().astimezone(academy_tz()).date())
    if not season:
        raise SeasonNotFoundError("No active season")

    start, end = season_date_range(season)
    out = season.to_dict()
    out["startDate"] = start.isoformat()
    out["endDate"] = end.isoformat()
    return jsonify(out), 200


# ---------- templates ----------
@templates_bp.get("/seasons/<season_id>/templates")
def list_templates(season_id: str):
    day_type = (request.args.get("day_type") or "").strip()
    if day_type:
        rows = template_store.get_by_day_type(season_id, day_type)
    else:
        rows = template_store.get_by_season(season_id)
    return jsonify([t.to_dict() for t in rows]), 200


@templates_bp.get("/seasons/<season_id>/templates/grouped")
def grouped_templates(season_id: str):
    grouped = template_store.get_grouped_by_time_slot(season_id)
    return jsonify({
        time_slot: [t.to_dict() for t in rows]
        for time_slot, rows in grouped.items()
    }), 200


@templates_bp.post("/seasons/<season_id>/templates")
def create_template(season_id: str):
    data = request.get_json(silent=True) or {}
    day_type = (data.get("day_type") or "").strip()
    time_slot = (data.get("time_slot") or "").strip()
    if not day_type or not time_slot:
        return jsonify(error="day_type and time_slot are required"), 400

    rows = template_store.create(
        season_id,
        day_type,
        time_slot,
        category_id=data.get("category_id"),
        capacity=data.get("capacity", 0),
        is_break=_parse_bool(data.get("is_break", False)),
    )
    return jsonify([t.to_dict() for t in rows]), 201


@templates_bp.post("/seasons/<season_id>/templates/duplicate")
def duplicate_templates(season_id: str):
    data = request.get_json(silent=True) or {}
    source = (data.get("source_season_id") or "").strip()
    if not source:
        return jsonify(error="source_season_id required"), 400

    count = template_store.duplicate_for_season(source, season_id)
    return jsonify(duplicated=count), 201


@templates_bp.get("/templates/<template_id>")
def get_template(template_id: str):
    template = template_store.get_by_id(template_id)
    if not template:
        raise TemplateNotFoundError()
    return jsonify(template.to_dict()), 200


@templates_bp.patch("/templates/<template_id>")
def update_template(template_id: str):
    data = request.get_json(silent=True) or {}
    changes = {k: v for k, v in data.items() if k in template_store.EDITABLE_FIELDS}
    if not changes:
        return jsonify(error="Nothing to update"), 400

    if "is_break" in changes:
        changes["is_break"] = _parse_bool(changes["is_break"])
    template = template_store.update(template_id, **changes)
    return jsonify(template.to_dict()), 200


@templates_bp.delete("/templates/<template_id>")
def delete_template(template_id: str):
    template_store.delete(template_id)
    return jsonify(message="Template deleted"), 200


# ---------- slot generation ----------
@templates_bp.post("/seasons/<season_id>/generate-slots")
def generate_slots(season_id: str):
    data = request.get_json(silent=True) or {}
    if not _parse_bool(data.get("confirm", False)):
        return jsonify(error=REGENERATE_WARNING), 409

    if data.get("start") or data.get("end"):
        try:
            start = parse_date(data.get("start"))
            end = parse_date(data.get("end"))
        except ValueError:
            return jsonify(error="Invalid date. Use YYYY-MM-DD"), 400
        created = generator.generate_daily_slots(get_catalog(), season_id, start, end)
    else:
        created = generator.generate_for_season(get_catalog(), season_id)

    return jsonify(created=created), 201


@templates_bp.post("/slots/seed")
def seed_slots():
    """Bootstrap slots from the static age rules and fixed schedules."""
    data = request.get_json(silent=True) or {}
    try:
        start = parse_date(data.get("start"))
    except ValueError:
        return jsonify(error="Invalid start date. Use YYYY-MM-DD"), 400

    days = data.get("days", 7)
    if not isinstance(days, int) or days < 1:
        return jsonify(error="days must be a positive integer"), 400

    written = generator.generate_from_rules(get_catalog(), start, days)
    return jsonify(written=written), 201
