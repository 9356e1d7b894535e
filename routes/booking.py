from datetime import timedelta

from flask import Blueprint, request, jsonify

from scheduling import booking
from scheduling.settlement import run_settlement_sweep
from utils.dates import academy_tz, parse_date, utc_now

booking_bp = Blueprint("booking", __name__)


def _slot_json(slot):
    out = slot.to_dict()
    out["availability"] = booking.availability(slot)
    return out


def _student_id(data):
    return (data.get("student_id") or "").strip()


# ---------- view slots ----------
@booking_bp.get("/slots")
def list_slots():
    # optional: start/end (YYYY-MM-DD), default is the coming week
    start_str = request.args.get("start")
    end_str = request.args.get("end")

    try:
        start = parse_date(start_str) if start_str else utc_now().astimezone(academy_tz()).date()
        end = parse_date(end_str) if end_str else start + timedelta(days=6)
    except ValueError:
        return jsonify(error="Invalid date. Use YYYY-MM-DD"), 400

    if end < start:
        return jsonify(error="end must not be before start"), 400

    slots = booking.get_range_slots(start, end)
    return jsonify([_slot_json(s) for s in slots]), 200


@booking_bp.get("/slots/<slot_id>")
def get_slot(slot_id: str):
    slot = booking.get_slot(slot_id)
    if not slot:
        return jsonify(error="Slot not found"), 404
    return jsonify(_slot_json(slot)), 200


# ---------- reserve / book / cancel ----------
@booking_bp.post("/slots/<slot_id>/lock")
def lock_slot(slot_id: str):
    data = request.get_json(silent=True) or {}
    student_id = _student_id(data)
    if not student_id:
        return jsonify(error="student_id required"), 400

    temp_name = (data.get("temp_name") or "").strip() or None
    lock = booking.lock_slot(slot_id, student_id, temp_name=temp_name)
    return jsonify(lock), 201


@booking_bp.post("/slots/<slot_id>/release")
def release_lock(slot_id: str):
    data = request.get_json(silent=True) or {}
    student_id = _student_id(data)
    if not student_id:
        return jsonify(error="student_id required"), 400

    booking.release_lock(slot_id, student_id)
    return jsonify(message="Reservation released"), 200


@booking_bp.post("/slots/<slot_id>/confirm")
def confirm_booking(slot_id: str):
    data = request.get_json(silent=True) or {}
    student_id = _student_id(data)
    if not student_id:
        return jsonify(error="student_id required"), 400

    fallback = data.get("slot_data")
    if fallback is not None and not isinstance(fallback, dict):
        return jsonify(error="slot_data must be an object"), 400

    slot = booking.confirm_booking(
        slot_id,
        student_id,
        fallback=fallback,
        checked_by=data.get("checked_by"),
    )
    return jsonify(_slot_json(slot)), 200


@booking_bp.post("/slots/<slot_id>/cancel")
def cancel_booking(slot_id: str):
    data = request.get_json(silent=True) or {}
    student_id = _student_id(data)
    if not student_id:
        return jsonify(error="student_id required"), 400

    slot = booking.cancel_booking(slot_id, student_id)
    return jsonify(_slot_json(slot)), 200


# ---------- settlement ----------
@booking_bp.post("/settlement/sweep")
def sweep():
    result = run_settlement_sweep()
    return jsonify(result.to_dict()), 200
