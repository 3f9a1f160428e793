#======================================================================================
#
#   ADMIN CONSOLE: EVENTS, ATTENDANCE AND EVENT PAYMENTS
#
#=======================================================================================
from flask import Blueprint, jsonify, request
from sqlalchemy.orm import selectinload

from blueprints.access import admin_required
from blueprints.event_helpers import (ATTENDANCE_STATUSES, EVENT_STATUSES, EVENT_TYPES,
                                      attendance_counts, event_fee_payments, get_event_or_404,
                                      record_attendance, save_event)
from blueprints.member_helpers import get_member_or_404
from blueprints.uploads import discard_image, save_event_image
from blueprints.validators import RequestValidator, request_data
from exceptions import MembershipError
from extensions import db
from models import Event, EventAttendance
from utils import paginate, parse_iso
import logging

logger = logging.getLogger(__name__)

events_bp = Blueprint("admin_events", __name__, url_prefix="/app/events")

ATTENDEE_FIELDS = ("id", "first_name", "last_name", "member_id", "email", "phone")
LIST_ATTENDEE_FIELDS = ("id", "first_name", "last_name", "member_id")


def validate_event_payload(data, partial=False):
    required = not partial
    validator = (
        RequestValidator(data)
        .string("title", required=required, min_len=3, max_len=200)
        .string("description", required=False)
        .iso_date("event_date", required=required)
        .iso_date("end_date", required=False)
        .string("location", required=required, max_len=255)
        .choice("event_type", EVENT_TYPES, required=required)
        .integer("max_attendees", required=False, min_value=1)
        .number("registration_fee", required=False, min_value=0)
    )
    if partial:
        validator.choice("status", EVENT_STATUSES, required=False)
    return validator.validate()


def event_detail(event):
    result = event.to_dict()
    result["attendances"] = [
        a.to_dict(member_fields=ATTENDEE_FIELDS, include_payment=True)
        for a in event.attendances
    ]
    return result


#=======================================================================================
#      LIST / DETAIL
#=======================================================================================
@events_bp.route("", methods=["GET"])
@admin_required
def list_events():
    try:
        page = request.args.get("page", 1, type=int)
        limit = request.args.get("limit", 10, type=int)
        status = request.args.get("status")
        event_type = request.args.get("event_type")
        date_from = parse_iso(request.args.get("date_from"))
        date_to = parse_iso(request.args.get("date_to"))

        query = (
            Event.query
            .options(selectinload(Event.attendances).selectinload(EventAttendance.member))
            .filter(Event.is_active.is_(True))
        )
        if status:
            query = query.filter(Event.status == status)
        if event_type:
            query = query.filter(Event.event_type == event_type)
        if date_from:
            query = query.filter(Event.event_date >= date_from)
        if date_to:
            query = query.filter(Event.event_date <= date_to)

        events, pagination = paginate(query.order_by(Event.event_date.asc()), page, limit)

        results = []
        for event in events:
            data = event.to_dict()
            data["attendances"] = [
                {
                    "id": a.id,
                    "status": a.status,
                    "member": {f: getattr(a.member, f) for f in LIST_ATTENDEE_FIELDS} if a.member else None,
                }
                for a in event.attendances
            ]
            data.update(attendance_counts(event))
            results.append(data)

        return jsonify({"events": results, "pagination": pagination}), 200

    except Exception as e:
        logger.error(f"Get events error: {e}", exc_info=True)
        return jsonify({"error": "Failed to fetch events"}), 500


@events_bp.route("/<int:event_id>", methods=["GET"])
@admin_required
def get_event(event_id):
    try:
        event = get_event_or_404(event_id)
        return jsonify(event_detail(event)), 200

    except MembershipError as e:
        return jsonify(e.to_response()), e.status_code
    except Exception as e:
        logger.error(f"Get event error: {e}", exc_info=True)
        return jsonify({"error": "Failed to fetch event details"}), 500


#=======================================================================================
#      CREATE / UPDATE
#=======================================================================================
@events_bp.route("", methods=["POST"])
@admin_required
def create_event():
    try:
        cleaned = validate_event_payload(request_data())
        cleaned["image_url"] = save_event_image(request.files.get("image"))
        try:
            event = save_event(cleaned)
        except Exception:
            discard_image(cleaned["image_url"])
            raise
        logger.info(f"Event {event.id} created: {event.title}")

        return jsonify({
            "message": "Event created successfully",
            "event": event.to_dict(),
        }), 201

    except MembershipError as e:
        return jsonify(e.to_response()), e.status_code
    except Exception as e:
        db.session.rollback()
        logger.error(f"Create event error: {e}", exc_info=True)
        return jsonify({"error": "Failed to create event"}), 500


@events_bp.route("/<int:event_id>", methods=["PUT"])
@admin_required
def update_event(event_id):
    try:
        cleaned = validate_event_payload(request_data(), partial=True)
        event = get_event_or_404(event_id)

        image_url = save_event_image(request.files.get("image"))
        if image_url:
            cleaned["image_url"] = image_url
        try:
            save_event(cleaned, event=event)
        except Exception:
            discard_image(image_url)
            raise
        logger.info(f"Event {event.id} updated: {sorted(cleaned)}")

        return jsonify({
            "message": "Event updated successfully",
            "event": event.to_dict(),
        }), 200

    except MembershipError as e:
        return jsonify(e.to_response()), e.status_code
    except Exception as e:
        db.session.rollback()
        logger.error(f"Update event error: {e}", exc_info=True)
        return jsonify({"error": "Failed to update event"}), 500


#=======================================================================================
#      ATTENDANCE
#=======================================================================================
@events_bp.route("/<int:event_id>/attendance", methods=["POST"])
@admin_required
def record_attendance_route(event_id):
    try:
        cleaned = (
            RequestValidator(request.get_json(silent=True) or {})
            .integer("member_id", min_value=1)
            .choice("status", ATTENDANCE_STATUSES)
            .string("notes", required=False)
            .validate()
        )

        event = get_event_or_404(event_id)
        member = get_member_or_404(cleaned["member_id"])

        record_attendance(event, member, cleaned["status"], cleaned.get("notes"))
        return jsonify({"message": "Attendance recorded successfully"}), 200

    except MembershipError as e:
        return jsonify(e.to_response()), e.status_code
    except Exception as e:
        db.session.rollback()
        logger.error(f"Record attendance error: {e}", exc_info=True)
        return jsonify({"error": "Failed to record attendance"}), 500


@events_bp.route("/<int:event_id>/attendance", methods=["GET"])
@admin_required
def list_attendance(event_id):
    try:
        event = get_event_or_404(event_id)
        attendances = (
            EventAttendance.query
            .filter_by(event_id=event.id)
            .order_by(EventAttendance.registration_date.asc())
            .all()
        )
        return jsonify([
            a.to_dict(member_fields=ATTENDEE_FIELDS, include_payment=True) for a in attendances
        ]), 200

    except MembershipError as e:
        return jsonify(e.to_response()), e.status_code
    except Exception as e:
        logger.error(f"Get attendance error: {e}", exc_info=True)
        return jsonify({"error": "Failed to fetch attendance list"}), 500


@events_bp.route("/<int:event_id>/payments", methods=["GET"])
@admin_required
def list_event_payments(event_id):
    try:
        event = get_event_or_404(event_id)
        payments = event_fee_payments(event)

        results = []
        for payment in payments:
            data = payment.to_dict()
            attendance = payment.event_attendance
            data["event_attendance"] = (
                attendance.to_dict(member_fields=LIST_ATTENDEE_FIELDS) if attendance else None
            )
            results.append(data)

        return jsonify({
            "payments": results,
            "totalRevenue": sum(float(p.amount) for p in payments),
            "totalPayments": len(payments),
        }), 200

    except MembershipError as e:
        return jsonify(e.to_response()), e.status_code
    except Exception as e:
        logger.error(f"Get event payments error: {e}", exc_info=True)
        return jsonify({"error": "Failed to fetch event payments"}), 500
