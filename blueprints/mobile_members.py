#======================================================================================
#
#   MOBILE: MEMBER SELF-SERVICE (home, card, renewal, events, payment history)
#
#=======================================================================================
from flask import Blueprint, jsonify, request

from blueprints.event_helpers import register_for_event
from blueprints.member_helpers import MEMBERSHIP_TYPES, member_from_param, renew_membership
from blueprints.validators import RequestValidator
from exceptions import MembershipError
from extensions import db
from models import (Event, EventAttendance, EventStatus, Payment, PaymentMethod,
                    PaymentStatus, values)
from utils import isoformat, money, paginate, utcnow
import logging

logger = logging.getLogger(__name__)

mobile_members_bp = Blueprint("mobile_members", __name__, url_prefix="/api/members")

PAYMENT_METHODS = values(PaymentMethod)

QUICK_ACTIONS = [
    {"id": "renew", "title": "Renew Membership", "icon": "refresh"},
    {"id": "benefits", "title": "View Benefits", "icon": "gift"},
    {"id": "donate", "title": "Donate", "icon": "heart"},
    {"id": "events", "title": "View Events", "icon": "calendar"},
]


def next_upcoming_event(now):
    return (
        Event.query
        .filter(Event.event_date >= now,
                Event.status == EventStatus.UPCOMING.value,
                Event.is_active.is_(True))
        .order_by(Event.event_date.asc())
        .first()
    )


#---------------------------------------------------------------------------------------
@mobile_members_bp.route("/home", methods=["GET"])
def home():
    try:
        member = member_from_param(request.args.get("member_id"))
        now = utcnow()
        on = now.date()

        next_event = next_upcoming_event(now)
        recent_payments = (
            member.payments
            .filter(Payment.status == PaymentStatus.COMPLETED.value)
            .order_by(Payment.payment_date.desc())
            .limit(5)
            .all()
        )

        return jsonify({
            "member": {
                "id": member.id,
                "member_id": member.member_id,
                "first_name": member.first_name,
                "last_name": member.last_name,
                "membership_type": member.membership_type,
                "status": member.status,
                "expiry_date": isoformat(member.expiry_date),
                "qr_code": member.qr_code,
                "is_expired": member.is_expired(on),
                "days_until_expiry": member.days_until_expiry(on),
            },
            "next_event": next_event.to_dict() if next_event else None,
            "recent_payments": [p.to_dict() for p in recent_payments],
            "quick_actions": QUICK_ACTIONS,
        }), 200

    except MembershipError as e:
        return jsonify(e.to_response()), e.status_code
    except Exception as e:
        logger.error(f"Get home data error: {e}", exc_info=True)
        return jsonify({"error": "Failed to get home data"}), 500


@mobile_members_bp.route("/card", methods=["GET"])
def card():
    try:
        member = member_from_param(request.args.get("member_id"))

        return jsonify({
            "member_card": {
                "member_id": member.member_id,
                "name": member.full_name,
                "membership_type": member.membership_type,
                "status": member.status,
                "expiry_date": isoformat(member.expiry_date),
                "is_expired": member.is_expired(),
                "qr_code": member.qr_code,
            }
        }), 200

    except MembershipError as e:
        return jsonify(e.to_response()), e.status_code
    except Exception as e:
        logger.error(f"Get member card error: {e}", exc_info=True)
        return jsonify({"error": "Failed to get member card"}), 500


#---------------------------------------------------------------------------------------
@mobile_members_bp.route("/renewal", methods=["POST"])
def renewal():
    try:
        cleaned = (
            RequestValidator(request.get_json(silent=True) or {})
            .integer("member_id", min_value=1)
            .choice("membership_type", MEMBERSHIP_TYPES)
            .choice("payment_method", PAYMENT_METHODS)
            .number("amount", min_value=0)
            .validate()
        )

        member = member_from_param(cleaned["member_id"])
        payment = renew_membership(
            member,
            cleaned["membership_type"],
            cleaned["payment_method"],
            cleaned["amount"],
        )

        return jsonify({
            "message": "Membership renewed successfully",
            "payment": {
                "id": payment.id,
                "amount": money(payment.amount),
                "transaction_id": payment.transaction_id,
                "payment_date": isoformat(payment.payment_date),
            },
            "member": {
                "membership_type": member.membership_type,
                "status": member.status,
                "expiry_date": isoformat(member.expiry_date),
            }
        }), 200

    except MembershipError as e:
        return jsonify(e.to_response()), e.status_code
    except Exception as e:
        db.session.rollback()
        logger.error(f"Renewal error: {e}", exc_info=True)
        return jsonify({"error": "Failed to renew membership"}), 500


#---------------------------------------------------------------------------------------
@mobile_members_bp.route("/events", methods=["GET"])
def member_events():
    try:
        member = member_from_param(request.args.get("member_id"))
        status = request.args.get("status")

        query = (
            db.session.query(EventAttendance, Event)
            .join(Event, EventAttendance.event_id == Event.id)
            .filter(EventAttendance.member_id == member.id, Event.is_active.is_(True))
        )
        if status:
            query = query.filter(EventAttendance.status == status)

        rows = query.order_by(EventAttendance.registration_date.desc()).all()

        return jsonify({
            "events": [
                {
                    "id": event.id,
                    "title": event.title,
                    "description": event.description,
                    "event_date": isoformat(event.event_date),
                    "location": event.location,
                    "event_type": event.event_type,
                    "registration_fee": money(event.registration_fee),
                    "attendance_status": attendance.status,
                    "registration_date": isoformat(attendance.registration_date),
                }
                for attendance, event in rows
            ]
        }), 200

    except MembershipError as e:
        return jsonify(e.to_response()), e.status_code
    except Exception as e:
        logger.error(f"Get member events error: {e}", exc_info=True)
        return jsonify({"error": "Failed to get events"}), 500


@mobile_members_bp.route("/register-event", methods=["POST"])
def register_event():
    try:
        cleaned = (
            RequestValidator(request.get_json(silent=True) or {})
            .integer("member_id", min_value=1)
            .integer("event_id", min_value=1)
            .validate()
        )

        member = member_from_param(cleaned["member_id"])
        registration = register_for_event(member, cleaned["event_id"])

        return jsonify({
            "message": "Event registration successful",
            "registration": {
                "id": registration.id,
                "status": registration.status,
                "registration_date": isoformat(registration.registration_date),
            }
        }), 200

    except MembershipError as e:
        return jsonify(e.to_response()), e.status_code
    except Exception as e:
        db.session.rollback()
        logger.error(f"Event registration error: {e}", exc_info=True)
        return jsonify({"error": "Failed to register for event"}), 500


#---------------------------------------------------------------------------------------
@mobile_members_bp.route("/payments", methods=["GET"])
def payment_history():
    try:
        member = member_from_param(request.args.get("member_id"))
        page = request.args.get("page", 1, type=int)
        limit = request.args.get("limit", 10, type=int)

        payments, pagination = paginate(
            Payment.query.filter(Payment.member_id == member.id)
            .order_by(Payment.payment_date.desc()),
            page, limit,
        )

        return jsonify({
            "payments": [p.to_dict() for p in payments],
            "pagination": pagination,
        }), 200

    except MembershipError as e:
        return jsonify(e.to_response()), e.status_code
    except Exception as e:
        logger.error(f"Get payments error: {e}", exc_info=True)
        return jsonify({"error": "Failed to get payment history"}), 500
