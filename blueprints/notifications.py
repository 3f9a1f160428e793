#======================================================================================
#
#   MOBILE: NOTIFICATIONS
#
#=======================================================================================
from flask import Blueprint, jsonify, request

from blueprints.event_helpers import get_event_or_404
from blueprints.member_helpers import get_member_or_404
from blueprints.notification_helpers import (DEFAULT_SETTINGS, mark_all_read, mark_read, member_pk,
                                             send_announcement, send_event_reminders,
                                             send_expiry_notice, unread_count, visible_to)
from blueprints.validators import RequestValidator
from exceptions import MembershipError, ValidationFailed
from extensions import db
from models import Notification
from utils import paginate
import logging

logger = logging.getLogger(__name__)

notifications_bp = Blueprint("notifications", __name__, url_prefix="/api/notifications")


def required_member_pk():
    raw_id = request.args.get("member_id")
    if not raw_id:
        raise MembershipError("Member ID required", 400)
    return member_pk(raw_id)


#---------------------------------------------------------------------------------------
@notifications_bp.route("", methods=["GET"])
def list_notifications():
    try:
        member_id = required_member_pk()
        page = request.args.get("page", 1, type=int)
        limit = request.args.get("limit", 10, type=int)
        status = request.args.get("status")

        query = visible_to(member_id)
        if status:
            query = query.filter(Notification.status == status)

        notifications, pagination = paginate(
            query.order_by(Notification.created_at.desc(), Notification.id.desc()), page, limit
        )

        return jsonify({
            "notifications": [n.to_dict() for n in notifications],
            "pagination": pagination,
        }), 200

    except MembershipError as e:
        return jsonify(e.to_response()), e.status_code
    except Exception as e:
        logger.error(f"Get notifications error: {e}", exc_info=True)
        return jsonify({"error": "Failed to get notifications"}), 500


@notifications_bp.route("/<int:notification_id>/read", methods=["PATCH"])
def read_notification(notification_id):
    try:
        mark_read(notification_id)
        return jsonify({"message": "Notification marked as read"}), 200

    except MembershipError as e:
        return jsonify(e.to_response()), e.status_code
    except Exception as e:
        db.session.rollback()
        logger.error(f"Mark notification read error: {e}", exc_info=True)
        return jsonify({"error": "Failed to mark notification as read"}), 500


@notifications_bp.route("/unread-count", methods=["GET"])
def get_unread_count():
    try:
        member_id = required_member_pk()
        return jsonify({"unread_count": unread_count(member_id)}), 200

    except MembershipError as e:
        return jsonify(e.to_response()), e.status_code
    except Exception as e:
        logger.error(f"Get unread count error: {e}", exc_info=True)
        return jsonify({"error": "Failed to get unread count"}), 500


@notifications_bp.route("/mark-all-read", methods=["PATCH"])
def read_all_notifications():
    try:
        cleaned = (
            RequestValidator(request.get_json(silent=True) or {})
            .integer("member_id", min_value=1)
            .validate()
        )
        mark_all_read(cleaned["member_id"])
        return jsonify({"message": "All notifications marked as read"}), 200

    except MembershipError as e:
        return jsonify(e.to_response()), e.status_code
    except Exception as e:
        db.session.rollback()
        logger.error(f"Mark all read error: {e}", exc_info=True)
        return jsonify({"error": "Failed to mark all notifications as read"}), 500


#---------------------------------------------------------------------------------------
#      DISPATCH
#---------------------------------------------------------------------------------------
@notifications_bp.route("/event-reminder", methods=["POST"])
def event_reminder():
    try:
        cleaned = (
            RequestValidator(request.get_json(silent=True) or {})
            .integer("event_id", min_value=1)
            .array("member_ids", min_items=1)
            .validate()
        )

        member_ids = []
        for raw_id in cleaned["member_ids"]:
            if isinstance(raw_id, bool) or not isinstance(raw_id, int) or raw_id < 1:
                raise ValidationFailed([{
                    "param": "member_ids",
                    "msg": "member_ids must contain positive integers",
                    "value": cleaned["member_ids"],
                    "location": "body",
                }])
            member_ids.append(raw_id)

        event = get_event_or_404(cleaned["event_id"])
        notifications = send_event_reminders(event, member_ids)

        return jsonify({
            "message": "Event reminder sent successfully",
            "notifications_sent": len(notifications),
        }), 200

    except MembershipError as e:
        return jsonify(e.to_response()), e.status_code
    except Exception as e:
        db.session.rollback()
        logger.error(f"Send event reminder error: {e}", exc_info=True)
        return jsonify({"error": "Failed to send event reminder"}), 500


@notifications_bp.route("/membership-expiry", methods=["POST"])
def membership_expiry():
    try:
        cleaned = (
            RequestValidator(request.get_json(silent=True) or {})
            .integer("member_id", min_value=1)
            .integer("days_until_expiry", min_value=0)
            .validate()
        )

        member = get_member_or_404(cleaned["member_id"])
        notification = send_expiry_notice(member, cleaned["days_until_expiry"])

        return jsonify({
            "message": "Membership expiry notification sent successfully",
            "notification": notification.to_dict(),
        }), 200

    except MembershipError as e:
        return jsonify(e.to_response()), e.status_code
    except Exception as e:
        db.session.rollback()
        logger.error(f"Send membership expiry notification error: {e}", exc_info=True)
        return jsonify({"error": "Failed to send membership expiry notification"}), 500


@notifications_bp.route("/announcement", methods=["POST"])
def announcement():
    try:
        cleaned = (
            RequestValidator(request.get_json(silent=True) or {})
            .string("title", max_len=200)
            .string("message")
            .validate()
        )

        notification, reached = send_announcement(cleaned["title"], cleaned["message"])

        return jsonify({
            "message": "Announcement sent successfully",
            "notification": notification.to_dict(),
            "members_reached": reached,
        }), 200

    except MembershipError as e:
        return jsonify(e.to_response()), e.status_code
    except Exception as e:
        db.session.rollback()
        logger.error(f"Send announcement error: {e}", exc_info=True)
        return jsonify({"error": "Failed to send announcement"}), 500


@notifications_bp.route("/settings", methods=["GET"])
def settings():
    try:
        required_member_pk()
        return jsonify({"settings": dict(DEFAULT_SETTINGS)}), 200

    except MembershipError as e:
        return jsonify(e.to_response()), e.status_code
    except Exception as e:
        logger.error(f"Get notification settings error: {e}", exc_info=True)
        return jsonify({"error": "Failed to get notification settings"}), 500
