#======================================================================================
#
#   ADMIN CONSOLE: MEMBER DIRECTORY
#
#=======================================================================================
from flask import Blueprint, jsonify, request
from sqlalchemy import or_
from sqlalchemy.orm import selectinload

from blueprints.access import admin_required
from blueprints.member_helpers import (MEMBERSHIP_TYPES, MEMBER_STATUSES, create_member,
                                       disable_member, get_member_or_404, update_member)
from blueprints.uploads import discard_image, save_member_image
from blueprints.validators import RequestValidator, request_data
from exceptions import MembershipError
from extensions import db
from models import Member, Payment
from utils import paginate
import logging

logger = logging.getLogger(__name__)

members_bp = Blueprint("admin_members", __name__, url_prefix="/app/members")


def validate_member_payload(data, partial=False):
    required = not partial
    validator = (
        RequestValidator(data)
        .string("first_name", required=required, min_len=2, max_len=50)
        .string("last_name", required=required, min_len=2, max_len=50)
        .email("email", required=required)
        .string("phone", required=required, max_len=20)
        .iso_date("date_of_birth", required=required, date_only=True)
        .string("address", required=required)
        .choice("membership_type", MEMBERSHIP_TYPES, required=required)
        .integer("zone_id", required=required, min_value=1)
        .iso_date("expiry_date", required=required, date_only=True)
        .choice("status", MEMBER_STATUSES, required=False)
    )
    return validator.validate()


#=======================================================================================
#      LIST / SEARCH
#=======================================================================================
@members_bp.route("", methods=["GET"])
@admin_required
def list_members():
    try:
        page = request.args.get("page", 1, type=int)
        limit = request.args.get("limit", 10, type=int)
        search = request.args.get("search", "").strip()
        zone = request.args.get("zone", type=int)
        status = request.args.get("status")
        membership_type = request.args.get("membership_type")

        query = Member.query.options(selectinload(Member.zone)).filter(Member.is_active.is_(True))

        if search:
            like = f"%{search}%"
            query = query.filter(or_(
                Member.first_name.ilike(like),
                Member.last_name.ilike(like),
                Member.email.ilike(like),
                Member.member_id.ilike(like),
            ))
        if zone:
            query = query.filter(Member.zone_id == zone)
        if status:
            query = query.filter(Member.status == status)
        if membership_type:
            query = query.filter(Member.membership_type == membership_type)

        members, pagination = paginate(
            query.order_by(Member.created_at.desc(), Member.id.desc()), page, limit
        )

        return jsonify({
            "members": [m.to_dict(include_qr=False) for m in members],
            "pagination": pagination,
        }), 200

    except Exception as e:
        logger.error(f"Get members error: {e}", exc_info=True)
        return jsonify({"error": "Failed to fetch members"}), 500


@members_bp.route("/<int:member_id>", methods=["GET"])
@admin_required
def get_member(member_id):
    try:
        member = get_member_or_404(member_id)
        recent_payments = (
            member.payments
            .order_by(Payment.payment_date.desc())
            .limit(10)
            .all()
        )
        result = member.to_dict()
        result["payments"] = [
            {
                "id": p.id,
                "amount": float(p.amount),
                "payment_type": p.payment_type,
                "status": p.status,
                "payment_date": p.payment_date.isoformat(),
            }
            for p in recent_payments
        ]
        return jsonify(result), 200

    except MembershipError as e:
        return jsonify(e.to_response()), e.status_code
    except Exception as e:
        logger.error(f"Get member error: {e}", exc_info=True)
        return jsonify({"error": "Failed to fetch member details"}), 500


#=======================================================================================
#      CREATE / UPDATE / DISABLE
#=======================================================================================
@members_bp.route("", methods=["POST"])
@admin_required
def create_member_route():
    try:
        cleaned = validate_member_payload(request_data())
        cleaned["profile_image"] = save_member_image(request.files.get("profile_image"))
        try:
            member = create_member(cleaned)
        except Exception:
            discard_image(cleaned["profile_image"])
            raise

        return jsonify({
            "message": "Member created successfully",
            "member": {
                "id": member.id,
                "member_id": member.member_id,
                "first_name": member.first_name,
                "last_name": member.last_name,
                "email": member.email,
                "qr_code": member.qr_code,
            }
        }), 201

    except MembershipError as e:
        return jsonify(e.to_response()), e.status_code
    except Exception as e:
        db.session.rollback()
        logger.error(f"Create member error: {e}", exc_info=True)
        return jsonify({"error": "Failed to create member"}), 500


@members_bp.route("/<int:member_id>", methods=["PUT"])
@admin_required
def update_member_route(member_id):
    try:
        cleaned = validate_member_payload(request_data(), partial=True)
        member = get_member_or_404(member_id)

        image_url = save_member_image(request.files.get("profile_image"))
        if image_url:
            cleaned["profile_image"] = image_url
        try:
            update_member(member, cleaned)
        except Exception:
            discard_image(image_url)
            raise

        return jsonify({
            "message": "Member updated successfully",
            "member": {
                "id": member.id,
                "member_id": member.member_id,
                "first_name": member.first_name,
                "last_name": member.last_name,
                "email": member.email,
                "qr_code": member.qr_code,
            }
        }), 200

    except MembershipError as e:
        return jsonify(e.to_response()), e.status_code
    except Exception as e:
        db.session.rollback()
        logger.error(f"Update member error: {e}", exc_info=True)
        return jsonify({"error": "Failed to update member"}), 500


@members_bp.route("/<int:member_id>/disable", methods=["PATCH"])
@admin_required
def disable_member_route(member_id):
    try:
        member = get_member_or_404(member_id)
        disable_member(member)
        return jsonify({"message": "Member disabled successfully"}), 200

    except MembershipError as e:
        return jsonify(e.to_response()), e.status_code
    except Exception as e:
        db.session.rollback()
        logger.error(f"Disable member error: {e}", exc_info=True)
        return jsonify({"error": "Failed to disable member"}), 500


@members_bp.route("/<int:member_id>/qr-code", methods=["GET"])
@admin_required
def member_qr_code(member_id):
    try:
        member = get_member_or_404(member_id)
        return jsonify({
            "member_id": member.member_id,
            "name": member.full_name,
            "membership_type": member.membership_type,
            "qr_code": member.qr_code,
        }), 200

    except MembershipError as e:
        return jsonify(e.to_response()), e.status_code
    except Exception as e:
        logger.error(f"Get QR code error: {e}", exc_info=True)
        return jsonify({"error": "Failed to get QR code"}), 500
