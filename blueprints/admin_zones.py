#======================================================================================
#
#   ADMIN CONSOLE: ZONES
#
#=======================================================================================
from flask import Blueprint, jsonify, request
from sqlalchemy import func

from blueprints.access import admin_required
from blueprints.validators import RequestValidator
from exceptions import MembershipError
from extensions import db
from models import Member, Zone
import logging

logger = logging.getLogger(__name__)

zones_bp = Blueprint("admin_zones", __name__, url_prefix="/app/zones")


@zones_bp.route("", methods=["GET"])
@admin_required
def list_zones():
    try:
        counts = dict(
            db.session.query(Member.zone_id, func.count(Member.id))
            .filter(Member.is_active.is_(True))
            .group_by(Member.zone_id)
            .all()
        )
        zones = Zone.query.filter(Zone.is_active.is_(True)).order_by(Zone.name.asc()).all()

        results = []
        for zone in zones:
            data = zone.to_dict()
            data["memberCount"] = counts.get(zone.id, 0)
            results.append(data)

        return jsonify({"zones": results}), 200

    except Exception as e:
        logger.error(f"Get zones error: {e}", exc_info=True)
        return jsonify({"error": "Failed to fetch zones"}), 500


@zones_bp.route("", methods=["POST"])
@admin_required
def create_zone():
    try:
        cleaned = (
            RequestValidator(request.get_json(silent=True) or {})
            .string("name", min_len=2, max_len=100)
            .string("description", required=False)
            .validate()
        )

        zone = Zone(name=cleaned["name"], description=cleaned.get("description"))
        db.session.add(zone)
        db.session.commit()
        logger.info(f"Zone {zone.id} created: {zone.name}")

        return jsonify({"message": "Zone created successfully", "zone": zone.to_dict()}), 201

    except MembershipError as e:
        return jsonify(e.to_response()), e.status_code
    except Exception as e:
        db.session.rollback()
        logger.error(f"Create zone error: {e}", exc_info=True)
        return jsonify({"error": "Failed to create zone"}), 500
