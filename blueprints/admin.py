#======================================================================================
#
#   ADMIN CONSOLE: DASHBOARD AGGREGATES
#
#=======================================================================================
from datetime import timedelta

from flask import Blueprint, jsonify
from sqlalchemy import func
from sqlalchemy.orm import selectinload

from blueprints.access import admin_required
from extensions import db
from models import Member, MemberStatus, Payment, PaymentStatus, Zone
from utils import add_months, money, month_start, utcnow
import logging

logger = logging.getLogger(__name__)

admin_bp = Blueprint("admin", __name__, url_prefix="/app/dashboard")

RENEWAL_WINDOW_DAYS = 30
RECENT_PAYMENT_DAYS = 30
MONTHLY_SERIES_LENGTH = 12
REVENUE_BY_TYPE_MONTHS = 6


def completed_revenue(start=None, end=None):
    """Sum of completed payment amounts with payment_date in [start, end)."""
    query = db.session.query(func.sum(Payment.amount)).filter(
        Payment.status == PaymentStatus.COMPLETED.value
    )
    if start is not None:
        query = query.filter(Payment.payment_date >= start)
    if end is not None:
        query = query.filter(Payment.payment_date < end)
    return money(query.scalar())


def monthly_stats(now):
    """Twelve {month, newMembers, revenue} entries, oldest month first."""
    current = month_start(now)
    series = []
    for offset in range(MONTHLY_SERIES_LENGTH - 1, -1, -1):
        start = add_months(current, -offset)
        end = add_months(start, 1)

        new_members = Member.query.filter(
            Member.is_active.is_(True),
            Member.join_date >= start.date(),
            Member.join_date < end.date(),
        ).count()

        series.append({
            "month": start.strftime("%Y-%m"),
            "newMembers": new_members,
            "revenue": completed_revenue(start, end),
        })
    return series


def dashboard_stats(now):
    today = now.date()
    renewal_horizon = today + timedelta(days=RENEWAL_WINDOW_DAYS)

    total_members = Member.query.filter(Member.is_active.is_(True)).count()

    active_members = Member.query.filter(
        Member.is_active.is_(True),
        Member.status == MemberStatus.ACTIVE.value,
        Member.expiry_date >= today,
    ).count()

    pending_renewals = Member.query.filter(
        Member.is_active.is_(True),
        Member.status == MemberStatus.ACTIVE.value,
        Member.expiry_date >= today,
        Member.expiry_date <= renewal_horizon,
    ).count()

    recent_payments = (
        Payment.query
        .options(selectinload(Payment.member))
        .filter(Payment.status == PaymentStatus.COMPLETED.value,
                Payment.payment_date >= now - timedelta(days=RECENT_PAYMENT_DAYS))
        .order_by(Payment.payment_date.desc())
        .limit(10)
        .all()
    )

    distribution = (
        db.session.query(Member.membership_type, func.count(Member.id))
        .filter(Member.is_active.is_(True))
        .group_by(Member.membership_type)
        .all()
    )

    return {
        "totalMembers": total_members,
        "activeMembers": active_members,
        "pendingRenewals": pending_renewals,
        "recentPayments": [p.to_dict(include_member=True) for p in recent_payments],
        "membershipDistribution": [
            {"membership_type": membership_type, "count": count}
            for membership_type, count in distribution
        ],
        "monthlyStats": monthly_stats(now),
    }


def zone_stats():
    # Inner join: zones without active members do not appear
    rows = (
        db.session.query(Zone.id, Zone.name, func.count(Member.id).label("member_count"))
        .join(Member, Member.zone_id == Zone.id)
        .filter(Member.is_active.is_(True))
        .group_by(Zone.id, Zone.name)
        .order_by(func.count(Member.id).desc(), Zone.id.asc())
        .all()
    )
    return [{"id": zone_id, "name": name, "memberCount": count} for zone_id, name, count in rows]


def revenue_stats(now):
    current_month = month_start(now)
    last_month = add_months(current_month, -1)

    by_type = (
        db.session.query(Payment.payment_type, func.sum(Payment.amount))
        .filter(Payment.status == PaymentStatus.COMPLETED.value,
                Payment.payment_date >= add_months(now, -REVENUE_BY_TYPE_MONTHS))
        .group_by(Payment.payment_type)
        .all()
    )

    return {
        "currentMonthRevenue": completed_revenue(start=current_month),
        "lastMonthRevenue": completed_revenue(start=last_month, end=current_month),
        "revenueByType": [
            {"payment_type": payment_type, "total": money(total)}
            for payment_type, total in by_type
        ],
    }


#=======================================================================================
#      ROUTES
#=======================================================================================
@admin_bp.route("/stats", methods=["GET"])
@admin_required
def stats():
    try:
        return jsonify(dashboard_stats(utcnow())), 200
    except Exception as e:
        logger.error(f"Dashboard stats error: {e}", exc_info=True)
        return jsonify({"error": "Failed to fetch dashboard statistics"}), 500


@admin_bp.route("/zone-stats", methods=["GET"])
@admin_required
def zone_statistics():
    try:
        return jsonify(zone_stats()), 200
    except Exception as e:
        logger.error(f"Zone stats error: {e}", exc_info=True)
        return jsonify({"error": "Failed to fetch zone statistics"}), 500


@admin_bp.route("/revenue-stats", methods=["GET"])
@admin_required
def revenue_statistics():
    try:
        return jsonify(revenue_stats(utcnow())), 200
    except Exception as e:
        logger.error(f"Revenue stats error: {e}", exc_info=True)
        return jsonify({"error": "Failed to fetch revenue statistics"}), 500
