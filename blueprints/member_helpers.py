# member_helpers.py
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from extensions import db
from exceptions import ConflictError, MembershipError, NotFoundError, ValidationFailed
from models import (Member, Payment, Zone, MembershipType, MemberStatus, PaymentStatus,
                    PaymentType, values)
from utils import (build_qr_code, generate_member_id, generate_transaction_id,
                   add_years, utcnow)
import logging

logger = logging.getLogger(__name__)

MEMBERSHIP_TYPES = values(MembershipType)
MEMBER_STATUSES = values(MemberStatus)

# Changing any of these invalidates the stored QR payload
QR_FIELDS = {"member_id", "first_name", "last_name", "membership_type"}

UPDATABLE_FIELDS = (
    "first_name", "last_name", "email", "phone", "date_of_birth", "address",
    "membership_type", "zone_id", "expiry_date", "status", "profile_image",
)


def refresh_qr_code(member, changed_fields=None):
    """
    Recompute member.qr_code. Pass changed_fields on updates; the payload is
    only rebuilt when one of QR_FIELDS is among them.
    """
    if changed_fields is not None and not (QR_FIELDS & set(changed_fields)):
        return False
    member.qr_code = build_qr_code(
        member.member_id, member.first_name, member.last_name, member.membership_type
    )
    return True


def ensure_zone_exists(zone_id):
    if db.session.get(Zone, zone_id) is None:
        raise ValidationFailed([{
            "param": "zone_id",
            "msg": "Zone not found",
            "value": zone_id,
            "location": "body",
        }])


def get_member_or_404(member_id):
    member = db.session.get(Member, member_id)
    if not member:
        raise NotFoundError("Member not found")
    return member


def member_from_param(raw_id, missing_status=400):
    """
    Resolve the member a mobile request names through its member_id parameter.
    The mobile client passes the numeric primary key.
    """
    if raw_id is None or str(raw_id).strip() == "":
        raise MembershipError("Member ID required", missing_status)
    try:
        member_pk = int(str(raw_id).strip())
    except ValueError:
        raise NotFoundError("Member not found")
    return get_member_or_404(member_pk)


def find_login_member(identifier):
    """Active-flagged member whose email, phone or member_id equals identifier."""
    return Member.query.filter(
        or_(Member.email == identifier.lower(),
            Member.phone == identifier,
            Member.member_id == identifier),
        Member.is_active.is_(True),
    ).first()


def find_member_by_phone(phone):
    return Member.query.filter(Member.phone == phone, Member.is_active.is_(True)).first()


def create_member(data, password=None):
    """Insert a member from validated data; derives member_id and QR payload."""
    ensure_zone_exists(data["zone_id"])
    member = Member(
        member_id=data.get("member_id") or generate_member_id(),
        first_name=data["first_name"],
        last_name=data["last_name"],
        email=data["email"],
        phone=data["phone"],
        date_of_birth=data["date_of_birth"],
        address=data["address"],
        membership_type=data.get("membership_type", MembershipType.BASIC.value),
        status=data.get("status", MemberStatus.ACTIVE.value),
        expiry_date=data["expiry_date"],
        zone_id=data["zone_id"],
        profile_image=data.get("profile_image"),
    )
    if data.get("join_date"):
        member.join_date = data["join_date"]
    if password:
        member.set_password(password)

    refresh_qr_code(member)

    try:
        db.session.add(member)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Email or member ID already exists")

    logger.info(f"Member {member.member_id} created (id={member.id})")
    return member


def update_member(member, data):
    """Apply a partial update; returns the set of fields that actually changed."""
    if "zone_id" in data:
        ensure_zone_exists(data["zone_id"])
    changed = set()
    for field in UPDATABLE_FIELDS:
        if field in data and getattr(member, field) != data[field]:
            setattr(member, field, data[field])
            changed.add(field)

    refresh_qr_code(member, changed)

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Email already exists")

    logger.info(f"Member {member.id} updated: {sorted(changed)}")
    return changed


def disable_member(member):
    member.is_active = False
    member.status = MemberStatus.INACTIVE.value
    db.session.commit()
    logger.info(f"Member {member.id} disabled")


def renewal_expiry(current_expiry, on):
    """One year from whichever is later: the current expiry or `on`."""
    return add_years(max(current_expiry, on), 1)


def renew_membership(member, membership_type, payment_method, amount, now=None):
    """
    Record a completed renewal payment and extend the membership.
    Early renewals keep the remaining time.
    """
    now = now or utcnow()
    new_expiry = renewal_expiry(member.expiry_date, now.date())

    payment = Payment(
        member_id=member.id,
        amount=amount,
        payment_type=PaymentType.RENEWAL.value,
        payment_method=payment_method,
        status=PaymentStatus.COMPLETED.value,
        transaction_id=generate_transaction_id(),
        payment_date=now,
        description=f"Membership renewal - {membership_type}",
    )
    db.session.add(payment)

    changed = {"membership_type"} if member.membership_type != membership_type else set()
    member.membership_type = membership_type
    member.status = MemberStatus.ACTIVE.value
    member.expiry_date = new_expiry
    refresh_qr_code(member, changed)

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Duplicate transaction ID, please retry")

    logger.info(f"Member {member.id} renewed as {membership_type} until {new_expiry.isoformat()}")
    return payment
