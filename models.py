# models.py - Flask-SQLAlchemy models for the membership backend
import enum
from flask_login import UserMixin
from sqlalchemy import UniqueConstraint, CheckConstraint, Index
from extensions import db
from utils import isoformat, money, utcnow, today
from werkzeug.security import check_password_hash, generate_password_hash

# ===========================================================
# ENUM DEFINITIONS
# ===========================================================

class MembershipType(enum.Enum):
    BASIC = "basic"
    PREMIUM = "premium"
    VIP = "vip"
    LIFETIME = "lifetime"


class MemberStatus(enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"
    EXPIRED = "expired"


class PaymentType(enum.Enum):
    MEMBERSHIP_FEE = "membership_fee"
    RENEWAL = "renewal"
    DONATION = "donation"
    EVENT_FEE = "event_fee"


class PaymentMethod(enum.Enum):
    CASH = "cash"
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    ONLINE = "online"


class PaymentStatus(enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class EventType(enum.Enum):
    MEETING = "meeting"
    WORKSHOP = "workshop"
    SOCIAL = "social"
    TRAINING = "training"
    CONFERENCE = "conference"


class EventStatus(enum.Enum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class AttendanceStatus(enum.Enum):
    REGISTERED = "registered"
    ATTENDED = "attended"
    NO_SHOW = "no_show"
    CANCELLED = "cancelled"


class NotificationType(enum.Enum):
    EVENT_REMINDER = "event_reminder"
    MEMBERSHIP_EXPIRY = "membership_expiry"
    ANNOUNCEMENT = "announcement"
    PAYMENT_REMINDER = "payment_reminder"
    GENERAL = "general"


class NotificationStatus(enum.Enum):
    UNREAD = "unread"
    READ = "read"
    SENT = "sent"


def values(enum_cls):
    return [item.value for item in enum_cls]


def enum_column(enum_cls, name, **kwargs):
    return db.Column(db.Enum(*values(enum_cls), name=name), **kwargs)


# Tiers that pass the admin gate
ELEVATED_TIERS = (MembershipType.VIP.value, MembershipType.LIFETIME.value)

# ===========================================================
# BASE MIXIN FOR COMMON FIELDS
# ===========================================================

class BaseMixin:
    """Provides created_at and updated_at timestamps to inheriting models."""
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

# ===========================================================
# ZONES
# ===========================================================

class Zone(db.Model, BaseMixin):
    __tablename__ = 'zones'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    members = db.relationship('Member', back_populates='zone', lazy='dynamic')

    def summary(self):
        return {"id": self.id, "name": self.name}

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "is_active": self.is_active,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }

# ===========================================================
# MEMBERS
# ===========================================================

class Member(db.Model, BaseMixin, UserMixin):
    """A registered member; also the principal behind every bearer token."""
    __tablename__ = 'members'

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.String(20), unique=True, nullable=False)
    first_name = db.Column(db.String(50), nullable=False)
    last_name = db.Column(db.String(50), nullable=False)
    email = db.Column(db.String(100), unique=True, nullable=False)
    phone = db.Column(db.String(20), nullable=False, index=True)
    date_of_birth = db.Column(db.Date, nullable=False)
    address = db.Column(db.Text, nullable=False)
    membership_type = enum_column(MembershipType, 'membership_type', nullable=False,
                                  default=MembershipType.BASIC.value)
    status = enum_column(MemberStatus, 'member_status', nullable=False,
                         default=MemberStatus.ACTIVE.value)
    join_date = db.Column(db.Date, nullable=False, default=today)
    expiry_date = db.Column(db.Date, nullable=False)
    zone_id = db.Column(db.Integer, db.ForeignKey('zones.id'), nullable=False, index=True)
    profile_image = db.Column(db.String(255), nullable=True)
    qr_code = db.Column(db.Text, nullable=True)
    password_hash = db.Column(db.String(255), nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    zone = db.relationship('Zone', back_populates='members')
    payments = db.relationship('Payment', back_populates='member', lazy='dynamic')
    attendances = db.relationship('EventAttendance', back_populates='member', lazy='dynamic')
    notifications = db.relationship('Notification', back_populates='member', lazy='dynamic')

    __table_args__ = (
        Index('idx_member_status_expiry', 'status', 'expiry_date'),
    )

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    def set_password(self, password: str):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def is_expired(self, on=None):
        return self.expiry_date < (on or today())

    def days_until_expiry(self, on=None):
        return (self.expiry_date - (on or today())).days

    def summary(self):
        return {
            "id": self.id,
            "member_id": self.member_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
        }

    def auth_summary(self):
        """Shape returned by login, registration and OTP login."""
        return {
            "id": self.id,
            "member_id": self.member_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "membership_type": self.membership_type,
            "status": self.status,
            "expiry_date": isoformat(self.expiry_date),
            "qr_code": self.qr_code,
        }

    def to_dict(self, include_qr=True, include_zone=True):
        result = {
            "id": self.id,
            "member_id": self.member_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "date_of_birth": isoformat(self.date_of_birth),
            "address": self.address,
            "membership_type": self.membership_type,
            "status": self.status,
            "join_date": isoformat(self.join_date),
            "expiry_date": isoformat(self.expiry_date),
            "zone_id": self.zone_id,
            "profile_image": self.profile_image,
            "is_active": self.is_active,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
        if include_qr:
            result["qr_code"] = self.qr_code
        if include_zone:
            result["zone"] = self.zone.summary() if self.zone else None
        return result

# ===========================================================
# PAYMENTS
# ===========================================================

class Payment(db.Model, BaseMixin):
    __tablename__ = 'payments'

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=False, index=True)
    amount = db.Column(db.Numeric(precision=10, scale=2), nullable=False)
    payment_type = enum_column(PaymentType, 'payment_type', nullable=False)
    payment_method = enum_column(PaymentMethod, 'payment_method', nullable=False)
    status = enum_column(PaymentStatus, 'payment_status', nullable=False,
                         default=PaymentStatus.PENDING.value)
    transaction_id = db.Column(db.String(100), unique=True, nullable=True)
    receipt_url = db.Column(db.String(255), nullable=True)
    payment_date = db.Column(db.DateTime, nullable=False, default=utcnow)
    description = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    member = db.relationship('Member', back_populates='payments')
    event_attendance = db.relationship('EventAttendance', back_populates='payment', uselist=False)

    __table_args__ = (
        CheckConstraint('amount >= 0', name='ck_payments_amount_non_negative'),
        Index('idx_payment_status_date', 'status', 'payment_date'),
    )

    def summary(self):
        return {
            "id": self.id,
            "amount": money(self.amount),
            "status": self.status,
            "payment_method": self.payment_method,
        }

    def to_dict(self, include_member=False):
        result = {
            "id": self.id,
            "member_id": self.member_id,
            "amount": money(self.amount),
            "payment_type": self.payment_type,
            "payment_method": self.payment_method,
            "status": self.status,
            "transaction_id": self.transaction_id,
            "receipt_url": self.receipt_url,
            "payment_date": isoformat(self.payment_date),
            "description": self.description,
            "is_active": self.is_active,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
        if include_member:
            result["member"] = self.member.summary() if self.member else None
        return result

# ===========================================================
# EVENTS & ATTENDANCE
# ===========================================================

class Event(db.Model, BaseMixin):
    __tablename__ = 'events'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    event_date = db.Column(db.DateTime, nullable=False, index=True)
    end_date = db.Column(db.DateTime, nullable=True)
    location = db.Column(db.String(255), nullable=False)
    event_type = enum_column(EventType, 'event_type', nullable=False)
    max_attendees = db.Column(db.Integer, nullable=True)
    registration_fee = db.Column(db.Numeric(10, 2), nullable=True, default=0)
    status = enum_column(EventStatus, 'event_status', nullable=False,
                         default=EventStatus.UPCOMING.value)
    image_url = db.Column(db.String(255), nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    attendances = db.relationship('EventAttendance', back_populates='event',
                                  order_by='EventAttendance.registration_date')

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "event_date": isoformat(self.event_date),
            "end_date": isoformat(self.end_date),
            "location": self.location,
            "event_type": self.event_type,
            "max_attendees": self.max_attendees,
            "registration_fee": money(self.registration_fee),
            "status": self.status,
            "image_url": self.image_url,
            "is_active": self.is_active,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }


class EventAttendance(db.Model, BaseMixin):
    __tablename__ = 'event_attendances'

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey('events.id'), nullable=False, index=True)
    member_id = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=False, index=True)
    status = enum_column(AttendanceStatus, 'attendance_status', nullable=False,
                         default=AttendanceStatus.REGISTERED.value)
    registration_date = db.Column(db.DateTime, nullable=False, default=utcnow)
    attendance_date = db.Column(db.DateTime, nullable=True)
    payment_id = db.Column(db.Integer, db.ForeignKey('payments.id'), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    event = db.relationship('Event', back_populates='attendances')
    member = db.relationship('Member', back_populates='attendances')
    payment = db.relationship('Payment', back_populates='event_attendance')

    __table_args__ = (
        UniqueConstraint('event_id', 'member_id', name='uq_event_attendances_event_member'),
    )

    def to_dict(self, member_fields=None, include_payment=False):
        result = {
            "id": self.id,
            "event_id": self.event_id,
            "member_id": self.member_id,
            "status": self.status,
            "registration_date": isoformat(self.registration_date),
            "attendance_date": isoformat(self.attendance_date),
            "payment_id": self.payment_id,
            "notes": self.notes,
        }
        if member_fields is not None:
            result["member"] = (
                {field: getattr(self.member, field) for field in member_fields}
                if self.member else None
            )
        if include_payment:
            result["payment"] = self.payment.summary() if self.payment else None
        return result

# ===========================================================
# NOTIFICATIONS
# ===========================================================

class Notification(db.Model, BaseMixin):
    """member_id is null for broadcast rows."""
    __tablename__ = 'notifications'

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=True, index=True)
    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)
    type = enum_column(NotificationType, 'notification_type', nullable=False)
    status = enum_column(NotificationStatus, 'notification_status', nullable=False,
                         default=NotificationStatus.UNREAD.value)
    scheduled_at = db.Column(db.DateTime, nullable=True)
    sent_at = db.Column(db.DateTime, nullable=True)
    read_at = db.Column(db.DateTime, nullable=True)
    is_broadcast = db.Column(db.Boolean, default=False, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    member = db.relationship('Member', back_populates='notifications')

    def to_dict(self):
        return {
            "id": self.id,
            "member_id": self.member_id,
            "title": self.title,
            "message": self.message,
            "type": self.type,
            "status": self.status,
            "scheduled_at": isoformat(self.scheduled_at),
            "sent_at": isoformat(self.sent_at),
            "read_at": isoformat(self.read_at),
            "is_broadcast": self.is_broadcast,
            "is_active": self.is_active,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
