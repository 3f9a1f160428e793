# event_helpers.py
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from extensions import db
from exceptions import CapacityError, ConflictError, NotFoundError
from models import (Event, EventAttendance, EventStatus, EventType, AttendanceStatus,
                    Payment, PaymentStatus, PaymentType, values)
from utils import utcnow
import logging

logger = logging.getLogger(__name__)

EVENT_TYPES = values(EventType)
EVENT_STATUSES = values(EventStatus)
ATTENDANCE_STATUSES = values(AttendanceStatus)

EVENT_FIELDS = (
    "title", "description", "event_date", "end_date", "location", "event_type",
    "max_attendees", "registration_fee", "status", "image_url",
)


def get_event_or_404(event_id, lock=False):
    if lock:
        event = (
            Event.query.filter(Event.id == event_id)
            .with_for_update()
            .first()
        )
    else:
        event = db.session.get(Event, event_id)
    if not event:
        raise NotFoundError("Event not found")
    return event


def attendance_counts(event):
    """Registration figures counted over the event's loaded attendance rows."""
    attendances = event.attendances
    return {
        "total_registrations": len(attendances),
        "attended_count": sum(1 for a in attendances if a.status == AttendanceStatus.ATTENDED.value),
        "no_show_count": sum(1 for a in attendances if a.status == AttendanceStatus.NO_SHOW.value),
    }


def save_event(data, event=None):
    """Create an event, or apply a partial update when `event` is given."""
    if event is None:
        event = Event()
        db.session.add(event)
    for field in EVENT_FIELDS:
        if field in data:
            setattr(event, field, data[field])
    db.session.commit()
    return event


def record_attendance(event, member, status, notes=None, now=None):
    """
    Upsert the (event, member) attendance row.
    attendance_date is stamped when the status is 'attended', cleared otherwise.
    """
    now = now or utcnow()
    attendance_date = now if status == AttendanceStatus.ATTENDED.value else None

    attendance = EventAttendance.query.filter_by(event_id=event.id, member_id=member.id).first()
    if attendance:
        attendance.status = status
        attendance.notes = notes
        attendance.attendance_date = attendance_date
    else:
        attendance = EventAttendance(
            event_id=event.id,
            member_id=member.id,
            status=status,
            notes=notes,
            attendance_date=attendance_date,
        )
        db.session.add(attendance)

    db.session.commit()
    logger.info(f"Attendance for member {member.id} at event {event.id} set to {status}")
    return attendance


def register_for_event(member, event_id, now=None):
    """
    Register a member for an event. The capacity check and the insert share one
    transaction holding a row lock on the event, so concurrent registrations
    cannot over-admit past max_attendees.
    """
    now = now or utcnow()
    try:
        event = get_event_or_404(event_id, lock=True)

        if event.max_attendees:
            registered = (
                db.session.query(func.count(EventAttendance.id))
                .filter(EventAttendance.event_id == event.id,
                        EventAttendance.status == AttendanceStatus.REGISTERED.value)
                .scalar()
            )
            if registered >= event.max_attendees:
                raise CapacityError("Event is full")

        existing = EventAttendance.query.filter_by(member_id=member.id, event_id=event.id).first()
        if existing:
            raise ConflictError("Already registered for this event")

        registration = EventAttendance(
            member_id=member.id,
            event_id=event.id,
            status=AttendanceStatus.REGISTERED.value,
            registration_date=now,
        )
        db.session.add(registration)
        db.session.commit()

    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Already registered for this event")
    except (CapacityError, ConflictError, NotFoundError) as e:
        db.session.rollback()
        logger.warning(f"Registration of member {member.id} for event {event_id} rejected: {e.message}")
        raise

    logger.info(f"Member {member.id} registered for event {event.id}")
    return registration


def event_fee_payments(event):
    """Completed event-fee payments linked to the event through attendance rows."""
    return (
        Payment.query
        .join(EventAttendance, EventAttendance.payment_id == Payment.id)
        .filter(EventAttendance.event_id == event.id,
                Payment.payment_type == PaymentType.EVENT_FEE.value,
                Payment.status == PaymentStatus.COMPLETED.value)
        .order_by(Payment.payment_date.desc())
        .all()
    )
