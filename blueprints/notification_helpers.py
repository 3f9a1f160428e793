# notification_helpers.py
from sqlalchemy import or_
from extensions import db
from exceptions import MembershipError, NotFoundError
from models import Member, Notification, NotificationStatus, NotificationType
from utils import long_date, long_datetime, utcnow
import logging

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = {
    "event_reminders": True,
    "membership_expiry": True,
    "announcements": True,
    "email_notifications": True,
    "push_notifications": True,
}


def member_pk(raw_id):
    """Numeric member primary key from a query or body value."""
    try:
        value = int(str(raw_id).strip())
    except (TypeError, ValueError):
        raise MembershipError("Member ID required", 400)
    if value < 1:
        raise MembershipError("Member ID required", 400)
    return value


def visible_to(member_id):
    """Rows addressed to the member, plus every broadcast row."""
    return Notification.query.filter(
        or_(Notification.member_id == member_id, Notification.is_broadcast.is_(True))
    )


def unread_count(member_id):
    return visible_to(member_id).filter(
        Notification.status == NotificationStatus.UNREAD.value
    ).count()


def mark_read(notification_id, now=None):
    notification = db.session.get(Notification, notification_id)
    if not notification:
        raise NotFoundError("Notification not found")
    notification.status = NotificationStatus.READ.value
    notification.read_at = now or utcnow()
    db.session.commit()
    return notification


def mark_all_read(member_id, now=None):
    """
    Marks the member's unread rows and every unread broadcast row as read.
    Broadcast rows are shared, so this clears them for all members.
    """
    now = now or utcnow()
    updated = (
        visible_to(member_id)
        .filter(Notification.status == NotificationStatus.UNREAD.value)
        .update({"status": NotificationStatus.READ.value, "read_at": now},
                synchronize_session=False)
    )
    db.session.commit()
    return updated


def event_reminder_message(event):
    return (
        f"Reminder: {event.title} is scheduled for "
        f"{long_datetime(event.event_date)} at {event.location}"
    )


def expiry_message(days_until_expiry, expiry_date):
    if days_until_expiry == 0:
        return ("Your membership has expired today. "
                "Please renew to continue enjoying our services.")
    if days_until_expiry <= 7:
        return (f"Your membership will expire in {days_until_expiry} day(s). "
                "Please renew to avoid interruption of services.")
    return f"Your membership will expire on {long_date(expiry_date)}. Consider renewing early."


def send_event_reminders(event, member_ids, now=None):
    """One reminder per member id, inserted in a single transaction."""
    now = now or utcnow()
    message = event_reminder_message(event)
    notifications = [
        Notification(
            member_id=member_id,
            title="Event Reminder",
            message=message,
            type=NotificationType.EVENT_REMINDER.value,
            status=NotificationStatus.UNREAD.value,
            scheduled_at=now,
        )
        for member_id in member_ids
    ]
    db.session.add_all(notifications)
    db.session.commit()
    logger.info(f"Event reminder for event {event.id} sent to {len(notifications)} member(s)")
    return notifications


def send_expiry_notice(member, days_until_expiry, now=None):
    notification = Notification(
        member_id=member.id,
        title="Membership Expiry Notice",
        message=expiry_message(days_until_expiry, member.expiry_date),
        type=NotificationType.MEMBERSHIP_EXPIRY.value,
        status=NotificationStatus.UNREAD.value,
        scheduled_at=now or utcnow(),
    )
    db.session.add(notification)
    db.session.commit()
    logger.info(f"Expiry notice sent to member {member.id} ({days_until_expiry} day(s) left)")
    return notification


def send_announcement(title, message, now=None):
    """
    Insert one broadcast row. The reach figure is the current active-member
    count, not a delivery confirmation.
    """
    notification = Notification(
        title=title,
        message=message,
        type=NotificationType.ANNOUNCEMENT.value,
        status=NotificationStatus.UNREAD.value,
        is_broadcast=True,
        scheduled_at=now or utcnow(),
    )
    db.session.add(notification)
    db.session.commit()

    reached = Member.query.filter(Member.is_active.is_(True)).count()
    logger.info(f"Announcement {notification.id} broadcast, {reached} active member(s)")
    return notification, reached
