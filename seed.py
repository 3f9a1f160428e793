# seed.py
# Usage: python seed.py
#
# Loads demo zones, members, events and payments into an empty database.
# Every seeded member can log in with SEED_PASSWORD; Sarah Wilson holds the
# lifetime tier and so passes the admin gate.

from datetime import date, datetime

from blueprints.member_helpers import create_member
from extensions import db
from models import Event, EventAttendance, Payment, Zone

SEED_PASSWORD = "password123"

ZONES = [
    ("North Zone", "Northern region of the city"),
    ("South Zone", "Southern region of the city"),
    ("East Zone", "Eastern region of the city"),
    ("West Zone", "Western region of the city"),
    ("Central Zone", "Central business district"),
]

MEMBERS = [
    {
        "member_id": "MEM1001", "first_name": "John", "last_name": "Doe",
        "email": "john.doe@example.com", "phone": "+1234567890",
        "date_of_birth": date(1990, 5, 15), "address": "123 Main Street, North Zone",
        "membership_type": "premium", "join_date": date(2023, 1, 15),
        "expiry_date": date(2024, 12, 31), "zone": 0,
    },
    {
        "member_id": "MEM1002", "first_name": "Jane", "last_name": "Smith",
        "email": "jane.smith@example.com", "phone": "+1234567891",
        "date_of_birth": date(1985, 8, 22), "address": "456 Oak Avenue, South Zone",
        "membership_type": "vip", "join_date": date(2022, 6, 10),
        "expiry_date": date(2024, 12, 31), "zone": 1,
    },
    {
        "member_id": "MEM1003", "first_name": "Mike", "last_name": "Johnson",
        "email": "mike.johnson@example.com", "phone": "+1234567892",
        "date_of_birth": date(1992, 3, 8), "address": "789 Pine Road, East Zone",
        "membership_type": "basic", "join_date": date(2023, 9, 20),
        "expiry_date": date(2024, 9, 20), "zone": 2,
    },
    {
        "member_id": "MEM1004", "first_name": "Sarah", "last_name": "Wilson",
        "email": "sarah.wilson@example.com", "phone": "+1234567893",
        "date_of_birth": date(1988, 11, 12), "address": "321 Elm Street, West Zone",
        "membership_type": "lifetime", "join_date": date(2021, 3, 5),
        "expiry_date": date(2099, 12, 31), "zone": 3,
    },
    {
        "member_id": "MEM1005", "first_name": "David", "last_name": "Brown",
        "email": "david.brown@example.com", "phone": "+1234567894",
        "date_of_birth": date(1995, 7, 30), "address": "654 Maple Drive, Central Zone",
        "membership_type": "premium", "join_date": date(2023, 12, 1),
        "expiry_date": date(2024, 12, 1), "zone": 4,
    },
]

EVENTS = [
    {
        "title": "Annual General Meeting",
        "description": "Join us for our annual general meeting where we discuss the year's "
                       "achievements and plans for the future.",
        "event_date": datetime(2024, 6, 15, 10), "end_date": datetime(2024, 6, 15, 12),
        "location": "Community Center, Central Zone", "event_type": "meeting",
        "max_attendees": 200, "registration_fee": 0,
    },
    {
        "title": "Networking Workshop",
        "description": "Learn effective networking strategies and build professional relationships.",
        "event_date": datetime(2024, 7, 20, 14), "end_date": datetime(2024, 7, 20, 16),
        "location": "Business Hub, North Zone", "event_type": "workshop",
        "max_attendees": 50, "registration_fee": 25,
    },
    {
        "title": "Summer Social Mixer",
        "description": "A casual social event to meet fellow members and enjoy refreshments.",
        "event_date": datetime(2024, 8, 10, 18), "end_date": datetime(2024, 8, 10, 21),
        "location": "Garden Plaza, South Zone", "event_type": "social",
        "max_attendees": 100, "registration_fee": 15,
    },
    {
        "title": "Leadership Training Program",
        "description": "Comprehensive leadership development program for aspiring leaders.",
        "event_date": datetime(2024, 9, 5, 9), "end_date": datetime(2024, 9, 7, 17),
        "location": "Conference Center, East Zone", "event_type": "training",
        "max_attendees": 30, "registration_fee": 150,
    },
]

# (member index, amount, type, method, transaction id, paid at, description, event index)
PAYMENTS = [
    (0, 99.99, "membership_fee", "card", "TXN001", datetime(2023, 1, 15, 10, 30),
     "Premium membership fee", None),
    (1, 199.99, "membership_fee", "bank_transfer", "TXN002", datetime(2022, 6, 10, 14, 20),
     "VIP membership fee", None),
    (2, 49.99, "membership_fee", "online", "TXN003", datetime(2023, 9, 20, 16, 45),
     "Basic membership fee", None),
    (0, 25.00, "event_fee", "card", "TXN004", datetime(2024, 1, 10, 11, 15),
     "Networking Workshop registration", 1),
    (1, 15.00, "event_fee", "cash", "TXN005", datetime(2024, 1, 15, 9, 30),
     "Summer Social Mixer registration", 2),
]


def seed_database():
    """
    Insert the demo data set. Returns per-table counts; returns None without
    touching anything when zones already exist.
    """
    if Zone.query.first() is not None:
        print("Database already contains zones, skipping seed.")
        return None

    print("Creating zones...")
    zones = [Zone(name=name, description=description) for name, description in ZONES]
    db.session.add_all(zones)
    db.session.commit()

    print("Creating sample members...")
    members = []
    for spec in MEMBERS:
        data = dict(spec)
        data["zone_id"] = zones[data.pop("zone")].id
        data["status"] = "active"
        members.append(create_member(data, password=SEED_PASSWORD))

    print("Creating sample events...")
    events = [Event(status="upcoming", **spec) for spec in EVENTS]
    db.session.add_all(events)
    db.session.commit()

    print("Creating sample payments...")
    payments = []
    for member_idx, amount, payment_type, method, txn, paid_at, description, event_idx in PAYMENTS:
        payment = Payment(
            member_id=members[member_idx].id,
            amount=amount,
            payment_type=payment_type,
            payment_method=method,
            status="completed",
            transaction_id=txn,
            payment_date=paid_at,
            description=description,
        )
        db.session.add(payment)
        payments.append(payment)

        if event_idx is not None:
            db.session.add(EventAttendance(
                event=events[event_idx],
                member_id=members[member_idx].id,
                status="registered",
                registration_date=paid_at,
                payment=payment,
            ))
    db.session.commit()

    counts = {
        "zones": len(zones),
        "members": len(members),
        "events": len(events),
        "payments": len(payments),
    }
    print("Database seeding completed successfully!")
    for table, count in counts.items():
        print(f"- {count} {table}")
    print(f"\nTest credentials: john.doe@example.com / {SEED_PASSWORD} (member ID MEM1001)")
    print(f"Admin credentials: sarah.wilson@example.com / {SEED_PASSWORD}")
    return counts


if __name__ == "__main__":
    from app import create_app

    app = create_app()
    with app.app_context():
        db.create_all()
        seed_database()
