from datetime import date, datetime, timedelta

import pytest

import blueprints.member_helpers as member_helpers
from blueprints.event_helpers import register_for_event
from exceptions import CapacityError, ConflictError
from models import EventAttendance, Payment
from utils import today, utcnow


def test_home(client, make_member, make_event, make_payment):
    member = make_member(expiry_date=today() + timedelta(days=10))
    make_event(title="Past", event_date=datetime(2000, 1, 1))
    make_event(title="Later", event_date=datetime(2099, 12, 1))
    make_event(title="Soonest", event_date=datetime(2099, 1, 1))
    make_event(title="Cancelled", event_date=datetime(2098, 1, 1), status="cancelled")
    for n in range(7):
        make_payment(member, payment_date=datetime(2024, 1, n + 1))
    make_payment(member, status="failed", payment_date=datetime(2024, 2, 1))

    resp = client.get(f"/api/members/home?member_id={member.id}")
    assert resp.status_code == 200
    body = resp.get_json()

    assert body["member"]["is_expired"] is False
    assert body["member"]["days_until_expiry"] == 10
    assert body["next_event"]["title"] == "Soonest"
    assert len(body["recent_payments"]) == 5
    assert body["recent_payments"][0]["payment_date"] == "2024-01-07T00:00:00"
    assert [a["id"] for a in body["quick_actions"]] == ["renew", "benefits", "donate", "events"]


def test_home_requires_member_id(client):
    resp = client.get("/api/members/home")
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Member ID required"}
    assert client.get("/api/members/home?member_id=999").status_code == 404


def test_card(client, make_member):
    member = make_member(first_name="Jane", last_name="Smith", expiry_date=date(2020, 1, 1))
    card = client.get(f"/api/members/card?member_id={member.id}").get_json()["member_card"]
    assert card["name"] == "Jane Smith"
    assert card["is_expired"] is True
    assert card["expiry_date"] == "2020-01-01"
    assert card["qr_code"] == member.qr_code


def test_renewal_from_lapsed_membership(client, make_member, monkeypatch, db):
    monkeypatch.setattr(member_helpers, "utcnow", lambda: datetime(2024, 6, 1, 9, 0))
    member = make_member(expiry_date=date(2024, 1, 1), membership_type="basic")
    old_qr = member.qr_code
    payments_before = member.payments.count()

    resp = client.post("/api/members/renewal", json={
        "member_id": member.id,
        "membership_type": "premium",
        "payment_method": "card",
        "amount": 99.99,
    })
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["member"] == {"membership_type": "premium", "status": "active",
                              "expiry_date": "2025-06-01"}
    assert body["payment"]["transaction_id"].startswith("TXN")

    db.session.refresh(member)
    assert member.expiry_date == date(2025, 6, 1)
    assert member.qr_code != old_qr
    assert member.payments.count() == payments_before + 1

    payment = member.payments.one()
    assert float(payment.amount) == pytest.approx(99.99)
    assert payment.status == "completed"
    assert payment.payment_type == "renewal"


def test_early_renewal_extends_current_window(make_member):
    member = make_member(expiry_date=date(2024, 9, 1))
    member_helpers.renew_membership(member, "basic", "cash", 10,
                                    now=datetime(2024, 6, 1))
    assert member.expiry_date == date(2025, 9, 1)


def test_renewal_validation(client, make_member):
    member = make_member()
    resp = client.post("/api/members/renewal", json={
        "member_id": member.id, "membership_type": "gold",
        "payment_method": "card", "amount": -1,
    })
    assert resp.status_code == 400
    assert {e["param"] for e in resp.get_json()["errors"]} == {"membership_type", "amount"}


def test_register_event_and_duplicate(client, make_member, make_event):
    member = make_member()
    event = make_event()
    payload = {"member_id": member.id, "event_id": event.id}

    resp = client.post("/api/members/register-event", json=payload)
    assert resp.status_code == 200
    assert resp.get_json()["registration"]["status"] == "registered"

    resp = client.post("/api/members/register-event", json=payload)
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Already registered for this event"}
    assert EventAttendance.query.filter_by(event_id=event.id).count() == 1


def test_register_event_capacity(client, make_member, make_event):
    event = make_event(max_attendees=1)
    a, b = make_member(), make_member()

    assert client.post("/api/members/register-event",
                       json={"member_id": a.id, "event_id": event.id}).status_code == 200

    resp = client.post("/api/members/register-event", json={"member_id": b.id, "event_id": event.id})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Event is full"}
    assert EventAttendance.query.filter_by(event_id=event.id, member_id=b.id).count() == 0


def test_capacity_counts_only_registered_rows(make_member, make_event, db):
    event = make_event(max_attendees=1)
    cancelled = make_member()
    db.session.add(EventAttendance(event_id=event.id, member_id=cancelled.id, status="cancelled"))
    db.session.commit()

    registration = register_for_event(make_member(), event.id)
    assert registration.status == "registered"

    with pytest.raises(CapacityError):
        register_for_event(make_member(), event.id)

    open_event = make_event()
    db.session.add(EventAttendance(event_id=open_event.id, member_id=cancelled.id, status="cancelled"))
    db.session.commit()
    with pytest.raises(ConflictError):
        register_for_event(cancelled, open_event.id)


def test_register_unknown_event(client, make_member):
    member = make_member()
    resp = client.post("/api/members/register-event", json={"member_id": member.id, "event_id": 77})
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Event not found"}


def test_member_events(client, make_member, make_event, db):
    member = make_member()
    first = make_event(title="First")
    second = make_event(title="Second")
    hidden = make_event(title="Hidden", is_active=False)
    now = utcnow()
    db.session.add_all([
        EventAttendance(event_id=first.id, member_id=member.id, status="attended",
                        registration_date=now - timedelta(days=2)),
        EventAttendance(event_id=second.id, member_id=member.id,
                        registration_date=now - timedelta(days=1)),
        EventAttendance(event_id=hidden.id, member_id=member.id, registration_date=now),
    ])
    db.session.commit()

    events = client.get(f"/api/members/events?member_id={member.id}").get_json()["events"]
    assert [e["title"] for e in events] == ["Second", "First"]
    assert events[1]["attendance_status"] == "attended"

    events = client.get(f"/api/members/events?member_id={member.id}&status=attended").get_json()["events"]
    assert [e["title"] for e in events] == ["First"]


def test_payment_history(client, make_member, make_payment):
    member = make_member()
    other = make_member()
    for n in range(3):
        make_payment(member, payment_date=datetime(2024, 3, n + 1))
    make_payment(other)

    body = client.get(f"/api/members/payments?member_id={member.id}&limit=2").get_json()
    assert body["pagination"] == {"currentPage": 1, "totalPages": 2, "totalItems": 3,
                                  "itemsPerPage": 2}
    assert [p["payment_date"] for p in body["payments"]] == [
        "2024-03-03T00:00:00", "2024-03-02T00:00:00",
    ]
    assert Payment.query.count() == 4
