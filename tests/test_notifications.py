from datetime import datetime

from blueprints.notification_helpers import unread_count
from models import Notification


def notify(db, **fields):
    data = {"title": "Hello", "message": "Body", "type": "general", "status": "unread"}
    data.update(fields)
    notification = Notification(**data)
    db.session.add(notification)
    db.session.commit()
    return notification


def test_list_includes_own_and_broadcast(client, make_member, db):
    me, other = make_member(), make_member()
    mine = notify(db, member_id=me.id, title="Mine")
    notify(db, member_id=other.id, title="Theirs")
    broadcast = notify(db, is_broadcast=True, title="Everyone")

    body = client.get(f"/api/notifications?member_id={me.id}").get_json()
    assert {n["id"] for n in body["notifications"]} == {mine.id, broadcast.id}
    assert body["pagination"]["totalItems"] == 2

    body = client.get(f"/api/notifications?member_id={me.id}&status=read").get_json()
    assert body["notifications"] == []


def test_list_requires_member_id(client):
    resp = client.get("/api/notifications")
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Member ID required"}


def test_unread_count_matches_visible_unread_rows(client, make_member, db):
    me, other = make_member(), make_member()
    notify(db, member_id=me.id)
    notify(db, member_id=me.id, status="read")
    notify(db, member_id=other.id)
    notify(db, is_broadcast=True)
    notify(db, is_broadcast=True, status="read")

    resp = client.get(f"/api/notifications/unread-count?member_id={me.id}")
    assert resp.get_json() == {"unread_count": 2}
    assert unread_count(other.id) == 2


def test_mark_read(client, make_member, db):
    n = notify(db, member_id=make_member().id)
    resp = client.patch(f"/api/notifications/{n.id}/read")
    assert resp.status_code == 200
    db.session.refresh(n)
    assert n.status == "read"
    assert n.read_at is not None

    assert client.patch("/api/notifications/999/read").status_code == 404


def test_mark_all_read_touches_own_and_broadcast_rows(client, make_member, db):
    me, other = make_member(), make_member()
    mine = notify(db, member_id=me.id)
    theirs = notify(db, member_id=other.id)
    broadcast = notify(db, is_broadcast=True)

    resp = client.patch("/api/notifications/mark-all-read", json={"member_id": me.id})
    assert resp.status_code == 200

    for n in (mine, theirs, broadcast):
        db.session.refresh(n)
    assert mine.status == "read"
    assert broadcast.status == "read"
    assert theirs.status == "unread"

    resp = client.patch("/api/notifications/mark-all-read", json={})
    assert resp.status_code == 400


def test_event_reminder_bulk_insert(client, make_member, make_event):
    a, b = make_member(), make_member()
    event = make_event(title="Networking Workshop", event_date=datetime(2099, 7, 20, 14, 0),
                       location="Business Hub")

    resp = client.post("/api/notifications/event-reminder",
                       json={"event_id": event.id, "member_ids": [a.id, b.id]})
    assert resp.status_code == 200
    assert resp.get_json()["notifications_sent"] == 2

    rows = Notification.query.filter_by(type="event_reminder").all()
    assert {r.member_id for r in rows} == {a.id, b.id}
    assert rows[0].message == (
        "Reminder: Networking Workshop is scheduled for July 20th 2099, 2:00 pm at Business Hub"
    )


def test_event_reminder_validation(client, make_event):
    event = make_event()
    resp = client.post("/api/notifications/event-reminder",
                       json={"event_id": event.id, "member_ids": []})
    assert resp.status_code == 400

    resp = client.post("/api/notifications/event-reminder",
                       json={"event_id": 999, "member_ids": [1]})
    assert resp.status_code == 404
    assert Notification.query.count() == 0


def test_membership_expiry_notice(client, make_member):
    member = make_member()

    resp = client.post("/api/notifications/membership-expiry",
                       json={"member_id": member.id, "days_until_expiry": 3})
    assert resp.status_code == 200
    notification = resp.get_json()["notification"]
    assert notification["type"] == "membership_expiry"
    assert notification["message"].startswith("Your membership will expire in 3 day(s).")

    resp = client.post("/api/notifications/membership-expiry",
                       json={"member_id": member.id, "days_until_expiry": 30})
    assert resp.get_json()["notification"]["message"] == (
        "Your membership will expire on December 31st 2099. Consider renewing early."
    )

    resp = client.post("/api/notifications/membership-expiry",
                       json={"member_id": member.id, "days_until_expiry": -1})
    assert resp.status_code == 400


def test_announcement_reports_active_members(client, make_member, db):
    make_member()
    make_member()
    gone = make_member()
    gone.is_active = False
    db.session.commit()

    resp = client.post("/api/notifications/announcement",
                       json={"title": "Office closed", "message": "Closed on Friday"})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["members_reached"] == 2
    assert body["notification"]["is_broadcast"] is True
    assert body["notification"]["member_id"] is None


def test_settings(client, make_member):
    member = make_member()
    settings = client.get(f"/api/notifications/settings?member_id={member.id}").get_json()["settings"]
    assert all(settings.values())
    assert client.get("/api/notifications/settings").status_code == 400
