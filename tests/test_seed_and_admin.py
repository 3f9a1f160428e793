import pytest

from conftest import bearer
from make_admin import promote_member
from models import Event, EventAttendance, Member, Payment, Zone
from seed import SEED_PASSWORD, seed_database


def test_seed_database(app):
    counts = seed_database()
    assert counts == {"zones": 5, "members": 5, "events": 4, "payments": 5}

    john = Member.query.filter_by(member_id="MEM1001").one()
    assert john.check_password(SEED_PASSWORD)
    assert john.qr_code.startswith("data:image/png;base64,")
    assert Zone.query.count() == 5
    assert Event.query.count() == 4
    assert EventAttendance.query.filter(EventAttendance.payment_id.isnot(None)).count() == 2
    assert Payment.query.filter_by(transaction_id="TXN004").one().event_attendance is not None

    # A second run leaves the data alone
    assert seed_database() is None
    assert Member.query.count() == 5


def test_seeded_lifetime_member_reaches_admin_routes(app, client):
    seed_database()
    sarah = Member.query.filter_by(email="sarah.wilson@example.com").one()
    resp = client.get("/app/dashboard/zone-stats", headers=bearer(app, sarah))
    assert resp.status_code == 200
    assert len(resp.get_json()) == 5


def test_promote_member(app, client, make_member, db):
    member = make_member(email="promote@example.com", membership_type="basic")
    old_qr = member.qr_code
    assert client.get("/app/members", headers=bearer(app, member)).status_code == 403

    promote_member("promote@example.com")
    db.session.refresh(member)
    assert member.membership_type == "lifetime"
    assert member.qr_code != old_qr
    assert client.get("/app/members", headers=bearer(app, member)).status_code == 200


def test_promote_member_rejects_bad_input(app, make_member):
    make_member(member_id="MEM42")
    with pytest.raises(ValueError):
        promote_member("MEM42", tier="premium")
    with pytest.raises(LookupError):
        promote_member("nobody@example.com")
