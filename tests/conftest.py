import itertools
from datetime import date, datetime

import pytest
from flask import g

from app import create_app
from blueprints.member_helpers import create_member
from config import TestingConfig
from extensions import db as _db
from models import Event, Payment, Zone

_counter = itertools.count(1)


@pytest.fixture
def app(tmp_path):
    app = create_app(TestingConfig)
    app.config["UPLOAD_FOLDER"] = str(tmp_path / "uploads")

    # Requests reuse the fixture's app context, so g outlives a single request
    @app.before_request
    def reset_login_state():
        g.pop("_login_user", None)
        g.pop("auth_error", None)

    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def zone(app):
    zone = Zone(name="North Zone", description="Northern region")
    _db.session.add(zone)
    _db.session.commit()
    return zone


@pytest.fixture
def make_member(app, zone):
    def _make(**overrides):
        n = next(_counter)
        data = {
            "first_name": "Test",
            "last_name": f"Member{n}",
            "email": f"member{n}@example.com",
            "phone": f"+25670000{n:04d}",
            "date_of_birth": date(1990, 1, 1),
            "address": "1 Test Street",
            "membership_type": "basic",
            "status": "active",
            "expiry_date": date(2099, 12, 31),
            "zone_id": zone.id,
        }
        password = overrides.pop("password", None)
        data.update(overrides)
        return create_member(data, password=password)
    return _make


@pytest.fixture
def make_event(app):
    def _make(**overrides):
        data = {
            "title": "Annual General Meeting",
            "event_date": datetime(2099, 6, 15, 10, 0),
            "location": "Community Center",
            "event_type": "meeting",
            "status": "upcoming",
        }
        data.update(overrides)
        event = Event(**data)
        _db.session.add(event)
        _db.session.commit()
        return event
    return _make


@pytest.fixture
def make_payment(app):
    def _make(member, **overrides):
        data = {
            "member_id": member.id,
            "amount": 50,
            "payment_type": "membership_fee",
            "payment_method": "card",
            "status": "completed",
            "payment_date": datetime(2024, 1, 15, 10, 0),
        }
        data.update(overrides)
        payment = Payment(**data)
        _db.session.add(payment)
        _db.session.commit()
        return payment
    return _make


def bearer(app, member):
    token = app.extensions["token_service"].issue(member.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin(make_member):
    return make_member(first_name="Sarah", last_name="Wilson",
                       email="sarah.wilson@example.com", membership_type="lifetime")


@pytest.fixture
def admin_headers(app, admin):
    return bearer(app, admin)
