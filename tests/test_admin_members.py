import io
import os
import json
import base64
from types import SimpleNamespace

import blueprints.uploads as uploads
from models import Member


def member_payload(zone_id, **overrides):
    payload = {
        "first_name": "John",
        "last_name": "Doe",
        "email": "John.Doe@Example.com",
        "phone": "+1234567890",
        "date_of_birth": "1990-05-15",
        "address": "123 Main Street",
        "membership_type": "premium",
        "zone_id": zone_id,
        "expiry_date": "2099-12-31",
    }
    payload.update(overrides)
    return payload


def qr_payload(data_url):
    return data_url.startswith("data:image/png;base64,") and len(base64.b64decode(data_url[22:])) > 0


def test_create_member(client, admin_headers, zone):
    resp = client.post("/app/members", json=member_payload(zone.id), headers=admin_headers)
    assert resp.status_code == 201

    body = resp.get_json()
    assert body["message"] == "Member created successfully"
    assert body["member"]["member_id"].startswith("MEM")
    assert body["member"]["email"] == "john.doe@example.com"
    assert qr_payload(body["member"]["qr_code"])

    stored = Member.query.filter_by(email="john.doe@example.com").one()
    assert stored.first_name == "John"
    assert stored.status == "active"


def test_create_member_validation_errors(client, admin_headers, zone):
    payload = member_payload(0, first_name="J", email="not-an-email")
    del payload["address"]

    resp = client.post("/app/members", json=payload, headers=admin_headers)
    assert resp.status_code == 400

    errors = resp.get_json()["errors"]
    assert {e["param"] for e in errors} == {"first_name", "email", "zone_id", "address"}
    assert all(set(e) == {"param", "msg", "value", "location"} for e in errors)


def test_duplicate_email_creates_no_row(client, admin_headers, zone, db):
    first = client.post("/app/members", json=member_payload(zone.id), headers=admin_headers)
    assert first.status_code == 201
    before = Member.query.count()

    resp = client.post("/app/members", json=member_payload(zone.id, phone="+1999"),
                       headers=admin_headers)
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Email or member ID already exists"}
    assert Member.query.count() == before


def test_create_member_with_profile_image(app, client, admin_headers, zone):
    data = member_payload(str(zone.id))
    data["profile_image"] = (io.BytesIO(b"\x89PNG fake"), "avatar.png", "image/png")

    resp = client.post("/app/members", data=data, headers=admin_headers,
                       content_type="multipart/form-data")
    assert resp.status_code == 201

    member = Member.query.filter_by(email="john.doe@example.com").one()
    assert member.profile_image.startswith("/uploads/")
    assert member.profile_image.endswith(".png")


def test_uploads_in_the_same_millisecond_keep_separate_files(app, client, admin_headers, zone,
                                                            monkeypatch):
    monkeypatch.setattr(uploads, "time", SimpleNamespace(time=lambda: 1700000000.0))
    contents = {"a@example.com": b"AAAA", "b@example.com": b"BBBB"}

    stored = {}
    for n, (email, content) in enumerate(contents.items()):
        data = member_payload(str(zone.id), email=email, phone=f"+25670011100{n}")
        data["profile_image"] = (io.BytesIO(content), "avatar.png", "image/png")
        resp = client.post("/app/members", data=data, headers=admin_headers,
                           content_type="multipart/form-data")
        assert resp.status_code == 201
        stored[email] = Member.query.filter_by(email=email).one().profile_image

    assert stored["a@example.com"] != stored["b@example.com"]
    for email, url in stored.items():
        assert os.path.basename(url).startswith("1700000000000_")
        with open(os.path.join(app.config["UPLOAD_FOLDER"], os.path.basename(url)), "rb") as f:
            assert f.read() == contents[email]


def test_failed_create_removes_uploaded_image(app, client, admin_headers, zone):
    assert client.post("/app/members", json=member_payload(zone.id),
                       headers=admin_headers).status_code == 201

    data = member_payload(str(zone.id), phone="+1999")
    data["profile_image"] = (io.BytesIO(b"\x89PNG fake"), "avatar.png", "image/png")
    resp = client.post("/app/members", data=data, headers=admin_headers,
                       content_type="multipart/form-data")
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Email or member ID already exists"}
    assert os.listdir(app.config["UPLOAD_FOLDER"]) == []


def test_failed_update_removes_uploaded_image(app, client, admin_headers, make_member, db):
    make_member(email="taken@example.com")
    member = make_member()

    resp = client.put(f"/app/members/{member.id}", data={
        "email": "taken@example.com",
        "profile_image": (io.BytesIO(b"\x89PNG fake"), "avatar.png", "image/png"),
    }, headers=admin_headers, content_type="multipart/form-data")
    assert resp.status_code == 400
    assert os.listdir(app.config["UPLOAD_FOLDER"]) == []
    db.session.refresh(member)
    assert member.profile_image is None


def test_unknown_zone_is_a_validation_error(client, admin_headers, make_member):
    resp = client.post("/app/members", json=member_payload(999), headers=admin_headers)
    assert resp.status_code == 400
    assert resp.get_json()["errors"] == [
        {"param": "zone_id", "msg": "Zone not found", "value": 999, "location": "body"}
    ]
    assert Member.query.filter_by(email="john.doe@example.com").count() == 0

    member = make_member()
    resp = client.put(f"/app/members/{member.id}", json={"zone_id": 999}, headers=admin_headers)
    assert resp.status_code == 400
    assert resp.get_json()["errors"][0]["msg"] == "Zone not found"


def test_create_member_rejects_non_image_upload(client, admin_headers, zone):
    data = member_payload(str(zone.id))
    data["profile_image"] = (io.BytesIO(b"hello"), "notes.txt", "text/plain")

    resp = client.post("/app/members", data=data, headers=admin_headers,
                       content_type="multipart/form-data")
    assert resp.status_code == 400
    assert resp.get_json()["errors"][0]["param"] == "profile_image"


def test_list_members_search_is_case_insensitive(client, admin_headers, make_member):
    make_member(first_name="John", last_name="Doe", email="jd@example.com")
    make_member(first_name="Jane", last_name="Smith", email="jane.doe@example.com")
    make_member(first_name="Mike", last_name="Johnson", email="mike@example.com")

    resp = client.get("/app/members?search=DOE", headers=admin_headers)
    assert resp.status_code == 200

    body = resp.get_json()
    emails = {m["email"] for m in body["members"]}
    assert emails == {"jd@example.com", "jane.doe@example.com"}
    assert body["pagination"]["totalItems"] == 2
    assert all("qr_code" not in m for m in body["members"])
    assert all(m["zone"]["name"] == "North Zone" for m in body["members"])


def test_list_members_filters_and_pagination(client, admin_headers, make_member):
    for _ in range(3):
        make_member(membership_type="premium")
    make_member(membership_type="basic", status="suspended")

    resp = client.get("/app/members?membership_type=premium&limit=2&page=2",
                      headers=admin_headers)
    body = resp.get_json()
    assert body["pagination"] == {
        "currentPage": 2, "totalPages": 2, "totalItems": 3, "itemsPerPage": 2,
    }
    assert len(body["members"]) == 1

    resp = client.get("/app/members?status=suspended", headers=admin_headers)
    assert [m["status"] for m in resp.get_json()["members"]] == ["suspended"]


def test_get_member_with_recent_payments(client, admin_headers, make_member, make_payment):
    member = make_member()
    for _ in range(12):
        make_payment(member)

    resp = client.get(f"/app/members/{member.id}", headers=admin_headers)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["member_id"] == member.member_id
    assert len(body["payments"]) == 10
    assert body["zone"]["id"] == member.zone_id


def test_get_member_not_found(client, admin_headers):
    resp = client.get("/app/members/9999", headers=admin_headers)
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Member not found"}


def test_update_member_refreshes_qr_on_name_change(client, admin_headers, make_member, db):
    member = make_member(first_name="John")
    old_qr = member.qr_code

    resp = client.put(f"/app/members/{member.id}", json={"address": "New Address"},
                      headers=admin_headers)
    assert resp.status_code == 200
    db.session.refresh(member)
    assert member.address == "New Address"
    assert member.qr_code == old_qr

    resp = client.put(f"/app/members/{member.id}", json={"first_name": "Jonathan"},
                      headers=admin_headers)
    assert resp.status_code == 200
    db.session.refresh(member)
    assert member.first_name == "Jonathan"
    assert member.qr_code != old_qr


def test_update_member_duplicate_email(client, admin_headers, make_member):
    make_member(email="taken@example.com")
    member = make_member()

    resp = client.put(f"/app/members/{member.id}", json={"email": "taken@example.com"},
                      headers=admin_headers)
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Email already exists"}


def test_disable_member_hides_from_list(client, admin_headers, make_member, db):
    member = make_member(last_name="Gone")

    resp = client.patch(f"/app/members/{member.id}/disable", headers=admin_headers)
    assert resp.status_code == 200
    db.session.refresh(member)
    assert member.is_active is False
    assert member.status == "inactive"

    listed = client.get("/app/members?search=Gone", headers=admin_headers).get_json()
    assert listed["members"] == []


def test_member_qr_code(client, admin_headers, make_member):
    member = make_member(first_name="Jane", last_name="Smith", membership_type="vip")
    resp = client.get(f"/app/members/{member.id}/qr-code", headers=admin_headers)
    assert resp.get_json() == {
        "member_id": member.member_id,
        "name": "Jane Smith",
        "membership_type": "vip",
        "qr_code": member.qr_code,
    }


def test_zones_list_and_create(client, admin_headers, zone, make_member):
    make_member()

    resp = client.post("/app/zones", data=json.dumps({"name": "South Zone"}),
                       content_type="application/json", headers=admin_headers)
    assert resp.status_code == 201

    zones = client.get("/app/zones", headers=admin_headers).get_json()["zones"]
    counts = {z["name"]: z["memberCount"] for z in zones}
    # admin fixture plus the member created above
    assert counts == {"North Zone": 2, "South Zone": 0}

    resp = client.post("/app/zones", json={"name": "X"}, headers=admin_headers)
    assert resp.status_code == 400
