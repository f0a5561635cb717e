import io
from datetime import datetime, timedelta, timezone


def upload(client, headers, title="Annual Physical", type="Blood Test",
           report_date="2024-01-10", content=b"%PDF-1.4 fake", filename="physical.pdf", **extra):
    data = {"title": title, "type": type, "reportDate": report_date, **extra}
    if content is not None:
        data["file"] = (io.BytesIO(content), filename)
    return client.post("/api/reports", data=data, headers=headers, content_type="multipart/form-data")


# === AUTH ===

def test_register_returns_user_without_password(client):
    res = client.post("/api/register", json={"username": "alice", "password": "pw123456"})
    body = res.get_json()
    assert res.status_code == 201
    assert body["username"] == "alice"
    assert body["role"] == "owner"
    assert "access_token" in body
    assert "password" not in body and "password_hash" not in body


def test_register_duplicate_username_is_400(client, auth_headers):
    auth_headers("alice")
    res = client.post("/api/register", json={"username": "alice", "password": "other"})
    assert res.status_code == 400
    assert "username" in res.get_json()["errors"]


def test_register_validates_fields(client):
    res = client.post("/api/register", json={"username": "", "role": "admin"})
    errors = res.get_json()["errors"]
    assert res.status_code == 400
    assert {"username", "password", "role"} <= set(errors)


def test_login(client, auth_headers):
    auth_headers("alice", password="right-pass")

    bad = client.post("/api/login", json={"username": "alice", "password": "wrong"})
    assert bad.status_code == 401

    unknown = client.post("/api/login", json={"username": "ghost", "password": "x"})
    assert unknown.status_code == 401

    ok = client.post("/api/login", json={"username": "alice", "password": "right-pass"})
    assert ok.status_code == 200
    assert ok.get_json()["username"] == "alice"


def test_current_user_requires_auth(client, auth_headers):
    assert client.get("/api/user").status_code == 401

    res = client.get("/api/user", headers=auth_headers("alice"))
    assert res.status_code == 200
    assert res.get_json()["username"] == "alice"


def test_logout_revokes_token(client, auth_headers):
    headers = auth_headers("alice")
    assert client.post("/api/logout", headers=headers).status_code == 200
    assert client.get("/api/user", headers=headers).status_code == 401


def test_login_cookie_authenticates_session(app):
    c = app.test_client()
    c.post("/api/register", json={"username": "alice", "password": "pw"})
    assert c.get("/api/user").status_code == 200
    c.post("/api/logout")
    assert c.get("/api/user").status_code == 401


# === REPORTS ===

def test_create_and_list_reports(client, auth_headers):
    headers = auth_headers("alice")
    res = upload(client, headers, summary="All normal")
    assert res.status_code == 201
    report = res.get_json()
    assert report["title"] == "Annual Physical"
    assert report["reportDate"] == "2024-01-10"
    assert report["summary"] == "All normal"
    assert report["filePath"].endswith(".pdf")

    upload(client, headers, title="Knee MRI", type="MRI", report_date="2024-03-01", filename="knee.dcm")

    listed = client.get("/api/reports", headers=headers).get_json()
    assert [r["title"] for r in listed] == ["Knee MRI", "Annual Physical"]

    by_type = client.get("/api/reports?type=MRI", headers=headers).get_json()
    assert [r["title"] for r in by_type] == ["Knee MRI"]

    window = client.get("/api/reports?from=2024-01-01&to=2024-02-01", headers=headers).get_json()
    assert [r["title"] for r in window] == ["Annual Physical"]


def test_create_report_requires_file_and_fields(client, auth_headers):
    headers = auth_headers("alice")
    no_file = upload(client, headers, content=None)
    assert no_file.status_code == 400
    assert "file" in no_file.get_json()["errors"]

    bad_date = upload(client, headers, report_date="not-a-date")
    assert bad_date.status_code == 400
    assert "reportDate" in bad_date.get_json()["errors"]


def test_reports_require_auth(client):
    assert client.get("/api/reports").status_code == 401


def test_get_report_by_id_honours_shares(client, auth_headers):
    alice, bob = auth_headers("alice"), auth_headers("bob")
    report_id = upload(client, alice).get_json()["id"]

    assert client.get(f"/api/reports/{report_id}", headers=alice).status_code == 200
    assert client.get(f"/api/reports/{report_id}", headers=bob).status_code == 403
    assert client.get("/api/reports/999", headers=bob).status_code == 404

    res = client.post("/api/shares", json={"reportId": report_id, "sharedWithUsername": "bob"}, headers=alice)
    assert res.status_code == 201

    shared = client.get(f"/api/reports/{report_id}", headers=bob)
    assert shared.status_code == 200
    assert shared.get_json()["title"] == "Annual Physical"


def test_download_report_file(client, auth_headers):
    alice, bob = auth_headers("alice"), auth_headers("bob")
    report_id = upload(client, alice, content=b"scan-bytes").get_json()["id"]

    assert client.get(f"/api/reports/{report_id}/file", headers=bob).status_code == 403

    res = client.get(f"/api/reports/{report_id}/file", headers=alice)
    assert res.status_code == 200
    assert res.data == b"scan-bytes"
    assert "attachment" in res.headers["Content-Disposition"]

    client.post("/api/shares", json={"reportId": report_id, "sharedWithUsername": "bob"}, headers=alice)
    assert client.get(f"/api/reports/{report_id}/file", headers=bob).data == b"scan-bytes"


def test_delete_report(client, auth_headers):
    alice, bob = auth_headers("alice"), auth_headers("bob")
    report_id = upload(client, alice).get_json()["id"]
    client.post("/api/shares", json={"reportId": report_id, "sharedWithUsername": "bob"}, headers=alice)

    assert client.delete(f"/api/reports/{report_id}", headers=bob).status_code == 403
    assert client.delete("/api/reports/999", headers=alice).status_code == 404
    assert client.delete(f"/api/reports/{report_id}", headers=alice).status_code == 204

    assert client.get(f"/api/reports/{report_id}", headers=alice).status_code == 404
    # the grantee's shared list loses the report together with its shares
    assert client.get("/api/shares", headers=bob).get_json() == []


# === VITALS ===

def _iso(dt):
    return dt.isoformat()


def test_record_and_list_vitals(client, auth_headers):
    headers = auth_headers("alice")
    now = datetime.now(timezone.utc)
    readings = [
        ("Heart Rate", "72", "bpm", now - timedelta(days=1)),
        ("Heart Rate", "88", "bpm", now - timedelta(days=9)),
        ("Blood Pressure", "120/80", "mmHg", now - timedelta(hours=1)),
    ]
    for type, value, unit, at in readings:
        res = client.post("/api/vitals", json={"type": type, "value": value, "unit": unit, "date": _iso(at)},
                          headers=headers)
        assert res.status_code == 201

    all_vitals = client.get("/api/vitals", headers=headers).get_json()
    assert [v["value"] for v in all_vitals] == ["120/80", "72", "88"]

    week = client.get("/api/vitals", query_string={"type": "Heart Rate", "days": 7}, headers=headers).get_json()
    assert [v["value"] for v in week] == ["72"]


def test_record_vital_validation(client, auth_headers):
    headers = auth_headers("alice")
    res = client.post("/api/vitals", json={"type": "Weight", "value": "", "date": "yesterday"}, headers=headers)
    assert res.status_code == 400
    assert {"value", "unit", "date"} <= set(res.get_json()["errors"])

    bad_days = client.get("/api/vitals?days=soon", headers=headers)
    assert bad_days.status_code == 400


def test_latest_and_chart(client, auth_headers):
    headers = auth_headers("alice")
    now = datetime.now(timezone.utc)
    for value, days_ago in (("130/85", 3), ("bad", 2), ("120/80", 1)):
        client.post("/api/vitals", json={"type": "Blood Pressure", "value": value, "unit": "mmHg",
                                         "date": _iso(now - timedelta(days=days_ago))}, headers=headers)

    latest = client.get("/api/vitals/latest", headers=headers).get_json()
    assert [(v["type"], v["value"]) for v in latest] == [("Blood Pressure", "120/80")]

    chart = client.get("/api/vitals/chart", query_string={"type": "Blood Pressure"}, headers=headers).get_json()
    assert [p["numericValue"] for p in chart] == [130.0, 120.0]


def test_vitals_are_private(client, auth_headers):
    alice, bob = auth_headers("alice"), auth_headers("bob")
    client.post("/api/vitals", json={"type": "Weight", "value": "70", "unit": "kg",
                                     "date": "2024-05-01T08:00:00Z"}, headers=alice)
    assert client.get("/api/vitals", headers=bob).get_json() == []


# === SHARES ===

def test_share_errors(client, auth_headers):
    alice, bob = auth_headers("alice"), auth_headers("bob")
    report_id = upload(client, alice).get_json()["id"]

    unknown = client.post("/api/shares", json={"reportId": report_id, "sharedWithUsername": "ghost"}, headers=alice)
    assert unknown.status_code == 404

    not_owner = client.post("/api/shares", json={"reportId": report_id, "sharedWithUsername": "alice"}, headers=bob)
    assert not_owner.status_code == 404

    invalid = client.post("/api/shares", json={"reportId": "abc"}, headers=alice)
    assert invalid.status_code == 400
    assert {"reportId", "sharedWithUsername"} <= set(invalid.get_json()["errors"])


def test_shared_with_me_listing(client, auth_headers):
    alice, bob = auth_headers("alice"), auth_headers("bob")
    report_id = upload(client, alice).get_json()["id"]
    res = client.post("/api/shares", json={"reportId": report_id, "sharedWithUsername": "bob"}, headers=alice)
    share = res.get_json()
    assert share["sharedWithUsername"] == "bob"
    assert share["reportId"] == report_id

    listed = client.get("/api/shares", headers=bob).get_json()
    assert len(listed) == 1
    assert listed[0]["report"]["title"] == "Annual Physical"
    assert client.get("/api/shares", headers=bob).get_json() == listed
    assert client.get("/api/shares", headers=alice).get_json() == []


# === FAILURE MODES ===

def test_vitals_days_out_of_range_is_400(client, auth_headers):
    headers = auth_headers("alice")
    for path in ("/api/vitals", "/api/vitals/chart"):
        res = client.get(path, query_string={"days": 1000000}, headers=headers)
        assert res.status_code == 400
        assert "days" in res.get_json()["errors"]

    assert client.get("/api/vitals", query_string={"days": 36500}, headers=headers).status_code == 200


def test_delete_report_survives_file_removal_error(client, auth_headers, monkeypatch):
    headers = auth_headers("alice")
    report_id = upload(client, headers).get_json()["id"]

    def denied(path):
        raise PermissionError(13, "Permission denied", path)

    monkeypatch.setattr("health_records.files.os.remove", denied)

    assert client.delete(f"/api/reports/{report_id}", headers=headers).status_code == 204
    assert client.get(f"/api/reports/{report_id}", headers=headers).status_code == 404


def test_unexpected_error_is_opaque_500(client, auth_headers, store, monkeypatch):
    headers = auth_headers("alice")

    def broken(*args, **kwargs):
        raise RuntimeError("database exploded at /var/lib/secret.db")

    monkeypatch.setattr(store, "list_reports", broken)

    res = client.get("/api/reports", headers=headers)
    assert res.status_code == 500
    assert res.get_json() == {"msg": "Internal server error"}
    assert b"secret.db" not in res.data
    assert b"Traceback" not in res.data


def test_oversize_upload_is_413(app, client, auth_headers):
    headers = auth_headers("alice")
    app.config["MAX_CONTENT_LENGTH"] = 1024

    res = upload(client, headers, content=b"x" * 4096)

    assert res.status_code == 413
    assert "msg" in res.get_json()
    assert client.get("/api/reports", headers=headers).get_json() == []
