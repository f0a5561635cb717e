def test_seed_creates_demo_data_once(app, store):
    runner = app.test_cli_runner()

    first = runner.invoke(args=["seed"])
    assert first.exit_code == 0, first.output
    assert "Seeded user 'admin'" in first.output

    admin = store.get_user_by_username("admin")
    assert admin is not None and admin.role == "owner"

    second = runner.invoke(args=["seed"])
    assert second.exit_code == 0, second.output
    assert "already present" in second.output

    reports = store.list_reports(admin.id)
    assert [r.title for r in reports] == ["Annual Blood Work"]
    vitals = {v.type: (v.value, v.unit) for v in store.list_vitals(admin.id)}
    assert vitals == {"Blood Pressure": ("120/80", "mmHg"), "Heart Rate": ("72", "bpm")}


def test_seeded_admin_can_log_in(app, client):
    app.test_cli_runner().invoke(args=["seed", "--password", "demo-pass"])

    res = client.post("/api/login", json={"username": "admin", "password": "demo-pass"})
    assert res.status_code == 200


def test_init_db_is_repeatable(app):
    result = app.test_cli_runner().invoke(args=["init-db"])
    assert result.exit_code == 0
    assert "Database initialised." in result.output
