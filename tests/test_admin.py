from coopledger.models.system import SystemSettings


def test_preferences_round_trip(client, auth_headers, db):
    assert client.get("/api/admin/settings", headers=auth_headers).json() == {"settings": {}}

    response = client.put(
        "/api/admin/settings",
        json={"settings": {"active_tab": "loans", "time_series_bucket": "year"}},
        headers=auth_headers
    )
    assert response.status_code == 200

    client.put("/api/admin/settings", json={"settings": {"active_tab": "members"}}, headers=auth_headers)

    settings = client.get("/api/admin/settings", headers=auth_headers).json()["settings"]
    assert settings == {"active_tab": "members", "time_series_bucket": "year"}
    assert db.query(SystemSettings).filter(SystemSettings.setting_key == "active_tab").one().setting_type == "preference"


def test_preferences_require_auth(client):
    assert client.get("/api/admin/settings").status_code == 401
