from decimal import Decimal


def make_payload(**overrides):
    payload = {
        "member_name": "Aisha Bello",
        "file_number": "NYSC/KT/0142",
        "amount": "5000",
        "date": "2024-01-25",
        "category": "Monthly Contribution",
    }
    payload.update(overrides)
    return payload


def test_endpoints_require_auth(client):
    assert client.get("/api/contributions").status_code == 401
    assert client.post("/api/contributions", json=make_payload()).status_code == 401


def test_create_and_list(client, auth_headers, audit_dir):
    response = client.post("/api/contributions", json=make_payload(previous_payment="200"), headers=auth_headers)

    assert response.status_code == 201
    created = response.json()
    assert len(created["id"]) == 9
    assert Decimal(created["amount"]) == Decimal("5000")

    client.post("/api/contributions", json=make_payload(date="2024-02-25"), headers=auth_headers)
    listed = client.get("/api/contributions", headers=auth_headers).json()
    assert [c["date"] for c in listed] == ["2024-02-25", "2024-01-25"]

    log_text = "".join(p.read_text() for p in audit_dir.glob("audit_*.log"))
    assert "Contribution created" in log_text


def test_camp_credit_requires_notes(client, auth_headers):
    response = client.post(
        "/api/contributions",
        json=make_payload(category="Credited from Camp"),
        headers=auth_headers
    )
    assert response.status_code == 422

    response = client.post(
        "/api/contributions",
        json=make_payload(category="Credited from Camp", notes="Batch B camp"),
        headers=auth_headers
    )
    assert response.status_code == 201


def test_validation_errors(client, auth_headers):
    assert client.post("/api/contributions", json=make_payload(category="Bonus"), headers=auth_headers).status_code == 422
    assert client.post("/api/contributions", json=make_payload(member_name="  "), headers=auth_headers).status_code == 422
    assert client.post("/api/contributions", json=make_payload(previous_payment="-1"), headers=auth_headers).status_code == 422


def test_duplicate_id_rejected(client, auth_headers):
    assert client.post("/api/contributions", json=make_payload(id="abc123xyz"), headers=auth_headers).status_code == 201
    response = client.post("/api/contributions", json=make_payload(id="abc123xyz"), headers=auth_headers)
    assert response.status_code == 400


def test_update_and_delete(client, auth_headers):
    created = client.post("/api/contributions", json=make_payload(), headers=auth_headers).json()

    response = client.put(
        f"/api/contributions/{created['id']}",
        json=make_payload(amount="7500", notes="corrected"),
        headers=auth_headers
    )
    assert response.status_code == 200
    assert Decimal(response.json()["amount"]) == Decimal("7500")
    assert response.json()["notes"] == "corrected"

    assert client.delete(f"/api/contributions/{created['id']}", headers=auth_headers).status_code == 200
    assert client.get(f"/api/contributions/{created['id']}", headers=auth_headers).status_code == 404
    assert client.delete(f"/api/contributions/{created['id']}", headers=auth_headers).status_code == 404
    assert client.put("/api/contributions/missing", json=make_payload(), headers=auth_headers).status_code == 404


def test_bulk_create_is_all_or_nothing(client, auth_headers):
    response = client.post(
        "/api/contributions/bulk",
        json={"records": [make_payload(), make_payload(file_number="NYSC/KT/0207", member_name="Ibrahim Musa")]},
        headers=auth_headers
    )
    assert response.status_code == 201
    assert response.json()["created"] == 2

    response = client.post(
        "/api/contributions/bulk",
        json={"records": [make_payload(id="dup000001"), make_payload(id="dup000001")]},
        headers=auth_headers
    )
    assert response.status_code == 400
    assert len(client.get("/api/contributions", headers=auth_headers).json()) == 2


def test_receipt_running_balance(client, auth_headers):
    client.post("/api/contributions", json=make_payload(amount="1000", date="2024-01-10", previous_payment="200"), headers=auth_headers)
    client.post("/api/contributions", json=make_payload(amount="1500", date="2024-02-15"), headers=auth_headers)
    target = client.post("/api/contributions", json=make_payload(amount="500", date="2024-03-20"), headers=auth_headers).json()

    response = client.get(f"/api/contributions/{target['id']}/receipt", headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert Decimal(body["running_balance"]["balance_before"]) == Decimal("2700")
    assert Decimal(body["running_balance"]["balance_after"]) == Decimal("3200")
    assert "*Current Total: ₦3,200*" in body["receipt_text"]
    assert body["share_url"].startswith("https://wa.me/?text=")

    assert client.get("/api/contributions/missing/receipt", headers=auth_headers).status_code == 404


def test_same_day_entries_use_entry_order(client, auth_headers):
    first = client.post("/api/contributions", json=make_payload(amount="100"), headers=auth_headers).json()
    second = client.post("/api/contributions", json=make_payload(amount="200"), headers=auth_headers).json()

    before_second = client.get(f"/api/contributions/{second['id']}/receipt", headers=auth_headers).json()
    before_first = client.get(f"/api/contributions/{first['id']}/receipt", headers=auth_headers).json()

    assert Decimal(before_second["running_balance"]["balance_before"]) == Decimal("100")
    assert Decimal(before_first["running_balance"]["balance_before"]) == Decimal("0")


def test_dashboard_endpoints(client, auth_headers):
    client.post("/api/contributions", json=make_payload(amount="6000", date="2023-05-25"), headers=auth_headers)
    client.post("/api/contributions", json=make_payload(file_number="KT/2", member_name="Grace", amount="4000", date="2024-05-25"), headers=auth_headers)

    summary = client.get("/api/dashboard/summary", headers=auth_headers).json()
    assert Decimal(summary["total_equity"]) == Decimal("10000")
    assert summary["member_count"] == 2
    assert Decimal(summary["projected_dividend"]) == Decimal("500")

    years = client.get("/api/dashboard/time-series?bucket=year", headers=auth_headers).json()
    assert [b["label"] for b in years["buckets"]] == ["2024", "2023"]

    months = client.get("/api/dashboard/time-series", headers=auth_headers).json()
    assert [b["label"] for b in months["buckets"]] == ["May"]

    assert client.get("/api/dashboard/time-series?bucket=week", headers=auth_headers).status_code == 400
    assert len(client.get("/api/dashboard/recent", headers=auth_headers).json()) == 2


def test_dashboard_recent_limits_to_ten(client, auth_headers):
    for day in range(1, 13):
        client.post("/api/contributions", json=make_payload(date=f"2024-01-{day:02d}"), headers=auth_headers)

    recent = client.get("/api/dashboard/recent", headers=auth_headers).json()
    assert len(recent) == 10
    assert recent[0]["date"] == "2024-01-12"


def test_members_directory_and_statement(client, auth_headers):
    client.post("/api/contributions", json=make_payload(amount="1000"), headers=auth_headers)
    client.post("/api/contributions", json=make_payload(file_number="KT/2", member_name="Grace Okafor", amount="9000"), headers=auth_headers)

    members = client.get("/api/members", headers=auth_headers).json()["members"]
    assert [m["file_number"] for m in members] == ["KT/2", "NYSC/KT/0142"]

    found = client.get("/api/members", params={"search": "aisha"}, headers=auth_headers).json()["members"]
    assert [m["name"] for m in found] == ["Aisha Bello"]

    statement = client.get("/api/members/NYSC/KT/0142/statement", headers=auth_headers)
    assert statement.status_code == 200
    assert statement.json()["member_name"] == "Aisha Bello"
    assert Decimal(statement.json()["final_balance"]) == Decimal("1000")

    assert client.get("/api/members/UNKNOWN/statement", headers=auth_headers).status_code == 404
