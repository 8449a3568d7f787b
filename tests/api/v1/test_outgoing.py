from datetime import date
from decimal import Decimal

from app.models.ledger import Branch

URL = "/api/v1/outgoing"


def payload(**overrides):
    data = {
        "entry_date": "2024-05-01",
        "payee": "Ofis ijarasi",
        "branch": "Nabrejniy Filiali",
        "category": "Rent",
        "carried_forward": 200000,
        "monthly_charge": 300000,
        "paid": {"cash": 100000, "wire_transfer": 100000},
    }
    data.update(overrides)
    return data


def test_create_outgoing(client, outgoing_repo):
    response = client.post(URL, json=payload())

    assert response.status_code == 201
    data = response.json()
    assert data["id"] == 1
    assert data["entry_date"] == "2024-05-01"
    assert data["branch"] == "Nabrejniy Filiali"
    assert Decimal(data["total_due"]) == Decimal("500000")
    assert Decimal(data["residual_debt"]) == Decimal("300000")
    assert outgoing_repo.rows[1].payee == "Ofis ijarasi"


def test_create_accepts_day_first_date(client):
    response = client.post(URL, json=payload(entry_date="15/03/2024"))

    assert response.status_code == 201
    assert response.json()["entry_date"] == "2024-03-15"


def test_create_without_date_uses_today(client):
    data = payload()
    del data["entry_date"]

    response = client.post(URL, json=data)

    assert response.status_code == 201
    assert date.fromisoformat(response.json()["entry_date"])


def test_create_requires_payee_and_category(client):
    response = client.post(URL, json=payload(payee=""))
    assert response.status_code == 400
    assert response.json()["detail"] == "Payee is required"

    response = client.post(URL, json=payload(category=" "))
    assert response.status_code == 400
    assert response.json()["detail"] == "Category is required"


def test_list_filters(client, outgoing_repo, make_outgoing):
    outgoing_repo.seed(make_outgoing(entry_date=date(2024, 4, 30), category="Utilities", branch=Branch.ZARKENT))
    outgoing_repo.seed(make_outgoing(entry_date=date(2024, 5, 1), category="Rent", branch=Branch.NABREJNIY))
    outgoing_repo.seed(make_outgoing(entry_date=date(2024, 5, 31), category="Utilities", branch=Branch.NABREJNIY))

    by_category = client.get(URL, params={"category": "utilities"}).json()
    by_branch = client.get(URL, params={"branch": "zarkent filiali"}).json()
    by_range = client.get(URL, params={"start_date": "2024-05-01", "end_date": "2024-05-31"}).json()

    assert [r["id"] for r in by_category["records"]] == [1, 3]
    assert [r["id"] for r in by_branch["records"]] == [1]
    assert [r["id"] for r in by_range["records"]] == [2, 3]
    assert by_range["totals"]["count"] == 2


def test_update_and_delete_outgoing(client, outgoing_repo, make_outgoing):
    outgoing_repo.seed(make_outgoing())

    updated = client.put(f"{URL}/1", json=payload(paid={"card": 600000}))
    deleted = client.delete(f"{URL}/1")

    assert updated.status_code == 200
    assert Decimal(updated.json()["residual_advance"]) == Decimal("100000")
    assert deleted.json() == {"success": True}
    assert client.get(URL).json()["records"] == []


def test_missing_outgoing_returns_404(client):
    assert client.put(f"{URL}/9", json=payload()).status_code == 404
    response = client.delete(f"{URL}/9")
    assert response.status_code == 404
    assert response.json()["detail"] == "Outgoing record not found"


def test_list_store_failure_returns_503(client, outgoing_repo):
    outgoing_repo.fail_on.add("list")

    assert client.get(URL).status_code == 503


def test_export_outgoing(client, outgoing_repo, make_outgoing):
    outgoing_repo.seed(make_outgoing(payee="Suvokova", monthly_charge="12500.5"))

    response = client.get(f"{URL}/export")

    assert response.status_code == 200
    assert 'filename="outgoing_report_' in response.headers["content-disposition"]
    header, row = response.text.splitlines()
    assert header.startswith('"Date","Payee","Branch","Category"')
    assert row.startswith('"2024-05-10","Suvokova","Zarkent Filiali","Utilities"')
    assert '"12,500.50"' in row


def test_refresh_ledgers(client, incoming_repo, outgoing_repo, make_incoming, make_outgoing):
    incoming_repo.seed(make_incoming())
    outgoing_repo.seed(make_outgoing())
    outgoing_repo.seed(make_outgoing())

    response = client.post("/api/v1/ledgers/refresh")

    assert response.status_code == 200
    assert response.json() == {"incoming_count": 1, "outgoing_count": 2}


def test_health_and_root(client):
    assert client.get("/health").json() == {"status": "ok", "ledgers_loaded": False}
    assert "message" in client.get("/").json()


def test_get_outgoing(client, outgoing_repo, make_outgoing):
    outgoing_repo.seed(make_outgoing(payee="Suvokova"))

    response = client.get(f"{URL}/1")

    assert response.status_code == 200
    assert response.json()["payee"] == "Suvokova"
    assert response.json()["entry_date"] == "2024-05-10"
    assert client.get(f"{URL}/2").status_code == 404
