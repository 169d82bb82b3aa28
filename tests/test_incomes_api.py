"""Income endpoints: CRUD, source filters and the stats views."""

from datetime import datetime, timedelta, timezone

INCOMES_URL = "/api/v1/incomes"


def create_income(client, headers, **overrides) -> dict:
    payload = {
        "title": "October salary",
        "amount": 3000.0,
        "category": "employment",
        "source": "salary",
    }
    payload.update(overrides)
    response = client.post(INCOMES_URL, json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestIncomeCrud:
    def test_create_defaults(self, client, auth_headers):
        income = create_income(client, auth_headers)

        assert income["status"] == "received"
        assert income["payment_method"] == "bank_transfer"
        assert income["formatted_amount"] == "$3,000.00"

    def test_invalid_source(self, client, auth_headers):
        response = client.post(
            INCOMES_URL,
            json={"title": "Lottery", "amount": 5, "category": "luck", "source": "lottery"},
            headers=auth_headers,
        )
        assert response.status_code == 422

    def test_update(self, client, auth_headers):
        income = create_income(client, auth_headers)

        response = client.patch(
            f"{INCOMES_URL}/{income['id']}", json={"status": "pending"}, headers=auth_headers
        )

        assert response.json()["status"] == "pending"

    def test_delete_is_soft(self, client, auth_headers):
        income = create_income(client, auth_headers)

        response = client.delete(f"{INCOMES_URL}/{income['id']}", headers=auth_headers)

        assert response.json()["status"] == "cancelled"
        assert client.get(INCOMES_URL, headers=auth_headers).json()["total"] == 0

    def test_owner_scoped(self, client, auth_headers, other_headers):
        income = create_income(client, auth_headers)

        response = client.patch(f"{INCOMES_URL}/{income['id']}", json={"amount": 1}, headers=other_headers)

        assert response.status_code == 404


class TestIncomeListing:
    def test_filter_by_source(self, client, auth_headers):
        create_income(client, auth_headers)
        create_income(client, auth_headers, title="Logo design", amount=400, category="side", source="freelance")

        body = client.get(INCOMES_URL, params={"source": "freelance"}, headers=auth_headers).json()

        assert [i["title"] for i in body["items"]] == ["Logo design"]

    def test_sources_and_categories(self, client, auth_headers):
        create_income(client, auth_headers)
        create_income(client, auth_headers, title="Dividends", category="portfolio", source="investment")

        sources = client.get(f"{INCOMES_URL}/sources", headers=auth_headers).json()
        categories = client.get(f"{INCOMES_URL}/categories", headers=auth_headers).json()

        assert sorted(sources) == ["investment", "salary"]
        assert categories == ["employment", "portfolio"]

    def test_search(self, client, auth_headers):
        create_income(client, auth_headers)
        create_income(client, auth_headers, title="Garage sale", category="misc", source="other")

        body = client.get(f"{INCOMES_URL}/search", params={"q": "garage"}, headers=auth_headers).json()

        assert body["total"] == 1


class TestIncomeStats:
    def test_overview(self, client, auth_headers):
        create_income(client, auth_headers, amount=3000)
        create_income(client, auth_headers, amount=1000, source="freelance")

        stats = client.get(f"{INCOMES_URL}/stats/overview", headers=auth_headers).json()

        assert stats["total_amount"] == 4000
        assert stats["count"] == 2
        assert stats["average_amount"] == 2000

    def test_overview_date_window(self, client, auth_headers):
        old = (datetime.now(timezone.utc) - timedelta(days=90)).isoformat()
        create_income(client, auth_headers, amount=3000)
        create_income(client, auth_headers, amount=500, date=old)

        since = (datetime.now(timezone.utc) - timedelta(days=30)).isoformat()
        stats = client.get(
            f"{INCOMES_URL}/stats/overview", params={"start_date": since}, headers=auth_headers
        ).json()

        assert stats["total_amount"] == 3000

    def test_source_breakdown(self, client, auth_headers):
        create_income(client, auth_headers, amount=3000)
        create_income(client, auth_headers, amount=1000, source="freelance")

        rows = client.get(f"{INCOMES_URL}/stats/sources", headers=auth_headers).json()

        assert [(r["source"], r["percentage"]) for r in rows] == [("salary", 75), ("freelance", 25)]

    def test_trends(self, client, auth_headers):
        create_income(client, auth_headers, amount=3000)

        rows = client.get(f"{INCOMES_URL}/stats/trends", headers=auth_headers).json()

        assert len(rows) == 1
        assert rows[0]["total_amount"] == 3000
        assert rows[0]["month_name"] == datetime.now(timezone.utc).strftime("%B")
