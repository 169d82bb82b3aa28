"""Budget endpoints: spend tracking against expenses, stats and status refresh."""

from datetime import datetime, timedelta, timezone

BUDGETS_URL = "/api/v1/budgets"
EXPENSES_URL = "/api/v1/expenses"


def shifted(days: int) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


def create_budget(client, headers, **overrides) -> dict:
    payload = {
        "name": "Food this month",
        "amount": 500.0,
        "category": "food",
        "start_date": shifted(-10),
        "end_date": shifted(20),
    }
    payload.update(overrides)
    response = client.post(BUDGETS_URL, json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def spend(client, headers, amount, category="food", days_ago=1):
    response = client.post(
        EXPENSES_URL,
        json={"title": "Spend", "amount": amount, "category": category, "date": shifted(-days_ago)},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateBudget:
    def test_new_budget_has_nothing_spent(self, client, auth_headers):
        budget = create_budget(client, auth_headers)

        assert budget["status"] == "active"
        assert budget["spent"] == 0
        assert budget["remaining"] == 500
        assert budget["status_info"]["status"] == "good"
        assert budget["formatted_amount"] == "$500.00"

    def test_end_before_start_rejected(self, client, auth_headers):
        response = client.post(
            BUDGETS_URL,
            json={"name": "Backwards", "amount": 10, "category": "food", "start_date": shifted(5), "end_date": shifted(1)},
            headers=auth_headers,
        )
        assert response.status_code == 422

    def test_update_with_bad_dates_rejected(self, client, auth_headers):
        budget = create_budget(client, auth_headers)

        response = client.patch(
            f"{BUDGETS_URL}/{budget['id']}", json={"end_date": shifted(-30)}, headers=auth_headers
        )

        assert response.status_code == 422
        assert response.json()["code"] == "BudgetValidationError"


class TestBudgetSpend:
    def test_spent_counts_matching_expenses_only(self, client, auth_headers):
        budget = create_budget(client, auth_headers)
        spend(client, auth_headers, 120)
        spend(client, auth_headers, 80)
        spend(client, auth_headers, 999, category="travel")
        spend(client, auth_headers, 999, days_ago=60)
        cancelled = spend(client, auth_headers, 999)
        client.delete(f"{EXPENSES_URL}/{cancelled['id']}", headers=auth_headers)

        body = client.get(f"{BUDGETS_URL}/{budget['id']}", headers=auth_headers).json()

        assert body["spent"] == 200
        assert body["progress"] == 40
        assert body["remaining"] == 300

    def test_exceeded_budget(self, client, auth_headers):
        budget = create_budget(client, auth_headers, amount=100)
        spend(client, auth_headers, 150)

        body = client.get(f"{BUDGETS_URL}/{budget['id']}", headers=auth_headers).json()

        assert body["progress"] == 100
        assert body["remaining"] == 0
        assert body["status_info"]["status"] == "exceeded"

    def test_warning_uses_alert_threshold(self, client, auth_headers):
        budget = create_budget(client, auth_headers, amount=100, alert_threshold=60)
        spend(client, auth_headers, 65)

        body = client.get(f"{BUDGETS_URL}/{budget['id']}", headers=auth_headers).json()

        assert body["status_info"]["status"] == "warning"


class TestBudgetListing:
    def test_active_only_covers_now(self, client, auth_headers):
        create_budget(client, auth_headers, name="Current")
        create_budget(client, auth_headers, name="Last quarter", start_date=shifted(-120), end_date=shifted(-30))

        active = client.get(f"{BUDGETS_URL}/active", headers=auth_headers).json()
        listed = client.get(BUDGETS_URL, headers=auth_headers).json()

        assert [b["name"] for b in active] == ["Current"]
        assert listed["total"] == 2

    def test_delete_is_soft(self, client, auth_headers):
        budget = create_budget(client, auth_headers)

        response = client.delete(f"{BUDGETS_URL}/{budget['id']}", headers=auth_headers)

        assert response.json()["status"] == "cancelled"
        assert client.get(BUDGETS_URL, headers=auth_headers).json()["total"] == 0

    def test_owner_scoped(self, client, auth_headers, other_headers):
        budget = create_budget(client, auth_headers)

        response = client.get(f"{BUDGETS_URL}/{budget['id']}", headers=other_headers)

        assert response.status_code == 404

    def test_search_and_categories(self, client, auth_headers):
        create_budget(client, auth_headers)
        create_budget(client, auth_headers, name="Fuel", category="transport")

        found = client.get(f"{BUDGETS_URL}/search", params={"q": "fuel"}, headers=auth_headers).json()
        categories = client.get(f"{BUDGETS_URL}/categories", headers=auth_headers).json()

        assert [b["name"] for b in found["items"]] == ["Fuel"]
        assert categories == ["food", "transport"]


class TestBudgetStats:
    def test_overview(self, client, auth_headers):
        create_budget(client, auth_headers, amount=500)
        create_budget(client, auth_headers, name="Fun", amount=100, category="fun")
        spend(client, auth_headers, 250)
        spend(client, auth_headers, 150, category="fun")

        stats = client.get(f"{BUDGETS_URL}/stats/overview", headers=auth_headers).json()

        assert stats["total_budgets"] == 2
        assert stats["total_budgeted"] == 600
        assert stats["total_spent"] == 400
        assert stats["total_remaining"] == 250
        assert stats["over_budget_count"] == 1
        assert stats["average_utilization"] == 100

    def test_overview_without_budgets(self, client, auth_headers):
        stats = client.get(f"{BUDGETS_URL}/stats/overview", headers=auth_headers).json()
        assert stats["total_budgets"] == 0

    def test_category_breakdown(self, client, auth_headers):
        create_budget(client, auth_headers, amount=400)
        spend(client, auth_headers, 100)

        rows = client.get(f"{BUDGETS_URL}/stats/categories", headers=auth_headers).json()

        assert rows == [
            {"category": "food", "count": 1, "total_budgeted": 400, "total_spent": 100, "utilization": 25}
        ]


class TestRefreshStatus:
    def test_ended_budgets_become_overdue(self, client, auth_headers):
        create_budget(client, auth_headers, name="Current")
        ended = create_budget(
            client, auth_headers, name="Ended", start_date=shifted(-60), end_date=shifted(-1)
        )

        response = client.post(f"{BUDGETS_URL}/refresh-status", headers=auth_headers)

        assert response.json() == {"updated_count": 1}
        body = client.get(f"{BUDGETS_URL}/{ended['id']}", headers=auth_headers).json()
        assert body["status"] == "overdue"

        again = client.post(f"{BUDGETS_URL}/refresh-status", headers=auth_headers)
        assert again.json() == {"updated_count": 0}
