"""Tests for expense API endpoints."""

from app.models.expense import Expense


class TestExpensesAPI:
    """Test expense endpoints."""

    def test_list_expenses_empty(self, client):
        response = client.get("/api/v1/expenses")
        assert response.status_code == 200
        data = response.json()
        assert data["items"] == []
        assert data["total"] == 0

    def test_create_expense_no_history(self, client, db_session):
        """First expense of a series has no suggestion."""
        response = client.post("/api/v1/expenses", json={
            "amount": "93.00",
            "title": "Netflix",
            "category": "Entertainment",
            "timestamp": "2024-01-01T09:00:00",
        })
        assert response.status_code == 201
        data = response.json()
        assert data["expense"]["title"] == "Netflix"
        assert data["suggestion"] is None
        assert db_session.query(Expense).count() == 1

    def test_create_expense_detects_monthly(self, client, sample_expense):
        """A second matching charge a month later is suggested as recurring."""
        response = client.post("/api/v1/expenses", json={
            "amount": "93.00",
            "title": "Netflix",
            "category": "Entertainment",
            "timestamp": "2024-02-14T09:00:00",
        })
        assert response.status_code == 201
        suggestion = response.json()["suggestion"]
        assert suggestion is not None
        assert suggestion["pattern"]["frequency"] == "monthly"
        assert suggestion["confidence"] > 0.6

    def test_create_expense_guesses_category(self, client):
        response = client.post("/api/v1/expenses", json={
            "amount": "4.50",
            "title": "Morning coffee",
            "timestamp": "2024-01-01T08:00:00",
        })
        assert response.status_code == 201
        assert response.json()["expense"]["category"] == "Food & Dining"

    def test_create_expense_negative_amount(self, client):
        response = client.post("/api/v1/expenses", json={
            "amount": "-5",
            "title": "Refund",
            "timestamp": "2024-01-01T08:00:00",
        })
        assert response.status_code == 422

    def test_get_expense(self, client, sample_expense):
        response = client.get(f"/api/v1/expenses/{sample_expense.id}")
        assert response.status_code == 200
        assert response.json()["id"] == sample_expense.id

    def test_get_expense_not_found(self, client):
        response = client.get("/api/v1/expenses/nonexistent")
        assert response.status_code == 404

    def test_delete_expense(self, client, sample_expense, db_session):
        response = client.delete(f"/api/v1/expenses/{sample_expense.id}")
        assert response.status_code == 200
        assert db_session.query(Expense).count() == 0

    def test_filter_by_category(self, client, sample_expense):
        response = client.get("/api/v1/expenses", params={"category": "Food"})
        assert response.json()["total"] == 0
        response = client.get("/api/v1/expenses", params={"category": "Entertainment"})
        assert response.json()["total"] == 1

    def test_parse_text(self, client):
        response = client.post("/api/v1/expenses/parse", json={"text": "I spent 5 dollars on coffee"})
        assert response.status_code == 200
        data = response.json()
        assert data["description"] == "coffee"
        assert data["category"] == "Food & Dining"

    def test_create_expense_with_offset_stored_as_utc(self, client):
        response = client.post("/api/v1/expenses", json={
            "amount": "93.00",
            "title": "Netflix",
            "category": "Entertainment",
            "timestamp": "2024-01-01T09:00:00+02:00",
        })
        assert response.status_code == 201
        assert response.json()["expense"]["timestamp"] == "2024-01-01T07:00:00"

    def test_create_aware_series_detects_monthly(self, client):
        for stamp in ("2024-01-15T09:00:00Z", "2024-02-14T09:00:00Z"):
            response = client.post("/api/v1/expenses", json={
                "amount": "93.00",
                "title": "Netflix",
                "category": "Entertainment",
                "timestamp": stamp,
            })
        assert response.json()["suggestion"]["pattern"]["frequency"] == "monthly"

        upcoming = client.get("/api/v1/recurring/upcoming", params={"within_days": 30})
        assert upcoming.status_code == 200
        assert upcoming.json()[0]["next_predicted"] == "2024-03-14T09:00:00"


class TestExpenseSearch:
    """Test search and amount filters."""

    def _add(self, client, amount, title, category=None, notes=None):
        response = client.post("/api/v1/expenses", json={
            "amount": amount,
            "title": title,
            "category": category,
            "notes": notes,
            "timestamp": "2024-01-01T08:00:00",
        })
        assert response.status_code == 201

    def test_search(self, client):
        self._add(client, "4.50", "Coffee", "Food & Dining")
        self._add(client, "30.00", "Gas station", "Transportation", notes="road trip coffee stop")
        self._add(client, "12.00", "Movie", "Entertainment")

        response = client.get("/api/v1/expenses", params={"search": "coffee"})
        assert sorted(e["title"] for e in response.json()["items"]) == ["Coffee", "Gas station"]

        response = client.get("/api/v1/expenses", params={"search": "entertain"})
        assert [e["title"] for e in response.json()["items"]] == ["Movie"]

    def test_amount_range(self, client):
        self._add(client, "4.50", "Coffee")
        self._add(client, "30.00", "Gas")
        self._add(client, "120.00", "Shoes")

        response = client.get("/api/v1/expenses", params={"min_amount": "5", "max_amount": "100"})
        assert [e["title"] for e in response.json()["items"]] == ["Gas"]

        response = client.get("/api/v1/expenses", params={"min_amount": "30"})
        assert response.json()["total"] == 2

    def test_negative_min_amount_rejected(self, client):
        response = client.get("/api/v1/expenses", params={"min_amount": "-1"})
        assert response.status_code == 422


class TestExpenseUpdate:
    """Test partial updates."""

    def test_update_fields(self, client, sample_expense):
        response = client.patch(f"/api/v1/expenses/{sample_expense.id}", json={
            "amount": "99.00",
            "notes": "price went up",
        })
        assert response.status_code == 200
        data = response.json()
        assert float(data["amount"]) == 99.0
        assert data["notes"] == "price went up"
        assert data["title"] == "Netflix"

    def test_clear_category(self, client, sample_expense):
        response = client.patch(f"/api/v1/expenses/{sample_expense.id}", json={"category": None})
        assert response.status_code == 200
        assert response.json()["category"] is None

    def test_null_title_ignored(self, client, sample_expense):
        response = client.patch(f"/api/v1/expenses/{sample_expense.id}", json={"title": None})
        assert response.status_code == 200
        assert response.json()["title"] == "Netflix"

    def test_update_not_found(self, client):
        response = client.patch("/api/v1/expenses/nonexistent", json={"title": "x"})
        assert response.status_code == 404


class TestExpenseCsv:
    """Test CSV export and import endpoints."""

    def test_export(self, client, sample_expense):
        response = client.get("/api/v1/expenses/export")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "attachment" in response.headers["content-disposition"]
        lines = response.text.splitlines()
        assert lines[0] == "Amount,Title,Category,Date,Notes"
        assert lines[1] == "93.00,Netflix,Entertainment,2024-01-15T09:00:00,"

    def test_import(self, client, db_session):
        content = (
            "Amount,Title,Category,Date,Notes\n"
            "93.00,Netflix,Entertainment,2024-01-15T09:00:00,\n"
            "oops,Broken,Other,2024-01-16T09:00:00,\n"
            "4.50,Coffee,,2024-01-16T08:00:00,\n"
        )
        response = client.post(
            "/api/v1/expenses/import",
            files={"file": ("expenses.csv", content, "text/csv")}
        )
        assert response.status_code == 200
        assert response.json() == {"imported": 2, "skipped": 1}

        stored = {e.title: e for e in db_session.query(Expense).all()}
        assert set(stored) == {"Netflix", "Coffee"}
        assert stored["Coffee"].category == "Food & Dining"
        assert stored["Netflix"].source == "import"
