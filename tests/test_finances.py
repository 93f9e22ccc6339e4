"""Tests for finance totals, overdue marking and the finance routes"""
from datetime import date

from clubflow.core.cache import MemoryCache
from clubflow.modules.finances.service import FinanceService, summarize_finances
from clubflow.modules.teams.service import current_season


class TestSummarizeFinances:
    def test_totals(self):
        rows = [
            {"type": "income", "category": "fees", "amount": 120.0, "status": "paid"},
            {"type": "income", "category": "fees", "amount": "30.5", "status": "paid"},
            {"type": "expense", "category": "equipment", "amount": 50, "status": "paid"},
            {"type": "income", "category": "fees", "amount": 40, "status": "pending"},
            {"type": "expense", "category": "rent", "amount": 300, "status": "overdue"},
            {"type": "income", "category": "fees", "amount": 999, "status": "cancelled"},
            {"type": "income", "category": "fees", "amount": 999, "status": "paid", "is_active": False},
        ]
        summary = summarize_finances(rows)
        assert summary.income == 150.5
        assert summary.expenses == 50
        assert summary.balance == 100.5
        assert summary.pending == 40
        assert summary.pending_count == 1
        assert summary.overdue == 300
        assert summary.overdue_count == 1
        assert summary.by_category == {"fees": 150.5, "equipment": -50}

    def test_empty(self):
        summary = summarize_finances([])
        assert summary.balance == 0
        assert summary.by_category == {}


class TestMarkOverdue:
    def test_only_past_due_pending_rows(self, db):
        db.seed(
            "finances",
            {"club_id": 1, "status": "pending", "due_date": "2026-04-30", "amount": 10},
            {"club_id": 1, "status": "pending", "due_date": "2026-05-02", "amount": 10},
            {"club_id": 2, "status": "paid", "due_date": "2026-04-01", "amount": 10},
        )
        assert FinanceService(db, MemoryCache()).mark_overdue(today=date(2026, 5, 1)) == 1
        assert [r["status"] for r in db.rows("finances")] == ["overdue", "pending", "paid"]


class TestSeason:
    def test_season_starts_in_july(self):
        assert current_season(date(2026, 7, 1)) == "2026/27"
        assert current_season(date(2026, 6, 30)) == "2025/26"
        assert current_season(date(2099, 9, 1)) == "2099/00"


class TestFinanceRoutes:
    def _entry(self, **overrides):
        payload = {
            "type": "income",
            "category": "fees",
            "amount": 100,
            "description": "Mitgliedsbeitrag",
            "date": "2026-05-01",
            "status": "paid",
        }
        payload.update(overrides)
        return payload

    def test_create_and_list(self, client, club):
        response = client.post(f"/api/clubs/{club['id']}/finances", json=self._entry())
        assert response.status_code == 201
        assert response.json()["amount"] == 100

        response = client.get(f"/api/clubs/{club['id']}/finances", params={"type": "income"})
        assert response.status_code == 200
        assert len(response.json()) == 1

    def test_invalid_amount_rejected(self, client, club):
        response = client.post(f"/api/clubs/{club['id']}/finances", json=self._entry(amount=0))
        assert response.status_code == 422

    def test_summary_needs_financial_reports(self, client, club, db):
        response = client.get(f"/api/clubs/{club['id']}/finances/summary")
        assert response.status_code == 403
        assert response.json()["detail"]["required_plan"] == "starter"
        log = db.rows("feature_access_log")
        assert log[0]["feature_name"] == "financialReports"
        assert log[0]["metadata"]["result"] == "denied"

    def test_summary_on_paid_plan(self, client, paid_club):
        club_id = paid_club["id"]
        client.post(f"/api/clubs/{club_id}/finances", json=self._entry())
        client.post(f"/api/clubs/{club_id}/finances", json=self._entry(type="expense", category="rent", amount=40))
        response = client.get(f"/api/clubs/{club_id}/finances/summary")
        assert response.status_code == 200
        assert response.json()["balance"] == 60

    def test_missing_entry(self, client, club):
        response = client.get(f"/api/clubs/{club['id']}/finances/99")
        assert response.status_code == 404

    def test_member_fee_requires_club_member(self, client, club, db):
        other = db.seed("members", {"club_id": 999, "first_name": "A", "last_name": "B", "status": "active"})[0]
        response = client.post(f"/api/clubs/{club['id']}/member-fees", json={
            "member_id": other["id"],
            "fee_type": "membership",
            "amount": 120,
            "period": "yearly",
            "start_date": "2026-01-01",
        })
        assert response.status_code == 404
