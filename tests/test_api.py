"""
RetailOps Ledger - API Tests

Integration tests for the HTTP surface: envelopes, error mapping and
end-to-end postings through the routers.
"""

import pytest
from httpx import AsyncClient

from app.models.counterparty import Client
from app.models.inventory import Product
from conftest import money


class TestHealthEndpoints:
    """Test health check and info endpoints."""

    @pytest.mark.asyncio
    async def test_health_check(self, client: AsyncClient):
        """Test health check endpoint."""
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_api_info(self, client: AsyncClient):
        response = await client.get("/api")
        assert response.status_code == 200
        assert response.json()["name"] == "RetailOps Ledger"


class TestChartOfAccountsAPI:

    @pytest.mark.asyncio
    async def test_seed_and_list(self, client: AsyncClient):
        response = await client.post("/api/v1/accounts/seed")
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert len(body["data"]) == 19

        response = await client.get("/api/v1/accounts", params={"account_type": "liability"})
        codes = [a["account_code"] for a in response.json()["data"]]
        assert codes == ["2000", "210003", "210006"]

    @pytest.mark.asyncio
    async def test_classify(self, client: AsyncClient):
        response = await client.get("/api/v1/accounts/classify/9")
        assert response.json()["data"]["label"] == "cash"

    @pytest.mark.asyncio
    async def test_classify_unknown_code(self, client: AsyncClient):
        response = await client.get("/api/v1/accounts/classify/77")
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "VALIDATION_ERROR"


class TestErrorEnvelopes:
    """Failures share one envelope."""

    @pytest.mark.asyncio
    async def test_not_found(self, client: AsyncClient, chart):
        response = await client.get("/api/v1/journal-entries/9999")
        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["detail"]["code"] == "NOT_FOUND"
        assert "timestamp" in body["detail"]

    @pytest.mark.asyncio
    async def test_request_validation(self, client: AsyncClient, chart):
        response = await client.post("/api/v1/journal-entries", json={"description": "No lines"})
        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_unbalanced_entry(self, client: AsyncClient, chart):
        response = await client.post("/api/v1/journal-entries", json={
            "entry_date": "2026-06-01",
            "description": "Unbalanced",
            "lines": [
                {"account_id": chart["510001"].id, "debit_amount": "100.00"},
                {"account_id": chart["1000"].id, "credit_amount": "90.00"},
            ],
        })
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "UNBALANCED_ENTRY"

    @pytest.mark.asyncio
    async def test_missing_account_is_configuration_error(
        self, client: AsyncClient, chart, client_party: Client, product: Product,
    ):
        response = await client.post(f"/api/v1/accounts/{chart['210006'].id}/deactivate")
        assert response.status_code == 200

        response = await client.post("/api/v1/sales/invoices", json={
            "client_id": client_party.id,
            "invoice_date": "2026-06-01",
            "items": [{"product_id": product.id, "quantity": 1, "unit_price": "100.00"}],
        })
        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["code"] == "CONFIGURATION_ERROR"
        assert detail["details"]["account_code"] == "210006"

        response = await client.get("/api/v1/sales/invoices")
        assert response.json()["data"] == []


class TestJournalAPI:

    @pytest.mark.asyncio
    async def test_manual_entry_records_actor(self, client: AsyncClient, chart):
        response = await client.post(
            "/api/v1/journal-entries",
            json={
                "entry_date": "2026-06-01",
                "description": "June rent",
                "lines": [
                    {"account_id": chart["510001"].id, "debit_amount": "1500.00"},
                    {"account_id": chart["1000"].id, "credit_amount": "1500.00"},
                ],
            },
            headers={"X-Actor-Id": "clerk-7"},
        )
        assert response.status_code == 201
        entry = response.json()["data"]
        assert entry["created_by"] == "clerk-7"
        assert entry["entry_number"] == "JE-2026-000001"
        assert money(entry["total_debit"]) == money("1500.00")

        response = await client.get(f"/api/v1/accounts/{chart['1000'].id}/ledger")
        statement = response.json()["data"]
        assert statement["subject_name"] == "Cash at Bank"
        assert money(statement["closing_balance"]) == money("-1500.00")

    @pytest.mark.asyncio
    async def test_reverse_entry(self, client: AsyncClient, chart):
        response = await client.post("/api/v1/journal-entries", json={
            "entry_date": "2026-06-01",
            "description": "Posted in error",
            "lines": [
                {"account_id": chart["510002"].id, "debit_amount": "40"},
                {"account_id": chart["1000"].id, "credit_amount": "40"},
            ],
        })
        entry_id = response.json()["data"]["id"]

        response = await client.post(
            f"/api/v1/journal-entries/{entry_id}/reverse",
            json={"reversal_date": "2026-06-02", "reason": "Wrong account"},
        )
        assert response.status_code == 201
        assert response.json()["data"]["reversal_of_id"] == entry_id

        response = await client.post(
            f"/api/v1/journal-entries/{entry_id}/reverse",
            json={"reversal_date": "2026-06-02", "reason": "Again"},
        )
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "ALREADY_PROCESSED"


class TestSalesFlowAPI:

    @pytest.mark.asyncio
    async def test_invoice_receipt_and_statement(
        self, client: AsyncClient, chart, product: Product,
    ):
        response = await client.post("/api/v1/clients", json={"name": "Walk-in Account"})
        assert response.status_code == 201
        client_id = response.json()["data"]["id"]

        response = await client.post("/api/v1/sales/invoices", json={
            "client_id": client_id,
            "invoice_date": "2026-06-01",
            "items": [{"product_id": product.id, "quantity": 3, "unit_price": "100.00"}],
        })
        assert response.status_code == 201
        assert money(response.json()["data"]["total_amount"]) == money("348.00")

        response = await client.post("/api/v1/sales/receipts", json={
            "client_id": client_id, "amount": "148.00", "receipt_date": "2026-06-10",
        })
        receipt_id = response.json()["data"]["id"]
        assert response.json()["data"]["status"] == "in_pay"

        response = await client.post(f"/api/v1/sales/receipts/{receipt_id}/confirm", json={})
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "confirmed"

        response = await client.get(f"/api/v1/clients/{client_id}")
        assert money(response.json()["data"]["balance"]) == money("200.00")

        response = await client.get(f"/api/v1/clients/{client_id}/statement")
        rows = response.json()["data"]["rows"]
        assert [money(r["running_balance"]) for r in rows] == [money("348.00"), money("200.00")]

        response = await client.get("/api/v1/reports/aging/clients", params={"as_of_date": "2026-06-30"})
        aging = response.json()["data"]
        assert aging["counterparties"][0]["counterparty_id"] == client_id
        assert money(aging["totals"]["total"]) == money("200.00")

        response = await client.get("/api/v1/reports/reconciliation", params={"as_of_date": "2026-06-30"})
        receivables = response.json()["data"]["receivables"]
        assert money(receivables["variance"]) == money("0")
        assert receivables["stale_cache_ids"] == []

    @pytest.mark.asyncio
    async def test_decline_receipt(self, client: AsyncClient, chart, client_party: Client):
        response = await client.post("/api/v1/sales/receipts", json={
            "client_id": client_party.id, "amount": "60.00", "receipt_date": "2026-06-10",
        })
        receipt_id = response.json()["data"]["id"]

        response = await client.post(
            f"/api/v1/sales/receipts/{receipt_id}/decline", json={"reason": "Transfer recalled"},
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "declined"
        assert data["decline_reason"] == "Transfer recalled"

        response = await client.post(f"/api/v1/sales/receipts/{receipt_id}/confirm", json={})
        assert response.status_code == 400
        assert response.json()["detail"]["field"] == "status"

        response = await client.get("/api/v1/journal-entries")
        assert response.json()["data"]["total"] == 0

    @pytest.mark.asyncio
    async def test_trial_balance(self, client: AsyncClient, chart, client_party: Client, product: Product):
        await client.post("/api/v1/sales/invoices", json={
            "client_id": client_party.id,
            "invoice_date": "2026-06-01",
            "items": [{"product_id": product.id, "quantity": 1, "unit_price": "100.00"}],
        })

        response = await client.get("/api/v1/reports/trial-balance", params={"as_of_date": "2026-06-30"})
        assert response.status_code == 200
        report = response.json()["data"]
        assert report["is_balanced"] is True
        assert money(report["total_debit"]) == money(report["total_credit"]) == money("116.00")
        assert [a["account_code"] for a in report["accounts"]] == ["1100", "210006", "400001"]

    @pytest.mark.asyncio
    async def test_custom_period_needs_dates(self, client: AsyncClient, chart):
        response = await client.get("/api/v1/reports/profit-loss", params={"period": "custom"})
        assert response.status_code == 400
        assert response.json()["detail"]["field"] == "period"
