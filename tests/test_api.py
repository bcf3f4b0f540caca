"""
HTTP API tests.

Covers:
- Route protection by the auth middleware and role dependencies
- Login for staff, investors and partners
- Admin period and distribution flow, including error mapping
- Participant requests, approval and account summary
"""

from decimal import Decimal

from cvm_capital.models import EntryKind, UserRole

from conftest import TEST_PASSWORD


# ── Health and protection ─────────────────────────────────


class TestProtection:
    async def test_health(self, client):
        response = await client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_admin_requires_login(self, client):
        response = await client.get("/api/admin/periods")
        assert response.status_code == 401

    async def test_participant_token_rejected_on_admin_routes(self, client, factory, login_as):
        investor = await factory.investor()
        login_as(investor.id, "investor")

        response = await client.get("/api/admin/periods")
        assert response.status_code == 403

    async def test_staff_token_rejected_on_panel_routes(self, client, factory, login_as):
        admin = await factory.admin()
        login_as(admin.id, "admin")

        response = await client.get("/api/panel/account")
        assert response.status_code == 403

    async def test_moderator_is_read_only(self, client, factory, login_as):
        moderator = await factory.admin(role=UserRole.MODERATOR)
        login_as(moderator.id, "moderator")

        assert (await client.get("/api/admin/periods")).status_code == 200
        response = await client.post("/api/admin/periods", json={"month": 3, "year": 2025})
        assert response.status_code == 403


# ── Login ─────────────────────────────────────────────────


class TestLogin:
    async def test_admin_login_sets_cookie(self, client, factory):
        admin = await factory.admin()

        response = await client.post(
            "/api/auth/login",
            json={"username": admin.username, "password": TEST_PASSWORD},
        )

        assert response.status_code == 200
        assert response.json()["role"] == "admin"
        assert "access_token" in response.cookies

    async def test_wrong_password(self, client, factory):
        admin = await factory.admin()

        response = await client.post(
            "/api/auth/login",
            json={"username": admin.username, "password": "nope"},
        )
        assert response.status_code == 401

    async def test_investor_logs_in_with_email(self, client, factory):
        investor = await factory.investor(with_password=True)

        response = await client.post(
            "/api/auth/login",
            json={
                "username": investor.email.upper(),
                "password": TEST_PASSWORD,
                "account_type": "investor",
            },
        )
        assert response.status_code == 200
        assert response.json()["role"] == "investor"

    async def test_inactive_partner_cannot_log_in(self, client, factory):
        partner = await factory.partner(active=False, with_password=True)

        response = await client.post(
            "/api/auth/login",
            json={
                "username": partner.username,
                "password": TEST_PASSWORD,
                "account_type": "partner",
            },
        )
        assert response.status_code == 403

    async def test_unknown_account_type(self, client):
        response = await client.post(
            "/api/auth/login",
            json={"username": "x", "password": "y", "account_type": "owner"},
        )
        assert response.status_code == 422


# ── Admin flow ────────────────────────────────────────────


class TestAdminDistributionFlow:
    async def test_period_preview_commit(self, client, factory, db_session, login_as):
        await factory.config("70", "30")
        investor = await factory.investor(deposit="1000")
        await factory.partner()
        admin = await factory.admin()
        investor_id, admin_id = investor.id, admin.id
        await db_session.commit()
        login_as(admin_id, "admin")

        response = await client.post("/api/admin/periods", json={"month": 3, "year": 2025})
        assert response.status_code == 201
        period = response.json()
        assert period["sequence_number"] == 1
        assert period["label"] == "March 2025"

        response = await client.post("/api/admin/periods", json={"month": 4, "year": 2025})
        assert response.status_code == 400

        body = {"period_id": period["id"], "profit_percentage": "10"}
        response = await client.post("/api/admin/distribution/preview", json=body)
        assert response.status_code == 200
        preview = response.json()
        assert Decimal(preview["gross_profit"]) == Decimal("100")
        assert Decimal(preview["exclusive_pool"]) == Decimal("30")
        assert preview["warnings"] == []

        response = await client.post("/api/admin/distribution/commit", json=body)
        assert response.status_code == 200
        assert response.json()["entries_written"] == 2

        response = await client.post("/api/admin/distribution/commit", json=body)
        assert response.status_code == 409

        response = await client.get(f"/api/admin/participants/investor/{investor_id}")
        assert Decimal(response.json()["balance"]) == Decimal("1070")

        response = await client.get("/api/admin/periods/next-sequence")
        assert response.json() == {"next_sequence_number": 2, "can_create": True}

        response = await client.get("/api/admin/audit/list")
        actions = {item["action"] for item in response.json()["items"]}
        assert {"create_period", "commit_distribution"} <= actions

    async def test_invalid_profit_percentage_is_422(self, client, factory, login_as):
        admin = await factory.admin()
        login_as(admin.id, "admin")

        response = await client.post(
            "/api/admin/distribution/preview",
            json={"period_id": 1, "profit_percentage": "0"},
        )
        assert response.status_code == 422

    async def test_percentage_precision_is_limited(self, client, factory, login_as):
        admin = await factory.admin()
        login_as(admin.id, "admin")

        response = await client.post(
            "/api/admin/distribution/preview",
            json={"period_id": 1, "profit_percentage": "10.12345"},
        )
        assert response.status_code == 422

        response = await client.post(
            "/api/admin/profit-config",
            json={"proportional_percentage": "66.66665", "exclusive_percentage": "33.33335"},
        )
        assert response.status_code == 422

    async def test_missing_period_is_404(self, client, factory, login_as):
        await factory.config()
        admin = await factory.admin()
        login_as(admin.id, "admin")

        response = await client.post(
            "/api/admin/distribution/preview",
            json={"period_id": 99, "profit_percentage": "10"},
        )
        assert response.status_code == 404

    async def test_invalid_split_is_400(self, client, factory, login_as):
        admin = await factory.admin()
        login_as(admin.id, "admin")

        response = await client.post(
            "/api/admin/profit-config",
            json={"proportional_percentage": "60", "exclusive_percentage": "39"},
        )
        assert response.status_code == 400
        assert "100" in response.json()["detail"]

        response = await client.post(
            "/api/admin/profit-config",
            json={"proportional_percentage": "60", "exclusive_percentage": "40"},
        )
        assert response.status_code == 201

        response = await client.get("/api/admin/profit-config")
        assert Decimal(response.json()["exclusive_percentage"]) == Decimal("40")

    async def test_dashboard_reports_clamped_and_raw_capital(self, client, factory, login_as):
        investor = await factory.investor(deposit="100")
        await factory.entry(investor, EntryKind.WITHDRAWAL, "300")
        admin = await factory.admin()
        login_as(admin.id, "admin")

        response = await client.get("/api/admin/dashboard")
        assert response.status_code == 200
        summary = response.json()
        assert Decimal(summary["total_capital"]) == Decimal("0")
        assert Decimal(summary["raw_total_capital"]) == Decimal("-200")


# ── Participant panel ─────────────────────────────────────


class TestPanelRequests:
    async def test_deposit_request_lifecycle(self, client, factory, db_session, login_as):
        investor = await factory.investor()
        admin = await factory.admin()
        investor_id, admin_id = investor.id, admin.id
        await db_session.commit()

        login_as(investor_id, "investor")
        response = await client.post(
            "/api/panel/requests",
            json={"kind": "deposit", "amount": "250", "note": "Wire transfer"},
        )
        assert response.status_code == 201
        request_id = response.json()["id"]

        response = await client.post(
            "/api/panel/requests", json={"kind": "deposit", "amount": "10"}
        )
        assert response.status_code == 400

        login_as(admin_id, "admin")
        response = await client.get("/api/admin/requests", params={"status": "pending"})
        assert [r["id"] for r in response.json()] == [request_id]

        response = await client.post(f"/api/admin/requests/{request_id}/approve")
        assert response.status_code == 200
        assert response.json()["status"] == "approved"

        login_as(investor_id, "investor")
        summary = (await client.get("/api/panel/account")).json()
        assert Decimal(summary["balance"]["balance"]) == Decimal("250")
        assert summary["pending_requests"] == 0
        assert summary["unread_notifications"] == 1

        notes = (await client.get("/api/panel/notifications")).json()
        assert notes["unread"] == 1
        response = await client.post("/api/panel/notifications/read-all")
        assert response.json()["updated"] == 1

    async def test_withdrawal_over_balance_is_400(self, client, factory, login_as):
        partner = await factory.partner(deposit="100")
        login_as(partner.id, "partner")

        response = await client.post(
            "/api/panel/requests", json={"kind": "withdrawal", "amount": "150"}
        )
        assert response.status_code == 400

    async def test_deactivated_partner_is_locked_out(self, client, factory, login_as):
        partner = await factory.partner(active=False)
        login_as(partner.id, "partner")

        response = await client.get("/api/panel/account")
        assert response.status_code == 403
