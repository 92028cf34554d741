"""
End-to-end API tests through the ASGI app with the test database and recording doubles.
"""

import pytest

from app.config import settings
from app.models.property import PropertyStatus
from tests.conftest import PlanFactory, PropertyFactory, TEST_PASSWORD, VettingFactory, auth_headers

API = settings.api_v1_prefix


class TestAuthAPI:

    @pytest.mark.asyncio
    async def test_login(self, client, test_agent):
        response = await client.post(f"{API}/auth/login", json={
            "email": test_agent.email,
            "password": TEST_PASSWORD
        })

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["access_token"]
        assert data["user"]["email"] == test_agent.email
        assert data["user"]["permissions"]["can_approve_properties"] is False

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client, test_agent):
        response = await client.post(f"{API}/auth/login", json={
            "email": test_agent.email,
            "password": "wrongpassword"
        })
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_me_includes_admin_permissions(self, client, super_admin):
        response = await client.get(f"{API}/auth/me", headers=auth_headers(super_admin))

        assert response.status_code == 200
        permissions = response.json()["permissions"]
        assert permissions["can_view_all_countries"] is True
        assert permissions["can_approve_properties"] is True


class TestRegistrationAPI:

    @pytest.mark.asyncio
    async def test_register_agent(self, client, notifier):
        response = await client.post(f"{API}/register/agent", json={
            "first_name": "Ravi",
            "last_name": "Singh",
            "email": "ravi@example.com",
            "phone": "+592 611-2233",
            "password": "securepass123",
            "company_name": "Coastal Realty",
            "license_number": "LIC-77"
        })

        assert response.status_code == 201
        data = response.json()
        assert data["vetting_status"] == "pending_review"
        assert data["user"]["user_type"] == "agent"
        assert data["user"]["is_verified"] is False
        assert "ravi@example.com" in notifier.recipients()
        assert settings.admin_notification_email in notifier.recipients()

    @pytest.mark.asyncio
    async def test_register_landlord_duplicate_email(self, client, test_agent):
        response = await client.post(f"{API}/register/landlord", json={
            "first_name": "Alice",
            "last_name": "Again",
            "email": test_agent.email,
            "phone": "+592 611-2233",
            "password": "securepass123"
        })
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_register_fsbo_waits_for_approval(self, client):
        response = await client.post(f"{API}/register/fsbo", json={
            "first_name": "Dana",
            "last_name": "Seller",
            "email": "dana@example.com",
            "phone": "+1 876 555 0101",
            "password": "securepass123",
            "country_id": "jm"
        })

        assert response.status_code == 201
        user = response.json()["user"]
        assert user["user_type"] == "owner"
        assert user["country_id"] == "JM"
        assert user["approval_status"] == "pending"


class TestPropertiesAPI:

    @pytest.mark.asyncio
    async def test_create_property(self, client, test_agent):
        response = await client.post(
            f"{API}/properties",
            json=PropertyFactory.listing_data(),
            headers=auth_headers(test_agent)
        )

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["country_id"] == "GY"

    @pytest.mark.asyncio
    async def test_unvetted_agent_cannot_create(self, client, unverified_agent):
        response = await client.post(
            f"{API}/properties",
            json=PropertyFactory.listing_data(),
            headers=auth_headers(unverified_agent)
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_create_requires_auth(self, client):
        response = await client.post(f"{API}/properties", json=PropertyFactory.listing_data())
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_search_is_country_scoped(self, client, db_session, active_property, pending_property, jm_agent):
        await PropertyFactory.create(
            db_session, jm_agent,
            title="Kingston Townhouse", status=PropertyStatus.ACTIVE, country_id="JM", region="Kingston"
        )

        gy = await client.get(f"{API}/properties")
        assert gy.status_code == 200
        assert gy.json()["country_id"] == "GY"
        assert [prop["title"] for prop in gy.json()["properties"]] == ["Modern Apartment in Kitty"]

        jm = await client.get(f"{API}/properties", params={"country": "jm"})
        assert [prop["title"] for prop in jm.json()["properties"]] == ["Kingston Townhouse"]

        from_cookie = await client.get(
            f"{API}/properties", headers={"Cookie": f"{settings.country_cookie_name}=JM"}
        )
        assert from_cookie.json()["country_id"] == "JM"

    @pytest.mark.asyncio
    async def test_search_pagination_fields(self, client, active_property):
        response = await client.get(f"{API}/properties", params={"page": 1, "page_size": 10})

        data = response.json()
        assert data["total"] == 1
        assert data["total_pages"] == 1
        assert data["has_next"] is False
        assert data["has_previous"] is False

    @pytest.mark.asyncio
    async def test_pending_listing_hidden_from_public(self, client, pending_property, test_agent):
        anonymous = await client.get(f"{API}/properties/{pending_property.id}")
        assert anonymous.status_code == 404

        owner = await client.get(f"{API}/properties/{pending_property.id}", headers=auth_headers(test_agent))
        assert owner.status_code == 200

    @pytest.mark.asyncio
    async def test_my_properties(self, client, pending_property, active_property, test_agent, other_agent):
        response = await client.get(f"{API}/properties/mine", headers=auth_headers(test_agent))
        assert response.status_code == 200
        assert len(response.json()) == 2

        filtered = await client.get(
            f"{API}/properties/mine", params={"status": "active"}, headers=auth_headers(test_agent)
        )
        assert [prop["id"] for prop in filtered.json()] == [str(active_property.id)]

        other = await client.get(f"{API}/properties/mine", headers=auth_headers(other_agent))
        assert other.json() == []

    @pytest.mark.asyncio
    async def test_admin_approves_listing(self, client, notifier, pending_property, test_agent, gy_owner_admin):
        response = await client.put(
            f"{API}/properties/{pending_property.id}/status",
            json={"status": "active"},
            headers=auth_headers(gy_owner_admin)
        )

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Property approved successfully"
        assert data["property"]["status"] == "active"
        assert notifier.subjects_for(test_agent.email) == ["Your property listing is now live!"]

    @pytest.mark.asyncio
    async def test_rejection_requires_reason(self, client, pending_property, gy_owner_admin):
        response = await client.put(
            f"{API}/properties/{pending_property.id}/status",
            json={"status": "rejected"},
            headers=auth_headers(gy_owner_admin)
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_owner_cannot_self_approve(self, client, pending_property, test_agent):
        response = await client.put(
            f"{API}/properties/{pending_property.id}/status",
            json={"status": "active"},
            headers=auth_headers(test_agent)
        )
        assert response.status_code in (400, 403)

    @pytest.mark.asyncio
    async def test_update_and_delete(self, client, pending_property, test_agent, other_agent):
        forbidden = await client.put(
            f"{API}/properties/{pending_property.id}",
            json={"price": 1},
            headers=auth_headers(other_agent)
        )
        assert forbidden.status_code == 403

        updated = await client.put(
            f"{API}/properties/{pending_property.id}",
            json={"price": 40_000_000},
            headers=auth_headers(test_agent)
        )
        assert updated.status_code == 200
        assert updated.json()["price"] == 40_000_000

        deleted = await client.delete(f"{API}/properties/{pending_property.id}", headers=auth_headers(test_agent))
        assert deleted.status_code == 204

        gone = await client.get(f"{API}/properties/{pending_property.id}", headers=auth_headers(test_agent))
        assert gone.status_code == 404


class TestDraftsAPI:

    @pytest.mark.asyncio
    async def test_draft_lifecycle(self, client, test_agent):
        headers = auth_headers(test_agent)

        created = await client.post(f"{API}/properties/drafts", json={"title": "Beach cottage"}, headers=headers)
        assert created.status_code == 201
        draft_id = created.json()["id"]
        assert created.json()["status"] == "draft"

        listed = await client.get(f"{API}/properties/drafts", headers=headers)
        assert listed.status_code == 200
        assert listed.json()["total"] == 1
        assert listed.json()["drafts"][0]["title"] == "Beach cottage"

        updated = await client.put(f"{API}/properties/drafts/{draft_id}", json={
            "description": "Quiet cottage steps from the beach with a wide verandah.",
            "property_type": "house",
            "price": 30_000_000,
            "bedrooms": 2,
            "bathrooms": 1,
            "region": "Essequibo Islands-West Demerara",
            "city": "Parika"
        }, headers=headers)
        assert updated.status_code == 200

        published = await client.post(f"{API}/properties/drafts/{draft_id}/publish", headers=headers)
        assert published.status_code == 200
        assert published.json()["status"] == "pending"

        assert (await client.get(f"{API}/properties/drafts", headers=headers)).json()["total"] == 0

    @pytest.mark.asyncio
    async def test_drafts_in_mine_but_not_public(self, client, db_session, test_agent):
        draft = await PropertyFactory.create_draft(db_session, test_agent)

        mine = await client.get(f"{API}/properties/mine", headers=auth_headers(test_agent))
        assert [(prop["id"], prop["status"]) for prop in mine.json()] == [(str(draft.id), "draft")]

        public = await client.get(f"{API}/properties", params={"country": "GY"})
        assert public.json()["total"] == 0

    @pytest.mark.asyncio
    async def test_cleanup(self, client, db_session, test_agent):
        await PropertyFactory.create_draft(db_session, test_agent, expires_in_days=-1)

        response = await client.post(f"{API}/properties/drafts/cleanup", headers=auth_headers(test_agent))
        assert response.status_code == 200
        assert response.json()["deleted_count"] == 1

    @pytest.mark.asyncio
    async def test_drafts_require_auth(self, client):
        assert (await client.get(f"{API}/properties/drafts")).status_code == 401


class TestAdminAPI:

    @pytest.mark.asyncio
    async def test_moderation_queue(self, client, pending_property, gy_basic_admin, test_agent):
        denied = await client.get(f"{API}/admin/properties/pending", headers=auth_headers(test_agent))
        assert denied.status_code == 403

        response = await client.get(f"{API}/admin/properties/pending", headers=auth_headers(gy_basic_admin))
        assert response.status_code == 200
        data = response.json()
        assert data["country_filter"] == "GY"
        assert [prop["id"] for prop in data["properties"]] == [str(pending_property.id)]

    @pytest.mark.asyncio
    async def test_approve_and_reject_accounts(self, client, db_session, pending_owner, gy_owner_admin):
        headers = auth_headers(gy_owner_admin)

        listed = await client.get(
            f"{API}/admin/users", params={"approval_status": "pending"}, headers=headers
        )
        assert [user["email"] for user in listed.json()["users"]] == [pending_owner.email]

        no_reason = await client.post(f"{API}/admin/users/{pending_owner.id}/reject", json={}, headers=headers)
        assert no_reason.status_code == 422

        approved = await client.post(f"{API}/admin/users/{pending_owner.id}/approve", headers=headers)
        assert approved.status_code == 200
        assert approved.json()["approval_status"] == "approved"

    @pytest.mark.asyncio
    async def test_vetting_review(self, client, db_session, unverified_agent, gy_owner_admin):
        application = await VettingFactory.create(db_session, unverified_agent)
        headers = auth_headers(gy_owner_admin)

        queue = await client.get(f"{API}/admin/vetting", params={"status": "pending_review"}, headers=headers)
        assert queue.status_code == 200

        info = await client.post(
            f"{API}/admin/vetting/{application.id}/request-info",
            json={"notes": "Please upload your licence"},
            headers=headers
        )
        assert info.status_code == 200
        assert info.json()["application"]["status"] == "needs_more_info"

        mine = await client.get(f"{API}/vetting/me", headers=auth_headers(unverified_agent))
        assert mine.json()["status"] == "needs_more_info"

        resubmitted = await client.put(
            f"{API}/vetting/me", json={"license_number": "GY-2024-118"}, headers=auth_headers(unverified_agent)
        )
        assert resubmitted.status_code == 200
        assert resubmitted.json()["status"] == "pending_review"

        approved = await client.post(f"{API}/admin/vetting/{application.id}/approve", headers=headers)
        assert approved.status_code == 200
        assert approved.json()["message"] == "Agent application approved"


class TestPricingAndCountryAPI:

    @pytest.mark.asyncio
    async def test_public_pricing(self, client, db_session):
        await PlanFactory.create(db_session)
        await PlanFactory.create(db_session, plan_name="Agent Basic Monthly - Jamaica", country_id="JM")

        response = await client.get(f"{API}/pricing")
        assert response.status_code == 200
        data = response.json()
        assert data["country_id"] == "GY"
        assert [plan["plan_name"] for plan in data["plans"]] == ["Agent Basic Monthly"]

        jm = await client.get(f"{API}/pricing", params={"country": "JM"})
        assert jm.json()["country_info"]["currency"] == "JMD"

    @pytest.mark.asyncio
    async def test_admin_updates_plan(self, client, db_session, gy_owner_admin, gy_basic_admin):
        plan = await PlanFactory.create(db_session)

        denied = await client.put(
            f"{API}/admin/pricing/{plan.id}", json={"price": 2_000_000}, headers=auth_headers(gy_basic_admin)
        )
        assert denied.status_code == 403

        response = await client.put(
            f"{API}/admin/pricing/{plan.id}", json={"price": 2_000_000}, headers=auth_headers(gy_owner_admin)
        )
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_country_selection(self, client):
        default = await client.get(f"{API}/country")
        assert default.json()["country_code"] == "GY"

        selected = await client.post(f"{API}/country", json={"country_code": "jm"})
        assert selected.status_code == 200
        assert selected.json()["country_code"] == "JM"
        assert selected.cookies.get(settings.country_cookie_name) == "JM"

        after = await client.get(f"{API}/country", headers={"Cookie": f"{settings.country_cookie_name}=JM"})
        assert after.json()["country_code"] == "JM"

    @pytest.mark.asyncio
    async def test_unsupported_country(self, client):
        response = await client.post(f"{API}/country", json={"country_code": "TT"})
        assert response.status_code == 422


class TestPaymentsAPI:

    @pytest.mark.asyncio
    async def test_bank_transfer_requires_auth(self, client):
        response = await client.post(f"{API}/payments/bank-transfer", json={
            "amount_gyd": 15000, "plan_type": "Agent Monthly"
        })
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_bank_transfer_and_verification(self, client, notifier, test_agent, gy_owner_admin):
        created = await client.post(
            f"{API}/payments/bank-transfer",
            json={"amount_gyd": 15000, "plan_type": "Agent Monthly"},
            headers=auth_headers(test_agent)
        )
        assert created.status_code == 201
        code = created.json()["reference_code"]
        assert created.json()["amount_display"] == "G$15,000"

        status = await client.get(f"{API}/payments/bank-transfer/{code}", headers=auth_headers(test_agent))
        assert status.json()["status"] == "pending"

        verified = await client.post(
            f"{API}/admin/payments/{code}/verify",
            json={"notes": "Seen on statement"},
            headers=auth_headers(gy_owner_admin)
        )
        assert verified.status_code == 200
        assert verified.json()["message"] == f"Payment {code} verified"
        assert verified.json()["reference"]["status"] == "completed"
        assert "Payment Confirmation - Portal Home Hub" in notifier.subjects_for(test_agent.email)

        again = await client.post(f"{API}/admin/payments/{code}/verify", headers=auth_headers(gy_owner_admin))
        assert again.status_code == 400

    @pytest.mark.asyncio
    async def test_admin_rejects_transfer(self, client, test_agent, super_admin):
        created = await client.post(
            f"{API}/payments/bank-transfer",
            json={"amount_gyd": 15000, "plan_type": "Agent Monthly"},
            headers=auth_headers(test_agent)
        )
        code = created.json()["reference_code"]

        rejected = await client.post(f"{API}/admin/payments/{code}/reject", headers=auth_headers(super_admin))
        assert rejected.status_code == 200
        assert rejected.json()["message"] == f"Payment {code} rejected"

    @pytest.mark.asyncio
    async def test_payment_intent_and_history(self, client, gateway_requests, test_agent):
        response = await client.post(
            f"{API}/payments/payment-intent",
            json={"amount": 21000, "email": test_agent.email, "plan": "Agent Monthly"},
            headers=auth_headers(test_agent)
        )

        assert response.status_code == 200
        assert response.json() == {
            "client_secret": "pi_123_secret",
            "payment_intent_id": "pi_123",
            "amount_usd_cents": 10000
        }
        assert len(gateway_requests) == 1

        history = await client.get(f"{API}/payments/history", headers=auth_headers(test_agent))
        assert history.json()["total"] == 1
        assert history.json()["payments"][0]["payment_method"] == "card"

    @pytest.mark.asyncio
    async def test_payment_intent_missing_fields(self, client):
        response = await client.post(f"{API}/payments/payment-intent", json={"amount": 21000})
        assert response.status_code == 400


class TestNotificationsAPI:

    @pytest.mark.asyncio
    async def test_admin_sends_template(self, client, notifier, gy_owner_admin):
        response = await client.post(f"{API}/notifications/email", json={
            "to": "someone@example.com",
            "template": "property_approval",
            "context": {"property_title": "Seawall Townhouse"}
        }, headers=auth_headers(gy_owner_admin))

        assert response.status_code == 200
        assert response.json()["sent"] is True
        assert notifier.subjects_for("someone@example.com") == ["Your property listing is now live!"]

    @pytest.mark.asyncio
    async def test_null_context_value_does_not_fail(self, client, notifier, gy_owner_admin):
        response = await client.post(f"{API}/notifications/email", json={
            "to": "someone@example.com",
            "template": "agent_approval",
            "context": {"first_name": None}
        }, headers=auth_headers(gy_owner_admin))

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert notifier.recipients() == ["someone@example.com"]

    @pytest.mark.asyncio
    async def test_malformed_context_reports_not_sent(self, client, notifier, gy_owner_admin):
        response = await client.post(f"{API}/notifications/email", json={
            "to": "someone@example.com",
            "template": "payment_confirmation",
            "context": {"amount_gyd": "lots"}
        }, headers=auth_headers(gy_owner_admin))

        assert response.status_code == 200
        assert response.json()["sent"] is False
        assert notifier.sent == []

    @pytest.mark.asyncio
    async def test_unknown_template(self, client, gy_owner_admin):
        response = await client.post(f"{API}/notifications/email", json={
            "to": "someone@example.com",
            "template": "does_not_exist"
        }, headers=auth_headers(gy_owner_admin))
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_non_admin_denied(self, client, test_agent):
        response = await client.post(f"{API}/notifications/email", json={
            "to": "someone@example.com",
            "subject": "Hi",
            "html": "<p>Hi</p>"
        }, headers=auth_headers(test_agent))
        assert response.status_code == 403
