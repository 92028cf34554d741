"""
Tests for the email notification service and templates.
"""

import json
import pytest

import httpx

from app.config import settings
from app.services.email_templates import TEMPLATES, render_template
from app.services.notification import NotificationService


def _service(handler, api_key: str = "re_test") -> NotificationService:
    return NotificationService(
        api_url="https://email.test/",
        api_key=api_key,
        from_address="Portal Home Hub <info@portalhomehub.com>",
        transport=httpx.MockTransport(handler),
    )


class TestNotificationService:

    @pytest.mark.asyncio
    async def test_successful_send(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json={"id": "email_1"})

        sent = await _service(handler).send_email("agent@example.com", "Hello", "<p>Hi</p>")

        assert sent is True
        request = requests[0]
        assert request.url == "https://email.test/emails"
        assert request.headers["Authorization"] == "Bearer re_test"
        assert json.loads(request.content) == {
            "from": "Portal Home Hub <info@portalhomehub.com>",
            "to": ["agent@example.com"],
            "subject": "Hello",
            "html": "<p>Hi</p>",
        }

    @pytest.mark.asyncio
    async def test_provider_error_returns_false(self):
        service = _service(lambda request: httpx.Response(500, text="boom"))
        assert await service.send_email("agent@example.com", "Hello", "<p>Hi</p>") is False

    @pytest.mark.asyncio
    async def test_network_error_returns_false(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        assert await _service(handler).send_email("agent@example.com", "Hello", "<p>Hi</p>") is False

    @pytest.mark.asyncio
    async def test_missing_api_key_skips_send(self):
        requests = []
        service = _service(lambda request: requests.append(request) or httpx.Response(200), api_key="")

        assert service.enabled is False
        assert await service.send_email("agent@example.com", "Hello", "<p>Hi</p>") is False
        assert requests == []

    @pytest.mark.asyncio
    async def test_unknown_template_is_not_sent(self, notifier):
        assert await notifier.send_template("agent@example.com", "no_such_template") is False
        assert notifier.sent == []

    @pytest.mark.asyncio
    async def test_missing_template_context_is_not_sent(self, notifier):
        assert await notifier.send_template("agent@example.com", "agent_approval") is False

    @pytest.mark.asyncio
    async def test_null_and_numeric_context_values_render(self, notifier):
        assert await notifier.send_template("agent@example.com", "agent_approval", first_name=None) is True
        assert await notifier.send_template("owner@example.com", "property_approval", property_title=123) is True

        _, _, html = notifier.sent[1]
        assert '"123"' in html

    @pytest.mark.asyncio
    async def test_malformed_context_is_not_sent(self, notifier):
        sent = await notifier.send_template("agent@example.com", "payment_confirmation", amount_gyd="lots")

        assert sent is False
        assert notifier.sent == []

    @pytest.mark.asyncio
    async def test_send_to_many_deduplicates(self, notifier):
        sent = await notifier.send_to_many(
            ["a@example.com", "b@example.com", "a@example.com"], "welcome", first_name="Sam"
        )
        assert sent == 2
        assert notifier.recipients() == ["a@example.com", "b@example.com"]

    @pytest.mark.asyncio
    async def test_notify_admins_includes_admin_inbox(self, notifier):
        sent = await notifier.notify_admins(
            "agent_admin_notification", ["gy-admin@example.com"],
            agent_name="Ravi Singh", agent_email="ravi@example.com"
        )
        assert sent == 2
        assert notifier.recipients() == [settings.admin_notification_email, "gy-admin@example.com"]


class TestEmailTemplates:

    def test_every_template_is_registered(self):
        assert set(TEMPLATES) == {
            "agent_application_received",
            "agent_admin_notification",
            "agent_approval",
            "agent_rejection",
            "agent_resubmission_notification",
            "owner_approval",
            "owner_rejection",
            "property_approval",
            "property_rejection",
            "welcome",
            "payment_confirmation",
        }

    def test_rejection_includes_reason(self):
        content = render_template("property_rejection", {
            "property_title": "Seawall Townhouse",
            "reason": "Photos <missing>",
        })
        assert "Seawall Townhouse" in content.html
        assert "Photos &lt;missing&gt;" in content.html

    def test_payment_confirmation_formats_amount(self):
        content = render_template("payment_confirmation", {
            "amount_gyd": 15000,
            "reference_code": "PHH-240115-A1B2C3",
            "plan_type": "Agent Monthly",
        })
        assert content.subject == "Payment Confirmation - Portal Home Hub"
        assert "G$15,000" in content.html
        assert "PHH-240115-A1B2C3" in content.html

    def test_none_renders_as_empty_text(self):
        content = render_template("agent_approval", {"first_name": None})
        assert "<p>Hi ,</p>" in content.html
        assert "None" not in content.html

    def test_user_content_is_escaped(self):
        content = render_template("welcome", {"first_name": "<script>alert(1)</script>"})
        assert "<script>" not in content.html
