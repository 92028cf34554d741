"""
Notification service for transactional email.
Sends through a Resend-compatible HTTP API; delivery is best-effort and never raises.
"""

from typing import Any, Dict, Iterable, Optional
import httpx
import logging

from app.config import settings
from app.services.email_templates import EmailContent, render_template

logger = logging.getLogger(__name__)


class NotificationService:
    """
    Email sender.

    Every public method returns True when the provider accepted the message
    and False otherwise (unconfigured, HTTP error, network error).
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        from_address: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None
    ):
        self.api_url = (api_url or settings.email_api_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.email_api_key
        self.from_address = from_address or settings.email_from
        self.transport = transport
        self.timeout = timeout or settings.email_timeout_seconds

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def send_email(
        self,
        to: str,
        subject: str,
        html: str,
        text: Optional[str] = None
    ) -> bool:
        """
        Send a single email.

        Args:
            to: Recipient address
            subject: Subject line
            html: HTML body
            text: Optional plain-text body

        Returns:
            True on a 2xx provider response, False otherwise
        """
        if not self.enabled:
            logger.warning(f"Email not sent (no API key configured): to={to} subject={subject}")
            return False

        payload: Dict[str, Any] = {
            "from": self.from_address,
            "to": [to],
            "subject": subject,
            "html": html,
        }
        if text:
            payload["text"] = text

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    f"{self.api_url}/emails",
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
        except Exception as e:
            logger.warning(f"Email delivery failed: to={to} error={type(e).__name__}: {e}")
            return False

        if 200 <= response.status_code < 300:
            logger.info(f"Email sent: to={to} subject={subject}")
            return True

        logger.warning(f"Email provider rejected message: to={to} status={response.status_code} body={response.text[:500]}")
        return False

    async def send_content(self, to: str, content: EmailContent) -> bool:
        return await self.send_email(to, content.subject, content.html)

    async def send_template(self, to: str, template: str, **context: Any) -> bool:
        """
        Render a named template and send it.

        Unknown templates, missing or malformed context values are logged and reported as not sent.
        """
        try:
            content = render_template(template, context)
        except Exception as e:
            logger.warning(f"Email template '{template}' could not be rendered: {type(e).__name__}: {e}")
            return False
        return await self.send_content(to, content)

    async def send_to_many(self, recipients: Iterable[str], template: str, **context: Any) -> int:
        """Send one template to several recipients; returns how many were accepted."""
        sent = 0
        for recipient in dict.fromkeys(recipients):
            if await self.send_template(recipient, template, **context):
                sent += 1
        return sent

    async def notify_admins(self, template: str, admin_emails: Iterable[str] = (), **context: Any) -> int:
        """Send to the admin inbox plus any given admin addresses."""
        recipients = [settings.admin_notification_email, *admin_emails]
        return await self.send_to_many(recipients, template, **context)
