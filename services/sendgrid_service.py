"""SendGrid email delivery client"""
import httpx
import logging
from typing import Optional

from config.settings import Settings, settings as default_settings
from services.errors import EmailDeliveryError, response_payload

PROVIDER = "sendgrid"


class SendGridService:
    """SendGrid邮件发送服务封装"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        config: Optional[Settings] = None
    ):
        config = config or default_settings
        self.api_key = api_key if api_key is not None else config.sendgrid_api_key
        self.api_url = api_url or config.sendgrid_api_url
        self.logger = logging.getLogger(__name__)
        self.client = httpx.AsyncClient(
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.api_key}",
            },
            timeout=None
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def close(self):
        await self.client.aclose()

    async def send(self, to: str, from_email: str, subject: str, html: str) -> None:
        """
        发送一封HTML邮件

        Raises:
            EmailDeliveryError: not configured, transport failure or rejected by SendGrid
        """
        if not self.is_configured:
            raise EmailDeliveryError("SENDGRID_API_KEY is not configured", provider=PROVIDER)

        payload = {
            "personalizations": [{"to": [{"email": to}]}],
            "from": {"email": from_email},
            "subject": subject,
            "content": [{"type": "text/html", "value": html}],
        }

        self.logger.info(f"Sending email | to={to} | subject={str(subject)[:50]}")

        try:
            response = await self.client.post(self.api_url, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            body = response_payload(e.response)
            self.logger.error(f"SendGrid error: {e.response.status_code} {body}")
            raise EmailDeliveryError(
                f"SendGrid rejected the message: HTTP {e.response.status_code}",
                provider=PROVIDER,
                status_code=e.response.status_code,
                provider_response=body
            ) from e
        except httpx.HTTPError as e:
            self.logger.error(f"SendGrid error: {e}")
            raise EmailDeliveryError(f"SendGrid request failed: {e}", provider=PROVIDER) from e
