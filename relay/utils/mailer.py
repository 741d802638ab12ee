# relay/utils/mailer.py
import logging
from typing import List, Optional, Union

import httpx

logger = logging.getLogger(__name__)


class ResendMailer:
    """Sends transactional email through the Resend HTTP API.

    Sending is best effort: failures are logged and reported as ``False``.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        from_address: str,
        admin_email: Optional[str] = None,
        api_url: str = "https://api.resend.com/emails",
    ):
        self.http_client = http_client
        self.api_key = api_key
        self.from_address = from_address
        self.admin_email = admin_email
        self.api_url = api_url

    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def send(self, to: Union[str, List[str]], subject: str, html: str) -> bool:
        if not self.is_configured():
            logger.warning(f"Email not sent, no API key configured: {subject}")
            return False
        if not to:
            logger.warning(f"Email not sent, no recipient: {subject}")
            return False

        try:
            response = await self.http_client.post(
                self.api_url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={
                    "from": self.from_address,
                    "to": to if isinstance(to, list) else [to],
                    "subject": subject,
                    "html": html,
                },
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Failed to send email '{subject}' to {to}: {e}")
            return False

        logger.info(f"Email '{subject}' sent to {to}")
        return True

    async def notify_admin(self, subject: str, html: str) -> bool:
        return await self.send(self.admin_email, subject, html)
