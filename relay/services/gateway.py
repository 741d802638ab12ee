# relay/services/gateway.py
import logging

import httpx

from relay.core.exceptions import GatewayError

logger = logging.getLogger(__name__)


class FlutterwaveGateway:
    """Minimal client for the Flutterwave v3 Standard checkout API."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        secret_key: str,
        base_url: str = "https://api.flutterwave.com/v3",
    ):
        self.http_client = http_client
        self.secret_key = secret_key
        self.base_url = base_url.rstrip("/")

    async def create_payment(self, payload: dict) -> str:
        """
        Create a hosted payment and return the checkout link.

        Raises:
            GatewayError: carrying the gateway's error body when it has one
        """
        try:
            response = await self.http_client.post(
                f"{self.base_url}/payments",
                json=payload,
                headers={
                    "Authorization": f"Bearer {self.secret_key}",
                    "Content-Type": "application/json",
                },
            )
        except httpx.RequestError as e:
            logger.error(f"Flutterwave request failed: {e}")
            raise GatewayError(f"Could not reach payment gateway: {e}")

        try:
            body = response.json()
        except ValueError:
            body = response.text

        if response.is_error:
            logger.error(
                f"Flutterwave rejected payment {payload.get('tx_ref')}: "
                f"{response.status_code} {body}"
            )
            raise GatewayError("Payment gateway returned an error", payload=body)

        link = (body.get("data") or {}).get("link") if isinstance(body, dict) else None
        if not link:
            raise GatewayError("Payment gateway response has no link", payload=body)

        return link
