# relay/services/payment.py
import logging
from urllib.parse import urlencode

from fastapi import HTTPException, status

from relay.core.config import Settings
from relay.schemas.payment import PaymentInitializeRequest
from relay.services.gateway import FlutterwaveGateway
from relay.utils.tx_ref import SEPARATOR, build_tx_ref

logger = logging.getLogger(__name__)


class PaymentService:
    def __init__(self, gateway: FlutterwaveGateway, settings: Settings):
        self.gateway = gateway
        self.settings = settings

    def build_payment_request(
        self, payment_in: PaymentInitializeRequest, tx_ref: str
    ) -> dict:
        query = urlencode({"status": "success", "course": payment_in.course_id})
        redirect_url = (
            f"{self.settings.client_origin}{self.settings.payment_redirect_path}?{query}"
        )
        customizations = {
            "title": self.settings.payment_title,
            "description": self.settings.payment_description,
        }
        if self.settings.payment_logo_url:
            customizations["logo"] = self.settings.payment_logo_url

        return {
            "tx_ref": tx_ref,
            "amount": payment_in.amount,
            "currency": self.settings.payment_currency,
            "redirect_url": redirect_url,
            "customer": {"email": payment_in.email, "name": payment_in.name},
            "configurations": {
                "session_duration": self.settings.payment_session_duration,
                "max_retry_attempt": self.settings.payment_max_retry_attempt,
            },
            "customizations": customizations,
        }

    async def initialize(self, payment_in: PaymentInitializeRequest) -> str:
        """
        Start a hosted checkout for a course and return the gateway link.
        - The course id is embedded in tx_ref, so it cannot contain the separator
        """
        if SEPARATOR in payment_in.course_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"courseId must not contain '{SEPARATOR}'",
            )

        tx_ref = build_tx_ref(self.settings.tx_ref_prefix, payment_in.course_id)
        link = await self.gateway.create_payment(
            self.build_payment_request(payment_in, tx_ref)
        )
        logger.info(f"Payment {tx_ref} initialized for {payment_in.email}")
        return link
