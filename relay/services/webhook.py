# relay/services/webhook.py
import hmac
import logging
from typing import Any, Optional

from pydantic import ValidationError

from relay.schemas.webhook import FlutterwaveEvent
from relay.services.store import FirestoreStore
from relay.utils.tx_ref import parse_tx_ref

logger = logging.getLogger(__name__)


class WebhookService:
    """
    Applies Flutterwave payment callbacks.

    Only a signed ``charge.completed`` event with a ``successful`` status has an
    effect: the payer's email is unioned into the course's student set. Every
    other delivery is acknowledged and ignored so the gateway does not retry it.
    """

    def __init__(self, store: FirestoreStore, secret_hash: str):
        self.store = store
        self.secret_hash = secret_hash

    def verify_signature(self, signature: Optional[str]) -> bool:
        # An unset secret rejects everything.
        if not self.secret_hash or not signature:
            return False
        return hmac.compare_digest(
            signature.encode("utf-8"), self.secret_hash.encode("utf-8")
        )

    async def handle_event(self, payload: Any) -> bool:
        """Process a verified event. Returns True when access was granted."""
        try:
            event = FlutterwaveEvent.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"Ignoring malformed webhook payload: {e}")
            return False

        if not event.is_successful_charge:
            logger.debug(f"Ignoring webhook event {event.event!r}")
            return False

        data = event.data
        tx_ref = parse_tx_ref(data.tx_ref)
        if tx_ref is None:
            logger.warning(
                f"Ignoring charge {data.id}: unparseable tx_ref {data.tx_ref!r}"
            )
            return False

        email = data.customer.email if data.customer else None
        if not email:
            logger.warning(f"Ignoring charge {data.tx_ref}: no customer email")
            return False

        # Failures are logged, never surfaced; the delivery is still acknowledged.
        try:
            await self.store.add_course_student(tx_ref.course_id, email)
        except Exception:
            logger.exception(
                f"Webhook store error: could not grant {email} access to "
                f"{tx_ref.course_id} (tx_ref={data.tx_ref})"
            )
            return False

        logger.info(f"✓ Access granted: {email} to {tx_ref.course_id}")
        return True
