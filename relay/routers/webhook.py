# relay/routers/webhook.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request, Response, status

from relay.core.dependencies import get_webhook_service
from relay.services.webhook import WebhookService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/webhook",
    tags=["Webhooks"],
)


@router.post("/flutterwave", status_code=200)
async def flutterwave_webhook(
    request: Request,
    verif_hash: Optional[str] = Header(None),
    service: WebhookService = Depends(get_webhook_service),
):
    """
    Receive a Flutterwave payment notification.

    The ``verif-hash`` header must match the configured secret hash, otherwise
    the call is rejected with an empty 401. Verified deliveries are always
    answered with an empty 200, whether or not they changed anything.
    """
    if not service.verify_signature(verif_hash):
        logger.warning(
            f"Rejected webhook from {request.client.host if request.client else '?'}: "
            "bad or missing verif-hash"
        )
        return Response(status_code=status.HTTP_401_UNAUTHORIZED)

    try:
        payload = await request.json()
    except ValueError:
        logger.warning("Ignoring webhook with a non-JSON body")
        return Response(status_code=status.HTTP_200_OK)

    await service.handle_event(payload)
    return Response(status_code=status.HTTP_200_OK)
