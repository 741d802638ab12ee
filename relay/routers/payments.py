# relay/routers/payments.py

from fastapi import APIRouter, Depends, Request

from relay.core.config import settings
from relay.core.dependencies import get_payment_service
from relay.core.limiter import limiter
from relay.schemas.payment import PaymentInitializeRequest, PaymentInitializeResponse
from relay.services.payment import PaymentService

router = APIRouter(
    prefix="/api/payments",
    tags=["Payments"],
)


@router.post("/initialize", response_model=PaymentInitializeResponse)
@limiter.limit(settings.rate_limit)
async def initialize_payment(
    request: Request,
    payment_in: PaymentInitializeRequest,
    service: PaymentService = Depends(get_payment_service),
):
    """
    Create a Flutterwave checkout for a course.

    Returns the hosted payment link; gateway failures surface as a 500 with the
    gateway's error payload.
    """
    link = await service.initialize(payment_in)
    return {"success": True, "link": link}
