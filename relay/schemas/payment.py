# relay/schemas/payment.py
from pydantic import BaseModel, Field

# ==================== Payment Schemas ====================


class PaymentInitializeRequest(BaseModel):
    """Fields the client sends to start a hosted-checkout payment"""

    course_id: str = Field(..., alias="courseId", min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=320, description="Payer email")
    name: str = Field(..., min_length=1, max_length=200, description="Payer name")
    amount: float = Field(..., gt=0, description="Charge amount")

    model_config = {"populate_by_name": True}


class PaymentInitializeResponse(BaseModel):
    success: bool = True
    link: str = Field(..., description="Gateway checkout link")
