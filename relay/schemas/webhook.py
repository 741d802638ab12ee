# relay/schemas/webhook.py
from typing import Any, Optional

from pydantic import BaseModel

CHARGE_COMPLETED = "charge.completed"
STATUS_SUCCESSFUL = "successful"


class FlutterwaveCustomer(BaseModel):
    id: Optional[Any] = None
    email: Optional[str] = None

    model_config = {"extra": "allow"}


class FlutterwaveChargeData(BaseModel):
    id: Optional[Any] = None
    tx_ref: Optional[str] = None
    status: Optional[str] = None
    customer: Optional[FlutterwaveCustomer] = None

    model_config = {"extra": "allow"}


class FlutterwaveEvent(BaseModel):
    """Webhook body posted by Flutterwave; only the fields we act on are typed."""

    event: Optional[str] = None
    data: Optional[FlutterwaveChargeData] = None

    model_config = {"extra": "allow"}

    @property
    def is_successful_charge(self) -> bool:
        return (
            self.event == CHARGE_COMPLETED
            and self.data is not None
            and self.data.status == STATUS_SUCCESSFUL
        )
