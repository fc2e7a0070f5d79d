import logging
from typing import Annotated, Literal, Optional, Union

import razorpay
from fastapi import Depends
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from buildup.config import Settings, get_settings
from buildup.errors import ProviderError

logger = logging.getLogger(__name__)


class ProviderOrder(BaseModel):
    """The subset of a Razorpay order we rely on."""

    model_config = ConfigDict(extra="ignore")

    id: str
    amount: int                     # paise
    currency: str
    receipt: Optional[str] = None
    status: Optional[str] = None
    attempts: Optional[int] = None
    created_at: Optional[int] = None


class PaymentEntity(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    order_id: Optional[str] = None
    status: Optional[str] = None
    amount: Optional[int] = None
    error_code: Optional[str] = None
    error_description: Optional[str] = None


class _PaymentWrapper(BaseModel):
    entity: PaymentEntity


class _PaymentPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    payment: _PaymentWrapper


class _PaymentEvent(BaseModel):
    payload: _PaymentPayload

    @property
    def payment(self) -> PaymentEntity:
        return self.payload.payment.entity


class PaymentCaptured(_PaymentEvent):
    event: Literal["payment.captured", "order.paid"]


class PaymentFailed(_PaymentEvent):
    event: Literal["payment.failed"]


WebhookEvent = Annotated[Union[PaymentCaptured, PaymentFailed], Field(discriminator="event")]
HANDLED_EVENTS = {"payment.captured", "order.paid", "payment.failed"}

_webhook_adapter = TypeAdapter(WebhookEvent)


def parse_webhook_event(data: dict) -> Optional[WebhookEvent]:
    """Return the typed event, or None for events this service does not act on.

    Raises pydantic's ValidationError when a handled event is malformed.
    """
    if not isinstance(data, dict) or data.get("event") not in HANDLED_EVENTS:
        return None
    return _webhook_adapter.validate_python(data)


class RazorpayProvider:
    """Thin wrapper around the Razorpay SDK order API."""

    def __init__(self, settings: Settings):
        self.key_id = settings.key_id
        self.timeout = settings.provider_timeout
        self.client = razorpay.Client(auth=(settings.key_id, settings.key_secret))

    def create_order(self, amount_paise: int, currency: str, receipt: str) -> ProviderOrder:
        # Never retried: a second call could open a duplicate order on Razorpay.
        try:
            raw = self.client.order.create(
                data={"amount": amount_paise, "currency": currency, "receipt": receipt},
                timeout=self.timeout,
            )
        except Exception as exc:
            logger.exception("Razorpay order creation failed for receipt %s", receipt)
            raise ProviderError() from exc

        try:
            return ProviderOrder.model_validate(raw)
        except ValidationError as exc:
            logger.error("Unexpected Razorpay order payload for receipt %s: %s", receipt, exc)
            raise ProviderError() from exc


def get_provider(settings: Settings = Depends(get_settings)) -> RazorpayProvider:
    return RazorpayProvider(settings)
