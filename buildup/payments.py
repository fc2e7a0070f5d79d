"""Order creation and payment confirmation."""
import logging
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError

from buildup.errors import AlreadyFinalized, DatabaseError, InvalidSignature, OrderNotFound
from buildup.models import Order, OrderStatus
from buildup.pricing import CURRENCY, price_for, to_paise
from buildup.razorpay_service import PaymentCaptured, PaymentFailed
from buildup.signatures import verify_payment_signature

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def new_receipt() -> str:
    return f"rcpt_{uuid4().hex}"


def create_order(db, provider, plan, name, email, phone=None):
    """Open a Razorpay order for ``plan`` and record it as pending.

    The amount always comes from the pricing table. Nothing is written when
    the provider call fails.
    """
    plan, amount = price_for(plan)
    receipt = new_receipt()

    provider_order = provider.create_order(to_paise(amount), CURRENCY, receipt)

    order = Order(
        name=name,
        email=normalize_email(email),
        phone=phone,
        plan=plan.value,
        amount=amount,
        currency=CURRENCY,
        receipt=receipt,
        provider_order_id=provider_order.id,
        status=OrderStatus.PENDING.value,
    )
    try:
        db.add(order)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Could not store order %s", provider_order.id)
        raise DatabaseError() from exc

    db.refresh(order)
    logger.info("Created order %s (%s, %s %s)", order.provider_order_id, order.plan, amount, CURRENCY)
    return order, provider_order


def _finalize(db, order_id, status, **values):
    """Move a pending order to a terminal status. Returns False if it was not pending."""
    updated = (
        db.query(Order)
        .filter(Order.id == order_id, Order.status == OrderStatus.PENDING.value)
        .update({"status": status.value, **values}, synchronize_session=False)
    )
    db.commit()
    return updated == 1


def confirm_payment(db, provider_order_id, provider_payment_id, signature, secret):
    order = db.query(Order).filter_by(provider_order_id=provider_order_id).first()
    if order is None:
        raise OrderNotFound()

    valid = verify_payment_signature(provider_order_id, provider_payment_id, signature, secret)

    if order.status != OrderStatus.PENDING.value:
        # the webhook may have settled this payment before the browser posted it
        if (
            valid
            and order.status == OrderStatus.SUCCESS.value
            and order.provider_payment_id == provider_payment_id
        ):
            logger.info("Payment %s already confirmed for order %s", provider_payment_id, provider_order_id)
            return order
        logger.warning("Rejected confirmation for %s order %s", order.status, provider_order_id)
        raise AlreadyFinalized()

    if not valid:
        if not _finalize(db, order.id, OrderStatus.FAILED):
            raise AlreadyFinalized()
        logger.warning("Invalid signature for order %s, marked failed", provider_order_id)
        raise InvalidSignature()

    if not _finalize(db, order.id, OrderStatus.SUCCESS, provider_payment_id=provider_payment_id):
        raise AlreadyFinalized()

    db.refresh(order)
    logger.info("Payment %s confirmed for order %s", provider_payment_id, provider_order_id)
    return order


def apply_webhook_event(db, event):
    """Apply a verified Razorpay webhook. Returns True when an order changed state."""
    payment = event.payment
    if not payment.order_id:
        return False

    order = db.query(Order).filter_by(provider_order_id=payment.order_id).first()
    if order is None:
        logger.warning("Webhook %s for unknown order %s", event.event, payment.order_id)
        return False

    if isinstance(event, PaymentFailed):
        # a failed attempt does not close the order, the customer may retry on it
        logger.info(
            "Payment attempt %s failed for order %s: %s",
            payment.id, payment.order_id, payment.error_code or "unknown error",
        )
        return False
    if not isinstance(event, PaymentCaptured):
        return False

    changed = _finalize(db, order.id, OrderStatus.SUCCESS, provider_payment_id=payment.id)

    if changed:
        logger.info("Webhook %s moved order %s out of pending", event.event, payment.order_id)
    else:
        logger.info("Webhook %s ignored, order %s already %s", event.event, payment.order_id, order.status)
    return changed
