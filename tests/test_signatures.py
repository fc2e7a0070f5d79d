import hashlib
import hmac

import pytest

from buildup.signatures import sign_payment, verify_payment_signature, verify_webhook_signature

SECRET = "s3cr3t"
ORDER_ID = "order_Nx1Lq7yQk2a9Zt"
PAYMENT_ID = "pay_Nx1MAbCdEf1234"


def _flip_last(value: str) -> str:
    return value[:-1] + ("0" if value[-1] != "0" else "1")


def test_signature_matches_razorpay_scheme():
    expected = hmac.new(
        SECRET.encode(), f"{ORDER_ID}|{PAYMENT_ID}".encode(), hashlib.sha256
    ).hexdigest()
    assert sign_payment(ORDER_ID, PAYMENT_ID, SECRET) == expected


def test_valid_signature_is_accepted():
    signature = sign_payment(ORDER_ID, PAYMENT_ID, SECRET)
    assert verify_payment_signature(ORDER_ID, PAYMENT_ID, signature, SECRET) is True


@pytest.mark.parametrize("target", ["order", "payment", "signature"])
def test_any_mutation_is_rejected(target):
    signature = sign_payment(ORDER_ID, PAYMENT_ID, SECRET)
    order_id, payment_id = ORDER_ID, PAYMENT_ID
    if target == "order":
        order_id = _flip_last(order_id)
    elif target == "payment":
        payment_id = _flip_last(payment_id)
    else:
        signature = _flip_last(signature)

    assert verify_payment_signature(order_id, payment_id, signature, SECRET) is False


def test_wrong_secret_is_rejected():
    signature = sign_payment(ORDER_ID, PAYMENT_ID, "other-secret")
    assert verify_payment_signature(ORDER_ID, PAYMENT_ID, signature, SECRET) is False


@pytest.mark.parametrize("signature", ["", None, "é" * 64, 12345])
def test_malformed_signatures_are_rejected(signature):
    assert verify_payment_signature(ORDER_ID, PAYMENT_ID, signature, SECRET) is False


def test_webhook_signature():
    body = b'{"event":"payment.captured"}'
    signature = hmac.new(SECRET.encode(), body, hashlib.sha256).hexdigest()

    assert verify_webhook_signature(body, signature, SECRET) is True
    assert verify_webhook_signature(body + b" ", signature, SECRET) is False
    assert verify_webhook_signature(body, None, SECRET) is False
    assert verify_webhook_signature(body, signature, None) is False
