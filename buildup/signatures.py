"""Razorpay signature checks.

Checkout signatures are ``HMAC-SHA256(key_secret, order_id + "|" + payment_id)``
and webhook signatures are ``HMAC-SHA256(webhook_secret, raw_body)``, both as
lowercase hex digests.
"""
import hashlib
import hmac


def _digest(secret: str, message: bytes) -> str:
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def sign_payment(provider_order_id: str, provider_payment_id: str, secret: str) -> str:
    return _digest(secret, f"{provider_order_id}|{provider_payment_id}".encode())


def verify_payment_signature(provider_order_id, provider_payment_id, signature, secret) -> bool:
    values = (provider_order_id, provider_payment_id, signature, secret)
    if not all(isinstance(v, str) and v for v in values):
        return False
    expected = sign_payment(provider_order_id, provider_payment_id, secret)
    return hmac.compare_digest(expected.encode(), signature.encode())


def verify_webhook_signature(body: bytes, signature, secret) -> bool:
    if not secret or not isinstance(signature, str) or not signature:
        return False
    return hmac.compare_digest(_digest(secret, body).encode(), signature.encode())
