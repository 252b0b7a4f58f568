"""
Payment provider client

Creates payment intents and refunds through the provider's REST API. When
DEBUG is on or no API key is configured the provider is emulated, so local
development and tests never leave the process.
"""

import hashlib
import hmac
import logging
import uuid
from datetime import datetime
from decimal import Decimal

import requests
from django.conf import settings

logger = logging.getLogger(__name__)


class PaymentGatewayError(Exception):
    """Raised when the payment provider rejects a request or is unreachable."""

    pass


def _api_key() -> str:
    return getattr(settings, "PAYMENT_PROVIDER_API_KEY", "")


def _base_url() -> str:
    return getattr(settings, "PAYMENT_PROVIDER_API_BASE_URL", "https://api.stripe.com/v1/")


def _is_emulated() -> bool:
    return settings.DEBUG or not _api_key()


def _to_minor_units(amount) -> int:
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1")))


def _post(path: str, data: dict) -> dict:
    headers = {
        "Authorization": f"Bearer {_api_key()}",
        "Accept": "application/json",
    }
    try:
        response = requests.post(f"{_base_url()}{path}", data=data, headers=headers, timeout=30)
        response.raise_for_status()
        return response.json()
    except requests.exceptions.RequestException as e:
        logger.error(f"Payment provider request {path} failed: {e}")
        raise PaymentGatewayError(f"Payment provider connection error: {e}")
    except ValueError as e:
        logger.error(f"Payment provider returned invalid JSON for {path}: {e}")
        raise PaymentGatewayError(f"Invalid payment provider response: {e}")


def create_payment_intent(amount, currency: str = None, metadata: dict = None) -> dict:
    """
    Create a payment intent for the given amount

    Returns:
        dict with ``payment_intent_id``, ``client_secret``, ``amount`` and
        ``currency``
    """
    currency = (currency or getattr(settings, "PAYMENT_CURRENCY", "usd")).lower()
    metadata = metadata or {}
    logger.info(f"Creating payment intent for {amount} {currency}")

    if _is_emulated():
        logger.warning("Payment provider is emulated (DEBUG mode or missing API key)")
        intent_id = f"pi_{uuid.uuid4().hex[:24]}"
        return {
            "payment_intent_id": intent_id,
            "client_secret": f"{intent_id}_secret_{uuid.uuid4().hex[:12]}",
            "amount": str(amount),
            "currency": currency,
            "status": "requires_payment_method",
            "created_at": datetime.now().isoformat(),
        }

    data = {
        "amount": _to_minor_units(amount),
        "currency": currency,
        "automatic_payment_methods[enabled]": "true",
    }
    for key, value in metadata.items():
        data[f"metadata[{key}]"] = str(value)

    result = _post("payment_intents", data)
    if not result.get("id"):
        raise PaymentGatewayError(f"Payment provider error: {result.get('error', {}).get('message', 'unknown')}")

    logger.info(f"Payment intent created: {result['id']}")
    return {
        "payment_intent_id": result["id"],
        "client_secret": result.get("client_secret", ""),
        "amount": str(amount),
        "currency": currency,
        "status": result.get("status", ""),
    }


def refund_payment(payment_intent_id: str, amount) -> dict:
    """Refund ``amount`` of a captured payment intent."""
    logger.info(f"Refunding {amount} of payment {payment_intent_id}")

    if _is_emulated():
        logger.warning("Payment provider is emulated (DEBUG mode or missing API key)")
        return {
            "refund_id": f"re_{uuid.uuid4().hex[:24]}",
            "payment_intent_id": payment_intent_id,
            "amount": str(amount),
            "status": "succeeded",
        }

    result = _post("refunds", {"payment_intent": payment_intent_id, "amount": _to_minor_units(amount)})
    if result.get("status") not in ("succeeded", "pending"):
        raise PaymentGatewayError(f"Refund was not accepted: {result.get('status')}")

    return {
        "refund_id": result.get("id"),
        "payment_intent_id": payment_intent_id,
        "amount": str(amount),
        "status": result.get("status"),
    }


def sign_payload(body: bytes, secret: str = None) -> str:
    secret = secret if secret is not None else getattr(settings, "PAYMENT_WEBHOOK_SECRET", "")
    return hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()


def verify_webhook_signature(body: bytes, signature: str) -> bool:
    """
    Check the HMAC-SHA256 signature of a webhook body

    Without a configured secret every webhook is accepted.
    """
    secret = getattr(settings, "PAYMENT_WEBHOOK_SECRET", "")
    if not secret:
        return True
    if not signature:
        return False
    return hmac.compare_digest(sign_payload(body, secret), signature)
