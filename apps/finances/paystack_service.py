"""
Paystack payment gateway integration.

Only the two calls the checkout flow needs: verifying a transaction by
reference and authenticating webhook deliveries.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from typing import Any

import requests
from django.conf import settings  # type: ignore

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.paystack.co"


class PaystackError(Exception):
    """Raised when the gateway cannot be reached or answers with an error."""


def _secret_key() -> str:
    return getattr(settings, "PAYSTACK_SECRET_KEY", "")


def verify_transaction(reference: str) -> dict[str, Any]:
    """
    Ask Paystack for the state of a transaction.

    Args:
        reference: booking reference used when the payment was initialised

    Returns:
        dict: the parsed gateway response ({"status": bool, "data": {...}})
    """
    secret = _secret_key()
    if not secret:
        raise PaystackError("PAYSTACK_SECRET_KEY is not configured")

    base_url = getattr(settings, "PAYSTACK_BASE_URL", DEFAULT_BASE_URL).rstrip("/")
    timeout = getattr(settings, "PAYSTACK_TIMEOUT", 30)
    logger.info(f"Verifying Paystack transaction {reference}")

    try:
        response = requests.get(
            f"{base_url}/transaction/verify/{reference}",
            headers={
                "Authorization": f"Bearer {secret}",
                "Accept": "application/json",
            },
            timeout=timeout,
        )
        response.raise_for_status()
        result = response.json()
    except requests.exceptions.RequestException as e:
        logger.error(f"Paystack verification request for {reference} failed: {e}")
        raise PaystackError(f"Paystack request failed: {e}") from e
    except ValueError as e:
        logger.error(f"Paystack returned a non-JSON body for {reference}")
        raise PaystackError("Paystack returned an unreadable response") from e

    if not isinstance(result, dict):
        raise PaystackError("Paystack returned an unexpected response")

    data = result.get("data") or {}
    logger.info(f"Paystack status for {reference}: {data.get('status')}")
    return result


def is_successful(result: dict[str, Any]) -> bool:
    data = result.get("data") or {}
    return bool(result.get("status")) and data.get("status") == "success"


def verify_webhook_signature(body: bytes, signature: str | None) -> bool:
    """HMAC-SHA512 of the raw request body, keyed with the secret key."""
    secret = _secret_key()
    if not secret or not signature:
        return False
    expected = hmac.new(secret.encode("utf-8"), body, hashlib.sha512).hexdigest()
    return hmac.compare_digest(expected, signature)
