import logging
import random
import time

import requests

from shoptube.config import get_settings

logger = logging.getLogger(__name__)


class ChapaError(Exception):
    """Gateway rejected the call, or could not be reached."""

    def __init__(self, message: str, unreachable: bool = False):
        super().__init__(message)
        self.unreachable = unreachable


def generate_tx_ref(prefix: str = "shoptube") -> str:
    return f"{prefix}-{int(time.time() * 1000)}-{random.randint(0, 9999)}"


def _headers() -> dict:
    return {
        "Authorization": f"Bearer {get_settings().chapa_secret_key}",
        "Content-Type": "application/json",
    }


def _read_json(resp: requests.Response) -> dict:
    try:
        data = resp.json()
    except ValueError as e:
        raise ChapaError("Malformed response from payment gateway", unreachable=True) from e
    if not isinstance(data, dict):
        raise ChapaError("Malformed response from payment gateway", unreachable=True)
    return data


def initialize_transaction(payload: dict) -> str:
    """POST the payment payload to the gateway and return the hosted checkout URL."""
    settings = get_settings()
    try:
        resp = requests.post(
            f"{settings.chapa_base_url}/transaction/initialize",
            json=payload,
            headers=_headers(),
            timeout=settings.http_timeout,
        )
    except requests.RequestException as e:
        logger.warning("Chapa initialize unreachable tx_ref=%s: %s", payload.get("tx_ref"), e)
        raise ChapaError("Payment gateway unreachable", unreachable=True) from e

    data = _read_json(resp)
    if data.get("status") != "success":
        message = data.get("message") or "Failed to initialize Chapa payment"
        if isinstance(message, dict):
            message = "; ".join(f"{k}: {v}" for k, v in message.items())
        logger.warning("Chapa initialize rejected tx_ref=%s: %s", payload.get("tx_ref"), message)
        raise ChapaError(str(message))

    checkout_url = (data.get("data") or {}).get("checkout_url")
    if not checkout_url:
        raise ChapaError("Malformed response from payment gateway", unreachable=True)
    return checkout_url


def verify_transaction(tx_ref: str) -> dict:
    """Return the gateway's verify body ``{"status", "message", "data"}`` for ``tx_ref``.

    A declined or unknown transaction is not an error here; the caller inspects
    ``status`` and ``data.status``.
    """
    settings = get_settings()
    try:
        resp = requests.get(
            f"{settings.chapa_base_url}/transaction/verify/{tx_ref}",
            headers=_headers(),
            timeout=settings.http_timeout,
        )
    except requests.RequestException as e:
        logger.warning("Chapa verify unreachable tx_ref=%s: %s", tx_ref, e)
        raise ChapaError("Payment gateway unreachable", unreachable=True) from e
    return _read_json(resp)
