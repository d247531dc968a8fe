# payments/services/gateway.py

"""
PAYMENT GATEWAY CLIENT

Outbound:
- create_intent(): POST {BASE_URL}/payment-intents
  Body carries the order id as `external_reference`; the same order id is sent
  as the `Idempotency-Key` header, so a retried intent for the same order
  returns the same gateway intent instead of creating a second one.

Inbound (signature helpers for the webhook):
- X-Gateway-Signature = hex(HMAC-SHA256(WEBHOOK_SECRET, raw request body))

Config: settings.PAYMENTS["GATEWAY"] (BASE_URL, API_KEY, WEBHOOK_SECRET,
RETURN_URL, TIMEOUT_SECONDS).
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
from dataclasses import dataclass
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from django.conf import settings

from payments.services.exceptions import GatewayConfigurationError, GatewayRequestError

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Gateway-Signature"


@dataclass(frozen=True)
class GatewayIntent:
    external_reference: str
    redirect_url: str


def _gateway_cfg() -> dict:
    payments = getattr(settings, "PAYMENTS", {}) or {}
    cfg = payments.get("GATEWAY") or {}
    return cfg if isinstance(cfg, dict) else {}


def _require(cfg: dict, key: str) -> str:
    value = str(cfg.get(key) or "").strip()
    if not value:
        raise GatewayConfigurationError(
            f"PAYMENTS['GATEWAY']['{key}'] is not configured "
            f"(env PAYMENT_GATEWAY_{key})."
        )
    return value


def _safe_preview(text: str, limit: int = 500) -> str:
    text = (text or "").strip()
    if len(text) <= limit:
        return text
    return text[:limit] + " ...(truncated)"


def _request_json(method: str, path: str, *, body: dict | None = None, idempotency_key: str = "") -> dict[str, Any]:
    cfg = _gateway_cfg()
    base_url = _require(cfg, "BASE_URL").rstrip("/")
    api_key = _require(cfg, "API_KEY")
    timeout = int(cfg.get("TIMEOUT_SECONDS") or 15)

    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
        "Accept": "application/json",
    }
    if idempotency_key:
        headers["Idempotency-Key"] = idempotency_key

    data = json.dumps(body, ensure_ascii=False).encode("utf-8") if body is not None else None
    req = Request(f"{base_url}{path}", data=data, headers=headers, method=method)

    try:
        with urlopen(req, timeout=timeout) as resp:
            raw = resp.read().decode("utf-8", errors="replace")
    except HTTPError as e:
        detail = e.read().decode("utf-8", errors="replace") if e.fp else ""
        raise GatewayRequestError(
            f"Gateway HTTPError: {e.code} {_safe_preview(detail) or e.reason}",
            status_code=e.code,
        ) from e
    except URLError as e:
        raise GatewayRequestError(f"Gateway URLError: {e.reason}") from e
    except TimeoutError as e:
        raise GatewayRequestError(f"Gateway timeout after {timeout}s") from e

    try:
        parsed = json.loads(raw or "")
    except json.JSONDecodeError as e:
        raise GatewayRequestError(f"Gateway returned non-JSON: {_safe_preview(raw)}") from e

    if not isinstance(parsed, dict):
        raise GatewayRequestError("Gateway returned a non-object JSON body")
    return parsed


def create_intent(
    *,
    order_id,
    amount: int,
    currency: str,
    description: str = "",
    payer_email: str = "",
    return_url: str = "",
) -> GatewayIntent:
    cfg = _gateway_cfg()
    payload: dict = {
        "external_reference": str(order_id),
        "amount": int(amount),
        "currency": str(currency).upper(),
    }
    if description:
        payload["description"] = description
    if payer_email:
        payload["payer"] = {"email": payer_email}

    return_url = return_url or str(cfg.get("RETURN_URL") or "").strip()
    if return_url:
        payload["return_url"] = return_url

    logger.info(
        "Requesting payment intent",
        extra={"order_id": str(order_id), "amount": int(amount), "currency": payload["currency"]},
    )
    parsed = _request_json("POST", "/payment-intents", body=payload, idempotency_key=str(order_id))

    reference = str(parsed.get("id") or "").strip()
    redirect_url = str(parsed.get("redirect_url") or "").strip()
    if not reference or not redirect_url:
        raise GatewayRequestError("Gateway intent response is missing id/redirect_url")

    return GatewayIntent(external_reference=reference, redirect_url=redirect_url)


# ============================================================
# WEBHOOK SIGNATURES
# ============================================================


def _webhook_secret() -> bytes:
    return _require(_gateway_cfg(), "WEBHOOK_SECRET").encode("utf-8")


def sign_payload(raw_body: bytes) -> str:
    return hmac.new(_webhook_secret(), raw_body or b"", hashlib.sha256).hexdigest()


def verify_signature(*, raw_body: bytes, signature: str | None) -> bool:
    if not signature:
        return False
    computed = sign_payload(raw_body)
    return hmac.compare_digest(computed, str(signature).strip().lower())
