"""Stripe REST client over httpx.

Talks to the Checkout Session and PaymentIntent endpoints only. Requests are
form-encoded with Stripe's bracket notation for nested fields. No retries:
any transport failure or non-2xx response becomes ExternalProviderError and
the caller's transaction rolls back.
"""

import logging
from functools import lru_cache
from typing import Any

import httpx

from config.settings import settings
from src.mp_common.errors import ExternalProviderError
from src.mp_payments.domain.models import CheckoutSession, PaymentIntent

logger = logging.getLogger(__name__)


def flatten_form(params: dict[str, Any], prefix: str = "") -> dict[str, str]:
    """{"metadata": {"a": 1}, "items": [{"q": 1}]} -> {"metadata[a]": "1", "items[0][q]": "1"}"""
    flat: dict[str, str] = {}
    for key, value in params.items():
        name = f"{prefix}[{key}]" if prefix else str(key)
        if value is None:
            continue
        if isinstance(value, dict):
            flat.update(flatten_form(value, name))
        elif isinstance(value, list):
            for i, item in enumerate(value):
                if isinstance(item, dict):
                    flat.update(flatten_form(item, f"{name}[{i}]"))
                else:
                    flat[f"{name}[{i}]"] = str(item)
        elif isinstance(value, bool):
            flat[name] = "true" if value else "false"
        else:
            flat[name] = str(value)
    return flat


def _session_from_json(data: dict[str, Any]) -> CheckoutSession:
    intent = data.get("payment_intent")
    if isinstance(intent, dict):
        intent = intent.get("id")
    return CheckoutSession(
        id=data["id"],
        url=data.get("url"),
        payment_status=data.get("payment_status") or "unpaid",
        payment_intent_id=intent,
        metadata={k: str(v) for k, v in (data.get("metadata") or {}).items()},
    )


def _intent_from_json(data: dict[str, Any]) -> PaymentIntent:
    return PaymentIntent(id=data["id"], status=data.get("status") or "unknown")


class StripeProvider:
    def __init__(
        self,
        secret_key: str,
        api_base: str = "https://api.stripe.com/v1",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._secret_key = secret_key
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def _request(
        self, method: str, path: str, form: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        if not self._secret_key:
            raise ExternalProviderError("payment provider is not configured")
        async with httpx.AsyncClient(
            base_url=self._api_base,
            auth=(self._secret_key, ""),
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            try:
                response = await client.request(
                    method, path, data=flatten_form(form) if form else None
                )
            except httpx.HTTPError as exc:
                logger.error("stripe %s %s transport error: %s", method, path, exc)
                raise ExternalProviderError(f"{method} {path} failed: {exc}") from exc

        if response.is_error:
            try:
                message = response.json().get("error", {}).get("message", response.text)
            except ValueError:
                message = response.text
            logger.error("stripe %s %s -> %d: %s", method, path, response.status_code, message)
            raise ExternalProviderError(f"{method} {path} returned {response.status_code}: {message}")
        return response.json()

    async def create_checkout_session(
        self,
        *,
        amount_cents: int,
        product_name: str,
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
        mode: str = "payment",
        capture_method: str | None = None,
        description: str | None = None,
    ) -> CheckoutSession:
        form: dict[str, Any] = {
            "mode": mode,
            "success_url": success_url,
            "cancel_url": cancel_url,
            "metadata": metadata,
            "line_items": [{
                "quantity": 1,
                "price_data": {
                    "currency": "usd",
                    "unit_amount": amount_cents,
                    "product_data": {"name": product_name, "description": description},
                },
            }],
        }
        if capture_method is not None:
            form["payment_intent_data"] = {"capture_method": capture_method, "metadata": metadata}
        data = await self._request("POST", "/checkout/sessions", form)
        session = _session_from_json(data)
        logger.info("checkout session created id=%s amount=%d capture=%s",
                    session.id, amount_cents, capture_method or "automatic")
        return session

    async def retrieve_session(self, session_id: str) -> CheckoutSession:
        return _session_from_json(await self._request("GET", f"/checkout/sessions/{session_id}"))

    async def retrieve_payment_intent(self, intent_id: str) -> PaymentIntent:
        return _intent_from_json(await self._request("GET", f"/payment_intents/{intent_id}"))

    async def capture_payment_intent(self, intent_id: str) -> PaymentIntent:
        intent = _intent_from_json(await self._request("POST", f"/payment_intents/{intent_id}/capture"))
        logger.info("payment intent captured id=%s status=%s", intent.id, intent.status)
        return intent

    async def cancel_payment_intent(self, intent_id: str) -> PaymentIntent:
        intent = _intent_from_json(await self._request("POST", f"/payment_intents/{intent_id}/cancel"))
        logger.info("payment intent cancelled id=%s status=%s", intent.id, intent.status)
        return intent


@lru_cache(maxsize=1)
def get_payment_provider() -> StripeProvider:
    return StripeProvider(
        secret_key=settings.STRIPE_SECRET_KEY,
        api_base=settings.STRIPE_API_BASE,
        timeout=settings.STRIPE_TIMEOUT_SECONDS,
    )
