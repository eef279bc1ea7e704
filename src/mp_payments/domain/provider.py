"""Payment provider Protocol — the core's only view of the payment service.

Escrow and credit purchases depend on this interface; unit tests inject an
AsyncMock, production wires StripeProvider.
"""

from typing import Protocol

from src.mp_payments.domain.models import CheckoutSession, PaymentIntent


class PaymentProviderProtocol(Protocol):
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
    ) -> CheckoutSession: ...

    async def retrieve_session(self, session_id: str) -> CheckoutSession: ...

    async def retrieve_payment_intent(self, intent_id: str) -> PaymentIntent: ...

    async def capture_payment_intent(self, intent_id: str) -> PaymentIntent: ...

    async def cancel_payment_intent(self, intent_id: str) -> PaymentIntent: ...
