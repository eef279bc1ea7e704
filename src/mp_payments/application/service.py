"""CreditPurchaseService — buy credit packages through a provider checkout.

start_credit_checkout creates a hosted checkout for a catalog package.
fulfill_credit_purchase verifies the paid session and grants the credits
through the ledger, once per session id.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.mp_common.catalog import Catalog, CreditPackage, get_catalog
from src.mp_common.errors import ForbiddenError, ValidationFailedError
from src.mp_ledger.application.service import LedgerApplicationService
from src.mp_payments.application.schemas import CreditCheckoutResponse, FulfillCreditsResponse
from src.mp_payments.domain.provider import PaymentProviderProtocol
from src.mp_payments.infrastructure.stripe_provider import get_payment_provider

logger = logging.getLogger(__name__)


class CreditPurchaseService:
    def __init__(
        self,
        provider: PaymentProviderProtocol | None = None,
        ledger: LedgerApplicationService | None = None,
        catalog: Catalog | None = None,
        app_url: str | None = None,
    ) -> None:
        self._provider = provider
        self._catalog = catalog or get_catalog()
        self._ledger = ledger or LedgerApplicationService(catalog=self._catalog)
        self._app_url = (app_url or settings.APP_URL).rstrip("/")

    @property
    def provider(self) -> PaymentProviderProtocol:
        return self._provider or get_payment_provider()

    def _package_for(self, credits: int) -> CreditPackage:
        for pkg in self._catalog.credit_packages:
            if pkg.credits == credits:
                return pkg
        raise ValidationFailedError("credits", f"No credit package with {credits} credits")

    async def start_credit_checkout(self, user_id: str, credits: int) -> CreditCheckoutResponse:
        pkg = self._package_for(credits)
        session = await self.provider.create_checkout_session(
            amount_cents=pkg.price_cents,
            product_name=pkg.name,
            description=f"{pkg.credits} marketplace credits",
            success_url=f"{self._app_url}/me?purchase=success&session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{self._app_url}/buy-credits?cancelled=true",
            metadata={"userId": user_id, "credits": str(pkg.credits), "type": "credits"},
        )
        return CreditCheckoutResponse(session_id=session.id, url=session.url)

    async def fulfill_credit_purchase(
        self, db: AsyncSession, user_id: str, session_id: str
    ) -> FulfillCreditsResponse:
        session = await self.provider.retrieve_session(session_id)
        if not session.is_paid:
            raise ValidationFailedError("session_id", "Payment not completed")
        if session.metadata.get("userId") != user_id:
            raise ForbiddenError("Session does not belong to you")
        try:
            credits = int(session.metadata.get("credits", "0"))
        except ValueError:
            credits = 0
        if credits <= 0:
            raise ValidationFailedError("credits", "Invalid credit amount")

        credit = await self._ledger.credit_for_purchase(
            db, user_id, credits, f"Purchased {credits} credits", reference_id=session.id
        )
        logger.info("credit purchase fulfilled user=%s session=%s credits=%d", user_id, session.id, credits)
        return FulfillCreditsResponse(credits_added=credits, balance=credit.balance)
