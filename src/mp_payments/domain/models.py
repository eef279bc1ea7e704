"""Payment provider value objects — only the fields this core reads."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CheckoutSession:
    id: str
    url: str | None = None
    payment_status: str = "unpaid"          # "paid" once the buyer completes checkout
    payment_intent_id: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def is_paid(self) -> bool:
        return self.payment_status == "paid"


@dataclass(frozen=True)
class PaymentIntent:
    id: str
    status: str                             # e.g. "requires_capture", "succeeded", "canceled"

    @property
    def is_ready_to_capture(self) -> bool:
        return self.status == "requires_capture"
