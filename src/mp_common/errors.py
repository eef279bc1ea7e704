"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Identity/Authorization
  2xxx: Credits
  3xxx: Listings/Applications/Verification
  4xxx: Bookings
  5xxx: Payments/Escrow
  9xxx: Validation/System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        details: dict[str, object] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.details = details
        super().__init__(message)


# --- 1xxx: Identity/Authorization ---

class UnauthenticatedError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Authentication required", 401)


class ForbiddenError(AppError):
    def __init__(self, detail: str = "Not authorized") -> None:
        super().__init__(1002, detail, 403)


class AdminRequiredError(ForbiddenError):
    def __init__(self) -> None:
        super().__init__("Admin access required")


# --- 2xxx: Credits ---

class InsufficientCreditsError(AppError):
    def __init__(self, required: int, available: int) -> None:
        self.required = required
        self.available = available
        super().__init__(
            2001,
            f"Insufficient credits: required {required}, available {available}",
            422,
            {"required": required, "available": available},
        )


class DuplicateFulfillmentError(AppError):
    def __init__(self, reference_id: str) -> None:
        super().__init__(2002, f"Purchase already fulfilled: {reference_id}", 409)


# --- 3xxx: Listings/Applications/Verification ---

class NotFoundError(AppError):
    """Entity id does not resolve. Subclasses name the entity."""

    def __init__(self, code: int, entity: str, entity_id: object) -> None:
        super().__init__(code, f"{entity} not found: {entity_id}", 404)


class PostNotFoundError(NotFoundError):
    def __init__(self, post_id: int) -> None:
        super().__init__(3001, "Post", post_id)


class ApplicationNotFoundError(NotFoundError):
    def __init__(self, application_id: int) -> None:
        super().__init__(3002, "Application", application_id)


class DuplicateApplicationError(AppError):
    def __init__(self, post_id: int) -> None:
        super().__init__(3003, f"Already applied to post {post_id}", 409)


class AgeVerificationRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(
            3004,
            "Age-verified ID required for Adult/NSFW content. Complete ID verification first.",
            403,
        )


class VerificationRequiredError(AppError):
    """Licensed category without an approved professional verification."""

    def __init__(self, category: str) -> None:
        self.category = category
        super().__init__(
            3005,
            f"Professional verification required to post in {category}",
            403,
            {"requires_professional_verification": True, "category": category},
        )


# --- 4xxx: Bookings ---

class BookingNotFoundError(NotFoundError):
    def __init__(self, booking_id: int) -> None:
        super().__init__(4001, "Booking", booking_id)


class InvalidStateTransitionError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4002, detail, 422)


# --- 5xxx: Payments/Escrow ---

class ExternalProviderError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(5001, f"Payment provider error: {detail}", 502)


# --- 9xxx: Validation/System ---

class ValidationFailedError(AppError):
    def __init__(self, field: str, detail: str) -> None:
        self.field = field
        super().__init__(9001, detail, 400, {"field": field})


class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9002, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9003, detail, 500)
