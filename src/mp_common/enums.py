"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class Tier(str, Enum):
    SLOTS = "Slots"
    MISSIONS = "Missions"
    TASKS = "Tasks"
    PROJECTS = "Projects"
    CHANCES = "Chances"


class PostType(str, Enum):
    GIG = "gig"
    EVENT = "event"


class Plan(str, Enum):
    FREE = "free"
    PRO = "pro"
    ELITE = "elite"


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class VerificationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class BookingStatus(str, Enum):
    PENDING_PAYMENT = "pending_payment"
    PAYMENT_SUBMITTED = "payment_submitted"
    DEPOSIT_PAID = "deposit_paid"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


TERMINAL_BOOKING_STATUSES = frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED})


class PaymentStructure(str, Enum):
    FULL_UPFRONT = "full_upfront"
    SPLIT_50_50 = "split_50_50"


class Installment(str, Enum):
    DEPOSIT = "deposit"
    FINAL = "final"


class InstallmentStatus(str, Enum):
    PENDING = "pending"
    SUBMITTED = "submitted"
    PAID = "paid"


class PaymentMethod(str, Enum):
    EXTERNAL = "external"
    ESCROW = "escrow"


class EscrowStatus(str, Enum):
    NONE = "none"
    AUTHORIZED = "authorized"
    CAPTURED = "captured"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class CreditAction(str, Enum):
    INIT = "init"
    CREATE_POST = "create_post"
    CREATE_EVENT = "create_event"
    APPLY = "apply"
    BOOKING = "booking"
    PURCHASE = "purchase"
