"""Domain models - pure Python dataclasses and enums representing business entities"""

from dataclasses import dataclass
from datetime import date
from enum import Enum


class LoanStatus(str, Enum):
    ACTIVE = "Active"
    CLOSED = "Closed"


class InstallmentStatus(str, Enum):
    """Stored installment states plus the read-time ``UPCOMING`` label"""

    UNPAID = "Unpaid"
    UPCOMING = "Upcoming"  # display only, never persisted
    PAID_ON_TIME = "Paid on time"
    PAID_LATE = "Paid late"
    ADVANCE_PAID = "Advance paid"


PAID_STATUSES = frozenset(
    {
        InstallmentStatus.PAID_ON_TIME,
        InstallmentStatus.PAID_LATE,
        InstallmentStatus.ADVANCE_PAID,
    }
)


class PaymentMode(str, Enum):
    CASH = "cash"
    ONLINE = "online"
    ADVANCE = "advance"
    NONE = "none"


@dataclass
class LoanTerms:
    """Derived repayment figures for a loan"""

    total_repayable: float
    installment_amount: float


@dataclass
class ScheduledInstallment:
    """Single installment produced by the schedule generator"""

    installment_number: int
    due_date: date
    amount: float
    status: InstallmentStatus = InstallmentStatus.UNPAID


@dataclass
class Settlement:
    """Outcome of settling one installment"""

    status: InstallmentStatus
    score_delta: int
