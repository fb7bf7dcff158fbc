"""Read-only selectors over the source tables."""

from ledger_kernel.selectors.base import BaseSelector
from ledger_kernel.selectors.booking_selector import BookingSelector
from ledger_kernel.selectors.payment_selector import PaymentSelector
from ledger_kernel.selectors.service_selector import ServiceRequestRow, ServiceRequestSelector
from ledger_kernel.selectors.utility_selector import UtilityReadingRow, UtilityReadingSelector

__all__ = [
    "BaseSelector",
    "BookingSelector",
    "PaymentSelector",
    "ServiceRequestRow",
    "ServiceRequestSelector",
    "UtilityReadingRow",
    "UtilityReadingSelector",
]
