"""
ORM models.

Source tables of the property system (read by the ledger) plus the
apartment_status_projection cache owned by the occupancy service.
"""

from ledger_kernel.models.booking import Booking
from ledger_kernel.models.payment import Payment, PaymentMethod
from ledger_kernel.models.projection import (
    ApartmentStatusProjection,
    register_projection_invalidation,
    unregister_projection_invalidation,
)
from ledger_kernel.models.property import Apartment, User, Village
from ledger_kernel.models.service import ServiceRequest, ServiceType, VillageServicePrice
from ledger_kernel.models.utility import UtilityReading

__all__ = [
    "Apartment",
    "ApartmentStatusProjection",
    "Booking",
    "Payment",
    "PaymentMethod",
    "ServiceRequest",
    "ServiceType",
    "User",
    "UtilityReading",
    "Village",
    "VillageServicePrice",
    "register_projection_invalidation",
    "unregister_projection_invalidation",
]
