"""
Ledger Kernel

Read-side financial core of the rental property system:
- Multi-currency ledger aggregation (EGP and GBP tracked independently)
- Opening-balance / reporting-window splitting
- Occupancy status resolution from bookings
- Typed errors and structured logging shared by engines and services
"""

__version__ = "0.1.0"
