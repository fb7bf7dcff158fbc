"""
Ledger kernel domain -- pure value types, zero I/O.

Everything that flows between the engines and the services is defined
here: Currency and Money, the source record shapes consumed from the
system of record, the canonical LedgerEntry, the derived totals and
summaries, bookings and occupancy states, and the injectable Clock.
"""
