"""
api - HTTP surface for the tour ledger.

A thin translation layer: every request maps onto one TourLedger call and
every TourLedgerError onto its HTTP status.
"""

from .server import app

__all__ = ["app"]
