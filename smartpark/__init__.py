"""
SmartPark engine.

Reconciles raw licence-plate scans into parking sessions, bills each
session at the rate captured on entry, and aggregates sessions into
calendar-windowed analytics.
"""

__version__ = "0.1.0"
