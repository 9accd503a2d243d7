"""
Test fixtures for deterministic testing.

This module provides:
- FIXED_NOW: the pinned reference instant used across tests
- appointment_doc / invoice_doc: raw datastore document builders
"""

from .records import FIXED_NOW, appointment_doc, days_ago, invoice_doc

__all__ = ["FIXED_NOW", "appointment_doc", "days_ago", "invoice_doc"]
