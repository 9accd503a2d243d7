"""
RFM Metrics — Agenda Core

Recency, frequency and monetary metrics for one client, derived from the
client's appointment and invoice history at a reference instant.

- Monetary: sum of paid invoice totals
- Recency: whole days since the most recent appointment on or before now
- Frequency: all appointments, and those in now's calendar year

Future-dated appointments count toward frequency but never toward recency,
so a pre-booked visit cannot hide an inactive client.
"""

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from agenda_core.records import as_appointments, as_invoices, resolve_now

logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12


@dataclass(frozen=True)
class RFMMetrics:
    """Immutable metrics snapshot for one client."""

    recency_days: int | None = None
    last_visit_date: datetime | None = None
    frequency_total: int = 0
    frequency_this_year: int = 0
    monetary_total: float = 0.0
    avg_ticket: int = 0
    avg_per_month: float = 0.0

    def to_dict(self) -> dict:
        return {
            "recency_days": self.recency_days,
            "last_visit_date": self.last_visit_date.isoformat() if self.last_visit_date else None,
            "frequency_total": self.frequency_total,
            "frequency_this_year": self.frequency_this_year,
            "monetary_total": round(self.monetary_total, 2),
            "avg_ticket": self.avg_ticket,
            "avg_per_month": self.avg_per_month,
        }


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def compute_rfm_metrics(
    appointments: Iterable[Any] | None,
    invoices: Iterable[Any] | None,
    now: Any = None,
) -> RFMMetrics:
    """
    Compute RFM metrics for one client identity.

    Accepts Appointment/Invoice records or raw documents. Never raises on
    malformed input: bad dates drop out of recency and yearly frequency,
    bad amounts count as 0.
    """
    now = resolve_now(now)
    appts = as_appointments(appointments)
    invs = as_invoices(invoices)

    monetary_total = sum(inv.total_amount for inv in invs if inv.is_paid)
    if not math.isfinite(monetary_total):
        logger.warning("Paid invoice total overflowed, treating as 0")
        monetary_total = 0.0

    past_dates = [a.date for a in appts if a.date is not None and a.date <= now]
    last_visit = max(past_dates) if past_dates else None
    recency_days = (now - last_visit).days if last_visit else None

    undated = sum(1 for a in appts if a.date is None)
    if undated:
        logger.debug("%d appointment(s) without a usable date", undated)

    frequency_total = len(appts)
    frequency_this_year = sum(1 for a in appts if a.date is not None and a.date.year == now.year)

    if frequency_total > 0:
        avg_ticket = round_half_up(monetary_total / frequency_total)
        avg_per_month = round(frequency_total / MONTHS_PER_YEAR, 1)
    else:
        avg_ticket = 0
        avg_per_month = 0.0

    return RFMMetrics(
        recency_days=recency_days,
        last_visit_date=last_visit,
        frequency_total=frequency_total,
        frequency_this_year=frequency_this_year,
        monetary_total=monetary_total,
        avg_ticket=avg_ticket,
        avg_per_month=avg_per_month,
    )
