"""
Financial Metrics — Agenda Core

Dashboard figures for a business:
- Month-to-date revenue from paid invoices, with a daily series and the
  most frequently billed services
- A quick activity snapshot over the most recent appointments
"""

import logging
from collections import Counter, defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from agenda_core.records import as_appointments, as_invoices, resolve_now

logger = logging.getLogger(__name__)

TOP_SERVICES_LIMIT = 5
RECENT_APPOINTMENTS_LIMIT = 100
GENERAL_SERVICE = "General"


@dataclass
class FinancialMetrics:
    total_revenue: float = 0.0
    average_ticket: float = 0.0
    total_invoices: int = 0
    daily_revenue: list[tuple[str, float]] = field(default_factory=list)
    top_services: list[tuple[str, int]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "total_revenue": round(self.total_revenue, 2),
            "average_ticket": round(self.average_ticket, 2),
            "total_invoices": self.total_invoices,
            "daily_revenue": [{"date": d, "amount": round(a, 2)} for d, a in self.daily_revenue],
            "top_services": [{"name": n, "value": v} for n, v in self.top_services],
        }


@dataclass
class BusinessMetrics:
    appointments: int = 0
    revenue: float = 0.0
    active_clients: int = 0

    def to_dict(self) -> dict:
        return {
            "appointments": self.appointments,
            "revenue": round(self.revenue, 2),
            "active_clients": self.active_clients,
        }


def start_of_month(now: datetime) -> datetime:
    return datetime(now.year, now.month, 1, tzinfo=UTC)


def compute_financial_metrics(
    invoices: Iterable[Any] | None,
    now: Any = None,
) -> FinancialMetrics:
    """
    Month-to-date metrics over paid invoices.

    Undated invoices are left out. Services are counted per invoice from
    service_name, else per line item, else as "General".
    """
    now = resolve_now(now)
    month_start = start_of_month(now)

    paid = [
        inv
        for inv in as_invoices(invoices)
        if inv.is_paid and inv.date is not None and inv.date >= month_start
    ]
    if not paid:
        return FinancialMetrics()

    total_revenue = sum(inv.total_amount for inv in paid)

    daily: dict[str, float] = defaultdict(float)
    services: Counter[str] = Counter()
    for inv in paid:
        daily[inv.date.date().isoformat()] += inv.total_amount
        if inv.service_name:
            services[inv.service_name] += 1
        elif inv.items:
            services.update(inv.items)
        else:
            services[GENERAL_SERVICE] += 1

    # Counter.most_common keeps first-seen order among ties
    return FinancialMetrics(
        total_revenue=total_revenue,
        average_ticket=total_revenue / len(paid),
        total_invoices=len(paid),
        daily_revenue=sorted(daily.items()),
        top_services=services.most_common(TOP_SERVICES_LIMIT),
    )


def compute_business_metrics(
    appointments: Iterable[Any] | None,
    limit: int = RECENT_APPOINTMENTS_LIMIT,
) -> BusinessMetrics:
    """Activity snapshot over the `limit` most recent appointments."""
    appts = as_appointments(appointments)
    epoch = datetime.min.replace(tzinfo=UTC)
    recent = sorted(appts, key=lambda a: a.date or epoch, reverse=True)[: max(0, limit)]

    return BusinessMetrics(
        appointments=len(recent),
        revenue=sum(a.service_price for a in recent),
        active_clients=len({a.identity for a in recent}),
    )
