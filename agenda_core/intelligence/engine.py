"""
Client Intelligence Engine — Agenda Core

Single entry point: appointments + invoices + now -> metrics, tags and
suggestions. Pure and idempotent; each call recomputes from scratch, so
results from concurrent snapshot arrivals never depend on each other.

Usage:
    from agenda_core.intelligence import compute_intelligence
    intel = compute_intelligence(appointments, invoices, now=now)
    intel.tags         # (Tag(id=TagId.LOST, ...),)
    intel.to_dict()    # JSON-safe view
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from .rfm import RFMMetrics, compute_rfm_metrics
from .suggestions import Suggestion, generate_suggestions
from .tags import Tag, classify_tags

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientIntelligence:
    """Derived view of one client; never persisted."""

    metrics: RFMMetrics
    tags: tuple[Tag, ...] = field(default_factory=tuple)
    suggestions: tuple[Suggestion, ...] = field(default_factory=tuple)

    @property
    def recency(self) -> dict:
        return {"days": self.metrics.recency_days, "last_date": self.metrics.last_visit_date}

    @property
    def frequency(self) -> dict:
        return {
            "total": self.metrics.frequency_total,
            "this_year": self.metrics.frequency_this_year,
            "avg_per_month": self.metrics.avg_per_month,
        }

    @property
    def monetary(self) -> dict:
        return {"total": self.metrics.monetary_total, "avg_ticket": self.metrics.avg_ticket}

    @property
    def tag_ids(self) -> list[str]:
        return [t.id.value for t in self.tags]

    def to_dict(self) -> dict:
        last_date = self.metrics.last_visit_date
        return {
            "recency": {
                "days": self.metrics.recency_days,
                "last_date": last_date.isoformat() if last_date else None,
            },
            "frequency": self.frequency,
            "monetary": {
                "total": round(self.metrics.monetary_total, 2),
                "avg_ticket": self.metrics.avg_ticket,
            },
            "tags": [t.to_dict() for t in self.tags],
            "suggestions": [s.to_dict() for s in self.suggestions],
        }


def compute_intelligence(
    appointments: Iterable[Any] | None,
    invoices: Iterable[Any] | None,
    now: Any = None,
) -> ClientIntelligence:
    """Compute metrics, tags and suggestions for one client's history."""
    metrics = compute_rfm_metrics(appointments, invoices, now)
    tags = classify_tags(metrics)
    suggestions = generate_suggestions(tags)

    logger.debug(
        "Client intelligence computed",
        extra={"tags": [t.id.value for t in tags], "frequency_total": metrics.frequency_total},
    )
    return ClientIntelligence(metrics=metrics, tags=tags, suggestions=suggestions)
