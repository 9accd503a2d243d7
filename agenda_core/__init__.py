"""
Agenda Core — client intelligence and plan-limit gating for a multi-tenant
appointment-booking and billing service.

Usage:
    from agenda_core import compute_intelligence, evaluate_plan_policy

    intel = compute_intelligence(appointments, invoices, now=now)
    policy = evaluate_plan_policy("trial", trial_ends_at, now=now, usage_counts={"staff": 3})
"""

from .intelligence import ClientIntelligence, compute_intelligence
from .plans import PlanPolicy, evaluate_plan_policy

__version__ = "0.1.0"

__all__ = [
    "ClientIntelligence",
    "PlanPolicy",
    "compute_intelligence",
    "evaluate_plan_policy",
]
