"""
Plan Catalog — Agenda Core

Static subscription catalog: five tiers and their limits, plus the trial
date helpers.

TRIAL SYSTEM:
- Every new business starts on a time-boxed trial with Basic plan limits
- No free tier exists; after the trial ends the business must subscribe
- Trial status is tracked via the trialEndsAt field of the business document

Numeric limits use None for unlimited.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum
from typing import Any

from agenda_core import config
from agenda_core.records import parse_datetime, resolve_now

logger = logging.getLogger(__name__)

TRIAL_DURATION_DAYS = config.TRIAL_DURATION_DAYS

SECONDS_PER_DAY = 24 * 60 * 60


class PlanId(StrEnum):
    TRIAL = "trial"
    INDIVIDUAL = "individual"
    BASIC = "basic"
    PROFESSIONAL = "professional"
    ENTERPRISE = "enterprise"


@dataclass(frozen=True)
class PlanLimits:
    max_staff: int | None
    max_appointments_per_month: int | None
    max_services: int | None
    can_send_campaigns: bool
    can_export_reports: bool
    can_customize_branding: bool
    online_booking: bool
    email_reminders: bool
    sms_reminders: bool

    def to_dict(self) -> dict:
        return {
            "max_staff": self.max_staff,
            "max_appointments_per_month": self.max_appointments_per_month,
            "max_services": self.max_services,
            "can_send_campaigns": self.can_send_campaigns,
            "can_export_reports": self.can_export_reports,
            "can_customize_branding": self.can_customize_branding,
            "online_booking": self.online_booking,
            "email_reminders": self.email_reminders,
            "sms_reminders": self.sms_reminders,
        }


@dataclass(frozen=True)
class Plan:
    id: PlanId
    name: str
    price: int | None  # MXN per month; None = custom pricing
    limits: PlanLimits
    features: tuple[str, ...] = field(default_factory=tuple)
    is_trial: bool = False
    is_popular: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id.value,
            "name": self.name,
            "price": self.price,
            "price_label": format_plan_price(self.price),
            "limits": self.limits.to_dict(),
            "features": list(self.features),
            "is_trial": self.is_trial,
            "is_popular": self.is_popular,
        }


_BASIC_LIMITS = PlanLimits(
    max_staff=20,
    max_appointments_per_month=1000,
    max_services=50,
    can_send_campaigns=True,
    can_export_reports=True,
    can_customize_branding=True,
    online_booking=True,
    email_reminders=True,
    sms_reminders=True,
)

PLANS: dict[PlanId, Plan] = {
    PlanId.TRIAL: Plan(
        id=PlanId.TRIAL,
        name="Prueba Gratis",
        price=0,
        is_trial=True,
        limits=_BASIC_LIMITS,
        features=(
            "Todas las funciones del Plan Básico",
            "Hasta 20 Profesionales",
            "Citas ilimitadas",
            "Campañas de marketing",
            "Recordatorios SMS",
            f"{TRIAL_DURATION_DAYS} días gratis",
        ),
    ),
    PlanId.INDIVIDUAL: Plan(
        id=PlanId.INDIVIDUAL,
        name="Individual",
        price=199,
        limits=PlanLimits(
            max_staff=1,
            max_appointments_per_month=200,
            max_services=10,
            can_send_campaigns=False,
            can_export_reports=True,
            can_customize_branding=True,
            online_booking=True,
            email_reminders=True,
            sms_reminders=False,
        ),
        features=(
            "1 Profesional",
            "Hasta 200 citas/mes",
            "Recordatorios por email",
            "Exportar reportes",
            "Logo personalizado",
        ),
    ),
    PlanId.BASIC: Plan(
        id=PlanId.BASIC,
        name="Básico",
        price=499,
        is_popular=True,
        limits=_BASIC_LIMITS,
        features=(
            "Hasta 20 Profesionales",
            "Citas ilimitadas",
            "Campañas de marketing",
            "Recordatorios SMS",
            "Soporte prioritario",
        ),
    ),
    PlanId.PROFESSIONAL: Plan(
        id=PlanId.PROFESSIONAL,
        name="Profesional",
        price=999,
        limits=PlanLimits(
            max_staff=50,
            max_appointments_per_month=None,
            max_services=None,
            can_send_campaigns=True,
            can_export_reports=True,
            can_customize_branding=True,
            online_booking=True,
            email_reminders=True,
            sms_reminders=True,
        ),
        features=(
            "Hasta 50 Profesionales",
            "API Access",
            "Integraciones avanzadas",
            "Soporte 24/7",
        ),
    ),
    PlanId.ENTERPRISE: Plan(
        id=PlanId.ENTERPRISE,
        name="Empresarial",
        price=None,
        limits=PlanLimits(
            max_staff=None,
            max_appointments_per_month=None,
            max_services=None,
            can_send_campaigns=True,
            can_export_reports=True,
            can_customize_branding=True,
            online_booking=True,
            email_reminders=True,
            sms_reminders=True,
        ),
        features=(
            "Profesionales ilimitados",
            "Múltiples sucursales",
            "Onboarding dedicado",
            "SLA garantizado",
        ),
    ),
}

UPGRADE_ORDER: tuple[PlanId, ...] = (
    PlanId.TRIAL,
    PlanId.INDIVIDUAL,
    PlanId.BASIC,
    PlanId.PROFESSIONAL,
)


def resolve_plan_id(plan_id: Any) -> PlanId:
    """
    Map a stored plan id to a catalog id.

    Empty means a business that never chose a plan (trial). Matching is
    exact: unknown ids, including differently cased or padded ones, resolve
    to trial so they never unlock more than the trial grants.
    """
    if isinstance(plan_id, PlanId):
        return plan_id
    text = str(plan_id) if plan_id is not None else ""
    if not text.strip():
        return PlanId.TRIAL
    try:
        return PlanId(text)
    except ValueError:
        logger.warning("Unknown plan id, falling back to trial", extra={"plan_id": plan_id})
        return PlanId.TRIAL


def get_plan(plan_id: Any) -> Plan:
    return PLANS[resolve_plan_id(plan_id)]


def get_plan_limits(plan_id: Any) -> PlanLimits:
    return get_plan(plan_id).limits


def get_upgrade_suggestion(plan_id: Any) -> Plan | None:
    """Next tier along the upgrade path, or None at the top / off the path."""
    resolved = resolve_plan_id(plan_id)
    if resolved not in UPGRADE_ORDER:
        return None
    index = UPGRADE_ORDER.index(resolved)
    if index >= len(UPGRADE_ORDER) - 1:
        return None
    return PLANS[UPGRADE_ORDER[index + 1]]


def format_plan_price(price: int | None) -> str:
    if price is None:
        return "Contactar"
    if price == 0:
        return "Gratis"
    return f"${price} {config.CURRENCY}/mes"


# =============================================================================
# TRIAL DATES
# =============================================================================


def calculate_trial_end_date(start: Any = None) -> datetime:
    """Trial end for a trial starting at `start` (default: now)."""
    return resolve_now(start) + timedelta(days=TRIAL_DURATION_DAYS)


def new_business_plan(now: Any = None) -> dict:
    """Subscription fields for a newly created business document."""
    started = resolve_now(now)
    return {
        "plan": PlanId.TRIAL.value,
        "trialStartedAt": started.isoformat(),
        "trialEndsAt": calculate_trial_end_date(started).isoformat(),
    }


def is_trial_expired(trial_ends_at: Any, now: Any = None) -> bool:
    """True once now is past the trial end. Absent or malformed ends never expire."""
    ends = parse_datetime(trial_ends_at)
    if ends is None:
        return False
    return resolve_now(now) > ends


def remaining_trial_days(trial_ends_at: Any, now: Any = None) -> int:
    """Whole days left in the trial, rounded up; 0 when expired, absent or malformed."""
    ends = parse_datetime(trial_ends_at)
    if ends is None:
        return 0
    seconds = (ends - resolve_now(now)).total_seconds()
    return max(0, math.ceil(seconds / SECONDS_PER_DAY))
