"""
Plan Policy Engine — Agenda Core

Authorizes or denies actions for a business from its plan, its trial
window and its current usage counts.

Trial status is a small state machine:
- on_trial       plan is trial and now <= trialEndsAt (or no end recorded)
- trial_expired  plan is trial and now > trialEndsAt
- subscribed     any paid plan; entered by billing, never left from here

An expired trial is an absolute gate: every can_* check returns False
regardless of what the plan's limits would allow.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

from agenda_core.records import BusinessSubscription, coerce_count, parse_datetime, resolve_now

from .catalog import (
    PLANS,
    Plan,
    PlanId,
    get_plan,
    get_upgrade_suggestion,
    remaining_trial_days,
)

logger = logging.getLogger(__name__)

TRIAL_WARNING_DAYS = 2


class TrialStatus(StrEnum):
    ON_TRIAL = "on_trial"
    TRIAL_EXPIRED = "trial_expired"
    SUBSCRIBED = "subscribed"


class TrialMessageType(StrEnum):
    EXPIRED = "expired"
    WARNING = "warning"
    INFO = "info"


def resolve_trial_status(plan_id: Any, trial_ends_at: Any, now: Any = None) -> TrialStatus:
    plan = get_plan(plan_id)
    if not plan.is_trial:
        return TrialStatus.SUBSCRIBED
    ends = parse_datetime(trial_ends_at)
    if ends is not None and resolve_now(now) > ends:
        return TrialStatus.TRIAL_EXPIRED
    return TrialStatus.ON_TRIAL


@dataclass(frozen=True)
class UsageCounts:
    """Current usage of a business, as counted by the caller."""

    staff: int = 0
    services: int = 0
    appointments_this_month: int = 0

    @classmethod
    def coerce(cls, value: Any) -> "UsageCounts":
        if isinstance(value, UsageCounts):
            return value
        if not isinstance(value, Mapping):
            return cls()
        return cls(
            staff=coerce_count(value.get("staff", value.get("staffCount"))),
            services=coerce_count(value.get("services", value.get("serviceCount"))),
            appointments_this_month=coerce_count(
                value.get("appointments_this_month", value.get("appointmentsThisMonth"))
            ),
        )


@dataclass(frozen=True)
class LimitMessage:
    title: str
    message: str
    suggested_plan: Plan | None = None
    is_trial_expired: bool = False

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "message": self.message,
            "suggested_plan": self.suggested_plan.id.value if self.suggested_plan else None,
            "is_trial_expired": self.is_trial_expired,
        }


@dataclass(frozen=True)
class TrialMessage:
    type: TrialMessageType
    title: str
    message: str
    urgent: bool

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "title": self.title,
            "message": self.message,
            "urgent": self.urgent,
        }


@dataclass(frozen=True)
class UpsellMessage:
    title: str
    message: str
    required_plan: PlanId

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "message": self.message,
            "required_plan": self.required_plan.value,
        }


FEATURE_UPSELL_MESSAGES: dict[str, UpsellMessage] = {
    "campaigns": UpsellMessage(
        title="Campañas de Marketing",
        message="Las campañas de marketing están disponibles en el Plan Básico.",
        required_plan=PlanId.BASIC,
    ),
    "smsReminders": UpsellMessage(
        title="Recordatorios SMS",
        message="Los recordatorios por SMS están disponibles en el Plan Básico.",
        required_plan=PlanId.BASIC,
    ),
    "emailReminders": UpsellMessage(
        title="Recordatorios por Email",
        message="Los recordatorios por email están disponibles en el Plan Individual.",
        required_plan=PlanId.INDIVIDUAL,
    ),
    "reports": UpsellMessage(
        title="Exportar Reportes",
        message="La exportación de reportes está disponible en el Plan Individual.",
        required_plan=PlanId.INDIVIDUAL,
    ),
}


def get_feature_upsell_message(feature: str) -> UpsellMessage | None:
    return FEATURE_UPSELL_MESSAGES.get(feature)


def _under_limit(count: int, limit: int | None) -> bool:
    return limit is None or count < limit


class PlanPolicy:
    """
    Permission checks for one business at one instant.

    Counts passed to the can_* helpers override the bound usage; omitted
    counts read from it.
    """

    def __init__(
        self,
        plan_id: Any,
        trial_ends_at: Any = None,
        now: Any = None,
        usage: UsageCounts | Mapping | None = None,
    ):
        self.plan: Plan = get_plan(plan_id)
        self.limits = self.plan.limits
        self.now: datetime = resolve_now(now)
        self.trial_ends_at: datetime | None = parse_datetime(trial_ends_at)
        self.usage = UsageCounts.coerce(usage)
        self.trial_status = resolve_trial_status(self.plan.id, self.trial_ends_at, self.now)

    @classmethod
    def for_business(
        cls,
        business_doc: Mapping | BusinessSubscription | None,
        now: Any = None,
        usage: UsageCounts | Mapping | None = None,
    ) -> "PlanPolicy":
        """Build from the business document ({plan, trialEndsAt, ...})."""
        if not isinstance(business_doc, BusinessSubscription):
            business_doc = BusinessSubscription.from_dict(business_doc)
        return cls(business_doc.plan_id, business_doc.trial_ends_at, now, usage)

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def plan_id(self) -> PlanId:
        return self.plan.id

    @property
    def is_on_trial(self) -> bool:
        return self.trial_status == TrialStatus.ON_TRIAL

    @property
    def trial_expired(self) -> bool:
        return self.trial_status == TrialStatus.TRIAL_EXPIRED

    @property
    def remaining_trial_days(self) -> int:
        return remaining_trial_days(self.trial_ends_at, self.now)

    @property
    def upgrade_suggestion(self) -> Plan | None:
        return get_upgrade_suggestion(self.plan.id)

    def is_blocked(self) -> bool:
        """True when the trial has ended without a subscription."""
        return self.trial_expired

    # -------------------------------------------------------------------------
    # Permission checks
    # -------------------------------------------------------------------------

    def _staff(self, current_count: Any) -> int:
        return self.usage.staff if current_count is None else coerce_count(current_count)

    def can_add_staff(self, current_count: Any = None) -> bool:
        if self.is_blocked():
            return False
        return _under_limit(self._staff(current_count), self.limits.max_staff)

    def can_add_service(self, current_count: Any = None) -> bool:
        if self.is_blocked():
            return False
        count = self.usage.services if current_count is None else coerce_count(current_count)
        return _under_limit(count, self.limits.max_services)

    def can_add_appointment(self, current_month_count: Any = None) -> bool:
        if self.is_blocked():
            return False
        count = (
            self.usage.appointments_this_month
            if current_month_count is None
            else coerce_count(current_month_count)
        )
        return _under_limit(count, self.limits.max_appointments_per_month)

    def can_send_campaigns(self) -> bool:
        return not self.is_blocked() and self.limits.can_send_campaigns

    def can_export_reports(self) -> bool:
        return not self.is_blocked() and self.limits.can_export_reports

    def can_customize_branding(self) -> bool:
        return not self.is_blocked() and self.limits.can_customize_branding

    def can_use_email_reminders(self) -> bool:
        return not self.is_blocked() and self.limits.email_reminders

    def can_use_sms_reminders(self) -> bool:
        return not self.is_blocked() and self.limits.sms_reminders

    def get_remaining_staff_slots(self, current_count: Any = None) -> int | None:
        """Staff seats left, never negative. None when the plan is unlimited."""
        if self.limits.max_staff is None:
            return None
        return max(0, self.limits.max_staff - self._staff(current_count))

    # -------------------------------------------------------------------------
    # Messages
    # -------------------------------------------------------------------------

    def get_staff_limit_message(self, current_count: Any = None) -> LimitMessage | None:
        """Upgrade prompt when staff can't be added; None while under the limit."""
        if self.is_blocked():
            return LimitMessage(
                title="Prueba gratis finalizada",
                message=(
                    "Tu período de prueba ha terminado. "
                    "Elige un plan para continuar usando la plataforma."
                ),
                suggested_plan=PLANS[PlanId.BASIC],
                is_trial_expired=True,
            )

        if self.can_add_staff(current_count):
            return None

        if self.plan.id == PlanId.TRIAL:
            return LimitMessage(
                title="Límite de prueba alcanzado",
                message="Suscríbete al Plan Básico para continuar agregando profesionales.",
                suggested_plan=self.upgrade_suggestion,
            )

        if self.plan.id == PlanId.INDIVIDUAL:
            return LimitMessage(
                title="Límite de 1 profesional",
                message=(
                    "Actualiza al Plan Básico para agregar hasta 20 profesionales a tu equipo."
                ),
                suggested_plan=self.upgrade_suggestion,
            )

        if self.plan.id == PlanId.BASIC:
            return LimitMessage(
                title="Límite de 20 profesionales",
                message="Actualiza al Plan Profesional para agregar hasta 50 profesionales.",
                suggested_plan=self.upgrade_suggestion,
            )

        return LimitMessage(
            title="Límite alcanzado",
            message="Contacta a soporte para aumentar tu límite de profesionales.",
            suggested_plan=None,
        )

    def get_trial_message(self) -> TrialMessage | None:
        """Trial banner by remaining days; None for subscribed businesses."""
        if self.trial_status == TrialStatus.SUBSCRIBED:
            return None

        days = self.remaining_trial_days
        if self.trial_expired or days <= 0:
            return TrialMessage(
                type=TrialMessageType.EXPIRED,
                title="Prueba finalizada",
                message="Tu prueba gratis ha finalizado. Elige un plan para continuar.",
                urgent=True,
            )

        if days <= TRIAL_WARNING_DAYS:
            plural = "" if days == 1 else "s"
            return TrialMessage(
                type=TrialMessageType.WARNING,
                title=f"Tu prueba termina en {days} día{plural}",
                message="Elige un plan ahora para no perder acceso.",
                urgent=True,
            )

        return TrialMessage(
            type=TrialMessageType.INFO,
            title=f"{days} días restantes de prueba",
            message="Explora todas las funciones. Cuando estés listo, elige un plan.",
            urgent=False,
        )

    def get_feature_upsell_message(self, feature: str) -> UpsellMessage | None:
        return get_feature_upsell_message(feature)

    def to_dict(self) -> dict:
        """Every decision for the bound usage, JSON-safe."""
        staff_message = self.get_staff_limit_message()
        trial_message = self.get_trial_message()
        upgrade = self.upgrade_suggestion
        return {
            "plan_id": self.plan.id.value,
            "trial_status": self.trial_status.value,
            "trial_ends_at": self.trial_ends_at.isoformat() if self.trial_ends_at else None,
            "remaining_trial_days": self.remaining_trial_days,
            "is_blocked": self.is_blocked(),
            "can_add_staff": self.can_add_staff(),
            "can_add_service": self.can_add_service(),
            "can_add_appointment": self.can_add_appointment(),
            "can_send_campaigns": self.can_send_campaigns(),
            "can_export_reports": self.can_export_reports(),
            "can_customize_branding": self.can_customize_branding(),
            "can_use_email_reminders": self.can_use_email_reminders(),
            "can_use_sms_reminders": self.can_use_sms_reminders(),
            "remaining_staff_slots": self.get_remaining_staff_slots(),
            "staff_limit_message": staff_message.to_dict() if staff_message else None,
            "trial_message": trial_message.to_dict() if trial_message else None,
            "upgrade_suggestion": upgrade.id.value if upgrade else None,
            "limits": self.limits.to_dict(),
        }


def evaluate_plan_policy(
    plan_id: Any,
    trial_ends_at: Any = None,
    now: Any = None,
    usage_counts: UsageCounts | Mapping | None = None,
) -> PlanPolicy:
    """Policy for a business's plan, trial window and usage at `now`."""
    policy = PlanPolicy(plan_id, trial_ends_at, now, usage_counts)
    if policy.is_blocked():
        logger.info(
            "Trial expired; all plan actions blocked",
            extra={"plan_id": policy.plan_id.value},
        )
    return policy
