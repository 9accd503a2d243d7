"""
Plans and plan-limit gating.

Usage:
    from agenda_core.plans import evaluate_plan_policy

    policy = evaluate_plan_policy("basic", trial_ends_at=None, usage_counts={"staff": 20})
    policy.can_add_staff()            # False
    policy.get_staff_limit_message()  # LimitMessage(title="Límite de 20 profesionales", ...)
"""

from .catalog import (
    PLANS,
    TRIAL_DURATION_DAYS,
    UPGRADE_ORDER,
    Plan,
    PlanId,
    PlanLimits,
    calculate_trial_end_date,
    format_plan_price,
    get_plan,
    get_plan_limits,
    get_upgrade_suggestion,
    is_trial_expired,
    new_business_plan,
    remaining_trial_days,
    resolve_plan_id,
)
from .policy import (
    FEATURE_UPSELL_MESSAGES,
    LimitMessage,
    PlanPolicy,
    TrialMessage,
    TrialMessageType,
    TrialStatus,
    UpsellMessage,
    UsageCounts,
    evaluate_plan_policy,
    get_feature_upsell_message,
    resolve_trial_status,
)

__all__ = [
    "FEATURE_UPSELL_MESSAGES",
    "LimitMessage",
    "PLANS",
    "Plan",
    "PlanId",
    "PlanLimits",
    "PlanPolicy",
    "TRIAL_DURATION_DAYS",
    "TrialMessage",
    "TrialMessageType",
    "TrialStatus",
    "UPGRADE_ORDER",
    "UpsellMessage",
    "UsageCounts",
    "calculate_trial_end_date",
    "evaluate_plan_policy",
    "format_plan_price",
    "get_feature_upsell_message",
    "get_plan",
    "get_plan_limits",
    "get_upgrade_suggestion",
    "is_trial_expired",
    "new_business_plan",
    "remaining_trial_days",
    "resolve_plan_id",
    "resolve_trial_status",
]
