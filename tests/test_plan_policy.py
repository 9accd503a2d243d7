"""
Tests for the plan policy engine — trial gating and limit enforcement.
"""

from datetime import timedelta

import pytest

from agenda_core import evaluate_plan_policy
from agenda_core.plans import (
    PlanId,
    PlanPolicy,
    TrialMessageType,
    TrialStatus,
    UsageCounts,
    get_feature_upsell_message,
    resolve_trial_status,
)

ALL_CHECKS = (
    "can_add_staff",
    "can_add_service",
    "can_add_appointment",
    "can_send_campaigns",
    "can_export_reports",
    "can_customize_branding",
    "can_use_email_reminders",
    "can_use_sms_reminders",
)


class TestTrialStatus:
    def test_on_trial(self, now):
        assert resolve_trial_status("trial", now + timedelta(days=3), now) == TrialStatus.ON_TRIAL

    def test_expired(self, now):
        assert (
            resolve_trial_status("trial", now - timedelta(seconds=1), now)
            == TrialStatus.TRIAL_EXPIRED
        )

    def test_trial_without_end_is_on_trial(self, now):
        assert resolve_trial_status("trial", None, now) == TrialStatus.ON_TRIAL

    def test_paid_plan_is_subscribed_even_with_stale_trial_fields(self, now):
        status = resolve_trial_status("basic", now - timedelta(days=30), now)
        assert status == TrialStatus.SUBSCRIBED


class TestExpiredTrial:
    @pytest.fixture
    def policy(self, now):
        return evaluate_plan_policy("trial", now - timedelta(days=1), now)

    def test_blocked(self, policy):
        assert policy.is_blocked()
        assert policy.can_add_staff(0) is False

    def test_every_check_denied_despite_generous_limits(self, policy):
        assert policy.limits.can_send_campaigns
        for check in ALL_CHECKS:
            assert getattr(policy, check)() is False, check

    def test_trial_message_expired(self, policy):
        message = policy.get_trial_message()
        assert message.type == TrialMessageType.EXPIRED
        assert message.urgent

    def test_staff_message_asks_to_subscribe(self, policy):
        message = policy.get_staff_limit_message()
        assert message.title == "Prueba gratis finalizada"
        assert message.suggested_plan.id == PlanId.BASIC
        assert message.is_trial_expired


class TestStaffLimits:
    def test_basic_at_limit(self, now):
        policy = evaluate_plan_policy("basic", None, now)
        assert policy.can_add_staff(20) is False
        assert policy.get_remaining_staff_slots(20) == 0
        message = policy.get_staff_limit_message(20)
        assert message.title == "Límite de 20 profesionales"
        assert message.suggested_plan.id == PlanId.PROFESSIONAL

    def test_basic_under_limit(self, now):
        policy = evaluate_plan_policy("basic", None, now)
        assert policy.can_add_staff(19)
        assert policy.get_remaining_staff_slots(19) == 1
        assert policy.get_staff_limit_message(19) is None

    def test_individual_at_limit(self, now):
        message = evaluate_plan_policy("individual", None, now).get_staff_limit_message(1)
        assert message.title == "Límite de 1 profesional"
        assert message.suggested_plan.id == PlanId.BASIC

    def test_trial_at_limit(self, now):
        policy = evaluate_plan_policy("trial", now + timedelta(days=5), now)
        message = policy.get_staff_limit_message(20)
        assert message.title == "Límite de prueba alcanzado"
        assert message.suggested_plan.id == PlanId.INDIVIDUAL
        assert not message.is_trial_expired

    def test_professional_at_limit_contacts_support(self, now):
        message = evaluate_plan_policy("professional", None, now).get_staff_limit_message(50)
        assert message.title == "Límite alcanzado"
        assert message.suggested_plan is None

    def test_remaining_never_negative(self, now):
        assert evaluate_plan_policy("individual", None, now).get_remaining_staff_slots(5) == 0

    def test_enterprise_unlimited(self, now):
        policy = evaluate_plan_policy("enterprise", None, now)
        assert policy.can_add_staff(10_000)
        assert policy.get_remaining_staff_slots(10_000) is None
        assert policy.get_staff_limit_message(10_000) is None


class TestOtherLimits:
    def test_services(self, now):
        policy = evaluate_plan_policy("basic", None, now)
        assert policy.can_add_service(49)
        assert not policy.can_add_service(50)
        assert evaluate_plan_policy("professional", None, now).can_add_service(5_000)

    def test_monthly_appointments(self, now):
        policy = evaluate_plan_policy("individual", None, now)
        assert policy.can_add_appointment(199)
        assert not policy.can_add_appointment(200)

    def test_individual_features(self, now):
        policy = evaluate_plan_policy("individual", None, now)
        assert not policy.can_send_campaigns()
        assert not policy.can_use_sms_reminders()
        assert policy.can_use_email_reminders()
        assert policy.can_export_reports()
        assert policy.can_customize_branding()


class TestUsageCounts:
    def test_bound_counts_used_by_default(self, now):
        policy = evaluate_plan_policy("basic", None, now, {"staff": 20, "services": 3})
        assert not policy.can_add_staff()
        assert policy.can_add_service()
        assert policy.get_staff_limit_message() is not None

    def test_explicit_count_overrides_bound(self, now):
        policy = evaluate_plan_policy("basic", None, now, UsageCounts(staff=20))
        assert policy.can_add_staff(2)

    def test_malformed_counts_read_as_zero(self, now):
        policy = evaluate_plan_policy("individual", None, now, {"staff": "lots"})
        assert policy.usage.staff == 0
        assert policy.can_add_staff()

    def test_camel_case_keys(self):
        usage = UsageCounts.coerce({"staffCount": 4, "appointmentsThisMonth": 9})
        assert usage == UsageCounts(staff=4, services=0, appointments_this_month=9)


class TestUnknownPlan:
    def test_resolves_to_trial_limits(self, now):
        policy = evaluate_plan_policy("gold", None, now)
        assert policy.plan_id == PlanId.TRIAL
        assert policy.can_add_staff(19)
        assert not policy.can_add_staff(20)

    def test_expired_unknown_plan_blocked(self, now):
        assert evaluate_plan_policy("gold", now - timedelta(days=1), now).is_blocked()

    def test_wrongly_cased_id_gets_trial_limits(self, now):
        policy = evaluate_plan_policy("ENTERPRISE", None, now)
        assert policy.plan_id == PlanId.TRIAL
        assert policy.get_remaining_staff_slots(0) == 20


class TestTrialMessage:
    def test_subscribed_has_none(self, now):
        assert evaluate_plan_policy("basic", None, now).get_trial_message() is None

    def test_info(self, now):
        message = evaluate_plan_policy("trial", now + timedelta(days=10), now).get_trial_message()
        assert message.type == TrialMessageType.INFO
        assert message.title == "10 días restantes de prueba"
        assert not message.urgent

    def test_warning_singular(self, now):
        message = evaluate_plan_policy("trial", now + timedelta(days=1), now).get_trial_message()
        assert message.type == TrialMessageType.WARNING
        assert message.title == "Tu prueba termina en 1 día"

    def test_warning_plural(self, now):
        message = evaluate_plan_policy("trial", now + timedelta(days=2), now).get_trial_message()
        assert message.title == "Tu prueba termina en 2 días"

    def test_three_days_is_info(self, now):
        message = evaluate_plan_policy("trial", now + timedelta(days=3), now).get_trial_message()
        assert message.type == TrialMessageType.INFO

    def test_trial_without_end_date(self, now):
        policy = evaluate_plan_policy("trial", None, now)
        assert not policy.is_blocked()
        assert policy.get_trial_message().type == TrialMessageType.EXPIRED


class TestForBusiness:
    def test_reads_business_document(self, now):
        doc = {"plan": "trial", "trialEndsAt": (now - timedelta(days=1)).isoformat()}
        assert PlanPolicy.for_business(doc, now).is_blocked()

    def test_missing_document_is_trial(self, now):
        policy = PlanPolicy.for_business(None, now)
        assert policy.plan_id == PlanId.TRIAL
        assert policy.trial_status == TrialStatus.ON_TRIAL


class TestSnapshot:
    def test_blocked_snapshot(self, now):
        data = evaluate_plan_policy("trial", now - timedelta(days=1), now).to_dict()
        assert data["is_blocked"] is True
        assert data["trial_status"] == "trial_expired"
        assert all(data[check] is False for check in ALL_CHECKS)
        assert data["trial_message"]["type"] == "expired"
        assert data["staff_limit_message"]["suggested_plan"] == "basic"

    def test_subscribed_snapshot(self, now):
        data = evaluate_plan_policy("enterprise", None, now).to_dict()
        assert data["remaining_staff_slots"] is None
        assert data["trial_message"] is None
        assert data["upgrade_suggestion"] is None


class TestFeatureUpsell:
    def test_known_feature(self):
        message = get_feature_upsell_message("campaigns")
        assert message.required_plan == PlanId.BASIC

    def test_reports_needs_individual(self, now):
        policy = evaluate_plan_policy("trial", None, now)
        assert policy.get_feature_upsell_message("reports").required_plan == PlanId.INDIVIDUAL

    def test_unknown_feature(self):
        assert get_feature_upsell_message("teleport") is None
