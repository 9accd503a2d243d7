"""
Tests for compute_intelligence — the metrics → tags → suggestions pipeline.
"""

from datetime import timedelta

from agenda_core import compute_intelligence
from agenda_core.intelligence import SuggestionPriority, SuggestionType, TagId
from tests.fixtures import appointment_doc, days_ago, invoice_doc


class TestComputeIntelligence:
    def test_empty_client(self, now):
        intel = compute_intelligence([], [], now)
        assert intel.tags == ()
        assert intel.suggestions == ()
        assert intel.monetary == {"total": 0, "avg_ticket": 0}

    def test_inactive_client_is_lost(self, now):
        intel = compute_intelligence([appointment_doc(days_ago(70))], [], now)
        assert intel.recency["days"] == 70
        assert TagId.LOST in [t.id for t in intel.tags]
        assert any(
            s.type == SuggestionType.REACTIVATION and s.priority == SuggestionPriority.HIGH
            for s in intel.suggestions
        )

    def test_big_first_visit_is_whale_and_new(self, now):
        intel = compute_intelligence(
            [appointment_doc(days_ago(3))],
            [invoice_doc(2_000_000)],
            now,
        )
        assert intel.tag_ids == ["whale", "new"]
        assert [s.type for s in intel.suggestions] == [SuggestionType.VIP, SuggestionType.WELCOME]

    def test_invoice_only_client_is_whale_without_new(self, now):
        intel = compute_intelligence([], [invoice_doc(2_000_000)], now)
        assert intel.tag_ids == ["whale"]

    def test_prebooked_visit_does_not_hide_inactivity(self, now):
        appts = [appointment_doc(days_ago(120)), appointment_doc(now + timedelta(days=7))]
        intel = compute_intelligence(appts, [], now)
        assert intel.tag_ids == ["lost"]

    def test_loyal_client(self, now):
        appts = [appointment_doc(days_ago(d)) for d in (5, 20, 35, 50, 65, 80)]
        intel = compute_intelligence(appts, [invoice_doc(600)], now)
        assert intel.tag_ids == ["loyal"]
        assert intel.frequency["this_year"] == 6
        assert intel.monetary["avg_ticket"] == 100

    def test_to_dict_shape(self, now):
        intel = compute_intelligence([appointment_doc(days_ago(70))], [invoice_doc(100)], now)
        data = intel.to_dict()
        assert set(data) == {"recency", "frequency", "monetary", "tags", "suggestions"}
        assert data["recency"]["days"] == 70
        assert data["recency"]["last_date"] == days_ago(70).isoformat()
        assert data["tags"][0]["id"] == "lost"
        assert data["suggestions"][0]["type"] == "reactivation"

    def test_repeatable(self, now):
        appts = [appointment_doc(days_ago(d)) for d in (1, 61)]
        first = compute_intelligence(appts, [invoice_doc(50)], now)
        second = compute_intelligence(appts, [invoice_doc(50)], now)
        assert first == second
