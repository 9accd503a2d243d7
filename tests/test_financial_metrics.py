"""
Tests for dashboard revenue and activity metrics.
"""

from datetime import UTC, datetime

import pytest

from agenda_core.finance import compute_business_metrics, compute_financial_metrics
from tests.fixtures import appointment_doc, days_ago, invoice_doc


def on(day, month=6):
    return datetime(2026, month, day, 15, tzinfo=UTC)


@pytest.fixture
def june_invoices():
    return [
        invoice_doc(1000, when=on(2), serviceName="Corte"),
        invoice_doc(500, when=on(2), items=[{"name": "Tinte"}, {"name": "Corte"}]),
        invoice_doc(300, when=on(10)),
        invoice_doc(999, status="pending", when=on(11)),
        invoice_doc(700, when=on(30, month=5)),
        invoice_doc(400, when=None),
    ]


class TestFinancialMetrics:
    def test_month_to_date_paid_only(self, june_invoices, now):
        metrics = compute_financial_metrics(june_invoices, now)
        assert metrics.total_revenue == 1800
        assert metrics.total_invoices == 3
        assert metrics.average_ticket == pytest.approx(600)

    def test_daily_revenue_sorted(self, june_invoices, now):
        metrics = compute_financial_metrics(june_invoices, now)
        assert metrics.daily_revenue == [("2026-06-02", 1500), ("2026-06-10", 300)]

    def test_top_services(self, june_invoices, now):
        metrics = compute_financial_metrics(june_invoices, now)
        assert metrics.top_services == [("Corte", 2), ("Tinte", 1), ("General", 1)]

    def test_top_services_capped_at_five(self, now):
        invoices = [invoice_doc(10, serviceName=f"S{i}") for i in range(8)]
        assert len(compute_financial_metrics(invoices, now).top_services) == 5

    def test_amount_alias(self, now):
        invoices = [{"amount": 250, "status": "paid", "date": now.isoformat()}]
        assert compute_financial_metrics(invoices, now).total_revenue == 250

    def test_empty(self, now):
        metrics = compute_financial_metrics([], now)
        assert metrics.total_revenue == 0
        assert metrics.average_ticket == 0
        assert metrics.daily_revenue == []
        assert metrics.top_services == []

    def test_to_dict(self, june_invoices, now):
        data = compute_financial_metrics(june_invoices, now).to_dict()
        assert data["daily_revenue"][0] == {"date": "2026-06-02", "amount": 1500}
        assert data["top_services"][0] == {"name": "Corte", "value": 2}


class TestBusinessMetrics:
    def test_snapshot(self):
        appts = [
            appointment_doc(days_ago(1)),
            appointment_doc(days_ago(2)),
            appointment_doc(days_ago(3), clientName="Luis", clientPhone="77"),
        ]
        metrics = compute_business_metrics(appts)
        assert metrics.appointments == 3
        assert metrics.revenue == 2400
        assert metrics.active_clients == 2

    def test_limit_keeps_most_recent(self):
        appts = [
            appointment_doc(days_ago(30), clientName="Luis", clientPhone="77"),
            appointment_doc(days_ago(1)),
            appointment_doc(days_ago(2)),
        ]
        metrics = compute_business_metrics(appts, limit=2)
        assert metrics.appointments == 2
        assert metrics.active_clients == 1

    def test_empty(self):
        assert compute_business_metrics([]).to_dict() == {
            "appointments": 0,
            "revenue": 0,
            "active_clients": 0,
        }
