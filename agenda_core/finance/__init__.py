"""
Revenue and activity metrics for the business dashboard.
"""

from .metrics import (
    BusinessMetrics,
    FinancialMetrics,
    compute_business_metrics,
    compute_financial_metrics,
)

__all__ = [
    "BusinessMetrics",
    "FinancialMetrics",
    "compute_business_metrics",
    "compute_financial_metrics",
]
