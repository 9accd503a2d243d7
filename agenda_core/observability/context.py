"""
Tenant context for log correlation.

Every recomputation runs on behalf of one business (tenant). The business
id is kept in a context variable so log lines emitted anywhere below can
be attributed without threading the id through every call.
"""

import contextvars
from typing import Optional

_business_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "business_id", default=None
)


def get_business_id() -> Optional[str]:
    """Get the current business id from context."""
    return _business_id_var.get()


def set_business_id(business_id: str) -> contextvars.Token:
    """Set the business id in context. Returns token for reset."""
    return _business_id_var.set(business_id)


class BusinessContext:
    """
    Context manager for tenant-scoped computations.

    Usage:
        with BusinessContext("biz-123"):
            intel = compute_intelligence(appointments, invoices)
            # All logs within this block carry business_id=biz-123
    """

    def __init__(self, business_id: str):
        self.business_id = business_id
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> "BusinessContext":
        self._token = set_business_id(self.business_id)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _business_id_var.reset(self._token)
            self._token = None
