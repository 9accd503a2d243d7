"""
Observability module: structured logging and tenant context.

Usage:
    from agenda_core.observability import get_logger, BusinessContext

    logger = get_logger(__name__)

    with BusinessContext("biz-123"):
        logger.info("Recomputing client intelligence")
"""

from .context import BusinessContext, get_business_id, set_business_id
from .logging import HumanFormatter, JSONFormatter, configure_logging, get_logger

__all__ = [
    "BusinessContext",
    "HumanFormatter",
    "JSONFormatter",
    "configure_logging",
    "get_business_id",
    "get_logger",
    "set_business_id",
]
