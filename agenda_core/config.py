"""
Centralized configuration for Agenda Core.

Values that vary by deployment belong here.
Override via environment variables where marked.
"""

import os

# ============================================================
# Logging
# ============================================================

LOG_LEVEL: str = os.environ.get("AGENDA_LOG_LEVEL", "INFO")
"""Root log level applied by configure_logging()."""

_log_json = os.environ.get("AGENDA_LOG_JSON", "").strip().lower()
LOG_JSON: bool | None = None if not _log_json else _log_json in ("1", "true", "yes")
"""Force JSON logs on/off. Unset means auto-detect (JSON when stderr is not a TTY)."""

# ============================================================
# Billing / plans
# ============================================================

CURRENCY: str = os.environ.get("AGENDA_CURRENCY", "MXN")
"""Currency code shown in plan prices."""

TRIAL_DURATION_DAYS: int = int(os.environ.get("AGENDA_TRIAL_DAYS", "7"))
"""Length of the free trial every new business starts with."""

# ============================================================
# Client intelligence
# ============================================================

VIP_THRESHOLD: float = float(os.environ.get("AGENDA_VIP_THRESHOLD", "1000000"))
"""Paid total at which a client gets the 'vip' badge in the client directory."""

THRESHOLDS_PATH: str | None = os.environ.get("AGENDA_THRESHOLDS_PATH") or None
"""Alternate tag thresholds YAML. Unset uses intelligence/thresholds.yaml."""
