"""
Client Intelligence (RFM) layer.

- RFM metrics from appointment/invoice history (rfm.py)
- Behavioral tags over the metrics (tags.py)
- Suggested retention/upsell actions per tag (suggestions.py)
- compute_intelligence() facade (engine.py)
"""

from .engine import ClientIntelligence, compute_intelligence
from .rfm import RFMMetrics, compute_rfm_metrics
from .suggestions import (
    SUGGESTION_FOR_TAG,
    Suggestion,
    SuggestionPriority,
    SuggestionType,
    generate_suggestions,
)
from .tags import (
    TAG_CATALOG,
    Tag,
    TagId,
    TagThresholds,
    classify_tags,
    load_thresholds,
    reload_thresholds,
)

__all__ = [
    "ClientIntelligence",
    "RFMMetrics",
    "SUGGESTION_FOR_TAG",
    "Suggestion",
    "SuggestionPriority",
    "SuggestionType",
    "TAG_CATALOG",
    "Tag",
    "TagId",
    "TagThresholds",
    "classify_tags",
    "compute_intelligence",
    "compute_rfm_metrics",
    "generate_suggestions",
    "load_thresholds",
    "reload_thresholds",
]
