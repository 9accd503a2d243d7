"""
Tag Classifier — Agenda Core

Behavioral tags derived from an RFM snapshot. Each tag is an independent
predicate over the same immutable metrics; a client may carry any
combination (a 'whale' going 'lost' is the case worth noticing).

Evaluation order is fixed: lost, loyal, whale, new.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import StrEnum
from pathlib import Path

import yaml

from agenda_core import config

from .rfm import RFMMetrics

logger = logging.getLogger(__name__)


class TagId(StrEnum):
    LOST = "lost"
    LOYAL = "loyal"
    WHALE = "whale"
    NEW = "new"


@dataclass(frozen=True)
class Tag:
    id: TagId
    label: str
    color: str
    description: str

    def to_dict(self) -> dict:
        return {
            "id": self.id.value,
            "label": self.label,
            "color": self.color,
            "description": self.description,
        }


@dataclass(frozen=True)
class TagThresholds:
    lost_min_recency_days: int = 60
    loyal_min_visits_this_year: int = 5
    whale_min_monetary_total: float = 1_000_000
    new_visits_total: int = 1
    new_max_recency_days: int = 30


DEFAULT_THRESHOLDS = TagThresholds()

THRESHOLDS_PATH = Path(__file__).parent / "thresholds.yaml"

# yaml section -> key -> TagThresholds field
_YAML_FIELDS = {
    ("lost", "min_recency_days"): "lost_min_recency_days",
    ("loyal", "min_visits_this_year"): "loyal_min_visits_this_year",
    ("whale", "min_monetary_total"): "whale_min_monetary_total",
    ("new", "visits_total"): "new_visits_total",
    ("new", "max_recency_days"): "new_max_recency_days",
}


def load_thresholds(path: Path | str | None = None) -> TagThresholds:
    """
    Load tag thresholds from YAML.

    A missing or malformed file, or a non-numeric value, falls back to the
    built-in defaults with a warning.
    """
    if path is None:
        path = config.THRESHOLDS_PATH or THRESHOLDS_PATH
    path = Path(path)

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to load tag thresholds from %s: %s", path, e)
        return DEFAULT_THRESHOLDS

    tags = data.get("tags") if isinstance(data, dict) else None
    if not isinstance(tags, dict):
        logger.warning("No 'tags' section in %s, using defaults", path)
        return DEFAULT_THRESHOLDS

    values = {}
    for (section, key), field_name in _YAML_FIELDS.items():
        section_cfg = tags.get(section)
        if not isinstance(section_cfg, dict):
            continue
        raw = section_cfg.get(key)
        if raw is None:
            continue
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            logger.warning("Ignoring non-numeric threshold tags.%s.%s=%r", section, key, raw)
            continue
        values[field_name] = raw

    return replace(DEFAULT_THRESHOLDS, **values)


THRESHOLDS = load_thresholds()


def reload_thresholds(path: Path | str | None = None) -> TagThresholds:
    """Reload thresholds from config file (call after editing thresholds.yaml)."""
    global THRESHOLDS
    THRESHOLDS = load_thresholds(path)
    return THRESHOLDS


# =============================================================================
# TAG CATALOG
# =============================================================================

TAG_CATALOG: dict[TagId, Tag] = {
    TagId.LOST: Tag(
        id=TagId.LOST,
        label="Cliente Perdido",
        color="red",
        description="Inactivo por más de 60 días",
    ),
    TagId.LOYAL: Tag(
        id=TagId.LOYAL,
        label="Cliente Fiel",
        color="blue",
        description="Más de 5 visitas este año",
    ),
    TagId.WHALE: Tag(
        id=TagId.WHALE,
        label="Ballena",
        color="purple",
        description="Alto volumen de facturación",
    ),
    TagId.NEW: Tag(
        id=TagId.NEW,
        label="Nuevo",
        color="cyan",
        description="Primera visita reciente",
    ),
}


def is_lost(m: RFMMetrics, t: TagThresholds) -> bool:
    return m.recency_days is not None and m.recency_days > t.lost_min_recency_days


def is_loyal(m: RFMMetrics, t: TagThresholds) -> bool:
    return m.frequency_this_year > t.loyal_min_visits_this_year


def is_whale(m: RFMMetrics, t: TagThresholds) -> bool:
    return m.monetary_total > t.whale_min_monetary_total


def is_new(m: RFMMetrics, t: TagThresholds) -> bool:
    return (
        m.frequency_total == t.new_visits_total
        and m.recency_days is not None
        and m.recency_days <= t.new_max_recency_days
    )


TAG_RULES: tuple[tuple[TagId, Callable[[RFMMetrics, TagThresholds], bool]], ...] = (
    (TagId.LOST, is_lost),
    (TagId.LOYAL, is_loyal),
    (TagId.WHALE, is_whale),
    (TagId.NEW, is_new),
)


def classify_tags(
    metrics: RFMMetrics,
    thresholds: TagThresholds | None = None,
) -> tuple[Tag, ...]:
    """Every tag whose rule holds for the metrics, in rule order."""
    t = thresholds or THRESHOLDS
    return tuple(TAG_CATALOG[tag_id] for tag_id, rule in TAG_RULES if rule(metrics, t))
