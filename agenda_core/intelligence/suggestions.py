"""
Suggestion Generator — Agenda Core

Maps behavioral tags to recommended retention/upsell actions. One
suggestion per tag, in tag order; no side effects.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

from .tags import Tag, TagId


class SuggestionType(StrEnum):
    REACTIVATION = "reactivation"
    REWARD = "reward"
    VIP = "vip"
    WELCOME = "welcome"


class SuggestionPriority(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"


@dataclass(frozen=True)
class Suggestion:
    type: SuggestionType
    title: str
    action: str
    priority: SuggestionPriority

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "title": self.title,
            "action": self.action,
            "priority": self.priority.value,
        }


SUGGESTION_FOR_TAG: dict[TagId, Suggestion] = {
    TagId.LOST: Suggestion(
        type=SuggestionType.REACTIVATION,
        title="Reactivar Cliente",
        action="Enviar WhatsApp de promoción",
        priority=SuggestionPriority.HIGH,
    ),
    TagId.LOYAL: Suggestion(
        type=SuggestionType.REWARD,
        title="Premiar Fidelidad",
        action="Ofrecer descuento en próximo servicio",
        priority=SuggestionPriority.MEDIUM,
    ),
    TagId.WHALE: Suggestion(
        type=SuggestionType.VIP,
        title="Trato VIP",
        action="Ofrecer cita prioritaria o servicio premium",
        priority=SuggestionPriority.HIGH,
    ),
    TagId.NEW: Suggestion(
        type=SuggestionType.WELCOME,
        title="Seguimiento",
        action="Consultar satisfacción post-servicio",
        priority=SuggestionPriority.MEDIUM,
    ),
}


def generate_suggestions(tags: Iterable[Tag | TagId | str]) -> tuple[Suggestion, ...]:
    """One suggestion per recognised tag, following the tags' order."""
    suggestions = []
    seen = set()
    for tag in tags:
        tag_id = tag.id if isinstance(tag, Tag) else tag
        try:
            tag_id = TagId(tag_id)
        except ValueError:
            continue
        if tag_id in seen:
            continue
        seen.add(tag_id)
        suggestions.append(SUGGESTION_FOR_TAG[tag_id])
    return tuple(suggestions)
