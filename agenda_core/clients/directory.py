"""
Client Directory — Agenda Core

Builds the client list for a business from its appointments and invoices.
There is no client collection in the datastore: a client is the set of
records sharing a ClientId (explicit, or derived from the exact
name + phone pair).

Badges:
- vip: paid total >= VIP_THRESHOLD
- new: nothing paid yet and at most one appointment
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from agenda_core import config
from agenda_core.intelligence import ClientIntelligence, compute_intelligence
from agenda_core.records import (
    Appointment,
    ClientId,
    Invoice,
    InvoiceStatus,
    as_appointments,
    as_invoices,
    resolve_now,
    utc_now,
)

logger = logging.getLogger(__name__)

VIP_THRESHOLD = config.VIP_THRESHOLD


class ClientBadge(StrEnum):
    VIP = "vip"
    NEW = "new"


@dataclass
class ClientProfile:
    """Aggregated view of one client across appointments and invoices."""

    client_id: ClientId
    name: str
    phone: str = ""
    email: str = ""
    appointments: list[Appointment] = field(default_factory=list)
    invoices: list[Invoice] = field(default_factory=list)
    notes: str = ""
    now: datetime | None = None

    @property
    def reference_time(self) -> datetime:
        return self.now if self.now is not None else utc_now()

    @property
    def total_spent(self) -> float:
        return sum(inv.total_amount for inv in self.invoices if inv.is_paid)

    @property
    def pending_payments(self) -> float:
        return sum(inv.total_amount for inv in self.invoices if inv.status == InvoiceStatus.PENDING)

    def _dated(self) -> list[datetime]:
        return [a.date for a in self.appointments if a.date is not None]

    @property
    def last_visit(self) -> datetime | None:
        now = self.reference_time
        past = [d for d in self._dated() if d <= now]
        return max(past) if past else None

    @property
    def future_appointments(self) -> int:
        now = self.reference_time
        return sum(1 for d in self._dated() if d > now)

    @property
    def past_appointments(self) -> int:
        now = self.reference_time
        return sum(1 for d in self._dated() if d <= now)

    @property
    def badge(self) -> ClientBadge | None:
        spent = self.total_spent
        if spent >= VIP_THRESHOLD:
            return ClientBadge.VIP
        if spent == 0 and len(self.appointments) <= 1:
            return ClientBadge.NEW
        return None

    def intelligence(self, now: Any = None) -> ClientIntelligence:
        return compute_intelligence(self.appointments, self.invoices, now or self.now)

    def to_dict(self) -> dict:
        last_visit = self.last_visit
        badge = self.badge
        return {
            "client_id": self.client_id,
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "total_spent": round(self.total_spent, 2),
            "pending_payments": round(self.pending_payments, 2),
            "last_visit": last_visit.isoformat() if last_visit else None,
            "appointments_count": len(self.appointments),
            "invoices_count": len(self.invoices),
            "future_appointments": self.future_appointments,
            "past_appointments": self.past_appointments,
            "badge": badge.value if badge else None,
            "notes": self.notes,
        }


def _note_text(notes: Mapping | None, client_id: ClientId) -> str:
    if not notes:
        return ""
    entry = notes.get(client_id)
    if isinstance(entry, Mapping):
        entry = entry.get("notes")
    return str(entry) if entry else ""


def build_client_directory(
    appointments: Iterable[Any] | None,
    invoices: Iterable[Any] | None,
    now: Any = None,
    notes: Mapping | None = None,
) -> list[ClientProfile]:
    """
    Group a business's records into client profiles, biggest spenders first.

    Records without a client name are skipped. `notes` maps ClientId to a
    note string or a {"notes": ...} document.
    """
    now = resolve_now(now)
    profiles: dict[ClientId, ClientProfile] = {}
    skipped = 0

    def profile_for(record: Appointment | Invoice) -> ClientProfile:
        client_id = record.identity
        profile = profiles.get(client_id)
        if profile is None:
            profile = ClientProfile(
                client_id=client_id,
                name=record.client_name,
                phone=record.client_phone,
                email=record.client_email,
                notes=_note_text(notes, client_id),
                now=now,
            )
            profiles[client_id] = profile
        elif not profile.email and record.client_email:
            profile.email = record.client_email
        return profile

    for appt in as_appointments(appointments):
        if not appt.client_name:
            skipped += 1
            continue
        profile_for(appt).appointments.append(appt)

    for inv in as_invoices(invoices):
        if not inv.client_name:
            skipped += 1
            continue
        profile_for(inv).invoices.append(inv)

    if skipped:
        logger.debug("Skipped %d record(s) without a client name", skipped)

    return sorted(profiles.values(), key=lambda p: p.total_spent, reverse=True)


def search_clients(profiles: Iterable[ClientProfile], term: str | None) -> list[ClientProfile]:
    """Case-insensitive match on name or email; substring match on phone."""
    profiles = list(profiles)
    if not term:
        return profiles
    needle = term.lower()
    return [
        p
        for p in profiles
        if needle in p.name.lower() or term in p.phone or (p.email and needle in p.email.lower())
    ]


def directory_stats(profiles: Iterable[ClientProfile]) -> dict:
    profiles = list(profiles)
    badges = [p.badge for p in profiles]
    return {
        "total": len(profiles),
        "vip": sum(1 for b in badges if b == ClientBadge.VIP),
        "new": sum(1 for b in badges if b == ClientBadge.NEW),
        "total_revenue": sum(p.total_spent for p in profiles),
    }
