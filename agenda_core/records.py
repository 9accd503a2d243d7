"""
Records — Agenda Core

Typed views over raw datastore documents: appointments, invoices and the
business subscription document, plus the explicit client identifier.

Documents arrive from the datastore as loosely-typed dicts with camelCase
keys (and, for older documents, the patient* aliases). Conversion never
raises: malformed dates become None, malformed amounts become 0.
"""

import hashlib
import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import StrEnum
from typing import Any, NewType

logger = logging.getLogger(__name__)

ClientId = NewType("ClientId", str)


class AppointmentStatus(StrEnum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    BLOCKED = "blocked"
    PENDING = "pending"


class InvoiceStatus(StrEnum):
    PAID = "paid"
    PENDING = "pending"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


# =============================================================================
# COERCION
# =============================================================================


def parse_datetime(value: Any) -> datetime | None:
    """
    Coerce a stored date into an aware UTC datetime.

    Accepts datetime/date objects, ISO-8601 strings (date-only strings are
    UTC midnight) and timestamp objects exposing to_datetime() or toDate().
    Naive values are read as UTC. Anything else returns None.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text[-1] in "Zz":
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except (ValueError, OverflowError):
            logger.debug("Unparseable date %r", value)
            return None
    else:
        converter = getattr(value, "to_datetime", None) or getattr(value, "toDate", None)
        if not callable(converter):
            logger.debug("Unsupported date type %s", type(value).__name__)
            return None
        try:
            converted = converter()
        except (TypeError, ValueError, OverflowError) as e:
            logger.debug("Timestamp conversion failed: %s", e)
            return None
        if not isinstance(converted, (datetime, date)):
            return None
        return parse_datetime(converted)

    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    try:
        return dt.astimezone(UTC)
    except (ValueError, OverflowError):
        # offset pushes the instant outside the representable range
        logger.debug("Date out of range in UTC %r", value)
        return None


def coerce_amount(value: Any) -> float:
    """Coerce a monetary value to a finite float; anything malformed is 0."""
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        try:
            amount = float(value)
        except OverflowError:
            logger.debug("Amount too large to represent, treating as 0")
            return 0.0
    elif isinstance(value, str):
        try:
            amount = float(value.strip())
        except ValueError:
            logger.debug("Non-numeric amount %r", value)
            return 0.0
    else:
        return 0.0
    return amount if math.isfinite(amount) else 0.0


def coerce_count(value: Any) -> int:
    """Coerce a usage count to a non-negative int; anything malformed is 0."""
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return max(0, value)
    if isinstance(value, float):
        return max(0, int(value)) if math.isfinite(value) else 0
    if isinstance(value, str):
        try:
            return max(0, int(value.strip()))
        except ValueError:
            return 0
    return 0


def _pick(doc: Mapping, *keys: str) -> Any:
    """First non-None value among keys."""
    for key in keys:
        value = doc.get(key)
        if value is not None:
            return value
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


# =============================================================================
# CLIENT IDENTITY
# =============================================================================


def derive_client_id(name: str, phone: str) -> ClientId:
    """
    Derive a stable opaque id from an exact (name, phone) pair.

    Only surrounding whitespace is stripped; different spellings or phone
    formats produce different ids. Reconciling those is a separate process.
    """
    raw = f"{_text(name)}\x1f{_text(phone)}".encode()
    return ClientId("cli-" + hashlib.sha256(raw).hexdigest()[:16])


# =============================================================================
# RECORDS
# =============================================================================


@dataclass(frozen=True)
class Appointment:
    """One booked slot for a client."""

    client_name: str = ""
    client_phone: str = ""
    date: datetime | None = None
    service_name: str = ""
    service_price: float = 0.0
    status: str = AppointmentStatus.SCHEDULED.value
    doctor_name: str = ""
    client_id: ClientId | None = None
    client_email: str = ""

    @property
    def identity(self) -> ClientId:
        return self.client_id or derive_client_id(self.client_name, self.client_phone)

    @classmethod
    def from_dict(cls, doc: Mapping) -> "Appointment":
        client_id = _text(_pick(doc, "clientId", "client_id"))
        return cls(
            client_name=_text(_pick(doc, "clientName", "client_name", "patientName")),
            client_phone=_text(_pick(doc, "clientPhone", "client_phone", "patientPhone")),
            date=parse_datetime(_pick(doc, "date", "appointmentDate", "appointment_date")),
            service_name=_text(_pick(doc, "serviceName", "service_name")),
            service_price=coerce_amount(_pick(doc, "servicePrice", "service_price", "price")),
            status=_text(doc.get("status")) or AppointmentStatus.SCHEDULED.value,
            doctor_name=_text(_pick(doc, "doctorName", "doctor_name")),
            client_id=ClientId(client_id) if client_id else None,
            client_email=_text(_pick(doc, "clientEmail", "client_email", "patientEmail")),
        )


@dataclass(frozen=True)
class Invoice:
    """A billed amount for a client. Only paid invoices count as revenue."""

    client_name: str = ""
    client_phone: str = ""
    total_amount: float = 0.0
    status: str = InvoiceStatus.PENDING.value
    date: datetime | None = None
    client_id: ClientId | None = None
    client_email: str = ""
    service_name: str = ""
    items: tuple[str, ...] = field(default_factory=tuple)

    @property
    def identity(self) -> ClientId:
        return self.client_id or derive_client_id(self.client_name, self.client_phone)

    @property
    def is_paid(self) -> bool:
        return self.status == InvoiceStatus.PAID

    @classmethod
    def from_dict(cls, doc: Mapping) -> "Invoice":
        client_id = _text(_pick(doc, "clientId", "client_id"))
        raw_items = doc.get("items")
        items: tuple[str, ...] = ()
        if isinstance(raw_items, (list, tuple)):
            items = tuple(
                _text(item.get("name")) or "Unknown" if isinstance(item, Mapping) else _text(item)
                for item in raw_items
            )
        return cls(
            client_name=_text(_pick(doc, "clientName", "client_name", "patientName")),
            client_phone=_text(_pick(doc, "clientPhone", "client_phone", "patientPhone")),
            total_amount=coerce_amount(_pick(doc, "totalAmount", "total_amount", "amount")),
            status=_text(doc.get("status")) or InvoiceStatus.PENDING.value,
            date=parse_datetime(_pick(doc, "date", "createdAt", "created_at")),
            client_id=ClientId(client_id) if client_id else None,
            client_email=_text(_pick(doc, "clientEmail", "client_email", "patientEmail")),
            service_name=_text(_pick(doc, "serviceName", "service_name")),
            items=items,
        )


@dataclass(frozen=True)
class BusinessSubscription:
    """Subscription fields of a business document."""

    plan_id: str = ""
    trial_started_at: datetime | None = None
    trial_ends_at: datetime | None = None

    @classmethod
    def from_dict(cls, doc: Mapping | None) -> "BusinessSubscription":
        doc = doc or {}
        return cls(
            plan_id=_text(_pick(doc, "plan", "planId", "plan_id")),
            trial_started_at=parse_datetime(_pick(doc, "trialStartedAt", "trial_started_at")),
            trial_ends_at=parse_datetime(_pick(doc, "trialEndsAt", "trial_ends_at")),
        )


def as_appointments(items: Iterable[Any] | None) -> list[Appointment]:
    """Normalize a mix of Appointment records and raw documents."""
    result = []
    for item in items or ():
        if isinstance(item, Appointment):
            result.append(item)
        elif isinstance(item, Mapping):
            result.append(Appointment.from_dict(item))
        else:
            logger.debug("Skipping non-appointment item of type %s", type(item).__name__)
    return result


def as_invoices(items: Iterable[Any] | None) -> list[Invoice]:
    """Normalize a mix of Invoice records and raw documents."""
    result = []
    for item in items or ():
        if isinstance(item, Invoice):
            result.append(item)
        elif isinstance(item, Mapping):
            result.append(Invoice.from_dict(item))
        else:
            logger.debug("Skipping non-invoice item of type %s", type(item).__name__)
    return result


def utc_now() -> datetime:
    return datetime.now(UTC)


def resolve_now(now: Any = None) -> datetime:
    """Reference instant for a computation; defaults to the current UTC time."""
    if now is None:
        return utc_now()
    parsed = parse_datetime(now)
    if parsed is None:
        logger.warning("Unusable reference time %r, using current time", now)
        return utc_now()
    return parsed
