"""
Quotation Document Issuer
Document numbering, snapshot freezing and the status state machine

    draft --send--> sent --accept--> accepted
                    sent --reject--> rejected

Documents are frozen values: a transition returns a new document and a
change to line items means issuing a new document.
"""

import logging
import random
import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from typing import Callable, Optional, Sequence

from .errors import StateConflictError, ValidationError
from .models import (
    AutomationType,
    BOQLineItem,
    ClientInfo,
    QuotationAction,
    QuotationDocument,
    QuotationStatus,
    Totals,
)
from .totals import items_cost, summarize_boq

logger = logging.getLogger(__name__)

DEFAULT_NUMBER_PREFIX = "PI"
DEFAULT_VALIDITY_DAYS = 30


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DocumentNumberGenerator:
    """
    Draws human-readable numbers such as PI-20261019-0427.

    A single draw can collide; callers must confirm uniqueness against the
    document store and draw again when it is taken.
    """

    def __init__(
        self,
        prefix: str = DEFAULT_NUMBER_PREFIX,
        suffix_digits: int = 4,
        rng: Optional[random.Random] = None,
        today: Callable[[], date] = None,
    ):
        if suffix_digits < 1:
            raise ValueError("suffix_digits must be at least 1")
        self.prefix = prefix
        self.suffix_digits = suffix_digits
        self._rng = rng or random.SystemRandom()
        self._today = today or (lambda: utc_now().date())

    def __call__(self) -> str:
        suffix = self._rng.randrange(10 ** self.suffix_digits)
        return f"{self.prefix}-{self._today():%Y%m%d}-{suffix:0{self.suffix_digits}d}"


@dataclass(frozen=True)
class QuotationSnapshot:
    """Everything frozen into a quotation at issue time"""
    project_id: str
    line_items: Sequence[BOQLineItem]
    totals: Totals
    automation_type: AutomationType
    client: ClientInfo = field(default_factory=ClientInfo)
    notes: Optional[str] = None
    validity_days: int = DEFAULT_VALIDITY_DAYS


@dataclass(frozen=True)
class TransitionResult:
    document: QuotationDocument
    changed: bool


# action that moves a document into each post-draft status
ACTION_FOR_STATUS = {
    QuotationStatus.SENT: QuotationAction.SEND,
    QuotationStatus.ACCEPTED: QuotationAction.ACCEPT,
    QuotationStatus.REJECTED: QuotationAction.REJECT,
}


def check_snapshot(snapshot: QuotationSnapshot) -> None:
    if not snapshot.project_id:
        raise ValidationError("Quotation requires a project id", field="project_id")
    if not snapshot.line_items:
        raise ValidationError("Cannot issue a quotation without line items", field="line_items")
    for item in snapshot.line_items:
        if item.quantity < 1:
            raise ValidationError(
                f"Line item {item.item_id} has invalid quantity {item.quantity}", field="line_items"
            )
        if item.total_price != item.unit_price * item.quantity:
            raise ValidationError(
                f"Line item {item.item_id}: total {item.total_price} != "
                f"{item.unit_price} x {item.quantity}",
                field="line_items",
            )
    expected = items_cost(snapshot.line_items)
    if snapshot.totals.items_cost != expected:
        raise ValidationError(
            f"Totals were computed for items worth {snapshot.totals.items_cost}, "
            f"line items sum to {expected}",
            field="totals",
        )
    if snapshot.validity_days < 1:
        raise ValidationError("validity_days must be positive", field="validity_days")


def freeze_quotation(
    snapshot: QuotationSnapshot,
    number: str,
    created_at: datetime,
    document_id: str = None,
    supersedes: str = None,
) -> QuotationDocument:
    """Build a draft document from a validated snapshot"""
    check_snapshot(snapshot)
    line_items = tuple(snapshot.line_items)
    return QuotationDocument(
        id=document_id or str(uuid.uuid4()),
        number=number,
        project_id=snapshot.project_id,
        line_items=line_items,
        summary=summarize_boq(line_items),
        totals=snapshot.totals,
        automation_type=snapshot.automation_type,
        status=QuotationStatus.DRAFT,
        created_at=created_at,
        client=snapshot.client,
        notes=snapshot.notes,
        validity_days=snapshot.validity_days,
        supersedes=supersedes,
    )


def apply_transition(doc: QuotationDocument, action: QuotationAction, now: datetime) -> TransitionResult:
    """
    Apply a status action.

    send: draft -> sent (records sent_at); on an already sent document it
        is a no-op reported with changed=False.
    accept / reject: sent -> accepted / rejected.

    Raises:
        StateConflictError: any other combination; the document is unchanged
    """
    action = QuotationAction(action)
    status = doc.status

    if action == QuotationAction.SEND:
        if status == QuotationStatus.DRAFT:
            return TransitionResult(replace(doc, status=QuotationStatus.SENT, sent_at=now), True)
        if status == QuotationStatus.SENT:
            logger.info(f"Quotation {doc.number} already sent; nothing to do")
            return TransitionResult(doc, False)
    elif status == QuotationStatus.SENT:
        if action == QuotationAction.ACCEPT:
            return TransitionResult(replace(doc, status=QuotationStatus.ACCEPTED, accepted_at=now), True)
        return TransitionResult(replace(doc, status=QuotationStatus.REJECTED, rejected_at=now), True)

    raise StateConflictError(doc.id, status.value, action.value)
