"""
Quotation Service - Issue, transition and revise proforma quotations
Number allocation runs as an optimistic bounded retry against the document store
"""
import logging
from typing import Callable, List, Optional, Sequence

from smarthome_boq_core.engine.errors import (
    DuplicateDocumentNumberError,
    StateConflictError,
    UniquenessRetryExhausted,
)
from smarthome_boq_core.engine.models import (
    BOQLineItem,
    ClientInfo,
    QuotationAction,
    QuotationDocument,
    Totals,
)
from smarthome_boq_core.engine.quotation import (
    DocumentNumberGenerator,
    QuotationSnapshot,
    TransitionResult,
    apply_transition,
    check_snapshot,
    freeze_quotation,
    utc_now,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5


class QuotationService:
    """Quotation lifecycle on top of a document store"""

    def __init__(
        self,
        store,
        number_generator: Optional[Callable[[], str]] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        clock: Callable = utc_now,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.store = store
        self.number_generator = number_generator or DocumentNumberGenerator()
        self.max_attempts = max_attempts
        self.clock = clock

    async def issue_quotation(self, snapshot: QuotationSnapshot, supersedes: str = None) -> QuotationDocument:
        """
        Freeze a snapshot into a new draft quotation with a unique number.

        Each attempt draws a number, skips it when the store already holds
        it, and inserts. An insert rejected by the store's uniqueness
        constraint (a concurrent issuer took the number between check and
        insert) counts as a failed attempt.

        Raises:
            ValidationError: snapshot has no line items or inconsistent totals
            UniquenessRetryExhausted: every attempt collided
        """
        check_snapshot(snapshot)
        created_at = self.clock()
        number = None

        for attempt in range(1, self.max_attempts + 1):
            number = self.number_generator()
            if await self.store.number_exists(number):
                logger.info(f"Quotation number {number} taken (attempt {attempt}/{self.max_attempts})")
                continue

            document = freeze_quotation(snapshot, number, created_at, supersedes=supersedes)
            try:
                stored = await self.store.insert(document)
            except DuplicateDocumentNumberError:
                logger.warning(
                    f"Quotation number {number} claimed concurrently "
                    f"(attempt {attempt}/{self.max_attempts})"
                )
                continue

            logger.info(
                f"Issued quotation {stored.number} for project {stored.project_id}: "
                f"{len(stored.line_items)} items, grand total {stored.grand_total}"
            )
            return stored

        logger.error(f"Gave up allocating a quotation number after {self.max_attempts} attempts")
        raise UniquenessRetryExhausted(self.max_attempts, number)

    async def get_quotation(self, document_id: str) -> QuotationDocument:
        return await self.store.get(document_id)

    async def list_project_quotations(self, project_id: str) -> List[QuotationDocument]:
        return await self.store.list_by_project(project_id)

    async def transition_quotation(self, document_id: str, action: QuotationAction) -> TransitionResult:
        """
        Apply send / accept / reject and persist the new status.

        The write is conditional on the status the transition was computed
        from. When another writer got there first the action is re-checked
        against the stored document: a repeated send becomes a no-op, an
        accept racing a reject raises StateConflictError.
        """
        document = await self.store.get(document_id)
        result = apply_transition(document, action, self.clock())
        if not result.changed:
            return result

        try:
            stored = await self.store.update_status(result.document, expected_status=document.status)
        except StateConflictError:
            current = await self.store.get(document_id)
            logger.warning(
                f"Quotation {current.number} moved to {current.status.value} while applying {QuotationAction(action).value}"
            )
            retried = apply_transition(current, action, self.clock())
            if retried.changed:
                raise
            return retried

        logger.info(f"Quotation {stored.number}: {document.status.value} -> {stored.status.value}")
        return TransitionResult(stored, True)

    async def revise_quotation(
        self,
        document_id: str,
        line_items: Sequence[BOQLineItem],
        totals: Totals,
        client: Optional[ClientInfo] = None,
        notes: Optional[str] = None,
        validity_days: Optional[int] = None,
    ) -> QuotationDocument:
        """
        Issue a new draft that supersedes an existing quotation.

        The existing document is left untouched; unspecified client, notes
        and validity are carried over from it.
        """
        original = await self.store.get(document_id)
        snapshot = QuotationSnapshot(
            project_id=original.project_id,
            line_items=tuple(line_items),
            totals=totals,
            automation_type=original.automation_type,
            client=client or original.client,
            notes=original.notes if notes is None else notes,
            validity_days=validity_days or original.validity_days,
        )
        revised = await self.issue_quotation(snapshot, supersedes=original.id)
        logger.info(f"Quotation {revised.number} supersedes {original.number}")
        return revised
