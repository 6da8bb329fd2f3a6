"""
In-memory store
Project, catalog and quotation storage for local runs and tests
"""

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional

from ..engine.errors import (
    DocumentNotFoundError,
    DuplicateDocumentNumberError,
    ProjectNotFoundError,
    StateConflictError,
)
from ..engine.models import QuotationDocument, QuotationStatus, Room
from ..engine.quotation import ACTION_FOR_STATUS
from ..engine.price_resolver import DEFAULT_UNIT_PRICE, Catalog
from .records import catalog_from_records, rooms_from_project

logger = logging.getLogger(__name__)


class InMemoryStore:
    """
    Keeps raw project / inventory rows and frozen quotation documents.

    Number uniqueness is enforced on insert under a lock, the same way the
    database enforces it with a unique index.
    """

    def __init__(
        self,
        projects: Optional[Iterable[Dict[str, Any]]] = None,
        inventory: Optional[Iterable[Dict[str, Any]]] = None,
        default_unit_price=DEFAULT_UNIT_PRICE,
    ):
        self.projects: Dict[str, Dict[str, Any]] = {str(p["id"]): p for p in projects or []}
        self.inventory: List[Dict[str, Any]] = list(inventory or [])
        self.default_unit_price = default_unit_price
        self._documents: Dict[str, QuotationDocument] = {}
        self._numbers: Dict[str, str] = {}
        self._lock = asyncio.Lock()

    # ==========================================
    # Projects and catalog
    # ==========================================

    def add_project(self, project: Dict[str, Any]) -> None:
        self.projects[str(project["id"])] = project

    async def get_rooms(self, project_id: str) -> List[Room]:
        project = self.projects.get(str(project_id))
        if project is None:
            raise ProjectNotFoundError(project_id)
        return rooms_from_project(project)

    async def get_catalog(self) -> Catalog:
        return catalog_from_records(self.inventory, self.default_unit_price)

    # ==========================================
    # Quotation documents
    # ==========================================

    async def insert(self, document: QuotationDocument) -> QuotationDocument:
        async with self._lock:
            if document.number in self._numbers:
                raise DuplicateDocumentNumberError(document.number)
            self._documents[document.id] = document
            self._numbers[document.number] = document.id
        logger.debug(f"Stored quotation {document.number} ({document.id})")
        return document

    async def get(self, document_id: str) -> QuotationDocument:
        document = self._documents.get(document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)
        return document

    async def update_status(self, document: QuotationDocument, expected_status: QuotationStatus) -> QuotationDocument:
        """Store a transitioned document if its stored status is still expected_status"""
        async with self._lock:
            current = self._documents.get(document.id)
            if current is None:
                raise DocumentNotFoundError(document.id)
            if current.status != expected_status:
                raise StateConflictError(
                    document.id, current.status.value, ACTION_FOR_STATUS[document.status].value
                )
            self._documents[document.id] = document
        return document

    async def list_by_project(self, project_id: str) -> List[QuotationDocument]:
        documents = [d for d in self._documents.values() if d.project_id == str(project_id)]
        return sorted(documents, key=lambda d: d.created_at, reverse=True)

    async def number_exists(self, number: str) -> bool:
        return number in self._numbers

    async def ping(self) -> bool:
        return True
