"""
Supabase Store
Projects, inventory and proforma invoices backed by Supabase tables
"""

import logging
from typing import List

from postgrest.exceptions import APIError
from supabase import Client, create_client

from ..engine.errors import (
    DocumentNotFoundError,
    DuplicateDocumentNumberError,
    ProjectNotFoundError,
    StateConflictError,
)
from ..engine.models import QuotationDocument, QuotationStatus, Room
from ..engine.quotation import ACTION_FOR_STATUS
from ..engine.price_resolver import DEFAULT_UNIT_PRICE, Catalog
from .records import (
    catalog_from_records,
    document_from_record,
    document_to_record,
    rooms_from_project,
)

logger = logging.getLogger(__name__)

PROJECTS_TABLE = "projects"
INVENTORY_TABLE = "inventory"
DOCUMENTS_TABLE = "proforma_invoices"

# PostgreSQL unique_violation
UNIQUE_VIOLATION = "23505"


class SupabaseStore:
    """Store implementation over a supabase-py client"""

    def __init__(self, client: Client, default_unit_price=DEFAULT_UNIT_PRICE):
        self.client = client
        self.default_unit_price = default_unit_price

    @classmethod
    def connect(cls, url: str, key: str, default_unit_price=DEFAULT_UNIT_PRICE) -> "SupabaseStore":
        logger.info(f"Connecting to Supabase at {url}")
        return cls(create_client(url, key), default_unit_price)

    # ==========================================
    # Projects and catalog
    # ==========================================

    async def _get_project(self, project_id: str) -> dict:
        response = self.client.table(PROJECTS_TABLE).select("*").eq("id", project_id).execute()
        if not response.data:
            raise ProjectNotFoundError(project_id)
        return response.data[0]

    async def get_rooms(self, project_id: str) -> List[Room]:
        return rooms_from_project(await self._get_project(project_id))

    async def get_catalog(self) -> Catalog:
        response = self.client.table(INVENTORY_TABLE).select("*").execute()
        logger.debug(f"Loaded {len(response.data)} inventory rows")
        return catalog_from_records(response.data, self.default_unit_price)

    # ==========================================
    # Quotation documents
    # ==========================================

    async def insert(self, document: QuotationDocument) -> QuotationDocument:
        try:
            response = self.client.table(DOCUMENTS_TABLE).insert(document_to_record(document)).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise DuplicateDocumentNumberError(document.number) from e
            raise
        if not response.data:
            raise RuntimeError(f"Failed to store quotation {document.number}")
        return document_from_record(response.data[0])

    async def get(self, document_id: str) -> QuotationDocument:
        response = self.client.table(DOCUMENTS_TABLE).select("*").eq("id", document_id).execute()
        if not response.data:
            raise DocumentNotFoundError(document_id)
        return document_from_record(response.data[0])

    async def update_status(self, document: QuotationDocument, expected_status: QuotationStatus) -> QuotationDocument:
        """
        Conditional status update: the row changes only while its stored
        status is still expected_status.

        Raises:
            DocumentNotFoundError: no such row
            StateConflictError: another writer moved the document first
        """
        record = document_to_record(document)
        updates = {
            key: record[key]
            for key in ("status", "sent_at", "accepted_at", "rejected_at")
        }
        response = (
            self.client.table(DOCUMENTS_TABLE)
            .update(updates)
            .eq("id", document.id)
            .eq("status", QuotationStatus(expected_status).value)
            .execute()
        )
        if not response.data:
            current = await self.get(document.id)
            raise StateConflictError(
                document.id, current.status.value, ACTION_FOR_STATUS[document.status].value
            )
        return document_from_record(response.data[0])

    async def list_by_project(self, project_id: str) -> List[QuotationDocument]:
        response = (
            self.client.table(DOCUMENTS_TABLE)
            .select("*")
            .eq("project_id", project_id)
            .order("created_at", desc=True)
            .execute()
        )
        return [document_from_record(r) for r in response.data]

    async def number_exists(self, number: str) -> bool:
        response = (
            self.client.table(DOCUMENTS_TABLE).select("id").eq("pi_number", number).limit(1).execute()
        )
        return bool(response.data)

    async def ping(self) -> bool:
        try:
            self.client.table(DOCUMENTS_TABLE).select("id").limit(1).execute()
            return True
        except APIError as e:
            logger.error(f"Supabase health check failed: {e}")
            return False
