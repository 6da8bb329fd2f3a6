"""
FastAPI dependencies
Store and service providers; tests override these through app.dependency_overrides
"""
import logging
from typing import Optional

from fastapi import Depends

from api.config import config
from api.services.quotation_service import QuotationService
from smarthome_boq_core.engine.quotation import DocumentNumberGenerator
from smarthome_boq_core.infra import InMemoryStore, SupabaseStore

logger = logging.getLogger(__name__)

# Global store instance (singleton pattern)
_store = None


def create_store():
    """Build the store selected by STORE_BACKEND"""
    if config.STORE_BACKEND == "supabase":
        return SupabaseStore.connect(
            config.SUPABASE_URL,
            config.SUPABASE_SERVICE_ROLE_KEY,
            default_unit_price=config.DEFAULT_UNIT_PRICE,
        )
    logger.warning("Using in-memory store; quotations are lost on restart")
    return InMemoryStore(default_unit_price=config.DEFAULT_UNIT_PRICE)


def get_store():
    """Get global store instance"""
    global _store
    if _store is None:
        _store = create_store()
    return _store


def reset_store(store: Optional[object] = None) -> None:
    """Replace the global store (None rebuilds it on next use)"""
    global _store
    _store = store


def get_quotation_service(store=Depends(get_store)) -> QuotationService:
    return QuotationService(
        store,
        number_generator=DocumentNumberGenerator(prefix=config.DOCUMENT_NUMBER_PREFIX),
        max_attempts=config.DOCUMENT_NUMBER_MAX_ATTEMPTS,
    )
