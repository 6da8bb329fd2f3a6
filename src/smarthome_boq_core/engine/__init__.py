"""
SmartHome BOQ Engine Module
Pricing, module packing, totals and quotation issuing
"""

from .boq_builder import BOQBuildResult, build_boq
from .models import SkippedRecord
from .errors import (
    BOQEngineError,
    DocumentNotFoundError,
    DuplicateDocumentNumberError,
    PricingFallbackWarning,
    ProjectNotFoundError,
    StateConflictError,
    UniquenessRetryExhausted,
    ValidationError,
)
from .module_packer import pack
from .panel_validator import ensure_panel_fits, normalize_signature, panel_signature, validate_panel
from .price_resolver import Catalog, resolve_panel_price, resolve_price
from .quotation import (
    DocumentNumberGenerator,
    QuotationSnapshot,
    apply_transition,
    freeze_quotation,
)
from .totals import compute_totals, summarize_boq
from .wired_cost import DEFAULT_WIRED_PRICING, aggregate_wired, classify_channel

__all__ = [
    "BOQBuildResult",
    "SkippedRecord",
    "build_boq",
    "BOQEngineError",
    "DocumentNotFoundError",
    "DuplicateDocumentNumberError",
    "PricingFallbackWarning",
    "ProjectNotFoundError",
    "StateConflictError",
    "UniquenessRetryExhausted",
    "ValidationError",
    "pack",
    "ensure_panel_fits",
    "normalize_signature",
    "panel_signature",
    "validate_panel",
    "Catalog",
    "resolve_panel_price",
    "resolve_price",
    "DocumentNumberGenerator",
    "QuotationSnapshot",
    "apply_transition",
    "freeze_quotation",
    "compute_totals",
    "summarize_boq",
    "DEFAULT_WIRED_PRICING",
    "aggregate_wired",
    "classify_channel",
]
