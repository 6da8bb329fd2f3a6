"""
Catalog Price Resolver
Maps appliance lines and touch panels to unit prices from a flat price list
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional, Tuple

from .errors import PricingFallbackWarning
from .models import (
    CATEGORY_TOUCH_PANELS,
    ApplianceLine,
    PanelInstance,
    PriceEntry,
    to_decimal,
)
from .panel_validator import normalize_signature, panel_signature

logger = logging.getLogger(__name__)

DEFAULT_UNIT_PRICE = Decimal("500")


@dataclass(frozen=True)
class Catalog:
    """Immutable price list loaded once per pricing run"""
    entries: Tuple[PriceEntry, ...] = ()
    default_unit_price: Decimal = DEFAULT_UNIT_PRICE

    @classmethod
    def of(cls, entries: Iterable[PriceEntry], default_unit_price=DEFAULT_UNIT_PRICE) -> "Catalog":
        price = to_decimal(default_unit_price)
        if price <= 0:
            raise ValueError("default_unit_price must be positive")
        return cls(entries=tuple(entries), default_unit_price=price)


@dataclass(frozen=True)
class PriceResolution:
    unit_price: Decimal
    entry: Optional[PriceEntry]
    used_fallback: bool
    specificity: int = 0


def _matches(entry: PriceEntry, line: ApplianceLine) -> bool:
    if entry.category != line.category:
        return False
    if entry.subcategory is not None and entry.subcategory != line.subcategory:
        return False
    if entry.wattage is not None and entry.wattage != line.wattage:
        return False
    return True


def _specificity(entry: PriceEntry) -> int:
    return int(entry.subcategory is not None) + int(entry.wattage is not None)


def resolve_price(line: ApplianceLine, catalog: Catalog) -> PriceResolution:
    """
    Resolve the unit price of an appliance line.

    An entry matches when its category is equal and its subcategory and
    wattage are either equal or absent. Among matches the most specific entry
    wins; entries of equal specificity are decided by catalog order, first
    one wins.

    Args:
        line: Appliance to price
        catalog: Price list for this run

    Returns:
        PriceResolution, with used_fallback=True and the catalog default
        price when nothing matched
    """
    best: Optional[PriceEntry] = None
    best_rank = -1
    for entry in catalog.entries:
        if not _matches(entry, line):
            continue
        rank = _specificity(entry)
        # strict comparison keeps the earliest entry on ties
        if rank > best_rank:
            best, best_rank = entry, rank

    if best is None:
        return PriceResolution(
            unit_price=catalog.default_unit_price, entry=None, used_fallback=True
        )
    return PriceResolution(
        unit_price=best.price_per_unit, entry=best, used_fallback=False, specificity=best_rank
    )


def resolve_panel_price(panel: PanelInstance, catalog: Catalog) -> PriceResolution:
    """
    Resolve the vendor price of a touch panel.

    Candidates are touch-panel entries priced for the panel's component
    signature (e.g. "6M-2S-1F"), compared after normalize_signature so a
    single count may be written or omitted. The first candidate tagged with
    one of the panel's vendor tags wins, otherwise the first candidate,
    otherwise the catalog default.
    """
    signature = panel_signature(panel)
    wanted_name = normalize_signature(signature)
    candidates = [
        e for e in catalog.entries
        if e.category == CATEGORY_TOUCH_PANELS and normalize_signature(e.product_name) == wanted_name
    ]

    wanted = set(panel.vendor_tags)
    if wanted:
        for entry in candidates:
            if wanted.intersection(entry.vendor_tags):
                return PriceResolution(
                    unit_price=entry.price_per_unit, entry=entry, used_fallback=False, specificity=2
                )

    if candidates:
        if wanted:
            logger.info(
                f"No vendor tag match for panel {panel.id} ({signature}, tags={sorted(wanted)}); "
                f"using first vendor price"
            )
        entry = candidates[0]
        return PriceResolution(
            unit_price=entry.price_per_unit, entry=entry, used_fallback=False, specificity=1
        )

    return PriceResolution(
        unit_price=catalog.default_unit_price, entry=None, used_fallback=True
    )


def fallback_warning(room_id: str, item_id: str, category: str, resolution: PriceResolution) -> PricingFallbackWarning:
    """Build the review flag for a line priced with the catalog default"""
    warning = PricingFallbackWarning(room_id, item_id, category, resolution.unit_price)
    logger.warning(str(warning))
    return warning
