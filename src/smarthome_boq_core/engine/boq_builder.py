"""
BOQ Line-Item Builder
Walks rooms -> appliances/panels and produces priced line items
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .errors import PricingFallbackWarning, ValidationError
from .models import (
    CATEGORY_TOUCH_PANELS,
    ApplianceLine,
    AutomationType,
    BOQLineItem,
    ItemType,
    PanelInstance,
    Room,
    SkippedRecord,
)
from .panel_validator import ensure_panel_fits
from .price_resolver import Catalog, fallback_warning, resolve_panel_price, resolve_price

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BOQBuildResult:
    line_items: Tuple[BOQLineItem, ...]
    warnings: Tuple[PricingFallbackWarning, ...]
    skipped: Tuple[SkippedRecord, ...]

    @property
    def has_fallbacks(self) -> bool:
        return bool(self.warnings)


def check_appliance(appliance: ApplianceLine) -> None:
    """Raise ValidationError when an appliance record cannot be priced"""
    if not appliance.name or not appliance.category:
        raise ValidationError(
            f"Appliance {appliance.id} is missing a name or category", field="name"
        )
    if appliance.quantity < 1:
        raise ValidationError(
            f"Appliance {appliance.id} has invalid quantity {appliance.quantity}", field="quantity"
        )


def _appliance_line(room: Room, appliance: ApplianceLine, catalog: Catalog, warnings: list) -> BOQLineItem:
    resolution = resolve_price(appliance, catalog)
    if resolution.used_fallback:
        warnings.append(fallback_warning(room.id, appliance.id, appliance.category, resolution))
    return BOQLineItem(
        room_id=room.id,
        room_name=room.name,
        item_type=ItemType.APPLIANCE,
        item_id=appliance.id,
        name=appliance.name,
        category=appliance.category,
        subcategory=appliance.subcategory,
        quantity=appliance.quantity,
        unit_price=resolution.unit_price,
        total_price=resolution.unit_price * appliance.quantity,
        price_fallback=resolution.used_fallback,
    )


def _panel_line(room: Room, panel: PanelInstance, catalog: Catalog, warnings: list) -> BOQLineItem:
    if not panel.name:
        raise ValidationError(f"Panel {panel.id} is missing a name", field="name")
    ensure_panel_fits(panel)
    resolution = resolve_panel_price(panel, catalog)
    if resolution.used_fallback:
        warnings.append(fallback_warning(room.id, panel.id, CATEGORY_TOUCH_PANELS, resolution))
    # a panel is priced as a unit, not per module
    return BOQLineItem(
        room_id=room.id,
        room_name=room.name,
        item_type=ItemType.PANEL,
        item_id=panel.id,
        name=panel.name,
        category=CATEGORY_TOUCH_PANELS,
        quantity=1,
        unit_price=resolution.unit_price,
        total_price=resolution.unit_price,
        price_fallback=resolution.used_fallback,
    )


def build_boq(rooms: Sequence[Room], catalog: Catalog) -> BOQBuildResult:
    """
    Build the priced BOQ for a project.

    Ordering is part of the contract: rooms in input order; within a room,
    appliances before panels, each in their original order. Panels are only
    priced for wireless rooms.

    Malformed records are skipped and reported in `skipped` instead of
    aborting the build. Lines priced with the catalog default carry
    price_fallback=True and a matching entry in `warnings`.
    """
    items: List[BOQLineItem] = []
    warnings: List[PricingFallbackWarning] = []
    skipped: List[SkippedRecord] = []

    def skip(room: Room, item_type: ItemType, item_id: Optional[str], reason: str):
        logger.warning(f"Skipping {item_type.value} {item_id} in room {room.id}: {reason}")
        skipped.append(SkippedRecord(room.id, item_type, item_id or "", reason))

    for room in rooms:
        skipped.extend(room.rejected)
        for appliance in room.appliances:
            try:
                check_appliance(appliance)
                items.append(_appliance_line(room, appliance, catalog, warnings))
            except ValidationError as e:
                skip(room, ItemType.APPLIANCE, appliance.id, str(e))

        if room.automation_type != AutomationType.WIRELESS:
            continue
        for panel in room.panels:
            try:
                items.append(_panel_line(room, panel, catalog, warnings))
            except ValidationError as e:
                skip(room, ItemType.PANEL, panel.id, str(e))

    logger.info(
        f"BOQ built: {len(items)} items from {len(rooms)} rooms "
        f"({len(warnings)} fallback prices, {len(skipped)} skipped)"
    )
    return BOQBuildResult(
        line_items=tuple(items), warnings=tuple(warnings), skipped=tuple(skipped)
    )
