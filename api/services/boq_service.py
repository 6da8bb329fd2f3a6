"""
BOQ Service - Project quote previews
Loads a project's rooms and the price list and runs the pricing pipeline:
Build BOQ → Wired cost (wired rooms only) → Totals
"""
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from smarthome_boq_core.engine.boq_builder import BOQBuildResult, build_boq
from smarthome_boq_core.engine.models import AutomationType, BOQSummary, Room, Totals
from smarthome_boq_core.engine.totals import compute_totals, summarize_boq
from smarthome_boq_core.engine.wired_cost import WiredCostResult, aggregate_wired

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuotePreview:
    project_id: str
    automation_type: AutomationType
    boq: BOQBuildResult
    summary: BOQSummary
    wired: Optional[WiredCostResult]
    totals: Totals


def project_automation_type(rooms: Tuple[Room, ...]) -> AutomationType:
    """A project with any wired room is quoted as a wired installation"""
    if any(room.automation_type == AutomationType.WIRED for room in rooms):
        return AutomationType.WIRED
    return AutomationType.WIRELESS


async def preview_project_quote(
    store,
    project_id: str,
    tax_percent,
    extra_channels: int = 0,
    wire_length_meters=0,
) -> QuotePreview:
    """
    Price a stored project without issuing a document.

    Wireless rooms contribute their panels as line items; wired rooms
    contribute KNX channels to the automation cost instead.
    """
    rooms = tuple(await store.get_rooms(project_id))
    catalog = await store.get_catalog()

    boq = build_boq(rooms, catalog)
    automation_type = project_automation_type(rooms)

    wired = None
    automation_cost = 0
    if automation_type == AutomationType.WIRED:
        wired = aggregate_wired(rooms, extra_channels, wire_length_meters)
        automation_cost = wired.total_cost

    totals = compute_totals(boq.line_items, automation_cost, tax_percent)
    logger.info(
        f"Quote preview for project {project_id}: {automation_type.value}, "
        f"{len(boq.line_items)} items, grand total {totals.grand_total}"
    )
    return QuotePreview(
        project_id=project_id,
        automation_type=automation_type,
        boq=boq,
        summary=summarize_boq(boq.line_items),
        wired=wired,
        totals=totals,
    )
