"""BOQ Router - Line-item pricing, wired cost, totals and panel checks"""
import logging

from fastapi import APIRouter, Depends

from api.config import config
from api.dependencies import get_store
from api.models.schemas import (
    BuildBOQRequest,
    PanelIn,
    QuotePreviewRequest,
    TotalsRequest,
    WiredCostRequest,
    encode,
    encode_build_result,
)
from api.services import boq_service
from smarthome_boq_core.engine.boq_builder import build_boq
from smarthome_boq_core.engine.panel_validator import panel_signature, validate_panel
from smarthome_boq_core.engine.price_resolver import Catalog
from smarthome_boq_core.engine.totals import compute_totals, summarize_boq
from smarthome_boq_core.engine.wired_cost import aggregate_wired

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/v1", tags=["boq"])


@router.post("/boq/build")
async def build(req: BuildBOQRequest):
    """
    Price rooms against the given price list.

    Rooms keep input order; appliances come before panels within a room.
    Lines priced with the fallback price are flagged in `warnings`.
    """
    catalog = Catalog.of(
        (e.to_engine() for e in req.catalog),
        req.default_unit_price or config.DEFAULT_UNIT_PRICE,
    )
    result = build_boq([r.to_engine() for r in req.rooms], catalog)
    body = encode_build_result(result)
    body["summary"] = encode(summarize_boq(result.line_items))
    return body


@router.post("/boq/wired-cost")
async def wired_cost(req: WiredCostRequest):
    """KNX automation cost of the wired rooms"""
    result = aggregate_wired(
        [r.to_engine() for r in req.rooms],
        extra_channels=req.extra_channels,
        wire_length_meters=req.wire_length_meters,
    )
    return encode(result)


@router.post("/boq/totals")
async def totals(req: TotalsRequest):
    """subtotal, GST and grand total for a set of priced lines"""
    tax_percent = config.DEFAULT_TAX_PERCENT if req.tax_percent is None else req.tax_percent
    result = compute_totals(
        [item.to_engine() for item in req.line_items],
        automation_cost=req.automation_cost,
        tax_percent=tax_percent,
    )
    return encode(result)


@router.post("/panels/validate")
async def validate(panel: PanelIn):
    """Module usage of a touch panel; overflow is reported, not rejected"""
    engine_panel = panel.to_engine()
    result = validate_panel(engine_panel)
    return {
        "panelId": engine_panel.id,
        "signature": panel_signature(engine_panel),
        "moduleSize": result.module_size,
        "totalModulesUsed": result.total_modules_used,
        "freeModules": result.free_modules,
        "isFull": result.is_full,
        "ok": result.ok,
    }


@router.post("/projects/{project_id}/quote-preview")
async def quote_preview(project_id: str, req: QuotePreviewRequest, store=Depends(get_store)):
    """Price a stored project without issuing a quotation"""
    tax_percent = config.DEFAULT_TAX_PERCENT if req.tax_percent is None else req.tax_percent
    preview = await boq_service.preview_project_quote(
        store,
        project_id,
        tax_percent,
        extra_channels=req.extra_channels,
        wire_length_meters=req.wire_length_meters,
    )
    body = encode_build_result(preview.boq)
    body.update({
        "projectId": preview.project_id,
        "automationType": preview.automation_type.value,
        "summary": encode(preview.summary),
        "wiredCost": encode(preview.wired) if preview.wired else None,
        "totals": encode(preview.totals),
    })
    return body
