"""Quotations Router - Issue, read, transition and revise proforma quotations"""
import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from api.config import config
from api.dependencies import get_quotation_service, get_store
from api.models.schemas import (
    IssueFromProjectRequest,
    IssueQuotationRequest,
    ReviseQuotationRequest,
    TransitionRequest,
    encode,
)
from api.services import boq_service
from api.services.quotation_service import QuotationService
from smarthome_boq_core.engine.quotation import QuotationSnapshot
from smarthome_boq_core.engine.totals import compute_totals

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/v1", tags=["quotations"])


def _tax_percent(value):
    return config.DEFAULT_TAX_PERCENT if value is None else value


def _created(document) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_201_CREATED, content=encode(document))


@router.post("/quotations")
async def issue_quotation(
    req: IssueQuotationRequest,
    service: QuotationService = Depends(get_quotation_service),
):
    """
    Issue a draft quotation from priced line items.

    Totals are recomputed server-side from the submitted lines so the
    stored document is always internally consistent.
    """
    line_items = [item.to_engine() for item in req.line_items]
    totals = compute_totals(line_items, req.automation_cost, _tax_percent(req.tax_percent))
    snapshot = QuotationSnapshot(
        project_id=req.project_id,
        line_items=line_items,
        totals=totals,
        automation_type=req.automation_type,
        client=req.client.to_engine(),
        notes=req.notes,
        validity_days=req.validity_days or config.QUOTATION_VALIDITY_DAYS,
    )
    return _created(await service.issue_quotation(snapshot))


@router.post("/projects/{project_id}/quotations")
async def issue_project_quotation(
    project_id: str,
    req: IssueFromProjectRequest,
    store=Depends(get_store),
    service: QuotationService = Depends(get_quotation_service),
):
    """Price a stored project and issue the result as a draft quotation"""
    preview = await boq_service.preview_project_quote(
        store,
        project_id,
        _tax_percent(req.tax_percent),
        extra_channels=req.extra_channels,
        wire_length_meters=req.wire_length_meters,
    )
    snapshot = QuotationSnapshot(
        project_id=project_id,
        line_items=preview.boq.line_items,
        totals=preview.totals,
        automation_type=preview.automation_type,
        client=req.client.to_engine(),
        notes=req.notes,
        validity_days=req.validity_days or config.QUOTATION_VALIDITY_DAYS,
    )
    return _created(await service.issue_quotation(snapshot))


@router.get("/quotations")
async def list_quotations(projectId: str, service: QuotationService = Depends(get_quotation_service)):
    """Quotations of a project, newest first"""
    documents = await service.list_project_quotations(projectId)
    return {"items": encode(documents)}


@router.get("/quotations/{document_id}")
async def get_quotation(document_id: str, service: QuotationService = Depends(get_quotation_service)):
    return encode(await service.get_quotation(document_id))


@router.post("/quotations/{document_id}/transition")
async def transition_quotation(
    document_id: str,
    req: TransitionRequest,
    service: QuotationService = Depends(get_quotation_service),
):
    """send / accept / reject; illegal transitions answer 409"""
    result = await service.transition_quotation(document_id, req.action)
    return {"changed": result.changed, "quotation": encode(result.document)}


@router.post("/quotations/{document_id}/revise")
async def revise_quotation(
    document_id: str,
    req: ReviseQuotationRequest,
    service: QuotationService = Depends(get_quotation_service),
):
    """Issue a new draft superseding the given quotation"""
    line_items = [item.to_engine() for item in req.line_items]
    totals = compute_totals(line_items, req.automation_cost, _tax_percent(req.tax_percent))
    revised = await service.revise_quotation(
        document_id,
        line_items,
        totals,
        client=req.client.to_engine() if req.client else None,
        notes=req.notes,
        validity_days=req.validity_days,
    )
    return _created(revised)
