"""
Store record mapping
Converts loosely-shaped persistence rows (camelCase from the planner UI,
snake_case from the database) into engine values and back
"""

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional

from ..engine.models import (
    ApplianceLine,
    AutomationType,
    BOQLineItem,
    BOQSummary,
    ClientInfo,
    ComponentSlot,
    ItemType,
    PanelInstance,
    PriceEntry,
    QuotationDocument,
    QuotationStatus,
    Room,
    SkippedRecord,
    Totals,
    to_decimal,
)
from ..engine.price_resolver import DEFAULT_UNIT_PRICE, Catalog

logger = logging.getLogger(__name__)

# what a malformed row raises while being mapped
RECORD_ERRORS = (AttributeError, KeyError, TypeError, ValueError, ArithmeticError)


def _pick(record: Dict[str, Any], *keys, default=None):
    for key in keys:
        if key in record and record[key] is not None:
            return record[key]
    return default


def _blank_to_none(value) -> Optional[str]:
    # the planner writes "-" for "no subcategory"
    if value is None:
        return None
    value = str(value).strip()
    return None if value in ("", "-") else value


def _optional_wattage(value) -> Optional[int]:
    if value in (None, "", "-"):
        return None
    wattage = int(float(value))
    return wattage or None


def _tags(value) -> tuple:
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(v) for v in value if v)


def _datetime(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _whole_number(value, name: str) -> int:
    """Integer field; "2", 2 and 2.0 are accepted, "2.5" and "-" are not"""
    if value is None or isinstance(value, bool):
        raise ValueError(f"{name} is missing")
    number = Decimal(str(value).strip())
    if number != number.to_integral_value():
        raise ValueError(f"{name} {value!r} is not a whole number")
    return int(number)


def _reason(error: Exception) -> str:
    if isinstance(error, KeyError):
        return f"missing field {error}"
    if isinstance(error, InvalidOperation):
        return "unreadable number"
    return str(error)


# ==========================================
# Catalog
# ==========================================

def price_entry_from_record(record: Dict[str, Any]) -> PriceEntry:
    price = _pick(record, "price_per_unit", "pricePerUnit")
    if price is None:
        raise ValueError("price_per_unit is missing")
    return PriceEntry(
        category=record["category"],
        price_per_unit=to_decimal(price),
        subcategory=_blank_to_none(record.get("subcategory")),
        wattage=_optional_wattage(record.get("wattage")),
        vendor_tags=_tags(_pick(record, "vendor_tags", "vendorTags", "vendor")),
        product_name=_blank_to_none(_pick(record, "product_name", "productName")),
        notes=record.get("notes"),
    )


def catalog_from_records(records: Iterable[Dict[str, Any]], default_unit_price=DEFAULT_UNIT_PRICE) -> Catalog:
    """Price list from inventory rows; unreadable rows are logged and left out"""
    entries = []
    for index, record in enumerate(records):
        try:
            entries.append(price_entry_from_record(record))
        except RECORD_ERRORS as e:
            label = record.get("product_name") or record.get("category") if isinstance(record, dict) else record
            logger.warning(f"Skipping inventory row {index} ({label}): {_reason(e)}")
    return Catalog.of(entries, default_unit_price)


# ==========================================
# Project rooms
# ==========================================

def appliance_from_record(record: Dict[str, Any], room_id: str, index: int) -> ApplianceLine:
    name = _blank_to_none(record.get("name"))
    quantity = record.get("quantity")
    specs = _pick(record, "metadata", "specifications", default={}) or {}
    return ApplianceLine(
        id=_appliance_id(record, room_id, index),
        name=name,
        category=_blank_to_none(record.get("category")),
        subcategory=_blank_to_none(record.get("subcategory")),
        wattage=_optional_wattage(record.get("wattage")),
        quantity=1 if quantity in (None, "") else _whole_number(quantity, "quantity"),
        metadata={str(k): str(v) for k, v in specs.items()},
    )


def component_from_record(record: Dict[str, Any]) -> ComponentSlot:
    return ComponentSlot(
        type=record["type"],
        quantity=_whole_number(record.get("quantity", 0), "component quantity"),
        modules_per_unit=_whole_number(
            _pick(record, "modules_per_unit", "modulesPerUnit", "modulesPerPair", default=2),
            "modules per unit",
        ),
    )


def panel_from_record(record: Dict[str, Any], room_id: str, index: int) -> PanelInstance:
    tags = _tags(_pick(record, "vendor_tags", "vendorTags"))
    brand = _pick(record, "brand", "brand_vendor")
    if not tags and brand:
        tags = (brand,)
    return PanelInstance(
        id=_panel_id(record, room_id, index),
        name=_blank_to_none(record.get("name")),
        module_size=_whole_number(_pick(record, "module_size", "moduleSize"), "module size"),
        components=tuple(component_from_record(c) for c in record.get("components") or []),
        vendor_tags=tags,
    )


def _appliance_id(record: Dict[str, Any], room_id: str, index: int) -> str:
    name = _blank_to_none(record.get("name"))
    return str(record.get("id") or f"{room_id}-{name or index}")


def _panel_id(record: Dict[str, Any], room_id: str, index: int) -> str:
    return str(record.get("id") or f"{room_id}-panel-{index}")


def _map_each(records, room_id: str, item_type: ItemType, mapper, id_of, rejected: list) -> tuple:
    mapped = []
    for index, record in enumerate(records or []):
        try:
            mapped.append(mapper(record, room_id, index))
        except RECORD_ERRORS as e:
            item_id = id_of(record, room_id, index) if isinstance(record, dict) else f"{room_id}-{index}"
            reason = f"Unreadable {item_type.value} record: {_reason(e)}"
            logger.warning(f"Skipping {item_type.value} {item_id} in room {room_id}: {reason}")
            rejected.append(SkippedRecord(room_id, item_type, item_id, reason))
    return tuple(mapped)


def room_from_record(record: Dict[str, Any], default_automation_type=AutomationType.WIRELESS) -> Room:
    """
    Room with its appliances and panels.

    Each appliance and panel is mapped on its own: a record that cannot be
    read lands in Room.rejected and the rest of the room is kept.
    """
    room_id = str(record["id"])
    automation = _pick(record, "automation_type", "automationType", default=default_automation_type)
    rejected: List[SkippedRecord] = []
    appliances = _map_each(
        record.get("appliances"), room_id, ItemType.APPLIANCE, appliance_from_record, _appliance_id, rejected
    )
    panels = _map_each(
        record.get("panels"), room_id, ItemType.PANEL, panel_from_record, _panel_id, rejected
    )
    return Room(
        id=room_id,
        name=record.get("name") or room_id,
        automation_type=AutomationType(automation),
        appliances=appliances,
        panels=panels,
        rejected=tuple(rejected),
    )


def rooms_from_project(project: Dict[str, Any]) -> List[Room]:
    """
    Rooms of a project row; the project's automation type is the default per room.

    A room that cannot be read at all (no id, unknown automation type) is
    kept as an empty room whose only content is the rejection, so the rest
    of the project still prices.
    """
    try:
        default = AutomationType(project.get("automation_type") or AutomationType.WIRELESS)
    except ValueError:
        logger.warning(
            f"Project {project.get('id')} has unknown automation type "
            f"{project.get('automation_type')!r}; rooms default to wireless"
        )
        default = AutomationType.WIRELESS
    rooms = []
    for index, record in enumerate(project.get("rooms") or []):
        try:
            rooms.append(room_from_record(record, default))
        except RECORD_ERRORS as e:
            fields = record if isinstance(record, dict) else {}
            room_id = str(fields.get("id") or f"room-{index}")
            reason = f"Unreadable room record: {_reason(e)}"
            logger.warning(f"Skipping room {room_id} of project {project.get('id')}: {reason}")
            rooms.append(Room(
                id=room_id,
                name=fields.get("name") or room_id,
                automation_type=default,
                rejected=(SkippedRecord(room_id, ItemType.ROOM, room_id, reason),),
            ))
    return rooms


# ==========================================
# Quotation documents
# ==========================================

def line_item_to_record(item: BOQLineItem) -> Dict[str, Any]:
    return {
        "room_id": item.room_id,
        "room_name": item.room_name,
        "item_type": item.item_type.value,
        "item_id": item.item_id,
        "name": item.name,
        "category": item.category,
        "subcategory": item.subcategory,
        "quantity": item.quantity,
        "unit_price": str(item.unit_price),
        "total_price": str(item.total_price),
        "price_fallback": item.price_fallback,
    }


def line_item_from_record(record: Dict[str, Any]) -> BOQLineItem:
    return BOQLineItem(
        room_id=record["room_id"],
        room_name=record.get("room_name", ""),
        item_type=ItemType(record["item_type"]),
        item_id=record["item_id"],
        name=record["name"],
        category=record["category"],
        subcategory=record.get("subcategory"),
        quantity=int(record["quantity"]),
        unit_price=Decimal(str(record["unit_price"])),
        total_price=Decimal(str(record["total_price"])),
        price_fallback=bool(record.get("price_fallback", False)),
    )


def totals_to_record(totals: Totals) -> Dict[str, str]:
    return {
        "items_cost": str(totals.items_cost),
        "automation_cost": str(totals.automation_cost),
        "subtotal": str(totals.subtotal),
        "tax_percent": str(totals.tax_percent),
        "tax_amount": str(totals.tax_amount),
        "grand_total": str(totals.grand_total),
    }


def document_to_record(doc: QuotationDocument) -> Dict[str, Any]:
    """Row for the proforma_invoices table"""
    return {
        "id": doc.id,
        "pi_number": doc.number,
        "project_id": doc.project_id,
        "boq_items": [line_item_to_record(i) for i in doc.line_items],
        "boq_summary": {
            "total_items": doc.summary.total_items,
            "total_quantity": doc.summary.total_quantity,
            "total_cost": str(doc.summary.total_cost),
        },
        "automation_type": doc.automation_type.value,
        "items_cost": str(doc.totals.items_cost),
        "automation_cost": str(doc.totals.automation_cost),
        "total_amount": str(doc.totals.subtotal),
        "gst_percent": str(doc.totals.tax_percent),
        "gst_amount": str(doc.totals.tax_amount),
        "grand_total": str(doc.totals.grand_total),
        "status": doc.status.value,
        "created_at": _iso(doc.created_at),
        "sent_at": _iso(doc.sent_at),
        "accepted_at": _iso(doc.accepted_at),
        "rejected_at": _iso(doc.rejected_at),
        "client_name": doc.client.name,
        "client_email": doc.client.email,
        "client_phone": doc.client.phone,
        "notes": doc.notes,
        "validity_days": doc.validity_days,
        "supersedes_id": doc.supersedes,
    }


def document_from_record(record: Dict[str, Any]) -> QuotationDocument:
    summary = record.get("boq_summary") or {}
    return QuotationDocument(
        id=str(record["id"]),
        number=record["pi_number"],
        project_id=str(record["project_id"]),
        line_items=tuple(line_item_from_record(i) for i in record.get("boq_items") or []),
        summary=BOQSummary(
            total_items=int(summary.get("total_items", 0)),
            total_quantity=int(summary.get("total_quantity", 0)),
            total_cost=Decimal(str(summary.get("total_cost", "0"))),
        ),
        totals=Totals(
            items_cost=Decimal(str(record["items_cost"])),
            automation_cost=Decimal(str(record["automation_cost"])),
            subtotal=Decimal(str(record["total_amount"])),
            tax_percent=Decimal(str(record["gst_percent"])),
            tax_amount=Decimal(str(record["gst_amount"])),
            grand_total=Decimal(str(record["grand_total"])),
        ),
        automation_type=AutomationType(record["automation_type"]),
        status=QuotationStatus(record["status"]),
        created_at=_datetime(record["created_at"]),
        sent_at=_datetime(record.get("sent_at")),
        accepted_at=_datetime(record.get("accepted_at")),
        rejected_at=_datetime(record.get("rejected_at")),
        client=ClientInfo(
            name=record.get("client_name") or "",
            email=record.get("client_email") or "",
            phone=record.get("client_phone") or "",
        ),
        notes=record.get("notes"),
        validity_days=int(record.get("validity_days") or 30),
        supersedes=record.get("supersedes_id"),
    )
