"""
BOQ / Quotation Pydantic Schemas
Request bodies and conversion to engine values
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field

from smarthome_boq_core.engine.boq_builder import BOQBuildResult
from smarthome_boq_core.engine.models import (
    ApplianceLine,
    AutomationType,
    BOQLineItem,
    ClientInfo,
    ComponentSlot,
    ItemType,
    PanelInstance,
    PriceEntry,
    QuotationAction,
    Room,
)


def encode(value: Any) -> Any:
    """JSON-ready form of engine values; money is kept exact as strings"""
    return jsonable_encoder(value, custom_encoder={Decimal: str})


def encode_build_result(result: BOQBuildResult) -> Dict[str, Any]:
    return {
        "lineItems": encode(result.line_items),
        "warnings": [
            {
                "roomId": w.room_id,
                "itemId": w.item_id,
                "category": w.category,
                "unitPrice": str(w.unit_price),
                "message": str(w),
            }
            for w in result.warnings
        ],
        "skipped": encode(result.skipped),
        "hasFallbacks": result.has_fallbacks,
    }


# === Request schemas: project structure ===

class ApplianceIn(BaseModel):
    """Appliance placed in a room"""
    id: str
    name: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    wattage: Optional[int] = None
    quantity: int = Field(1, description="Units of this appliance in the room")
    metadata: Dict[str, str] = Field(default_factory=dict, description="Free-form specifications")

    def to_engine(self) -> ApplianceLine:
        return ApplianceLine(
            id=self.id,
            name=self.name,
            category=self.category,
            subcategory=self.subcategory,
            wattage=self.wattage,
            quantity=self.quantity,
            metadata=dict(self.metadata),
        )


class ComponentIn(BaseModel):
    """Component slot on a touch panel"""
    type: str = Field(..., description="on_off, socket, fan_speed, scene_controller, dimmer")
    quantity: int = Field(..., ge=0)
    modules_per_unit: int = Field(2, ge=1)

    def to_engine(self) -> ComponentSlot:
        return ComponentSlot(self.type, self.quantity, self.modules_per_unit)


class PanelIn(BaseModel):
    """Touch panel instance"""
    id: str
    name: Optional[str] = None
    module_size: int = Field(..., description="2, 4, 6, 8 or 12 modules")
    components: List[ComponentIn] = Field(default_factory=list)
    vendor_tags: List[str] = Field(default_factory=list)

    def to_engine(self) -> PanelInstance:
        return PanelInstance(
            id=self.id,
            name=self.name,
            module_size=self.module_size,
            components=tuple(c.to_engine() for c in self.components),
            vendor_tags=tuple(self.vendor_tags),
        )


class RoomIn(BaseModel):
    """Room with its appliances and panels"""
    id: str
    name: str
    automation_type: AutomationType = AutomationType.WIRELESS
    appliances: List[ApplianceIn] = Field(default_factory=list)
    panels: List[PanelIn] = Field(default_factory=list)

    def to_engine(self) -> Room:
        return Room(
            id=self.id,
            name=self.name,
            automation_type=self.automation_type,
            appliances=tuple(a.to_engine() for a in self.appliances),
            panels=tuple(p.to_engine() for p in self.panels),
        )


class PriceEntryIn(BaseModel):
    """Price list row"""
    category: str
    price_per_unit: Decimal = Field(..., ge=0)
    subcategory: Optional[str] = None
    wattage: Optional[int] = None
    vendor_tags: List[str] = Field(default_factory=list)
    product_name: Optional[str] = None
    notes: Optional[str] = None

    def to_engine(self) -> PriceEntry:
        return PriceEntry(
            category=self.category,
            price_per_unit=self.price_per_unit,
            subcategory=self.subcategory,
            wattage=self.wattage,
            vendor_tags=tuple(self.vendor_tags),
            product_name=self.product_name,
            notes=self.notes,
        )


class LineItemIn(BaseModel):
    """Priced BOQ line as returned by /v1/boq/build"""
    room_id: str
    room_name: str = ""
    item_type: ItemType
    item_id: str
    name: str
    category: str
    subcategory: Optional[str] = None
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    price_fallback: bool = False

    def to_engine(self) -> BOQLineItem:
        return BOQLineItem(**self.model_dump())


class ClientIn(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""

    def to_engine(self) -> ClientInfo:
        return ClientInfo(self.name, self.email, self.phone)


# === Request schemas: BOQ endpoints ===

class BuildBOQRequest(BaseModel):
    """Price rooms against an explicit price list"""
    rooms: List[RoomIn]
    catalog: List[PriceEntryIn] = Field(default_factory=list)
    default_unit_price: Optional[Decimal] = Field(None, gt=0, description="Fallback unit price")

    model_config = {
        "json_schema_extra": {
            "example": {
                "rooms": [{
                    "id": "living",
                    "name": "Living Room",
                    "automation_type": "wireless",
                    "appliances": [{"id": "a1", "name": "Downlight", "category": "Lights",
                                    "subcategory": "ON/OFF", "quantity": 4}],
                    "panels": [],
                }],
                "catalog": [{"category": "Lights", "subcategory": "ON/OFF", "price_per_unit": "1000"}],
            }
        }
    }


class WiredCostRequest(BaseModel):
    rooms: List[RoomIn]
    extra_channels: int = Field(0, ge=0, description="Manual actuator channel adjustment")
    wire_length_meters: Decimal = Field(Decimal("0"), ge=0)


class TotalsRequest(BaseModel):
    line_items: List[LineItemIn]
    automation_cost: Decimal = Field(Decimal("0"), ge=0)
    tax_percent: Optional[Decimal] = Field(None, ge=0, description="Defaults to the configured GST rate")


class QuotePreviewRequest(BaseModel):
    extra_channels: int = Field(0, ge=0)
    wire_length_meters: Decimal = Field(Decimal("0"), ge=0)
    tax_percent: Optional[Decimal] = Field(None, ge=0)


# === Request schemas: quotations ===

class IssueQuotationRequest(BaseModel):
    """Freeze a priced BOQ into a draft quotation"""
    project_id: str = Field(..., min_length=1)
    automation_type: AutomationType = AutomationType.WIRELESS
    line_items: List[LineItemIn]
    automation_cost: Decimal = Field(Decimal("0"), ge=0)
    tax_percent: Optional[Decimal] = Field(None, ge=0)
    client: ClientIn = Field(default_factory=ClientIn)
    notes: Optional[str] = None
    validity_days: Optional[int] = Field(None, ge=1)


class IssueFromProjectRequest(QuotePreviewRequest):
    """Price a stored project and issue the result"""
    client: ClientIn = Field(default_factory=ClientIn)
    notes: Optional[str] = None
    validity_days: Optional[int] = Field(None, ge=1)


class TransitionRequest(BaseModel):
    action: QuotationAction


class ReviseQuotationRequest(BaseModel):
    """Replacement content for a quotation; issued as a new document"""
    line_items: List[LineItemIn]
    automation_cost: Decimal = Field(Decimal("0"), ge=0)
    tax_percent: Optional[Decimal] = Field(None, ge=0)
    client: Optional[ClientIn] = None
    notes: Optional[str] = None
    validity_days: Optional[int] = Field(None, ge=1)
