"""
BOQ Engine Data Model
Immutable value types passed between the engine components.

Money is always decimal.Decimal. Rounding to 2 decimals happens only in the
totals calculator.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional, Tuple


# Catalog categories the engine treats specially
CATEGORY_LIGHTS = "Lights"
CATEGORY_CURTAINS = "Curtain & Blinds"
CATEGORY_TOUCH_PANELS = "Touch Panels"


def to_decimal(value) -> Decimal:
    """Convert int, float, str or Decimal to Decimal without binary float drift"""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("bool is not a monetary value")
    return Decimal(str(value))


class AutomationType(str, Enum):
    WIRED = "wired"
    WIRELESS = "wireless"


class ItemType(str, Enum):
    APPLIANCE = "appliance"
    PANEL = "panel"
    ROOM = "room"


class QuotationStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class QuotationAction(str, Enum):
    SEND = "send"
    ACCEPT = "accept"
    REJECT = "reject"


@dataclass(frozen=True)
class PriceEntry:
    """One row of the price list"""
    category: str
    price_per_unit: Decimal
    subcategory: Optional[str] = None
    wattage: Optional[int] = None
    vendor_tags: Tuple[str, ...] = ()
    product_name: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class ApplianceLine:
    id: str
    quantity: int = 1
    name: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    wattage: Optional[int] = None
    metadata: Dict[str, str] = field(default_factory=dict, hash=False, compare=False)


@dataclass(frozen=True)
class ComponentSlot:
    type: str
    quantity: int
    modules_per_unit: int = 2


@dataclass(frozen=True)
class PanelInstance:
    id: str
    name: Optional[str]
    module_size: int
    components: Tuple[ComponentSlot, ...] = ()
    vendor_tags: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SkippedRecord:
    """A record left out of the BOQ, with the reason it could not be priced"""
    room_id: str
    item_type: ItemType
    item_id: str
    reason: str


@dataclass(frozen=True)
class Room:
    id: str
    name: str
    automation_type: AutomationType = AutomationType.WIRELESS
    appliances: Tuple[ApplianceLine, ...] = ()
    panels: Tuple[PanelInstance, ...] = ()
    # records of this room that could not be read from the store
    rejected: Tuple[SkippedRecord, ...] = ()


@dataclass(frozen=True)
class BOQLineItem:
    room_id: str
    room_name: str
    item_type: ItemType
    item_id: str
    name: str
    category: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    subcategory: Optional[str] = None
    price_fallback: bool = False


@dataclass(frozen=True)
class ModuleSpec:
    """A hardware module offered for channel covering"""
    module_type: str
    name: str
    capacity: int
    price: Decimal


@dataclass(frozen=True)
class PackedModule:
    module_type: str
    name: str
    unit_capacity: int
    unit_price: Decimal
    quantity: int

    @property
    def total_price(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def channels(self) -> int:
        return self.unit_capacity * self.quantity


@dataclass(frozen=True)
class ModulePackingResult:
    required_channels: int
    modules: Tuple[PackedModule, ...]
    total_cost: Decimal
    covered_channels: int
    method: str
    justification: str


@dataclass(frozen=True)
class Totals:
    items_cost: Decimal
    automation_cost: Decimal
    subtotal: Decimal
    tax_percent: Decimal
    tax_amount: Decimal
    grand_total: Decimal


@dataclass(frozen=True)
class BOQSummary:
    total_items: int
    total_quantity: int
    total_cost: Decimal


@dataclass(frozen=True)
class ClientInfo:
    name: str = ""
    email: str = ""
    phone: str = ""


@dataclass(frozen=True)
class QuotationDocument:
    id: str
    number: str
    project_id: str
    line_items: Tuple[BOQLineItem, ...]
    summary: BOQSummary
    totals: Totals
    automation_type: AutomationType
    status: QuotationStatus
    created_at: datetime
    sent_at: Optional[datetime] = None
    accepted_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    client: ClientInfo = ClientInfo()
    notes: Optional[str] = None
    validity_days: int = 30
    supersedes: Optional[str] = None

    @property
    def subtotal(self) -> Decimal:
        return self.totals.subtotal

    @property
    def tax_amount(self) -> Decimal:
        return self.totals.tax_amount

    @property
    def grand_total(self) -> Decimal:
        return self.totals.grand_total
