"""
Wired-Cost Aggregator
KNX automation cost: channel classification, module packing, mandatory
infrastructure and bus wiring
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Sequence, Tuple

from .errors import ValidationError
from .models import (
    CATEGORY_CURTAINS,
    CATEGORY_LIGHTS,
    ApplianceLine,
    AutomationType,
    ModulePackingResult,
    ModuleSpec,
    Room,
    to_decimal,
)
from .module_packer import pack

logger = logging.getLogger(__name__)

# A curtain motor needs an open/close channel pair.
# Business rule carried over as-is; confirm with the domain owners before changing.
CURTAIN_CHANNELS_PER_UNIT = 2


class ChannelClass(str, Enum):
    ACTUATOR = "actuator"
    LIGHTING = "lighting"
    CURTAIN = "curtain"
    NONE = "none"


@dataclass(frozen=True)
class MandatoryComponent:
    code: str
    name: str
    price: Decimal
    quantity: int = 1

    @property
    def total_price(self) -> Decimal:
        return self.price * self.quantity


@dataclass(frozen=True)
class WiredPricing:
    actuator_modules: Tuple[ModuleSpec, ...]
    lighting_modules: Tuple[ModuleSpec, ...]
    mandatory_components: Tuple[MandatoryComponent, ...]
    wire_price_per_meter: Decimal


DEFAULT_WIRED_PRICING = WiredPricing(
    actuator_modules=(
        ModuleSpec("on_off_actuator_8", "ON/OFF Actuator 8 Channel", 8, Decimal("25500")),
        ModuleSpec("on_off_actuator_16", "ON/OFF Actuator 16 Channel", 16, Decimal("38000")),
    ),
    lighting_modules=(
        ModuleSpec("lighting_module_64", "Lighting Module 64 Channel", 64, Decimal("28000")),
        ModuleSpec("lighting_module_128", "Lighting Module 128 Channel", 128, Decimal("49000")),
    ),
    mandatory_components=(
        MandatoryComponent("ip_to_knx", "IP to KNX Interface", Decimal("44000")),
        MandatoryComponent("power_supply", "Auxiliary Power Supply", Decimal("5500")),
        MandatoryComponent("main_processor", "Main Processor (Voice, Interface)", Decimal("59000")),
    ),
    wire_price_per_meter=Decimal("80"),
)


@dataclass(frozen=True)
class ChannelCounts:
    on_off_lights: int
    curtains: int
    curtain_channels: int
    extra_channels: int
    actuator_channels: int
    lighting_channels: int


@dataclass(frozen=True)
class WiringLine:
    length_meters: Decimal
    price_per_meter: Decimal
    cost: Decimal


@dataclass(frozen=True)
class WiredCostBreakdown:
    channels: ChannelCounts
    actuators: ModulePackingResult
    lighting: ModulePackingResult
    mandatory_components: Tuple[MandatoryComponent, ...]
    mandatory_cost: Decimal
    wiring: WiringLine


@dataclass(frozen=True)
class WiredCostResult:
    total_cost: Decimal
    breakdown: WiredCostBreakdown


def classify_channel(appliance: ApplianceLine) -> ChannelClass:
    """
    Decide which hardware serves an appliance.

    Lights with no subcategory, "ON/OFF", or any subcategory containing
    "on/off" (case-insensitive) are switched by actuator channels; other
    lights (dimmable, RGB, ...) go on lighting modules. Curtains and blinds
    take an actuator channel pair. Everything else is not channel-driven.
    """
    if appliance.category == CATEGORY_LIGHTS:
        sub = appliance.subcategory or ""
        if not sub or sub == "ON/OFF" or "on/off" in sub.lower():
            return ChannelClass.ACTUATOR
        return ChannelClass.LIGHTING
    if appliance.category == CATEGORY_CURTAINS:
        return ChannelClass.CURTAIN
    return ChannelClass.NONE


def count_channels(rooms: Sequence[Room], extra_channels: int = 0) -> ChannelCounts:
    on_off = 0
    lighting = 0
    curtains = 0
    for room in rooms:
        if room.automation_type != AutomationType.WIRED:
            continue
        for appliance in room.appliances:
            if appliance.quantity < 1:
                logger.warning(
                    f"Ignoring appliance {appliance.id} in room {room.id}: quantity {appliance.quantity}"
                )
                continue
            channel_class = classify_channel(appliance)
            if channel_class == ChannelClass.ACTUATOR:
                on_off += appliance.quantity
            elif channel_class == ChannelClass.LIGHTING:
                lighting += appliance.quantity
            elif channel_class == ChannelClass.CURTAIN:
                curtains += appliance.quantity

    curtain_channels = curtains * CURTAIN_CHANNELS_PER_UNIT
    return ChannelCounts(
        on_off_lights=on_off,
        curtains=curtains,
        curtain_channels=curtain_channels,
        extra_channels=extra_channels,
        actuator_channels=on_off + curtain_channels + extra_channels,
        lighting_channels=lighting,
    )


def aggregate_wired(
    rooms: Sequence[Room],
    extra_channels: int = 0,
    wire_length_meters=0,
    pricing: WiredPricing = DEFAULT_WIRED_PRICING,
) -> WiredCostResult:
    """
    Total KNX automation cost for the wired rooms of a project.

    Args:
        rooms: Project rooms; only wired rooms contribute channels
        extra_channels: Manual adjustment of actuator channels
        wire_length_meters: KNX bus cable length
        pricing: Module catalogs, mandatory components and cable price

    Returns:
        WiredCostResult with every subtotal kept in the breakdown
    """
    if isinstance(extra_channels, bool) or not isinstance(extra_channels, int) or extra_channels < 0:
        raise ValidationError(
            f"extra_channels must be a non-negative integer, got {extra_channels!r}",
            field="extra_channels",
        )
    length = to_decimal(wire_length_meters)
    if length < 0:
        raise ValidationError(
            f"wire_length_meters must be >= 0, got {wire_length_meters}", field="wire_length_meters"
        )

    channels = count_channels(rooms, extra_channels)
    actuators = pack(channels.actuator_channels, pricing.actuator_modules)
    lighting = pack(channels.lighting_channels, pricing.lighting_modules)

    # infrastructure present once per installation
    mandatory = tuple(
        MandatoryComponent(c.code, c.name, c.price, 1) for c in pricing.mandatory_components
    )
    mandatory_cost = sum((c.total_price for c in mandatory), Decimal("0"))
    wiring = WiringLine(
        length_meters=length,
        price_per_meter=pricing.wire_price_per_meter,
        cost=length * pricing.wire_price_per_meter,
    )

    total = actuators.total_cost + lighting.total_cost + mandatory_cost + wiring.cost
    logger.info(
        f"Wired cost: actuators={actuators.total_cost} lighting={lighting.total_cost} "
        f"mandatory={mandatory_cost} wiring={wiring.cost} total={total}"
    )
    return WiredCostResult(
        total_cost=total,
        breakdown=WiredCostBreakdown(
            channels=channels,
            actuators=actuators,
            lighting=lighting,
            mandatory_components=mandatory,
            mandatory_cost=mandatory_cost,
            wiring=wiring,
        ),
    )
