"""
Unit tests for the wired (KNX) cost aggregator
"""

from decimal import Decimal

import pytest

from smarthome_boq_core.engine.errors import ValidationError
from smarthome_boq_core.engine.models import ApplianceLine, AutomationType, Room
from smarthome_boq_core.engine.wired_cost import (
    ChannelClass,
    aggregate_wired,
    classify_channel,
    count_channels,
)

MANDATORY_COST = Decimal("108500")


def _wired(*appliances, room_id="r1"):
    return Room(room_id, room_id, AutomationType.WIRED, appliances=tuple(appliances))


def _light(subcategory, quantity=1, item_id="l"):
    return ApplianceLine(item_id, quantity, "Light", "Lights", subcategory)


@pytest.mark.unit
class TestClassifyChannel:
    """Test which hardware serves an appliance"""

    @pytest.mark.parametrize("subcategory,expected", [
        (None, ChannelClass.ACTUATOR),
        ("ON/OFF", ChannelClass.ACTUATOR),
        ("Warm on/off strip", ChannelClass.ACTUATOR),
        ("Dimmable", ChannelClass.LIGHTING),
        ("RGB", ChannelClass.LIGHTING),
    ])
    def test_lights(self, subcategory, expected):
        assert classify_channel(_light(subcategory)) == expected

    def test_curtains(self):
        curtain = ApplianceLine("c1", 1, "Curtain", "Curtain & Blinds")
        assert classify_channel(curtain) == ChannelClass.CURTAIN

    def test_other_categories(self):
        assert classify_channel(ApplianceLine("f1", 1, "Fan", "Fans")) == ChannelClass.NONE


@pytest.mark.unit
class TestCountChannels:
    def test_curtains_take_two_channels(self):
        rooms = [_wired(_light("ON/OFF", 10), ApplianceLine("c1", 2, "Curtain", "Curtain & Blinds"))]

        counts = count_channels(rooms)

        assert counts.on_off_lights == 10
        assert counts.curtain_channels == 4
        assert counts.actuator_channels == 14

    def test_wireless_rooms_ignored(self):
        rooms = [
            _wired(_light("ON/OFF", 3)),
            Room("r2", "Bedroom", AutomationType.WIRELESS, appliances=(_light("ON/OFF", 5),)),
        ]

        assert count_channels(rooms).actuator_channels == 3

    def test_extra_channels_added_to_actuators(self):
        counts = count_channels([_wired(_light("Dimmable", 2))], extra_channels=3)

        assert counts.actuator_channels == 3
        assert counts.lighting_channels == 2


@pytest.mark.unit
class TestAggregateWired:
    """Test total KNX cost"""

    def test_breakdown_adds_up(self):
        rooms = [_wired(
            _light("ON/OFF", 10, "l1"),
            _light("Dimmable", 3, "l2"),
            ApplianceLine("c1", 2, "Curtain", "Curtain & Blinds"),
        )]

        result = aggregate_wired(rooms, wire_length_meters=50)
        breakdown = result.breakdown

        # 14 actuator channels -> one 16ch actuator
        assert breakdown.actuators.total_cost == Decimal("38000")
        assert breakdown.lighting.total_cost == Decimal("28000")
        assert breakdown.mandatory_cost == MANDATORY_COST
        assert breakdown.wiring.cost == Decimal("4000")
        assert result.total_cost == Decimal("38000") + Decimal("28000") + MANDATORY_COST + Decimal("4000")

    def test_mandatory_components_always_present(self):
        result = aggregate_wired([])

        assert result.total_cost == MANDATORY_COST
        assert [c.code for c in result.breakdown.mandatory_components] == [
            "ip_to_knx", "power_supply", "main_processor",
        ]

    def test_fractional_wire_length(self):
        result = aggregate_wired([], wire_length_meters="12.5")

        assert result.breakdown.wiring.cost == Decimal("1000.0")

    @pytest.mark.parametrize("kwargs", [
        {"extra_channels": -1},
        {"extra_channels": 1.5},
        {"wire_length_meters": -3},
    ])
    def test_invalid_inputs(self, kwargs):
        with pytest.raises(ValidationError):
            aggregate_wired([], **kwargs)
