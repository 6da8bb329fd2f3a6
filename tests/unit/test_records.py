"""
Unit tests for store record mapping
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from smarthome_boq_core.engine.boq_builder import build_boq
from smarthome_boq_core.engine.models import AutomationType, ClientInfo, ItemType, QuotationStatus
from smarthome_boq_core.engine.quotation import QuotationSnapshot, freeze_quotation
from smarthome_boq_core.engine.totals import compute_totals
from smarthome_boq_core.infra.records import (
    appliance_from_record,
    catalog_from_records,
    document_from_record,
    document_to_record,
    panel_from_record,
    price_entry_from_record,
    room_from_record,
    rooms_from_project,
)


@pytest.mark.unit
class TestCatalogRecords:
    def test_dash_and_zero_mean_absent(self):
        entry = price_entry_from_record(
            {"category": "Lights", "subcategory": "-", "wattage": 0, "price_per_unit": 900}
        )

        assert entry.subcategory is None
        assert entry.wattage is None
        assert entry.price_per_unit == Decimal("900")

    def test_float_price_kept_exact(self):
        entry = price_entry_from_record({"category": "Fans", "pricePerUnit": 4199.99})

        assert entry.price_per_unit == Decimal("4199.99")

    def test_vendor_tags(self):
        entry = price_entry_from_record(
            {"category": "Touch Panels", "price_per_unit": 10, "vendor_tags": ["Legrand", ""]}
        )

        assert entry.vendor_tags == ("Legrand",)

    def test_unreadable_rows_left_out(self, sample_inventory):
        rows = sample_inventory + [
            {"category": "Fans", "price_per_unit": "call us"},
            {"product_name": "no category", "price_per_unit": 100},
            {"category": "Fans"},
            None,
        ]

        catalog = catalog_from_records(rows)

        assert len(catalog.entries) == len(sample_inventory)

    def test_preset_row_as_written_by_panel_admin(self):
        entry = price_entry_from_record({
            "product_name": "6M-2S-1ST", "category": "Touch Panels", "subcategory": "Legrand",
            "vendor": "Legrand", "wattage": 0, "price_per_unit": 5900,
        })

        assert entry.product_name == "6M-2S-1ST"
        assert entry.vendor_tags == ("Legrand",)
        assert entry.wattage is None


@pytest.mark.unit
class TestProjectRecords:
    def test_camel_case_panel(self):
        panel = panel_from_record(
            {"name": "Panel", "moduleSize": 6, "brand": "Legrand",
             "components": [{"type": "on_off", "quantity": 2, "modulesPerPair": 2}]},
            "living", 0,
        )

        assert panel.id == "living-panel-0"
        assert panel.module_size == 6
        assert panel.vendor_tags == ("Legrand",)
        assert panel.components[0].modules_per_unit == 2

    def test_appliance_defaults(self):
        appliance = appliance_from_record(
            {"name": "Fan", "category": "Fans", "specifications": {"sweep": 1200}}, "living", 3
        )

        assert appliance.id == "living-Fan"
        assert appliance.quantity == 1
        assert appliance.metadata == {"sweep": "1200"}

    def test_room_automation_type_defaults_to_project(self, sample_project):
        rooms = rooms_from_project(sample_project)

        assert rooms[0].automation_type == AutomationType.WIRELESS
        assert rooms[1].automation_type == AutomationType.WIRED

    def test_room_without_project_default(self):
        room = room_from_record({"id": "r1"}, AutomationType.WIRED)

        assert room.name == "r1"
        assert room.automation_type == AutomationType.WIRED
        assert room.appliances == ()

    def test_sample_project_prices(self, sample_project, sample_inventory):
        result = build_boq(rooms_from_project(sample_project), catalog_from_records(sample_inventory))

        assert [(i.item_id, i.total_price) for i in result.line_items] == [
            ("l1", Decimal("4000")),
            ("f1", Decimal("4200")),
            ("p1", Decimal("5900")),
            ("l2", Decimal("5400")),
            ("c1", Decimal("15000")),
        ]
        assert not result.has_fallbacks


@pytest.mark.unit
class TestDocumentRecords:
    def test_document_survives_storage_form(self, sample_project, sample_inventory):
        """Money is stored as strings and read back as the same Decimal"""
        items = build_boq(rooms_from_project(sample_project), catalog_from_records(sample_inventory)).line_items
        snapshot = QuotationSnapshot(
            project_id="proj-001",
            line_items=items,
            totals=compute_totals(items, automation_cost="162000", tax_percent="18"),
            automation_type=AutomationType.WIRED,
            client=ClientInfo("A. Sharma", "a@example.com", "+91 90000 00000"),
            notes="Includes KNX",
        )
        doc = freeze_quotation(snapshot, "PI-20261019-0042", datetime(2026, 10, 19, tzinfo=timezone.utc))

        record = document_to_record(doc)
        restored = document_from_record(record)

        assert record["pi_number"] == "PI-20261019-0042"
        assert record["grand_total"] == "231870.00"
        assert record["status"] == "draft"
        assert restored == doc
        assert restored.status == QuotationStatus.DRAFT

    def test_iso_timestamps_with_z_suffix(self, sample_project, sample_inventory):
        items = build_boq(rooms_from_project(sample_project), catalog_from_records(sample_inventory)).line_items
        snapshot = QuotationSnapshot("proj-001", items, compute_totals(items), AutomationType.WIRELESS)
        record = document_to_record(freeze_quotation(snapshot, "PI-1", datetime(2026, 10, 19, tzinfo=timezone.utc)))
        record["created_at"] = "2026-10-19T00:00:00Z"

        assert document_from_record(record).created_at == datetime(2026, 10, 19, tzinfo=timezone.utc)


@pytest.mark.unit
class TestMalformedProjectRecords:
    """Rows that cannot be read are rejected one by one, the rest still prices"""

    @staticmethod
    def _room(**overrides):
        room = {
            "id": "living",
            "name": "Living Room",
            "appliances": [{"id": "l1", "name": "Downlight", "category": "Lights", "subcategory": "ON/OFF"}],
            "panels": [],
        }
        room.update(overrides)
        return room

    def test_panel_without_module_size(self):
        room = room_from_record(self._room(panels=[{"id": "bad", "name": "Broken", "components": []}]))

        assert room.panels == ()
        assert [(r.item_type, r.item_id) for r in room.rejected] == [(ItemType.PANEL, "bad")]
        assert "module size" in room.rejected[0].reason

    def test_component_without_type(self):
        room = room_from_record(self._room(panels=[
            {"id": "p1", "name": "Panel", "moduleSize": 6, "components": [{"quantity": 2}]},
        ]))

        assert room.panels == ()
        assert room.rejected[0].item_id == "p1"
        assert "type" in room.rejected[0].reason

    @pytest.mark.parametrize("quantity", ["-", "2.5", 2.5, "two"])
    def test_unreadable_appliance_quantity(self, quantity):
        room = room_from_record(self._room(appliances=[
            {"id": "l1", "name": "Downlight", "category": "Lights"},
            {"id": "l2", "name": "Spot", "category": "Lights", "quantity": quantity},
        ]))

        assert [a.id for a in room.appliances] == ["l1"]
        assert [(r.item_type, r.item_id) for r in room.rejected] == [(ItemType.APPLIANCE, "l2")]

    @pytest.mark.parametrize("quantity,expected", [("3", 3), (3.0, 3), (" 4 ", 4)])
    def test_whole_number_quantities_accepted(self, quantity, expected):
        room = room_from_record(self._room(appliances=[
            {"id": "l1", "name": "Downlight", "category": "Lights", "quantity": quantity},
        ]))

        assert room.appliances[0].quantity == expected
        assert room.rejected == ()

    def test_unreadable_room_kept_as_rejection(self):
        rooms = rooms_from_project({
            "id": "proj-x",
            "rooms": [self._room(), {"name": "No id"}, self._room(id="bed", automationType="hybrid")],
        })

        assert [r.id for r in rooms] == ["living", "room-1", "bed"]
        assert rooms[1].rejected[0].item_type == ItemType.ROOM
        assert rooms[2].appliances == ()
        assert rooms[2].rejected[0].item_id == "bed"

    def test_unknown_project_automation_type_defaults_to_wireless(self):
        rooms = rooms_from_project({"id": "proj-x", "automation_type": "hybrid", "rooms": [self._room()]})

        assert rooms[0].automation_type == AutomationType.WIRELESS

    def test_build_reports_rejected_records(self, sample_inventory):
        rooms = rooms_from_project({"id": "proj-x", "rooms": [
            self._room(panels=[{"id": "bad", "name": "Broken", "components": []}]),
        ]})

        result = build_boq(rooms, catalog_from_records(sample_inventory))

        assert [i.item_id for i in result.line_items] == ["l1"]
        assert [(s.room_id, s.item_type, s.item_id) for s in result.skipped] == [
            ("living", ItemType.PANEL, "bad"),
        ]

    def test_preset_priced_panel(self, sample_inventory):
        """Panels price against presets whose names always carry the count"""
        rooms = rooms_from_project({"id": "proj-x", "rooms": [self._room(panels=[{
            "id": "p1", "name": "Living Panel", "moduleSize": 6, "brand": "Legrand",
            "components": [{"type": "on_off", "quantity": 2}, {"type": "socket", "quantity": 1}],
        }])]})

        panel_line = build_boq(rooms, catalog_from_records(sample_inventory)).line_items[-1]

        assert panel_line.unit_price == Decimal("5900")
        assert panel_line.price_fallback is False
