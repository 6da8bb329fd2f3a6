"""
Pytest configuration and fixtures
"""

import random
import sys
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add src (engine) and the repository root (api) to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent.parent))

from smarthome_boq_core.engine.quotation import DocumentNumberGenerator
from smarthome_boq_core.infra import InMemoryStore

FIXED_NOW = datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)


class SteppingClock:
    """Deterministic clock advancing one second per call"""

    def __init__(self, start: datetime = FIXED_NOW):
        self.current = start

    def __call__(self) -> datetime:
        now = self.current
        self.current += timedelta(seconds=1)
        return now


@pytest.fixture
def sample_inventory():
    """Price list rows as stored in the inventory table"""
    return [
        {"category": "Lights", "subcategory": "ON/OFF", "wattage": None, "price_per_unit": 1000},
        {"category": "Lights", "subcategory": "Dimmable", "wattage": 12, "price_per_unit": 1800},
        {"category": "Lights", "subcategory": "-", "wattage": 0, "price_per_unit": 900},
        {"category": "Curtain & Blinds", "subcategory": None, "price_per_unit": 7500},
        {"category": "Fans", "subcategory": "BLDC", "price_per_unit": 4200},
        {
            "category": "Touch Panels",
            "product_name": "6M-2S-ST",
            "vendor_tags": ["Schneider"],
            "price_per_unit": 6500,
        },
        {
            "category": "Touch Panels",
            "product_name": "6M-2S-1ST",
            "subcategory": "Legrand",
            "vendor": "Legrand",
            "wattage": 0,
            "vendor_tags": ["Legrand"],
            "price_per_unit": 5900,
        },
    ]


@pytest.fixture
def sample_project():
    """Project row with one wireless and one wired room"""
    return {
        "id": "proj-001",
        "name": "Sharma Residence",
        "automation_type": "wireless",
        "rooms": [
            {
                "id": "living",
                "name": "Living Room",
                "appliances": [
                    {"id": "l1", "name": "Downlight", "category": "Lights", "subcategory": "ON/OFF", "quantity": 4},
                    {"id": "f1", "name": "Ceiling Fan", "category": "Fans", "subcategory": "BLDC", "quantity": 1},
                ],
                "panels": [
                    {
                        "id": "p1",
                        "name": "Living Panel",
                        "moduleSize": 6,
                        "brand": "Legrand",
                        "components": [
                            {"type": "on_off", "quantity": 2, "modulesPerPair": 2},
                            {"type": "socket", "quantity": 1, "modulesPerPair": 2},
                        ],
                    }
                ],
            },
            {
                "id": "bed",
                "name": "Master Bedroom",
                "automationType": "wired",
                "appliances": [
                    {"id": "l2", "name": "Cove Light", "category": "Lights", "subcategory": "Dimmable",
                     "wattage": 12, "quantity": 3},
                    {"id": "c1", "name": "Curtain Motor", "category": "Curtain & Blinds", "quantity": 2},
                ],
                "panels": [],
            },
        ],
    }


@pytest.fixture
def memory_store(sample_project, sample_inventory):
    """In-memory store seeded with the sample project and price list"""
    return InMemoryStore(projects=[sample_project], inventory=sample_inventory)


@pytest.fixture
def clock():
    return SteppingClock()


@pytest.fixture
def number_generator():
    """Seeded generator; numbers are reproducible across runs"""
    return DocumentNumberGenerator(rng=random.Random(42), today=lambda: date(2026, 10, 19))


@pytest.fixture(autouse=True)
def reset_store_singleton():
    """Reset the API store singleton before each test"""
    import api.dependencies as deps
    deps.reset_store()
    yield
    deps.reset_store()


# Test markers
def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, isolated)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (HTTP API, store adapters)"
    )
