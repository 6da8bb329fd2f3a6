"""
Unit tests for touch panel capacity validation
"""

import pytest

from smarthome_boq_core.engine.errors import ValidationError
from smarthome_boq_core.engine.models import ComponentSlot, PanelInstance
from smarthome_boq_core.engine.panel_validator import (
    PANEL_SIZES,
    ensure_panel_fits,
    normalize_signature,
    panel_signature,
    validate_panel,
)


def _panel(size, *components):
    return PanelInstance(id="p1", name="Panel", module_size=size, components=tuple(components))


@pytest.mark.unit
class TestValidatePanel:
    """Test module accounting on panels"""

    def test_partially_filled_panel(self):
        """Two switches on a 6-module panel use 4 modules"""
        result = validate_panel(_panel(6, ComponentSlot("on_off", 2, 2)))

        assert result.total_modules_used == 4
        assert result.ok is True
        assert result.is_full is False
        assert result.free_modules == 2

    def test_overfilled_panel_reported_not_truncated(self):
        """Four switches need 8 modules; a 6-module panel is not ok"""
        result = validate_panel(_panel(6, ComponentSlot("on_off", 4, 2)))

        assert result.total_modules_used == 8
        assert result.ok is False
        assert result.free_modules == -2

    def test_exactly_full_panel(self):
        result = validate_panel(_panel(4, ComponentSlot("on_off", 1), ComponentSlot("socket", 1)))

        assert result.is_full is True
        assert result.ok is True

    def test_empty_panel(self):
        result = validate_panel(_panel(2))

        assert result.total_modules_used == 0
        assert result.ok is True

    @pytest.mark.parametrize("size", PANEL_SIZES)
    def test_invariant_ok_iff_used_within_size(self, size):
        for quantity in range(0, 8):
            result = validate_panel(_panel(size, ComponentSlot("on_off", quantity)))
            assert result.ok == (result.total_modules_used <= size)
            assert result.is_full == (result.total_modules_used == size)

    @pytest.mark.parametrize("size", [0, 3, 10, 16])
    def test_unsupported_size_rejected(self, size):
        with pytest.raises(ValidationError) as exc_info:
            validate_panel(_panel(size))
        assert exc_info.value.field == "module_size"

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValidationError):
            validate_panel(_panel(6, ComponentSlot("on_off", -1)))

    def test_ensure_panel_fits_rejects_overflow(self):
        with pytest.raises(ValidationError) as exc_info:
            ensure_panel_fits(_panel(6, ComponentSlot("on_off", 4, 2)))
        assert exc_info.value.field == "components"

    def test_ensure_panel_fits_returns_usage(self):
        assert ensure_panel_fits(_panel(6, ComponentSlot("on_off", 3))).is_full is True


@pytest.mark.unit
class TestPanelSignature:
    """Test preset naming used for vendor pricing"""

    @pytest.mark.parametrize("components,expected", [
        ((ComponentSlot("on_off", 4), ComponentSlot("socket", 1), ComponentSlot("fan_speed", 1)), "12M-4S-1ST-1F"),
        ((ComponentSlot("on_off", 2),), "12M-2S"),
        ((ComponentSlot("scene_controller", 1), ComponentSlot("dimmer", 2)), "12M-1SC-2D"),
        ((ComponentSlot("on_off", 0), ComponentSlot("socket", 1)), "12M-1ST"),
        ((), "12M"),
    ])
    def test_signature(self, components, expected):
        assert panel_signature(_panel(12, *components)) == expected

    @pytest.mark.parametrize("name,expected", [
        ("6M-2S-1ST", "6M-2S-ST"),
        ("6M-2S-ST", "6M-2S-ST"),
        (" 6m-2s-1st ", "6M-2S-ST"),
        ("12M-12S", "12M-12S"),
        ("12M-10F-1SC", "12M-10F-SC"),
        ("", None),
        (None, None),
    ])
    def test_normalize_signature(self, name, expected):
        assert normalize_signature(name) == expected

    def test_single_count_written_or_omitted_compare_equal(self):
        panel = _panel(6, ComponentSlot("on_off", 2), ComponentSlot("socket", 1))

        assert normalize_signature(panel_signature(panel)) == normalize_signature("6M-2S-ST")
