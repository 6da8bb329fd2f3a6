"""
Panel Capacity Validator
Module-slot accounting for wall-mounted touch panels
"""

import re
from dataclasses import dataclass
from typing import Dict, Optional

from .errors import ValidationError
from .models import PanelInstance

PANEL_SIZES = (2, 4, 6, 8, 12)

# "1ST" -> "ST"; "12S" and "10F" keep their counts
_SINGLE_COUNT = re.compile(r"^1(?=[A-Z])")

# Component type -> (display name, modules per unit, preset abbreviation)
PANEL_COMPONENT_TYPES: Dict[str, tuple] = {
    "on_off": ("On/Off Switch", 2, "S"),
    "socket": ("Socket", 2, "ST"),
    "fan_speed": ("Fan Speed Control", 2, "F"),
    "scene_controller": ("Scene Controller", 2, "SC"),
    "dimmer": ("Dimmer (Phase Cut)", 2, "D"),
}


@dataclass(frozen=True)
class PanelValidation:
    module_size: int
    total_modules_used: int
    is_full: bool
    ok: bool

    @property
    def free_modules(self) -> int:
        return self.module_size - self.total_modules_used


def modules_used(panel: PanelInstance) -> int:
    """Sum of quantity x modules_per_unit over the panel's component slots"""
    total = 0
    for slot in panel.components:
        if slot.quantity < 0:
            raise ValidationError(
                f"Panel {panel.id}: component {slot.type} has negative quantity {slot.quantity}",
                field="quantity",
            )
        if slot.modules_per_unit < 1:
            raise ValidationError(
                f"Panel {panel.id}: component {slot.type} must occupy at least one module",
                field="modules_per_unit",
            )
        total += slot.quantity * slot.modules_per_unit
    return total


def validate_panel(panel: PanelInstance) -> PanelValidation:
    """
    Compute module usage of a panel.

    Overflow is reported through ok=False, never truncated. Re-run after
    every component edit.

    Raises:
        ValidationError: unsupported module size or malformed component slot
    """
    if panel.module_size not in PANEL_SIZES:
        raise ValidationError(
            f"Panel {panel.id}: module size {panel.module_size} not in {PANEL_SIZES}",
            field="module_size",
        )
    used = modules_used(panel)
    return PanelValidation(
        module_size=panel.module_size,
        total_modules_used=used,
        is_full=used == panel.module_size,
        ok=used <= panel.module_size,
    )


def ensure_panel_fits(panel: PanelInstance) -> PanelValidation:
    """Gate used before a panel preset is saved or added to a room"""
    result = validate_panel(panel)
    if not result.ok:
        raise ValidationError(
            f"Panel {panel.id}: {result.total_modules_used} modules used exceeds "
            f"capacity {panel.module_size}",
            field="components",
        )
    return result


def component_abbreviation(component_type: str) -> str:
    known = PANEL_COMPONENT_TYPES.get(component_type)
    if known:
        return known[2]
    return component_type[:1].upper()


def panel_signature(panel: PanelInstance) -> str:
    """
    Preset name of a panel, e.g. "12M-4S-1ST-1F" for four switches, one
    socket and one fan control on a 12-module panel.

    Format is [size]M followed by one dash-separated [count][abbreviation]
    token per component with a non-zero quantity, the way presets are named
    in the inventory.
    """
    tokens = [
        f"{slot.quantity}{component_abbreviation(slot.type)}"
        for slot in panel.components
        if slot.quantity > 0
    ]
    size = f"{panel.module_size}M"
    return "-".join([size] + tokens) if tokens else size


def normalize_signature(name: Optional[str]) -> Optional[str]:
    """
    Comparable form of a preset name.

    Case and surrounding whitespace are ignored and a count of one may be
    written or omitted, so "6m-2S-ST" and "6M-2S-1ST" compare equal.
    """
    if not name:
        return None
    parts = [p for p in name.strip().upper().split("-") if p]
    if not parts:
        return None
    tokens = [_SINGLE_COUNT.sub("", token) for token in parts[1:]]
    return "-".join([parts[0]] + tokens)
