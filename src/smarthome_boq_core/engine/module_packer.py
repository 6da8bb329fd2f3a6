"""
Module Packing Optimizer
Cheapest covering of a channel count with fixed-capacity hardware modules

Two module sizes (the usual case: 8/16-channel actuators, 64/128-channel
lighting modules) are solved by bounded enumeration over the count of the
larger module. Three or more sizes fall back to an exact dynamic programme
over the channel count; a largest-first greedy is not optimal once
price-per-channel ordering differs from capacity ordering.
"""

import logging
from decimal import Decimal
from typing import Dict, List, Sequence, Tuple

from .errors import ValidationError
from .models import ModulePackingResult, ModuleSpec, PackedModule

logger = logging.getLogger(__name__)

METHOD_NONE = "none"
METHOD_ENUMERATION = "two_size_enumeration"
METHOD_DP = "dynamic_programming"


def _ceil_div(a: int, b: int) -> int:
    return -(-a // b)


def _normalize_catalog(module_catalog: Sequence[ModuleSpec]) -> List[ModuleSpec]:
    """Validate specs, keep the cheapest spec per capacity, sort by capacity"""
    by_capacity: Dict[int, ModuleSpec] = {}
    for spec in module_catalog:
        if isinstance(spec.capacity, bool) or not isinstance(spec.capacity, int) or spec.capacity < 1:
            raise ValidationError(
                f"Module {spec.module_type} has invalid capacity {spec.capacity!r}", field="capacity"
            )
        if spec.price < 0:
            raise ValidationError(
                f"Module {spec.module_type} has negative price {spec.price}", field="price"
            )
        current = by_capacity.get(spec.capacity)
        if current is None or spec.price < current.price:
            by_capacity[spec.capacity] = spec
    return sorted(by_capacity.values(), key=lambda s: s.capacity)


def _enumerate(required: int, small: ModuleSpec, large: ModuleSpec) -> List[Tuple[ModuleSpec, int]]:
    """
    For k = 0..ceil(required / large) large modules, cover the remainder with
    the fewest small modules. Minimum cost wins, then fewer modules, then the
    first candidate found (fewer large modules).
    """
    best_key = None
    best_counts = (0, 0)
    for k in range(_ceil_div(required, large.capacity) + 1):
        remaining = required - k * large.capacity
        n_small = _ceil_div(remaining, small.capacity) if remaining > 0 else 0
        key = (k * large.price + n_small * small.price, k + n_small)
        if best_key is None or key < best_key:
            best_key = key
            best_counts = (k, n_small)
    return [(large, best_counts[0]), (small, best_counts[1])]


def _solve_dp(required: int, specs: List[ModuleSpec]) -> List[Tuple[ModuleSpec, int]]:
    """
    Unbounded covering knapsack: best[c] is the (cost, module count) of the
    cheapest multiset covering at least c channels.
    """
    best: List[Tuple[Decimal, int]] = [(Decimal("0"), 0)]
    choice: List[int] = [-1]
    for c in range(1, required + 1):
        best_c = None
        choice_c = -1
        for i, spec in enumerate(specs):
            prev_cost, prev_count = best[max(0, c - spec.capacity)]
            candidate = (prev_cost + spec.price, prev_count + 1)
            if best_c is None or candidate < best_c:
                best_c, choice_c = candidate, i
        best.append(best_c)
        choice.append(choice_c)

    counts = [0] * len(specs)
    c = required
    while c > 0:
        i = choice[c]
        counts[i] += 1
        c = max(0, c - specs[i].capacity)
    return [(spec, counts[i]) for i, spec in reversed(list(enumerate(specs)))]


def _justify(required: int, modules: Sequence[PackedModule], total: Decimal, covered: int) -> str:
    parts = [
        f"{m.quantity} x {m.name} ({m.unit_capacity}ch @ {m.unit_price:,})"
        for m in modules
    ]
    return (
        f"{required} channels -> " + " + ".join(parts)
        + f" = {total:,}; covers {covered} channels"
    )


def pack(required_channels: int, module_catalog: Sequence[ModuleSpec]) -> ModulePackingResult:
    """
    Find the minimum-cost covering of required_channels.

    Args:
        required_channels: Channels to serve, >= 0
        module_catalog: Module sizes on offer with their unit prices

    Returns:
        ModulePackingResult; modules are listed largest first and the sum of
        capacity x quantity is never below required_channels

    Raises:
        ValidationError: negative/non-integer demand, bad module specs, or
            positive demand with an empty catalog
    """
    if isinstance(required_channels, bool) or not isinstance(required_channels, int):
        raise ValidationError(
            f"required_channels must be an integer, got {required_channels!r}", field="required_channels"
        )
    if required_channels < 0:
        raise ValidationError(
            f"required_channels must be >= 0, got {required_channels}", field="required_channels"
        )

    specs = _normalize_catalog(module_catalog)

    if required_channels == 0:
        return ModulePackingResult(
            required_channels=0,
            modules=(),
            total_cost=Decimal("0"),
            covered_channels=0,
            method=METHOD_NONE,
            justification="0 channels required; no modules",
        )

    if not specs:
        raise ValidationError(
            f"No module sizes available to cover {required_channels} channels", field="module_catalog"
        )

    if len(specs) == 1:
        method = METHOD_ENUMERATION
        selection = [(specs[0], _ceil_div(required_channels, specs[0].capacity))]
    elif len(specs) == 2:
        method = METHOD_ENUMERATION
        selection = _enumerate(required_channels, specs[0], specs[1])
    else:
        method = METHOD_DP
        selection = _solve_dp(required_channels, specs)

    modules = tuple(
        PackedModule(
            module_type=spec.module_type,
            name=spec.name,
            unit_capacity=spec.capacity,
            unit_price=spec.price,
            quantity=qty,
        )
        for spec, qty in selection
        if qty > 0
    )
    total = sum((m.total_price for m in modules), Decimal("0"))
    covered = sum(m.channels for m in modules)
    justification = _justify(required_channels, modules, total, covered)
    logger.debug(f"pack[{method}]: {justification}")

    return ModulePackingResult(
        required_channels=required_channels,
        modules=modules,
        total_cost=total,
        covered_channels=covered,
        method=method,
        justification=justification,
    )
