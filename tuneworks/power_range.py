"""Power range calculator for the TuneWorks package builder.

Order of operations
-------------------
A power range is ``(min_kw, max_kw)`` at the wheels.  Starting from the
variant's base range for the selected (turbo, tuning) pair:

1. Base range ``variant.base_power[turbo][tuning]``; an unknown pair gives
   ``(0, 0)``.
2. Bolt-on modifications, in ``MOD_ORDER`` (airbox, front mount, powerpipe,
   heat exchanger), each added when allowed and enabled.  The per-variant
   override wins over ``DEFAULT_MOD_ADDS``.
3. Injectors, when allowed and enabled: the add for the chosen size from the
   engine family's injector table (unknown sizes add nothing).
4. Stroker pump, when allowed and enabled.
5. Emissions multiplier on both bounds.
6. Per-turbo hard cap, which can lower a bound but never raise it.

Steps 1–4 give the *pre-map* range that the map-mode overlays scale;
steps 5–6 give the headline range.  Every addition and multiplication is
rounded half-up to an integer.  All operations are monotonic and applied to
both bounds alike, so ``min <= max`` holds throughout.

Nothing here raises for out-of-catalog selections.
"""

from __future__ import annotations

import logging
import math

from tuneworks.options import (
    EMISSIONS_MULT,
    MOD_ORDER,
    ZERO_RANGE,
    ModKey,
    Range,
    injector_table,
)
from tuneworks.selection import SelectionState
from tuneworks.variant import Variant

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Range helpers
# ---------------------------------------------------------------------------


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (``2.5 → 3``)."""
    return math.floor(value + 0.5)


def add_range(a: Range, b: Range) -> Range:
    return (round_half_up(a[0] + b[0]), round_half_up(a[1] + b[1]))


def apply_mult(rng: Range, mult: float) -> Range:
    return (round_half_up(rng[0] * mult), round_half_up(rng[1] * mult))


def cap_range(rng: Range, cap_kw: float | None) -> Range:
    """Clamp both bounds to *cap_kw*; a missing or zero cap is a no-op."""
    if not cap_kw or not math.isfinite(cap_kw):
        return rng
    limit = math.floor(cap_kw)
    return (min(rng[0], limit), min(rng[1], limit))


def midpoint(rng: Range) -> float:
    return (rng[0] + rng[1]) / 2


def peak_kw(rng: Range) -> int:
    """Return the headline peak estimate for *rng*."""
    return round_half_up(midpoint(rng))


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def injector_add(variant: Variant, size: str) -> Range:
    """Return the injector add for *size* on *variant*'s engine family."""
    return injector_table(variant.engine).get(size, ZERO_RANGE)


def emissions_multiplier(state: SelectionState) -> float:
    return EMISSIONS_MULT.get(state.emissions, 1.0)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def calculate_pre_map_range(state: SelectionState) -> Range:
    """Return the range after base, modifications, injectors and pump."""
    variant = state.variant
    rng = variant.base_range(state.turbo, state.tuning)

    for mod in MOD_ORDER:
        if state.mod_enabled(mod):
            rng = add_range(rng, variant.mod_add(mod))

    if state.injectors_active:
        rng = add_range(rng, injector_add(variant, state.injector_size))

    if state.stroker_active:
        rng = add_range(rng, variant.mod_add(ModKey.STROKER_PUMP))

    return rng


def calculate_power_range(state: SelectionState) -> Range:
    """Return the headline power range for *state*."""
    pre_map = calculate_pre_map_range(state)
    rng = apply_mult(pre_map, emissions_multiplier(state))
    rng = cap_range(rng, state.variant.cap_for(state.turbo))

    logger.debug(
        "Power range %s %s/%s/%s: pre-map=%s final=%s",
        state.variant.key,
        getattr(state.turbo, "value", state.turbo),
        getattr(state.tuning, "value", state.tuning),
        getattr(state.emissions, "value", state.emissions),
        pre_map,
        rng,
    )
    return rng
