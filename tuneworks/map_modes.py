"""Map-mode overlay generator.

Under *Single Tune* there is exactly one overlay, labelled Performance, at
1.0× the emissions-scaled pre-map range.  Under *Multi Mapping* every
enabled map mode gets its own overlay at ``emissions × MAP_MODE_MULT[mode]``.

The generator never returns an empty list: with every mode switched off it
falls back to one Performance overlay at emissions-only scaling, so the
curve synthesizer always has a series to draw.

The per-turbo cap is a headline-range concern and is not applied here.
"""

from __future__ import annotations

import logging
from typing import NamedTuple

from tuneworks.options import MAP_MODE_MULT, MapMode, Range, Tuning
from tuneworks.power_range import (
    apply_mult,
    calculate_pre_map_range,
    emissions_multiplier,
    peak_kw,
)
from tuneworks.selection import SelectionState

logger = logging.getLogger(__name__)


class MapOverlay(NamedTuple):
    """One scaled peak estimate for a map mode."""

    mode: MapMode
    multiplier: float
    peak_kw: int


def overlay_modes(state: SelectionState) -> list[MapMode]:
    """Return the map modes that should be drawn for *state*."""
    if state.tuning != Tuning.MULTI:
        return [MapMode.PERFORMANCE]
    return state.enabled_map_modes()


def _overlay(pre_map: Range, mode: MapMode, multiplier: float) -> MapOverlay:
    return MapOverlay(
        mode=mode,
        multiplier=multiplier,
        peak_kw=peak_kw(apply_mult(pre_map, multiplier)),
    )


def generate_overlays(state: SelectionState) -> list[MapOverlay]:
    """Return one overlay per visible map mode (never empty)."""
    pre_map = calculate_pre_map_range(state)
    emissions = emissions_multiplier(state)
    multi = state.tuning == Tuning.MULTI

    overlays = [
        _overlay(pre_map, mode, emissions * (MAP_MODE_MULT[mode] if multi else 1.0))
        for mode in overlay_modes(state)
    ]

    if not overlays:
        logger.debug("No map modes enabled on %s, using fallback overlay", state.variant.key)
        overlays = [_overlay(pre_map, MapMode.PERFORMANCE, emissions)]

    return overlays


def maps_shown_label(state: SelectionState) -> str:
    """Return the human-readable list of visible map modes."""
    if state.tuning != Tuning.MULTI:
        return MapMode.PERFORMANCE.value
    return ", ".join(m.value for m in state.enabled_map_modes()) or "none"
