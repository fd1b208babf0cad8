"""Tests for tuneworks.map_modes — overlay generation."""

from __future__ import annotations

import pytest

from tuneworks.catalog import default_catalog
from tuneworks.map_modes import generate_overlays, maps_shown_label, overlay_modes
from tuneworks.options import MAP_MODE_MULT, EngineFamily, MapMode, ModKey, Tuning, Turbo
from tuneworks.selection import SelectionState, new_selection
from tuneworks.variant import Variant


def _multi_state() -> SelectionState:
    state = new_selection(default_catalog().get("HILUX_N80_1GD"))
    state.set_tuning("Multi Mapping")
    return state


class TestSingleTune:
    def test_one_performance_overlay(self):
        state = new_selection(default_catalog().get("HILUX_N80_1GD"))
        overlays = generate_overlays(state)
        assert len(overlays) == 1
        assert overlays[0].mode is MapMode.PERFORMANCE
        assert overlays[0].multiplier == pytest.approx(1.0)
        assert overlays[0].peak_kw == 135

    def test_map_toggles_ignored(self):
        state = new_selection(default_catalog().get("HILUX_N80_1GD"))
        for mode in MapMode:
            state.set_map_mode(mode, False)
        assert overlay_modes(state) == [MapMode.PERFORMANCE]

    def test_emissions_scale_overlay(self):
        state = new_selection(default_catalog().get("HILUX_N80_1GD"))
        state.set_emissions("Modified")
        overlay = generate_overlays(state)[0]
        assert overlay.multiplier == pytest.approx(1.1)

    def test_label(self):
        state = new_selection(default_catalog().get("HILUX_N80_1GD"))
        assert maps_shown_label(state) == "Performance"


class TestMultiMapping:
    def test_one_overlay_per_enabled_mode(self):
        overlays = generate_overlays(_multi_state())
        assert [o.mode for o in overlays] == [
            MapMode.STOCK,
            MapMode.EVERYDAY,
            MapMode.TOW,
            MapMode.PERFORMANCE,
        ]

    def test_multipliers(self):
        for overlay in generate_overlays(_multi_state()):
            assert overlay.multiplier == pytest.approx(MAP_MODE_MULT[overlay.mode])

    def test_known_peaks(self):
        by_mode = {o.mode: o.peak_kw for o in generate_overlays(_multi_state())}
        # pre-map (125, 145)
        assert by_mode[MapMode.STOCK] == 68
        assert by_mode[MapMode.PERFORMANCE] == 149

    def test_disabled_mode_hidden(self):
        state = _multi_state()
        state.set_map_mode("Everyday", False)
        state.set_map_mode("Tow", False)
        modes = [o.mode for o in generate_overlays(state)]
        assert modes == [MapMode.STOCK, MapMode.PERFORMANCE]
        assert maps_shown_label(state) == "Stock, Performance"

    def test_all_modes_off_falls_back(self):
        state = _multi_state()
        for mode in MapMode:
            state.set_map_mode(mode, False)
        overlays = generate_overlays(state)
        assert len(overlays) == 1
        assert overlays[0].mode is MapMode.PERFORMANCE
        assert overlays[0].multiplier == pytest.approx(1.0)
        assert overlays[0].peak_kw == 135
        assert maps_shown_label(state) == "none"

    def test_emissions_compound_with_map_multiplier(self):
        state = _multi_state()
        state.set_emissions("Modified")
        for overlay in generate_overlays(state):
            assert overlay.multiplier == pytest.approx(1.1 * MAP_MODE_MULT[overlay.mode])

    def test_overlays_not_capped(self):
        variant = Variant(
            key="CAPPED",
            make="Test",
            model="Capped",
            label="Capped",
            engine=EngineFamily.VD1,
            rpm_min=1200,
            rpm_max=3800,
            allowed_turbos=(Turbo.STOCK,),
            allowed_tuning=(Tuning.MULTI,),
            allowed_mods=(ModKey.AIRBOX,),
            base_power={Turbo.STOCK: {Tuning.MULTI: (200, 220)}},
            caps_kw={Turbo.STOCK: 150},
        )
        state = new_selection(variant)
        perf = [o for o in generate_overlays(state) if o.mode is MapMode.PERFORMANCE][0]
        assert perf.peak_kw > 150
