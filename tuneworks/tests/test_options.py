"""Tests for tuneworks.options — option enums and lookup tables."""

from __future__ import annotations

from tuneworks.options import (
    INJ_ADDS_1GD,
    INJ_ADDS_GENERIC,
    MAP_MODE_MULT,
    MAP_MODE_ORDER,
    MOD_LABELS,
    EngineFamily,
    MapMode,
    ModKey,
    Tuning,
    Turbo,
    injector_table,
    max_injector_step,
    parse_enum,
    pump_required_at_max_injector,
)


class TestParseEnum:
    def test_member_passes_through(self):
        assert parse_enum(Turbo, Turbo.G300) is Turbo.G300

    def test_value_string(self):
        assert parse_enum(Tuning, "Multi Mapping") is Tuning.MULTI

    def test_unknown_value_returns_none(self):
        assert parse_enum(Turbo, "G999") is None

    def test_wrong_type_returns_none(self):
        assert parse_enum(ModKey, 42) is None


class TestInjectorTables:
    def test_1gd_uses_own_table(self):
        assert injector_table(EngineFamily.GD1) is INJ_ADDS_1GD

    def test_other_families_use_generic(self):
        for engine in (EngineFamily.KD1, EngineFamily.VD1, EngineFamily.D33):
            assert injector_table(engine) is INJ_ADDS_GENERIC

    def test_stock_step_adds_nothing(self):
        assert INJ_ADDS_1GD["Stock"] == (0, 0)
        assert INJ_ADDS_GENERIC["Stock"] == (0, 0)

    def test_max_step(self):
        assert max_injector_step(EngineFamily.GD1) == "+100"
        assert max_injector_step(EngineFamily.VD1) == "+150"

    def test_pump_rule_only_on_1gd(self):
        assert pump_required_at_max_injector(EngineFamily.GD1)
        assert not pump_required_at_max_injector(EngineFamily.VD1)
        assert not pump_required_at_max_injector(EngineFamily.KD1)


class TestTables:
    def test_every_map_mode_has_multiplier(self):
        assert set(MAP_MODE_MULT) == set(MapMode)
        assert MAP_MODE_ORDER[0] is MapMode.STOCK
        assert MAP_MODE_ORDER[-1] is MapMode.PERFORMANCE

    def test_every_mod_has_label(self):
        assert set(MOD_LABELS) == set(ModKey)

    def test_enum_values_are_wire_strings(self):
        assert Turbo.STOCK.value == "Stock"
        assert Tuning.SINGLE.value == "Single Tune"
        assert ModKey.STROKER_PUMP.value == "stroker_pump"
