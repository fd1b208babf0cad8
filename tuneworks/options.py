"""Closed option sets and constant tables for the TuneWorks package builder.

Every selectable option (turbo, tuning mode, map mode, emissions state,
modification, engine family) is a string-valued ``Enum`` whose value is the
display/wire string.  The numeric behaviour attached to each option lives in
plain lookup tables below so that the calculators never branch on identity.

Power ranges are ``(min_kw, max_kw)`` tuples of integers, kW at the wheels.
"""

from __future__ import annotations

from enum import Enum

Range = tuple[int, int]

ZERO_RANGE: Range = (0, 0)


class Turbo(str, Enum):
    """Turbocharger codes.  ``STOCK`` is the non-upgraded baseline."""

    STOCK = "Stock"
    G250 = "G250"
    G300 = "G300"
    G333 = "G333"
    G380 = "G380"
    G400 = "G400"
    G450 = "G450"


class Tuning(str, Enum):
    SINGLE = "Single Tune"
    MULTI = "Multi Mapping"


class MapMode(str, Enum):
    """Switchable calibration profiles under multi-mapping."""

    STOCK = "Stock"
    EVERYDAY = "Everyday"
    TOW = "Tow"
    PERFORMANCE = "Performance"


class Emissions(str, Enum):
    INTACT = "Intact"
    MODIFIED = "Modified"


class ModKey(str, Enum):
    """Supporting hardware modifications."""

    AIRBOX = "airbox"
    FRONT_MOUNT = "front_mount"
    POWERPIPE = "powerpipe"
    HEAT_EXCHANGER = "heat_exchanger"
    INJECTORS = "injectors"
    STROKER_PUMP = "stroker_pump"


class EngineFamily(str, Enum):
    KD1 = "1KD"
    GD1 = "1GD"
    VD1 = "1VD"
    D33 = "3.3D"


# ---------------------------------------------------------------------------
# Modification adds (kW @ wheels)
# ---------------------------------------------------------------------------

DEFAULT_MOD_ADDS: dict[ModKey, Range] = {
    ModKey.FRONT_MOUNT: (3, 15),
    ModKey.AIRBOX: (1, 4),
    ModKey.POWERPIPE: (1, 10),
    ModKey.HEAT_EXCHANGER: (1, 3),
    ModKey.INJECTORS: (0, 0),  # sized via the injector tables
    ModKey.STROKER_PUMP: (5, 15),
}

# Addition order for the simple bolt-on modifications.
MOD_ORDER: tuple[ModKey, ...] = (
    ModKey.AIRBOX,
    ModKey.FRONT_MOUNT,
    ModKey.POWERPIPE,
    ModKey.HEAT_EXCHANGER,
)

MOD_LABELS: dict[ModKey, str] = {
    ModKey.AIRBOX: "Airbox upgrade",
    ModKey.HEAT_EXCHANGER: "Heat exchanger",
    ModKey.FRONT_MOUNT: "Front mount intercooler",
    ModKey.POWERPIPE: "Powerpipe",
    ModKey.INJECTORS: "Injectors",
    ModKey.STROKER_PUMP: "Stroker pump",
}

# ---------------------------------------------------------------------------
# Injector tables
# ---------------------------------------------------------------------------

INJ_ADDS_GENERIC: dict[str, Range] = {
    "Stock": (0, 0),
    "+20": (3, 7),
    "+40": (8, 15),
    "+50": (10, 20),
    "+60": (12, 25),
    "+80": (15, 35),
    "+150": (25, 60),
}

# 1GD family: two upgrade steps.
INJ_ADDS_1GD: dict[str, Range] = {
    "Stock": (0, 0),
    "+35": (6, 12),
    "+100": (14, 55),
}

_INJECTOR_TABLES: dict[EngineFamily, dict[str, Range]] = {
    EngineFamily.GD1: INJ_ADDS_1GD,
}

# Families whose top injector step cannot run without the stroker pump.
_PUMP_REQUIRED_FAMILIES: frozenset[EngineFamily] = frozenset({EngineFamily.GD1})

# ---------------------------------------------------------------------------
# Multipliers
# ---------------------------------------------------------------------------

EMISSIONS_MULT: dict[Emissions, float] = {
    Emissions.INTACT: 1.0,
    Emissions.MODIFIED: 1.1,
}

# Relative to the baseline target.
MAP_MODE_MULT: dict[MapMode, float] = {
    MapMode.STOCK: 0.5,
    MapMode.EVERYDAY: 0.86,
    MapMode.TOW: 0.94,
    MapMode.PERFORMANCE: 1.1,
}

MAP_MODE_ORDER: tuple[MapMode, ...] = (
    MapMode.STOCK,
    MapMode.EVERYDAY,
    MapMode.TOW,
    MapMode.PERFORMANCE,
)


def injector_table(engine: EngineFamily) -> dict[str, Range]:
    """Return the injector-add table for *engine* (generic when none is specific)."""
    return _INJECTOR_TABLES.get(engine, INJ_ADDS_GENERIC)


def pump_required_at_max_injector(engine: EngineFamily) -> bool:
    return engine in _PUMP_REQUIRED_FAMILIES


def max_injector_step(engine: EngineFamily) -> str:
    """Return the largest injector step of *engine*'s table."""
    return list(injector_table(engine))[-1]


def parse_enum(enum_cls: type[Enum], value: object) -> Enum | None:
    """Return the member of *enum_cls* for *value*, or None when unknown.

    Accepts a member or its value string.
    """
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None
