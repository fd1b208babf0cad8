"""Per-session selection state and compatibility enforcement.

``SelectionState`` is the single mutable record of what the operator has
chosen.  It is passed explicitly to every calculator.  Fields are only
changed through the setters below, each of which re-checks legality against
the active variant and stores a corrected value when the request is not
allowed.

Two rules keep the state legal:

Variant transition
    ``on_variant_change`` runs synchronously after every variant change and
    resets, in order: turbo, tuning, disallowed modification toggles,
    injector size, stroker pump, and the map-mode overlays.

Stroker pump rule
    On engine families that need it, selecting the largest injector step
    forces the stroker pump on and locks its manual control for as long as
    the condition holds.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from tuneworks.catalog import VariantCatalog
from tuneworks.options import (
    MAP_MODE_ORDER,
    Emissions,
    MapMode,
    ModKey,
    Tuning,
    Turbo,
    max_injector_step,
    parse_enum,
    pump_required_at_max_injector,
)
from tuneworks.variant import Variant

logger = logging.getLogger(__name__)


def _all_mods_off() -> dict[ModKey, bool]:
    return {mod: False for mod in ModKey}


def _all_map_modes_on() -> dict[MapMode, bool]:
    return {mode: True for mode in MAP_MODE_ORDER}


@dataclass
class SelectionState:
    """Everything the operator has selected for one vehicle."""

    variant: Variant
    turbo: Turbo
    tuning: Tuning
    emissions: Emissions = Emissions.INTACT
    mods: dict[ModKey, bool] = field(default_factory=_all_mods_off)
    injector_size: str = "Stock"
    map_modes: dict[MapMode, bool] = field(default_factory=_all_map_modes_on)

    def __post_init__(self) -> None:
        # Value strings become members; unknown values are left as given.
        self.turbo = parse_enum(Turbo, self.turbo) or self.turbo
        self.tuning = parse_enum(Tuning, self.tuning) or self.tuning
        self.emissions = parse_enum(Emissions, self.emissions) or self.emissions
        self.mods = {parse_enum(ModKey, k) or k: bool(v) for k, v in self.mods.items()}
        self.map_modes = {
            parse_enum(MapMode, k) or k: bool(v) for k, v in self.map_modes.items()
        }

    @classmethod
    def for_variant(cls, variant: Variant) -> "SelectionState":
        """Return a state with *variant*'s defaults."""
        return cls(
            variant=variant,
            turbo=variant.allowed_turbos[0],
            tuning=variant.allowed_tuning[0],
            injector_size=variant.injector_options()[0],
        )

    @property
    def make(self) -> str:
        return self.variant.make

    @property
    def model(self) -> str:
        return self.variant.model

    def mod_enabled(self, mod: ModKey) -> bool:
        """Return True if *mod* is both allowed and switched on."""
        return self.variant.allows_mod(mod) and self.mods.get(mod, False)

    @property
    def injectors_active(self) -> bool:
        return self.mod_enabled(ModKey.INJECTORS)

    @property
    def stroker_active(self) -> bool:
        return self.mod_enabled(ModKey.STROKER_PUMP)

    # ------------------------------------------------------------------
    # Validated setters
    # ------------------------------------------------------------------

    def set_turbo(self, turbo: Turbo | str) -> Turbo:
        """Select *turbo*; anything not allowed becomes the first allowed turbo."""
        parsed = parse_enum(Turbo, turbo)
        if parsed is None or parsed not in self.variant.allowed_turbos:
            corrected = self.variant.allowed_turbos[0]
            logger.debug(
                "Turbo %r not allowed on %s, using %s",
                turbo,
                self.variant.key,
                corrected.value,
            )
            parsed = corrected
        self.turbo = parsed
        return self.turbo

    def set_tuning(self, tuning: Tuning | str) -> Tuning:
        parsed = parse_enum(Tuning, tuning)
        if parsed is None or parsed not in self.variant.allowed_tuning:
            corrected = self.variant.allowed_tuning[0]
            logger.debug(
                "Tuning %r not allowed on %s, using %s",
                tuning,
                self.variant.key,
                corrected.value,
            )
            parsed = corrected
        self.tuning = parsed
        return self.tuning

    def set_emissions(self, emissions: Emissions | str) -> Emissions:
        parsed = parse_enum(Emissions, emissions)
        if parsed is None:
            logger.debug("Unknown emissions state %r, keeping %r", emissions, self.emissions)
        else:
            self.emissions = parsed
        return self.emissions

    def set_mod(self, mod: ModKey | str, on: bool) -> bool:
        """Switch *mod* on or off; disallowed mods always stay off."""
        key = parse_enum(ModKey, mod)
        if key is None:
            logger.debug("Unknown modification %r ignored", mod)
            return False

        if key is ModKey.STROKER_PUMP and stroker_locked(self):
            self.mods[key] = True
            return True

        value = bool(on) and self.variant.allows_mod(key)
        self.mods[key] = value
        if key is ModKey.INJECTORS:
            enforce_stroker_rule(self)
        return value

    def set_injectors_enabled(self, on: bool) -> bool:
        return self.set_mod(ModKey.INJECTORS, on)

    def set_stroker_pump(self, on: bool) -> bool:
        return self.set_mod(ModKey.STROKER_PUMP, on)

    def set_injector_size(self, size: str) -> str:
        options = self.variant.injector_options()
        if size not in options:
            logger.debug(
                "Injector size %r not offered on %s, using %s",
                size,
                self.variant.key,
                options[0],
            )
            size = options[0]
        self.injector_size = size
        enforce_stroker_rule(self)
        return self.injector_size

    def set_map_mode(self, mode: MapMode | str, on: bool) -> bool:
        key = parse_enum(MapMode, mode)
        if key is None:
            logger.debug("Unknown map mode %r ignored", mode)
            return False
        self.map_modes[key] = bool(on)
        return self.map_modes[key]

    def toggle_map_mode(self, mode: MapMode | str) -> bool:
        key = parse_enum(MapMode, mode)
        if key is None:
            return False
        return self.set_map_mode(key, not self.map_modes.get(key, False))

    def enabled_map_modes(self) -> list[MapMode]:
        return [m for m in MAP_MODE_ORDER if self.map_modes.get(m, False)]


def new_selection(variant: Variant) -> SelectionState:
    return SelectionState.for_variant(variant)


# ---------------------------------------------------------------------------
# Stroker pump rule
# ---------------------------------------------------------------------------


def stroker_required(state: SelectionState) -> bool:
    """Return True if the selected injector step needs the stroker pump."""
    engine = state.variant.engine
    return (
        pump_required_at_max_injector(engine)
        and state.injectors_active
        and state.injector_size == max_injector_step(engine)
    )


def stroker_locked(state: SelectionState) -> bool:
    """Return True while the stroker pump's manual control is locked on."""
    return stroker_required(state)


def enforce_stroker_rule(state: SelectionState) -> None:
    if stroker_required(state) and not state.mods.get(ModKey.STROKER_PUMP, False):
        logger.debug(
            "%s injectors on %s require the stroker pump, enabling",
            state.injector_size,
            state.variant.key,
        )
        state.mods[ModKey.STROKER_PUMP] = True


# ---------------------------------------------------------------------------
# Variant transitions
# ---------------------------------------------------------------------------


def on_variant_change(state: SelectionState) -> None:
    """Reconcile *state* with its (new) variant."""
    variant = state.variant

    if state.turbo not in variant.allowed_turbos:
        state.turbo = variant.allowed_turbos[0]
    if state.tuning not in variant.allowed_tuning:
        state.tuning = variant.allowed_tuning[0]

    for mod in ModKey:
        if mod is ModKey.STROKER_PUMP:
            continue
        if not variant.allows_mod(mod):
            state.mods[mod] = False

    state.injector_size = variant.injector_options()[0]

    if not variant.allows_mod(ModKey.STROKER_PUMP):
        state.mods[ModKey.STROKER_PUMP] = False

    state.map_modes = _all_map_modes_on()

    enforce_stroker_rule(state)


def set_variant(state: SelectionState, variant: Variant) -> None:
    """Make *variant* active and run the transition handler."""
    previous = state.variant.key
    state.variant = variant
    on_variant_change(state)
    logger.debug("Variant changed %s → %s", previous, variant.key)


def change_variant(state: SelectionState, catalog: VariantCatalog, key: str) -> bool:
    """Switch to variant *key*; unknown keys leave *state* unchanged."""
    variant = catalog.get(key)
    if variant is None:
        logger.warning("Unknown variant key %r, selection unchanged", key)
        return False
    if variant == state.variant:
        return True
    set_variant(state, variant)
    return True


def change_model(state: SelectionState, catalog: VariantCatalog, model: str) -> bool:
    """Switch to the first variant of *model* under the current make."""
    variant = catalog.first_variant(state.make, model)
    if variant is None:
        logger.warning("No variants for %s %s, selection unchanged", state.make, model)
        return False
    set_variant(state, variant)
    return True


def change_make(state: SelectionState, catalog: VariantCatalog, make: str) -> bool:
    """Switch to the first model's first variant of *make*."""
    models = catalog.models(make)
    if not models:
        logger.warning("Unknown make %r, selection unchanged", make)
        return False
    variant = catalog.first_variant(make, models[0])
    if variant is None:
        return False
    set_variant(state, variant)
    return True
