"""Variant catalog and query surface.

The catalog is the static set of supported vehicle variants.  Each
variant's turbo list is resolved at construction time by merging the
scraped fitment table with the hand-authored allow-list below; the result
is frozen into the ``Variant``.

Query surface used by the presentation layer:
    makes() → models(make) → variants(make, model) → options(key)
"""

from __future__ import annotations

import logging
from dataclasses import replace
from functools import lru_cache
from typing import Any, Iterator

from tuneworks.fitment import FitmentTable, load_fitment_table, resolve_fitment
from tuneworks.options import EngineFamily, ModKey, Tuning, Turbo
from tuneworks.variant import Variant

logger = logging.getLogger(__name__)

DEFAULT_VARIANT_KEY = "HILUX_N80_1GD"

_S = Tuning.SINGLE
_M = Tuning.MULTI

# Hand-authored variant definitions.  ``allowed_turbos`` is the allow-list;
# the catalog narrows it through the fitment table for ``platform``.
_VARIANT_DEFS: tuple[Variant, ...] = (
    Variant(
        key="HILUX_N70_1KD",
        make="Toyota",
        model="Hilux",
        label="Hilux N70 (1KD)",
        engine=EngineFamily.KD1,
        rpm_min=1500,
        rpm_max=4200,
        platform="HILUX",
        allowed_turbos=(Turbo.STOCK, Turbo.G250, Turbo.G300),
        allowed_tuning=(_S,),
        allowed_mods=(ModKey.FRONT_MOUNT, ModKey.AIRBOX, ModKey.INJECTORS),
        injector_sizes=("Stock", "+60"),
        base_power={
            Turbo.STOCK: {_S: (70, 80)},
            Turbo.G250: {_S: (140, 155)},
            Turbo.G300: {_S: (150, 170)},
        },
    ),
    Variant(
        key="HILUX_N80_1GD",
        make="Toyota",
        model="Hilux",
        label="Hilux N80 (1GD)",
        engine=EngineFamily.GD1,
        rpm_min=1200,
        rpm_max=4000,
        platform="HILUX",
        allowed_turbos=(Turbo.STOCK, Turbo.G300, Turbo.G333),
        allowed_tuning=(_S, _M),
        allowed_mods=(
            ModKey.FRONT_MOUNT,
            ModKey.AIRBOX,
            ModKey.POWERPIPE,
            ModKey.INJECTORS,
            ModKey.STROKER_PUMP,
        ),
        injector_sizes=("Stock", "+35", "+100"),
        base_power={
            Turbo.STOCK: {_S: (125, 145), _M: (125, 145)},
            Turbo.G300: {_S: (175, 195), _M: (180, 200)},
            Turbo.G333: {_S: (175, 195), _M: (180, 200)},
        },
    ),
    Variant(
        key="LC70_1VD",
        make="Toyota",
        model="LandCruiser 70",
        label="70 Series (1VD)",
        engine=EngineFamily.VD1,
        rpm_min=1200,
        rpm_max=3800,
        platform="LC70_1VD",
        allowed_turbos=(Turbo.STOCK, Turbo.G333, Turbo.G400),
        allowed_tuning=(_S, _M),
        allowed_mods=(
            ModKey.FRONT_MOUNT,
            ModKey.AIRBOX,
            ModKey.POWERPIPE,
            ModKey.INJECTORS,
        ),
        injector_sizes=("Stock", "+50", "+80", "+150"),
        base_power={
            Turbo.STOCK: {_S: (135, 155), _M: (135, 155)},
            Turbo.G333: {_S: (185, 205), _M: (190, 215)},
            Turbo.G400: {_S: (195, 220), _M: (205, 235)},
        },
    ),
    Variant(
        key="LC70_1GD",
        make="Toyota",
        model="LandCruiser 70",
        label="70 Series (1GD)",
        engine=EngineFamily.GD1,
        rpm_min=1200,
        rpm_max=4000,
        # Shares the 1GD listings with the Hilux.
        platform="HILUX",
        allowed_turbos=(Turbo.STOCK, Turbo.G333),
        allowed_tuning=(_S, _M),
        allowed_mods=(
            ModKey.FRONT_MOUNT,
            ModKey.AIRBOX,
            ModKey.POWERPIPE,
            ModKey.HEAT_EXCHANGER,
            ModKey.INJECTORS,
            ModKey.STROKER_PUMP,
        ),
        injector_sizes=("Stock", "+35", "+100"),
        base_power={
            Turbo.STOCK: {_S: (130, 150), _M: (130, 150)},
            Turbo.G333: {_S: (175, 195), _M: (180, 200)},
        },
    ),
    Variant(
        key="LC200_1VD",
        make="Toyota",
        model="LandCruiser 200",
        label="200 Series (1VD)",
        engine=EngineFamily.VD1,
        rpm_min=1200,
        rpm_max=3800,
        platform="LC200_1VD",
        allowed_turbos=(Turbo.STOCK, Turbo.G380, Turbo.G450),
        allowed_tuning=(_S, _M),
        allowed_mods=(
            ModKey.FRONT_MOUNT,
            ModKey.AIRBOX,
            ModKey.POWERPIPE,
            ModKey.HEAT_EXCHANGER,
            ModKey.INJECTORS,
        ),
        injector_sizes=("Stock", "+20", "+40", "+60", "+80"),
        base_power={
            Turbo.STOCK: {_S: (145, 165), _M: (145, 165)},
            Turbo.G380: {_S: (190, 215), _M: (200, 225)},
            Turbo.G450: {_S: (210, 240), _M: (220, 255)},
        },
    ),
    Variant(
        key="LC300_33D",
        make="Toyota",
        model="LandCruiser 300",
        label="300 Series (3.3D)",
        engine=EngineFamily.D33,
        rpm_min=1200,
        rpm_max=4200,
        # No turbo upgrades offered; not resolved through fitment.
        platform=None,
        allowed_turbos=(Turbo.STOCK,),
        allowed_tuning=(_S, _M),
        allowed_mods=(ModKey.AIRBOX, ModKey.HEAT_EXCHANGER),
        base_power={
            Turbo.STOCK: {_S: (185, 205), _M: (190, 210)},
        },
        mod_adds={ModKey.HEAT_EXCHANGER: (2, 5)},
    ),
)


class VariantCatalog:
    """Immutable, ordered collection of resolved variants."""

    def __init__(self, variants: tuple[Variant, ...], fitment_generated_at: str = "") -> None:
        self._variants = variants
        self._by_key = {v.key: v for v in variants}
        self.fitment_generated_at = fitment_generated_at

    def __iter__(self) -> Iterator[Variant]:
        return iter(self._variants)

    def __len__(self) -> int:
        return len(self._variants)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def keys(self) -> list[str]:
        return [v.key for v in self._variants]

    def get(self, key: str) -> Variant | None:
        return self._by_key.get(key)

    def makes(self) -> list[str]:
        """Return the distinct makes in catalog order."""
        return _unique(v.make for v in self._variants)

    def models(self, make: str) -> list[str]:
        """Return the distinct models for *make* in catalog order."""
        return _unique(v.model for v in self._variants if v.make == make)

    def variants(self, make: str, model: str) -> list[Variant]:
        return [v for v in self._variants if v.make == make and v.model == model]

    def first_variant(self, make: str, model: str | None = None) -> Variant | None:
        """Return the first variant of *make* (and *model* when given)."""
        for v in self._variants:
            if v.make == make and (model is None or v.model == model):
                return v
        return None

    def options(self, key: str) -> dict[str, Any] | None:
        """Return the selectable option space for variant *key*, or None."""
        variant = self.get(key)
        if variant is None:
            return None
        return {
            "key": variant.key,
            "label": variant.label,
            "turbos": [t.value for t in variant.allowed_turbos],
            "tuning": [t.value for t in variant.allowed_tuning],
            "mods": [m.value for m in variant.allowed_mods],
            "injector_sizes": list(variant.injector_options()),
        }


def _unique(values: Any) -> list[str]:
    seen: list[str] = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen


def _resolve_variant(variant: Variant, fitment: FitmentTable) -> Variant:
    if variant.platform is None:
        return variant

    turbos = resolve_fitment(fitment, variant.platform, variant.allowed_turbos)
    dropped = [t for t in variant.allowed_turbos if t not in turbos]
    if dropped:
        logger.info(
            "%s: turbos %s not listed for platform %s, removed",
            variant.key,
            [t.value for t in dropped],
            variant.platform,
        )
    base_power = {t: r for t, r in variant.base_power.items() if t in turbos}
    return replace(variant, allowed_turbos=turbos, base_power=base_power)


def build_catalog(
    fitment: FitmentTable,
    definitions: tuple[Variant, ...] = _VARIANT_DEFS,
) -> VariantCatalog:
    """Resolve every variant definition against *fitment*.

    Raises ``ValueError`` if any resolved variant fails validation or two
    variants share a key.
    """
    resolved: list[Variant] = []
    seen: set[str] = set()
    for definition in definitions:
        variant = _resolve_variant(definition, fitment)
        errors = variant.validate()
        if errors:
            raise ValueError(f"Invalid variant {definition.key!r}: {errors}")
        if variant.key in seen:
            raise ValueError(f"Duplicate variant key {variant.key!r}")
        seen.add(variant.key)
        resolved.append(variant)

    logger.info(
        "Catalog built: %d variant(s), fitment generated %s",
        len(resolved),
        fitment.generated_at or "unknown",
    )
    return VariantCatalog(tuple(resolved), fitment_generated_at=fitment.generated_at)


@lru_cache(maxsize=1)
def default_catalog() -> VariantCatalog:
    """Return the catalog built from the packaged fitment table."""
    return build_catalog(load_fitment_table())
