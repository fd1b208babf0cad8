"""Vehicle variant model for the TuneWorks package builder.

A ``Variant`` describes one vehicle/engine configuration and its legal
option space: which turbos, tuning modes and modifications it may use, the
injector sizes offered, and the base power table keyed by
(turbo, tuning mode).

Fields
------
key             : unique identifier (e.g. "HILUX_N80_1GD")
make            : manufacturer name (e.g. "Toyota")
model           : model name (e.g. "Hilux")
label           : display label (e.g. "Hilux N80 (1GD)")
engine          : ``EngineFamily``
rpm_min/rpm_max : native RPM window
allowed_turbos  : ordered turbo codes, baseline first
allowed_tuning  : ordered tuning modes
allowed_mods    : modification keys offered on this variant
injector_sizes  : ordered injector labels, or None
base_power      : {turbo: {tuning: (min_kw, max_kw)}}
mod_adds        : optional per-variant override of ``DEFAULT_MOD_ADDS``
caps_kw         : optional hard cap (kW) per turbo
platform        : fitment-table platform key, or None

Variants are immutable and built once when the catalog is constructed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from tuneworks.options import (
    DEFAULT_MOD_ADDS,
    ZERO_RANGE,
    EngineFamily,
    ModKey,
    Range,
    Tuning,
    Turbo,
)


@dataclass(frozen=True)
class Variant:
    """A vehicle variant and its legal turbo/tuning/modification space."""

    key: str
    make: str
    model: str
    label: str
    engine: EngineFamily
    rpm_min: int
    rpm_max: int
    allowed_turbos: tuple[Turbo, ...]
    allowed_tuning: tuple[Tuning, ...]
    allowed_mods: tuple[ModKey, ...]
    base_power: dict[Turbo, dict[Tuning, Range]] = field(hash=False)
    injector_sizes: tuple[str, ...] | None = None
    mod_adds: dict[ModKey, Range] = field(default_factory=dict, hash=False)
    caps_kw: dict[Turbo, int] = field(default_factory=dict, hash=False)
    platform: str | None = None

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self) -> list[str]:
        """Return a list of validation errors (empty list means valid)."""
        errors: list[str] = []

        for name in ("key", "make", "model", "label"):
            value = getattr(self, name)
            if not value or not isinstance(value, str):
                errors.append(f"{name} must be a non-empty string")

        if not isinstance(self.engine, EngineFamily):
            errors.append(f"engine must be an EngineFamily, got {self.engine!r}")

        if (
            not isinstance(self.rpm_min, int)
            or not isinstance(self.rpm_max, int)
            or self.rpm_min <= 0
            or self.rpm_min >= self.rpm_max
        ):
            errors.append(
                f"rpm window must satisfy 0 < rpm_min < rpm_max, "
                f"got [{self.rpm_min!r}, {self.rpm_max!r}]"
            )

        if not self.allowed_turbos:
            errors.append("allowed_turbos must not be empty")
        if not self.allowed_tuning:
            errors.append("allowed_tuning must not be empty")

        for turbo, by_tuning in self.base_power.items():
            if turbo not in self.allowed_turbos:
                errors.append(f"base_power references disallowed turbo {turbo!r}")
            for tuning, rng in by_tuning.items():
                if tuning not in self.allowed_tuning:
                    errors.append(
                        f"base_power[{_label(turbo)}] references disallowed tuning {tuning!r}"
                    )
                if not _is_valid_range(rng):
                    errors.append(
                        f"base_power[{_label(turbo)}][{_label(tuning)}] must be "
                        f"0 <= min <= max integers, got {rng!r}"
                    )

        for mod in self.allowed_mods:
            if mod not in self.mod_adds and mod not in DEFAULT_MOD_ADDS:
                errors.append(f"no power add resolvable for modification {mod!r}")

        for mod, rng in self.mod_adds.items():
            if not _is_valid_range(rng):
                errors.append(f"mod_adds[{_label(mod)}] is not a valid range: {rng!r}")

        if ModKey.INJECTORS in self.allowed_mods and not self.injector_sizes:
            errors.append("injector_sizes required when injectors are allowed")

        for turbo, cap in self.caps_kw.items():
            if not isinstance(cap, (int, float)) or not math.isfinite(cap) or cap <= 0:
                errors.append(f"caps_kw[{_label(turbo)}] must be a positive number, got {cap!r}")

        return errors

    def is_valid(self) -> bool:
        """Return True if the Variant passes all validation checks."""
        return len(self.validate()) == 0

    # ------------------------------------------------------------------
    # Lookups (neutral on missing keys)
    # ------------------------------------------------------------------

    def injector_options(self) -> tuple[str, ...]:
        return self.injector_sizes or ("Stock",)

    def base_range(self, turbo: Turbo, tuning: Tuning) -> Range:
        return self.base_power.get(turbo, {}).get(tuning, ZERO_RANGE)

    def mod_add(self, mod: ModKey) -> Range:
        if mod in self.mod_adds:
            return self.mod_adds[mod]
        return DEFAULT_MOD_ADDS.get(mod, ZERO_RANGE)

    def cap_for(self, turbo: Turbo) -> int | None:
        return self.caps_kw.get(turbo)

    def allows_mod(self, mod: ModKey) -> bool:
        return mod in self.allowed_mods

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a plain dict (JSON-safe)."""
        return {
            "key": self.key,
            "make": self.make,
            "model": self.model,
            "label": self.label,
            "engine": self.engine.value,
            "rpm_min": self.rpm_min,
            "rpm_max": self.rpm_max,
            "allowed_turbos": [t.value for t in self.allowed_turbos],
            "allowed_tuning": [t.value for t in self.allowed_tuning],
            "allowed_mods": [m.value for m in self.allowed_mods],
            "injector_sizes": list(self.injector_sizes) if self.injector_sizes else None,
            "base_power": {
                turbo.value: {tuning.value: list(rng) for tuning, rng in by_tuning.items()}
                for turbo, by_tuning in self.base_power.items()
            },
            "mod_adds": {mod.value: list(rng) for mod, rng in self.mod_adds.items()},
            "caps_kw": {turbo.value: cap for turbo, cap in self.caps_kw.items()},
            "platform": self.platform,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Variant":
        """Deserialise from a plain dict.

        Raises ``KeyError`` if required fields are missing.
        Raises ``ValueError`` on unknown option strings or if the resulting
        Variant fails validation.
        """
        sizes = data.get("injector_sizes")
        variant = cls(
            key=str(data["key"]),
            make=str(data["make"]),
            model=str(data["model"]),
            label=str(data["label"]),
            engine=EngineFamily(data["engine"]),
            rpm_min=int(data["rpm_min"]),
            rpm_max=int(data["rpm_max"]),
            allowed_turbos=tuple(Turbo(t) for t in data["allowed_turbos"]),
            allowed_tuning=tuple(Tuning(t) for t in data["allowed_tuning"]),
            allowed_mods=tuple(ModKey(m) for m in data.get("allowed_mods", [])),
            base_power={
                Turbo(turbo): {
                    Tuning(tuning): (int(rng[0]), int(rng[1]))
                    for tuning, rng in by_tuning.items()
                }
                for turbo, by_tuning in data.get("base_power", {}).items()
            },
            injector_sizes=tuple(str(s) for s in sizes) if sizes else None,
            mod_adds={
                ModKey(mod): (int(rng[0]), int(rng[1]))
                for mod, rng in (data.get("mod_adds") or {}).items()
            },
            caps_kw={
                Turbo(turbo): cap for turbo, cap in (data.get("caps_kw") or {}).items()
            },
            platform=data.get("platform"),
        )
        errors = variant.validate()
        if errors:
            raise ValueError(f"Invalid Variant data: {errors}")
        return variant


def _is_valid_range(rng: Any) -> bool:
    return (
        isinstance(rng, tuple)
        and len(rng) == 2
        and all(isinstance(v, int) for v in rng)
        and 0 <= rng[0] <= rng[1]
    )


def _label(option: Any) -> str:
    return getattr(option, "value", str(option))
