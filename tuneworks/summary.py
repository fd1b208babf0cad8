"""Customer-facing text renderings.

Operators paste these verbatim, so line order and presence are fixed.

Package summary::

    TuneWorks Performance Package
    {make} {model} — {label}
    Turbo: {turbo}. Tuning: {tuning}.
    Maps shown: {modes}.                          (multi-mapping only)
    Emissions: Intact.
    Estimated power: ~{min}–{max} kW at wheels (setup-dependent).
    Supporting mods: {mods or "none selected"}.
    Note: +100 injectors require stroker pump (enabled).   (pump rule only)

Dyno text::

    DYNO (EMULATED)
    {make} {model} — {label}
    Turbo: {turbo}
    Tuning: {tuning} ({modes})                    (modes under multi-mapping)
    Peak: {kw} kW @ {rpm} rpm
    Torque: {nm} Nm @ {rpm} rpm
"""

from __future__ import annotations

from tuneworks.dyno_model import CurvePeaks
from tuneworks.map_modes import maps_shown_label
from tuneworks.options import MOD_LABELS, Emissions, ModKey, Range, Tuning
from tuneworks.selection import SelectionState, stroker_required

PACKAGE_NAME = "TuneWorks Performance Package"
DYNO_HEADER = "DYNO (EMULATED)"

# Listing order in the supporting-mods line.
_SUMMARY_MOD_ORDER: tuple[ModKey, ...] = (
    ModKey.AIRBOX,
    ModKey.HEAT_EXCHANGER,
    ModKey.FRONT_MOUNT,
    ModKey.POWERPIPE,
)


def _option_text(option: object) -> str:
    return str(getattr(option, "value", option))


def vehicle_line(state: SelectionState) -> str:
    return f"{state.make} {state.model} — {state.variant.label}"


def supporting_mods(state: SelectionState) -> list[str]:
    """Return the labels of every allowed, enabled modification."""
    mods = [MOD_LABELS[m] for m in _SUMMARY_MOD_ORDER if state.mod_enabled(m)]
    if state.injectors_active:
        mods.append(f"{MOD_LABELS[ModKey.INJECTORS]} ({state.injector_size})")
    if state.stroker_active:
        mods.append(MOD_LABELS[ModKey.STROKER_PUMP])
    return mods


def build_summary(state: SelectionState, power_range: Range) -> str:
    """Return the multi-line package summary for *state*."""
    if state.emissions == Emissions.MODIFIED:
        emissions_line = "Emissions: Modified (includes DPF delete where applicable)."
    else:
        emissions_line = "Emissions: Intact."

    maps_line = ""
    if state.tuning == Tuning.MULTI:
        maps_line = f"Maps shown: {maps_shown_label(state)}."

    mods = supporting_mods(state)
    note = ""
    if stroker_required(state):
        note = f"Note: {state.injector_size} injectors require stroker pump (enabled)."

    p_min, p_max = power_range
    lines = [
        PACKAGE_NAME,
        vehicle_line(state),
        f"Turbo: {_option_text(state.turbo)}. Tuning: {_option_text(state.tuning)}.",
        maps_line,
        emissions_line,
        f"Estimated power: ~{p_min}–{p_max} kW at wheels (setup-dependent).",
        f"Supporting mods: {', '.join(mods) if mods else 'none selected'}.",
        note,
    ]
    return "\n".join(line for line in lines if line)


def build_dyno_text(state: SelectionState, peaks: CurvePeaks) -> str:
    """Return the copyable dyno result text for *state*."""
    tuning = _option_text(state.tuning)
    if state.tuning == Tuning.MULTI:
        tuning = f"{tuning} ({maps_shown_label(state)})"

    return "\n".join(
        [
            DYNO_HEADER,
            vehicle_line(state),
            f"Turbo: {_option_text(state.turbo)}",
            f"Tuning: {tuning}",
            f"Peak: {peaks.peak_kw} kW @ {peaks.peak_kw_rpm} rpm",
            f"Torque: {peaks.peak_nm} Nm @ {peaks.peak_nm_rpm} rpm",
        ]
    )
