"""Dyno curve synthesizer for the TuneWorks package builder.

Turns a single peak-kW estimate into an RPM-indexed power/torque curve for
the selected turbo.  The shape is an illustration for comparing packages,
not a measured or simulated result.

Per sample:

    spool = 1 / (1 + exp(-(rpm - spool_center) / spool_sharpness))
    taper = exp(-((rpm - peak_rpm) / 900)² × 0.55)
    kw    = peak_kw × spool × (0.55 + 0.45 × taper)
    kw   *= 1 - ((rpm - peak_rpm) / (rpm_max - peak_rpm)) × 0.08   (above peak_rpm)
    kw    = clamp(kw, 0, peak_kw × 1.02)
    nm    = kw × 9549 / rpm

Both values are rounded half-up per sample.

Turbo response table
--------------------
Larger turbo codes carry a *lower* spool centre and sharpness, so they ramp
in earlier and quicker than the stock unit.  This is the opposite of how
bigger turbos usually behave and is kept deliberately; see DESIGN.md.

All functions are pure and deterministic.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, NamedTuple

from tuneworks.dyno_model import DynoPoint, compute_nm
from tuneworks.map_modes import MapOverlay
from tuneworks.options import MapMode, Turbo
from tuneworks.power_range import round_half_up

logger = logging.getLogger(__name__)

# Presentation sweep, independent of the variant's native RPM window.
SWEEP_RPM_MIN: int = 1500
SWEEP_RPM_MAX: int = 4000
SWEEP_STEP: int = 100

_TAPER_WIDTH_RPM: float = 900.0
_TAPER_STRENGTH: float = 0.55
_SPOOL_FLOOR: float = 0.55       # share of peak not shaped by the taper
_OVER_PEAK_DECAY: float = 0.08   # fractional loss from peak_rpm to rpm_max
_PEAK_HEADROOM: float = 1.02     # samples may overshoot the estimate by 2 %


class TurboResponse(NamedTuple):
    """Fixed response constants for one turbo code."""

    spool_center: float
    spool_sharpness: float
    peak_rpm: float


TURBO_RESPONSE: dict[Turbo, TurboResponse] = {
    Turbo.STOCK: TurboResponse(2000, 420, 3300),
    Turbo.G250: TurboResponse(1900, 380, 3300),
    Turbo.G300: TurboResponse(1850, 360, 3350),
    Turbo.G333: TurboResponse(1750, 330, 3400),
    Turbo.G380: TurboResponse(1700, 320, 3450),
    Turbo.G400: TurboResponse(1650, 310, 3500),
    Turbo.G450: TurboResponse(1600, 300, 3550),
}

# Unrecognised codes use the last row of the table.
_FALLBACK_RESPONSE: TurboResponse = TURBO_RESPONSE[Turbo.G450]


class DynoSeries(NamedTuple):
    """A labelled dyno curve for one map mode."""

    mode: MapMode
    peak_kw: int
    points: tuple[DynoPoint, ...]


def turbo_response(turbo: Turbo) -> TurboResponse:
    return TURBO_RESPONSE.get(turbo, _FALLBACK_RESPONSE)


def _kw_at_rpm(peak_kw: float, rpm: int, rpm_max: int, response: TurboResponse) -> float:
    """Return the unrounded, clamped power (kW) at a single RPM sample."""
    spool = 1.0 / (1.0 + math.exp(-(rpm - response.spool_center) / response.spool_sharpness))
    taper = math.exp(-(((rpm - response.peak_rpm) / _TAPER_WIDTH_RPM) ** 2) * _TAPER_STRENGTH)

    kw = peak_kw * spool * (_SPOOL_FLOOR + (1.0 - _SPOOL_FLOOR) * taper)
    if rpm > response.peak_rpm:
        kw *= 1.0 - ((rpm - response.peak_rpm) / (rpm_max - response.peak_rpm)) * _OVER_PEAK_DECAY

    return max(0.0, min(peak_kw * _PEAK_HEADROOM, kw))


def generate_dyno_curve(
    peak_kw: float,
    turbo: Turbo,
    rpm_min: int = SWEEP_RPM_MIN,
    rpm_max: int = SWEEP_RPM_MAX,
    step: int = SWEEP_STEP,
) -> tuple[DynoPoint, ...]:
    """Synthesize a dyno curve for *turbo* peaking near *peak_kw*.

    Parameters
    ----------
    peak_kw:
        Peak power estimate (kW at the wheels).
    turbo:
        Selected turbo; selects the spool/taper constants.
    rpm_min, rpm_max, step:
        Sweep, inclusive of both ends when *step* divides the window.

    Returns
    -------
    tuple[DynoPoint, ...]
        Samples in ascending RPM order.

    Raises
    ------
    ValueError
        If *step* is not positive, ``rpm_min > rpm_max``, or *peak_kw* is
        non-finite.
    """
    if step <= 0:
        raise ValueError(f"step must be positive, got {step}")
    if rpm_min > rpm_max:
        raise ValueError(f"rpm_min ({rpm_min}) must not exceed rpm_max ({rpm_max})")
    if not math.isfinite(peak_kw):
        raise ValueError(f"peak_kw must be finite, got {peak_kw!r}")

    response = turbo_response(turbo)
    points: list[DynoPoint] = []
    for rpm in range(rpm_min, rpm_max + 1, step):
        kw = _kw_at_rpm(peak_kw, rpm, rpm_max, response)
        nm = compute_nm(kw, rpm)
        points.append(DynoPoint(rpm=rpm, kw=round_half_up(kw), nm=round_half_up(nm)))

    logger.debug(
        "Generated dyno curve for %s: %d points, peak_kw=%s",
        getattr(turbo, "value", turbo),
        len(points),
        peak_kw,
    )
    return tuple(points)


def generate_series(overlays: Iterable[MapOverlay], turbo: Turbo) -> list[DynoSeries]:
    """Return one dyno series per overlay."""
    return [
        DynoSeries(
            mode=overlay.mode,
            peak_kw=overlay.peak_kw,
            points=generate_dyno_curve(overlay.peak_kw, turbo),
        )
        for overlay in overlays
    ]
