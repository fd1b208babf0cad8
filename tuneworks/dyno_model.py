"""Core dyno math for the TuneWorks package builder.

Nm = (kW * 9549) / RPM

Curves are sequences of ``DynoPoint(rpm, kw, nm)``; torque is always
derived from power, never stored as source-of-truth.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, NamedTuple


KW_NM_CONSTANT = 9549


class DynoPoint(NamedTuple):
    """One sample of a synthesized dyno curve."""

    rpm: int
    kw: int
    nm: int


class CurvePeaks(NamedTuple):
    """Peak values extracted from one or more dyno curves."""

    peak_kw: int
    peak_kw_rpm: int
    peak_nm: int
    peak_nm_rpm: int


def compute_nm(kw: float, rpm: float) -> float:
    """Return torque (Nm) for a single power/RPM point.

    Returns 0.0 for non-positive RPM.  Raises ``ValueError`` on non-finite
    inputs.
    """
    if not math.isfinite(kw) or not math.isfinite(rpm):
        raise ValueError(f"Non-finite input: kw={kw}, rpm={rpm}")
    if rpm <= 0:
        return 0.0
    return (kw * KW_NM_CONSTANT) / rpm


def find_peaks(curves: Iterable[Iterable[DynoPoint]]) -> CurvePeaks:
    """Return peak power and peak torque with their RPMs across *curves*.

    The first sample to strictly exceed the running maximum wins, so ties
    resolve to the earliest curve and lowest RPM.  Empty input yields all
    zeros.
    """
    max_kw = (0, 0)  # (kw, rpm)
    max_nm = (0, 0)
    for curve in curves:
        for point in curve:
            if point.kw > max_kw[0]:
                max_kw = (point.kw, point.rpm)
            if point.nm > max_nm[0]:
                max_nm = (point.nm, point.rpm)

    return CurvePeaks(
        peak_kw=max_kw[0],
        peak_kw_rpm=max_kw[1],
        peak_nm=max_nm[0],
        peak_nm_rpm=max_nm[1],
    )


def merge_series(series: Iterable[tuple[str, Iterable[DynoPoint]]]) -> list[dict[str, Any]]:
    """Merge labelled curves into chart rows keyed by RPM.

    Each row is ``{"rpm": rpm, "kw_<label>": kw, "nm_<label>": nm, ...}``;
    rows are sorted by RPM.
    """
    rows: dict[int, dict[str, Any]] = {}
    for label, points in series:
        for point in points:
            row = rows.setdefault(point.rpm, {"rpm": point.rpm})
            row[f"kw_{label}"] = point.kw
            row[f"nm_{label}"] = point.nm
    return [rows[rpm] for rpm in sorted(rows)]
