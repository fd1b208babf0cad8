"""Full estimate for a selection state.

Runs the whole pipeline in order:

    power range → map-mode overlays → dyno series → peaks → text renderings
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from tuneworks.dyno_generator import DynoSeries, generate_series
from tuneworks.dyno_model import CurvePeaks, find_peaks, merge_series
from tuneworks.map_modes import MapOverlay, generate_overlays
from tuneworks.options import Range
from tuneworks.power_range import calculate_power_range, peak_kw
from tuneworks.selection import SelectionState, stroker_locked
from tuneworks.summary import build_dyno_text, build_summary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Estimate:
    """Everything the presentation layer needs for one selection."""

    power_range: Range
    peak_kw: int
    overlays: tuple[MapOverlay, ...]
    series: tuple[DynoSeries, ...]
    peaks: CurvePeaks
    summary: str
    dyno_text: str
    stroker_locked: bool = False

    def chart_rows(self) -> list[dict[str, Any]]:
        """Return the series merged into RPM-keyed chart rows."""
        return merge_series((s.mode.value, s.points) for s in self.series)

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a plain dict (JSON-safe)."""
        return {
            "power_range_kw": list(self.power_range),
            "peak_kw": self.peak_kw,
            "overlays": [
                {"mode": o.mode.value, "multiplier": o.multiplier, "peak_kw": o.peak_kw}
                for o in self.overlays
            ],
            "series": [
                {
                    "mode": s.mode.value,
                    "peak_kw": s.peak_kw,
                    "points": [p._asdict() for p in s.points],
                }
                for s in self.series
            ],
            "peaks": self.peaks._asdict(),
            "summary": self.summary,
            "dyno_text": self.dyno_text,
            "stroker_locked": self.stroker_locked,
        }


def build_estimate(state: SelectionState) -> Estimate:
    """Return the power range, curves and texts for *state*."""
    power_range = calculate_power_range(state)
    overlays = generate_overlays(state)
    series = generate_series(overlays, state.turbo)
    peaks = find_peaks(s.points for s in series)

    estimate = Estimate(
        power_range=power_range,
        peak_kw=peak_kw(power_range),
        overlays=tuple(overlays),
        series=tuple(series),
        peaks=peaks,
        summary=build_summary(state, power_range),
        dyno_text=build_dyno_text(state, peaks),
        stroker_locked=stroker_locked(state),
    )

    logger.debug(
        "Estimate %s: range=%s peak=%d series=%d",
        state.variant.key,
        power_range,
        estimate.peak_kw,
        len(series),
    )
    return estimate
