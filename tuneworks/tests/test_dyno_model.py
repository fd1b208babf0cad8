"""Tests for tuneworks.dyno_model — core dyno math."""

from __future__ import annotations

import pytest

from tuneworks.dyno_model import (
    KW_NM_CONSTANT,
    CurvePeaks,
    DynoPoint,
    compute_nm,
    find_peaks,
    merge_series,
)


# ── compute_nm ──────────────────────────────────────────────────────────────


class TestComputeNm:
    def test_known_value(self):
        # At 9549 rpm torque in Nm equals power in kW.
        assert compute_nm(150.0, KW_NM_CONSTANT) == pytest.approx(150.0)

    def test_typical_point(self):
        assert compute_nm(100.0, 2000) == pytest.approx(477.45)

    def test_zero_rpm_returns_zero(self):
        assert compute_nm(150.0, 0) == 0.0

    def test_nan_raises(self):
        with pytest.raises(ValueError, match="Non-finite"):
            compute_nm(float("nan"), 3000)

    def test_inf_rpm_raises(self):
        with pytest.raises(ValueError, match="Non-finite"):
            compute_nm(100.0, float("inf"))


# ── find_peaks ──────────────────────────────────────────────────────────────


class TestFindPeaks:
    def test_single_curve(self):
        curve = [
            DynoPoint(1500, 40, 255),
            DynoPoint(2500, 110, 420),
            DynoPoint(3300, 150, 434),
            DynoPoint(4000, 140, 334),
        ]
        assert find_peaks([curve]) == CurvePeaks(150, 3300, 434, 3300)

    def test_across_curves(self):
        low = [DynoPoint(2000, 60, 286), DynoPoint(3000, 80, 255)]
        high = [DynoPoint(2000, 90, 430), DynoPoint(3000, 120, 382)]
        peaks = find_peaks([low, high])
        assert peaks.peak_kw == 120
        assert peaks.peak_nm == 430
        assert peaks.peak_nm_rpm == 2000

    def test_ties_keep_first_sample(self):
        curve = [DynoPoint(3000, 150, 400), DynoPoint(3100, 150, 400)]
        peaks = find_peaks([curve])
        assert peaks.peak_kw_rpm == 3000
        assert peaks.peak_nm_rpm == 3000

    def test_empty_gives_zeros(self):
        assert find_peaks([]) == CurvePeaks(0, 0, 0, 0)
        assert find_peaks([[]]) == CurvePeaks(0, 0, 0, 0)


# ── merge_series ────────────────────────────────────────────────────────────


class TestMergeSeries:
    def test_rows_keyed_by_rpm(self):
        rows = merge_series(
            [
                ("Stock", [DynoPoint(2000, 60, 286), DynoPoint(1500, 30, 191)]),
                ("Performance", [DynoPoint(1500, 50, 318), DynoPoint(2000, 90, 430)]),
            ]
        )
        assert [r["rpm"] for r in rows] == [1500, 2000]
        assert rows[0] == {
            "rpm": 1500,
            "kw_Stock": 30,
            "nm_Stock": 191,
            "kw_Performance": 50,
            "nm_Performance": 318,
        }

    def test_empty(self):
        assert merge_series([]) == []
