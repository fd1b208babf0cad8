"""Tests for tuneworks.fitment_builder — listing → fitment table."""

from __future__ import annotations

import io
import json
from unittest.mock import patch

import pytest

from tuneworks.fitment_builder import (
    build_fitment_table,
    extract_turbo_code,
    main,
    tag_platforms,
)


_PRODUCTS = [
    {
        "title": "G300 Turbo Upgrade - Toyota Hilux N80",
        "categories": ["Turbochargers", "Hilux"],
        "url": "https://example.invalid/g300",
        "sku": "G300-HLX",
    },
    {
        "title": "G250 Turbo",
        "description": "Suits Hilux 1KD-FTV",
        "sku": "G250-1KD",
    },
    {
        "title": "G400 Billet Turbo",
        "shortDescription": "LandCruiser 70 Series VDJ76/78/79",
    },
    {"title": "Intercooler kit for Hilux"},
    {"title": "G333 turbo, universal flange"},
]


class TestExtractTurboCode:
    def test_finds_code(self):
        assert extract_turbo_code("Billet G333 kit") == "G333"

    def test_case_insensitive(self):
        assert extract_turbo_code("billet g380 kit") == "G380"

    def test_first_match_wins(self):
        assert extract_turbo_code("G400 replaces G333") == "G400"

    def test_requires_word_boundary(self):
        assert extract_turbo_code("part G3330") is None

    def test_no_code(self):
        assert extract_turbo_code("Front mount intercooler") is None


class TestTagPlatforms:
    def test_hilux(self):
        assert tag_platforms("Toyota HILUX 2.8") == ["HILUX"]

    def test_multiple_platforms_in_fixed_order(self):
        text = "Fits Hilux and LandCruiser 70 Series"
        assert tag_platforms(text) == ["LC70_1VD", "HILUX"]

    def test_lc200(self):
        assert tag_platforms("VDJ200 LandCruiser") == ["LC200_1VD"]

    def test_none(self):
        assert tag_platforms("Universal fitment") == []


class TestBuildFitmentTable:
    def test_platform_codes(self):
        table = build_fitment_table(_PRODUCTS, generated_at="2025-01-01T00:00:00Z")
        assert table.platform_turbos == {
            "HILUX": ("G250", "G300"),
            "LC70_1VD": ("G400",),
        }

    def test_evidence_rows(self):
        table = build_fitment_table(_PRODUCTS, generated_at="t")
        assert len(table.evidence) == 3
        first = table.evidence[0]
        assert first.turbo == "G300"
        assert first.platforms == ("HILUX",)
        assert first.sku == "G300-HLX"

    def test_generated_at_defaults_to_now(self):
        table = build_fitment_table([])
        assert table.generated_at
        assert table.platform_turbos == {}

    def test_codes_sorted_and_deduplicated(self):
        products = [{"title": "G333 Hilux"}, {"title": "G250 Hilux"}, {"title": "G333 Hilux N80"}]
        table = build_fitment_table(products, generated_at="t")
        assert table.platform_turbos["HILUX"] == ("G250", "G333")


class TestMain:
    def test_writes_fitment_json(self, capsys):
        stdin = io.StringIO(json.dumps({"products": _PRODUCTS}))
        with patch("sys.stdin", stdin):
            main()
        out = json.loads(capsys.readouterr().out)
        assert out["platformTurbos"]["HILUX"] == ["G250", "G300"]
        assert "generatedAt" in out

    def test_bad_json_exits_nonzero(self):
        with patch("sys.stdin", io.StringIO("{oops")):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 1
