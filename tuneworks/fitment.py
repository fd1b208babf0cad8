"""Turbo fitment table and resolver.

The fitment table is produced offline by ``tuneworks.fitment_builder`` from
supplier product listings and shipped as ``tuneworks/data/fitment.json``::

    {
      "generatedAt": "2025-01-01T00:00:00Z",
      "platformTurbos": {"HILUX": ["G250", "G300"], ...},
      "evidence": [{"turbo": "G300", "platforms": ["HILUX"], ...}, ...]
    }

At catalog-construction time each variant's hand-authored allow-list is
merged with the scraped codes for its platform via ``resolve_fitment``.
The resolver never raises: a missing platform degrades to the baseline
turbo only.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable

from tuneworks.options import Turbo, parse_enum

logger = logging.getLogger(__name__)

DEFAULT_FITMENT_PATH: Path = Path(__file__).resolve().parent / "data" / "fitment.json"


@dataclass(frozen=True)
class FitmentEvidence:
    """One product listing that linked a turbo code to platforms."""

    turbo: str
    platforms: tuple[str, ...]
    title: str = ""
    url: str = ""
    sku: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "turbo": self.turbo,
            "platforms": list(self.platforms),
            "title": self.title,
            "url": self.url,
            "sku": self.sku,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FitmentEvidence":
        return cls(
            turbo=str(data["turbo"]),
            platforms=tuple(str(p) for p in data.get("platforms", [])),
            title=str(data.get("title", "") or ""),
            url=str(data.get("url", "") or ""),
            sku=str(data.get("sku", "") or ""),
        )


@dataclass(frozen=True)
class FitmentTable:
    """Read-only platform → turbo-codes mapping plus its evidence trail."""

    generated_at: str
    platform_turbos: dict[str, tuple[str, ...]] = field(default_factory=dict)
    evidence: tuple[FitmentEvidence, ...] = ()

    def codes_for(self, platform: str | None) -> tuple[str, ...]:
        """Return the scraped codes for *platform* (empty when unknown)."""
        if platform is None:
            return ()
        return self.platform_turbos.get(platform, ())

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the JSON file layout."""
        return {
            "generatedAt": self.generated_at,
            "platformTurbos": {
                platform: list(codes)
                for platform, codes in self.platform_turbos.items()
            },
            "evidence": [e.to_dict() for e in self.evidence],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FitmentTable":
        """Deserialise from the JSON file layout.

        Raises ``ValueError`` if the structure is not a fitment table.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Fitment table must be a JSON object, got {type(data).__name__}")

        raw_platforms = data.get("platformTurbos", {})
        if not isinstance(raw_platforms, dict):
            raise ValueError("platformTurbos must be an object")

        platform_turbos: dict[str, tuple[str, ...]] = {}
        for platform, codes in raw_platforms.items():
            if not isinstance(codes, list):
                raise ValueError(
                    f"platformTurbos[{platform!r}] must be a list, got {codes!r}"
                )
            platform_turbos[str(platform)] = tuple(str(c) for c in codes)

        raw_evidence = data.get("evidence", [])
        if not isinstance(raw_evidence, list):
            raise ValueError("evidence must be a list")
        try:
            evidence = tuple(FitmentEvidence.from_dict(e) for e in raw_evidence)
        except (KeyError, TypeError, AttributeError) as exc:
            raise ValueError(f"Malformed evidence entry: {exc}") from exc

        return cls(
            generated_at=str(data.get("generatedAt", "")),
            platform_turbos=platform_turbos,
            evidence=evidence,
        )


EMPTY_FITMENT = FitmentTable(generated_at="")


@lru_cache(maxsize=8)
def _load_cached(path: Path) -> FitmentTable:
    with path.open("r", encoding="utf-8") as fh:
        data = json.load(fh)
    table = FitmentTable.from_dict(data)
    logger.info(
        "Loaded fitment table %s (generated %s): %d platform(s), %d evidence row(s)",
        path.name,
        table.generated_at or "unknown",
        len(table.platform_turbos),
        len(table.evidence),
    )
    return table


def load_fitment_table(path: str | Path | None = None) -> FitmentTable:
    """Load a fitment table from *path* (default: the packaged table).

    Results are cached per resolved path.

    Raises
    ------
    OSError
        If the file cannot be read.
    ValueError
        If the file is not valid JSON or not a fitment table.
    """
    resolved = Path(path).resolve() if path is not None else DEFAULT_FITMENT_PATH
    return _load_cached(resolved)


def resolve_fitment(
    table: FitmentTable,
    platform: str | None,
    allow: Iterable[Turbo],
) -> tuple[Turbo, ...]:
    """Return the compatible turbos for *platform* restricted to *allow*.

    The result is ``{Stock} ∪ scraped-codes``, deduplicated, filtered to the
    allow-list, with the baseline first and the scraped codes after it in
    table order.  Codes that are not known ``Turbo`` values are dropped.
    """
    allowed = set(allow)
    merged: list[Turbo] = [Turbo.STOCK]
    for code in table.codes_for(platform):
        turbo = parse_enum(Turbo, code)
        if turbo is None:
            logger.debug("Ignoring unknown turbo code %r for platform %r", code, platform)
            continue
        merged.append(turbo)

    result: list[Turbo] = []
    for turbo in merged:
        if turbo in allowed and turbo not in result:
            result.append(turbo)
    return tuple(result)
