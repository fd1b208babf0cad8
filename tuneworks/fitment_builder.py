"""Offline fitment-table builder.

Turns supplier product listings (already scraped to JSON) into the
platform → turbo-codes table consumed by ``tuneworks.fitment``.

Usage:
    python -m tuneworks.fitment_builder < products.json > fitment.json

Input is ``{"products": [{"title": ..., "categories": [...],
"shortDescription": ..., "description": ..., "additionalInfo": ...,
"url": ..., "sku": ...}, ...]}``.  Output is the fitment JSON layout.
All logs go to stderr.

Matching is keyword based: a listing contributes when its text names a
recognised turbo code (the first match wins) and at least one platform
keyword.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Any, Iterable

from tuneworks.fitment import FitmentEvidence, FitmentTable

logger = logging.getLogger(__name__)

_TURBO_CODE_RE = re.compile(r"\bG(?:250|300|333|350|380|400|450)\b", re.IGNORECASE)

# (platform key, keywords) in output order.
_PLATFORM_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("LC70_1VD", ("70 series", "vdj70", "vdj 70", "landcruiser 70")),
    ("LC200_1VD", ("200 series", "vdj200", "vdj 200", "landcruiser 200")),
    ("LC300_33D", ("300 series", "landcruiser 300", "lc300")),
    ("HILUX", ("hilux", "n70", "n80", "1kd", "1gd")),
)

_TEXT_FIELDS: tuple[str, ...] = (
    "title",
    "categories",
    "shortDescription",
    "description",
    "additionalInfo",
)


def extract_turbo_code(text: str) -> str | None:
    """Return the first turbo code mentioned in *text*, upper-cased."""
    match = _TURBO_CODE_RE.search(text)
    return match.group(0).upper() if match else None


def tag_platforms(text: str) -> list[str]:
    """Return the platform keys whose keywords appear in *text*."""
    lowered = text.lower()
    platforms: list[str] = []
    for platform, keywords in _PLATFORM_KEYWORDS:
        if any(k in lowered for k in keywords) and platform not in platforms:
            platforms.append(platform)
    return platforms


def _listing_text(product: dict[str, Any]) -> str:
    parts: list[str] = []
    for key in _TEXT_FIELDS:
        value = product.get(key)
        if isinstance(value, list):
            value = " ".join(str(v) for v in value)
        if value:
            parts.append(str(value))
    return " | ".join(parts)


def build_fitment_table(
    products: Iterable[dict[str, Any]],
    generated_at: str | None = None,
) -> FitmentTable:
    """Build a ``FitmentTable`` from product listing dicts.

    Listings without a turbo code or without any platform keyword are
    skipped.  Each platform's code list is sorted and deduplicated.
    """
    evidence: list[FitmentEvidence] = []
    platform_codes: dict[str, set[str]] = {}
    skipped = 0

    for product in products:
        text = _listing_text(product)
        turbo = extract_turbo_code(text)
        platforms = tag_platforms(text)
        if turbo is None or not platforms:
            skipped += 1
            continue

        evidence.append(
            FitmentEvidence(
                turbo=turbo,
                platforms=tuple(platforms),
                title=str(product.get("title", "") or ""),
                url=str(product.get("url", "") or ""),
                sku=str(product.get("sku", "") or ""),
            )
        )
        for platform in platforms:
            platform_codes.setdefault(platform, set()).add(turbo)

    if generated_at is None:
        generated_at = datetime.now(timezone.utc).isoformat()

    logger.info(
        "Fitment build: %d listing(s) mapped, %d skipped, %d platform(s)",
        len(evidence),
        skipped,
        len(platform_codes),
    )

    return FitmentTable(
        generated_at=generated_at,
        platform_turbos={
            platform: tuple(sorted(codes))
            for platform, codes in platform_codes.items()
        },
        evidence=tuple(evidence),
    )


def main() -> None:
    """Read product listings from stdin, write the fitment table to stdout."""
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        raw = json.loads(sys.stdin.read())
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse product listings: %s", exc)
        sys.exit(1)

    products = raw.get("products", []) if isinstance(raw, dict) else []
    if not isinstance(products, list):
        logger.error("'products' must be a list")
        sys.exit(1)

    table = build_fitment_table(p for p in products if isinstance(p, dict))
    sys.stdout.write(json.dumps(table.to_dict(), indent=2))
    sys.stdout.write("\n")
    sys.stdout.flush()


if __name__ == "__main__":
    main()
