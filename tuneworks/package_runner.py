"""Package runner: subprocess entry point.

Usage:
    echo '{"contract_version":"1.0", ...}' | python -m tuneworks.package_runner

Reads one JSON estimate request from stdin, writes one JSON response to
stdout.  All logs go to stderr.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from typing import Any

from tuneworks.catalog import VariantCatalog, default_catalog
from tuneworks.contract import (
    build_error_response,
    build_ok_response,
    validate_request,
    validate_response,
)
from tuneworks.estimate import build_estimate
from tuneworks.options import ModKey, Tuning, Turbo, parse_enum
from tuneworks.selection import SelectionState

logger = logging.getLogger("package_runner")


class UnknownVariantError(LookupError):
    """Raised when a request names a variant the catalog does not hold."""


def _corrected(field: str, requested: Any, stored: Any) -> str:
    return (
        f"{field} {requested!r} not available, using "
        f"{getattr(stored, 'value', stored)!r}"
    )


def apply_selection(
    catalog: VariantCatalog,
    selection: dict[str, Any],
) -> tuple[SelectionState, list[str]]:
    """Build a ``SelectionState`` from a request's ``selection`` object.

    Every field goes through the validated setters, so the returned state
    is always legal for its variant.  A warning is produced for each field
    the setters had to correct.

    Raises ``UnknownVariantError`` if ``variant_key`` is not in *catalog*.
    """
    key = selection["variant_key"]
    variant = catalog.get(key)
    if variant is None:
        raise UnknownVariantError(f"Unknown variant_key: {key!r}")

    state = SelectionState.for_variant(variant)
    warnings: list[str] = []

    if "turbo" in selection:
        requested = parse_enum(Turbo, selection["turbo"])
        stored = state.set_turbo(selection["turbo"])
        if stored is not requested:
            warnings.append(_corrected("turbo", selection["turbo"], stored))

    if "tuning" in selection:
        requested = parse_enum(Tuning, selection["tuning"])
        stored = state.set_tuning(selection["tuning"])
        if stored is not requested:
            warnings.append(_corrected("tuning", selection["tuning"], stored))

    if "emissions" in selection:
        state.set_emissions(selection["emissions"])

    # The pump goes last so the injector rule can lock it first.
    mods: dict[str, bool] = selection.get("mods", {})
    pump = mods.get(ModKey.STROKER_PUMP.value)
    for mod, on in mods.items():
        if mod != ModKey.STROKER_PUMP.value:
            _apply_mod(state, mod, on, warnings)

    if "injector_size" in selection:
        size = selection["injector_size"]
        stored_size = state.set_injector_size(size)
        if stored_size != size:
            warnings.append(_corrected("injector_size", size, stored_size))

    if pump is not None:
        _apply_mod(state, ModKey.STROKER_PUMP.value, pump, warnings)

    for mode, on in selection.get("map_modes", {}).items():
        state.set_map_mode(mode, on)

    return state, warnings


def _apply_mod(state: SelectionState, mod: str, on: bool, warnings: list[str]) -> None:
    stored = state.set_mod(mod, on)
    if stored != on:
        warnings.append(_corrected(f"mod {mod}", on, stored))


def run(request_json: str, catalog: VariantCatalog | None = None) -> str:
    """Process a single estimate request and return the JSON response string."""
    request_id = "unknown"
    try:
        req = json.loads(request_json)
        if isinstance(req, dict):
            request_id = str(req.get("request_id", request_id))

        errors = validate_request(req)
        if errors:
            logger.warning("Request validation failed: %s", errors)
            return json.dumps(
                build_error_response(
                    request_id=request_id,
                    code="INVALID_REQUEST",
                    message="; ".join(errors),
                )
            )

        if catalog is None:
            catalog = default_catalog()

        start = time.monotonic()
        try:
            state, warnings = apply_selection(catalog, req["selection"])
        except UnknownVariantError as exc:
            logger.warning("%s", exc)
            return json.dumps(build_error_response(request_id, "UNKNOWN_VARIANT", str(exc)))

        estimate = build_estimate(state)
        elapsed_ms = (time.monotonic() - start) * 1000

        resp = build_ok_response(
            request_id=request_id,
            estimate=estimate.to_dict(),
            options=catalog.options(state.variant.key),
            notes=[
                f"Estimated in {elapsed_ms:.2f} ms",
                "Dyno sheet is an emulation for package comparison, not a measured result.",
            ],
            warnings=warnings,
        )

        resp_errors = validate_response(resp)
        if resp_errors:
            logger.error("Self-validation failed: %s", resp_errors)
            resp = build_error_response(
                request_id=request_id,
                code="INTERNAL_VALIDATION",
                message="; ".join(resp_errors),
            )

        logger.info(
            "Request %s complete: variant=%s range=%s warnings=%d",
            request_id,
            state.variant.key,
            estimate.power_range,
            len(warnings),
        )
        return json.dumps(resp)

    except json.JSONDecodeError as exc:
        logger.exception("JSON parse error")
        return json.dumps(build_error_response(request_id, "JSON_PARSE", str(exc)))
    except Exception as exc:
        logger.exception("Unexpected error")
        return json.dumps(build_error_response(request_id, "INTERNAL_ERROR", str(exc)))


def main() -> None:
    """Read from stdin, write to stdout."""
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    request_json = sys.stdin.read()
    response_json = run(request_json)
    sys.stdout.write(response_json)
    sys.stdout.write("\n")
    sys.stdout.flush()


if __name__ == "__main__":
    main()
