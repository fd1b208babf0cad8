"""Estimate request/response contract, v1.0.

Request::

    {
      "contract_version": "1.0",
      "request_id": "abc-123",
      "selection": {
        "variant_key": "HILUX_N80_1GD",
        "turbo": "G300",
        "tuning": "Multi Mapping",
        "emissions": "Modified",
        "mods": {"airbox": true, "injectors": true},
        "injector_size": "+100",
        "map_modes": {"Stock": false}
      }
    }

Only ``variant_key`` is required inside ``selection``; omitted fields keep
the variant's defaults.  Illegal-but-well-formed values (a turbo the variant
does not allow, an injector size it does not offer) are not contract
errors: they are corrected by the selection setters and reported as
warnings in the response.
"""

from __future__ import annotations

from typing import Any

from tuneworks.options import Emissions, MapMode, ModKey, Tuning, Turbo, parse_enum

CONTRACT_VERSION = "1.0"

_REQUIRED_REQUEST_KEYS = {"contract_version", "request_id", "selection"}

_ENUM_FIELDS: dict[str, type] = {
    "turbo": Turbo,
    "tuning": Tuning,
    "emissions": Emissions,
}

# ---------------------------------------------------------------------------
# Request validation
# ---------------------------------------------------------------------------


def validate_request(req: dict[str, Any]) -> list[str]:
    """Return a list of validation errors (empty means valid)."""
    errors: list[str] = []

    if not isinstance(req, dict):
        return ["Request must be a JSON object"]

    missing = _REQUIRED_REQUEST_KEYS - set(req.keys())
    if missing:
        errors.append(f"Missing top-level keys: {sorted(missing)}")
        return errors  # can't validate further

    if req["contract_version"] != CONTRACT_VERSION:
        errors.append(f"Unsupported contract_version: {req['contract_version']}")

    sel = req["selection"]
    if not isinstance(sel, dict):
        errors.append("selection must be an object")
        return errors

    variant_key = sel.get("variant_key")
    if not isinstance(variant_key, str) or not variant_key:
        errors.append("selection.variant_key must be a non-empty string")

    for name, enum_cls in _ENUM_FIELDS.items():
        if name in sel and parse_enum(enum_cls, sel[name]) is None:
            errors.append(
                f"Invalid {name}: {sel[name]!r} "
                f"(expected one of {[m.value for m in enum_cls]})"
            )

    if "injector_size" in sel and not isinstance(sel["injector_size"], str):
        errors.append("selection.injector_size must be a string")

    errors.extend(_validate_flags(sel, "mods", ModKey))
    errors.extend(_validate_flags(sel, "map_modes", MapMode))

    return errors


def _validate_flags(sel: dict[str, Any], name: str, enum_cls: type) -> list[str]:
    if name not in sel:
        return []
    flags = sel[name]
    if not isinstance(flags, dict):
        return [f"selection.{name} must be an object"]
    errors: list[str] = []
    for key, value in flags.items():
        if parse_enum(enum_cls, key) is None:
            errors.append(f"Unknown {name} key: {key!r}")
        if not isinstance(value, bool):
            errors.append(f"selection.{name}[{key!r}] must be a boolean")
    return errors


# ---------------------------------------------------------------------------
# Response building helpers
# ---------------------------------------------------------------------------


def build_ok_response(
    request_id: str,
    estimate: dict[str, Any],
    options: dict[str, Any] | None,
    notes: list[str] | None = None,
    warnings: list[str] | None = None,
) -> dict[str, Any]:
    """Build a well-formed "ok" response dict."""
    return {
        "contract_version": CONTRACT_VERSION,
        "request_id": request_id,
        "status": "ok",
        "estimate": estimate,
        "options": options,
        "debug": {
            "notes": notes or [],
            "warnings": warnings or [],
        },
    }


def build_error_response(
    request_id: str,
    code: str,
    message: str,
) -> dict[str, Any]:
    """Build a well-formed "error" response dict."""
    return {
        "contract_version": CONTRACT_VERSION,
        "request_id": request_id,
        "status": "error",
        "estimate": None,
        "options": None,
        "debug": {"notes": [], "warnings": []},
        "error": {"code": code, "message": message},
    }


# ---------------------------------------------------------------------------
# Response self-check (before sending)
# ---------------------------------------------------------------------------


def validate_response(resp: dict[str, Any]) -> list[str]:
    """Basic self-validation of a response dict before serialising."""
    errors: list[str] = []
    if resp.get("contract_version") != CONTRACT_VERSION:
        errors.append("Bad contract_version in response")
    if resp.get("status") not in ("ok", "error"):
        errors.append(f"Invalid status: {resp.get('status')}")
    if resp.get("status") == "ok":
        estimate = resp.get("estimate")
        if estimate is None:
            errors.append("status=ok but estimate is None")
        else:
            p_min, p_max = estimate.get("power_range_kw", [0, 0])
            if p_min > p_max:
                errors.append(f"Inverted power range: {p_min} > {p_max}")
            if not estimate.get("series"):
                errors.append("status=ok but no dyno series")
    return errors
