"""Contract smoke test: validates the full stdin→stdout estimate pipeline."""

from __future__ import annotations

import copy
import json

import pytest

from tuneworks.contract import (
    CONTRACT_VERSION,
    build_error_response,
    build_ok_response,
    validate_request,
    validate_response,
)
from tuneworks.package_runner import run

# A minimal but complete v1.0 request.
_SAMPLE_REQUEST = {
    "contract_version": "1.0",
    "request_id": "smoke-test-001",
    "selection": {
        "variant_key": "HILUX_N80_1GD",
        "turbo": "Stock",
        "tuning": "Single Tune",
        "emissions": "Modified",
        "mods": {"airbox": True},
        "injector_size": "Stock",
        "map_modes": {},
    },
}


def _request(**selection) -> dict:
    req = copy.deepcopy(_SAMPLE_REQUEST)
    req["selection"].update(selection)
    return req


class TestContractSmoke:
    def test_ok_response_structure(self):
        """A valid request must yield status=ok with all required keys."""
        resp = json.loads(run(json.dumps(_SAMPLE_REQUEST)))

        assert resp["contract_version"] == CONTRACT_VERSION
        assert resp["request_id"] == "smoke-test-001"
        assert resp["status"] == "ok"
        assert "estimate" in resp
        assert "options" in resp
        assert "debug" in resp

    def test_estimate_content(self):
        resp = json.loads(run(json.dumps(_SAMPLE_REQUEST)))
        estimate = resp["estimate"]
        assert estimate["power_range_kw"] == [139, 164]
        assert estimate["peak_kw"] == 152
        assert "~139–164 kW" in estimate["summary"]
        assert estimate["dyno_text"].startswith("DYNO (EMULATED)")

    def test_options_echo_variant(self):
        resp = json.loads(run(json.dumps(_SAMPLE_REQUEST)))
        assert resp["options"]["key"] == "HILUX_N80_1GD"
        assert resp["options"]["turbos"] == ["Stock", "G300", "G333"]

    def test_response_passes_self_validation(self):
        resp = json.loads(run(json.dumps(_SAMPLE_REQUEST)))
        assert validate_response(resp) == []

    def test_deterministic(self):
        first = json.loads(run(json.dumps(_SAMPLE_REQUEST)))
        second = json.loads(run(json.dumps(_SAMPLE_REQUEST)))
        assert first["estimate"] == second["estimate"]

    def test_invalid_json_returns_error(self):
        resp = json.loads(run("not json at all"))
        assert resp["status"] == "error"
        assert resp["error"]["code"] == "JSON_PARSE"

    def test_missing_keys_returns_error(self):
        resp = json.loads(run(json.dumps({"contract_version": "1.0"})))
        assert resp["status"] == "error"
        assert resp["error"]["code"] == "INVALID_REQUEST"

    def test_unknown_variant_returns_error(self):
        resp = json.loads(run(json.dumps(_request(variant_key="HILUX_N99"))))
        assert resp["status"] == "error"
        assert resp["error"]["code"] == "UNKNOWN_VARIANT"
        assert resp["request_id"] == "smoke-test-001"


# ---------------------------------------------------------------------------
# validate_request
# ---------------------------------------------------------------------------

class TestValidateRequest:
    def test_sample_is_valid(self):
        assert validate_request(_SAMPLE_REQUEST) == []

    def test_selection_only_needs_variant_key(self):
        req = {"contract_version": "1.0", "request_id": "r", "selection": {"variant_key": "LC70_1VD"}}
        assert validate_request(req) == []

    def test_not_an_object(self):
        assert validate_request(["nope"]) == ["Request must be a JSON object"]

    def test_wrong_version(self):
        req = copy.deepcopy(_SAMPLE_REQUEST)
        req["contract_version"] = "2.0"
        assert any("contract_version" in e for e in validate_request(req))

    def test_selection_not_object(self):
        req = copy.deepcopy(_SAMPLE_REQUEST)
        req["selection"] = "HILUX_N80_1GD"
        assert validate_request(req) == ["selection must be an object"]

    def test_missing_variant_key(self):
        req = copy.deepcopy(_SAMPLE_REQUEST)
        del req["selection"]["variant_key"]
        assert any("variant_key" in e for e in validate_request(req))

    @pytest.mark.parametrize(
        "field, value",
        [("turbo", "G999"), ("tuning", "Dual"), ("emissions", "Deleted")],
    )
    def test_unknown_enum_values(self, field, value):
        errors = validate_request(_request(**{field: value}))
        assert any(f"Invalid {field}" in e for e in errors)

    def test_injector_size_must_be_string(self):
        errors = validate_request(_request(injector_size=100))
        assert any("injector_size" in e for e in errors)

    def test_unknown_mod_key(self):
        errors = validate_request(_request(mods={"nitrous": True}))
        assert any("Unknown mods key" in e for e in errors)

    def test_non_boolean_flag(self):
        errors = validate_request(_request(map_modes={"Tow": "yes"}))
        assert any("must be a boolean" in e for e in errors)

    def test_flags_must_be_object(self):
        errors = validate_request(_request(mods=["airbox"]))
        assert errors == ["selection.mods must be an object"]


# ---------------------------------------------------------------------------
# Response helpers
# ---------------------------------------------------------------------------

class TestResponseHelpers:
    def test_error_response_shape(self):
        resp = build_error_response("r1", "INVALID_REQUEST", "bad")
        assert resp["status"] == "error"
        assert resp["estimate"] is None
        assert resp["error"] == {"code": "INVALID_REQUEST", "message": "bad"}
        assert validate_response(resp) == []

    def test_ok_without_estimate_fails_validation(self):
        resp = build_ok_response("r1", estimate=None, options=None)
        assert "status=ok but estimate is None" in validate_response(resp)

    def test_inverted_range_fails_validation(self):
        resp = build_ok_response(
            "r1",
            estimate={"power_range_kw": [150, 140], "series": [{"mode": "Performance"}]},
            options=None,
        )
        assert any("Inverted" in e for e in validate_response(resp))

    def test_missing_series_fails_validation(self):
        resp = build_ok_response("r1", estimate={"power_range_kw": [140, 150], "series": []}, options=None)
        assert "status=ok but no dyno series" in validate_response(resp)

    def test_debug_defaults(self):
        resp = build_ok_response("r1", estimate={}, options=None)
        assert resp["debug"] == {"notes": [], "warnings": []}
