import json

from core.error_handler import _build_error_response


def _render(environment: str, **overrides):
    kwargs = dict(
        correlation_id="cid",
        error_type="generation_error",
        message="Failed to generate ideas",
        environment=environment,
        details={"reason": "prompt too long"},
        traceback_str="trace",
        exception_type="GenerationFailed",
        validation_errors={"x": 1},
        status_code=500,
    )
    kwargs.update(overrides)
    return _build_error_response(**kwargs)


def test_build_error_response_production_hides_optional_fields():
    resp = _render("production")
    # The JSONResponse produced here stores the rendered bytes in `body`
    body = json.loads(resp.body)

    assert resp.status_code == 500
    assert body["success"] is False
    assert body["message"] == "Failed to generate ideas"
    assert body["error"] == {"correlation_id": "cid", "type": "generation_error"}


def test_build_error_response_development_includes_optional_fields():
    resp = _render("development")
    body = json.loads(resp.body)

    assert body["error"]["details"] == {"reason": "prompt too long"}
    assert body["error"]["traceback"] == "trace"
    assert body["error"]["exception_type"] == "GenerationFailed"
    assert body["error"]["validation_errors"] == {"x": 1}


def test_build_error_response_omits_none_fields_and_keeps_headers():
    resp = _render(
        "development",
        details=None,
        traceback_str=None,
        status_code=429,
        headers={"Retry-After": "30"},
    )
    body = json.loads(resp.body)

    assert resp.status_code == 429
    assert resp.headers["Retry-After"] == "30"
    assert "details" not in body["error"]
    assert "traceback" not in body["error"]
