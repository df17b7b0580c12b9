"""Tests for the @validate_request decorator."""

import pytest
from flask import Blueprint, Flask, jsonify
from pydantic import BaseModel, Field

from gatehouse.api.validation import REDACTION_PLACEHOLDER, validate_request
from gatehouse.exceptions import GatehouseError
from gatehouse.main import handle_gatehouse_error


# Test Pydantic schemas
class MockCredentials(BaseModel):
    """Test schema for request body validation."""
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    attempts: int = Field(default=1, description="Optional counter")


class MockProfileUpdate(BaseModel):
    """Test schema with all optional fields."""
    nickname: str | None = None
    description: str | None = None


test_validation_bp = Blueprint('validation_test_routes', __name__)

# Route: Valid request body
@test_validation_bp.post("/test/valid")
@validate_request
def route_valid(data: MockCredentials):
    return jsonify({
        "username": data.username,
        "attempts": data.attempts
    }), 200

# Route: Path parameter only
@test_validation_bp.get("/test/path/<username>")
@validate_request
def route_path_param(username: str):
    return jsonify({"username": username}), 200

# Route: Path parameter + body
@test_validation_bp.put("/test/combined/<username>")
@validate_request
def route_combined(username: str, data: MockProfileUpdate):
    return jsonify({
        "username": username,
        "nickname": data.nickname
    }), 200


# Fixtures
@pytest.fixture
def validation_app():
    app = Flask(__name__)
    app.register_error_handler(GatehouseError, handle_gatehouse_error)
    app.register_blueprint(test_validation_bp)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def validation_client(validation_app):
    """Create test client with validation test routes."""
    with validation_app.test_client() as client:
        yield client


# Tests
def test_validates_valid_request_body(validation_client):
    """Valid request body should pass validation and be parsed correctly."""
    response = validation_client.post(
        "/test/valid",
        json={"username": "bob", "password": "secret", "attempts": 3}
    )

    assert response.status_code == 200
    data = response.get_json()
    assert data["username"] == "bob"
    assert data["attempts"] == 3


def test_validates_with_optional_field_omitted(validation_client):
    """Request with optional field omitted should still pass validation."""
    response = validation_client.post(
        "/test/valid",
        json={"username": "bob", "password": "secret"}
    )

    assert response.status_code == 200
    assert response.get_json()["attempts"] == 1


def test_form_data_is_accepted(validation_client):
    """HTML form posts are validated like JSON bodies."""
    response = validation_client.post(
        "/test/valid",
        data={"username": "bob", "password": "secret"}
    )

    assert response.status_code == 200
    assert response.get_json()["username"] == "bob"


def test_missing_required_field(validation_client):
    """Missing required field should raise ValidationError with details."""
    response = validation_client.post("/test/valid", json={"username": "bob"})

    assert response.status_code == 400
    data = response.get_json()

    assert data["error"]["type"] == "ValidationError"
    assert data["error"]["code"] == "validation_error"
    errors = data["error"]["details"]["errors"]

    password_errors = [e for e in errors if e["field"] == "password"]
    assert len(password_errors) == 1
    assert password_errors[0]["expected_type"] == "missing"


def test_error_details_include_field_and_message(validation_client):
    """Validation errors should include field, message, and expected_type."""
    response = validation_client.post(
        "/test/valid",
        json={"username": "bob", "password": "secret", "attempts": "many"}
    )

    assert response.status_code == 400
    errors = response.get_json()["error"]["details"]["errors"]

    for error in errors:
        assert "field" in error
        assert "message" in error
        assert "expected_type" in error
    assert errors[0]["field"] == "attempts"


def test_empty_body_reports_every_required_field(validation_client):
    """Empty JSON body should return clear validation error for missing required fields."""
    response = validation_client.post("/test/valid", json={})

    assert response.status_code == 400
    error_details = response.get_json()["error"]["details"]

    assert error_details["model"] == "MockCredentials"
    assert error_details["received"] == {}
    field_names = [e["field"] for e in error_details["errors"]]
    assert "username" in field_names
    assert "password" in field_names


def test_received_data_redacts_credentials(validation_client):
    """Password and challenge values never appear in the error response."""
    response = validation_client.post(
        "/test/valid",
        json={
            "username": "",
            "password": "hunter2",
            "challenge": "4821",
            "extra_field": "kept"
        }
    )

    assert response.status_code == 400
    received = response.get_json()["error"]["details"]["received"]
    assert received["username"] == ""
    assert received["password"] == REDACTION_PLACEHOLDER
    assert received["challenge"] == REDACTION_PLACEHOLDER
    assert received["extra_field"] == "kept"
    assert b"hunter2" not in response.data


def test_non_object_json_is_treated_as_empty(validation_client):
    response = validation_client.post("/test/valid", json=["bob", "secret"])

    assert response.status_code == 400
    assert response.get_json()["error"]["details"]["received"] == {}


def test_passes_through_path_parameters_unchanged(validation_client):
    """Path parameters should be passed as strings, not validated."""
    response = validation_client.get("/test/path/admin01")

    assert response.status_code == 200
    assert response.get_json()["username"] == "admin01"


def test_path_param_with_body(validation_client):
    """Routes with both path param and body should handle both correctly."""
    response = validation_client.put(
        "/test/combined/bob",
        json={"nickname": "Bobby"}
    )

    assert response.status_code == 200
    data = response.get_json()
    assert data["username"] == "bob"
    assert data["nickname"] == "Bobby"


def test_raises_typeerror_when_function_has_no_parameters():
    """Decorator should raise TypeError when function has no parameters."""
    def no_params():
        return "ok"

    with pytest.raises(TypeError) as exc_info:
        validate_request(no_params)

    assert "has no parameters to validate" in str(exc_info.value)


def test_raises_typeerror_when_first_param_lacks_annotation():
    """Decorator should raise TypeError when first param lacks type annotation."""
    def no_annotation(data):
        return "ok"

    with pytest.raises(TypeError) as exc_info:
        validate_request(no_annotation)

    assert "lacks a type annotation" in str(exc_info.value)


def test_raises_typeerror_for_body_param_without_basemodel(validation_app):
    """Body parameters without BaseModel annotation should raise TypeError at request time."""
    def wrong_annotation(data: str):
        return "ok"

    decorated = validate_request(wrong_annotation)

    with validation_app.test_request_context('/test', method='POST', json={"data": "test"}):
        from flask import request
        request.view_args = {}

        with pytest.raises(TypeError) as exc_info:
            decorated()

        assert "Pydantic BaseModel subclass" in str(exc_info.value)
