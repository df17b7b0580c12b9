"""Request body validation decorator.

@validate_request inspects the view function's signature. Parameters that
match URL path variables are passed through unchanged; every other parameter
must be annotated with a Pydantic model, which is built from the JSON body
(or form data for HTML forms).

Validation failures raise ValidationError with details:

    {
        "model": "LoginRequest",
        "received": {...},
        "errors": [{"field": "password", "message": "...", "expected_type": "missing"}]
    }
"""

import inspect
from functools import wraps

from flask import request
from pydantic import BaseModel, ValidationError as PydanticValidationError

from ..exceptions import ValidationError

# Credential fields echoed back in "received" are masked
SENSITIVE_FIELDS = {"password", "challenge"}
REDACTION_PLACEHOLDER = "***REDACTED***"


def _request_data() -> dict:
    data = request.get_json(silent=True)
    if data is None and request.form:
        data = request.form.to_dict()
    return data if isinstance(data, dict) else {}


def _redact(data: dict) -> dict:
    return {
        key: REDACTION_PLACEHOLDER if key in SENSITIVE_FIELDS else value
        for key, value in data.items()
    }


def _format_errors(error: PydanticValidationError) -> list[dict]:
    return [
        {
            "field": ".".join(str(part) for part in err["loc"]),
            "message": err["msg"],
            "expected_type": err["type"],
        }
        for err in error.errors()
    ]


def validate_request(f):
    """Validate the request body against the view's annotated Pydantic model."""
    params = list(inspect.signature(f).parameters.values())
    if not params:
        raise TypeError(f"{f.__name__} has no parameters to validate")
    if params[0].annotation is inspect.Parameter.empty:
        raise TypeError(f"First parameter of {f.__name__} lacks a type annotation")

    @wraps(f)
    def wrapper(*args, **kwargs):
        view_args = request.view_args or {}
        for param in params:
            if param.name in view_args or param.name in kwargs:
                continue

            model = param.annotation
            if not (inspect.isclass(model) and issubclass(model, BaseModel)):
                raise TypeError(
                    f"Parameter '{param.name}' of {f.__name__} must be annotated "
                    f"with a Pydantic BaseModel subclass"
                )

            data = _request_data()
            try:
                kwargs[param.name] = model(**data)
            except PydanticValidationError as e:
                raise ValidationError(
                    "Invalid request data",
                    {
                        "model": model.__name__,
                        "received": _redact(data),
                        "errors": _format_errors(e),
                    }
                )

        return f(*args, **kwargs)

    return wrapper
