"""Request validation middleware.

Views are wrapped with :func:`validate` (or the ``validate_body`` /
``validate_query`` / ``validate_params`` shorthands). The decorator runs a
pydantic schema over one request section and either lets the view run with
normalized data on ``flask.g`` or short-circuits with field-labelled errors.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Callable, Dict, List, Mapping, Optional, Type, Union

from flask import g, jsonify, request
from pydantic import BaseModel, ValidationError

from butterfly_survey.domain.enums import RequestSource
from butterfly_survey.models.schemas import FieldError

logger = logging.getLogger(__name__)

ErrorHandler = Callable[[List[str]], Any]

FIELD_DISPLAY_NAMES: Dict[str, str] = {
    "firstname": "First Name",
    "surname": "Surname",
    "email": "Email",
    "address": "Address",
    "suburb": "Suburb",
    "postcode": "Postcode",
    "phone": "Phone",
    "q1radio": "Survey Question #1",
    "q2radio": "Survey Question #2",
    "q3radio": "Survey Question #3",
    "comments": "Comment",
    "butterflyColour": "Butterfly Colour",
    "page": "Page",
    "limit": "Limit",
    "sortBy": "Sort By",
    "order": "Order",
    "id": "Survey ID",
}

_MESSAGE_OVERRIDES = {
    "missing": "This field is required",
    "extra_forbidden": "Unrecognized field",
}


def field_display_name(field: str) -> str:
    return FIELD_DISPLAY_NAMES.get(field, field)


def collect_field_errors(exc: ValidationError) -> List[FieldError]:
    """Flatten a pydantic error into ``FieldError`` items, in input order."""
    errors: List[FieldError] = []
    for issue in exc.errors():
        field = ".".join(str(part) for part in issue["loc"])
        ctx_error = issue.get("ctx", {}).get("error")
        if issue["type"] == "value_error" and ctx_error is not None:
            message = str(ctx_error)
        else:
            message = _MESSAGE_OVERRIDES.get(issue["type"], issue["msg"])
        errors.append(FieldError(field=field, message=message))
    return errors


def format_field_error(error: FieldError) -> str:
    if not error.field:
        return error.message
    label = field_display_name(error.field).upper()
    return f"Error in field '{label}': {error.message}"


def format_validation_errors(exc: ValidationError) -> List[str]:
    return [format_field_error(error) for error in collect_field_errors(exc)]


def _json_error(errors: List[str]):
    return jsonify({"success": False, "error": "Validation failed", "details": errors}), 400


def _read_source(source: RequestSource, view_kwargs: Mapping[str, Any]) -> Any:
    if source is RequestSource.BODY:
        if request.is_json:
            body = request.get_json(silent=True)
            return {} if body is None else body
        return request.form.to_dict()
    if source is RequestSource.QUERY:
        return request.args.to_dict()
    return dict(view_kwargs)


def _normalized(model: BaseModel) -> Dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


def _store(source: RequestSource, raw: Any, model: BaseModel) -> None:
    if "validated" not in g:
        g.validated = {}
        g.request_data = {}
    g.validated[source.value] = model
    merged = dict(raw) if isinstance(raw, Mapping) else {}
    merged.update(_normalized(model))
    g.request_data[source.value] = merged


def validated(source: Union[RequestSource, str] = RequestSource.BODY) -> Any:
    """Return the model stored by the middleware for ``source``."""
    return g.validated[RequestSource(source).value]


def validate(
    schema: Type[BaseModel],
    source: Union[RequestSource, str] = RequestSource.BODY,
    error_handler: Optional[ErrorHandler] = None,
):
    """Validate one request section against ``schema`` before the view runs.

    On failure ``error_handler(errors)`` builds the response when given,
    otherwise a JSON 400 ``{error, details}`` is returned.
    """
    source = RequestSource(source)

    def decorator(view: Callable) -> Callable:
        @wraps(view)
        def wrapper(*args: Any, **kwargs: Any):
            raw = _read_source(source, kwargs)
            try:
                model = schema.model_validate(raw)
            except ValidationError as exc:
                errors = format_validation_errors(exc)
                logger.info(
                    "Rejected %s %s (%s): %d error(s)",
                    request.method,
                    request.path,
                    source.value,
                    len(errors),
                )
                if error_handler is not None:
                    return error_handler(errors)
                return _json_error(errors)

            _store(source, raw, model)
            if source is RequestSource.PARAMS:
                kwargs.update(model.model_dump())
            return view(*args, **kwargs)

        return wrapper

    return decorator


def validate_body(schema: Type[BaseModel], error_handler: Optional[ErrorHandler] = None):
    return validate(schema, RequestSource.BODY, error_handler)


def validate_query(schema: Type[BaseModel], error_handler: Optional[ErrorHandler] = None):
    return validate(schema, RequestSource.QUERY, error_handler)


def validate_params(schema: Type[BaseModel], error_handler: Optional[ErrorHandler] = None):
    return validate(schema, RequestSource.PARAMS, error_handler)


def validate_multiple(
    schemas: Mapping[Union[RequestSource, str], Type[BaseModel]],
    error_handler: Optional[ErrorHandler] = None,
):
    """Validate several sections in order; the first failing section wins."""

    def decorator(view: Callable) -> Callable:
        wrapped = view
        for source, schema in reversed(list(schemas.items())):
            wrapped = validate(schema, source, error_handler)(wrapped)
        return wrapped

    return decorator
