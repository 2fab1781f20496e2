"""
Starlette integration for the request validator.

Provides an endpoint decorator that validates the request body before the
endpoint runs and turns rejections into standardized JSON error responses.
"""

from functools import wraps
from typing import Any, Awaitable, Callable, Sequence

from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from .errors import BadRequestError, RequestParseError, error_response_for
from .rules import RuleSpec, compile_schema
from .validator import RequestValidator

Endpoint = Callable[[Request], Awaitable[Response]]


def validate_body(validator: RequestValidator, rules: Sequence[RuleSpec]) -> Callable[[Endpoint], Endpoint]:
    """
    Decorator validating a Starlette endpoint's request body.

    The validated parameters are stored on ``request.state.params``.

    Args:
        validator: Configured validator
        rules: Parameter schema, compiled once when the decorator is applied

    Returns:
        Decorator function
    """
    schema = compile_schema(rules)

    def decorator(func: Endpoint) -> Endpoint:
        @wraps(func)
        async def wrapper(request: Request, *args: Any, **kwargs: Any) -> Response:
            try:
                request.state.params = await validator.validate(request, schema)
            except (BadRequestError, RequestParseError) as e:
                payload, status_code = error_response_for(e)
                return JSONResponse(payload, status_code=status_code)

            return await func(request, *args, **kwargs)

        return wrapper
    return decorator
