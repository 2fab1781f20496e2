"""
Request Validator Package

Validates and type-coerces form-urlencoded and JSON request bodies against
declarative parameter schemas.
"""

from .errors import (
    BadRequestError,
    ConfigurationError,
    PayloadTooLargeError,
    RequestParseError,
)
from .rules import Rule, compile_schema
from .engine import validate_params
from .validator import RequestValidator

__version__ = "0.1.0"
__all__ = [
    "BadRequestError",
    "ConfigurationError",
    "PayloadTooLargeError",
    "RequestParseError",
    "RequestValidator",
    "Rule",
    "compile_schema",
    "validate_params",
]
