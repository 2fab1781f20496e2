"""Parameter schema validation engine.

Applies an ordered list of rules to a decoded parameter map. Each rule goes
through presence check, optional coercion, type check and custom validation;
the first failure raises ``BadRequestError`` and nothing else is evaluated.

Presence follows JavaScript truthiness, since bodies are produced by
clients that think in those terms: ``None``, ``""``, ``False``, ``0`` and
``NaN`` are missing while empty lists and dicts are present. A boolean rule
accepts ``False`` and a numeric rule accepts ``0``.

The input map is never modified. The returned map holds the declared
parameters found in the input, coerced where requested.
"""
from __future__ import annotations
import logging
import math
from typing import Any, Dict, Mapping, Sequence

from .errors import BadRequestError
from .rules import Rule, RuleSpec, compile_schema

logger = logging.getLogger(__name__)

_MISSING = object()


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_falsy(value: Any) -> bool:
    if value is _MISSING or value is None or value is False:
        return True
    if isinstance(value, str):
        return value == ""
    if _is_number(value):
        return value == 0 or math.isnan(value)
    return False


def is_missing(rule: Rule, value: Any) -> bool:
    """Whether ``value`` counts as absent for ``rule``."""
    if not _is_falsy(value):
        return False
    if rule.type == "boolean" and isinstance(value, bool):
        return False
    if rule.type in ("number", "integer") and _is_number(value) and value == 0:
        return False
    return True


def number_to_string(value: Any) -> str:
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
    return str(value)


def to_number(value: Any) -> Any:
    """Best effort numeric conversion. Unconvertible input becomes NaN."""
    if isinstance(value, bool):
        return int(value)
    if _is_number(value):
        return value
    if not isinstance(value, str):
        return math.nan

    text = value.strip()
    if text == "":
        return 0
    if "_" in text or not text.isascii():
        return math.nan
    if text in ("Infinity", "+Infinity"):
        return math.inf
    if text == "-Infinity":
        return -math.inf
    lowered = text.lower()
    if "inf" in lowered or "nan" in lowered:
        return math.nan
    if lowered[:2] in ("0x", "0o", "0b"):
        try:
            return int(lowered, 0)
        except ValueError:
            return math.nan
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return math.nan


def coerce_value(rule: Rule, value: Any) -> Any:
    """Convert ``value`` towards ``rule.type``. Never raises."""
    if rule.type == "string":
        return number_to_string(value) if _is_number(value) else value
    if rule.type in ("number", "integer"):
        return to_number(value)
    if rule.type == "boolean":
        return value == "true" or value is True
    return value


def matches_type(type_tag: str, value: Any) -> bool:
    if type_tag == "string":
        return isinstance(value, str)
    if type_tag == "object":
        return isinstance(value, dict)
    if type_tag == "array":
        return isinstance(value, list)
    if type_tag in ("number", "integer"):
        # integer is not checked for integrality
        return _is_number(value) and not math.isnan(value)
    if type_tag == "boolean":
        return isinstance(value, bool)
    return False


def check_param(rule: Rule, value: Any) -> Any:
    """Validate one present value against ``rule`` and return it, coerced."""
    if rule.coerce:
        value = coerce_value(rule, value)

    if not matches_type(rule.type, value):
        raise BadRequestError(f"{rule.name} param must be a {rule.type}")

    if rule.validator is not None and not rule.validator(value):
        raise BadRequestError(rule.failure_message)

    if rule.custom_validator is not None and not rule.custom_validator(value):
        raise BadRequestError(rule.failure_message)

    return value


def validate_params(params: Mapping[str, Any], rules: Sequence[RuleSpec]) -> Dict[str, Any]:
    """
    Validate ``params`` against ``rules``.

    Args:
        params: Decoded request body
        rules: Schema, raw rule specs or compiled ``Rule`` objects

    Returns:
        New dictionary of validated (and coerced) parameters

    Raises:
        ConfigurationError: If the schema is malformed
        BadRequestError: On the first rule that fails
    """
    schema = compile_schema(rules)
    validated: Dict[str, Any] = {}

    for rule in schema:
        # a name declared twice sees the value an earlier rule produced
        value = validated.get(rule.name, params.get(rule.name, _MISSING))

        if is_missing(rule, value):
            if not rule.optional:
                raise BadRequestError(f"Missing {rule.name} param")
            if value is not _MISSING:
                validated[rule.name] = value
            continue

        validated[rule.name] = check_param(rule, value)

    logger.debug(f"Validated {len(validated)} of {len(schema)} declared params")
    return validated
