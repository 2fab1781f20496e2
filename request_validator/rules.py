"""Parameter rule definitions and schema compilation.

A schema is an ordered list of rules. Each rule may be written in one of
two forms, both normalized to a single ``Rule`` record before validation:

Shorthand (single key mapping):
    {"email": "string"}

Full descriptor:
    {
      "name": "age",                  # required
      "type": "integer",              # required, see SUPPORTED_TYPES
      "coerce": bool,                 # convert the raw value first
      "optional": bool,               # missing value skips all checks
      "validator": callable,          # (value) -> bool
      "customValidator": callable,    # (value) -> bool, independent gate
      "failMsg": str                  # message used when a gate fails
    }

``custom_validator`` and ``fail_msg`` are accepted as snake_case aliases.
Already built ``Rule`` instances pass through unchanged.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Sequence, Tuple, Union

from .errors import ConfigurationError

SUPPORTED_TYPES = ("string", "object", "array", "number", "integer", "boolean")

Predicate = Callable[[Any], bool]
RuleSpec = Union["Rule", Mapping[str, Any]]

_ALIASES = {
    "customValidator": "custom_validator",
    "failMsg": "fail_msg",
}
_DESCRIPTOR_FIELDS = (
    "name", "type", "coerce", "optional", "validator", "custom_validator", "fail_msg",
)


@dataclass(frozen=True)
class Rule:
    """Canonical form of one expected parameter."""
    name: str
    type: str
    coerce: bool = False
    optional: bool = False
    validator: Optional[Predicate] = None
    custom_validator: Optional[Predicate] = None
    fail_msg: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise ConfigurationError(f"Parameter name must be a non-empty string, got {self.name!r}")
        _check_type(self.type)
        for hook in ("validator", "custom_validator"):
            fn = getattr(self, hook)
            if fn is not None and not callable(fn):
                raise ConfigurationError(f"'{hook}' of parameter '{self.name}' must be callable")

    @property
    def failure_message(self) -> str:
        return self.fail_msg or f"{self.name} failed to validate"


def _check_type(type_tag: Any) -> None:
    if type_tag not in SUPPORTED_TYPES:
        raise ConfigurationError(
            f'Type "{type_tag}" is not supported. Type must be one of: {", ".join(SUPPORTED_TYPES)}'
        )


def normalize_rule(spec: RuleSpec) -> Rule:
    if isinstance(spec, Rule):
        return spec
    if not isinstance(spec, Mapping):
        raise ConfigurationError(
            f"Parameter rule must be a mapping or Rule, got {type(spec).__name__}"
        )

    if len(spec) == 1:
        ((name, type_tag),) = spec.items()
        return Rule(name=name, type=type_tag)

    fields = {}
    for key, value in spec.items():
        key = _ALIASES.get(key, key)
        if key in _DESCRIPTOR_FIELDS:
            fields[key] = value

    if not fields.get("name"):
        raise ConfigurationError(
            'Parameters object that have more than { paramName: paramType } must have a "name" property'
        )
    if "type" not in fields:
        raise ConfigurationError(f"Parameter '{fields['name']}' must declare a type")

    fields["coerce"] = bool(fields.get("coerce", False))
    fields["optional"] = bool(fields.get("optional", False))
    return Rule(**fields)


def compile_schema(rule_list: Sequence[RuleSpec]) -> Tuple[Rule, ...]:
    """Normalize a whole schema up front so misconfiguration fails fast."""
    if not isinstance(rule_list, (list, tuple)):
        raise ConfigurationError("Schema must be a list of parameter rules")
    return tuple(normalize_rule(spec) for spec in rule_list)
