"""
Request validator.

Ties together content-type checking, body collection and the parameter
validation engine behind a single ``validate`` call.
"""

from typing import Any, Dict, Mapping, Sequence

from .collector import (
    CONTENT_TYPE_ALIASES,
    DEFAULT_MAX_BODY_SIZE,
    DEFAULT_MAX_KEYS,
    BodyCollector,
    RequestStream,
)
from .engine import validate_params
from .errors import BadRequestError, ConfigurationError, RequestParseError
from .logging_config import get_logger, log_with_context
from .rules import RuleSpec, compile_schema

request_logger = get_logger("request_validator.requests")


def normalize_content_type(content_type: str) -> str:
    """Resolve ``form``/``json`` shorthands to their full MIME type."""
    try:
        return CONTENT_TYPE_ALIASES[content_type]
    except (KeyError, TypeError):
        raise ConfigurationError(
            'contentType must be one of "application/x-www-form-urlencoded" or "form", '
            'or "application/json" or "json"'
        ) from None


class RequestValidator:
    """
    Validates request bodies against parameter schemas.

    One instance serves one content type. Configuration is fixed at
    construction, so a single validator may be shared by concurrent
    requests.
    """

    def __init__(
        self,
        content_type: str,
        max_body_size: int = DEFAULT_MAX_BODY_SIZE,
        max_keys: int = DEFAULT_MAX_KEYS
    ):
        """
        Initialize the validator.

        Args:
            content_type: "form", "json" or the equivalent full MIME type
            max_body_size: Body size ceiling in bytes
            max_keys: Maximum number of form fields decoded, 0 for no limit

        Raises:
            ConfigurationError: If any argument is not supported
        """
        if isinstance(max_body_size, bool) or not isinstance(max_body_size, int) or max_body_size <= 0:
            raise ConfigurationError(f"max_body_size must be a positive integer, got {max_body_size!r}")
        if isinstance(max_keys, bool) or not isinstance(max_keys, int) or max_keys < 0:
            raise ConfigurationError(f"max_keys must be a non-negative integer, got {max_keys!r}")

        self._collector = BodyCollector(
            normalize_content_type(content_type),
            max_body_size=max_body_size,
            max_keys=max_keys
        )

    @classmethod
    def from_settings(cls, settings) -> "RequestValidator":
        """Build a validator from a ``ValidatorConfig`` section."""
        return cls(
            settings.content_type,
            max_body_size=settings.max_body_size,
            max_keys=settings.max_keys
        )

    @property
    def content_type(self) -> str:
        return self._collector.content_type

    @property
    def max_body_size(self) -> int:
        return self._collector.max_body_size

    def __repr__(self) -> str:
        return f"RequestValidator(content_type={self.content_type!r}, max_body_size={self.max_body_size})"

    async def validate(self, request: RequestStream, rule_list: Sequence[RuleSpec]) -> Dict[str, Any]:
        """
        Validate a request body against a schema.

        Args:
            request: Request exposing ``headers`` and ``stream()``
            rule_list: Ordered parameter rules

        Returns:
            Validated parameter map

        Raises:
            ConfigurationError: If the schema is malformed
            BadRequestError: If the request is rejected (400, 413 for size)
            RequestParseError: If the stream fails or the body cannot be decoded
        """
        schema = compile_schema(rule_list)

        try:
            self._collector.check_content_type(request)
            params = await self._collector.collect_body(request)
            validated = validate_params(params, schema)
        except BadRequestError as e:
            log_with_context(
                request_logger,
                "info",
                f"Rejected request: {e.message}",
                content_type=self.content_type,
                status_code=e.status_code,
                error_type=e.error_type
            )
            raise
        except RequestParseError as e:
            log_with_context(
                request_logger,
                "warning",
                f"Unreadable request body: {e}",
                content_type=self.content_type,
                error_type=e.error_type
            )
            raise

        log_with_context(
            request_logger,
            "debug",
            "Request validated",
            content_type=self.content_type,
            status_code=200,
            param_count=len(validated)
        )
        return validated

    def validate_params(self, params: Mapping[str, Any], rule_list: Sequence[RuleSpec]) -> Dict[str, Any]:
        """Run the schema against an already decoded parameter map."""
        return validate_params(params, rule_list)
