"""
Runtime configuration.

Settings can be modified programmatically without environment variables.

Example:
    >>> from formcast import config
    >>> config.max_schema_depth = 16  # Reject deeper schemas at resolution time
"""

from .exceptions import ValidationError

__all__ = ["config", "DEFAULT_MAX_SCHEMA_DEPTH"]

DEFAULT_MAX_SCHEMA_DEPTH = 64


class _FormcastConfig:
    """
    Singleton configuration for formcast settings.

    This is a singleton - import and modify `config` directly:

        from formcast import config
        config.strict_emit_keys = True

    Attributes
    ----------
        max_schema_depth: Deepest nesting the resolver will expand before
            raising ``SchemaDepthError``. Counts object properties, array
            elements, anyOf branches and reference hops.
        strict_emit_keys: When True, the emitter drops any schema keyword
            outside the JSON-Schema subset formcast documents.
    """

    __slots__ = ("_max_schema_depth", "_strict_emit_keys")

    def __init__(self) -> None:
        self._max_schema_depth = DEFAULT_MAX_SCHEMA_DEPTH
        self._strict_emit_keys = False

    @property
    def max_schema_depth(self) -> int:
        """Maximum nesting depth expanded during schema resolution."""
        return self._max_schema_depth

    @max_schema_depth.setter
    def max_schema_depth(self, value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(
                f"max_schema_depth must be int, got {type(value).__name__}",
                code="INVALID_ARGUMENT",
                details={"param": "max_schema_depth", "type": type(value).__name__},
            )
        if value < 1:
            raise ValidationError(
                f"max_schema_depth must be >= 1, got {value}",
                code="INVALID_ARGUMENT",
                details={"param": "max_schema_depth", "value": value},
            )
        self._max_schema_depth = value

    @property
    def strict_emit_keys(self) -> bool:
        """Restrict emitted schema dictionaries to the documented keyword set."""
        return self._strict_emit_keys

    @strict_emit_keys.setter
    def strict_emit_keys(self, value: bool) -> None:
        if not isinstance(value, bool):
            raise ValidationError(
                f"strict_emit_keys must be bool, got {type(value).__name__}",
                code="INVALID_ARGUMENT",
                details={"param": "strict_emit_keys", "type": type(value).__name__},
            )
        self._strict_emit_keys = value

    def reset(self) -> None:
        """Restore all settings to their defaults."""
        self._max_schema_depth = DEFAULT_MAX_SCHEMA_DEPTH
        self._strict_emit_keys = False

    def __repr__(self) -> str:
        return (
            f"FormcastConfig(max_schema_depth={self._max_schema_depth}, "
            f"strict_emit_keys={self._strict_emit_keys})"
        )


# Module-level singleton
config = _FormcastConfig()
