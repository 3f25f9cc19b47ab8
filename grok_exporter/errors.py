class ConfigError(Exception):
    """Base class for configuration errors."""


class ConfigLoadError(ConfigError):
    """Exception raised when a configuration source cannot be read."""


class ConfigParseError(ConfigError):
    """Exception raised when configuration text is not well-formed."""


class ConfigValidationError(ConfigError):
    """Exception raised when a configuration rule is violated.

    Attributes:
        field: YAML path of the offending field, e.g. ``server.port``
    """

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field
