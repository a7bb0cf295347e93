class ShortKeyError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:shortkey_error'


class ConfigurationError(ShortKeyError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class MissingEnvironmentVariableError(ConfigurationError):
    """Raised when a required environment variable is missing."""

    error_code = 'config:missing_environment_variable_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'


class ValidationError(ShortKeyError):
    """Base exception for malformed client input. Never touches the store."""

    error_code = 'input:validation_error'


class BadKeyError(ValidationError):
    """Raised when a short key is malformed."""

    error_code = 'input:bad_key_error'


class BadLinkError(ValidationError):
    """Raised when a link is empty, multi-line or not a URL."""

    error_code = 'input:bad_link_error'


class KeyspaceExhaustedError(ShortKeyError):
    """Raised when no free key was generated within the allowed number of attempts."""

    error_code = 'keys:keyspace_exhausted_error'

    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts
