class URLShortenerError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:url_shortener_error'
    status_code = 500


class ValidationError(URLShortenerError):
    """Base exception for malformed client input."""

    error_code = 'validation:validation_error'
    status_code = 400


class InvalidAliasError(ValidationError):
    """Raised when a custom alias doesn't match the allowed pattern."""

    error_code = 'validation:invalid_alias_error'


class InvalidTargetURLError(ValidationError):
    """Raised when a target URL is empty, unparsable or not http(s)."""

    error_code = 'validation:invalid_target_url_error'


class InvalidExpirationError(ValidationError):
    """Raised when a requested expiration is negative."""

    error_code = 'validation:invalid_expiration_error'


class ShortCodeExhaustedError(URLShortenerError):
    """Raised when no unique random short code could be allocated."""

    error_code = 'app:shortcode_exhausted_error'


class ConfigurationError(URLShortenerError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class MissingEnvironmentVariableError(ConfigurationError):
    """Raised when a required environment variable is missing."""

    error_code = 'config:missing_environment_variable_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'
