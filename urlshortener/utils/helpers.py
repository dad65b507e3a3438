"""Helper utilities shared by the DAO and service layers.

Functions:
    get_short_url(shortcode: str, base_url: str) -> str
        Get string representation of short URL for a given shortcode
    validate_target_url(raw: str) -> str
        Validate and normalize a long URL submitted for shortening
    format_timestamp(moment: datetime | None = None) -> str
        Render a UTC timestamp in RFC 3339 format with nanosecond precision
    parse_timestamp(value: str) -> datetime
        Parse an RFC 3339 timestamp (up to nanosecond precision) into an aware datetime
    require_environment(*names: str) -> Callable
        Decorator: Ensure required environment variables are present

Example:
    >>> from urlshortener.utils.helpers import get_short_url, validate_target_url
    >>> get_short_url('abc1234', 'https://sho.rt/')
    'https://sho.rt/abc1234'
    >>> validate_target_url('  HTTPS://example.com/page ')
    'https://example.com/page'
"""

import os
import re
import functools
from datetime import datetime, UTC
from urllib.parse import urlsplit
from collections.abc import Callable

from urlshortener.exceptions import InvalidTargetURLError, MissingEnvironmentVariableError


_FRACTION_RE = re.compile(r'\.(\d+)')


def get_short_url(shortcode: str, base_url: str) -> str:
    """Get string representation of shortened URL

    Args:
        shortcode (str): shortcode
        base_url (str): public base URL of the service, e.g. 'https://sho.rt'

    Returns:
        str: short url string representation
    """
    return f'{base_url.rstrip("/")}/{shortcode}'


def validate_target_url(raw: str) -> str:
    """Validate a long URL before it gets shortened

    Surrounding whitespace is stripped. Only absolute http(s) URLs with a
    host are accepted.

    Args:
        raw (str): URL as submitted by the client

    Returns:
        str: the trimmed URL with a lowercase scheme, otherwise unchanged

    Raises:
        InvalidTargetURLError:
            If the URL is empty, unparsable, not http(s) or has no host.
    """
    trimmed = (raw or '').strip()
    if not trimmed:
        raise InvalidTargetURLError('url is required')

    try:
        parts = urlsplit(trimmed)
        hostname = parts.hostname
    except ValueError as e:
        raise InvalidTargetURLError('invalid url') from e

    if parts.scheme not in {'http', 'https'}:
        raise InvalidTargetURLError('url must start with http:// or https://')
    if not hostname:
        raise InvalidTargetURLError('url host is required')

    # Only the scheme is normalized; the rest (an empty "?" or "#" included) is kept verbatim.
    return parts.scheme + trimmed[len(parts.scheme):]


def format_timestamp(moment: datetime | None = None) -> str:
    """Render a timestamp as RFC 3339 in UTC with nanosecond precision

    Trailing zeros of the fractional part are trimmed (and the fraction is
    omitted entirely on whole seconds). Naive datetimes are assumed to be UTC.

    Args:
        moment (datetime | None): timestamp to render, defaults to now

    Returns:
        str: e.g. '2025-10-15T12:30:45.123456Z'
    """
    moment = moment or datetime.now(UTC)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    moment = moment.astimezone(UTC)

    fraction = f'{moment.microsecond * 1000:09d}'.rstrip('0')
    suffix = f'.{fraction}Z' if fraction else 'Z'
    return moment.strftime('%Y-%m-%dT%H:%M:%S') + suffix


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp into an aware UTC datetime

    Fractional seconds beyond microseconds are truncated.

    Args:
        value (str): e.g. '2025-10-15T12:30:45.123456789Z'

    Returns:
        datetime: aware datetime in UTC

    Raises:
        ValueError: If the value isn't a timezone-aware RFC 3339 timestamp.
    """
    match = _FRACTION_RE.search(value)
    if match:
        micros = match.group(1)[:6].ljust(6, '0')
        value = f'{value[: match.start()]}.{micros}{value[match.end() :]}'

    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        raise ValueError(f'Timestamp must carry a timezone (given value: {value}).')
    return parsed.astimezone(UTC)


def require_environment(*names: str) -> Callable:
    """Decorator ensuring required environment variables are present.

    Args:
        *names (str):
            Names of required environment variables.

    Raises:
        MissingEnvironmentVariableError:
            If any required environment variable is missing or empty.

    Example:
        >>> @require_environment('APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID')
        ... def my_function():
        ...     pass
        >>> my_function()
        MissingEnvironmentVariableError: Missing required environment variables: 'APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID'
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            missing = [name for name in names if not os.environ.get(name)]
            if missing:
                missing_list = ', '.join(f"'{name}'" for name in missing)
                raise MissingEnvironmentVariableError(f'Missing required environment variables: {missing_list}')
            return func(*args, **kwargs)

        return wrapper

    return decorator
