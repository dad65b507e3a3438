import string
from enum import StrEnum


class ShortCode:
    """Short code allocation parameters."""

    # 0-9 + a-z + A-Z (62 symbols)
    ALPHABET = string.digits + string.ascii_lowercase + string.ascii_uppercase
    LENGTH = 7  # Length of randomly generated codes
    MAX_ATTEMPTS = 10  # Random candidates tried before giving up
    ALIAS_PATTERN = r'[A-Za-z0-9_-]{4,32}'  # Custom aliases (matched in full)


class TTL:
    """TTL durations in seconds."""

    ONE_DAY = 86_400  # 60 * 60 * 24


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        LOG_LEVEL = 'LOG_LEVEL'

    class AppConfig(StrEnum):
        APP_ID = 'APPCONFIG_APP_ID'
        ENV_ID = 'APPCONFIG_ENV_ID'
        PROFILE_ID = 'APPCONFIG_PROFILE_ID'

    class Redis(StrEnum):
        HOST = 'REDIS_HOST'
        PORT = 'REDIS_PORT'
        DB = 'REDIS_DB'
        USERNAME = 'REDIS_USERNAME'
        PASSWORD = 'REDIS_PASSWORD'  # noqa: S105
        SOCKET_TIMEOUT = 'REDIS_SOCKET_TIMEOUT'
        MAX_CONNECTIONS = 'REDIS_MAX_CONNECTIONS'


class Event(StrEnum):
    """Event codes attached to log records via `extra`."""

    SHORT_URL_CREATED = 'SHORT_URL_CREATED'
    SHORT_URL_CONFLICT = 'SHORT_URL_CONFLICT'
    SHORT_URL_DELETED = 'SHORT_URL_DELETED'
    SHORTCODE_EXHAUSTED = 'SHORTCODE_EXHAUSTED'
    PARTIAL_INSERT = 'PARTIAL_INSERT'
    REDIRECT_SUCCESS = 'REDIRECT_SUCCESS'
    VISIT_NOT_RECORDED = 'VISIT_NOT_RECORDED'
