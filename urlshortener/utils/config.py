"""Utility functions for application configuration management.

Redis connection parameters are carried by an explicit `RedisConfig` value
which is handed to the DAO constructors. It is validated when built, so a bad
deployment fails at startup with `BadConfigurationError` instead of on the
first request.

A `RedisConfig` can be built from:

    - the process environment (`REDIS_HOST`, `REDIS_PORT`, ...), or
    - a configuration document stored in **AWS AppConfig**, shaped like:

        {
            "active_backend": "redis",
            "configs": {
                "redis": { "host": "...", "port": 6379, "db": 0, ... }
            }
        }

Functions:
    app_env() -> str
        Return the current application environment (`APP_ENV`) value,
        defaulting to `'local'`.

    app_name() -> str | None
        Return the application name (`APP_NAME`), or None if not set.

    app_prefix() -> str | None
        Return application prefix for DAO keys, or None if `APP_NAME` is not set.

    load_config(backend: str) -> dict
        Load the active data store backend's configuration from AWS AppConfig
        (used by RedisConfig.from_appconfig()).

Example:
    >>> from urlshortener.utils.config import RedisConfig
    >>> config = RedisConfig.from_appconfig()
    >>> config.host
    'redis-15501.host.docker.internal'
"""

import os
import json
import logging
from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional

import boto3

from urlshortener.constants import ENV
from urlshortener.exceptions import BadConfigurationError
from urlshortener.utils.helpers import require_environment


logger = logging.getLogger(__name__)


def app_env() -> str:
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    return os.environ.get(ENV.App.APP_NAME)


def app_prefix() -> str | None:
    """Return application prefix for DAOs

    Returns:
        str: app prefix as <app name>:<app env>.
             None if APP_NAME is not set.

    Example:
        >>> os.environ['APP_NAME'] = 'urlshortener'
        >>> os.environ['APP_ENV'] = 'local'
        >>> app_prefix()
        'urlshortener:local'
    """
    return None if app_name() is None else f'{app_name()}:{app_env()}'


@dataclass(frozen=True)
class RedisConfig:
    """Connection parameters for the Redis data store.

    Attributes:
        host (str): Hostname of the Redis server.
        port (int): Redis server port.
        db (int): Redis database index.
        username (Optional[str]): Username for Redis authentication (if required).
        password (Optional[str]): Password for Redis authentication (if required).
        socket_timeout (float): Upper bound (seconds) on every Redis call.
        max_connections (Optional[int]): Size limit of the shared connection pool.

    Raises:
        BadConfigurationError: If any parameter is out of range.
    """

    host: str = 'localhost'
    port: int = 6379
    db: int = 0
    username: Optional[str] = None
    password: Optional[str] = None
    socket_timeout: float = 5.0
    max_connections: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.host, str) or not self.host:
            raise BadConfigurationError(f'Redis host must be a non-empty string (given value: {self.host!r}).')
        if not isinstance(self.port, int) or not 0 < self.port < 65536:
            raise BadConfigurationError(f'Redis port must be an integer in 1-65535 (given value: {self.port!r}).')
        if not isinstance(self.db, int) or self.db < 0:
            raise BadConfigurationError(f'Redis db must be a non-negative integer (given value: {self.db!r}).')
        if not isinstance(self.socket_timeout, (int, float)) or self.socket_timeout <= 0:
            raise BadConfigurationError(f'Redis socket timeout must be positive (given value: {self.socket_timeout!r}).')
        if self.max_connections is not None and (not isinstance(self.max_connections, int) or self.max_connections <= 0):
            raise BadConfigurationError(f'Redis max connections must be a positive integer (given value: {self.max_connections!r}).')

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> 'RedisConfig':
        """Build a RedisConfig from a configuration section (e.g. AppConfig's `redis`)

        Unknown keys are ignored. Numeric values given as strings are converted.

        Raises:
            BadConfigurationError: If a value can't be converted or is out of range.
        """
        known = {f.name for f in fields(cls)}
        kwargs = {key: value for key, value in data.items() if key in known}

        try:
            for key in ('port', 'db', 'max_connections'):
                if kwargs.get(key) is not None:
                    kwargs[key] = int(kwargs[key])
            if kwargs.get('socket_timeout') is not None:
                kwargs['socket_timeout'] = float(kwargs['socket_timeout'])
        except (TypeError, ValueError) as e:
            raise BadConfigurationError(f'Invalid Redis configuration: {e}') from e

        return cls(**kwargs)

    @classmethod
    def from_environment(cls) -> 'RedisConfig':
        """Build a RedisConfig from REDIS_* environment variables

        Unset variables fall back to the dataclass defaults.

        Example:
            >>> os.environ['REDIS_HOST'] = 'redis'
            >>> os.environ['REDIS_PORT'] = '6380'
            >>> RedisConfig.from_environment().port
            6380
        """
        # fmt: off
        env = {
            'host':            os.environ.get(ENV.Redis.HOST),
            'port':            os.environ.get(ENV.Redis.PORT),
            'db':              os.environ.get(ENV.Redis.DB),
            'username':        os.environ.get(ENV.Redis.USERNAME),
            'password':        os.environ.get(ENV.Redis.PASSWORD),
            'socket_timeout':  os.environ.get(ENV.Redis.SOCKET_TIMEOUT),
            'max_connections': os.environ.get(ENV.Redis.MAX_CONNECTIONS),
        }
        # fmt: on
        return cls.from_mapping({key: value for key, value in env.items() if value})

    @classmethod
    def from_appconfig(cls) -> 'RedisConfig':
        """Build a RedisConfig from the `redis` section of the AWS AppConfig document

        Raises:
            MissingEnvironmentVariableError: If AppConfig identifiers are not set.
            BadConfigurationError: If the document has no valid `redis` section.
        """
        return cls.from_mapping(load_config('redis'))


@require_environment(ENV.AppConfig.APP_ID, ENV.AppConfig.ENV_ID, ENV.AppConfig.PROFILE_ID)
def load_config(backend: str = 'redis') -> dict:
    """Load the configuration of a data store backend from AWS AppConfig

    Environment variables required:
        APPCONFIG_APP_ID       – AppConfig Application ID
        APPCONFIG_ENV_ID       – AppConfig Environment ID
        APPCONFIG_PROFILE_ID   – AppConfig Configuration Profile ID

    Args:
        backend (str):
            Name of the expected active backend (e.g., "redis").

    Returns:
        dict: The backend configuration as a Python dictionary.

    Raises:
        MissingEnvironmentVariableError:
            If any AppConfig identifier is missing from the environment.
        BadConfigurationError:
            If the document doesn't hold the requested section for the active backend.

    Example:
        >>> load_config('redis')['host']
        'redis-15501.host.docker.internal'
    """
    logger.debug('Trying to load AppConfig from AWS AppConfig.', extra={'backend': backend})

    appconfig = boto3.client('appconfigdata')

    # Start an AppConfig data session
    session_token = appconfig.start_configuration_session(
        ApplicationIdentifier=os.environ[ENV.AppConfig.APP_ID],
        EnvironmentIdentifier=os.environ[ENV.AppConfig.ENV_ID],
        ConfigurationProfileIdentifier=os.environ[ENV.AppConfig.PROFILE_ID],
    )['InitialConfigurationToken']

    # Fetch the configuration
    response = appconfig.get_latest_configuration(ConfigurationToken=session_token)
    content = response['Configuration'].read()
    config = json.loads(content.decode('utf-8'))

    if config.get('active_backend') != backend:
        raise BadConfigurationError(f"AppConfig active backend is not '{backend}'.")
    try:
        data = config['configs'][backend]
    except KeyError as e:
        raise BadConfigurationError(f"AppConfig document has no '{backend}' configuration.") from e

    logger.debug('Loaded AppConfig from AWS AppConfig.', extra={'backend': backend, 'build': config.get('build')})
    return data
