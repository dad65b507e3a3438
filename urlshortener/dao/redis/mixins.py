"""Redis mixin providing shared client initialization and connectivity checks.

Responsibilities:
    - Initialize a pooled Redis client from an explicit RedisConfig
    - Healthcheck Redis client

Classes:
    - RedisClientMixin: Base mixin to inject Redis key management, client setup & healthcheck.

Example:
    Typical usage with a DAO implementation:

        >>> class ShortURLRedisDAO(RedisClientMixin, ShortURLBaseDAO):
        ...     pass
        ...
        >>> dao = ShortURLRedisDAO(config=RedisConfig(host='redis'), prefix="myapp:prod")
        >>> dao._healthcheck()
        True
"""

from typing import Optional

import redis

from urlshortener.dao.redis.redis_key_schema import RedisKeySchema
from urlshortener.dao.exceptions import DataStoreError
from urlshortener.exceptions import BadConfigurationError
from urlshortener.utils.config import RedisConfig


class RedisClientMixin:
    """Mixin Redis client setup and health check for Redis-backed DAOs.

    Attributes:
        redis (redis.Redis):
            Active Redis client instance used by subclasses. It owns a
            connection pool shared by every call, so no method may assume
            it runs on the same connection as another.

        keys (RedisKeySchema):
            Helper class for generating namespaced Redis key names.

    Methods:
        _healthcheck(raise_error: bool = True) -> bool:
            Ping Redis to verify connectivity.
            Optionally raise a DataStoreError if unreachable.
    """

    def __init__(
        self,
        config: Optional[RedisConfig] = None,
        redis_client: Optional[redis.Redis] = None,
        prefix: Optional[str] = None,
    ):
        """Initialize a Redis-based DAO

        The option is given to either use an existing Redis client instance or
        create one from a RedisConfig.

        Args:
            config (Optional[RedisConfig]):
                Redis connection parameters. Defaults to RedisConfig() (localhost:6379/0).

            redis_client (Optional[redis.Redis]):
                Pre-initialized Redis client, created with decode_responses=True.
                If None, a new client is created from `config`.

            prefix (Optional[str]):
                Namespace prefix for all Redis keys, e.g. 'app:env'.

        Raises:
            BadConfigurationError:
                If the given client returns bytes instead of str.
            DataStoreError:
                If Redis healthcheck fails (connectivity issues).
        """
        if redis_client is None:
            config = config or RedisConfig()
            pool = redis.ConnectionPool(
                host=config.host,
                port=config.port,
                db=config.db,
                username=config.username,
                password=config.password,
                decode_responses=True,
                socket_timeout=config.socket_timeout,
                socket_connect_timeout=config.socket_timeout,
                max_connections=config.max_connections,
            )
            redis_client = redis.Redis(connection_pool=pool)
        # Short URL records are read as str, never as bytes.
        elif redis_client.connection_pool.connection_kwargs.get('decode_responses', True) is False:
            raise BadConfigurationError('Redis client must be created with decode_responses=True.')

        self.redis = redis_client
        self.keys = RedisKeySchema(prefix=prefix)

        self._healthcheck()

    def _healthcheck(self, raise_error: bool = True) -> bool:
        """PING Redis to healthcheck connectivity

        Args:
            raise_error (bool):
                If True, raises DataStoreError on failure. Defaults to True.

        Returns:
            bool:
                True if Redis is reachable, False otherwise (only if raise_error=False).

        Raises:
            DataStoreError:
                If Redis connection cannot be established and raise_error=True.

        Example:
            >>> self._healthcheck()
            True
        """
        try:
            self.redis.ping()
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            if raise_error:
                info = self.redis.connection_pool.connection_kwargs
                redis_host = info.get('host')
                redis_port = info.get('port')
                redis_db = info.get('db')
                raise DataStoreError(
                    f"Can't connect to Redis at {redis_host}:{redis_port}/{redis_db}. Check the provided configuration parameters."
                ) from e
            return False
        else:
            return True
