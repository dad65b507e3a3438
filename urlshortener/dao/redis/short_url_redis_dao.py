"""Data Access Object (DAO) implementation for managing shortened URLs in Redis

This module provides a Redis-based implementation of ShortURLBaseDAO. Each short
code owns a single Redis hash:

    [<prefix>:]short:url:<shortcode>
        url         -> original long URL
        created_at  -> RFC 3339 UTC timestamp, nanosecond precision
        visits      -> visit counter (integer stored as text)

with an optional TTL on the whole key. Expiry is owned by Redis; the record's
`expires_at` is derived from the remaining TTL every time it is read.

Responsibilities:
    - Create short URLs atomically (HSETNX) so that exactly one of several
      concurrent inserts for the same code wins;
    - Retrieve the long URL and the full record with its statistics;
    - Count visits without resurrecting deleted or expired records;
    - Delete short URLs;
    - Translate Redis failures into DataStoreError.

Classes:
    ShortURLRedisDAO:
        DAO for storing and retrieving short URL records in a Redis datastore.

Example:
    >>> from urlshortener.dao.redis import ShortURLRedisDAO
    >>> from urlshortener.utils.config import RedisConfig

    >>> dao = ShortURLRedisDAO(config=RedisConfig(host='localhost'), prefix="app:dev")
    >>> dao.insert('abc1234', 'https://example.com/page', ttl=3600)
    <ShortURLRedisDAO>

    >>> dao.get_target('abc1234')
    'https://example.com/page'
    >>> dao.hit('abc1234')
    1
    >>> dao.get('abc1234').visits
    1
    >>> dao.delete('abc1234')
    <ShortURLRedisDAO>
"""

import math
import logging
from datetime import datetime, timedelta, UTC

import redis
from beartype import beartype

from urlshortener.constants import Event
from urlshortener.models import ShortURLModel
from urlshortener.dao.base import ShortURLBaseDAO
from urlshortener.dao.redis.mixins import RedisClientMixin
from urlshortener.dao.redis.helpers import handle_redis_connection_error
from urlshortener.dao.exceptions import DataStoreError, ShortURLAlreadyExistsError, ShortURLNotFoundError
from urlshortener.utils.helpers import format_timestamp, parse_timestamp


logger = logging.getLogger(__name__)


# HINCRBY creates missing keys, so the existence check runs in the same script.
HIT_SCRIPT = """
if redis.call('EXISTS', KEYS[1]) == 1 then
    return redis.call('HINCRBY', KEYS[1], 'visits', 1)
end
return false
"""


def _ttl_seconds(ttl: int | timedelta | None) -> int:
    if ttl is None:
        return 0
    seconds = math.ceil(ttl.total_seconds()) if isinstance(ttl, timedelta) else ttl
    if seconds < 0:
        raise ValueError(f'TTL must be non-negative (given value: {ttl}).')
    return seconds


class ShortURLRedisDAO(RedisClientMixin, ShortURLBaseDAO):
    """Redis-based Data Access Object (DAO) for managing short URL records

    This class implements the ShortURLBaseDAO interface using Redis as a data store.

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.

    Methods:
        insert(shortcode: str, target: str, ttl: int | timedelta | None = None, **kwargs) -> ShortURLRedisDAO:
            Create a short URL record if the short code is free.
            Raises ShortURLAlreadyExistsError when the short code is taken.
            Raises DataStoreError on Redis failures (even after the record was created).

        get_target(shortcode: str, **kwargs) -> str:
            Retrieve the long URL of a short code.
            Raises ShortURLNotFoundError when the shortcode doesn't exist.

        hit(shortcode: str, **kwargs) -> int:
            Increment the visit counter and return its new value.
            Raises ShortURLNotFoundError when the shortcode doesn't exist.

        get(shortcode: str, **kwargs) -> ShortURLModel:
            Retrieve the full record and its statistics.
            Raises ShortURLNotFoundError when the shortcode doesn't exist.

        delete(shortcode: str, **kwargs) -> ShortURLRedisDAO:
            Delete a short URL record.
            Raises ShortURLNotFoundError when the shortcode doesn't exist.

        exists(shortcode: str, **kwargs) -> bool:
            Check whether a short code is taken.
    """

    @handle_redis_connection_error
    @beartype
    def insert(self, shortcode: str, target: str, ttl: int | timedelta | None = None, **kwargs) -> 'ShortURLRedisDAO':
        """Create a short URL record in Redis if the short code is free

        HSETNX on the `url` field is the only uniqueness guarantee of the whole
        application: of several concurrent inserts for the same code, exactly
        one sets the field and the others get ShortURLAlreadyExistsError.

        Args:
            shortcode (str):
                Short code of the new record.
            target (str):
                Long URL the short code redirects to.
            ttl (int | timedelta | None):
                Time-to-live in seconds (or as timedelta). None or 0 means no expiry.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            ShortURLRedisDAO: self (for method chaining)

        Raises:
            ShortURLAlreadyExistsError:
                If a short URL with the same shortcode already exists.
            DataStoreError:
                If a Redis failure occurs, including after the `url` field was set.
            ValueError:
                If ttl is negative.

        Example:
            >>> dao.insert('abc1234', 'https://example.com', ttl=timedelta(days=7))
            <ShortURLRedisDAO>
        """
        key = self.keys.short_url_key(shortcode)
        ttl_seconds = _ttl_seconds(ttl)

        if not self.redis.hsetnx(key, 'url', target):
            raise ShortURLAlreadyExistsError(f"Short URL with code '{shortcode}' already exists.")

        # NOTE: metadata and TTL are written after HSETNX, outside of any transaction.
        #       If this process dies or Redis fails in between, the record is left
        #       with a URL but without created_at/visits (and without expiry):
        #
        #       (request 1): ShortURLRedisDAO.insert():
        #                    -> HSETNX [<prefix>:]short:url:<shortcode> url <target>
        #                    ... failure
        #       (request 2): ShortURLRedisDAO.get():
        #                    -> HGETALL [<prefix>:]short:url:<shortcode>  => {url: <target>}
        #                    => DataStoreError (incomplete record)
        #
        #       The half-written record is not repaired. The caller gets a DataStoreError,
        #       never a ShortURLAlreadyExistsError, since the create itself succeeded.
        try:
            self.redis.hset(key, mapping={'created_at': format_timestamp(), 'visits': 0})
            if ttl_seconds > 0:
                self.redis.expire(key, ttl_seconds)
        except redis.exceptions.RedisError:
            logger.error(
                'Short URL created without its metadata.',
                extra={'shortcode': shortcode, 'event': Event.PARTIAL_INSERT},
            )
            raise

        return self

    @handle_redis_connection_error
    @beartype
    def get_target(self, shortcode: str, **kwargs) -> str:
        """Retrieve the long URL for a short code

        Raises:
            ShortURLNotFoundError:
                If the short URL does not exist (or expired) in Redis.
            DataStoreError:
                If Redis connectivity issues occur.

        Example:
            >>> dao.get_target('abc1234')
            'https://example.com'
        """
        target = self.redis.hget(self.keys.short_url_key(shortcode), 'url')
        if target is None:
            raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.")
        return target

    @handle_redis_connection_error
    @beartype
    def hit(self, shortcode: str, **kwargs) -> int:
        """Increment the visit counter for a short URL.

        NOTE: HINCRBY on a missing key creates it, so EXISTS and HINCRBY run
              together in one Lua script (HIT_SCRIPT). A concurrent DEL or an
              expiring TTL lands either before the script (ShortURLNotFoundError)
              or after it (the visit is counted, then the record disappears).
              The script never recreates a deleted or expired record.

        Args:
            shortcode (str):
                The short code of the visited short URL.

            **kwargs:
                Additional keyword arguments, used by data store.

        Return:
            int:
                visit count after the increment.

        Raises:
            ShortURLNotFoundError:
                If no short URL with the given short code exists.

            DataStoreError:
                If Redis connectivity issues occur.

        Example:
            >>> dao.hit('abc1234')
            1
        """
        visits = self.redis.eval(HIT_SCRIPT, 1, self.keys.short_url_key(shortcode))
        if visits is None:
            raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.")
        return int(visits)

    @handle_redis_connection_error
    @beartype
    def get(self, shortcode: str, **kwargs) -> ShortURLModel:
        """Retrieve a stored short URL record and its statistics by shortcode

        Fetches all hash fields and the remaining TTL using a single Redis
        transaction. `expires_at` is `now + remaining TTL` when the TTL is
        strictly positive, and None when the key has no expiry.

        Args:
            shortcode (str):
                The shortcode identifier for the shortened URL.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            ShortURLModel:
                The retrieved ShortURLModel instance if found.

        Raises:
            ShortURLNotFoundError:
                If the short URL does not exist in Redis.
            DataStoreError:
                If Redis connectivity issues occur, or the record is incomplete
                (see the NOTE in insert()).

        Example:
            >>> dao.get('abc1234')
            ShortURLModel(shortcode='abc1234', target='https://example.com', visits=1, ...)
        """
        key = self.keys.short_url_key(shortcode)

        with self.redis.pipeline(transaction=True) as pipe:
            pipe.hgetall(key)
            pipe.ttl(key)
            values, ttl = pipe.execute()

        if not values:
            raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.")

        try:
            target = values['url']
            created_at = parse_timestamp(values['created_at'])
            visits = int(values['visits'])
        except (KeyError, TypeError, ValueError) as e:
            raise DataStoreError(f"Short URL record with code '{shortcode}' is incomplete or malformed.") from e

        return ShortURLModel(
            shortcode=shortcode,
            target=target,
            created_at=created_at,
            visits=visits,
            expires_at=datetime.now(UTC) + timedelta(seconds=ttl) if ttl > 0 else None,
        )

    @handle_redis_connection_error
    @beartype
    def delete(self, shortcode: str, **kwargs) -> 'ShortURLRedisDAO':
        """Delete a short URL record

        Raises:
            ShortURLNotFoundError:
                If no record was removed.
            DataStoreError:
                If Redis connectivity issues occur.
        """
        removed = self.redis.delete(self.keys.short_url_key(shortcode))
        if removed == 0:
            raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.")
        return self

    @handle_redis_connection_error
    @beartype
    def exists(self, shortcode: str, **kwargs) -> bool:
        return self.redis.exists(self.keys.short_url_key(shortcode)) == 1
