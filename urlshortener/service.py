"""Short URL service: the composition of shortcode allocation and storage

The HTTP layer (not part of this package) is expected to call one method per
request and translate the exceptions below into responses through their
`status_code` attribute:

    ValidationError               -> 400
    ShortURLNotFoundError         -> 404
    ShortURLAlreadyExistsError    -> 409
    ShortCodeExhaustedError       -> 500
    DataStoreError                -> 500

Example:
    >>> from urlshortener.service import ShortURLService

    >>> service = ShortURLService.from_environment()
    >>> short_url = service.shorten('https://example.com/page', expiration_days=7)
    >>> short_url.to_dict(base_url='https://sho.rt')['short_url']
    'https://sho.rt/Ab3xK9q'
    >>> service.redirect(short_url.shortcode)
    'https://example.com/page'
"""

import os
import logging
from datetime import datetime, timedelta, UTC

from urlshortener.constants import ENV, Event, TTL
from urlshortener.models import ShortURLModel
from urlshortener.dao.base import ShortURLBaseDAO
from urlshortener.dao.redis import ShortURLRedisDAO
from urlshortener.dao.exceptions import DAOError, ShortURLAlreadyExistsError
from urlshortener.exceptions import InvalidExpirationError
from urlshortener.utils.helpers import validate_target_url
from urlshortener.utils.shortener import resolve_shortcode
from urlshortener.utils.config import RedisConfig, app_prefix


logger = logging.getLogger(__name__)


class ShortURLService:
    """Create, resolve, inspect and delete short URLs on top of a ShortURLBaseDAO."""

    def __init__(self, dao: ShortURLBaseDAO):
        self.dao = dao

    @classmethod
    def from_environment(cls) -> 'ShortURLService':
        """Build a service over the Redis DAO configured by the process environment

        The Redis section of the AWS AppConfig document is used when
        APPCONFIG_APP_ID is set, the REDIS_* variables otherwise. Keys are
        namespaced with app_prefix().

        Raises:
            ConfigurationError: If the configuration is missing or invalid.
            DataStoreError: If Redis is unreachable.
        """
        if os.environ.get(ENV.AppConfig.APP_ID):
            config = RedisConfig.from_appconfig()
        else:
            config = RedisConfig.from_environment()
        return cls(ShortURLRedisDAO(config=config, prefix=app_prefix()))

    def shorten(self, target: str, custom_alias: str | None = None, expiration_days: int = 0) -> ShortURLModel:
        """Shorten a long URL

        This method follows this procedure:
        - Step 1: Validate the target URL and the requested expiration
        - Step 2: Resolve the shortcode (custom alias or random code)
        - Step 3: Store the short URL record (atomic create-if-absent)

        Args:
            target (str): long URL to shorten
            custom_alias (str | None): optional user-supplied code (surrounding whitespace is ignored)
            expiration_days (int): days until the record expires, 0 for never

        Returns:
            ShortURLModel: the new record, `expires_at` computed from the requested TTL

        Raises:
            InvalidTargetURLError, InvalidAliasError, InvalidExpirationError:
                On malformed input.
            ShortURLAlreadyExistsError:
                If the alias is taken, or another request inserted the same code first.
            ShortCodeExhaustedError:
                If no free random code was found.
            DataStoreError:
                On data store failures.
        """
        # 1- Validate request
        target = validate_target_url(target)
        if expiration_days < 0:
            raise InvalidExpirationError('expiration_days must be >= 0')

        # 2- Resolve shortcode
        shortcode = resolve_shortcode((custom_alias or '').strip(), exists=self.dao.exists)

        # 3- Store record
        ttl = timedelta(seconds=expiration_days * TTL.ONE_DAY)
        try:
            self.dao.insert(shortcode, target, ttl=ttl)
        except ShortURLAlreadyExistsError:
            logger.info(
                'Shortcode was taken between existence check and insert.',
                extra={'shortcode': shortcode, 'event': Event.SHORT_URL_CONFLICT},
            )
            raise

        created_at = datetime.now(UTC)
        logger.info(
            'Short URL created.',
            extra={'shortcode': shortcode, 'expiration_days': expiration_days, 'event': Event.SHORT_URL_CREATED},
        )
        return ShortURLModel(
            shortcode=shortcode,
            target=target,
            created_at=created_at,
            visits=0,
            expires_at=created_at + ttl if expiration_days > 0 else None,
        )

    def redirect(self, shortcode: str) -> str:
        """Resolve the target of a short URL and count the visit

        Surrounding whitespace of the shortcode is ignored. Failing to count
        the visit doesn't fail the redirect.

        Raises:
            ShortURLNotFoundError: If the short URL doesn't exist.
            DataStoreError: If the target can't be read.
        """
        shortcode = shortcode.strip()
        target = self.dao.get_target(shortcode)

        try:
            visits = self.dao.hit(shortcode)
        except DAOError:
            logger.warning(
                'Failed to increment visits.',
                exc_info=True,
                extra={'shortcode': shortcode, 'event': Event.VISIT_NOT_RECORDED},
            )
        else:
            logger.info(
                'Redirecting client to target URL.',
                extra={'shortcode': shortcode, 'visits': visits, 'event': Event.REDIRECT_SUCCESS},
            )
        return target

    def stats(self, shortcode: str) -> ShortURLModel:
        return self.dao.get(shortcode.strip())

    def delete(self, shortcode: str) -> None:
        shortcode = shortcode.strip()
        self.dao.delete(shortcode)
        logger.info('Short URL deleted.', extra={'shortcode': shortcode, 'event': Event.SHORT_URL_DELETED})
