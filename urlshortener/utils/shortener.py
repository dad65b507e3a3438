"""Shortcode allocation utilities

This module validates user-supplied aliases and generates random short codes,
retrying against the data store until an unused one is found.

Functions:
    generate_shortcode(length=7, alphabet=ALPHABET):
        Generate a random code suitable for use as a URL slug.
    validate_alias(alias):
        Ensure a custom alias matches the allowed pattern.
    resolve_shortcode(custom_alias, exists, max_attempts=10):
        Pick the code for a new short URL (custom alias or random candidate).

Example:
    >>> from urlshortener.utils import resolve_shortcode
    >>> resolve_shortcode('my-alias', exists=lambda code: False)
    'my-alias'
    >>> resolve_shortcode(None, exists=dao.exists)
    'k3Xq9Zb'

NOTE:
    The existence check only saves wasted attempts. Two concurrent requests can
    both see a code as free before either of them inserts it; the data store's
    atomic insert (HSETNX) is what guarantees uniqueness, and the loser gets a
    ShortURLAlreadyExistsError at insert time.
"""

import re
import logging
import secrets
from collections.abc import Callable

from urlshortener.constants import ShortCode, Event
from urlshortener.exceptions import InvalidAliasError, ShortCodeExhaustedError
from urlshortener.dao.exceptions import ShortURLAlreadyExistsError


logger = logging.getLogger(__name__)

ALPHABET = ShortCode.ALPHABET
ALIAS_RE = re.compile(ShortCode.ALIAS_PATTERN)


def generate_shortcode(length: int = ShortCode.LENGTH, alphabet: str = ALPHABET) -> str:
    """Generate a random short code.

    Every character is drawn independently and uniformly from `alphabet` using
    the operating system's CSPRNG. `secrets.choice` samples indices with
    rejection, so there is no modulo bias.

    Args:
        length (int, optional):
            Length of the resulting code. Defaults to 7.
        alphabet (str, optional):
            Symbols to draw from. Defaults to the 62-symbol [0-9a-zA-Z] alphabet.

    Returns:
        str: random code of exactly `length` characters.

    Example:
        >>> generate_shortcode()
        'Gh71WPT'
    """
    if not isinstance(length, int):
        raise TypeError(f'Length must be of type integer (given type: {type(length)}).')
    if length <= 0:
        raise ValueError(f'Length must be a positive integer (given value: {length}).')
    if not alphabet:
        raise ValueError('Alphabet must be a non-empty string.')

    return ''.join(secrets.choice(alphabet) for _ in range(length))


def validate_alias(alias: str) -> str:
    """Ensure a custom alias is 4-32 characters of [A-Za-z0-9_-]

    Raises:
        InvalidAliasError: If the alias doesn't match the pattern.
    """
    if ALIAS_RE.fullmatch(alias) is None:
        raise InvalidAliasError(f'custom_alias must match ^{ShortCode.ALIAS_PATTERN}$')
    return alias


def resolve_shortcode(
    custom_alias: str | None,
    exists: Callable[[str], bool],
    max_attempts: int = ShortCode.MAX_ATTEMPTS,
) -> str:
    """Choose the short code for a new short URL

    With a custom alias, the alias is validated and checked for existence.
    Without one, random candidates are generated until one is free.

    Args:
        custom_alias (str | None):
            User-supplied alias. Empty or None means "generate one".
        exists (Callable[[str], bool]):
            Existence check against the data store, e.g. ShortURLRedisDAO.exists.
        max_attempts (int, optional):
            Random candidates to try before giving up. Defaults to 10.

    Returns:
        str: the alias (unchanged) or a free random code.

    Raises:
        InvalidAliasError:
            If the custom alias doesn't match the pattern (the store isn't queried).
        ShortURLAlreadyExistsError:
            If the custom alias is already taken.
        ShortCodeExhaustedError:
            If every random candidate collided with an existing code.
        DataStoreError:
            Propagated from `exists`.
    """
    if custom_alias:
        alias = validate_alias(custom_alias)
        if exists(alias):
            raise ShortURLAlreadyExistsError(f"Short URL with code '{alias}' already exists.")
        return alias

    for attempt in range(1, max_attempts + 1):
        candidate = generate_shortcode()
        if not exists(candidate):
            return candidate
        logger.debug('Shortcode candidate collided.', extra={'attempt': attempt, 'shortcode': candidate})

    logger.error(
        'Failed to allocate a unique shortcode.',
        extra={'attempts': max_attempts, 'event': Event.SHORTCODE_EXHAUSTED},
    )
    raise ShortCodeExhaustedError(f'Failed to allocate a unique shortcode after {max_attempts} attempts.')
