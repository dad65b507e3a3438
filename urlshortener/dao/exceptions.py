"""Exceptions related to Data Access Objects (DAO) operations.

Classes:
    DAOError:
        Generic base class for DAO-related exceptions.

    ShortURLNotFoundError:
        Raised when a short URL record is absent, expired or deleted.

    ShortURLAlreadyExistsError:
        Raised when attempting to insert a short code that is already taken.

    DataStoreError:
        Raised when there is an error in the data store (e.g., connection issues, timeouts, OOM, etc.).

Every class carries an `error_code` and the HTTP `status_code` the calling
layer is expected to answer with.

Example:
    >>> from urlshortener.dao.exceptions import ShortURLNotFoundError
    >>> raise ShortURLNotFoundError("Short URL with code 'abc1234' not found.")
    Traceback (most recent call last):
        ...
    urlshortener.dao.exceptions.ShortURLNotFoundError: Short URL with code 'abc1234' not found.
"""

from urlshortener.exceptions import URLShortenerError


class DAOError(URLShortenerError):
    """Generic base class for DAO-related exceptions."""

    error_code = 'dao:dao_error'


class ShortURLNotFoundError(DAOError):
    """Raised when a short URL record is not found in the data store."""

    error_code = 'dao:short_url_not_found_error'
    status_code = 404


class ShortURLAlreadyExistsError(DAOError):
    """Raised when inserting a short code that already exists in the data store."""

    error_code = 'dao:short_url_already_exists_error'
    status_code = 409


class DataStoreError(DAOError):
    """Raised when the data store encounters an error.

    Examples include connection issues, timeouts, and out-of-memory failures.
    """

    error_code = 'dao:data_store_error'
    status_code = 500
