"""Abstract base class for ShortURL data access objects (DAOs).

This class establishes a consistent contract for all ShortURL DAO implementations,
regardless of the underlying storage mechanism (e.g., Redis, DynamoDB, PostgreSQL).

Responsibilities:
    - Provide an interface for creating, reading, counting visits of and deleting short URLs.
    - Standardize error handling across multiple data store implementations.
    - Enforce a consistent API for the service layer.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from urlshortener.dao.redis import ShortURLRedisDAO

        >>> dao = ShortURLRedisDAO(...)
        >>> dao.insert('a1b2c3d', 'https://example.com/blog/article-123', ttl=3600)

        >>> dao.get_target('a1b2c3d')
        'https://example.com/blog/article-123'

        >>> dao.hit('a1b2c3d')
        1

        >>> dao.get('a1b2c3d').visits
        1

        >>> dao.delete('a1b2c3d')
"""

from abc import ABC, abstractmethod
from datetime import timedelta

from urlshortener.models import ShortURLModel


class ShortURLBaseDAO(ABC):
    """Interface for ShortURL data access objects (DAOs).

    Every method raises DataStoreError on connection, timeout or protocol
    failures of the underlying data store. Those are never retried here.

    Subclassing:
        Datastore-specific implementations (e.g., ShortURLRedisDAO) must extend
        this class and implement all abstract methods.

    NOTE:
        - Uniqueness of short codes is enforced by `insert()` alone, which must be
          an atomic create-if-absent in the data store. `exists()` is advisory:
          a code reported absent may be taken by the time it is inserted.
    """

    @abstractmethod
    def insert(self, shortcode: str, target: str, ttl: int | timedelta | None = None, **kwargs) -> 'ShortURLBaseDAO':
        """Create a short URL record if no record exists for the short code.

        Args:
            shortcode (str):
                Short code of the new record.

            target (str):
                Long URL the short code redirects to.

            ttl (int | timedelta | None):
                Time-to-live of the record (seconds or timedelta). None or 0 means no expiry.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            ShortURLBaseDAO: self (for method chaining)

        Raises:
            ShortURLAlreadyExistsError:
                If a record with the same short code already exists.

            DataStoreError:
                If there is an error in the data store, including failures
                after the record itself has been created.
        """
        pass

    @abstractmethod
    def get_target(self, shortcode: str, **kwargs) -> str:
        """Retrieve the long URL of a short code.

        Raises:
            ShortURLNotFoundError:
                If no record with the given short code exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def hit(self, shortcode: str, **kwargs) -> int:
        """Increment the visit counter of a short code.

        Returns:
            int: visit count after the increment.

        Raises:
            ShortURLNotFoundError:
                If no record with the given short code exists. A missing record
                must never be created by this method.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def get(self, shortcode: str, **kwargs) -> ShortURLModel:
        """Retrieve a short URL record with its statistics.

        Returns:
            ShortURLModel: record with `expires_at` derived from the remaining TTL.

        Raises:
            ShortURLNotFoundError:
                If no record with the given short code exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def delete(self, shortcode: str, **kwargs) -> 'ShortURLBaseDAO':
        """Delete a short URL record.

        Raises:
            ShortURLNotFoundError:
                If no record with the given short code exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def exists(self, shortcode: str, **kwargs) -> bool:
        """Check whether a record exists for the short code.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass
