from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from urlshortener.utils.helpers import format_timestamp, get_short_url


@dataclass(frozen=True)
class ShortURLModel:
    """Represent a shortened URL record and its statistics.

    Attributes:
        shortcode (str):
            The unique short identifier representing the shortened URL.
        target (str):
            The original long URL that the short code redirects to.
        created_at (Optional[datetime]):
            Moment (UTC) the record was created.
        visits (int):
            Number of redirects served through this short code.
        expires_at (Optional[datetime]):
            Moment after which the record is no longer readable. Derived from
            the remaining TTL at read time, so it is never persisted.

    Example:
        >>> from datetime import datetime, UTC
        >>> url = ShortURLModel(
        ...     shortcode="abc1234",
        ...     target="https://example.com/article/123",
        ...     created_at=datetime(2025, 10, 15, tzinfo=UTC),
        ...     visits=3,
        ... )
        >>> url.to_dict()['long_url']
        'https://example.com/article/123'
        >>> 'expires_at' in url.to_dict()
        False
    """

    shortcode: str
    target: str
    created_at: Optional[datetime] = None
    visits: int = 0
    expires_at: Optional[datetime] = None

    def to_dict(self, base_url: Optional[str] = None) -> dict[str, Any]:
        """Render the record as a JSON-serializable payload

        Args:
            base_url (Optional[str]): public base URL of the service. When given,
                the payload also carries the `short_url` of the record.
        """
        data = {
            'code': self.shortcode,
            'long_url': self.target,
            'created_at': format_timestamp(self.created_at) if self.created_at else None,
            'visits': self.visits,
        }
        if self.expires_at is not None:
            data['expires_at'] = format_timestamp(self.expires_at)
        if base_url is not None:
            data['short_url'] = get_short_url(self.shortcode, base_url)
        return data
