"""Abstract base class for link table data access objects (DAOs).

This class establishes a consistent contract for the two link tables, regardless
of the underlying storage mechanism:

    KeyToLink : key          -> encoded link
    HashToKey : content hash -> key (deduplication index)

Responsibilities:
    - Provide an interface for inserting and retrieving link mappings.
    - Provide the deduplication index lookup.
    - Standardize error handling across multiple data store implementations.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from shortkey.models import Link
        >>> from shortkey.dao.redis import LinkRedisDAO

        >>> dao = LinkRedisDAO(...)
        >>> link = Link.from_raw('https://example.com/blog/article-123')

        >>> dao.insert('abc', link)
        >>> dao.get_link('abc')
        'aHR0cHM6Ly9leGFtcGxlLmNvbS9ibG9nL2FydGljbGUtMTIz'
        >>> dao.lookup_hash(link.content_hash)
        'abc'
"""

from abc import ABC, abstractmethod

from shortkey.models import Link


class LinkBaseDAO(ABC):
    """Interface for link table data access objects (DAOs).

    Methods:
        get_link(key: str) -> str:
            Retrieve the encoded link stored under a key.
            Raises KeyNotFoundError if the key is not mapped.
            Raises DataStoreError on connection or read failure.

        key_exists(key: str) -> bool:
            Check whether a key is already mapped to a link.
            Raises DataStoreError on connection or read failure.

        lookup_hash(content_hash: str) -> str | None:
            Deduplication index lookup. Return the key already issued for the content, if any.
            Raises DataStoreError on connection or read failure.

        record_hash(content_hash: str, key: str) -> None:
            Record the key issued for the content in the deduplication index.
            Raises DataStoreError on connection or write failure.

        insert(key: str, link: Link) -> LinkBaseDAO:
            Write both the key mapping and the deduplication index entry.
            Raises DataStoreError on connection or write failure.

        export() -> list[str]:
            Return every mapping as "key,encoded link".
            Raises DataStoreError on connection or read failure.

    NOTE:
        - Mappings are permanent. The DAO does not provide an interface to
          update or delete entries.
    """

    @abstractmethod
    def get_link(self, key: str) -> str:
        pass

    @abstractmethod
    def key_exists(self, key: str) -> bool:
        pass

    @abstractmethod
    def lookup_hash(self, content_hash: str) -> str | None:
        pass

    @abstractmethod
    def record_hash(self, content_hash: str, key: str) -> None:
        pass

    @abstractmethod
    def insert(self, key: str, link: Link) -> 'LinkBaseDAO':
        """Insert a new key mapping and its deduplication index entry.

        Args:
            key (str):
                The assigned key, already checked for uniqueness.

            link (Link):
                The link the key points to.

        Returns:
            LinkBaseDAO: self (for method chaining)

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def export(self) -> list[str]:
        pass
