"""Data Access Object (DAO) implementation for the link tables in Redis

This module provides a Redis-based implementation of LinkBaseDAO on top of two
Redis hashes (see RedisKeySchema):

    <prefix>:keytob64   : key          -> base64 encoded link
    <prefix>:linkhashes : content hash -> key

Responsibilities:
    - Expose the primitive hash table operations (HGET, HSET, HGETALL) on the
      getter (reads) and pusher (writes) sessions;
    - Insert and retrieve key mappings;
    - Look up and record deduplication index entries;
    - Export every mapping;
    - Raise appropriate DAO exceptions with operation context.

Classes:
    LinkRedisDAO:
        DAO for storing and retrieving link mappings in a Redis datastore.

Example:
    >>> from shortkey.models import Link
    >>> from shortkey.dao.redis import LinkRedisDAO

    >>> dao = LinkRedisDAO(settings=config.redis, prefix="shortkey:dev")
    >>> link = Link.from_raw("https://example.com/page")
    >>> dao.insert("abc", link)
    <LinkRedisDAO>
    >>> dao.get_link("abc")
    'aHR0cHM6Ly9leGFtcGxlLmNvbS9wYWdl'
    >>> dao.export()
    ['abc,aHR0cHM6Ly9leGFtcGxlLmNvbS9wYWdl']
"""

from beartype import beartype

from shortkey.models import Link
from shortkey.dao.base import LinkBaseDAO
from shortkey.dao.redis.mixins import RedisConnectionsMixin
from shortkey.dao.redis.helpers import handle_redis_connection_error
from shortkey.dao.exceptions import KeyNotFoundError


class LinkRedisDAO(RedisConnectionsMixin, LinkBaseDAO):
    """Redis-based Data Access Object (DAO) for the link tables

    This class implements the LinkBaseDAO interface using Redis hashes as a data store.

    Attributes (see RedisConnectionsMixin):
        admin, pusher, getter (redis.Redis):
            Redis sessions segregated by operation kind.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.

    Methods:
        hash_get(table: str, field: str) -> str | None:
            HGET on the getter session.

        hash_set(table: str, field: str, value: str) -> None:
            HSET on the pusher session.

        hash_get_all(table: str) -> dict[str, str]:
            HGETALL on the getter session.

        get_link, key_exists, lookup_hash, record_hash, insert, export:
            See LinkBaseDAO.

    Every method raises DataStoreError on connectivity issues or other Redis errors.
    """

    @handle_redis_connection_error
    @beartype
    def hash_get(self, table: str, field: str) -> str | None:
        return self.getter.hget(table, field)

    @handle_redis_connection_error
    @beartype
    def hash_set(self, table: str, field: str, value: str) -> None:
        self.pusher.hset(table, field, value)

    @handle_redis_connection_error
    @beartype
    def hash_get_all(self, table: str) -> dict[str, str]:
        return self.getter.hgetall(table)

    @beartype
    def get_link(self, key: str) -> str:
        """Retrieve the encoded link stored under a key

        Args:
            key (str):
                The short key.

        Returns:
            str: The encoded link.

        Raises:
            KeyNotFoundError:
                If the key is not mapped to any link.
            DataStoreError:
                If Redis connectivity issues occur.

        Example:
            >>> dao.get_link('abc')
            'aHR0cHM6Ly9leGFtcGxlLmNvbQ=='
        """
        encoded = self.hash_get(self.keys.key_to_link_table(), key)
        if encoded is None:
            raise KeyNotFoundError(f'short url for {key} not found')
        return encoded

    @beartype
    def key_exists(self, key: str) -> bool:
        return self.hash_get(self.keys.key_to_link_table(), key) is not None

    @beartype
    def lookup_hash(self, content_hash: str) -> str | None:
        return self.hash_get(self.keys.link_hashes_table(), content_hash)

    @beartype
    def record_hash(self, content_hash: str, key: str) -> None:
        self.hash_set(self.keys.link_hashes_table(), content_hash, key)

    @handle_redis_connection_error
    @beartype
    def insert(self, key: str, link: Link) -> 'LinkRedisDAO':
        """Insert a key mapping and its deduplication index entry into Redis

        Args:
            key (str):
                The assigned key. The caller checked it is not taken.
            link (Link):
                The link to store (only its encoded form and hash are written).

        Returns:
            LinkRedisDAO: self (for method chaining)

        Raises:
            DataStoreError:
                If a Redis connection issue occurs during the transaction.
        """
        # NOTE: The two HSET commands are executed as an atomic operation
        #       to avoid a state where the key resolves but its content is not
        #       recorded in the deduplication index. Otherwise, a later identical
        #       request would miss the index and mint a second key:
        #
        #       (request 1): LinkService.create():
        #                    -> HSET <app>:keytob64 <key> <encoded link>
        #                    ... crash or rejected write
        #       (request 2): LinkService.create() with the same link:
        #                    -> HGET <app>:linkhashes <hash>  => returns 'nil'
        #                    -> HSET <app>:keytob64 <other key> <encoded link>
        #
        #       The transaction does NOT close the check-then-write race between
        #       two concurrent requests for the same unseen link (see LinkService).
        with self.pusher.pipeline(transaction=True) as pipe:
            pipe.hset(self.keys.key_to_link_table(), key, link.encoded)
            pipe.hset(self.keys.link_hashes_table(), link.content_hash, key)
            pipe.execute()
        return self

    def export(self) -> list[str]:
        """Return every key mapping as "key,encoded link"

        Raises:
            DataStoreError:
                If Redis connectivity issues occur.
        """
        links = self.hash_get_all(self.keys.key_to_link_table())
        return [f'{key},{encoded}' for key, encoded in links.items()]
