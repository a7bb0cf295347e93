"""Link creation, resolution and export

Classes:
    LinkService:
        Orchestrate the deduplication index, key assignment, the link tables and
        the read cache.

Creation follows this procedure:
    - Step 1: Validate the custom key, if any (before any store access)
    - Step 2: Compute the content hash of the encoded link
    - Step 3: Look the hash up in the deduplication index (HIT returns the existing key)
    - Step 4: Assign a key (custom or generated, unique in KeyToLink)
    - Step 5: Write KeyToLink[key] and HashToKey[hash]

Resolution follows this procedure:
    - Step 1: Validate the key format
    - Step 2: Look the key up in the read cache (HIT returns the cached URL)
    - Step 3: Look the key up in KeyToLink, decode, populate the cache

NOTE:
    Two concurrent create() calls for the same never-seen link can both miss the
    deduplication index, get different keys and both write:

        (request 1): HGET linkhashes <hash>       => nil
        (request 2): HGET linkhashes <hash>       => nil
        (request 1): MULTI HSET keytob64 <k1> ... HSET linkhashes <hash> <k1> EXEC
        (request 2): MULTI HSET keytob64 <k2> ... HSET linkhashes <hash> <k2> EXEC

    Both keys resolve to the same link and the index keeps the last key written.
    This is accepted. No lock is taken on the create path.
"""

import logging

from shortkey.constants import LINK_CREATED, LINK_DEDUPLICATED, LINK_RESOLVED, CACHE_HIT
from shortkey.core.keys import KeyAssigner
from shortkey.dao.base import LinkBaseDAO
from shortkey.dao.cache import LinkCache
from shortkey.dao.exceptions import DataStoreError
from shortkey.models import Link
from shortkey.utils.encoding import content_hash, decode_link
from shortkey.utils.keygen import validate_key, validate_custom_key


logger = logging.getLogger(__name__)


class LinkService:
    """Key-space management on top of a link DAO and a read cache

    Attributes:
        dao (LinkBaseDAO):
            Access to the KeyToLink table and the deduplication index.
        keys (KeyAssigner):
            Unique key assignment.
        cache (LinkCache):
            Read cache consulted before the store on resolve().

    Methods:
        create(encoded_link: str, custom_key: str | None = None) -> str
        resolve(key: str) -> str
        export() -> list[str]
    """

    def __init__(self, dao: LinkBaseDAO, keys: KeyAssigner, cache: LinkCache):
        self.dao = dao
        self.keys = keys
        self.cache = cache

    def create(self, encoded_link: str, custom_key: str | None = None) -> str:
        """Return the key for an encoded link, issuing a new one if the content is new

        Identical content always yields the key issued first, even when a
        different (well-formed) custom key is requested. A malformed custom key
        is rejected before the store is touched, whether or not the content is known.

        Args:
            encoded_link (str):
                The link in its stored (encoded) form.
            custom_key (str | None):
                Requested key for new content.

        Returns:
            str: The existing or newly assigned key.

        Raises:
            BadKeyError, KeyAlreadyExistsError, KeyspaceExhaustedError:
                See KeyAssigner.assign().
            DataStoreError:
                If any store operation fails.
        """
        if custom_key is not None:
            validate_custom_key(custom_key)

        link_hash = content_hash(encoded_link)
        try:
            existing_key = self.dao.lookup_hash(link_hash)
        except DataStoreError as e:
            raise DataStoreError(f"link creation ('{encoded_link}') hash check: {e}") from e

        if existing_key is not None:
            logger.info('Link already shortened.', extra={'key': existing_key, 'event': LINK_DEDUPLICATED})
            return existing_key

        key = self.keys.assign(custom_key)

        link = Link(raw=decode_link(encoded_link), encoded=encoded_link, content_hash=link_hash)
        try:
            self.dao.insert(key, link)
        except DataStoreError as e:
            raise DataStoreError(f"saving key and link (key='{key}', link='{encoded_link}'): {e}") from e

        logger.info('Created short key.', extra={'key': key, 'custom': custom_key is not None, 'event': LINK_CREATED})
        return key

    def resolve(self, key: str) -> str:
        """Return the original URL a key points to

        Raises:
            BadKeyError:
                If the key is malformed (the store is not touched).
            KeyNotFoundError:
                If the key is not mapped.
            DataStoreError:
                If the lookup fails.
        """
        validate_key(key)

        url = self.cache.get(key)
        if url is not None:
            logger.debug('Resolved key from cache.', extra={'key': key, 'event': CACHE_HIT})
            return url

        encoded = self.dao.get_link(key)
        url = decode_link(encoded)
        self.cache.set(key, url)

        logger.debug('Resolved key from store.', extra={'key': key, 'event': LINK_RESOLVED})
        return url

    def export(self) -> list[str]:
        return self.dao.export()
