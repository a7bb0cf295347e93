"""Key assignment with bounded uniqueness retries

Classes:
    KeyAssigner:
        Produce a key that is not yet mapped in the KeyToLink table, either by
        validating a user-supplied custom key or by generating random candidates.

Example:
    >>> assigner = KeyAssigner(dao, KeyGenSettings(key_size=3))
    >>> assigner.assign()
    'qZe'
    >>> assigner.assign('my-key')
    'my-key'
    >>> assigner.assign('my-key')  # once 'my-key' is taken
    KeyAlreadyExistsError: custom key 'my-key' already exists
"""

import logging
from collections.abc import Callable

from shortkey.dao.base import LinkBaseDAO
from shortkey.dao.exceptions import DataStoreError, KeyAlreadyExistsError
from shortkey.exceptions import KeyspaceExhaustedError
from shortkey.utils.config import KeyGenSettings
from shortkey.utils.keygen import generate_key, validate_custom_key


logger = logging.getLogger(__name__)


class KeyAssigner:
    """Assign unique keys against a link DAO

    Attributes:
        dao (LinkBaseDAO):
            DAO used for existence checks in the KeyToLink table.
        settings (KeyGenSettings):
            Key size, alphabet and the max number of generation attempts.
        generator (Callable[[str, int], str]):
            Candidate key generator, generate_key by default.
    """

    def __init__(
        self,
        dao: LinkBaseDAO,
        settings: KeyGenSettings | None = None,
        generator: Callable[[str, int], str] = generate_key,
    ):
        self.dao = dao
        self.settings = settings or KeyGenSettings()
        self.generator = generator

    def generate(self) -> str:
        return self.generator(self.settings.alphabet, self.settings.key_size)

    def assign(self, custom_key: str | None = None) -> str:
        """Return a key that is not mapped to any link yet

        Args:
            custom_key (str | None):
                User-supplied key. If None, a random key is generated.

        Returns:
            str: The assigned key.

        Raises:
            BadKeyError:
                If the custom key is too long or malformed (the store is not touched).
            KeyAlreadyExistsError:
                If the custom key is already taken. Not retried.
            KeyspaceExhaustedError:
                If no free key was generated within settings.max_attempts attempts.
            DataStoreError:
                If an existence check fails.
        """
        if custom_key is not None:
            return self._assign_custom(custom_key)
        return self._assign_generated()

    def _assign_custom(self, custom_key: str) -> str:
        validate_custom_key(custom_key)
        try:
            exists = self.dao.key_exists(custom_key)
        except DataStoreError as e:
            raise DataStoreError(f"existence of custom key ('{custom_key}'): {e}") from e
        if exists:
            raise KeyAlreadyExistsError(f"custom key '{custom_key}' already exists")
        return custom_key

    def _assign_generated(self) -> str:
        max_attempts = self.settings.max_attempts
        for attempt in range(1, max_attempts + 1):
            key = self.generate()
            try:
                exists = self.dao.key_exists(key)
            except DataStoreError as e:
                raise DataStoreError(f"existence of generated key #{attempt} ('{key}'): {e}") from e
            if not exists:
                if attempt > 1:
                    logger.debug('Generated a free key after collisions.', extra={'key': key, 'attempts': attempt})
                return key

        logger.warning(
            'Key space exhausted for the configured key size.',
            extra={'attempts': max_attempts, 'keySize': self.settings.key_size},
        )
        raise KeyspaceExhaustedError(f"couldn't generate a unique key after {max_attempts} tries", attempts=max_attempts)
