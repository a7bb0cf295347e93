"""Exceptions related to Data Access Objects (DAO) operations.

Classes:
    DAOError:
        Generic base class for DAO-related exceptions.

    KeyAlreadyExistsError:
        Raised when a custom key is already mapped to a link.

    KeyNotFoundError:
        Raised when a key is not mapped to any link.

    DataStoreError:
        Raised when there is an error in the data store (e.g., connection issues, timeouts, OOM, etc.).

    StoreUnavailableError:
        Raised when the store stayed unreachable for longer than the liveness monitor tolerates.

Example:
    >>> from shortkey.dao.exceptions import KeyNotFoundError
    >>> raise KeyNotFoundError("Short URL for 'abc' not found.")
    Traceback (most recent call last):
        ...
    shortkey.dao.exceptions.KeyNotFoundError: Short URL for 'abc' not found.
"""

from shortkey.exceptions import ShortKeyError


class DAOError(ShortKeyError):
    """Generic base class for DAO-related exceptions."""

    error_code = 'dao:dao_error'


class KeyAlreadyExistsError(DAOError):
    """Exception raised when a custom key is already taken in the data store."""

    error_code = 'dao:key_already_exists_error'


class KeyNotFoundError(DAOError):
    """Exception raised when a key is not found in the data store."""

    error_code = 'dao:key_not_found_error'


class DataStoreError(DAOError):
    """Exception raised when there is an error in the data store.

    e.g. connection issues, timeouts, OOM, etc.
    """

    error_code = 'dao:data_store_error'


class StoreUnavailableError(DataStoreError):
    """Exception raised when sustained connection loss to the store is detected."""

    error_code = 'dao:store_unavailable_error'
