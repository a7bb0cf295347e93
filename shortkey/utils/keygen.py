"""Short key generation and validation utility

This module provides a helper function for generating random short keys from a
configurable alphabet, plus the validation rules applied to user-supplied keys.

Functions:
    generate_key(alphabet, length):
        Generate a random key suitable for use as a URL slug.

    validate_key(key):
        Check a key against the key pattern (3-10 characters of [-0-9a-zA-Z]).

    validate_custom_key(key):
        Check a user-supplied key against the max length, then the key pattern.

Example:
    >>> from shortkey.utils.keygen import generate_key
    >>> generate_key('abc', 4)
    'cabb'
"""

import re
import secrets

from shortkey.constants import CUSTOM_KEY_MAX_LENGTH
from shortkey.exceptions import BadKeyError


KEY_PATTERN = r'^[-0-9a-zA-Z]{3,10}$'
KEY_REGEXP = re.compile(KEY_PATTERN)
KEY_CHARACTERS = frozenset('-0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ')

# Random bytes drawn per key character
_DRAW_BYTES = 2


def generate_key(alphabet: str, length: int) -> str:
    """Generate a random key of `length` characters drawn from `alphabet`.

    Each character position draws a 16-bit value from the OS CSPRNG and reduces
    it modulo the alphabet length.

    Args:
        alphabet (str):
            Characters keys are drawn from.

        length (int):
            Number of characters in the resulting key.

    Returns:
        str: A random key.

    NOTE:
        - 65536 is not a multiple of most alphabet lengths, so the first
          (65536 % len(alphabet)) characters are very slightly more likely.
          This is an accepted approximation, not a uniformity guarantee.
    """
    if not isinstance(alphabet, str):
        raise TypeError(f'Alphabet must be of type string (given type: {type(alphabet)}).')
    if not alphabet:
        raise ValueError('Alphabet must be a non-empty string.')
    if not isinstance(length, int) or isinstance(length, bool):
        raise TypeError(f'Length must be of type integer (given type: {type(length)}).')
    if length < 1:
        raise ValueError(f'Length must be a positive integer (given value: {length}).')

    base = len(alphabet)
    return ''.join(alphabet[int.from_bytes(secrets.token_bytes(_DRAW_BYTES), 'big') % base] for _ in range(length))


def validate_key(key: str) -> str:
    """Ensure a key matches the key pattern, return it unchanged.

    Raises:
        BadKeyError: If the key does not match KEY_PATTERN.
    """
    if not KEY_REGEXP.fullmatch(key):
        raise BadKeyError(f'key {key} is invalid')
    return key


def check_custom_key_length(key: str) -> str:
    """Ensure a custom key is not longer than CUSTOM_KEY_MAX_LENGTH, return it unchanged.

    Raises:
        BadKeyError: If the key is too long.
    """
    if len(key) > CUSTOM_KEY_MAX_LENGTH:
        raise BadKeyError(f'custom key is too long, max size is {CUSTOM_KEY_MAX_LENGTH}')
    return key


def validate_custom_key(key: str) -> str:
    """Validate a user-supplied key: max length first, then the key pattern.

    Raises:
        BadKeyError: If the key is too long or malformed.
    """
    check_custom_key_length(key)
    if not KEY_REGEXP.fullmatch(key):
        raise BadKeyError(f'key {key} is invalid, needs to match {KEY_PATTERN}')
    return key
