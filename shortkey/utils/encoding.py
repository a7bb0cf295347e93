"""Reversible link encoding and content hashing

Links are never stored in plaintext. The store only ever sees the standard
base64 encoding of the link's UTF-8 bytes, and the deduplication index is keyed
by the SHA-256 hex digest of that encoded form.

Functions:
    encode_link(link: str) -> str
    decode_link(encoded: str) -> str
    content_hash(encoded: str) -> str

Example:
    >>> encode_link('https://example.com')
    'aHR0cHM6Ly9leGFtcGxlLmNvbQ=='
    >>> decode_link('aHR0cHM6Ly9leGFtcGxlLmNvbQ==')
    'https://example.com'
"""

import base64
import binascii
import hashlib


def encode_link(link: str) -> str:
    return base64.b64encode(link.encode('utf-8')).decode('ascii')


def decode_link(encoded: str) -> str:
    """Decode a stored link back to its original form

    Raises:
        ValueError: If the value is not valid base64 or not valid UTF-8.
    """
    try:
        return base64.b64decode(encoded, validate=True).decode('utf-8')
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ValueError(f'Stored link is not valid base64: {encoded!r}') from e


def content_hash(encoded: str) -> str:
    return hashlib.sha256(encoded.encode('utf-8')).hexdigest()
