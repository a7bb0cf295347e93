from dataclasses import dataclass

from shortkey.utils.encoding import encode_link, decode_link, content_hash


@dataclass(frozen=True)
class Link:
    """Represent a link in its raw, stored and hashed forms.

    Attributes:
        raw (str):
            The original long URL.
        encoded (str):
            Reversible encoding of the URL, the only form written to the store.
        content_hash (str):
            Digest of the encoded form, key of the deduplication index.

    Example:
        >>> link = Link.from_raw('https://example.com')
        >>> link.encoded
        'aHR0cHM6Ly9leGFtcGxlLmNvbQ=='
        >>> Link.from_encoded(link.encoded) == link
        True
    """

    raw: str
    encoded: str
    content_hash: str

    @classmethod
    def from_raw(cls, raw: str) -> 'Link':
        encoded = encode_link(raw)
        return cls(raw=raw, encoded=encoded, content_hash=content_hash(encoded))

    @classmethod
    def from_encoded(cls, encoded: str) -> 'Link':
        return cls(raw=decode_link(encoded), encoded=encoded, content_hash=content_hash(encoded))


# fmt: off
@dataclass(frozen=True)
class OperationResult:
    value: str | list[str] | None   # Key, resolved URL or exported rows
    status: str                     # One of shortkey.constants.Status
    error: Exception | None = None  # Set whenever status is not a success status

    def __iter__(self):
        return iter((self.value, self.status, self.error))
# fmt: on
