"""Helper utilities shared across the package.

Functions:
    get_short_url() -> str
        Get string representation of short URL for a given key

Example:
    >>> from shortkey.utils.helpers import get_short_url
    >>> get_short_url('abc', 'https://sho.rt/')
    'https://sho.rt/abc'
"""


def get_short_url(key: str, base_url: str) -> str:
    """Get string representation of shortened URL

    Args:
        key (str): short key
        base_url (str): public base URL of the shortener, with or without trailing slash

    Returns:
        str: short url string representation
    """
    return f'{base_url.rstrip("/")}/{key}'
