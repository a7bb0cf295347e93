"""Unit tests for the upward operations.

Test coverage includes:

1. create_link()
   - Ensures valid links are trimmed, shortened and reported as SUCCESS.
   - Confirms empty, multi-line and non-URL links report BAD_LINK.
   - Confirms malformed custom keys report BAD_KEY, taken ones KEY_CONFLICT.
   - Confirms any other failure reports UNCATEGORIZED.

2. resolve_key()
   - Ensures known keys report LINK_FOUND with the original URL.
   - Confirms BAD_KEY, LINK_NOT_FOUND and RETRIEVAL_ERROR statuses.

3. export_all() and short_url()
"""

from unittest.mock import MagicMock

import pytest
import redis

from shortkey.constants import Status
from shortkey.core.links import LinkService
from shortkey.dao.exceptions import DataStoreError, KeyAlreadyExistsError
from shortkey.exceptions import BadKeyError, BadLinkError, KeyspaceExhaustedError
from shortkey.operations import Operations, check_link
from shortkey.utils.encoding import encode_link


URL = 'https://example.com/some/long/path?with=query'


@pytest.fixture
def operations(service):
    return Operations(service, base_url='https://sho.rt/')


# -------------------------------
# 1. create_link()
# -------------------------------


def test_create_link(operations):
    key, status, error = operations.create_link(f'  {URL}\n')

    assert status == Status.SUCCESS
    assert error is None
    assert operations.resolve_key(key).value == URL


def test_create_link_with_custom_key(operations):
    result = operations.create_link(URL, custom_key='my-key')

    assert result.value == 'my-key'
    assert result.status == Status.SUCCESS


def test_create_link_with_empty_custom_key_generates_one(operations):
    result = operations.create_link(URL, custom_key='')

    assert result.status == Status.SUCCESS
    assert len(result.value) == 3


@pytest.mark.parametrize(
    'link, message',
    [
        ('', 'link is empty'),
        ('   \n\t', 'link is empty'),
        ('https://example.com\nhttps://example.org', 'link contains newlines'),
        ('not a url', 'link is invalid'),
        ('ftp://example.com/file', 'link is invalid'),
        ('https://localhost', 'link is invalid'),
    ],
)
def test_create_link_with_bad_link(operations, redis_store, link, message):
    value, status, error = operations.create_link(link)

    assert value is None
    assert status == Status.BAD_LINK
    assert isinstance(error, BadLinkError)
    assert str(error) == message
    assert redis_store == {}


@pytest.mark.parametrize('link', ['http://example.com', 'https://www.example.co.uk/a?b=c#d', 'see https://example.com/x'])
def test_check_link_accepts_urls(link):
    assert check_link(f' {link} ') == link


def test_check_link_only_rejects_line_feeds():
    link = 'https://example.com/a\rb'
    assert check_link(link) == link
    with pytest.raises(BadLinkError):
        check_link('https://example.com/a\nb')


@pytest.mark.parametrize('custom_key', ['ab', 'abcdefghijk', 'a' * 38, 'bad_key'])
def test_create_link_with_bad_custom_key(operations, custom_key):
    value, status, error = operations.create_link(URL, custom_key=custom_key)

    assert value is None
    assert status == Status.BAD_KEY
    assert isinstance(error, BadKeyError)


@pytest.mark.parametrize('custom_key', ['bad key!!', 'x' * 50])
def test_create_link_for_known_content_with_bad_custom_key(operations, getter, custom_key):
    operations.create_link(URL)
    reads = getter.hget.call_count

    value, status, error = operations.create_link(URL, custom_key=custom_key)

    assert value is None
    assert status == Status.BAD_KEY
    assert isinstance(error, BadKeyError)
    assert getter.hget.call_count == reads


def test_create_link_with_taken_custom_key(operations):
    operations.create_link(URL, custom_key='my-key')

    value, status, error = operations.create_link('https://other.example.com', custom_key='my-key')

    assert value is None
    assert status == Status.KEY_CONFLICT
    assert isinstance(error, KeyAlreadyExistsError)
    assert operations.resolve_key('my-key').value == URL


@pytest.mark.parametrize('error', [KeyspaceExhaustedError('full', attempts=100), DataStoreError('down'), RuntimeError('bug')])
def test_create_link_with_other_failure(error):
    links = MagicMock(spec=LinkService)
    links.create.side_effect = error

    value, status, returned = Operations(links).create_link(URL)

    assert value is None
    assert status == Status.UNCATEGORIZED
    assert returned is error
    links.create.assert_called_once_with(encode_link(URL), custom_key=None)


# -------------------------------
# 2. resolve_key()
# -------------------------------


def test_resolve_key(operations):
    key = operations.create_link(URL).value

    assert tuple(operations.resolve_key(key)) == (URL, Status.LINK_FOUND, None)


def test_resolve_bad_key(operations):
    value, status, error = operations.resolve_key('a/b')

    assert (value, status) == (None, Status.BAD_KEY)
    assert isinstance(error, BadKeyError)


def test_resolve_unknown_key(operations):
    value, status, error = operations.resolve_key('abc')

    assert (value, status) == (None, Status.LINK_NOT_FOUND)
    assert str(error) == 'short url for abc not found'


def test_resolve_key_with_store_error(operations, getter):
    getter.hget.side_effect = redis.exceptions.ConnectionError('Connection refused')

    value, status, error = operations.resolve_key('abc')

    assert (value, status) == (None, Status.RETRIEVAL_ERROR)
    assert isinstance(error, DataStoreError)


# -------------------------------
# 3. export_all() and short_url()
# -------------------------------


def test_export_all(operations):
    operations.create_link(URL, custom_key='my-key')

    assert tuple(operations.export_all()) == ([f'my-key,{encode_link(URL)}'], Status.SUCCESS, None)


def test_export_all_with_store_error(operations, getter):
    getter.hgetall.side_effect = redis.exceptions.ConnectionError('Connection refused')

    value, status, error = operations.export_all()

    assert (value, status) == (None, Status.UNCATEGORIZED)
    assert isinstance(error, DataStoreError)


def test_short_url(operations):
    assert operations.short_url('abc') == 'https://sho.rt/abc'
