"""Upward operations consumed by a transport layer

Every operation returns an OperationResult(value, status, error) and never raises.
Statuses come from shortkey.constants.Status; mapping them to transport codes
(HTTP or otherwise) is the caller's job.

Operations:
    create_link(link, custom_key=None):
        - Step 1: Trim surrounding whitespace from the link
        - Step 2: Reject empty, multi-line and non-URL links (BAD_LINK)
        - Step 3: Shorten the encoded link (BAD_KEY / KEY_CONFLICT / UNCATEGORIZED on failure)
        - Step 4: Return the key with SUCCESS

    resolve_key(key):
        BAD_KEY | LINK_NOT_FOUND | RETRIEVAL_ERROR | LINK_FOUND

    export_all():
        UNCATEGORIZED | SUCCESS

Example:
    >>> key, status, error = operations.create_link('https://example.com')
    >>> status
    <Status.SUCCESS: 'success'>
    >>> operations.short_url(key)
    'http://localhost:11037/qZe'
"""

import re
import logging

from shortkey.constants import Status, Defaults
from shortkey.core.links import LinkService
from shortkey.dao.exceptions import KeyAlreadyExistsError, KeyNotFoundError
from shortkey.exceptions import BadKeyError, BadLinkError
from shortkey.models import OperationResult
from shortkey.utils.encoding import encode_link
from shortkey.utils.helpers import get_short_url


logger = logging.getLogger(__name__)


URL_PATTERN = r'(https?:\/\/(www\.)?[-a-zA-Z0-9@:%._\+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b([-a-zA-Z0-9()!@:%_\+.~#?&\/\/=]*))'
URL_REGEXP = re.compile(URL_PATTERN)


def check_link(link: str) -> str:
    """Return the trimmed link, raise BadLinkError if it is not a single-line URL"""
    link = link.strip()
    if not link:
        raise BadLinkError('link is empty')
    if '\n' in link:
        raise BadLinkError('link contains newlines')
    if not URL_REGEXP.search(link):
        raise BadLinkError('link is invalid')
    return link


class Operations:
    """Status-returning facade over LinkService

    Attributes:
        links (LinkService):
            Service performing the actual work.
        base_url (str):
            Public base URL used to render short URLs.
    """

    def __init__(self, links: LinkService, base_url: str = Defaults.BASE_URL):
        self.links = links
        self.base_url = base_url

    def create_link(self, link: str, custom_key: str | None = None) -> OperationResult:
        try:
            link = check_link(link)
        except BadLinkError as e:
            return OperationResult(None, Status.BAD_LINK, e)

        # An empty custom key means "generate one"
        custom_key = custom_key or None

        try:
            key = self.links.create(encode_link(link), custom_key=custom_key)
        except BadKeyError as e:
            return OperationResult(None, Status.BAD_KEY, e)
        except KeyAlreadyExistsError as e:
            return OperationResult(None, Status.KEY_CONFLICT, e)
        except Exception as e:
            logger.exception('Failed to shorten link.', extra={'customKey': custom_key})
            return OperationResult(None, Status.UNCATEGORIZED, e)

        return OperationResult(key, Status.SUCCESS)

    def resolve_key(self, key: str) -> OperationResult:
        try:
            url = self.links.resolve(key)
        except BadKeyError as e:
            return OperationResult(None, Status.BAD_KEY, e)
        except KeyNotFoundError as e:
            return OperationResult(None, Status.LINK_NOT_FOUND, e)
        except Exception as e:
            logger.exception('Failed to resolve key.', extra={'key': key})
            return OperationResult(None, Status.RETRIEVAL_ERROR, e)

        return OperationResult(url, Status.LINK_FOUND)

    def export_all(self) -> OperationResult:
        try:
            rows = self.links.export()
        except Exception as e:
            logger.exception('Failed to export links.')
            return OperationResult(None, Status.UNCATEGORIZED, e)

        return OperationResult(rows, Status.SUCCESS)

    def short_url(self, key: str) -> str:
        return get_short_url(key, self.base_url)
