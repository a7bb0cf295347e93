"""Unit tests for helper functions in helpers.py and runtime.py."""

import pytest

from shortkey.constants import ENV
from shortkey.utils.helpers import get_short_url
from shortkey.utils.runtime import running_locally


@pytest.mark.parametrize(
    'key, base_url, expected',
    [
        ('abc', 'http://localhost:11037', 'http://localhost:11037/abc'),
        ('abc', 'http://localhost:11037/', 'http://localhost:11037/abc'),
        ('my-key', 'https://sho.rt//', 'https://sho.rt/my-key'),
        ('XyZ', 'https://example.com/s', 'https://example.com/s/XyZ'),
    ],
)
def test_get_short_url(key: str, base_url: str, expected: str) -> None:
    assert get_short_url(key, base_url) == expected


@pytest.mark.parametrize(
    'app_env, expected',
    [
        ('local', True),
        ('LOCAL', True),
        ('dev', False),
        ('', False),
        (None, False),
    ],
)
def test_running_locally(monkeypatch, app_env, expected):
    """running_locally() depends on APP_ENV only."""
    if app_env is None:
        monkeypatch.delenv(ENV.App.APP_ENV, raising=False)
    else:
        monkeypatch.setenv(ENV.App.APP_ENV, app_env)
    monkeypatch.setenv('AWS_SAM_LOCAL', 'true')

    assert running_locally() is expected
