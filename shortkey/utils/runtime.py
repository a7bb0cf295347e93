import os

from shortkey.constants import ENV


def running_locally() -> bool:
    """Return True if running against a local stack (APP_ENV=local), False otherwise."""
    return os.getenv(ENV.App.APP_ENV, '').lower() == 'local'
