from shortkey.utils.config import app_env, app_name, app_prefix, load_config
from shortkey.utils.helpers import get_short_url
from shortkey.utils.keygen import generate_key, validate_key, validate_custom_key
from shortkey.utils.logging import initialize_logging


__all__ = [
    'generate_key',
    'validate_key',
    'validate_custom_key',
    'app_env',
    'app_name',
    'app_prefix',
    'load_config',
    'get_short_url',
    'initialize_logging',
]
