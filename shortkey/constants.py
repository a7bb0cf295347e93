from enum import StrEnum


class TTL:
    """TTL durations in seconds."""

    # Read cache entry lifetime (24 hours in seconds)
    ONE_DAY = 86_400  # 60 * 60 * 24
    # Read cache sweep period (1 hour in seconds)
    ONE_HOUR = 3_600  # 60 * 60


class Defaults:
    """Default tuning values."""

    BASE_URL = 'http://localhost:11037'
    REDIS_HOST = 'localhost'
    REDIS_PORT = 6379
    REDIS_DB = 0
    REDIS_CLIENT_CERT = 'client.crt'
    REDIS_CLIENT_KEY = 'client.key'

    KEY_SIZE = 3
    ALPHABET = 'abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ'
    GEN_TRIES = 100

    CACHE_MAXSIZE = 65_536

    LIVENESS_INTERVAL = 10.0  # seconds between ping cycles
    LIVENESS_THRESHOLD = 100  # base number of tolerated ping failures
    LIVENESS_MULTIPLIER = 3  # fatal once failures exceed THRESHOLD * MULTIPLIER


class Tables:
    """Redis hash table names."""

    KEY_TO_LINK = 'keytob64'  # key -> base64 encoded link
    LINK_HASHES = 'linkhashes'  # sha256(encoded link) -> key


class Connections(StrEnum):
    """Client names of the three sessions to the store."""

    ADMIN = 'client'
    PUSHER = 'pusher'
    GETTER = 'getter'


class Status(StrEnum):
    """Outcome classification of an upward operation.

    The transport layer maps these to its own response codes.
    """

    SUCCESS = 'success'
    LINK_FOUND = 'link_found'
    LINK_NOT_FOUND = 'link_not_found'
    BAD_KEY = 'bad_key'
    BAD_LINK = 'bad_link'
    KEY_CONFLICT = 'key_conflict'
    RETRIEVAL_ERROR = 'retrieval_error'
    UNCATEGORIZED = 'uncategorized'


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        LOG_LEVEL = 'LOG_LEVEL'
        BASE_URL = 'SHORTKEY_BASE_URL'

    class Redis(StrEnum):
        HOST = 'SHORTKEY_REDIS_HOST'
        PORT = 'SHORTKEY_REDIS_PORT'
        DB = 'SHORTKEY_REDIS_DB'
        TLS = 'SHORTKEY_REDIS_TLS'
        CLIENT_CERT = 'SHORTKEY_REDIS_CERT'
        CLIENT_KEY = 'SHORTKEY_REDIS_KEY'
        CUSTOM_CA = 'SHORTKEY_REDIS_CA'
        USERNAME = 'SHORTKEY_REDIS_USER'
        PASSWORD = 'SHORTKEY_REDIS_PASS'  # noqa: S105
        # Secrets Manager name holding credentials JSON: {"username": "...", "password": "..."}
        SECRET = 'SHORTKEY_REDIS_SECRET'  # noqa: S105

    class KeyGen(StrEnum):
        KEY_SIZE = 'SHORTKEY_KEY_SIZE'
        ALPHABET = 'SHORTKEY_ALPHABET'
        GEN_TRIES = 'SHORTKEY_GEN_TRIES'

    class Cache(StrEnum):
        TTL = 'SHORTKEY_CACHE_TTL'
        SWEEP_INTERVAL = 'SHORTKEY_CACHE_SWEEP'
        MAXSIZE = 'SHORTKEY_CACHE_MAXSIZE'

    class Liveness(StrEnum):
        INTERVAL = 'SHORTKEY_LIVENESS_INTERVAL'
        THRESHOLD = 'SHORTKEY_LIVENESS_THRESHOLD'
        MULTIPLIER = 'SHORTKEY_LIVENESS_MULTIPLIER'

    class LocalStack(StrEnum):
        ENDPOINT = 'LOCALSTACK_ENDPOINT'  # usually http://localstack:4566


# Max number of characters in a custom key, checked before the key pattern
CUSTOM_KEY_MAX_LENGTH = 37

# With the Redis "nopass" ACL directive any password is accepted
NOPASS_PLACEHOLDER = 'any_password_will_work_with_nopass'  # noqa: S105

# Log event codes
LINK_CREATED = 'LINK_CREATED'
LINK_DEDUPLICATED = 'LINK_DEDUPLICATED'
LINK_RESOLVED = 'LINK_RESOLVED'
CACHE_HIT = 'CACHE_HIT'
STORE_PING_FAILED = 'STORE_PING_FAILED'
HEALTH_TRANSITION = 'HEALTH_TRANSITION'
