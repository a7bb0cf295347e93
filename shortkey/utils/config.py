"""Utility functions for application configuration management.

Configuration is read once at process start from environment variables and,
optionally, an AWS Secrets Manager secret holding the Redis credentials. The
result is an immutable ShortKeyConfig value which is passed explicitly into
every component constructor. Nothing reads the environment after startup.

The configuration is split into sections:

    ShortKeyConfig
    ├── base_url / prefix
    ├── redis     (RedisSettings)     host, port, db, credentials, TLS
    ├── keygen    (KeyGenSettings)    key size, alphabet, generation attempts
    ├── cache     (CacheSettings)     TTL, sweep interval, max entries
    └── liveness  (LivenessSettings)  ping interval, failure threshold

Functions:
    app_env() -> str
        Return the current application environment (`APP_ENV`) value,
        defaulting to `'local'`.

    app_name() -> str | None
        Return the application name (`APP_NAME`), or None if not set.

    app_prefix() -> str | None
        Return the Redis key prefix, or None if `APP_NAME` is not set.

    load_config(secrets_client: BaseClient | None = None) -> ShortKeyConfig
        Build the immutable application configuration.

Example:
    >>> from shortkey.utils.config import load_config
    >>> config = load_config()
    >>> config.redis.host
    'localhost'
    >>> config.keygen.key_size
    3
"""

import os
import ssl
import json
import logging
from dataclasses import dataclass, field
from typing import Any

import boto3
from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError

from shortkey.constants import ENV, TTL, Defaults, NOPASS_PLACEHOLDER
from shortkey.exceptions import BadConfigurationError, MissingEnvironmentVariableError
from shortkey.utils.keygen import KEY_CHARACTERS
from shortkey.utils.runtime import running_locally


logger = logging.getLogger(__name__)


# Bounds imposed by the key pattern on generated keys
MIN_KEY_SIZE = 3
MAX_KEY_SIZE = 10


@dataclass(frozen=True)
class RedisSettings:
    """Connection parameters shared by the admin, pusher and getter sessions.

    Attributes:
        host (str), port (int), db (int):
            Address of the Redis server.
        username (str | None), password (str | None):
            ACL credentials. A missing password with a username set means the
            user is configured with `nopass`.
        tls (bool):
            Connect over TLS with a client certificate.
        client_cert (str), client_key (str):
            Client certificate and key paths (required when tls is enabled).
        custom_ca (str | None):
            Optional CA certificate path, PEM bundle or a single DER certificate.
    """

    host: str = Defaults.REDIS_HOST
    port: int = Defaults.REDIS_PORT
    db: int = Defaults.REDIS_DB
    username: str | None = None
    password: str | None = field(default=None, repr=False)
    tls: bool = False
    client_cert: str = Defaults.REDIS_CLIENT_CERT
    client_key: str = Defaults.REDIS_CLIENT_KEY
    custom_ca: str | None = None

    def __post_init__(self):
        if not 0 < self.port < 65_536:
            raise BadConfigurationError(f'Redis port must be between 1 and 65535 (given value: {self.port}).')
        if self.db < 0:
            raise BadConfigurationError(f'Redis db must be a non-negative integer (given value: {self.db}).')
        if self.tls:
            for description, path in (('redis client certificate', self.client_cert), ('redis client key', self.client_key)):
                if not os.path.isfile(path):
                    raise BadConfigurationError(f"{description} '{path}' does not exist")
        if self.custom_ca is not None and not os.path.isfile(self.custom_ca):
            raise BadConfigurationError(f"custom CA '{self.custom_ca}' does not exist")

    def client_kwargs(self) -> dict[str, Any]:
        """Return keyword arguments for redis.Redis(...)"""
        kwargs = dict(
            host=self.host,
            port=self.port,
            db=self.db,
            username=self.username,
            password=self.password,
            decode_responses=True,
        )

        # A username without password relies on the "nopass" ACL directive,
        # which accepts any password but still requires one to be sent.
        if self.username is not None and self.password is None:
            kwargs['password'] = NOPASS_PLACEHOLDER

        if self.tls:
            kwargs.update(
                ssl=True,
                ssl_certfile=self.client_cert,
                ssl_keyfile=self.client_key,
                ssl_min_version=ssl.TLSVersion.TLSv1_2,
            )
            if self.custom_ca is not None:
                if self.custom_ca.lower().endswith('.der'):
                    with open(self.custom_ca, 'rb') as f:
                        kwargs['ssl_ca_data'] = ssl.DER_cert_to_PEM_cert(f.read())
                else:
                    kwargs['ssl_ca_certs'] = self.custom_ca
        return kwargs


@dataclass(frozen=True)
class KeyGenSettings:
    key_size: int = Defaults.KEY_SIZE
    alphabet: str = Defaults.ALPHABET
    max_attempts: int = Defaults.GEN_TRIES

    def __post_init__(self):
        # Generated keys must satisfy the same pattern resolve() validates against
        if not MIN_KEY_SIZE <= self.key_size <= MAX_KEY_SIZE:
            raise BadConfigurationError(f'Key size must be between {MIN_KEY_SIZE} and {MAX_KEY_SIZE} (given value: {self.key_size}).')
        if not self.alphabet:
            raise BadConfigurationError('Alphabet must be a non-empty string.')
        invalid = sorted(set(self.alphabet) - KEY_CHARACTERS)
        if invalid:
            raise BadConfigurationError(f'Alphabet contains characters outside [-0-9a-zA-Z]: {"".join(invalid)!r}')
        if self.max_attempts < 1:
            raise BadConfigurationError(f'Key generation attempts must be positive (given value: {self.max_attempts}).')


@dataclass(frozen=True)
class CacheSettings:
    ttl: float = TTL.ONE_DAY
    sweep_interval: float = TTL.ONE_HOUR
    maxsize: int = Defaults.CACHE_MAXSIZE

    def __post_init__(self):
        if self.ttl <= 0 or self.sweep_interval <= 0 or self.maxsize <= 0:
            raise BadConfigurationError(f'Cache TTL, sweep interval and size must be positive (given values: {self}).')


@dataclass(frozen=True)
class LivenessSettings:
    interval: float = Defaults.LIVENESS_INTERVAL
    failure_threshold: int = Defaults.LIVENESS_THRESHOLD
    threshold_multiplier: int = Defaults.LIVENESS_MULTIPLIER

    def __post_init__(self):
        if self.interval <= 0 or self.failure_threshold <= 0 or self.threshold_multiplier <= 0:
            raise BadConfigurationError(f'Liveness interval and thresholds must be positive (given values: {self}).')

    @property
    def fatal_limit(self) -> int:
        """Number of consecutive ping failures tolerated before the process is terminated"""
        return self.failure_threshold * self.threshold_multiplier


@dataclass(frozen=True)
class ShortKeyConfig:
    base_url: str = Defaults.BASE_URL
    prefix: str | None = None
    redis: RedisSettings = field(default_factory=RedisSettings)
    keygen: KeyGenSettings = field(default_factory=KeyGenSettings)
    cache: CacheSettings = field(default_factory=CacheSettings)
    liveness: LivenessSettings = field(default_factory=LivenessSettings)


def app_env() -> str:
    """Return the current application environment by reading 'APP_ENV'

    Returns:
        str:
            Value of `APP_ENV` environment variable, `'local'` by default.
    """
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    """Return the current application name by reading 'APP_NAME'"""
    return os.environ.get(ENV.App.APP_NAME)


def app_prefix() -> str | None:
    """Return the Redis key prefix

    Returns:
        str: app prefix as <app name>:<app env>.
             None if APP_NAME is not set.

    Example:
        >>> os.environ['APP_NAME'] = 'shortkey'
        >>> os.environ['APP_ENV'] = 'local'
        >>> app_prefix()
        'shortkey:local'
    """
    return None if app_name() is None else f'{app_name()}:{app_env()}'


def _env_str(name: str) -> str | None:
    value = os.environ.get(name)
    return value if value else None


def _env_int(name: str, default: int) -> int:
    value = _env_str(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as e:
        raise BadConfigurationError(f'Environment variable {name} must be an integer (given value: {value!r}).') from e


def _env_float(name: str, default: float) -> float:
    value = _env_str(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError as e:
        raise BadConfigurationError(f'Environment variable {name} must be a number (given value: {value!r}).') from e


def _env_bool(name: str, default: bool = False) -> bool:
    value = _env_str(name)
    if value is None:
        return default
    return value.strip().lower() in {'1', 'true', 'yes', 'on'}


def _resolve_secret(secrets_client: BaseClient | None) -> tuple[str | None, str | None]:
    """Resolve optional username and password from Secrets Manager.

    Environment:
        - SHORTKEY_REDIS_SECRET: Secrets Manager name for {"username": "...", "password": "..."}
        - LOCALSTACK_ENDPOINT: LocalStack endpoint URL for local development

    Returns:
        tuple[str | None, str | None]:
            (username_or_none, password_or_none), both None when no secret is configured.

    Raises:
        BadConfigurationError:
            If the secret payload is not valid JSON.
        botocore.exceptions.BotoCoreError / ClientError:
            On AWS Secrets Manager API failures.
    """
    secret_name = _env_str(ENV.Redis.SECRET)
    if secret_name is None:
        return None, None

    # fmt: off
    secrets_client_kwargs = {
        'endpoint_url': os.environ.get(ENV.LocalStack.ENDPOINT, 'http://localhost:4566'),
    } if running_locally() else {}
    # fmt: on
    sm = secrets_client or boto3.client('secretsmanager', **secrets_client_kwargs)

    try:
        raw = sm.get_secret_value(SecretId=secret_name).get('SecretString')
        payload = json.loads(raw or '{}')
    except (BotoCoreError, ClientError):
        raise
    except json.JSONDecodeError as e:
        raise BadConfigurationError('Invalid JSON in Redis credentials secret payload') from e

    return payload.get('username'), payload.get('password')


def _resolve_credentials(secrets_client: BaseClient | None) -> tuple[str, str | None]:
    """Resolve Redis credentials, preferring the secret over plain environment variables

    Raises:
        MissingEnvironmentVariableError:
            If no username is given by either source.
    """
    secret_username, secret_password = _resolve_secret(secrets_client)
    username = secret_username or _env_str(ENV.Redis.USERNAME)
    password = secret_password or _env_str(ENV.Redis.PASSWORD)

    if username is None:
        raise MissingEnvironmentVariableError(
            f'username must be provided through env var {ENV.Redis.USERNAME} or the secret named by {ENV.Redis.SECRET}'
        )
    if password is None:
        logger.warning('Redis password not given in %s, will attempt to use nopass.', ENV.Redis.PASSWORD.value)
    return username, password


def load_config(secrets_client: BaseClient | None = None) -> ShortKeyConfig:
    """Build the immutable application configuration from the environment

    Args:
        secrets_client (BaseClient | None):
            Optional boto3 Secrets Manager client to reuse (useful in tests).
            Only used when SHORTKEY_REDIS_SECRET is set.

    Returns:
        ShortKeyConfig: the application configuration.

    Raises:
        MissingEnvironmentVariableError:
            If the Redis username is not provided.
        BadConfigurationError:
            If any value is malformed or out of range.
    """
    username, password = _resolve_credentials(secrets_client)

    redis_settings = RedisSettings(
        host=_env_str(ENV.Redis.HOST) or Defaults.REDIS_HOST,
        port=_env_int(ENV.Redis.PORT, Defaults.REDIS_PORT),
        db=_env_int(ENV.Redis.DB, Defaults.REDIS_DB),
        username=username,
        password=password,
        tls=_env_bool(ENV.Redis.TLS),
        client_cert=_env_str(ENV.Redis.CLIENT_CERT) or Defaults.REDIS_CLIENT_CERT,
        client_key=_env_str(ENV.Redis.CLIENT_KEY) or Defaults.REDIS_CLIENT_KEY,
        custom_ca=_env_str(ENV.Redis.CUSTOM_CA),
    )
    keygen_settings = KeyGenSettings(
        key_size=_env_int(ENV.KeyGen.KEY_SIZE, Defaults.KEY_SIZE),
        alphabet=_env_str(ENV.KeyGen.ALPHABET) or Defaults.ALPHABET,
        max_attempts=_env_int(ENV.KeyGen.GEN_TRIES, Defaults.GEN_TRIES),
    )
    cache_settings = CacheSettings(
        ttl=_env_float(ENV.Cache.TTL, TTL.ONE_DAY),
        sweep_interval=_env_float(ENV.Cache.SWEEP_INTERVAL, TTL.ONE_HOUR),
        maxsize=_env_int(ENV.Cache.MAXSIZE, Defaults.CACHE_MAXSIZE),
    )
    liveness_settings = LivenessSettings(
        interval=_env_float(ENV.Liveness.INTERVAL, Defaults.LIVENESS_INTERVAL),
        failure_threshold=_env_int(ENV.Liveness.THRESHOLD, Defaults.LIVENESS_THRESHOLD),
        threshold_multiplier=_env_int(ENV.Liveness.MULTIPLIER, Defaults.LIVENESS_MULTIPLIER),
    )

    config = ShortKeyConfig(
        base_url=_env_str(ENV.App.BASE_URL) or Defaults.BASE_URL,
        prefix=app_prefix(),
        redis=redis_settings,
        keygen=keygen_settings,
        cache=cache_settings,
        liveness=liveness_settings,
    )
    logger.debug(
        'Loaded configuration.',
        extra={'redisHost': redis_settings.host, 'redisPort': redis_settings.port, 'prefix': config.prefix},
    )
    return config
