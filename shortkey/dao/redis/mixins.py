"""Redis mixin providing the store connection set and connectivity checks.

Responsibilities:
    - Initialize three named sessions to one Redis backend
    - Healthcheck each session independently

Every operation kind has its own session so that a slow full-table scan or a
burst of writes never queues behind the other kind:

    admin  : administrative commands and healthchecks (unnamed client)
    pusher : writes to the link tables   (CLIENT SETNAME pusher)
    getter : reads from the link tables  (CLIENT SETNAME getter)

Classes:
    - RedisConnectionsMixin: Base mixin to inject Redis key management, connection set setup & healthcheck.

Example:
    Typical usage with a DAO implementation:

        >>> class LinkRedisDAO(RedisConnectionsMixin, LinkBaseDAO):
        ...     pass
        ...
        >>> dao = LinkRedisDAO(settings=RedisSettings(username='shortkey'), prefix="shortkey:prod")
        >>> dao.ping('getter')
        True
"""

import logging

import redis

from shortkey.constants import Connections
from shortkey.dao.exceptions import DataStoreError
from shortkey.dao.redis.helpers import redis_address
from shortkey.dao.redis.redis_key_schema import RedisKeySchema
from shortkey.utils.config import RedisSettings


logger = logging.getLogger(__name__)


class RedisConnectionsMixin:
    """Mixin Redis connection set setup and health check for Redis-backed DAOs.

    Attributes:
        admin (redis.Redis):
            Session used for administrative commands.

        pusher (redis.Redis):
            Session used for every write.

        getter (redis.Redis):
            Session used for every read.

        keys (RedisKeySchema):
            Helper class for generating namespaced Redis key names.

    Methods:
        connection(name: str) -> redis.Redis:
            Return the session registered under a connection name.

        healthcheck(name: str) -> bool:
            Ping one session. Raise a DataStoreError if unreachable.

        ping(name: str) -> bool:
            Ping one session. Return False if unreachable.

        close() -> None:
            Close all three sessions.
    """

    def __init__(
        self,
        settings: RedisSettings | None = None,
        admin: redis.Redis | None = None,
        pusher: redis.Redis | None = None,
        getter: redis.Redis | None = None,
        prefix: str | None = None,
    ):
        """Initialize the connection set

        The option is given to either use existing Redis client instances or
        create them from the shared connection settings.

        Args:
            settings (RedisSettings | None):
                Connection parameters used for every session that isn't given explicitly.
                Defaults to RedisSettings().

            admin, pusher, getter (redis.Redis | None):
                Pre-initialized Redis clients. If None, a new client is created.

            prefix (str | None):
                Namespace prefix for all Redis keys, e.g. 'app:env'.

        Raises:
            DataStoreError:
                If any session fails its healthcheck (connectivity issues).
        """
        client_kwargs = (settings or RedisSettings()).client_kwargs()
        if admin is None:
            admin = redis.Redis(**client_kwargs)
        if pusher is None:
            pusher = redis.Redis(**client_kwargs, client_name=Connections.PUSHER.value)
        if getter is None:
            getter = redis.Redis(**client_kwargs, client_name=Connections.GETTER.value)

        self.admin = admin
        self.pusher = pusher
        self.getter = getter
        self.keys = RedisKeySchema(prefix=prefix)

        for name in Connections:
            self.healthcheck(name)

    def connection(self, name: str) -> redis.Redis:
        match name:
            case Connections.ADMIN:
                return self.admin
            case Connections.PUSHER:
                return self.pusher
            case Connections.GETTER:
                return self.getter
        raise ValueError(f'Unknown connection name: {name!r}')

    def healthcheck(self, name: str, raise_error: bool = True) -> bool:
        """PING one Redis session to healthcheck connectivity

        Args:
            name (str):
                Connection name, one of 'client', 'pusher', 'getter'.

            raise_error (bool):
                If True, raises DataStoreError on failure. Defaults to True.

        Returns:
            bool:
                True if Redis is reachable, False otherwise (only if raise_error=False).

        Raises:
            DataStoreError:
                If the session cannot reach Redis and raise_error=True.

        Example:
            >>> self.healthcheck('pusher')
            True
        """
        client = self.connection(name)
        try:
            client.ping()
        except redis.exceptions.RedisError as e:
            if raise_error:
                raise DataStoreError(
                    f"pinging redis on {name}: can't connect to Redis at {redis_address(client)}. Check the provided configuration parameters."
                ) from e
            return False
        else:
            return True

    def ping(self, name: str) -> bool:
        return self.healthcheck(name, raise_error=False)

    def close(self) -> None:
        for client in (self.pusher, self.getter, self.admin):
            client.close()
