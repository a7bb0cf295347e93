import functools
from typing import TypeVar, Any
from collections.abc import Callable

import redis

from shortkey.dao.exceptions import DataStoreError


__all__ = ['handle_redis_connection_error', 'redis_address']

F = TypeVar('F', bound=Callable[..., Any])


def redis_address(client: redis.Redis) -> str:
    """Return '<host>:<port>/<db>' of a Redis client for error messages"""
    info = client.connection_pool.connection_kwargs
    return f'{info.get("host")}:{info.get("port")}/{info.get("db")}'


def handle_redis_connection_error[F](method: F) -> F:
    """Wrap Redis-interacting DAO methods to handle store errors

    The raised DataStoreError names the failed operation and its arguments
    (table, field) so callers get the context without re-wrapping.

    Args:
        method (Callable[..., Any]):
            DAO method performing Redis operations which may raise redis.exceptions.RedisError.

    Returns:
        Callable[..., Any]:
            Wrapped method which raises DataStoreError on connectivity issues or
            other Redis failures.

    Example:
        >>> @handle_redis_connection_error
        ... def hash_get(self, table, field):
        ...     return self.getter.hget(table, field)
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except redis.exceptions.ConnectionError as e:
            operation = _describe(method, args, kwargs)
            raise DataStoreError(f"{operation}: can't connect to Redis at {redis_address(self.admin)}.") from e
        except redis.exceptions.RedisError as e:
            operation = _describe(method, args, kwargs)
            raise DataStoreError(f'{operation}: {e}') from e

    return wrapper


def _describe(method: Callable, args: tuple, kwargs: dict) -> str:
    arguments = [repr(arg) for arg in args] + [f'{name}={value!r}' for name, value in kwargs.items()]
    return f'{method.__name__}({", ".join(arguments)})'
