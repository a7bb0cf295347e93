"""Application wiring

Classes:
    ShortKeyApp:
        Build every component from one ShortKeyConfig, start the background
        threads and release connections on close.

Example:
    >>> app = ShortKeyApp.from_environment()
    >>> app.start()
    >>> key, status, _ = app.operations.create_link('https://example.com')
    >>> app.operations.short_url(key)
    'http://localhost:11037/qZe'
    >>> app.close()
"""

import queue
import logging
from dataclasses import dataclass, field

import redis
from botocore.client import BaseClient

from shortkey.core.keys import KeyAssigner
from shortkey.core.links import LinkService
from shortkey.core.liveness import FatalHandler, HealthTransition, LivenessMonitor
from shortkey.dao.cache import LinkCache
from shortkey.dao.redis import LinkRedisDAO
from shortkey.operations import Operations
from shortkey.utils.config import ShortKeyConfig, load_config
from shortkey.utils.logging import initialize_logging


logger = logging.getLogger(__name__)


@dataclass
class ShortKeyApp:
    config: ShortKeyConfig
    dao: LinkRedisDAO
    cache: LinkCache
    links: LinkService
    operations: Operations
    monitor: LivenessMonitor
    events: queue.Queue[HealthTransition] = field(default_factory=queue.Queue)

    @classmethod
    def from_config(
        cls,
        config: ShortKeyConfig,
        admin: redis.Redis | None = None,
        pusher: redis.Redis | None = None,
        getter: redis.Redis | None = None,
        on_fatal: FatalHandler | None = None,
    ) -> 'ShortKeyApp':
        """Build the component graph

        Pre-built Redis clients may be passed instead of connecting from config.redis.

        Raises:
            DataStoreError:
                If any Redis session fails its initial healthcheck.
        """
        dao = LinkRedisDAO(settings=config.redis, admin=admin, pusher=pusher, getter=getter, prefix=config.prefix)
        cache = LinkCache(config.cache)
        links = LinkService(dao, KeyAssigner(dao, config.keygen), cache)
        events: queue.Queue[HealthTransition] = queue.Queue()
        monitor = LivenessMonitor(dao, config.liveness, events=events, on_fatal=on_fatal)

        return cls(
            config=config,
            dao=dao,
            cache=cache,
            links=links,
            operations=Operations(links, base_url=config.base_url),
            monitor=monitor,
            events=events,
        )

    @classmethod
    def from_environment(cls, secrets_client: BaseClient | None = None, **kwargs) -> 'ShortKeyApp':
        """Configure logging, load the configuration from the environment and build the app

        Extra keyword arguments are passed through to from_config().
        """
        initialize_logging()
        return cls.from_config(load_config(secrets_client), **kwargs)

    def start(self) -> 'ShortKeyApp':
        self.monitor.start()
        self.cache.start_sweeper()
        logger.info('Started link shortener.', extra={'baseUrl': self.config.base_url, 'prefix': self.config.prefix})
        return self

    def close(self) -> None:
        self.dao.close()
