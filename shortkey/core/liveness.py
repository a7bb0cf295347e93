"""Background liveness monitoring of the store connection set

The monitor pings every session of the connection set on a fixed interval and
tracks consecutive ping failures. The process is terminated once the store has
been unreachable for long enough, so that a supervisor can restart it.

States:
    HEALTHY  : the last cycle pinged every session successfully
    DEGRADED : at least one ping failed since the last fully healthy cycle
    FAILED   : failures exceeded failure_threshold * threshold_multiplier (terminal)

Every state change is published as a HealthTransition on the events queue.

Classes:
    Health:
        Monitor state (StrEnum).
    HealthTransition:
        Message describing one state change.
    LivenessMonitor:
        Ticker running ping cycles in a daemon thread.

Example:
    >>> events = queue.Queue()
    >>> monitor = LivenessMonitor(dao, LivenessSettings(), events=events)
    >>> monitor.start()
    >>> events.get()
    HealthTransition(previous=<Health.HEALTHY: 'healthy'>, current=<Health.DEGRADED: 'degraded'>, failures=1)
"""

import os
import time
import queue
import logging
import threading
from enum import StrEnum
from dataclasses import dataclass
from collections.abc import Callable
from typing import Protocol

from shortkey.constants import Connections, HEALTH_TRANSITION, STORE_PING_FAILED
from shortkey.dao.exceptions import StoreUnavailableError
from shortkey.utils.config import LivenessSettings


logger = logging.getLogger(__name__)


class Health(StrEnum):
    HEALTHY = 'healthy'
    DEGRADED = 'degraded'
    FAILED = 'failed'


@dataclass(frozen=True)
class HealthTransition:
    previous: Health
    current: Health
    failures: int


class Pingable(Protocol):
    def ping(self, name: str) -> bool: ...


type FatalHandler = Callable[[StoreUnavailableError], None]


# Order in which sessions are pinged every cycle
PING_ORDER = (Connections.ADMIN, Connections.GETTER, Connections.PUSHER)


def terminate_process(error: StoreUnavailableError) -> None:
    """Default fatal handler: log, flush handlers and exit with status 1"""
    logger.critical(str(error), extra={'errorCode': error.error_code})
    logging.shutdown()
    os._exit(1)


class LivenessMonitor:
    """Ping the store connection set periodically and escalate persistent failures

    Attributes:
        connections (Pingable):
            Connection set exposing ping(name) -> bool, which never raises.
        settings (LivenessSettings):
            Tick interval and failure thresholds.
        events (queue.Queue[HealthTransition]):
            Queue receiving every state transition.
        on_fatal (FatalHandler):
            Called once with a StoreUnavailableError on entering FAILED.
            Terminates the process by default.

    Methods:
        run_cycle() -> Health:
            Ping every session once and update the state.
        start() -> threading.Thread:
            Run cycles forever in a daemon thread (idempotent).
    """

    def __init__(
        self,
        connections: Pingable,
        settings: LivenessSettings | None = None,
        events: queue.Queue | None = None,
        on_fatal: FatalHandler | None = None,
    ):
        self.connections = connections
        self.settings = settings or LivenessSettings()
        self.events = events if events is not None else queue.Queue()
        self.on_fatal = on_fatal or terminate_process
        self._state = Health.HEALTHY
        self._failures = 0
        self._thread: threading.Thread | None = None

    @property
    def state(self) -> Health:
        return self._state

    @property
    def failures(self) -> int:
        return self._failures

    def run_cycle(self) -> Health:
        """Ping admin, getter and pusher in that order and update the state

        Failures accumulate across cycles. The counter is reset only after a
        cycle in which every ping succeeded.

        Returns:
            Health: the state after this cycle.
        """
        if self._state is Health.FAILED:
            return self._state

        cycle_failed = False
        for name in PING_ORDER:
            if self.connections.ping(name):
                continue
            cycle_failed = True
            self._failures += 1
            logger.warning(
                'Store ping failed.',
                extra={'connection': name.value, 'failures': self._failures, 'event': STORE_PING_FAILED},
            )

        if not cycle_failed:
            self._failures = 0
            self._transition(Health.HEALTHY)
        elif self._failures > self.settings.fatal_limit:
            self._transition(Health.FAILED)
            self.on_fatal(
                StoreUnavailableError(
                    f'store unreachable: {self._failures} ping failures exceeded the limit of {self.settings.fatal_limit}'
                )
            )
        else:
            self._transition(Health.DEGRADED)
        return self._state

    def start(self) -> threading.Thread:
        if self._thread is None:
            self._thread = threading.Thread(target=self._run_forever, name='store-liveness', daemon=True)
            self._thread.start()
        return self._thread

    def _run_forever(self) -> None:
        while self._state is not Health.FAILED:
            time.sleep(self.settings.interval)
            self.run_cycle()

    def _transition(self, current: Health) -> None:
        previous = self._state
        if previous is current:
            return
        self._state = current
        self.events.put(HealthTransition(previous=previous, current=current, failures=self._failures))

        log = logger.info if current is Health.HEALTHY else logger.warning
        log(
            'Store health changed.',
            extra={'previous': previous.value, 'current': current.value, 'failures': self._failures, 'event': HEALTH_TRANSITION},
        )
