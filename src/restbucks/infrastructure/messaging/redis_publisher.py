from __future__ import annotations

import logging

from restbucks.application.ports.publisher import EventPublisher
from restbucks.infrastructure.cache.redis_client import get_redis_client, redis_configured

logger = logging.getLogger(__name__)


class RedisEventPublisher(EventPublisher):
    def __init__(self, timeout_seconds: float = 1.0) -> None:
        self._timeout_seconds = timeout_seconds

    def publish(self, channel: str, message: str) -> None:
        if not redis_configured():
            logger.debug("event_not_published", extra={"channel": channel})
            return
        receivers = get_redis_client(timeout_seconds=self._timeout_seconds).publish(channel, message)
        if not receivers:
            logger.debug("event_without_subscribers", extra={"channel": channel})
