from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass

from restbucks.application.use_cases.prepare_orders import PrepareOrders
from restbucks.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from restbucks.infrastructure.db.repositories.payment_repo import SqlAlchemyPaymentRepository
from restbucks.infrastructure.messaging.redis_publisher import RedisEventPublisher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineSettings:
    enabled: bool
    poll_seconds: float
    preparation_seconds: float

    @classmethod
    def from_env(cls) -> EngineSettings:
        return cls(
            enabled=os.getenv("RESTBUCKS_ENGINE_ENABLED", "true").lower() not in {"0", "false", "no"},
            poll_seconds=float(os.getenv("RESTBUCKS_ENGINE_POLL_SECONDS", "1.0")),
            preparation_seconds=float(os.getenv("RESTBUCKS_PREPARATION_SECONDS", "5.0")),
        )


def _run_pass(settings: EngineSettings) -> int:
    use_case = PrepareOrders(
        order_repository=SqlAlchemyOrderRepository(),
        payment_repository=SqlAlchemyPaymentRepository(),
        publisher=RedisEventPublisher(),
        preparation_seconds=settings.preparation_seconds,
    )
    return len(use_case.execute())


async def run_barista(settings: EngineSettings) -> None:
    logger.info("barista_started")
    while True:
        try:
            changed = await asyncio.to_thread(_run_pass, settings)
        except Exception:
            logger.exception("barista_pass_failed")
        else:
            if changed:
                logger.debug("barista_pass_complete")
        await asyncio.sleep(settings.poll_seconds)
