"""
Broadcast expiry checker.

Periodically marks job broadcasts whose expires_at has passed as EXPIRED
and notifies the customer.

Runs as an asyncio task in backend lifespan.
Uses synchronous DB and Redis (via asyncio.to_thread).
"""

import asyncio
import logging

from sqlalchemy.orm import sessionmaker

from .dispatch import expire_overdue_broadcasts
from .events import EventEmitter

logger = logging.getLogger(__name__)


async def broadcast_expiry_loop(
    session_factory: sessionmaker,
    events: EventEmitter,
    interval: float,
) -> None:
    logger.info("broadcast_expiry_loop started")

    try:
        while True:
            try:
                await asyncio.to_thread(_expire_broadcasts, session_factory, events)
            except asyncio.CancelledError:
                logger.info("broadcast_expiry_loop cancelled")
                raise
            except Exception:
                logger.exception("broadcast_expiry_loop error")

            await asyncio.sleep(interval)
    except asyncio.CancelledError:
        pass


def _expire_broadcasts(session_factory: sessionmaker, events: EventEmitter) -> None:
    db = session_factory()
    try:
        expired = expire_overdue_broadcasts(db, events)
        if expired:
            logger.info(f"Expired {expired} broadcast(s)")
    finally:
        db.close()
