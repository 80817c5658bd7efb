"""
backend/automarket/services/events.py

Event emitter: pushes live-update events to Redis queues consumed by the
realtime gateway (customer / technician / vendor / admin channels).

Two queues:
- events:p2p: instant delivery to specific users (recipients list)
- events:broadcast: throttled delivery to everyone subscribed to a channel
"""

import json
import logging
import time

from fastapi import Request
from redis import Redis

logger = logging.getLogger(__name__)

P2P_QUEUE = "events:p2p"
BROADCAST_QUEUE = "events:broadcast"


class EventEmitter:
    def __init__(self, redis: Redis):
        self.redis = redis

    def emit(self, event_type: str, payload: dict, recipients: list[int]) -> None:
        """Push a p2p event for the given user ids."""
        if not recipients:
            return
        event = {
            "type": event_type,
            "recipients": recipients,
            **payload,
            "ts": int(time.time()),
        }
        self._push(P2P_QUEUE, event)

    def broadcast(self, event_type: str, payload: dict) -> None:
        event = {
            "type": event_type,
            **payload,
            "ts": int(time.time()),
        }
        self._push(BROADCAST_QUEUE, event)

    def _push(self, queue: str, event: dict) -> None:
        try:
            self.redis.rpush(queue, json.dumps(event, default=str))
            logger.info(f"Event emitted: {event['type']} → {queue}")
        except Exception as e:
            logger.error(f"Failed to emit event {event['type']}: {e}")


# Dependency for FastAPI
def get_events(request: Request) -> EventEmitter:
    return request.app.state.events
