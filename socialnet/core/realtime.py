"""
Real-time push over Redis pub/sub.

Every user has a channel (`<prefix><user_id>`); a websocket gateway
subscribes to it and forwards events to connected clients. Publishing is
fire-and-forget: a failed publish is logged and never fails the request.
"""

import json
import logging
from typing import Any, Dict, Iterable, Optional

import redis.asyncio as redis

from socialnet.config import Settings

logger = logging.getLogger(__name__)


class RealtimePublisher:
    """Publishes `{event, payload}` envelopes to per-user Redis channels."""

    def __init__(self, settings: Settings, redis_client: Optional[redis.Redis] = None):
        self.redis_url = settings.redis_url
        self.channel_prefix = settings.realtime_channel_prefix
        self.redis_client = redis_client

    async def connect(self) -> None:
        """Open the Redis connection pool."""
        try:
            self.redis_client = redis.Redis.from_url(
                self.redis_url, decode_responses=True, socket_keepalive=True
            )
            await self.redis_client.ping()
            logger.info("Redis connection established for real-time push")
        except Exception as e:
            # Push is optional, requests keep working without it
            logger.warning(f"Real-time push unavailable: {e}")
            self.redis_client = None

    async def disconnect(self) -> None:
        if self.redis_client:
            await self.redis_client.aclose()
            self.redis_client = None

    def channel_for(self, user_id: int) -> str:
        return f"{self.channel_prefix}{user_id}"

    async def publish(self, target_user_id: int, event: str, payload: Dict[str, Any]) -> None:
        """
        Publish an event to one user.

        Args:
            target_user_id: Recipient of the event
            event: Event name (`message:new`, `conversation:new`)
            payload: JSON-serializable payload
        """
        if not self.redis_client:
            logger.debug(f"Skipping {event} for user {target_user_id}: push not connected")
            return

        envelope = json.dumps({"event": event, "payload": payload}, default=str)
        try:
            await self.redis_client.publish(self.channel_for(target_user_id), envelope)
        except Exception as e:
            logger.warning(f"Failed to publish {event} to user {target_user_id}: {e}")

    async def publish_many(
        self, target_user_ids: Iterable[int], event: str, payload: Dict[str, Any]
    ) -> None:
        for user_id in target_user_ids:
            await self.publish(user_id, event, payload)
