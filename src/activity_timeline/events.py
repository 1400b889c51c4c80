"""Change notifications for presentation-layer subscribers.

Every accepted mutation is published to subscriber queues so views can
re-read the timeline without polling.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import AsyncGenerator, Optional

logger = logging.getLogger(__name__)

LOG_SUBMITTED = "log:submitted"
COMMENT_POSTED = "comment:posted"
COMMENT_READ = "comment:read"
GROUPS_LOADED = "groups:loaded"


class TimelineEvents:
    """Fans timeline events out to subscriber queues."""

    def __init__(self, max_queue_size: int = 100):
        self.max_queue_size = max_queue_size
        self._subscribers: list[asyncio.Queue] = []
        self._last_event: Optional[datetime] = None
        self._event_count = 0

    async def subscribe(self) -> AsyncGenerator[dict, None]:
        """Subscribe to timeline events.

        Yields:
            Event dictionaries with type, timestamp, count and event data.
        """
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.max_queue_size)
        self._subscribers.append(queue)

        try:
            yield {
                "type": "heartbeat",
                "timestamp": datetime.now().isoformat(),
            }

            while True:
                event = await queue.get()
                yield event

        finally:
            if queue in self._subscribers:
                self._subscribers.remove(queue)

    def publish(self, event_type: str, **data) -> dict:
        """Publish an event to all subscribers.

        Subscribers whose queue is full are dropped.
        """
        self._last_event = datetime.now()
        self._event_count += 1

        event = {
            "type": event_type,
            "timestamp": self._last_event.isoformat(),
            "count": self._event_count,
            **data,
        }

        dead_queues = []
        for queue in self._subscribers:
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning(f"Subscriber queue full, dropping subscriber after {event_type}")
                dead_queues.append(queue)

        for queue in dead_queues:
            if queue in self._subscribers:
                self._subscribers.remove(queue)

        return event

    def get_stats(self) -> dict:
        """Get event statistics."""
        return {
            "subscribers": len(self._subscribers),
            "last_event": self._last_event.isoformat() if self._last_event else None,
            "event_count": self._event_count,
        }
