"""
Subscriber registry and fan-out.

Each subscriber owns a bounded asyncio.Queue drained by its own connection
task. publish() only ever calls put_nowait, so ingestion never waits on a
slow client. A subscriber whose queue fills up is evicted and handed a close
sentinel; the client reconnects and gets a fresh init snapshot instead of a
silent gap.

Must be driven from the event loop thread (asyncio.Queue is not thread-safe).
"""

import asyncio
import itertools
import logging
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 1000

# Queued in place of a message when the subscriber has been evicted.
CLOSE = None

_ids = itertools.count(1)


class Subscriber:
    def __init__(self, queue_size: int, watermark: int):
        self.id = next(_ids)
        self.queue: asyncio.Queue[Optional[dict]] = asyncio.Queue(maxsize=queue_size + 1)
        self.queue_size = queue_size
        # Sequence number of the last event already included in the init snapshot.
        self.watermark = watermark
        self.evicted = False

    def offer(self, message: dict) -> bool:
        """Enqueue without blocking. False when the queue is over its bound."""
        if self.queue.qsize() >= self.queue_size:
            return False
        self.queue.put_nowait(message)
        return True

    def close(self):
        """Discard pending messages and leave only the close sentinel."""
        self.evicted = True
        while not self.queue.empty():
            self.queue.get_nowait()
        self.queue.put_nowait(CLOSE)

    async def next_message(self) -> Optional[dict]:
        return await self.queue.get()

    def __repr__(self):
        return f"Subscriber(id={self.id}, pending={self.queue.qsize()})"


class Broadcaster:
    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE):
        self.queue_size = queue_size
        self._subscribers: dict[int, Subscriber] = {}

    def __len__(self) -> int:
        return len(self._subscribers)

    def subscribe(self, init_message: dict, watermark: int) -> Subscriber:
        """Register a subscriber whose first message is `init_message`."""
        subscriber = Subscriber(self.queue_size, watermark)
        subscriber.queue.put_nowait(init_message)
        self._subscribers[subscriber.id] = subscriber
        return subscriber

    def unsubscribe(self, subscriber: Subscriber) -> bool:
        """Remove a subscriber. Safe to call more than once."""
        return self._subscribers.pop(subscriber.id, None) is not None

    def publish(self, message: dict, seq: int) -> int:
        """
        Offer `message` to every registered subscriber.

        Returns the number of subscribers it was queued for. Subscribers that
        cannot take it are evicted; a failure on one never affects the rest.
        """
        delivered = 0
        # Copy: eviction mutates the registry mid-loop.
        for subscriber in list(self._subscribers.values()):
            if seq <= subscriber.watermark:
                continue
            try:
                if subscriber.offer(message):
                    delivered += 1
                    continue
                logger.warning(
                    "Subscriber %d fell %d messages behind, disconnecting",
                    subscriber.id, subscriber.queue_size,
                )
            except Exception:
                logger.exception("Failed to queue event for subscriber %d", subscriber.id)
            self._evict(subscriber)
        return delivered

    def _evict(self, subscriber: Subscriber):
        self.unsubscribe(subscriber)
        subscriber.close()
