"""In-process realtime transport backing the WebSocket endpoints."""

import asyncio
import itertools
from collections import defaultdict

import structlog

logger = structlog.get_logger()

_subscription_ids = itertools.count(1)


class Subscription:
    """One listener on one channel, with its own bounded outbox."""

    def __init__(self, channel: str, max_pending: int):
        self.id = next(_subscription_ids)
        self.channel = channel
        self.dropped = 0
        self._outbox: asyncio.Queue[dict] = asyncio.Queue(maxsize=max_pending)

    def offer(self, message: dict) -> bool:
        try:
            self._outbox.put_nowait(message)
            return True
        except asyncio.QueueFull:
            self.dropped += 1
            return False

    async def next_message(self) -> dict:
        return await self._outbox.get()


class ChannelHub:
    """Channel registry; ``send`` fans a message out to every current subscriber.

    A slow subscriber whose outbox is full loses the message; the publisher is
    never blocked.
    """

    def __init__(self, max_pending_per_subscriber: int = 100):
        self._max_pending = max_pending_per_subscriber
        self._channels: dict[str, set[Subscription]] = defaultdict(set)

    def subscribe(self, channel: str) -> Subscription:
        subscription = Subscription(channel, self._max_pending)
        self._channels[channel].add(subscription)
        logger.info("realtime_subscribed", channel=channel, subscription_id=subscription.id)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        members = self._channels.get(subscription.channel)
        if not members:
            return
        members.discard(subscription)
        if not members:
            del self._channels[subscription.channel]
        logger.info(
            "realtime_unsubscribed",
            channel=subscription.channel,
            subscription_id=subscription.id,
            dropped=subscription.dropped,
        )

    def subscriber_count(self, channel: str | None = None) -> int:
        if channel is not None:
            return len(self._channels.get(channel, ()))
        return sum(len(members) for members in self._channels.values())

    async def send(self, channel: str, event: str, payload: dict) -> None:
        message = {"event": event, "data": payload}
        for subscription in list(self._channels.get(channel, ())):
            if not subscription.offer(message):
                logger.warning(
                    "realtime_subscriber_lagging",
                    channel=channel,
                    subscription_id=subscription.id,
                    event_name=event,
                )
