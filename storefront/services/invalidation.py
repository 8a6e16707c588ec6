"""
Invalidation bus for cart and coin views.

After a redemption is committed or reverted, every view of the cart totals and
every view of the coin balance must observe the new state. Publishing a topic
starts a new cache generation for the session's tag and notifies subscribed
views so they re-fetch.
"""
import logging
from typing import Callable
from blinker import Namespace

from ..utils.cache import get_cache_tag, invalidate_tag

logger = logging.getLogger(__name__)

CARTS = 'carts'
COINS = 'coins'
TOPICS = (CARTS, COINS)


class InvalidationBus:
    """
    Two-topic publish/subscribe for cache invalidation.

    Receivers are called as receiver(bus, topic=..., cache_id=...).
    """

    def __init__(self):
        self._signals = Namespace()

    def _signal(self, topic: str):
        if topic not in TOPICS:
            raise ValueError(f'Unknown invalidation topic: {topic}')
        return self._signals.signal(topic)

    def subscribe(self, topic: str, receiver: Callable) -> None:
        self._signal(topic).connect(receiver, weak=False)

    def unsubscribe(self, topic: str, receiver: Callable) -> None:
        self._signal(topic).disconnect(receiver)

    def publish(self, *topics: str, cache_id: str = None) -> None:
        """
        Invalidate topics for one customer session.

        Callers publish CARTS and COINS together after any redemption change so
        totals and balances never diverge.
        """
        for topic in topics:
            signal = self._signal(topic)
            invalidate_tag(get_cache_tag(topic, cache_id))
            signal.send(self, topic=topic, cache_id=cache_id)
        logger.debug('Published invalidation for %s (cache_id=%s)', ', '.join(topics), cache_id)
