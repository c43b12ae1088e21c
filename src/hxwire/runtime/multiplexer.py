"""Fan-out of server-sent events to many subscribers."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, Set

logger = logging.getLogger(__name__)


class Subscription:
    """One consumer of events.

    Holds at most one in-flight event. ``send`` never blocks past the
    subscription's cancellation, so a consumer that went away cannot stall
    the publisher.
    """

    def __init__(self) -> None:
        self.queue: "asyncio.Queue[Any]" = asyncio.Queue(maxsize=1)
        self._done = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._done.is_set()

    def is_ready(self) -> bool:
        return not self._done.is_set()

    def cancel(self) -> None:
        self._done.set()

    async def wait(self) -> None:
        """Block until the subscription is cancelled."""
        await self._done.wait()

    async def send(self, event: Any) -> bool:
        """Deliver ``event``. Returns False if the subscription is gone."""
        if not self.is_ready():
            return False
        try:
            self.queue.put_nowait(event)
            return True
        except asyncio.QueueFull:
            pass

        put = asyncio.ensure_future(self.queue.put(event))
        done = asyncio.ensure_future(self._done.wait())
        try:
            await asyncio.wait({put, done}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            done.cancel()
            if not put.done():
                put.cancel()
        if put.done() and not put.cancelled():
            return True
        self.cancel()
        return False

    async def receive(self) -> Optional[Any]:
        """Next event, or None once cancelled and drained."""
        if not self.queue.empty():
            return self.queue.get_nowait()
        if not self.is_ready():
            return None

        get = asyncio.ensure_future(self.queue.get())
        done = asyncio.ensure_future(self._done.wait())
        try:
            await asyncio.wait({get, done}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            done.cancel()
            if not get.done():
                get.cancel()
        if get.done() and not get.cancelled():
            return get.result()
        if not self.queue.empty():
            return self.queue.get_nowait()
        return None


EventGenerator = Callable[[Subscription], Awaitable[None]]


class Multiplexer:
    """Duplicates every sent event to all live subscriptions.

    The last event is replayed to new subscribers. Subscriptions found
    cancelled while sending are dropped after the send.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self.subscriptions: List[Subscription] = []
        self.last_event: Optional[Any] = None
        self._forwarders: Set["asyncio.Future[None]"] = set()

    async def subscribe(self, subscription: Subscription) -> Subscription:
        async with self._lock:
            self.subscriptions.append(subscription)
            if self.last_event is not None:
                await subscription.send(self.last_event)
        return subscription

    async def send(self, event: Any) -> None:
        async with self._lock:
            self.last_event = event
            live = []
            for subscription in self.subscriptions:
                if await subscription.send(event):
                    live.append(subscription)
            if len(live) != len(self.subscriptions):
                logger.debug(
                    "dropped %d closed subscription(s)",
                    len(self.subscriptions) - len(live),
                )
            self.subscriptions = live

    def start(self) -> Subscription:
        """Return a subscription whose events are forwarded to ``send``.

        Cancel the returned subscription to stop forwarding.
        """
        source = Subscription()

        async def forward() -> None:
            while True:
                event = await source.receive()
                if event is None:
                    return
                await self.send(event)

        task = asyncio.ensure_future(forward())
        self._forwarders.add(task)
        task.add_done_callback(self._forwarders.discard)
        return source

    def generator(self) -> EventGenerator:
        """Event generator subscribing each stream to this multiplexer."""

        async def generate(stream: Subscription) -> None:
            await self.subscribe(stream)
            await stream.wait()

        return generate
