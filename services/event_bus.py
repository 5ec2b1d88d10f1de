"""
In-process publish/subscribe channel with typed payloads.

`publish` only enqueues, so state-changing code never waits on
subscribers. Delivery happens in `drain` (or the long-running `run` loop)
in FIFO order, which keeps events for one entity in emission order.
"""

import asyncio
import inspect
import logging
import threading
from collections import deque
from typing import Awaitable, Callable, Deque, Dict, List, Optional, Type, TypeVar, Union

from schemas.events import BaseEvent

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=BaseEvent)
Handler = Callable[[E], Union[None, Awaitable[None]]]


class EventBus:
    """Typed in-process message bus."""

    def __init__(self):
        self._subscribers: Dict[Type[BaseEvent], List[Handler]] = {}
        self._pending: Deque[BaseEvent] = deque()
        self._pending_guard = threading.Lock()
        self._delivery_lock = asyncio.Lock()
        self._wakeup: Optional[asyncio.Event] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def subscribe(self, event_type: Type[E], handler: Handler) -> None:
        """Register a handler for `event_type` (subclasses included)."""
        self._subscribers.setdefault(event_type, []).append(handler)

    def unsubscribe(self, event_type: Type[E], handler: Handler) -> None:
        handlers = self._subscribers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event: BaseEvent) -> None:
        with self._pending_guard:
            self._pending.append(event)
        if self._loop is not None and self._wakeup is not None:
            self._loop.call_soon_threadsafe(self._wakeup.set)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def _handlers_for(self, event: BaseEvent) -> List[Handler]:
        handlers: List[Handler] = []
        for event_type, subscribed in self._subscribers.items():
            if isinstance(event, event_type):
                handlers.extend(subscribed)
        return handlers

    def _next_event(self) -> Optional[BaseEvent]:
        with self._pending_guard:
            return self._pending.popleft() if self._pending else None

    async def drain(self) -> int:
        """Deliver every pending event. Returns how many were delivered."""
        delivered = 0
        async with self._delivery_lock:
            while True:
                event = self._next_event()
                if event is None:
                    break
                await self._deliver(event)
                delivered += 1
        return delivered

    async def _deliver(self, event: BaseEvent) -> None:
        for handler in self._handlers_for(event):
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(
                    f"Subscriber {getattr(handler, '__name__', handler)!r} failed on {event.topic}"
                )

    async def run(self) -> None:
        """Deliver events as they arrive until cancelled."""
        self._loop = asyncio.get_running_loop()
        self._wakeup = asyncio.Event()
        logger.info("Event bus delivery loop started")
        try:
            while True:
                await self.drain()
                await self._wakeup.wait()
                self._wakeup.clear()
        finally:
            self._loop = None
            self._wakeup = None
            logger.info("Event bus delivery loop stopped")
