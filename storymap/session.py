from __future__ import annotations

import asyncio
import logging
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Protocol, Sequence

from .chatbot import StoryResponder


logger = logging.getLogger(__name__)


class Sender(Enum):
    USER = "user"
    BOT = "bot"


@dataclass(frozen=True)
class ChatMessage:
    text: str
    sender: Sender

    def to_json(self) -> dict:
        return {"text": self.text, "sender": self.sender.value}


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> None: ...


class AsyncioScheduler:
    """Fire-and-forget deferred callbacks on the running event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self.loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        loop = self.loop or asyncio.get_running_loop()
        loop.call_later(delay, callback)


class SleepScheduler:
    """Blocks for the delay, then runs the callback. For synchronous front ends."""

    def __init__(self, sleep: Callable[[float], None] = time.sleep) -> None:
        self.sleep = sleep

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        self.sleep(delay)
        callback()


class ChatSession:
    """
    State of one chat widget: whether the window is open plus the message list.

    Messages are append-only and live only as long as the session object.
    Every accepted submit schedules exactly one bot reply; replies are not
    cancelled or coalesced, and overlapping replies may land in any order.
    """

    def __init__(
        self,
        responder: StoryResponder | None = None,
        scheduler: Scheduler | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.responder = responder or StoryResponder()
        self.scheduler: Scheduler = scheduler or AsyncioScheduler()
        self.rng = rng
        self.is_open = False
        self._messages: List[ChatMessage] = []
        self.pending = 0

    @property
    def messages(self) -> Sequence[ChatMessage]:
        return tuple(self._messages)

    # -----------------
    # Window transitions
    # -----------------
    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        self.is_open = False

    def toggle(self) -> bool:
        self.is_open = not self.is_open
        return self.is_open

    def outside_click(self) -> None:
        if self.is_open:
            self.close()

    # -----------------
    # Messages
    # -----------------
    def submit(self, text: str) -> Optional[ChatMessage]:
        """Append the user's line and schedule the bot reply. Blank input is ignored."""
        cleaned = (text or "").strip()
        if not cleaned:
            return None
        message = ChatMessage(cleaned, Sender.USER)
        self._messages.append(message)

        delay = self.responder.thinking_delay(self.rng)
        self.pending += 1
        logger.debug("reply scheduled in %.3fs (%d pending)", delay, self.pending)
        self.scheduler.call_later(delay, lambda: self._deliver(cleaned))
        return message

    def _deliver(self, text: str) -> None:
        self.pending -= 1
        self._messages.append(ChatMessage(self.responder.respond(text), Sender.BOT))


__all__ = ["AsyncioScheduler", "ChatMessage", "ChatSession", "Scheduler", "Sender", "SleepScheduler"]
