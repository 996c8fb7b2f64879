"""Web chat widget session: message bubbles, client-held flow state and scheduled work.

Everything a widget schedules lives in a ``TaskRegistry`` under the widget's
conversation key and is cancelled by ``close()``. After close, no callback
touches the bubbles again.

This is the library API for in-process web clients. The HTTP surface in
``fastapi_app`` serves stateless clients that hold their own flow state.
"""
import asyncio
import uuid
from dataclasses import dataclass, replace
from typing import List, Optional, Set, Tuple

from config import settings

from .errors import EmptyMessage
from .flows import FlowState
from .intents import START_BREATHING_TIMER
from .messages import follow_up_message, greeting
from .replies import ScriptedFlowReply
from .scheduler import TaskRegistry
from .timer import BreathingTimer

TIMER_STOPPED = "\n\n⏹️ Timer stopped."


@dataclass(frozen=True)
class Bubble:
    id: str
    role: str
    content: str
    suggestions: Tuple[str, ...] = ()
    category: str = "general"
    priority: str = "normal"


def _bubble_id() -> str:
    return uuid.uuid4().hex


class ChatWidget:
    def __init__(self, service, session_id: Optional[str] = None, channel: str = "web",
                 user_id: Optional[str] = None, role: Optional[str] = None, name: Optional[str] = None,
                 language: Optional[str] = None, assistant: Optional[str] = None,
                 registry: Optional[TaskRegistry] = None,
                 follow_up_delay: float = settings.FOLLOW_UP_DELAY_SECONDS,
                 timer_seconds: int = settings.BREATHING_TIMER_SECONDS,
                 tick_interval: float = 1.0):
        self.service = service
        self.session_id = session_id or uuid.uuid4().hex
        self.channel = channel
        self.user_id = user_id
        self.role = role
        self.name = name
        self.language = language
        self.assistant = assistant or ("pharmacy" if role == "retail" else "care")
        self.registry = registry or TaskRegistry()
        self.follow_up_delay = follow_up_delay
        self.timer_seconds = timer_seconds
        self.tick_interval = tick_interval

        self.messages: List[Bubble] = []
        self.flow: Optional[FlowState] = None
        self.is_open = False
        self._timer_bubbles: Set[str] = set()

    @property
    def key(self) -> str:
        return f"{self.channel}:{self.session_id}"

    def open(self) -> Bubble:
        self.is_open = True
        content, suggestions = greeting(self.role, self.name, self.language or "en")
        bubble = Bubble(_bubble_id(), "assistant", content, suggestions)
        self.messages.append(bubble)
        return bubble

    def _require_open(self) -> None:
        if not self.is_open:
            raise RuntimeError("chat widget is closed")

    def _append(self, bubble: Bubble) -> Bubble:
        self.messages.append(bubble)
        return bubble

    def _update(self, bubble_id: str, content: str, suggestions: Optional[Tuple[str, ...]] = None) -> bool:
        """Rewrite one bubble in place; no-op once the widget is closed."""
        if not self.is_open:
            return False
        for i, b in enumerate(self.messages):
            if b.id == bubble_id:
                changes = {"content": content}
                if suggestions is not None:
                    changes["suggestions"] = suggestions
                self.messages[i] = replace(b, **changes)
                return True
        return False

    async def send(self, text: str) -> Optional[Bubble]:
        self._require_open()
        if not (text or "").strip():
            raise EmptyMessage()
        self._append(Bubble(_bubble_id(), "user", text.strip()))

        result = await asyncio.to_thread(
            self.service.handle, text, self.session_id, self.channel, self.user_id,
            self.language, self.assistant, self.flow,
        )
        if not self.is_open:
            # closed while the turn was in flight
            return None

        reply = result.reply
        flow = reply.flow if isinstance(reply, ScriptedFlowReply) else None
        self.flow = flow if flow is not None and flow.active else None
        bubble = self._append(Bubble(_bubble_id(), "assistant", reply.content, tuple(reply.suggestions),
                                     reply.category, reply.priority))

        if isinstance(reply, ScriptedFlowReply) and reply.action == START_BREATHING_TIMER:
            self.start_breathing_timer(result.language)
        if result.follow_up:
            self.schedule_follow_up(reply.category, result.language)
        return bubble

    def schedule_follow_up(self, category: str, lang: str = "en"):
        self._require_open()
        self.registry.cancel(self.key, kind="follow_up")
        return self.registry.call_later(self.key, self.follow_up_delay,
                                        lambda: self._post_follow_up(category, lang), kind="follow_up")

    def _post_follow_up(self, category: str, lang: str) -> None:
        if not self.is_open:
            return
        content, suggestions = follow_up_message(category, lang)
        self._append(Bubble(_bubble_id(), "assistant", content, suggestions, category))

    def start_breathing_timer(self, lang: Optional[str] = None) -> Bubble:
        self._require_open()
        timer = BreathingTimer(self.timer_seconds, self.tick_interval, lang or self.language or "en")
        bubble = self._append(Bubble(_bubble_id(), "assistant", timer.render(0)))
        self._timer_bubbles.add(bubble.id)
        self.registry.spawn(self.key, self._run_timer(bubble.id, timer), kind="timer")
        return bubble

    async def _run_timer(self, bubble_id: str, timer: BreathingTimer) -> None:
        await timer.run(lambda content: self._update(bubble_id, content))
        self._timer_bubbles.discard(bubble_id)
        content, suggestions = timer.completion()
        self._update(bubble_id, content, suggestions)

    def stop_timers(self) -> int:
        stopped = self.registry.cancel(self.key, kind="timer")
        for bubble_id in list(self._timer_bubbles):
            for b in self.messages:
                if b.id == bubble_id:
                    self._update(bubble_id, b.content + TIMER_STOPPED)
        self._timer_bubbles.clear()
        return stopped

    def close(self) -> None:
        self.is_open = False
        self.registry.cancel(self.key)
        self._timer_bubbles.clear()
        self.flow = None

    def dispose(self) -> None:
        self.close()
        self.messages.clear()
