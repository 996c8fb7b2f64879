import threading
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from loguru import logger

from config import settings

from . import flows, intents
from .classifier import Classification, classify
from .detection import CRISIS_PHRASES, detect_emotion, detect_language, is_crisis
from .errors import EmptyMessage
from .flows import FlowState
from .knowledge import KnowledgeChunk
from .messages import crisis_message, fallback_message, generated_suggestions
from .replies import (
    CrisisReply, FallbackReply, GeneratedReply, Reply, ScriptedFlowReply,
    reply_kind, reply_metadata, wants_follow_up,
)
from .signals import IntentCompleted, LoggingSink
from .storage_memory import ConversationContext, ConversationRecord, new_context

LANGS = ("en", "sw")
RISK_ORDER = ("low", "moderate", "high")


class TurnState(Enum):
    IDLE = "idle"
    RECEIVING = "receiving"
    CRISIS_CHECK = "crisis_check"
    CRISIS_RESPONSE = "crisis_response"
    ROUTING = "routing"
    SCRIPTED_FLOW_STEP = "scripted_flow_step"
    RETRIEVAL_GENERATION = "retrieval_generation"
    PERSISTING = "persisting"
    RESPONDED = "responded"


@dataclass(frozen=True)
class TurnResult:
    reply: Reply
    conversation_id: Optional[str]
    language: str
    follow_up: bool = False
    states: Tuple[TurnState, ...] = ()


class PreferenceLookup(Protocol):
    def preferred_language(self, user_id: Optional[str]) -> Optional[str]: ...


class NoPreferences:
    def preferred_language(self, user_id):
        return None


class _KeyLock:
    __slots__ = ("lock", "holders")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.holders = 0


def _raise_risk(current: str, floor: str) -> str:
    return floor if RISK_ORDER.index(floor) > RISK_ORDER.index(current) else current


class CareService:
    """Per-turn controller: crisis gate, routing, generation and best-effort persistence."""

    def __init__(self, store, generator, retriever=None, sink=None, preferences=None,
                 history_turns: int = settings.HISTORY_TURNS,
                 crisis_phrases: Sequence[str] = CRISIS_PHRASES) -> None:
        self.store = store
        self.generator = generator
        self.retriever = retriever
        self.sink = sink or LoggingSink()
        self.preferences = preferences or NoPreferences()
        self.history_turns = history_turns
        self.crisis_phrases = crisis_phrases
        self.persistence_failures = 0
        self._locks: Dict[Tuple[str, str], _KeyLock] = {}
        self._locks_guard = threading.Lock()
        self._pool = ThreadPoolExecutor(max_workers=8, thread_name_prefix="turn")

    @contextmanager
    def _turn_lock(self, session_id: str, channel: str):
        """Serialize turns of one conversation; the lock is dropped once nobody holds or waits on it."""
        key = (session_id, channel)
        with self._locks_guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = _KeyLock()
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._locks_guard:
                entry.holders -= 1
                if not entry.holders:
                    del self._locks[key]

    def handle(self, message: str, session_id: str, channel: str = "web", user_id: Optional[str] = None,
               language: Optional[str] = None, assistant: str = "care",
               flow: Optional[FlowState] = None) -> TurnResult:
        text = (message or "").strip()
        if not text:
            raise EmptyMessage()

        with self._turn_lock(session_id, channel):
            states: List[TurnState] = [TurnState.RECEIVING, TurnState.CRISIS_CHECK]
            requested = language if language in LANGS else None

            if self._is_crisis(text):
                lang = requested or detect_language(text)
                states.append(TurnState.CRISIS_RESPONSE)
                content, suggestions = crisis_message(lang)
                reply: Reply = CrisisReply(content, suggestions, lang)
                states.append(TurnState.PERSISTING)
                cid = self._persist(None, session_id, channel, user_id, text, reply, lang, risk="high")
                return self._respond(reply, cid, lang, session_id, channel, states)

            conversation, history = self._load(session_id, channel, user_id, requested or detect_language(text))
            lang = self._resolve_language(text, requested, conversation)

            states.append(TurnState.ROUTING)
            classification = classify(text, assistant)
            cid = conversation["id"] if conversation else None
            preferred = None
            risk = None
            clears_risk = False

            if flow is not None and flows.accepts(flow, text):
                states.append(TurnState.SCRIPTED_FLOW_STEP)
                turn = flows.advance(flow, text, lang)
                reply = ScriptedFlowReply(turn.message, turn.suggestions, lang, category="flow", flow=turn.state)
                if turn.state.answers.get("tier") == "significant":
                    risk = "moderate"
                if turn.completed:
                    self._emit(IntentCompleted(turn.completed, session_id, channel, cid, dict(turn.state.answers)))
            elif classification.flow:
                states.append(TurnState.SCRIPTED_FLOW_STEP)
                turn = flows.start(classification.flow, lang)
                reply = ScriptedFlowReply(turn.message, turn.suggestions, lang, category="flow", flow=turn.state)
            elif classification.intent:
                states.append(TurnState.SCRIPTED_FLOW_STEP)
                reply, risk, clears_risk = self._intent_reply(classification, text, lang)
            else:
                states.append(TurnState.RETRIEVAL_GENERATION)
                reply, preferred = self._generate(text, lang, classification, conversation, history,
                                                  user_id, assistant)

            states.append(TurnState.PERSISTING)
            cid = self._persist(conversation, session_id, channel, user_id, text, reply, lang,
                                topic=classification.topic, risk=risk, clears_risk=clears_risk,
                                preferred=preferred)
            return self._respond(reply, cid, lang, session_id, channel, states)

    def _is_crisis(self, text: str) -> bool:
        try:
            return is_crisis(text, self.crisis_phrases)
        except Exception:
            logger.opt(exception=True).critical("crisis matching raised; treating message as non-crisis")
            return False

    def _load(self, session_id, channel, user_id, lang) -> Tuple[Optional[ConversationRecord], List[Dict]]:
        try:
            conversation = self.store.find_or_create(session_id, channel, user_id=user_id, language=lang)
            history = self.store.recent_messages(conversation["id"], self.history_turns)
            return conversation, history
        except Exception:
            self._persistence_failed(f"could not load conversation {channel}:{session_id}")
            return None, []

    def _resolve_language(self, text: str, requested: Optional[str],
                          conversation: Optional[ConversationRecord]) -> str:
        if requested:
            return requested
        preference = (conversation or {}).get("context", {}).get("language_preference")
        if preference in LANGS:
            return preference
        return detect_language(text)

    def _intent_reply(self, c: Classification, text: str, lang: str):
        knowledge: Sequence[KnowledgeChunk] = ()
        if c.intent == "topic_faqs" and c.topic and self.retriever is not None:
            knowledge = self.retriever.from_pack(c.topic, lang)
        result = intents.respond(c, text, lang, knowledge)
        reply = ScriptedFlowReply(
            result.content, result.suggestions, lang,
            category=result.category, priority=result.priority,
            flow=result.flow, action=result.action, intent=c.intent, translated=result.translated,
        )
        return reply, result.risk_floor, result.clears_risk

    def _retrieve(self, text: str, lang: str, topic: Optional[str]) -> List[KnowledgeChunk]:
        if self.retriever is None:
            return []
        try:
            return self.retriever.search(text, lang, topic)
        except Exception:
            logger.opt(exception=True).warning("retrieval raised, continuing without context")
            return []

    def _preferred_language(self, user_id: Optional[str]) -> Optional[str]:
        if not user_id:
            return None
        try:
            found = self.preferences.preferred_language(user_id)
        except Exception as e:
            logger.warning(f"profile language lookup failed for user={user_id}: {e}")
            return None
        return found if found in LANGS else None

    def _generate(self, text, lang, classification, conversation, history, user_id, assistant):
        # retrieval and the profile lookup have no ordering dependency
        knowledge_f = self._pool.submit(self._retrieve, text, lang, classification.topic)
        preferred_f = self._pool.submit(self._preferred_language, user_id)
        knowledge = knowledge_f.result()
        preferred = preferred_f.result()

        context = conversation["context"] if conversation else None
        generation = self.generator.generate(text, context, lang, knowledge, history, assistant)
        if generation.fallback:
            content, suggestions = fallback_message(lang)
            return FallbackReply(content, suggestions, lang, reason=generation.reason or ""), preferred
        degraded = any(c.translated for c in knowledge)
        return GeneratedReply(generation.text, generated_suggestions(lang), lang,
                              knowledge_used=len(knowledge), degraded=degraded), preferred

    def _emit(self, signal: IntentCompleted) -> None:
        try:
            self.sink.emit(signal)
        except Exception:
            logger.exception(f"notification sink failed for {signal.kind}")

    def _persistence_failed(self, what: str) -> None:
        self.persistence_failures += 1
        logger.bind(channel="persistence").exception(what)

    def _merge_context(self, current: ConversationContext, text: str, topic, risk, clears_risk,
                       preferred) -> ConversationContext:
        ctx = new_context()
        ctx.update(current or {})
        topics = list(ctx["topics_discussed"])
        if topic and topic not in topics:
            topics.append(topic)
        ctx["topics_discussed"] = topics
        ctx["emotional_state"] = detect_emotion(text)
        if clears_risk:
            ctx["risk_level"] = "low"
        if risk:
            ctx["risk_level"] = _raise_risk(ctx["risk_level"], risk)
        ctx["session_count"] = int(ctx["session_count"]) + 1
        if preferred:
            ctx["language_preference"] = preferred
        return ctx

    def _persist(self, conversation, session_id, channel, user_id, text, reply: Reply, lang,
                 topic=None, risk=None, clears_risk=False, preferred=None) -> Optional[str]:
        cid = conversation["id"] if conversation else None
        try:
            if cid is None:
                cid = self.store.find_or_create(session_id, channel, user_id=user_id, language=lang)["id"]
            self.store.append_message(cid, "user", text, {"language": lang})
            self.store.append_message(cid, "assistant", reply.content, reply_metadata(reply))
            # re-read so the whole-object replacement merges onto the latest context
            latest = self.store.get(session_id, channel)
            current = latest["context"] if latest else new_context()
            ctx = self._merge_context(current, text, topic, risk, clears_risk, preferred)
            self.store.update_context(cid, ctx, language=lang)
        except Exception:
            self._persistence_failed(f"could not persist turn for {channel}:{session_id}")
        return cid

    def _respond(self, reply: Reply, cid, lang, session_id, channel, states) -> TurnResult:
        states.append(TurnState.RESPONDED)
        logger.info(f"turn done session={session_id} channel={channel} kind={reply_kind(reply)} lang={lang}")
        return TurnResult(reply, cid, lang, follow_up=wants_follow_up(reply), states=tuple(states))

    def history(self, session_id: str, channel: str = "web", limit: int = 10) -> List[Dict]:
        conversation = self.store.get(session_id, channel)
        if not conversation:
            return []
        return self.store.recent_messages(conversation["id"], limit)
