import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from care import flows
from care.errors import EmptyMessage, StorageError, UpstreamTimeout
from care.generator import ResponseGenerator
from care.messages import fallback_message
from care.replies import CrisisReply, FallbackReply, GeneratedReply, ScriptedFlowReply
from care.services import CareService, TurnState
from care.storage_memory import InMemoryConversationStore

from conftest import FakeLLM, RecordingSink, SpyRetriever


def context_of(store, session_id="s1", channel="web"):
    return store.get(session_id, channel)["context"]


def test_crisis_short_circuits_before_retrieval_and_generation(service, llm, retriever, store):
    result = service.handle("I want to kill myself", "s1")
    assert isinstance(result.reply, CrisisReply)
    assert result.reply.priority == "crisis"
    assert result.reply.suggestions == ("I am safe", "I need immediate help", "I want to talk to a counselor")
    assert llm.calls == [] and retriever.searches == []
    assert TurnState.CRISIS_RESPONSE in result.states
    assert TurnState.ROUTING not in result.states
    assert context_of(store)["risk_level"] == "high"
    assert [m["role"] for m in service.history("s1")] == ["user", "assistant"]


def test_crisis_wins_over_an_active_flow_and_is_localized(service):
    pending = flows.start(flows.CIRCUMCISION, "sw").state
    result = service.handle("Nataka kujiua", "s1", flow=pending)
    assert isinstance(result.reply, CrisisReply)
    assert result.language == "sw"
    assert "Niko salama" in result.reply.suggestions


def test_high_risk_is_sticky_until_safety_is_confirmed(service, store):
    service.handle("I want to end my life", "s1")
    service.handle("I had a long day", "s1")
    assert context_of(store)["risk_level"] == "high"
    service.handle("I am safe", "s1")
    assert context_of(store)["risk_level"] == "low"


def test_dosage_calculation_is_scripted_and_schedules_follow_up(service, llm):
    result = service.handle("calculate amoxicillin 20 kg", "s1", assistant="pharmacy")
    assert isinstance(result.reply, ScriptedFlowReply)
    assert "500 mg/day" in result.reply.content
    assert "166–167 mg" in result.reply.content
    assert result.follow_up
    assert llm.calls == []


def test_pending_self_check_scores_to_significant(service, store):
    pending = flows.start(flows.SELF_CHECK, "en", "stress").state
    result = service.handle("Stress: 2,2,1", "s1", flow=pending)
    assert "Stress total: 5" in result.reply.content
    assert "Talk to a counselor" in result.reply.suggestions
    assert result.reply.flow.status == "completed"
    assert context_of(store)["risk_level"] == "moderate"


def test_open_dialogue_retrieves_then_generates(service, llm, retriever, store):
    result = service.handle("I had a long day and my sister is sick", "s1")
    assert isinstance(result.reply, GeneratedReply)
    assert len(retriever.searches) == 1 and len(llm.calls) == 1
    ctx = context_of(store)
    assert ctx["session_count"] == 1
    assert ctx["emotional_state"] == "neutral"


def test_history_is_replayed_in_order(service, llm):
    service.handle("First I lost my job", "s1")
    service.handle("Then my landlord called", "s1")
    prompt = [m["content"] for m in llm.calls[-1] if m["role"] in ("user", "assistant")]
    assert prompt[0] == "First I lost my job"
    assert prompt[-1] == "Then my landlord called"


def test_llm_failure_still_answers(store, retriever, sink):
    svc = CareService(store, ResponseGenerator(FakeLLM(error=UpstreamTimeout())), retriever, sink)
    result = svc.handle("I had a long day", "s1")
    assert isinstance(result.reply, FallbackReply)
    assert result.reply.content == fallback_message("en")[0]
    assert "Try again" in result.reply.suggestions


class BrokenStore(InMemoryConversationStore):
    def find_or_create(self, *args, **kwargs):
        raise StorageError("database is down")


def test_persistence_failure_is_not_fatal(retriever, sink):
    svc = CareService(BrokenStore(), ResponseGenerator(FakeLLM()), retriever, sink)
    result = svc.handle("I had a long day", "s1")
    assert result.reply.content
    assert result.conversation_id is None
    assert svc.persistence_failures >= 1


def test_empty_message_is_rejected_without_state_change(service, store):
    with pytest.raises(EmptyMessage):
        service.handle("   ", "s1")
    assert store.get("s1", "web") is None


def test_crisis_matcher_error_fails_safe_to_non_crisis(store, retriever, sink):
    svc = CareService(store, ResponseGenerator(FakeLLM()), retriever, sink, crisis_phrases=None)
    result = svc.handle("hello there", "s1")
    assert isinstance(result.reply, GeneratedReply)


def test_booking_terminal_emits_intent_completed(service, sink):
    state = flows.start(flows.HIV_SELF_TEST, "en").state
    for answer in ("yes", "yes", "yes"):
        state = service.handle(answer, "s1", flow=state).reply.flow
    result = service.handle("Arusha", "s1", flow=state)
    assert result.reply.flow.status == "completed"
    assert [s.kind for s in sink.signals] == ["hiv_kit_order"]
    assert sink.signals[0].answers["delivery_area"] == "Arusha"
    assert sink.signals[0].conversation_id == result.conversation_id


class SwahiliProfile:
    def preferred_language(self, user_id):
        return "sw"


def test_profile_language_preference_applies_to_later_turns(store, llm):
    svc = CareService(store, ResponseGenerator(llm), SpyRetriever(), RecordingSink(), preferences=SwahiliProfile())
    first = svc.handle("I had a long day", "s1", user_id="u1")
    assert first.language == "en"
    assert context_of(store)["language_preference"] == "sw"
    assert svc.handle("I had another long day", "s1", user_id="u1").language == "sw"


def test_channels_keep_separate_conversations(service):
    web = service.handle("I had a long day", "255700000001", channel="web")
    wa = service.handle("I had a long day", "255700000001", channel="whatsapp")
    assert web.conversation_id != wa.conversation_id


class SlowLLM(FakeLLM):
    def __init__(self):
        super().__init__()
        self.active = 0
        self.peak = 0
        self._guard = threading.Lock()

    def complete(self, messages, max_tokens=300, temperature=0.4):
        with self._guard:
            self.active += 1
            self.peak = max(self.peak, self.active)
        time.sleep(0.05)
        with self._guard:
            self.active -= 1
        return super().complete(messages, max_tokens, temperature)


def test_turns_for_one_session_never_interleave(store, retriever, sink):
    slow = SlowLLM()
    svc = CareService(store=store, generator=ResponseGenerator(slow, timeout=5), retriever=retriever, sink=sink)
    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(lambda i: svc.handle(f"Tell me about day {i}", "s1"), range(4)))

    assert slow.peak == 1
    assert len({r.conversation_id for r in results}) == 1
    assert len(store.recent_messages(results[0].conversation_id, 20)) == 8


def test_unknown_client_flow_is_ignored(service):
    result = service.handle("hello there", "s1", flow=flows.FlowState(mode="bogus", step=1))
    assert isinstance(result.reply, GeneratedReply)


def test_turn_locks_are_released_after_each_turn(service):
    for i in range(50):
        service.handle("I had a long day", f"visitor-{i}")
    assert service._locks == {}
