import time

from care.errors import RateLimited
from care.generator import CRISIS_PROTOCOL, ResponseGenerator
from care.knowledge import KnowledgeChunk
from care.messages import fallback_message
from care.storage_memory import new_context

from conftest import FakeLLM


def history(n):
    return [{"role": "user" if i % 2 == 0 else "assistant", "content": f"turn {i}"} for i in range(n)]


def test_prompt_layout():
    gen = ResponseGenerator(FakeLLM(), history_turns=6)
    knowledge = [KnowledgeChunk("stress", "en", "Box breathing helps.")]
    msgs = gen.build_messages("I'm stressed", new_context(), "en", knowledge, history(10))

    assert msgs[0]["role"] == "system" and "Bepawa Care" in msgs[0]["content"]
    assert msgs[1]["content"] == CRISIS_PROTOCOL
    assert "only in English" in msgs[2]["content"]
    turns = [m["content"] for m in msgs if m["role"] in ("user", "assistant")][:-1]
    assert turns == [f"turn {i}" for i in range(4, 10)]
    assert "Box breathing helps." in msgs[-2]["content"]
    assert msgs[-1] == {"role": "user", "content": "I'm stressed"}


def test_language_lock_and_pharmacy_persona():
    msgs = ResponseGenerator(FakeLLM()).build_messages("habari", None, "sw", assistant="pharmacy")
    assert "business assistant" in msgs[0]["content"]
    assert "Kiswahili" in msgs[2]["content"]
    assert CRISIS_PROTOCOL in [m["content"] for m in msgs]


def test_translated_knowledge_is_flagged_in_prompt():
    chunk = KnowledgeChunk("postpartum", "sw", "maandishi", translated=True)
    msgs = ResponseGenerator(FakeLLM()).build_messages("swali", None, "sw", [chunk])
    assert "machine-translated" in msgs[-2]["content"]


def test_provider_error_falls_back_to_localized_apology():
    out = ResponseGenerator(FakeLLM(error=RateLimited())).generate("habari", None, "sw")
    assert out.fallback
    assert out.text == fallback_message("sw")[0]
    assert "RateLimited" in out.reason


def test_empty_completion_falls_back():
    out = ResponseGenerator(FakeLLM(script=["   "])).generate("hi", None, "en")
    assert out.fallback and out.text


class SlowLLM:
    def complete(self, messages, max_tokens=300, temperature=0.4):
        time.sleep(0.5)
        return "late"


def test_timeout_falls_back():
    out = ResponseGenerator(SlowLLM(), timeout=0.05).generate("hi", None, "en")
    assert out.fallback and out.reason == "timeout"


def test_generation_passes_bounds_to_backend():
    llm = FakeLLM(script=["Let's take a breath together."])
    out = ResponseGenerator(llm, max_tokens=120, temperature=0.3).generate("hi", None, "en")
    assert out.text == "Let's take a breath together."
    assert not out.fallback
    assert len(llm.calls) == 1
