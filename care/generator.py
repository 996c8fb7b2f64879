from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from loguru import logger

from config import settings

from .errors import ProviderError
from .knowledge import KnowledgeChunk
from .messages import fallback_message

CARE_PERSONA = (
    "You are Bepawa Care, an empathetic mental health companion for people in Tanzania and East Africa.\n"
    "Rules:\n"
    "1) Listen first. Reflect the user's feelings in warm, simple language.\n"
    "2) Keep replies short (under 120 words) and end with one gentle question or next step.\n"
    "3) Offer practical coping tools (breathing, grounding, sleep routines) when helpful.\n"
    "4) You are not a doctor or therapist. Never diagnose and never prescribe.\n"
    "5) Suggest a licensed counselor when problems persist or feel heavy."
)

PHARMACY_PERSONA = (
    "You are the Bepawa business assistant for pharmacies and retail health outlets.\n"
    "Rules:\n"
    "1) Answer concisely and practically, using standard treatment guidelines where relevant.\n"
    "2) For dosing always state the mg/kg basis and advise confirming with a pharmacist or clinician.\n"
    "3) Flag red-flag symptoms that need referral.\n"
    "4) Keep replies under 150 words."
)

CRISIS_PROTOCOL = (
    "Crisis protocol (always applies): if the user mentions suicide, self-harm or wanting to die, stop "
    "everything else, respond with empathy, urge them to call 112 or go to the nearest hospital, share the "
    f"counselor WhatsApp link {settings.COUNSELOR_WHATSAPP_URL}, and ask whether they are safe right now."
)

LANGUAGE_LOCK = {
    "en": "Respond only in English for this reply, whatever language earlier turns used.",
    "sw": "Jibu kwa Kiswahili pekee katika jibu hili. Respond only in Kiswahili for this reply, whatever language earlier turns used.",
}


@dataclass(frozen=True)
class Generation:
    text: str
    fallback: bool = False
    reason: Optional[str] = None


class ResponseGenerator:
    def __init__(self, llm, max_tokens: int = settings.LLM_MAX_TOKENS,
                 temperature: float = settings.LLM_TEMPERATURE,
                 timeout: float = settings.LLM_TIMEOUT_SECONDS,
                 history_turns: int = settings.HISTORY_TURNS):
        self.llm = llm
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout
        self.history_turns = history_turns
        self._pool = ThreadPoolExecutor(max_workers=8, thread_name_prefix="llm")

    def build_messages(self, message: str, context: Optional[Dict], language: str,
                       knowledge: Sequence[KnowledgeChunk] = (), history: Sequence[Dict] = (),
                       assistant: str = "care") -> List[Dict[str, str]]:
        persona = PHARMACY_PERSONA if assistant == "pharmacy" else CARE_PERSONA
        msgs = [
            {"role": "system", "content": persona},
            {"role": "system", "content": CRISIS_PROTOCOL},
            {"role": "system", "content": LANGUAGE_LOCK.get(language, LANGUAGE_LOCK["en"])},
        ]
        if context:
            topics = ", ".join(context.get("topics_discussed") or []) or "none yet"
            msgs.append({"role": "system", "content": (
                f"Conversation context: emotional state {context.get('emotional_state', 'neutral')}, "
                f"risk level {context.get('risk_level', 'low')}, topics discussed: {topics}."
            )})

        # history arrives oldest-to-newest; keep the newest turns
        recent = list(history)[-self.history_turns:] if self.history_turns else []
        for m in recent:
            role = "assistant" if m["role"] == "assistant" else "user"
            msgs.append({"role": role, "content": m["content"]})

        if knowledge:
            passages = "\n\n".join(c.text for c in knowledge)
            note = ""
            if any(c.translated for c in knowledge):
                note = "\nSome passages are machine-translated; use them with lower confidence."
            msgs.append({"role": "system", "content": f"Relevant knowledge:\n{passages}{note}"})

        msgs.append({"role": "user", "content": message})
        return msgs

    def generate(self, message: str, context: Optional[Dict], language: str,
                 knowledge: Sequence[KnowledgeChunk] = (), history: Sequence[Dict] = (),
                 assistant: str = "care") -> Generation:
        msgs = self.build_messages(message, context, language, knowledge, history, assistant)
        future = self._pool.submit(self.llm.complete, msgs, self.max_tokens, self.temperature)
        try:
            text = (future.result(timeout=self.timeout) or "").strip()
        except FutureTimeout:
            future.cancel()
            return self._fallback(language, "timeout")
        except ProviderError as e:
            return self._fallback(language, f"{type(e).__name__}: {e.detail}")
        except Exception as e:
            logger.exception("unexpected LLM backend failure")
            return self._fallback(language, f"{type(e).__name__}: {e}")
        if not text:
            return self._fallback(language, "empty completion")
        return Generation(text)

    def _fallback(self, language: str, reason: str) -> Generation:
        logger.warning(f"generation fell back to scripted reply ({reason})")
        text, _ = fallback_message(language)
        return Generation(text, fallback=True, reason=reason)
