"""EN <-> SW translation used as a degraded-quality fallback for missing FAQ content."""
import re
from typing import Optional, Protocol

from loguru import logger

from .errors import ProviderError

_CONTROL = re.compile(r"[\x00-\x1f\x7f]+")
_SPACES = re.compile(r"\s+")


def safety_scrub(text: str) -> str:
    """Collapse whitespace and strip control characters from provider output."""
    return _SPACES.sub(" ", _CONTROL.sub(" ", text or "")).strip()


class Translator(Protocol):
    def translate(self, text: str, target: str, source: Optional[str] = None,
                  hint: Optional[str] = None, safe: bool = True) -> str: ...


class PassthroughTranslator:
    """No external calls: returns the input unchanged."""

    def translate(self, text, target, source=None, hint=None, safe=True):
        return safety_scrub(text) if safe else text


LANG_NAMES = {"en": "English", "sw": "Kiswahili"}


class LLMTranslator:
    def __init__(self, llm, max_tokens: int = 400):
        self.llm = llm
        self.max_tokens = max_tokens

    def translate(self, text, target, source=None, hint=None, safe=True):
        instructions = f"Translate the user's text into {LANG_NAMES.get(target, target)}. Return only the translation."
        if hint:
            instructions += f" Domain: {hint}."
        messages = [
            {"role": "system", "content": instructions},
            {"role": "user", "content": text},
        ]
        try:
            out = self.llm.complete(messages, max_tokens=self.max_tokens, temperature=0.0) or text
        except ProviderError as e:
            logger.warning(f"translation to {target} failed, keeping source text: {e.detail}")
            return text
        return safety_scrub(out) if safe else out
