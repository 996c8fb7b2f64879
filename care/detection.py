"""Heuristic language, crisis and emotion detection.

These are word-list heuristics, good enough to pick a reply language and to
gate the crisis protocol. The phrase lists are configuration data meant to be
extended; they are not a clinically validated safety system.
"""
import re
from typing import Iterable, List, Literal

Lang = Literal["en", "sw"]
Emotion = Literal["neutral", "sad", "anxious", "angry", "positive"]

SWAHILI_MARKERS = frozenset({
    "nina", "mimi", "wewe", "sisi", "wao", "hujambo", "habari", "asante", "karibu",
    "samahani", "tafadhali", "wasiwasi", "msongo", "huzuni", "fedha", "uhusiano",
    "mapenzi", "msiba", "kujifungua", "sina", "je", "sana", "leo", "nini", "kwa",
    "na", "ni", "ya", "wa", "za", "hapana", "ndiyo", "naomba", "sijui", "nataka",
    "najisikia", "usingizi", "msaada", "salama",
})

ENGLISH_MARKERS = frozenset({
    "i", "me", "my", "you", "the", "a", "an", "and", "is", "are", "am", "to", "of",
    "in", "for", "with", "on", "what", "how", "feel", "feeling", "help", "can",
    "do", "not", "it", "this", "that", "want", "need", "please", "yes", "no",
})

CRISIS_PHRASES = (
    "suicide",
    "suicidal",
    "kill myself",
    "end my life",
    "want to die",
    "self harm",
    "self-harm",
    "hurt myself",
    "kujiua",
    "nimechoka kuishi",
    "najiumiza",
    "najidhuru",
    "nataka kufa",
)

EMOTION_KEYWORDS = (
    ("sad", ("sad", "down", "hopeless", "depressed", "lonely", "cry", "huzuni", "upweke", "nalia")),
    ("anxious", ("anxious", "anxiety", "worried", "worry", "panic", "scared", "afraid", "nervous",
                 "stress", "overwhelmed", "wasiwasi", "hofu", "naogopa", "msongo")),
    ("angry", ("angry", "furious", "annoyed", "irritated", "mad at", "hasira", "nimekasirika")),
    ("positive", ("better", "happy", "good", "great", "calm", "relieved", "thank", "furaha",
                  "asante", "nimefurahi", "vizuri")),
)

_TOKEN = re.compile(r"[a-zA-ZÀ-ɏ']+")


def tokenize(text: str) -> List[str]:
    return [t.lower() for t in _TOKEN.findall(text or "")]


def _score(tokens: Iterable[str], markers: frozenset) -> int:
    return sum(1 for t in tokens if t in markers)


def detect_language(text: str) -> Lang:
    """Return 'sw' only when Swahili markers strictly outnumber English ones."""
    tokens = tokenize(text)
    if not tokens:
        return "en"
    sw = _score(tokens, SWAHILI_MARKERS)
    en = _score(tokens, ENGLISH_MARKERS)
    return "sw" if sw > en else "en"


def is_crisis(text: str, phrases: Iterable[str] = CRISIS_PHRASES) -> bool:
    low = (text or "").lower()
    return any(p in low for p in phrases)


def detect_emotion(text: str) -> Emotion:
    low = (text or "").lower()
    for emotion, words in EMOTION_KEYWORDS:
        if any(w in low for w in words):
            return emotion
    return "neutral"
