"""Keyword and pattern classifier for inbound messages.

Both topics and intents are matched first-wins over explicitly ordered tuples,
so precedence is part of the data and can be asserted in tests.
"""
import re
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .flows import CIRCUMCISION, HIV_SELF_TEST
from .guidelines import find_guidelines
from .packs import TOPICS, Topic


@dataclass(frozen=True)
class IntentRule:
    name: str
    pattern: re.Pattern
    flow: Optional[str] = None
    assistants: Optional[Tuple[str, ...]] = None  # None means every persona


@dataclass(frozen=True)
class Classification:
    topic: Optional[str] = None
    intent: Optional[str] = None
    flow: Optional[str] = None
    groups: Tuple[str, ...] = ()

    @property
    def scripted(self) -> bool:
        return self.intent is not None or self.flow is not None


def _rx(pattern: str) -> re.Pattern:
    return re.compile(pattern, re.I)


INTENT_RULES: Tuple[IntentRule, ...] = (
    IntentRule("safety_confirmed", _rx(r"\b(i am safe|i'm safe|im safe|niko salama)\b")),
    IntentRule("urgent_help", _rx(r"immediate help|need help now|emergency|msaada wa haraka|dharura")),
    IntentRule("screening_answer", _rx(r"^\s*(stress|anxiety|phq-?2|gad-?2)\s*:\s*([0-3](?:\s*,?\s*[0-3])*)\s*$")),
    IntentRule("hiv_self_test", _rx(r"hiv self[- ]?test|self[- ]?test(?:ing)? kit|order (?:an? )?(?:hiv )?(?:self[- ]?test )?kit|kipimo binafsi"),
               flow=HIV_SELF_TEST),
    IntentRule("circumcision", _rx(r"circumcis|tohara"), flow=CIRCUMCISION),
    IntentRule("first_line", _rx(r"first[- ]?line treatment for ([^?]+)")),
    IntentRule("can_i_use", _rx(r"can i use ([a-z][a-z \-]*?) for ([a-z][a-z \-]*)\??$")),
    IntentRule("dosage_calculator", _rx(r"\b(?:calculate|calc|dose|dosage)\b.*?\b(\d+(?:\.\d+)?)\s*(?:kg|kgs|kilograms?)\b")),
    IntentRule("pediatric_dosage", _rx(r"dosage (?:for )?([a-z][a-z ]*?) (?:in|for) (?:children|child|kids)")),
    IntentRule("dosage_prompt", _rx(r"\b(?:dosage calculator|calculate [a-z]+ dose|dosage)\b")),
    IntentRule("drug_interaction", _rx(r"\binteractions?\b")),
    IntentRule("list_guidelines", _rx(r"(?:more|all|list|available) (?:treatment )?guidelines|^\s*treatment guidelines\s*$")),
    IntentRule("inventory_insights", _rx(r"\binventory\b|restock|re-?order list|low stock|stock levels?|bidhaa zinazoisha"),
               assistants=("pharmacy",)),
    IntentRule("lab_result_interpretation", _rx(r"\b(?:blood glucose|blood sugar|cholesterol|h(?:a)?emoglobin)\b"
                                                r"|lab (?:test )?results?|interpret (?:my )?lab")),
    IntentRule("stress_self_check", _rx(r"stress self[- ]?check|tathmini ya msongo")),
    IntentRule("anxiety_check", _rx(r"anxiety (?:quick )?check")),
    IntentRule("topic_quick_check", _rx(r"quick check|tathmini fupi")),
    IntentRule("topic_faqs", _rx(r"\bfaqs?\b|maswali ya kawaida")),
    IntentRule("start_timer", _rx(r"start (?:a )?(?:2|two)[- ]minute timer|breathing timer|anza kipima muda")),
    IntentRule("breathing_exercise", _rx(r"breathing exercise|box breathing|coping (?:tools|strategies)|zoezi la kupumua|mbinu za kukabiliana")),
    IntentRule("grounding_exercise", _rx(r"grounding")),
    IntentRule("hiv_stigma_support", _rx(r"hiv stigma support|stigma support")),
    IntentRule("counselor", _rx(r"(?:talk to|book|see|speak to|need) (?:a )?(?:counsel+or|provider)|ongea na (?:mshauri|mtoa huduma)")),
    IntentRule("symptom_check", _rx(r"\b(chest pain|fever|headache|cough)\b")),
)

# Pharmacy persona only: fall back to a free-text guideline lookup.
GUIDELINE_LOOKUP = "guideline_lookup"


def detect_topic(text: str, topics: Sequence[Topic] = TOPICS) -> Optional[str]:
    low = (text or "").lower()
    for topic in topics:
        if any(label in low for label in topic.labels):
            return topic.id
    return None


def match_intent(text: str, assistant: str = "care",
                 rules: Sequence[IntentRule] = INTENT_RULES) -> Optional[Tuple[IntentRule, Tuple[str, ...]]]:
    low = (text or "").strip().lower()
    for rule in rules:
        if rule.assistants is not None and assistant not in rule.assistants:
            continue
        m = rule.pattern.search(low)
        if m:
            return rule, tuple(g.strip() if g else "" for g in m.groups())
    return None


def classify(text: str, assistant: str = "care") -> Classification:
    topic = detect_topic(text)
    found = match_intent(text, assistant)
    if found:
        rule, groups = found
        if rule.flow:
            return Classification(topic=topic, flow=rule.flow, groups=groups)
        return Classification(topic=topic, intent=rule.name, groups=groups)
    if assistant == "pharmacy" and find_guidelines(text):
        return Classification(topic=topic, intent=GUIDELINE_LOOKUP)
    return Classification(topic=topic)
