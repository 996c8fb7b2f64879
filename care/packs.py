"""Structured, LLM-free content packs for Bepawa Care (EN/SW)."""
from dataclasses import dataclass
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class Topic:
    id: str
    name: str
    labels: Tuple[str, ...]


@dataclass(frozen=True)
class FAQItem:
    q: str
    a: str


# Declaration order is match priority: the first topic with a matching label wins.
TOPICS: Tuple[Topic, ...] = (
    Topic("stress", "Stress", ("stress", "overwhelmed", "pressure", "msongo")),
    Topic("anxiety", "Anxiety", ("anxiety", "anxious", "worry", "panic", "wasiwasi")),
    Topic("depression", "Depression", ("depression", "sad", "hopeless", "huzuni")),
    Topic("hiv_stigma", "HIV Stigma", ("hiv", "stigma", "disclosure", "unyanyapaa")),
    Topic("sleep", "Sleep", ("insomnia", "sleep", "night", "kulala", "usingizi")),
    Topic("trauma", "Trauma", ("trauma", "flashback", "ptsd")),
    Topic("relationships", "Relationships", ("relationship", "partner", "family", "mapenzi", "uhusiano")),
    Topic("grief", "Grief", ("grief", "loss", "mourning", "msiba")),
    Topic("financial_stress", "Financial Stress", ("money", "bills", "rent", "fedha")),
    Topic("substance", "Substance Use", ("alcohol", "drugs", "addiction", "ulevi", "mihadarati")),
    Topic("postpartum", "Postpartum", ("postpartum", "after birth", "mtoto", "baada ya kujifungua")),
)

TOPICS_BY_ID: Dict[str, Topic] = {t.id: t for t in TOPICS}

FAQS: Dict[str, Dict[str, List[FAQItem]]] = {
    "stress": {
        "en": [
            FAQItem("What is stress?", "Stress is your body's response to pressure. Short-term stress can motivate, but long-term stress can affect sleep and mood."),
            FAQItem("Fast ways to reduce stress?", "Try 2 minutes of box breathing (4-4-4-4), a short walk, water, or write one small task you can complete."),
        ],
        "sw": [
            FAQItem("Msongo ni nini?", "Msongo ni mwitikio wa mwili kwa shinikizo. Wa muda mrefu unaweza kuathiri usingizi na hisia."),
        ],
    },
    "anxiety": {
        "en": [
            FAQItem("What is anxiety?", "Anxiety is a feeling of fear or worry. It becomes a problem when it is frequent or hard to control."),
            FAQItem("How to calm anxiety quickly?", "Slow breathing, grounding 5-4-3-2-1, limit caffeine, and talk to a trusted person."),
        ],
        "sw": [
            FAQItem("Wasiwasi ni nini?", "Ni hali ya hofu au wasiwasi unaoendelea. Ukizidi, tafuta msaada."),
        ],
    },
    "depression": {
        "en": [
            FAQItem("Signs of depression?", "Low mood, loss of interest, sleep/appetite changes, low energy, difficulty concentrating."),
            FAQItem("First steps to cope?", "Small routines: sunlight, gentle movement, regular meals, short tasks, connect with someone."),
        ],
        "sw": [
            FAQItem("Dalili za huzuni kali?", "Kukosa hamu, usingizi kubadilika, uchovu, mawazo hasi."),
        ],
    },
    "hiv_stigma": {
        "en": [
            FAQItem("Dealing with stigma?", "You deserve respect. Choose safe disclosure, connect with supportive groups, and consider counseling."),
            FAQItem("Is counseling private?", "Yes, your sessions are confidential and handled respectfully."),
        ],
        "sw": [
            FAQItem("Kukabiliana na unyanyapaa?", "Chagua kufichua taratibu na kwa usalama; tafuta vikundi vinavyosaidia na ushauri."),
        ],
    },
    "sleep": {
        "en": [
            FAQItem("Improve sleep?", "Consistent bedtime, no screens 1h before bed, cool/dark room, limit caffeine after noon."),
            FAQItem("Can stress affect sleep?", "Yes. Try breathing or grounding before bed."),
        ],
        "sw": [
            FAQItem("Kuboresha usingizi?", "Muda wa kulala ulio sawa, epuka skrini kabla, chumba baridi/kiza."),
        ],
    },
    "trauma": {
        "en": [
            FAQItem("What is grounding?", "A quick technique to feel safe now using senses (5-4-3-2-1). Helpful with flashbacks."),
        ],
        "sw": [
            FAQItem("Grounding ni nini?", "Njia ya kupata utulivu kwa kutumia hisia zako (5-4-3-2-1)."),
        ],
    },
    "relationships": {
        "en": [
            FAQItem("How to communicate better?", "Use \"I\" statements, listen to understand, summarize what you heard, and agree on a small next step."),
            FAQItem("Setting boundaries?", "Be clear and kind: say what you can and cannot do, and repeat calmly if needed."),
        ],
        "sw": [
            FAQItem("Kuwasiliana vyema?", "Tumia sentensi za \"Mimi...\", sikiliza kuelewa, rudia kwa ufupi ulichosikia, kisha mkubaliane hatua ndogo."),
        ],
    },
    "grief": {
        "en": [
            FAQItem("Is grief normal?", "Yes. Grief is a natural response to loss. Emotions can come in waves; be gentle with yourself."),
            FAQItem("How to cope day to day?", "Keep simple routines, connect with someone you trust, and allow yourself to remember and feel."),
        ],
        "sw": [
            FAQItem("Huzuni ya msiba ni ya kawaida?", "Ndiyo. Ni mwitikio wa kawaida kwa upotevu. Hisia huja kwa mawimbi; jipe moyo na utulivu."),
        ],
    },
    "financial_stress": {
        "en": [
            FAQItem("First steps for money stress?", "List essentials, one small action today, and who can support (friend/family/community). Breathe and pace yourself."),
            FAQItem("How to plan?", "Create a simple weekly budget and review expenses; seek local support programs if available."),
        ],
        "sw": [
            FAQItem("Kukabili msongo wa fedha?", "Orodhesha muhimu, chukua hatua moja ndogo leo, na taja anayekusaidia. Pumua, nenda taratibu."),
        ],
    },
    "substance": {
        "en": [
            FAQItem("What is urge surfing?", "A skill to ride out cravings like waves: notice, breathe, wait 10 minutes, choose a supportive action."),
            FAQItem("Reducing harm?", "Avoid triggers, plan alternatives, hydrate and eat, seek support, and consider counseling."),
        ],
        "sw": [
            FAQItem("Urge surfing ni nini?", "Ujuzi wa kupitisha hamu kali kama wimbi: tambua, pumua, subiri dakika 10, chagua tendo linalosaidia."),
        ],
    },
    "postpartum": {
        "en": [
            FAQItem("Postpartum mood changes?", "Common in many parents. If sadness or anxiety persists or worsens, seek support early."),
            FAQItem("Self-care ideas?", "Rest when you can, accept help, short walks, gentle check-ins with your feelings."),
        ],
        "sw": [],
    },
}

SCREENINGS: Dict[str, Dict[str, Tuple[str, ...]]] = {
    "PHQ2": {
        "en": (
            "Over the last 2 weeks, how often have you had little interest or pleasure in doing things? (0-3)",
            "Over the last 2 weeks, how often have you felt down, depressed, or hopeless? (0-3)",
        ),
        "sw": (
            "Katika wiki 2 zilizopita, mara ngapi hukuwa na hamu au furaha kufanya mambo? (0-3)",
            "Katika wiki 2 zilizopita, mara ngapi umejisikia chini, huzuni, au kukosa matumaini? (0-3)",
        ),
    },
    "GAD2": {
        "en": (
            "Feeling nervous, anxious, or on edge? (0-3)",
            "Not being able to stop or control worrying? (0-3)",
        ),
        "sw": (
            "Kujisikia wasiwasi au kutotulia? (0-3)",
            "Kushindwa kusimamisha au kudhibiti wasiwasi? (0-3)",
        ),
    },
}


def faqs_for(topic_id: str, lang: str) -> List[FAQItem]:
    return list(FAQS.get(topic_id, {}).get(lang, []))


def topic_name(topic_id: str) -> str:
    topic = TOPICS_BY_ID.get(topic_id)
    return topic.name if topic else "Topic"
