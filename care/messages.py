"""Fixed bilingual copy: crisis protocol, fallbacks, greetings and follow-ups."""
from typing import Optional, Tuple

from config import settings


def t(lang: str, en: str, sw: str) -> str:
    return sw if lang == "sw" else en


def crisis_message(lang: str) -> Tuple[str, Tuple[str, ...]]:
    content = t(
        lang,
        "I'm really sorry you're feeling this way, and I'm glad you told me. Your safety matters right now.\n\n"
        "• If you are in immediate danger, call 112 or go to the nearest hospital.\n"
        f"• Talk to a counselor now on WhatsApp: {settings.COUNSELOR_WHATSAPP_URL}\n"
        "• Stay near someone you trust and move away from anything you could use to hurt yourself.\n\n"
        "Are you safe right now?",
        "Pole sana kwa unavyojisikia, na asante kwa kuniambia. Usalama wako ni muhimu sasa hivi.\n\n"
        "• Ukiwa hatarini sasa, piga 112 au nenda hospitali iliyo karibu.\n"
        f"• Ongea na mshauri sasa kupitia WhatsApp: {settings.COUNSELOR_WHATSAPP_URL}\n"
        "• Kaa karibu na mtu unayemwamini na ujiepushe na chochote unachoweza kutumia kujiumiza.\n\n"
        "Je, uko salama sasa hivi?",
    )
    suggestions = (
        t(lang, "I am safe", "Niko salama"),
        t(lang, "I need immediate help", "Nahitaji msaada wa haraka"),
        t(lang, "I want to talk to a counselor", "Nataka kuongea na mshauri"),
    )
    return content, suggestions


def fallback_message(lang: str) -> Tuple[str, Tuple[str, ...]]:
    content = t(
        lang,
        "I'm having a technical issue. Can you briefly tell me how you're feeling right now?",
        "Samahani, nina tatizo la teknologia. Je, unaweza kuniambia kidogo unajisikiaje sasa?",
    )
    return content, (t(lang, "Try again", "Jaribu tena"), t(lang, "Talk to a counselor", "Ongea na mshauri"))


def generated_suggestions(lang: str) -> Tuple[str, ...]:
    return (
        t(lang, "Tell me more", "Niambie zaidi"),
        t(lang, "Coping strategies", "Mbinu za kukabiliana"),
        t(lang, "Talk to a counselor", "Ongea na mshauri"),
    )


def follow_up_message(category: str, lang: str = "en") -> Tuple[str, Tuple[str, ...]]:
    subject = {
        "medication": t(lang, "your medications", "dawa zako"),
        "symptom": t(lang, "your symptoms", "dalili zako"),
    }.get(category, t(lang, "this", "hili"))
    content = t(
        lang,
        f"💭 Just checking - do you need any additional help with {subject}? I'm here if you have more questions!",
        f"💭 Nakuulizia tu - unahitaji msaada zaidi kuhusu {subject}? Nipo ukiwa na maswali zaidi!",
    )
    return content, (t(lang, "I'm all set", "Niko sawa"), t(lang, "Yes, I have questions", "Ndiyo, nina maswali"))


def greeting(role: Optional[str] = None, name: Optional[str] = None, lang: str = "en") -> Tuple[str, Tuple[str, ...]]:
    if role == "retail":
        who = f", {name}" if name else ""
        return (
            f"Welcome back{who}! 🏪 I'm your business assistant. I can provide inventory insights, restock planning, "
            "treatment guidelines, dosage calculations and lab result interpretation. How can I assist your pharmacy today?",
            (
                "What's the first-line treatment for malaria in adults?",
                "What's the dosage for paracetamol in children?",
                "Calculate amoxicillin 20 kg",
                "Show me inventory insights",
                "Treatment guidelines",
            ),
        )
    hello = t(lang, "Hello", "Habari")
    if name:
        hello = f"{hello} {name}"
    content = t(
        lang,
        f"{hello}! 💚 I'm Bepawa Care, your mental health companion. I'm here to listen and support you. "
        "How are you feeling today?",
        f"{hello}! 💚 Mimi ni Bepawa Care, mwenzako wa afya ya akili. Nipo kukusikiliza na kukusaidia. "
        "Unajisikiaje leo?",
    )
    suggestions = (
        t(lang, "I feel stressed 😔", "Nina msongo 😔"),
        t(lang, "I need someone to talk to 💬", "Nahitaji mtu wa kuongea naye 💬"),
        t(lang, "I feel anxious 😰", "Nina wasiwasi 😰"),
        t(lang, "Coping strategies 💪", "Mbinu za kukabiliana 💪"),
        t(lang, "Breathing exercise 🧘", "Zoezi la kupumua 🧘"),
        t(lang, "Book a counselor 🤝", "Ongea na mshauri 🤝"),
    )
    return content, suggestions
