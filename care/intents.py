"""Deterministic replies for classified intents. None of these call the LLM."""
import math
import re
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence, Tuple

from config import settings

from . import flows
from .classifier import GUIDELINE_LOOKUP, Classification
from .flows import FlowState, parse_scores, score_screening
from .guidelines import GUIDELINES, find_guidelines, format_guideline
from .knowledge import KnowledgeChunk
from .messages import t
from .packs import SCREENINGS, TOPICS, topic_name


@dataclass(frozen=True)
class IntentResult:
    content: str
    suggestions: Tuple[str, ...] = ()
    category: str = "general"
    action: Optional[str] = None
    flow: Optional[FlowState] = None
    priority: str = "normal"
    risk_floor: Optional[str] = None
    clears_risk: bool = False
    translated: bool = False


START_BREATHING_TIMER = "start_breathing_timer"

_WEIGHT = re.compile(r"(\d+(?:\.\d+)?)\s*(?:kg|kgs|kilograms?)\b", re.I)


def _fmt_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def _mg_range(value: float) -> str:
    """Whole-mg dose, shown as floor-ceil when it does not divide evenly."""
    low, high = math.floor(value), math.ceil(value)
    return f"{low} mg" if low == high else f"{low}–{high} mg"


def dosage_calculation(text: str) -> IntentResult:
    low = text.lower()
    m = _WEIGHT.search(low)
    if not m:
        return IntentResult('Please provide patient weight in kg, e.g., "calculate amoxicillin 18 kg".', category="medication")
    weight = float(m.group(1))
    shown = _fmt_number(weight)

    if "amoxicillin" in low:
        per_kg = 25
        daily = per_kg * weight
        return IntentResult(
            f"🧮 **Amoxicillin Dose**\n\nWeight: {shown} kg\n"
            f"Daily dose: {per_kg} mg/kg → **{_fmt_number(daily)} mg/day**\n"
            f"Divide into 3 doses: **{_mg_range(daily / 3)}** every 8 h.",
            ("Calculate paracetamol dose", "More guidelines"),
            category="medication",
        )
    if "paracetamol" in low or "acetaminophen" in low:
        per_kg = 15
        return IntentResult(
            f"🧮 **Paracetamol Dose**\n\nWeight: {shown} kg\n"
            f"Single dose: **{_fmt_number(per_kg * weight)} mg** ({per_kg} mg/kg) every 6 h.\n"
            f"Do not exceed **{_fmt_number(60 * weight)} mg** in 24 h.",
            ("Calculate amoxicillin dose", "More guidelines"),
            category="medication",
        )
    return IntentResult(
        'Supported drugs: amoxicillin, paracetamol. Include weight in kg e.g., "calculate amoxicillin 18 kg".',
        category="medication",
    )


def _first_line(c: Classification, text: str, lang: str, knowledge) -> IntentResult:
    matches = find_guidelines(c.groups[0]) if c.groups else []
    if not matches:
        return _guideline_not_found(text)
    g = matches[0]
    lines = "\n".join(r.line() for r in g.first_line)
    return IntentResult(
        f"🏥 **{g.condition} - First-line Treatment**\n\n{lines}\n\n*Always confirm diagnosis and consider contraindications.*",
        ("Dosage calculator", "More guidelines"),
        category="medication",
    )


def _can_i_use(c: Classification, text: str, lang: str, knowledge) -> IntentResult:
    drug, condition = c.groups
    matches = find_guidelines(condition)
    if not matches:
        return _guideline_not_found(text)
    g = matches[0]
    in_first, in_second = g.lists(drug)
    if in_first or in_second:
        second_only = " (second-line option)" if in_second and not in_first else ""
        return IntentResult(
            f"✅ Yes, **{drug}** is listed in the standard treatment guideline for **{g.condition}**{second_only}.\n\n"
            "Please ensure correct dosing and check patient contraindications.",
            ("Show dosage", "More guidelines"),
            category="medication",
        )
    return IntentResult(
        f"⚠️ **{drug}** is not listed as a recommended treatment for **{g.condition}** in the guideline. "
        "Consider first-line options instead. When in doubt, consult a pharmacist or clinician.",
        ("More guidelines",),
        category="medication",
    )


def _dosage_calculator(c: Classification, text: str, lang: str, knowledge) -> IntentResult:
    return dosage_calculation(text)


def _pediatric_dosage(c: Classification, text: str, lang: str, knowledge) -> IntentResult:
    drug = c.groups[0] if c.groups else ""
    if "paracetamol" in drug or "acetaminophen" in drug:
        return IntentResult(
            "🧮 **Paracetamol Pediatric Dosing**\n\n10–15 mg/kg per dose orally every 6–8 hours (max 60 mg/kg/day).\n\n"
            "Example: 15 kg child → 150–225 mg per dose.\n"
            "If weight unknown, use age-based charts. Always verify calculations and monitor total daily intake.",
            ("Calculate paracetamol 15 kg", "More guidelines"),
            category="medication",
        )
    return _dosage_prompt(c, text, lang, knowledge)


def _dosage_prompt(c: Classification, text: str, lang: str, knowledge) -> IntentResult:
    return IntentResult(
        "🧮 **Dosage Calculator**\n\nEnter the medication name and patient weight, e.g. "
        '"calculate amoxicillin 18 kg". Supported: amoxicillin, paracetamol.',
        ("Calculate amoxicillin 20 kg", "Calculate paracetamol 15 kg", "Cancel"),
        category="medication",
    )


def _drug_interaction(c: Classification, text: str, lang: str, knowledge) -> IntentResult:
    return IntentResult(
        "⚠️ **Drug Interaction Checker**\n\nType two or more drug names separated by commas and I'll look for "
        "major interactions. (Prototype - consult a pharmacist for final confirmation.)",
        ("Metformin, Ciprofloxacin", "Warfarin, Amoxicillin", "Ibuprofen, Prednisolone"),
        category="medication",
    )


def _list_guidelines(c: Classification, text: str, lang: str, knowledge) -> IntentResult:
    listing = "\n".join(f"• {g.condition}" for g in GUIDELINES)
    return IntentResult(
        f"📚 **Available Standard Treatment Guidelines**\n\n{listing}\n\n"
        'Ask me about any of these conditions (e.g., "malaria" or "cardiac arrest protocol").',
        ("Malaria", "Cardiac arrest", "Shock"),
        category="medication",
    )


def _guideline_lookup(c: Classification, text: str, lang: str, knowledge) -> IntentResult:
    matches = find_guidelines(text)
    if not matches:
        return _guideline_not_found(text)
    body = "\n\n---\n\n".join(format_guideline(g) for g in matches)
    return IntentResult(
        f"💊 **Treatment Guidelines**\n\n{body}\n\n"
        "*Note: These are general guidelines. Always consider patient-specific factors and contraindications.*",
        ("More guidelines", "Dosage calculator", "Drug interactions"),
        category="medication",
    )


def _guideline_not_found(text: str) -> IntentResult:
    return IntentResult(
        f"❌ I couldn't find a standard treatment guideline matching \"{text.strip()}\". "
        "Try a different condition or symptom keyword.",
        ("List available guidelines", "Malaria treatment", "Cardiac arrest protocol"),
        category="medication",
    )


def _screening_answer(c: Classification, text: str, lang: str, knowledge) -> IntentResult:
    code = flows.SCALE_CODES.get(c.groups[0].replace("-", ""), "Stress")
    values = parse_scores(text)
    message, suggestions, tier = score_screening(code, values, lang)
    return IntentResult(message, suggestions, category="screening",
                        risk_floor="moderate" if tier == "significant" else None)


def _stress_self_check(c: Classification, text: str, lang: str, knowledge) -> IntentResult:
    content = t(
        lang,
        "🧭 Stress Self-Check\n\nThink about the last 2 weeks and rate the following "
        "(0=None, 1=Several days, 2=More than half, 3=Nearly every day):\n"
        "• Felt overwhelmed or unable to control important things?\n"
        "• Difficulty relaxing or sleeping?\n"
        "• Irritable or on edge?\n\n"
        'You can reply like: "Stress: 2,2,1".\n\nNote: This is not a diagnosis.',
        "🧭 Tathmini ya Msongo\n\nFikiria wiki 2 zilizopita na upime yafuatayo "
        "(0=Hapana, 1=Siku chache, 2=Zaidi ya nusu, 3=Karibu kila siku):\n"
        "• Umejisikia kuzidiwa au kushindwa kudhibiti mambo muhimu?\n"
        "• Ugumu wa kupumzika au kulala?\n"
        "• Hasira au kutotulia?\n\n"
        'Jibu hivi: "Stress: 2,2,1".\n\nKumbuka: Hii si utambuzi wa ugonjwa.',
    )
    return IntentResult(content, ("Stress: 1,1,2", t(lang, "Breathing exercise", "Zoezi la kupumua"),
                                  t(lang, "Book a counselor", "Ongea na mshauri")),
                        flow=flows.start(flows.SELF_CHECK, lang, "stress").state)


def _anxiety_check(c: Classification, text: str, lang: str, knowledge) -> IntentResult:
    questions = SCREENINGS["GAD2"]["sw" if lang == "sw" else "en"]
    content = t(
        lang,
        f"🧪 Anxiety Quick Check\n\nOver the last 2 weeks, how often have you been bothered by:\n"
        f"1) {questions[0]}\n2) {questions[1]}\n\n"
        'Rate each: 0=Not at all, 1=Several days, 2=More than half, 3=Nearly every day\nReply like: "Anxiety: 1,2".',
        f"🧪 Tathmini Fupi ya Wasiwasi\n\nKatika wiki 2 zilizopita, mara ngapi umesumbuliwa na:\n"
        f"1) {questions[0]}\n2) {questions[1]}\n\n"
        'Pima kila moja: 0=Hapana, 1=Siku chache, 2=Zaidi ya nusu, 3=Karibu kila siku\nJibu hivi: "Anxiety: 1,2".',
    )
    return IntentResult(content, ("Anxiety: 0,1", t(lang, "Breathing exercise", "Zoezi la kupumua")),
                        flow=flows.start(flows.SELF_CHECK, lang, "anxiety").state)


def _topic_quick_check(c: Classification, text: str, lang: str, knowledge) -> IntentResult:
    code = "GAD2" if c.topic and c.topic not in ("depression", "stress") else "PHQ2"
    q = SCREENINGS[code]["sw" if lang == "sw" else "en"]
    content = t(
        lang,
        f'Let\'s do a quick check ({code}). Answer with two numbers 0-3 (e.g., "{code}: 1,2").\n\n'
        f"1) {q[0]}\n2) {q[1]}\n\n0=Not at all, 1=Several days, 2=More than half the days, 3=Nearly every day",
        f'Tufanye tathmini fupi ({code}). Jibu kwa namba mbili 0-3 (mfano: "{code}: 1,2").\n\n'
        f"1) {q[0]}\n2) {q[1]}\n\n0=Hapana kabisa, 1=Siku chache, 2=Zaidi ya nusu ya siku, 3=Karibu kila siku",
    )
    return IntentResult(content, (f"{code}: 0,1", t(lang, "Coping tools", "Mbinu za kukabiliana"),
                                  t(lang, "Talk to a counselor", "Ongea na mshauri")),
                        flow=flows.start(flows.SELF_CHECK, lang, code.lower()).state)


def _topic_faqs(c: Classification, text: str, lang: str, knowledge: Sequence[KnowledgeChunk]) -> IntentResult:
    suggestions = (t(lang, "Coping tools", "Mbinu za kukabiliana"), t(lang, "Quick check", "Tathmini fupi"),
                   t(lang, "Talk to a counselor", "Ongea na mshauri"))
    if not c.topic:
        names = ", ".join(topic.name for topic in TOPICS)
        return IntentResult(t(lang, f"Which topic would you like FAQs about? I cover: {names}.",
                              f"Ungependa maswali ya kawaida kuhusu mada gani? Nina: {names}."), suggestions)
    name = topic_name(c.topic)
    items = list(knowledge)[:3]
    if not items:
        return IntentResult(t(lang, "I have limited FAQs on this topic for now.",
                              "Kwa sasa nina maswali machache juu ya mada hii."), suggestions)
    body = "\n".join(chunk.text for chunk in items)
    header = t(lang, f"Here are a few common questions on {name}:", f"Maswali ya kawaida kuhusu {name}:")
    return IntentResult(f"{header}\n{body}", suggestions, translated=any(ch.translated for ch in items))


def _start_timer(c: Classification, text: str, lang: str, knowledge) -> IntentResult:
    return IntentResult(
        t(lang, "🧘 Starting a 2-minute box breathing timer. Follow the phase shown on the timer.",
          "🧘 Naanza kipima muda cha dakika 2 cha kupumua. Fuata hatua inayoonyeshwa."),
        (t(lang, "Stop timer", "Simamisha"),),
        action=START_BREATHING_TIMER,
    )


def _breathing_exercise(c: Classification, text: str, lang: str, knowledge) -> IntentResult:
    content = t(
        lang,
        "🧘 Breathing Exercise (Box Breathing)\n\nTry this for 2–4 minutes:\n"
        "1) Inhale through your nose for 4 seconds\n2) Hold your breath for 4 seconds\n"
        "3) Exhale slowly through your mouth for 4 seconds\n4) Hold for 4 seconds\n\n"
        "Repeat the cycle. Tip: Keep shoulders relaxed.\n\nWould you like a timed version?",
        "🧘 Zoezi la Kupumua (Sanduku)\n\nJaribu kwa dakika 2–4:\n"
        "1) Vuta pumzi kwa pua sekunde 4\n2) Shikilia pumzi sekunde 4\n"
        "3) Toa pumzi taratibu kwa mdomo sekunde 4\n4) Shikilia sekunde 4\n\n"
        "Rudia mzunguko. Dokezo: Legeza mabega.\n\nUngependa toleo lenye kipima muda?",
    )
    return IntentResult(content, (t(lang, "Start 2-minute timer", "Anza kipima muda"),
                                  t(lang, "Grounding exercise", "Zoezi la grounding"),
                                  t(lang, "Talk to a counselor", "Ongea na mshauri")))


def _grounding_exercise(c: Classification, text: str, lang: str, knowledge) -> IntentResult:
    content = t(
        lang,
        "Grounding 5-4-3-2-1\n\n• 5 things you can see\n• 4 things you can feel\n• 3 things you can hear\n"
        "• 2 things you can smell\n• 1 thing you can taste\n\nGo slowly. Notice details.",
        "Njia ya utulivu 5-4-3-2-1\n\n• Vitu 5 unavyoona\n• Vitu 4 unavyohisi\n• Vitu 3 unavyosikia\n"
        "• Vitu 2 unavyonusa\n• Kitu 1 unachoonja\n\nNenda taratibu. Angalia kwa makini.",
    )
    return IntentResult(content, (t(lang, "Start 2-minute timer", "Anza kipima muda"),
                                  t(lang, "Talk to a counselor", "Ongea na mshauri")))


def _hiv_stigma_support(c: Classification, text: str, lang: str, knowledge) -> IntentResult:
    content = t(
        lang,
        "❤️ HIV Stigma Support\n\nYou deserve care and respect. Here are supportive options:\n"
        "• Private chat via WhatsApp for counseling (confidential)\n• Guidance on disclosure at your own pace\n"
        "• Connection to local resources and support groups\n\n"
        "Would you like coping tips, disclosure guidance, or to talk to a counselor now?",
        "❤️ Msaada dhidi ya Unyanyapaa wa VVU\n\nUnastahili huduma na heshima. Chaguo za msaada:\n"
        "• Mazungumzo ya siri kupitia WhatsApp na mshauri\n• Mwongozo wa kufichua hali yako kwa kasi yako\n"
        "• Kuunganishwa na vikundi vya msaada vya karibu\n\nUngependa nini kati ya hivi?",
    )
    return IntentResult(content, (t(lang, "Coping tips", "Mbinu za kukabiliana"),
                                  t(lang, "FAQs about HIV stigma", "Maswali ya kawaida kuhusu HIV"),
                                  t(lang, "Talk to a counselor", "Ongea na mshauri")))


def _counselor(c: Classification, text: str, lang: str, knowledge) -> IntentResult:
    url = settings.COUNSELOR_WHATSAPP_URL
    content = t(
        lang,
        "I recommend connecting with a licensed counselor for more support. You can use WhatsApp or book a "
        f"confidential session (chat/video).\n\n• WhatsApp: {url}\n• Book session: /appointments",
        "Nashauri uunganishwe na mshauri wa kitaalamu kwa msaada zaidi. Unaweza kuzungumza kupitia WhatsApp au "
        f"kuweka miadi ya siri (chat/video).\n\n• WhatsApp: {url}\n• Weka miadi: /appointments",
    )
    return IntentResult(content, (t(lang, "Start 2-minute timer", "Anza kipima muda"),
                                  t(lang, "Grounding exercise", "Zoezi la grounding")))


def _safety_confirmed(c: Classification, text: str, lang: str, knowledge) -> IntentResult:
    content = t(
        lang,
        "I'm really glad you're safe. Thank you for letting me know. Would you like to try a calming exercise "
        "or talk about what's been weighing on you?",
        "Nafurahi sana kwamba uko salama. Asante kwa kunijulisha. Ungependa kujaribu zoezi la utulivu "
        "au kuzungumza kuhusu kinachokusumbua?",
    )
    return IntentResult(content, (t(lang, "Breathing exercise", "Zoezi la kupumua"),
                                  t(lang, "Tell me more", "Niambie zaidi"),
                                  t(lang, "Talk to a counselor", "Ongea na mshauri")),
                        clears_risk=True)


def _urgent_help(c: Classification, text: str, lang: str, knowledge) -> IntentResult:
    url = settings.COUNSELOR_WHATSAPP_URL
    content = t(
        lang,
        "Please get help right now:\n\n• Call 112 (emergency) or go to the nearest hospital\n"
        f"• Counselor on WhatsApp: {url}\n• Tell someone near you what is happening\n\nI'm staying here with you.",
        "Tafadhali pata msaada sasa hivi:\n\n• Piga 112 (dharura) au nenda hospitali iliyo karibu\n"
        f"• Mshauri kupitia WhatsApp: {url}\n• Mwambie mtu aliye karibu nawe kinachoendelea\n\nNipo hapa nawe.",
    )
    return IntentResult(content, (t(lang, "I am safe", "Niko salama"),
                                  t(lang, "I want to talk to a counselor", "Nataka kuongea na mshauri")),
                        category="safety", priority="crisis", risk_floor="high")


_SYMPTOMS: Dict[str, Tuple[str, Tuple[str, ...]]] = {
    "chest pain": (
        "⚠️ Chest pain can be serious. If you experience severe chest pain, difficulty breathing, or pain "
        "radiating to arms/jaw, seek immediate medical attention.",
        ("Find emergency services", "Nearest hospital"),
    ),
    "fever": (
        "Fever can indicate infection. Monitor temperature, stay hydrated, and rest. Seek medical attention if "
        "fever exceeds 39°C (102°F) or persists.",
        ("Find nearby pharmacies", "Consult a doctor"),
    ),
    "headache": (
        "Headaches can have various causes. Ensure adequate hydration and rest in a quiet environment. "
        "Persistent or severe headaches warrant medical consultation.",
        ("Relaxation techniques", "When to see a doctor"),
    ),
    "cough": (
        "Coughs can be due to infections, allergies, or other conditions. Stay hydrated; honey can soothe the "
        "throat. A persistent cough needs medical evaluation.",
        ("Home remedies", "Consult a doctor"),
    ),
}


def _symptom_check(c: Classification, text: str, lang: str, knowledge) -> IntentResult:
    key = c.groups[0] if c.groups else ""
    advice, suggestions = _SYMPTOMS.get(key, _SYMPTOMS["fever"])
    note = t(lang, "This is general guidance only. Always consult healthcare professionals for proper diagnosis.",
             "Huu ni mwongozo wa jumla tu. Muone mtaalamu wa afya kwa uchunguzi sahihi.")
    return IntentResult(f"🩺 **Symptom Assessment: {key.capitalize()}**\n\n{advice}\n\n⚠️ {note}",
                        suggestions, category="symptom")


@dataclass(frozen=True)
class LabTest:
    name: str
    aliases: Tuple[str, ...]
    unit: str
    normal: str
    meaning: str
    bands: Tuple[Tuple[float, str], ...]  # (exclusive upper bound, label), ascending


LAB_TESTS: Tuple[LabTest, ...] = (
    LabTest(
        "Blood glucose", ("blood glucose", "blood sugar", "glucose", "sukari"), "mg/dL",
        "Normal fasting glucose: 70-99 mg/dL",
        "Blood glucose levels indicate how well your body processes sugar. Elevated levels may suggest diabetes risk.",
        ((100, "Normal"), (126, "Prediabetes range"), (math.inf, "Diabetes range")),
    ),
    LabTest(
        "Cholesterol", ("cholesterol",), "mg/dL",
        "Total cholesterol should be <200 mg/dL",
        "Cholesterol levels help assess cardiovascular risk. Higher levels may require dietary changes or medication.",
        ((200, "Desirable"), (240, "Borderline high"), (math.inf, "High")),
    ),
    LabTest(
        "Hemoglobin", ("hemoglobin", "haemoglobin"), "g/dL",
        "Normal Hb: Men 13.5-17.5 g/dL, Women 12.0-15.5 g/dL",
        "Hemoglobin carries oxygen in your blood. Low levels may indicate anemia.",
        ((12.0, "Low"), (13.5, "Low for men, normal for women"), (15.5, "Normal"),
         (17.5, "High for women, normal for men"), (math.inf, "High")),
    ),
)

_NUMBER = re.compile(r"(\d+(?:\.\d+)?)")


def lab_band(test: LabTest, value: float) -> str:
    return next(label for upper, label in test.bands if value < upper)


def _reference_ranges(test: LabTest) -> str:
    parts, lower = [], None
    for upper, label in test.bands:
        if lower is None:
            parts.append(f"{label}: <{_fmt_number(upper)}")
        elif math.isinf(upper):
            parts.append(f"{label}: ≥{_fmt_number(lower)}")
        else:
            parts.append(f"{label}: {_fmt_number(lower)}-{_fmt_number(upper)}")
        lower = upper
    return " | ".join(parts) + f" {test.unit}"


def _lab_result(c: Classification, text: str, lang: str, knowledge) -> IntentResult:
    low = text.lower()
    hit = next(((test, alias) for test in LAB_TESTS for alias in test.aliases if alias in low), None)
    if hit is None:
        return IntentResult(
            "🔬 I can help interpret common lab results: blood glucose, cholesterol and hemoglobin. "
            'Tell me the test and your value, e.g. "blood glucose 110".',
            ("Blood glucose", "Cholesterol", "Hemoglobin"),
            category="lab",
        )
    test, alias = hit
    content = (f"🔬 **Lab Result Interpretation: {test.name}**\n\n**Normal range**: {test.normal}\n\n"
               f"**What it means**: {test.meaning}\n\n**Reference ranges**: {_reference_ranges(test)}")
    m = _NUMBER.search(low, low.index(alias) + len(alias))
    if m and "mmol" in low:
        content += f"\n\nI read results in {test.unit} only; please convert mmol/L values or ask your provider."
    elif m:
        value = float(m.group(1))
        content += f"\n\n**Your value**: {_fmt_number(value)} {test.unit} → **{lab_band(test, value)}**"
    content += "\n\n⚠️ Always discuss results with your healthcare provider for personalized interpretation."
    return IntentResult(content, ("Book follow-up test", "Find specialist", "Lifestyle recommendations"),
                        category="lab")


_RESTOCK = re.compile(r"restock|re-?order|bidhaa zinazoisha", re.I)


def _inventory_insights(c: Classification, text: str, lang: str, knowledge) -> IntentResult:
    # live stock figures come from the pharmacy dashboard, not from the chat engine
    if _RESTOCK.search(text):
        return IntentResult(
            "🔄 **Restock Planning**\n\nReorder point = average daily sales × supplier lead time (days) + safety stock.\n"
            "• Prioritise items that fall below their reorder point, starting with essential medicines "
            "(insulin, antibiotics, antimalarials).\n"
            "• Keep safety stock near one week of sales for fast movers.\n"
            "• Check expiry dates before ordering more of slow movers.\n\n"
            "Your current stock levels and reorder list are on the inventory dashboard.",
            ("Show me inventory insights", "Treatment guidelines", "Dosage calculator"),
            category="inventory",
        )
    return IntentResult(
        "📊 **Inventory Insights**\n\nThe inventory dashboard shows your low-stock alerts, top sellers "
        "and weekly sales. Things worth reviewing each week:\n"
        "• Items below their reorder point\n• Fast movers that need more safety stock\n"
        "• Stock expiring within 90 days\n\nAsk me for restock recommendations to plan an order.",
        ("Restock recommendations", "Treatment guidelines", "Dosage calculator"),
        category="inventory",
    )


Handler = Callable[[Classification, str, str, Sequence[KnowledgeChunk]], IntentResult]

HANDLERS: Dict[str, Handler] = {
    "safety_confirmed": _safety_confirmed,
    "urgent_help": _urgent_help,
    "screening_answer": _screening_answer,
    "first_line": _first_line,
    "can_i_use": _can_i_use,
    "dosage_calculator": _dosage_calculator,
    "pediatric_dosage": _pediatric_dosage,
    "dosage_prompt": _dosage_prompt,
    "drug_interaction": _drug_interaction,
    "list_guidelines": _list_guidelines,
    "stress_self_check": _stress_self_check,
    "anxiety_check": _anxiety_check,
    "topic_quick_check": _topic_quick_check,
    "topic_faqs": _topic_faqs,
    "start_timer": _start_timer,
    "breathing_exercise": _breathing_exercise,
    "grounding_exercise": _grounding_exercise,
    "hiv_stigma_support": _hiv_stigma_support,
    "counselor": _counselor,
    "symptom_check": _symptom_check,
    "lab_result_interpretation": _lab_result,
    "inventory_insights": _inventory_insights,
    GUIDELINE_LOOKUP: _guideline_lookup,
}


def respond(c: Classification, text: str, lang: str = "en",
            knowledge: Sequence[KnowledgeChunk] = ()) -> IntentResult:
    try:
        handler = HANDLERS[c.intent]
    except KeyError:
        raise ValueError(f"no handler for intent: {c.intent}") from None
    return handler(c, text, lang, knowledge)
