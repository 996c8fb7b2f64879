from care import intents
from care.classifier import classify
from care.retriever import KnowledgeRetriever


def reply(text, lang="en", knowledge=()):
    return intents.respond(classify(text), text, lang, knowledge)


def test_amoxicillin_dose_is_weight_based_and_split_in_three():
    r = reply("calculate amoxicillin 20 kg")
    assert "500 mg/day" in r.content
    assert "166–167 mg" in r.content
    assert "every 8 h" in r.content
    assert r.category == "medication"


def test_even_split_shows_single_value():
    r = reply("calculate amoxicillin 18 kg")
    assert "450 mg/day" in r.content
    assert "**150 mg**" in r.content


def test_paracetamol_dose_and_daily_cap():
    r = reply("calculate paracetamol 15 kg")
    assert "225 mg" in r.content
    assert "900 mg" in r.content


def test_unsupported_drug_gets_hint():
    assert "Supported drugs" in reply("calculate ibuprofen 20 kg").content


def test_first_line_and_can_i_use():
    r = reply("What's the first-line treatment for malaria in adults?")
    assert "Malaria" in r.content
    assert reply("Can I use amoxicillin for pneumonia?").content.startswith("✅ Yes")
    assert reply("Can I use ciprofloxacin for pneumonia?").content.startswith("⚠️")


def test_significant_screening_raises_risk_floor():
    r = reply("Stress: 2,2,1")
    assert r.content.startswith("Stress total: 5.")
    assert "counselor" in r.content
    assert "Talk to a counselor" in r.suggestions
    assert r.risk_floor == "moderate"
    assert reply("Anxiety: 1,1").risk_floor is None


def test_self_checks_leave_a_pending_flow():
    r = reply("Stress self-check")
    assert r.flow is not None and r.flow.answers["scale"] == "Stress"
    assert reply("Quick check on depression").flow.answers["scale"] == "PHQ2"


def test_missing_swahili_faqs_are_translated_and_flagged():
    knowledge = KnowledgeRetriever().from_pack("postpartum", "sw")
    r = reply("maswali ya kawaida postpartum", "sw", knowledge)
    assert r.translated
    assert knowledge and all(c.translated for c in knowledge)


def test_timer_and_safety_intents():
    assert reply("Start 2-minute timer").action == intents.START_BREATHING_TIMER
    assert reply("I am safe").clears_risk
    urgent = reply("I need immediate help")
    assert urgent.priority == "crisis" and urgent.risk_floor == "high"


def test_symptom_check_category():
    r = reply("I have a fever")
    assert r.category == "symptom"
    assert "Fever" in r.content


def test_lab_values_are_placed_in_their_reference_band():
    r = reply("My blood glucose is 110")
    assert r.category == "lab"
    assert "Prediabetes range" in r.content
    assert "Normal: <100 | Prediabetes range: 100-126 | Diabetes range: ≥126 mg/dL" in r.content

    assert "**Desirable**" in reply("cholesterol 180").content
    assert "**High**" in reply("total cholesterol 250 mg/dL").content
    assert "→ **Low for men, normal for women**" in reply("hemoglobin 12.8").content


def test_lab_without_value_or_in_mmol_explains_ranges_only():
    r = reply("interpret my lab results")
    assert "blood glucose, cholesterol and hemoglobin" in r.content
    assert "Your value" not in reply("blood sugar 6.1 mmol/L").content
    assert "mmol/L" in reply("blood sugar 6.1 mmol/L").content


def test_inventory_is_a_pharmacy_intent():
    assert classify("Show me inventory insights").intent is None
    c = classify("Show me inventory insights", "pharmacy")
    assert c.intent == "inventory_insights"
    insights = intents.respond(c, "Show me inventory insights")
    assert insights.category == "inventory"
    assert "Restock recommendations" in insights.suggestions

    restock = intents.respond(classify("Restock recommendations", "pharmacy"), "Restock recommendations")
    assert "Reorder point" in restock.content
