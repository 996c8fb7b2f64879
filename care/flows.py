"""Scripted multi-step flows.

A flow is a small state machine held by the client: ``FlowState`` travels with
every turn and ``advance`` is a pure function of (state, answer). Each step
records the answer under a named field, emits exactly one message and either
moves the step cursor or lands in a terminal status.
"""
import re
from dataclasses import dataclass, field, replace
from typing import Dict, List, Literal, Optional, Sequence, Tuple

FlowStatus = Literal["active", "completed", "referred", "cancelled"]

HIV_SELF_TEST = "hiv_self_test"
CIRCUMCISION = "circumcision"
SELF_CHECK = "self_check"

MIN_CIRCUMCISION_AGE = 15

FLOW_MODES = (HIV_SELF_TEST, CIRCUMCISION, SELF_CHECK)

# A yes has to lead the answer: "not sure" or "I don't know, yes?" are not consent.
_YES = re.compile(r"^\s*(yes|yep|yeah|sure|ok|okay|y|ndiyo|ndio|sawa|naam)\b", re.I)
_UNSURE = re.compile(r"not sure|unsure|don'?t know|dont know|no idea|maybe|sijui|sina uhakika|labda", re.I)
_CANCEL = re.compile(r"^\s*(cancel|stop|exit|quit|acha|sitisha|ghairi)\b", re.I)
_DISTRESS = re.compile(r"scared|worried|afraid|anxious|don'?t want to know|fear|naogopa|wasiwasi|hofu", re.I)
_LEARN = re.compile(r"learn|info|information|about|jifunza|taarifa", re.I)
_BOOK = re.compile(r"book|appointment|schedule|miadi|weka", re.I)
_NUMBER = re.compile(r"\d+")


@dataclass(frozen=True)
class FlowState:
    mode: str
    step: int = 0
    answers: Dict[str, str] = field(default_factory=dict)
    status: FlowStatus = "active"

    @property
    def active(self) -> bool:
        return self.status == "active"


@dataclass(frozen=True)
class FlowTurn:
    state: FlowState
    message: str
    suggestions: Tuple[str, ...] = ()
    completed: Optional[str] = None  # IntentCompleted kind, if the step produced one


def _t(lang: str, en: str, sw: str) -> str:
    return sw if lang == "sw" else en


def is_unsure(answer: str) -> bool:
    return bool(_UNSURE.search(answer or ""))


def is_yes(answer: str) -> bool:
    return bool(_YES.match(answer or "")) and not is_unsure(answer)


def _record(state: FlowState, name: str, answer: str, **changes) -> FlowState:
    answers = dict(state.answers)
    answers[name] = answer.strip()
    return replace(state, answers=answers, **changes)


# Screening scorer shared by the self-check flow and the stateless intent.

SCALE_CODES = {"stress": "Stress", "anxiety": "Anxiety", "phq2": "PHQ2", "gad2": "GAD2"}


def parse_scores(text: str) -> List[int]:
    body = text.split(":", 1)[1] if ":" in text else text
    body = body.strip()
    if not body or not re.fullmatch(r"[0-3](?:\s*,?\s*[0-3])*", body):
        return []
    return [int(v) for v in re.findall(r"[0-3]", body)]


def screening_tier(total: int) -> str:
    if total <= 2:
        return "low"
    if total <= 4:
        return "possible"
    return "significant"


def score_screening(code: str, values: Sequence[int], lang: str = "en") -> Tuple[str, Tuple[str, ...], str]:
    """Return (message, suggestions, tier) for a set of 0-3 self-check answers."""
    total = sum(values)
    tier = screening_tier(total)
    advice = {
        "low": _t(lang, "Low risk. Keep healthy routines and check in with yourself.",
                  "Hatari ndogo. Endelea na mazoea mazuri na jitathmini mara kwa mara."),
        "possible": _t(lang, "Possible concern. Try coping tools and consider a counselor if it persists.",
                       "Huenda kuna tatizo. Jaribu mbinu za kukabiliana na fikiria mshauri likiendelea."),
        "significant": _t(lang, "Significant concern. I recommend talking to a licensed counselor.",
                          "Tatizo kubwa. Nakushauri uzungumze na mshauri aliyesajiliwa."),
    }[tier]
    note = _t(lang, "Note: This is not a diagnosis. Your wellbeing matters.",
              "Kumbuka: Hii si utambuzi wa ugonjwa. Ustawi wako ni muhimu.")
    suggestions = (
        _t(lang, "Coping tools", "Mbinu za kukabiliana"),
        _t(lang, "Talk to a counselor", "Ongea na mshauri"),
        _t(lang, "Breathing exercise", "Zoezi la kupumua"),
    )
    return f"{code} total: {total}. {advice}\n\n{note}", suggestions, tier


# Entry points

def start(mode: str, lang: str = "en", scale: Optional[str] = None) -> FlowTurn:
    if mode == HIV_SELF_TEST:
        state = FlowState(mode=mode, step=1)
        return FlowTurn(state, _t(
            lang,
            "Would you like to know more about how HIV self-testing works?",
            "Ungependa kujua zaidi jinsi kipimo binafsi cha VVU kinavyofanya kazi?",
        ), (_t(lang, "Yes", "Ndiyo"), _t(lang, "No", "Hapana")))
    if mode == CIRCUMCISION:
        state = FlowState(mode=mode, step=1)
        return FlowTurn(state, _t(
            lang,
            "Are you looking to book a circumcision appointment or learn more about it?",
            "Unataka kuweka miadi ya tohara au kujifunza zaidi kuhusu tohara?",
        ), (_t(lang, "Learn more", "Jifunza zaidi"), _t(lang, "Book appointment", "Weka miadi")))
    if mode == SELF_CHECK:
        state = FlowState(mode=mode, step=1, answers={"scale": SCALE_CODES.get((scale or "stress").lower(), "Stress")})
        return FlowTurn(state, "")
    raise ValueError(f"unknown flow: {mode}")


def accepts(state: FlowState, answer: str) -> bool:
    """Whether ``answer`` belongs to the flow. A pending self-check lets unrelated messages through."""
    if not state.active or state.mode not in FLOW_MODES:
        return False
    if state.mode == SELF_CHECK:
        return bool(_CANCEL.match(answer or "")) or bool(parse_scores(answer))
    return True


def advance(state: FlowState, answer: str, lang: str = "en") -> FlowTurn:
    if not state.active:
        return FlowTurn(state, _t(
            lang,
            "This guided chat has ended. Tell me how I can help next.",
            "Mazungumzo haya ya hatua kwa hatua yamekwisha. Niambie nikusaidie vipi tena.",
        ))
    if _CANCEL.match(answer or ""):
        return FlowTurn(replace(state, status="cancelled"), _t(
            lang,
            "Okay, I've stopped this guided chat. I'm here whenever you need me.",
            "Sawa, nimesitisha mazungumzo haya. Nipo wakati wowote ukinihitaji.",
        ), (_t(lang, "Talk to a counselor", "Ongea na mshauri"),))
    if state.mode == HIV_SELF_TEST:
        return _advance_hiv(state, answer, lang)
    if state.mode == CIRCUMCISION:
        return _advance_circumcision(state, answer, lang)
    if state.mode == SELF_CHECK:
        return _advance_self_check(state, answer, lang)
    raise ValueError(f"unknown flow: {state.mode}")


def _advance_hiv(state: FlowState, answer: str, lang: str) -> FlowTurn:
    yes_no = (_t(lang, "Yes", "Ndiyo"), _t(lang, "No", "Hapana"))
    if _DISTRESS.search(answer):
        return FlowTurn(state, _t(
            lang,
            "You're not alone. Many people feel this way. When you're ready, I'm here to walk you through it.",
            "Hauko peke yako. Watu wengi huhisi hivi. Ukiwa tayari, nipo kukuongoza hatua kwa hatua.",
        ), yes_no)

    if state.step == 1:
        if is_yes(answer):
            return FlowTurn(_record(state, "wants_info", answer, step=2), _t(
                lang,
                "HIV self-testing lets you check your HIV status privately, using a kit at home. "
                "The tests are highly accurate when used correctly, and kits are delivered discreetly.\n\n"
                "Would you like step-by-step instructions on how to use the test?",
                "Kipimo binafsi cha VVU kinakuwezesha kujua hali yako kwa siri ukiwa nyumbani. "
                "Vipimo ni sahihi vikitumika vizuri, na vifaa huletwa kwa usiri.\n\n"
                "Ungependa maelekezo ya hatua kwa hatua ya kutumia kipimo?",
            ), yes_no)
        return FlowTurn(_record(state, "wants_info", answer, status="completed"), _t(
            lang,
            "No problem. If you have any questions or feel anxious, I am here to support you.",
            "Hakuna shida. Ukiwa na swali au wasiwasi, nipo kukusaidia.",
        ))

    if state.step == 2:
        prompt = _t(lang, "Would you like to order a discreet self-test kit?",
                    "Ungependa kuagiza kifaa cha kujipima kwa usiri?")
        if is_yes(answer):
            return FlowTurn(_record(state, "wants_instructions", answer, step=3), _t(
                lang,
                "1. Wash your hands and read the kit instructions.\n"
                "2. Collect a sample (usually saliva or a finger prick).\n"
                "3. Wait for the result as per the kit instructions.\n"
                "4. If positive, seek confirmatory testing at a clinic. If negative, continue regular testing as needed.\n\n"
                "Remember, your status does not define you.\n\n" + prompt,
                "1. Nawa mikono na usome maelekezo ya kifaa.\n"
                "2. Chukua sampuli (mate au tone la damu kidoleni).\n"
                "3. Subiri majibu kama maelekezo yanavyosema.\n"
                "4. Ikiwa chanya, thibitisha kliniki. Ikiwa hasi, endelea kupima mara kwa mara.\n\n"
                "Kumbuka, hali yako haikufafanui.\n\n" + prompt,
            ), yes_no)
        return FlowTurn(_record(state, "wants_instructions", answer, step=3), prompt, yes_no)

    if state.step == 3:
        if is_yes(answer):
            return FlowTurn(_record(state, "wants_kit", answer, step=4), _t(
                lang,
                "Where should we deliver the kit? Share your area or town.",
                "Tukuletee kifaa wapi? Taja eneo au mji wako.",
            ))
        return FlowTurn(_record(state, "wants_kit", answer, status="completed"), _t(
            lang,
            "Okay. If you want to talk through the process or have questions, I am here.",
            "Sawa. Ukitaka kuzungumza zaidi au una maswali, nipo.",
        ))

    if state.step == 4:
        area = answer.strip()
        return FlowTurn(_record(state, "delivery_area", area, status="completed"), _t(
            lang,
            f"Thank you. Your self-test kit order for {area} has been noted and will be delivered discreetly. "
            "We can talk through the next steps together, at your pace.",
            f"Asante. Oda yako ya kifaa cha kujipima kwa {area} imepokelewa na italetwa kwa usiri. "
            "Tunaweza kuzungumza hatua zinazofuata pamoja, kwa kasi yako.",
        ), completed="hiv_kit_order")

    return FlowTurn(state, _t(lang, "Is there anything else you would like to know about HIV self-testing?",
                              "Kuna kingine ungependa kujua kuhusu kipimo binafsi cha VVU?"))


def _referral(state: FlowState, lang: str, reason: str) -> FlowTurn:
    if reason == "age":
        msg = _t(
            lang,
            f"Circumcision is only available for individuals aged {MIN_CIRCUMCISION_AGE} and above. "
            "I can connect you to a healthcare provider if you have questions.",
            f"Tohara inapatikana kwa walio na umri wa miaka {MIN_CIRCUMCISION_AGE} na zaidi tu. "
            "Naweza kukuunganisha na mtoa huduma ya afya ukiwa na maswali.",
        )
    else:
        msg = _t(
            lang,
            "Thanks for your honesty. You may need a personalized consultation with a healthcare provider. "
            "Would you like me to help you schedule one?",
            "Asante kwa uwazi wako. Huenda ukahitaji ushauri maalum na mtoa huduma ya afya. "
            "Ungependa nikusaidie kupanga miadi?",
        )
    answers = dict(state.answers)
    answers["referral_reason"] = reason
    return FlowTurn(replace(state, answers=answers, status="referred"), msg,
                    (_t(lang, "Talk to a provider", "Ongea na mtoa huduma"),))


def _advance_circumcision(state: FlowState, answer: str, lang: str) -> FlowTurn:
    yes_no = (_t(lang, "Yes", "Ndiyo"), _t(lang, "No", "Hapana"))
    ask_age = _t(lang, "Great! May I ask your age?", "Vizuri! Naomba kujua umri wako?")

    if state.step == 1:
        if _BOOK.search(answer):
            return FlowTurn(_record(state, "purpose", "book", step=10), ask_age)
        if _LEARN.search(answer):
            return FlowTurn(_record(state, "purpose", "learn", step=2), _t(
                lang,
                "Circumcision is a minor surgical procedure to remove the foreskin from the penis. "
                "It is recommended for health and hygiene, and sometimes for religious or cultural reasons. "
                "It is quick, usually done under local anesthesia, and recovery takes about a week. "
                f"For individuals aged {MIN_CIRCUMCISION_AGE}+, it is free and confidential at participating clinics.\n\n"
                "Would you like to book an appointment or ask more questions?",
                "Tohara ni upasuaji mdogo wa kuondoa govi la uume. Inapendekezwa kwa afya na usafi, "
                "na wakati mwingine kwa sababu za kidini au kitamaduni. Ni ya haraka, hufanywa kwa ganzi ya eneo, "
                f"na kupona huchukua takriban wiki moja. Kwa walio na miaka {MIN_CIRCUMCISION_AGE}+, ni bure na ya siri "
                "katika kliniki shiriki.\n\nUngependa kuweka miadi au kuuliza maswali zaidi?",
            ), (_t(lang, "Book appointment", "Weka miadi"),))
        return FlowTurn(state, _t(
            lang,
            'I can provide information or help you book. Please type "learn" or "book".',
            'Naweza kukupa taarifa au kukusaidia kuweka miadi. Andika "jifunza" au "weka miadi".',
        ))

    if state.step == 2:
        if _BOOK.search(answer) or is_yes(answer):
            return FlowTurn(_record(state, "purpose", "book", step=10), ask_age)
        return FlowTurn(state, _t(lang, "Feel free to ask any more questions about circumcision.",
                                  "Uliza swali lolote zaidi kuhusu tohara."))

    if state.step == 10:
        m = _NUMBER.search(answer)
        if not m:
            return FlowTurn(state, _t(lang, "Please reply with your age in years, e.g. 21.",
                                      "Tafadhali jibu kwa umri wako kwa miaka, mfano 21."))
        recorded = _record(state, "age", m.group(0))
        if int(m.group(0)) < MIN_CIRCUMCISION_AGE:
            return _referral(recorded, lang, "age")
        return FlowTurn(replace(recorded, step=11), _t(
            lang,
            "Have you ever been diagnosed with a bleeding disorder (e.g., hemophilia)?",
            "Je, umewahi kugundulika na tatizo la damu kutoganda (mfano hemophilia)?",
        ), yes_no)

    if state.step == 11:
        recorded = _record(state, "bleeding_disorder", answer)
        if is_yes(answer):
            return _referral(recorded, lang, "bleeding_disorder")
        if is_unsure(answer):
            return _referral(recorded, lang, "bleeding_disorder_unknown")
        return FlowTurn(replace(recorded, step=12), _t(
            lang,
            "Are you currently experiencing pain or inflammation in the genital area?",
            "Je, kwa sasa una maumivu au uvimbe sehemu za siri?",
        ), yes_no)

    if state.step == 12:
        return FlowTurn(_record(state, "pain", answer, step=13), _t(
            lang, "Have you been circumcised before?", "Je, umewahi kufanyiwa tohara hapo awali?",
        ), yes_no)

    if state.step == 13:
        return FlowTurn(_record(state, "circumcised_before", answer, step=14), _t(
            lang,
            "Are you comfortable receiving a circumcision under local anesthesia?",
            "Je, uko tayari kufanyiwa tohara kwa ganzi ya eneo?",
        ), yes_no)

    if state.step == 14:
        recorded = _record(state, "anesthesia_ok", answer)
        a = recorded.answers
        if is_yes(a.get("pain", "")) or is_yes(a.get("circumcised_before", "")) or not is_yes(answer):
            return _referral(recorded, lang, "prescreen")
        return FlowTurn(replace(recorded, step=15), _t(
            lang,
            "You're eligible. Shall I book an appointment at a nearby clinic now?",
            "Unastahili. Nikuwekee miadi katika kliniki iliyo karibu sasa?",
        ), yes_no)

    if state.step == 15:
        recorded = _record(state, "confirm_booking", answer, status="completed")
        if is_yes(answer):
            return FlowTurn(recorded, _t(
                lang,
                "Your booking request has been sent. The clinic will confirm your appointment time. "
                "You can also keep this summary here for now.",
                "Ombi lako la miadi limetumwa. Kliniki itathibitisha muda wa miadi yako. "
                "Unaweza pia kuhifadhi muhtasari huu hapa kwa sasa.",
            ), completed="circumcision_booking")
        return FlowTurn(recorded, _t(
            lang,
            "Okay. Whenever you're ready to book, just let me know.",
            "Sawa. Ukiwa tayari kuweka miadi, niambie tu.",
        ))

    return FlowTurn(state, _t(lang, "Would you like to learn more or book an appointment?",
                              "Ungependa kujifunza zaidi au kuweka miadi?"))


def _advance_self_check(state: FlowState, answer: str, lang: str) -> FlowTurn:
    code = state.answers.get("scale", "Stress")
    values = parse_scores(answer)
    if not values:
        return FlowTurn(state, _t(
            lang,
            f'Please answer with numbers from 0 to 3, e.g. "{code}: 1,2".',
            f'Tafadhali jibu kwa namba 0 hadi 3, mfano "{code}: 1,2".',
        ))
    message, suggestions, tier = score_screening(code, values, lang)
    done = _record(state, "scores", ",".join(str(v) for v in values), status="completed")
    answers = dict(done.answers)
    answers["tier"] = tier
    return FlowTurn(replace(done, answers=answers), message, suggestions)
