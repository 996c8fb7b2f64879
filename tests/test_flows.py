from care import flows
from care.flows import CIRCUMCISION, HIV_SELF_TEST, SELF_CHECK


def run(mode, answers, lang="en"):
    turn = flows.start(mode, lang)
    for answer in answers:
        turn = flows.advance(turn.state, answer, lang)
    return turn


def test_circumcision_happy_path_books():
    turn = run(CIRCUMCISION, ["book", "21", "no", "no", "no", "yes", "yes"])
    assert turn.state.status == "completed"
    assert turn.completed == "circumcision_booking"
    assert turn.state.answers["age"] == "21"


def test_circumcision_is_deterministic():
    answers = ["learn", "book", "30", "no", "no", "no", "yes", "no"]
    assert run(CIRCUMCISION, answers).state == run(CIRCUMCISION, answers).state


def test_underage_answer_short_circuits_to_referral_regardless_of_later_answers():
    turn = run(CIRCUMCISION, ["book", "12"])
    assert turn.state.status == "referred"
    assert turn.state.answers["referral_reason"] == "age"
    later = run(CIRCUMCISION, ["book", "12", "no", "no", "no", "yes", "yes"])
    assert later.state.status == "referred"
    assert later.state.answers["referral_reason"] == "age"
    assert later.completed is None


def test_bleeding_disorder_refers():
    turn = run(CIRCUMCISION, ["book", "20", "yes"])
    assert turn.state.status == "referred"
    assert turn.state.answers["referral_reason"] == "bleeding_disorder"


def test_prescreen_red_flags_refer():
    assert run(CIRCUMCISION, ["book", "20", "no", "yes", "no", "yes"]).state.answers["referral_reason"] == "prescreen"
    assert run(CIRCUMCISION, ["book", "20", "no", "no", "no", "no"]).state.status == "referred"


def test_age_must_be_numeric():
    turn = run(CIRCUMCISION, ["book", "old enough"])
    assert turn.state.status == "active"
    assert turn.state.step == 10


def test_hiv_kit_order_records_delivery_area():
    turn = run(HIV_SELF_TEST, ["yes", "yes", "yes", "Mwanza"])
    assert turn.completed == "hiv_kit_order"
    assert turn.state.answers["delivery_area"] == "Mwanza"
    assert "Mwanza" in turn.message


def test_hiv_distress_gets_support_without_advancing():
    start = flows.start(HIV_SELF_TEST, "en").state
    turn = flows.advance(start, "I'm scared of the result", "en")
    assert turn.state == start
    assert "not alone" in turn.message


def test_cancel_exits_any_flow():
    turn = run(CIRCUMCISION, ["book", "cancel"])
    assert turn.state.status == "cancelled"
    after = flows.advance(turn.state, "yes", "en")
    assert after.state == turn.state


def test_self_check_scores_pending_scale():
    start = flows.start(SELF_CHECK, "en", "anxiety").state
    assert start.answers["scale"] == "Anxiety"
    assert not flows.accepts(start, "how are you?")
    assert flows.accepts(start, "Anxiety: 3,3")
    turn = flows.advance(start, "Anxiety: 3,3", "en")
    assert turn.state.status == "completed"
    assert turn.state.answers["tier"] == "significant"
    assert turn.message.startswith("Anxiety total: 6.")


def test_screening_tiers():
    assert flows.screening_tier(2) == "low"
    assert flows.screening_tier(4) == "possible"
    assert flows.screening_tier(5) == "significant"
    assert flows.parse_scores("Stress: 2,2,1") == [2, 2, 1]
    assert flows.parse_scores("Stress: 2,5") == []


def test_swahili_flow_copy():
    turn = flows.start(CIRCUMCISION, "sw")
    assert "tohara" in turn.message


def test_uncertain_answers_are_not_consent():
    assert flows.is_yes("yes please")
    assert flows.is_yes("Ndiyo")
    assert not flows.is_yes("not sure")
    assert not flows.is_yes("I don't know")
    assert not flows.is_yes("yes? maybe")


def test_unsure_about_bleeding_disorder_refers():
    for answer in ("not sure", "I don't know", "sijui"):
        turn = run(CIRCUMCISION, ["book", "25", answer])
        assert turn.state.status == "referred"
        assert turn.state.answers["referral_reason"] == "bleeding_disorder_unknown"


def test_not_sure_at_eligibility_does_not_book():
    turn = run(CIRCUMCISION, ["book", "25", "no", "no", "no", "yes", "not sure"])
    assert turn.state.status == "completed"
    assert turn.completed is None


def test_unknown_flow_mode_is_not_accepted():
    bogus = flows.FlowState(mode="bogus", step=1)
    assert not flows.accepts(bogus, "hello")
