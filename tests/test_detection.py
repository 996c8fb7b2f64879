import pytest

from care.detection import CRISIS_PHRASES, detect_emotion, detect_language, is_crisis


@pytest.mark.parametrize("phrase", CRISIS_PHRASES)
def test_every_crisis_phrase_matches_in_any_case_and_position(phrase):
    assert is_crisis(phrase)
    assert is_crisis(f"Honestly lately {phrase.upper()} is all I think about")


def test_ordinary_messages_are_not_crisis():
    assert not is_crisis("I feel tired after work")
    assert not is_crisis("")
    assert not is_crisis(None)


def test_language_detection_prefers_swahili_only_on_higher_score():
    assert detect_language("Habari, nina msongo sana leo") == "sw"
    assert detect_language("I feel so stressed today") == "en"
    assert detect_language("") == "en"
    # one marker each: a tie falls back to English
    assert detect_language("nina the") == "en"


def test_emotion_uses_declared_priority():
    assert detect_emotion("I feel sad and anxious") == "sad"
    assert detect_emotion("Nina wasiwasi mwingi") == "anxious"
    assert detect_emotion("I'm so angry at my boss") == "angry"
    assert detect_emotion("Feeling better, thank you") == "positive"
    assert detect_emotion("hello") == "neutral"
