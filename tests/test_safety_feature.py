import pytest

from failseed.conversation.safety import DANGER_KEYWORDS, is_dangerous


@pytest.mark.parametrize("keyword", DANGER_KEYWORDS)
def test_every_denylisted_phrase_is_detected_inside_a_sentence(keyword):
    assert is_dangerous(f"今日は本当につらくて、{keyword}と思ってしまった")


def test_japanese_crisis_phrase_from_first_message():
    assert is_dangerous("死にたい")


def test_english_phrases_match_regardless_of_case():
    assert is_dangerous("Sometimes I WANT TO DIE after days like this")
    assert is_dangerous("I thought about Self-Harm again")


def test_ordinary_setbacks_are_not_flagged():
    assert not is_dangerous("missed a deadline at work")
    assert not is_dangerous("I felt overwhelmed")
    assert not is_dangerous("プレゼンで失敗して落ち込んだ")


def test_empty_text_is_not_dangerous():
    assert is_dangerous("") is False
