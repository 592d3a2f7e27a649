# FILE: tests/test_explanations.py

from certquiz.services.explanations import select_explanations

STRUCTURED = {
    "A": "Phishing relies on deception.",
    "B": "Correct: a buffer overflow corrupts memory.",
    "C": "Tailgating needs physical access.",
}
OPTIONS = ["Phishing", "Buffer overflow", "Tailgating"]


def test_correct_first_then_user_choice_then_rest():
    blocks = select_explanations(STRUCTURED, "B", "A", OPTIONS)

    assert [b.label for b in blocks] == ["B", "A", "C"]
    assert [b.is_correct for b in blocks] == [True, False, False]
    assert [b.is_user_choice for b in blocks] == [False, True, False]


def test_user_answer_given_as_option_text():
    blocks = select_explanations(STRUCTURED, "Buffer overflow", "Tailgating", OPTIONS)
    assert [b.label for b in blocks] == ["B", "C", "A"]


def test_correct_user_answer_is_not_repeated():
    blocks = select_explanations(STRUCTURED, "B", "B", OPTIONS)

    assert [b.label for b in blocks] == ["B", "A", "C"]
    assert blocks[0].is_correct and blocks[0].is_user_choice


def test_letters_without_text_are_skipped():
    explanation = {"A": "Only A is explained.", "B": "", "C": "And C."}
    blocks = select_explanations(explanation, "B", "C", OPTIONS)
    assert [b.label for b in blocks] == ["C", "A"]


def test_keys_by_option_text_resolve_to_letters():
    explanation = {"Tailgating": "Physical.", "Phishing": "Email.", "Buffer overflow": "Memory."}
    blocks = select_explanations(explanation, "B", "A", OPTIONS)
    assert [b.label for b in blocks] == ["B", "A", "C"]


def test_flat_explanation_is_single_unlabeled_block():
    blocks = select_explanations("AES is symmetric.", "True", "False", [])

    assert len(blocks) == 1
    assert blocks[0].label is None
    assert not blocks[0].is_correct
    assert not blocks[0].is_user_choice


def test_flat_json_explanation_is_decoded():
    blocks = select_explanations('{"A": "first", "B": "second"}', "A", "B", ["x", "y"])
    assert [b.label for b in blocks] == ["A", "B"]


def test_blank_explanation_has_no_blocks():
    assert select_explanations("  ", "A", "B", OPTIONS) == []


def test_multi_select_marks_every_correct_letter():
    blocks = select_explanations(STRUCTURED, ["A", "C"], ["C", "B"], OPTIONS)

    assert [b.label for b in blocks] == ["A", "C", "B"]
    assert [b.is_correct for b in blocks] == [True, True, False]
    assert [b.is_user_choice for b in blocks] == [False, True, True]
