# FILE: certquiz/services/explanations.py
"""
Explanation selector

Review order for per-option explanations: the correct option first, the
learner's wrong pick second, then every other option alphabetically.
"""
import json
import logging
from typing import Dict, List, Optional, Sequence, Union

from certquiz.models.results import ExplanationBlock
from certquiz.models.submissions import RawAnswer
from certquiz.services.canonical import as_list, to_option_letter

logger = logging.getLogger(__name__)


def _decode(explanation: Union[str, Dict[str, str], None]) -> Union[str, Dict[str, str]]:
    if explanation is None:
        return ""
    if isinstance(explanation, dict):
        return explanation
    stripped = explanation.strip()
    if stripped.startswith("{") and stripped.endswith("}"):
        try:
            decoded = json.loads(stripped)
        except json.JSONDecodeError:
            return explanation
        if isinstance(decoded, dict):
            return {str(k): str(v) for k, v in decoded.items() if v is not None}
    return explanation


def _letters(answer: Union[RawAnswer, None], options: Sequence[str]) -> List[str]:
    letters = []
    for value in as_list(answer):
        letter = to_option_letter(value, options)
        if letter and letter not in letters:
            letters.append(letter)
    return letters


def _key_letter(key: str, options: Sequence[str]) -> str:
    return to_option_letter(key, options) or key


def select_explanations(
    explanation: Union[str, Dict[str, str], None],
    correct_answer: Union[str, List[str]],
    user_answer: Optional[RawAnswer],
    options: Sequence[str]
) -> List[ExplanationBlock]:
    """Ordered explanation blocks for the review screen"""
    explanation = _decode(explanation)

    if isinstance(explanation, str):
        if not explanation.strip():
            return []
        return [ExplanationBlock(label=None, text=explanation)]

    # Structured explanations may be keyed by letter or by option text
    texts: Dict[str, str] = {}
    for key, text in explanation.items():
        if text and text.strip():
            texts.setdefault(_key_letter(key, options), text)

    correct_letters = _letters(correct_answer, options)
    user_letters = _letters(user_answer, options)

    order: List[str] = []
    for letter in sorted(correct_letters) + sorted(user_letters) + sorted(texts):
        if letter in texts and letter not in order:
            order.append(letter)

    return [
        ExplanationBlock(
            label=letter,
            text=texts[letter],
            is_correct=letter in correct_letters,
            is_user_choice=letter in user_letters
        )
        for letter in order
    ]
