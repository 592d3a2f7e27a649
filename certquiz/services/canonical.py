# FILE: certquiz/services/canonical.py
"""
Letter / option-text conversion shared by grading and explanation display

Answers reach us in three encodings: bare option letters ("B"), option text
("Buffer overflow") and prefixed option text ("B. Buffer overflow").
"""
import re
from typing import Optional, List, Sequence, Union

_BARE_LETTER = re.compile(r"^[A-Z]$")
_LETTER_PREFIX = re.compile(r"^([A-Z])\.\s*(.*)$", re.DOTALL)


def option_letter(index: int) -> str:
    return chr(ord("A") + index)


def letter_index(value: str) -> Optional[int]:
    """Index for a bare capital letter, None for anything else"""
    value = value.strip()
    if _BARE_LETTER.match(value):
        return ord(value) - ord("A")
    return None


def expand_letter(value: str, options: Sequence[str]) -> str:
    """Bare letter -> option text when the letter is in range, else unchanged"""
    index = letter_index(value)
    if index is not None and 0 <= index < len(options):
        return options[index]
    return value


def canonicalize(answer: Union[str, List[str]], options: Sequence[str]) -> Union[str, List[str]]:
    """Display form of a correct answer: letters become option text, element-wise for lists"""
    if not options:
        return answer
    if isinstance(answer, list):
        return [expand_letter(a, options) for a in answer]
    return expand_letter(answer, options)


def to_option_text(value: str, options: Sequence[str]) -> str:
    """
    Map any answer encoding to option text

    Handles bare letters and "X. text" prefixes; values that match no
    option come back unchanged.
    """
    if not options:
        return value
    expanded = expand_letter(value, options)
    if expanded != value:
        return expanded
    match = _LETTER_PREFIX.match(value.strip())
    if match:
        index = letter_index(match.group(1))
        if index is not None and index < len(options) and options[index] == match.group(2).strip():
            return options[index]
    return value


def to_option_letter(value: str, options: Sequence[str]) -> Optional[str]:
    """Reverse of to_option_text: positional lookup of the answer in options"""
    stripped = value.strip()
    if letter_index(stripped) is not None:
        return stripped
    text = to_option_text(stripped, options)
    for index, option in enumerate(options):
        if option == text or option.strip() == text:
            return option_letter(index)
    return None


def as_list(answer: Union[str, List[str], None]) -> List[str]:
    if answer is None:
        return []
    if isinstance(answer, str):
        return [answer]
    return list(answer)
