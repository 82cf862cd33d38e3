import logging
from typing import Dict

from .errors import TypeMismatch
from .identifier import compute_identifier
from .schemas import StringProperties

logger = logging.getLogger("string_analyzer.analyzer")


def character_frequency(value: str) -> Dict[str, int]:
    """Count every character of the original string, whitespace and case included."""
    freq: Dict[str, int] = {}
    for c in value:
        freq[c] = freq.get(c, 0) + 1
    return freq


def is_palindrome(value: str) -> bool:
    """Case-insensitive, ignoring whitespace only. Punctuation is kept."""
    normalized = "".join(value.split()).lower()
    return normalized == normalized[::-1]


def word_count(value: str) -> int:
    return len(value.split())


def analyze(value: str) -> StringProperties:
    """Compute the full property set for ``value``."""
    if not isinstance(value, str):
        raise TypeMismatch(received=type(value))

    freq = character_frequency(value)
    props = StringProperties(
        length=len(value),
        is_palindrome=is_palindrome(value),
        unique_characters=len(freq),
        word_count=word_count(value),
        sha256_hash=compute_identifier(value),
        character_frequency_map=freq,
    )
    logger.debug("Analyzed string %s (length=%d)", props.sha256_hash[:12], props.length)
    return props
