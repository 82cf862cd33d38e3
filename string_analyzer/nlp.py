import logging
import re
from typing import Any, Callable, Dict, NamedTuple, Optional

from .errors import TypeMismatch, Unparseable
from .schemas import FilterSpec

logger = logging.getLogger("string_analyzer.nlp")

_NUM_WORDS = {
    'zero': 0,
    'one': 1,
    'two': 2,
    'three': 3,
    'four': 4,
    'five': 5,
    'six': 6,
    'seven': 7,
    'eight': 8,
    'nine': 9,
    'ten': 10,
    'eleven': 11,
    'twelve': 12,
    'thirteen': 13,
    'fourteen': 14,
    'fifteen': 15,
    'sixteen': 16,
    'seventeen': 17,
    'eighteen': 18,
    'nineteen': 19,
    'twenty': 20,
}


def _word_to_int(s: str) -> Optional[int]:
    """Convert numeric words or digit strings to integers."""
    s = s.strip().lower()
    if s.isdigit():
        return int(s)
    return _NUM_WORDS.get(s)


class Rule(NamedTuple):
    """One pattern plus the extractor that turns its match into a filter value."""
    name: str
    field: str
    pattern: "re.Pattern[str]"
    extract: Callable[["re.Match[str]"], Optional[Any]]

    def apply(self, sentence: str) -> Optional[Any]:
        """Return this rule's value for an already lower-cased sentence, or None."""
        m = self.pattern.search(sentence)
        if not m:
            return None
        return self.extract(m)


def _longer_than(m: "re.Match[str]") -> Optional[int]:
    n = _word_to_int(m.group(1))
    return None if n is None else n + 1


def _shorter_than(m: "re.Match[str]") -> Optional[int]:
    n = _word_to_int(m.group(1))
    return None if n is None else n - 1


# Evaluation order matters only for rules sharing a field: the earlier one wins.
RULES = (
    Rule(
        "single_word",
        "word_count",
        re.compile(r"\b(?:single|one)[-\s]word\b"),
        lambda m: 1,
    ),
    Rule(
        "palindrome",
        "is_palindrome",
        re.compile(r"\bpalindrom(?:e|es|ic)\b"),
        lambda m: True,
    ),
    Rule(
        "longer_than",
        "min_length",
        re.compile(r"\blonger than\s+(\d+|[a-z]+)\b"),
        _longer_than,
    ),
    Rule(
        "shorter_than",
        "max_length",
        re.compile(r"\bshorter than\s+(\d+|[a-z]+)\b"),
        _shorter_than,
    ),
    Rule(
        "contains_character",
        "contains_character",
        re.compile(r"\b(?:containing the letter|containing|contains)\s+['\"]?([a-z0-9])(?![a-z0-9])"),
        lambda m: m.group(1),
    ),
    # Heuristic: "the first vowel" is taken to mean 'a'.
    Rule(
        "first_vowel",
        "contains_character",
        re.compile(r"\bfirst vowel\b"),
        lambda m: "a",
    ),
)


def compile_nl_query(query: str) -> FilterSpec:
    """Compile a natural language filter sentence into a FilterSpec.

    Every rule is tried against the lower-cased sentence and all matches are
    merged. Raises Unparseable when the sentence is blank or nothing matches.
    """
    if not isinstance(query, str):
        raise TypeMismatch("query must be a string", received=type(query))

    q = query.strip().lower()
    if not q:
        raise Unparseable(query, "Query must be a non-empty string")

    parsed: Dict[str, Any] = {}
    for rule in RULES:
        if rule.field in parsed:
            continue
        value = rule.apply(q)
        if value is not None:
            logger.debug("Rule %s matched %r -> %s=%r", rule.name, query, rule.field, value)
            parsed[rule.field] = value

    if not parsed:
        logger.info("Unparseable natural language query: %r", query)
        raise Unparseable(query)

    return FilterSpec(**parsed)


def interpret_nl_query(query: str) -> Dict[str, Any]:
    """Interpret a natural language query into the response's ``interpreted_query`` shape."""
    spec = compile_nl_query(query)
    return {'original': query, 'parsed_filters': spec.applied()}
