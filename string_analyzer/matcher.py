"""Evaluate a FilterSpec, either in memory or as a SQL query.

``matches`` and ``to_store_query`` implement the same predicate: a record is
selected by the query exactly when ``matches`` returns True for its properties.
"""
from typing import Tuple

from sqlalchemy import Select, and_, select

from .models import AnalyzedString, StringCharacter
from .schemas import FilterSpec, StringProperties

# SQL integer columns are 64-bit signed; bounds past that are clamped.
_SQL_INT_MAX = 2**63 - 1
_SQL_INT_MIN = -(2**63)


def _sql_int(n: int) -> int:
    return max(_SQL_INT_MIN, min(n, _SQL_INT_MAX))


def character_candidates(ch: str) -> Tuple[str, ...]:
    """Keys to look up for a filter character against a case-sensitive frequency map."""
    keys = []
    for c in (ch, ch.lower(), ch.upper()):
        # some case mappings expand to several characters and can never be a key
        if len(c) == 1 and c not in keys:
            keys.append(c)
    return tuple(keys)


def matches(spec: FilterSpec, properties: StringProperties) -> bool:
    if spec.is_palindrome is not None and properties.is_palindrome != spec.is_palindrome:
        return False

    if spec.min_length is not None and properties.length < spec.min_length:
        return False

    if spec.max_length is not None and properties.length > spec.max_length:
        return False

    if spec.word_count is not None and properties.word_count != spec.word_count:
        return False

    if spec.contains_character is not None:
        freq_map = properties.character_frequency_map
        if not any(freq_map.get(c, 0) > 0 for c in character_candidates(spec.contains_character)):
            return False

    return True


def to_store_query(spec: FilterSpec) -> Select:
    """Build the SELECT returning matching records, newest first."""
    query = select(AnalyzedString)

    if spec.is_palindrome is not None:
        query = query.where(AnalyzedString.is_palindrome.is_(spec.is_palindrome))
    if spec.min_length is not None:
        query = query.where(AnalyzedString.length >= _sql_int(spec.min_length))
    if spec.max_length is not None:
        query = query.where(AnalyzedString.length <= _sql_int(spec.max_length))
    if spec.word_count is not None:
        query = query.where(AnalyzedString.word_count == _sql_int(spec.word_count))
    if spec.contains_character is not None:
        candidates = character_candidates(spec.contains_character)
        query = query.where(
            AnalyzedString.characters.any(
                and_(StringCharacter.character.in_(candidates), StringCharacter.count > 0)
            )
        )

    return query.order_by(AnalyzedString.created_at.desc(), AnalyzedString.id.desc())
