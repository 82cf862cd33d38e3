import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .analyzer import analyze
from .errors import InvalidFilter, NotFound
from .identifier import compute_identifier
from .nlp import interpret_nl_query
from .schemas import FilterSpec, StringRecord
from .store import Store

logger = logging.getLogger("string_analyzer.services")


def create_string(store: Store, value: str) -> StringRecord:
    """Analyze and store a string. Raises Conflict if it already exists."""
    props = analyze(value)
    record = StringRecord(
        id=props.sha256_hash,
        value=value,
        properties=props,
        created_at=datetime.now(timezone.utc),
    )
    return store.put(record)


def get_string_by_value(store: Store, string_value: str) -> StringRecord:
    """Lookup record by hashing the exact provided string value."""
    return store.get_by_id(compute_identifier(string_value))


def delete_string_by_value(store: Store, string_value: str) -> None:
    identifier = compute_identifier(string_value)
    if not store.delete_by_id(identifier):
        raise NotFound(identifier)


def build_filter_spec(
    is_palindrome: Optional[bool] = None,
    min_length: Optional[int] = None,
    max_length: Optional[int] = None,
    word_count: Optional[int] = None,
    contains_character: Optional[str] = None,
) -> FilterSpec:
    filters: Dict[str, Any] = {}

    if is_palindrome is not None:
        filters["is_palindrome"] = is_palindrome

    if min_length is not None:
        if min_length < 0:
            raise InvalidFilter("min_length must be non-negative")
        filters["min_length"] = min_length

    if max_length is not None:
        if max_length < 0:
            raise InvalidFilter("max_length must be non-negative")
        filters["max_length"] = max_length

    if word_count is not None:
        if word_count < 0:
            raise InvalidFilter("word_count must be non-negative")
        filters["word_count"] = word_count

    if contains_character is not None:
        ch = contains_character.lower()
        if len(contains_character) != 1 or len(ch) != 1:
            raise InvalidFilter("contains_character must be a single character")
        filters["contains_character"] = ch

    # min_length > max_length is left alone: it simply matches nothing.
    return FilterSpec(**filters)


def list_strings(store: Store, spec: FilterSpec) -> Dict[str, Any]:
    records = store.find(spec)
    return {
        "data": records,
        "count": len(records),
        "filters_applied": spec.applied(),
    }


def filter_by_natural_language(store: Store, query: str) -> Dict[str, Any]:
    interpreted = interpret_nl_query(query)
    records = store.find(FilterSpec(**interpreted["parsed_filters"]))
    logger.info("Natural language query %r -> %s (%d matches)", query, interpreted["parsed_filters"], len(records))
    return {
        "data": records,
        "count": len(records),
        "interpreted_query": interpreted,
    }
