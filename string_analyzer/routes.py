from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from . import services
from .errors import Conflict, InvalidFilter, NotFound, Unparseable
from .schemas import ErrorResponse, FilterResponse, StringRecord, StringRequest
from .store import Store, get_store

router = APIRouter()


@router.get("/health")
def health() -> dict:
    """Basic health check endpoint."""
    return {"status": "ok"}


@router.post(
    "/strings",
    response_model=StringRecord,
    status_code=201,
    summary="Analyze and store a string",
    responses={409: {"model": ErrorResponse}, 400: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def create_string_endpoint(payload: StringRequest, store: Store = Depends(get_store)) -> StringRecord:
    try:
        return services.create_string(store, payload.value)
    except Conflict as e:
        raise HTTPException(status_code=409, detail={"error": str(e), "details": {"id": e.identifier}})


@router.get(
    "/strings/filter-by-natural-language",
    response_model=FilterResponse,
    response_model_exclude_none=True,
    summary="Filter strings with a natural language query",
    description=(
        "Recognized phrasings: 'single word' / 'one word', 'palindrome' / 'palindromic', "
        "'longer than N', 'shorter than N', 'containing the letter X' / 'contains X', "
        "and 'first vowel' (treated as the letter a)."
    ),
    responses={400: {"model": ErrorResponse}},
)
def filter_by_natural_language(
    query: str = Query(..., description="Natural language filter", examples=["single word palindromes"]),
    store: Store = Depends(get_store),
) -> dict:
    try:
        return services.filter_by_natural_language(store, query)
    except Unparseable as e:
        raise HTTPException(status_code=400, detail={"error": str(e), "details": {"query": e.sentence}})


@router.get(
    "/strings/{string_value}",
    response_model=StringRecord,
    summary="Get a string by its raw value",
    responses={404: {"model": ErrorResponse}},
)
def get_string_endpoint(string_value: str, store: Store = Depends(get_store)) -> StringRecord:
    try:
        return services.get_string_by_value(store, string_value)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get(
    "/strings",
    response_model=FilterResponse,
    response_model_exclude_none=True,
    summary="List strings",
    description="All filters are optional and combine with AND. Results are newest first.",
    responses={400: {"model": ErrorResponse}},
)
def get_all_strings(
    is_palindrome: Optional[bool] = Query(None),
    min_length: Optional[int] = Query(None, description="Inclusive lower bound on length"),
    max_length: Optional[int] = Query(None, description="Inclusive upper bound on length"),
    word_count: Optional[int] = Query(None),
    contains_character: Optional[str] = Query(None, description="Single character, case-insensitive"),
    store: Store = Depends(get_store),
) -> dict:
    try:
        spec = services.build_filter_spec(is_palindrome, min_length, max_length, word_count, contains_character)
    except InvalidFilter as e:
        raise HTTPException(status_code=400, detail={"error": "Invalid query parameters", "details": str(e)})
    return services.list_strings(store, spec)


@router.delete(
    "/strings/{string_value}",
    status_code=204,
    summary="Delete a string by its raw value",
    responses={404: {"model": ErrorResponse}},
)
def delete_string_endpoint(string_value: str, store: Store = Depends(get_store)) -> Response:
    try:
        services.delete_string_by_value(store, string_value)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(status_code=204)
