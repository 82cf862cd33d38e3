from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StringRequest(BaseModel):
    """Request schema for creating/analyzing a string."""
    value: str

    @field_validator("value")
    @classmethod
    def _encodable(cls, value: str) -> str:
        # JSON escapes can smuggle in lone surrogates, which have no UTF-8 form.
        try:
            value.encode("utf-8")
        except UnicodeEncodeError:
            raise ValueError("value must be valid Unicode text") from None
        return value


class StringProperties(BaseModel):
    """Computed properties of an analyzed string."""
    model_config = ConfigDict(frozen=True)

    length: int = Field(..., ge=0)
    is_palindrome: bool
    unique_characters: int = Field(..., ge=0)
    word_count: int = Field(..., ge=0)
    sha256_hash: str = Field(..., min_length=64, max_length=64)
    character_frequency_map: Dict[str, int]

    @field_validator("character_frequency_map")
    @classmethod
    def _single_character_keys(cls, freq: Dict[str, int]) -> Dict[str, int]:
        for char, count in freq.items():
            if len(char) != 1:
                raise ValueError(f"frequency map key {char!r} is not a single character")
            if count <= 0:
                raise ValueError(f"frequency map count for {char!r} must be positive")
        return freq

    @property
    def identifier(self) -> str:
        return self.sha256_hash


class StringRecord(BaseModel):
    """A stored string together with its properties. Never updated after creation."""
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    value: str
    properties: StringProperties
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _as_utc(cls, dt: datetime) -> datetime:
        # SQLite hands back naive datetimes; everything is written in UTC.
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)


class FilterSpec(BaseModel):
    """Structured filter criteria. Set fields are AND-combined; unset fields are ignored."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    is_palindrome: Optional[bool] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    word_count: Optional[int] = None
    contains_character: Optional[str] = Field(default=None, min_length=1, max_length=1)

    def applied(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)

    def is_empty(self) -> bool:
        return not self.applied()


class InterpretedQuery(BaseModel):
    original: str
    parsed_filters: Dict[str, Any]


class FilterResponse(BaseModel):
    """Response schema for filtered results."""
    data: List[StringRecord]
    count: int
    interpreted_query: Optional[InterpretedQuery] = None
    filters_applied: Optional[Dict[str, Any]] = None


class ErrorResponse(BaseModel):
    error: str
    details: Optional[Any] = None
