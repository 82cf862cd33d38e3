from datetime import datetime
from typing import Dict, List

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from string_analyzer.database import Base


class AnalyzedString(Base):
    __tablename__ = "analyzed_strings"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    length: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    is_palindrome: Mapped[bool] = mapped_column(Boolean, nullable=False, index=True)
    unique_characters: Mapped[int] = mapped_column(Integer, nullable=False)
    word_count: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    sha256_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    character_frequency_map: Mapped[Dict[str, int]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)

    characters: Mapped[List["StringCharacter"]] = relationship(
        back_populates="string",
        cascade="all, delete-orphan",
    )


class StringCharacter(Base):
    """One row per distinct character of a stored string, for containment queries."""
    __tablename__ = "string_characters"

    string_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("analyzed_strings.id", ondelete="CASCADE"), primary_key=True
    )
    character: Mapped[str] = mapped_column(String(1), primary_key=True, index=True)
    count: Mapped[int] = mapped_column(Integer, nullable=False)

    string: Mapped[AnalyzedString] = relationship(back_populates="characters")
