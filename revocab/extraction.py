"""
Boundary models and interface for the vocabulary extraction collaborator.

The extraction service turns a photographed word list into metadata plus
word pairs. revocab only consumes the result shape defined here.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ExtractedMetadata(BaseModel):
    """Page context as reported by the extraction service (all optional)."""

    model_config = ConfigDict(extra="ignore")

    language: Optional[str] = None
    grade: Optional[str] = None
    chapter: Optional[str] = None
    page: Optional[str] = None

    @field_validator("language", "grade", "chapter", "page", mode="before")
    @classmethod
    def clean_placeholder(cls, value):
        """Treat blank values and literal 'null'/'undefined' as missing."""
        if value is None:
            return None
        text = str(value).strip()
        if not text or text.lower() in ("null", "undefined", "none"):
            return None
        return text


class VocabPair(BaseModel):
    model_config = ConfigDict(extra="ignore")

    original: str = Field(..., min_length=1)
    translation: str = Field(..., min_length=1)

    @field_validator("original", "translation", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value


class ExtractionResult(BaseModel):
    """Output of one extraction call (one photographed page)."""

    model_config = ConfigDict(extra="ignore")

    metadata: ExtractedMetadata = Field(default_factory=ExtractedMetadata)
    vocabulary: List[VocabPair] = Field(default_factory=list)

    @field_validator("metadata", mode="before")
    @classmethod
    def default_metadata(cls, value):
        return {} if value is None else value

    @field_validator("vocabulary", mode="before")
    @classmethod
    def default_vocabulary(cls, value):
        return [] if value is None else value


class BaseExtractor(ABC):
    """
    Abstract base class for image-to-vocabulary extraction services.
    """

    @abstractmethod
    def extract(self, image: bytes) -> ExtractionResult:
        """
        Extract vocabulary pairs and page metadata from an image.

        Args:
            image: Raw image bytes (e.g. JPEG).

        Returns:
            The extraction result for this page.
        """
        pass
