"""Pydantic models for per-listing generated artifacts."""

from __future__ import annotations

from enum import Enum
from typing import Literal, Union

from pydantic import BaseModel, Field


class ArtifactKind(str, Enum):
    COVER_LETTER = "cover_letter"
    CV_ASSESSMENT = "cv_assessment"


class CoverLetter(BaseModel):
    kind: Literal["cover_letter"] = "cover_letter"
    text: str

    model_config = {"frozen": True}


class SectionSuggestion(BaseModel):
    section: str
    why: str = ""


class Improvement(BaseModel):
    area: str
    tip: str = ""


class CvAssessment(BaseModel):
    kind: Literal["cv_assessment"] = "cv_assessment"
    overall_fit: str
    missing_skills: list[str] = Field(default_factory=list)
    missing_keywords: list[str] = Field(default_factory=list)
    sections_to_add: list[SectionSuggestion] = Field(default_factory=list)
    improvements: list[Improvement] = Field(default_factory=list)

    model_config = {"frozen": True}


GeneratedArtifact = Union[CoverLetter, CvAssessment]
