"""Pydantic models for the candidate profile and search preferences."""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, Field, field_validator

SUMMARY_MAX_CHARS = 600


class CandidateProfile(BaseModel):
    name: str = "Candidate"
    skills: list[str] = Field(default_factory=list)
    experience_years: float = Field(default=0, ge=0)
    education: str = "N/A"
    current_role: str = "Professional"
    summary: str = ""

    model_config = {"frozen": True}

    @field_validator("skills", mode="before")
    @classmethod
    def _coerce_skills(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [s.strip() for s in value.split(",") if s.strip()]
        if not isinstance(value, (list, tuple)):
            return value  # rejected by list validation
        return [str(s).strip() for s in value if str(s).strip()]

    @field_validator("experience_years", mode="before")
    @classmethod
    def _coerce_years(cls, value):
        if value is None or value == "":
            return 0
        if isinstance(value, str):
            match = re.search(r"\d+(?:\.\d+)?", value)
            return float(match.group()) if match else 0
        return value

    @field_validator("name", "education", "current_role", "summary", mode="before")
    @classmethod
    def _coerce_text(cls, value):
        return "" if value is None else str(value)

    @field_validator("summary")
    @classmethod
    def _bound_summary(cls, value: str) -> str:
        return value[:SUMMARY_MAX_CHARS]

    @classmethod
    def fallback(cls, sanitized_text: str) -> CandidateProfile:
        """Minimal profile used when extraction output cannot be parsed."""
        return cls(summary=sanitized_text[:200])


JobType = Literal["both", "intern", "full"]


class SearchPreferences(BaseModel):
    linkedin: str = ""
    email: str = ""
    job_type: JobType = "both"
    query: str = ""
