"""Pydantic models for generated opportunity listings."""

from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, field_validator

from career_match.utils.url_validator import normalize_apply_url

Category = Literal["Internship", "Full-time"]

STRONG_MATCH_THRESHOLD = 85


class OpportunityListing(BaseModel):
    id: int = Field(ge=1)
    title: str
    organization: str = Field(validation_alias=AliasChoices("organization", "company"))
    category: Category = Field(validation_alias=AliasChoices("category", "type"))
    location: str = ""
    match_score: int = 0
    key_requirements: list[str] = Field(default_factory=list)
    description: str = ""
    apply_url: str | None = None
    source_label: str = Field(
        default="", validation_alias=AliasChoices("source_label", "source")
    )
    posted_label: str = Field(
        default="", validation_alias=AliasChoices("posted_label", "posted")
    )

    model_config = {"frozen": True, "populate_by_name": True}

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value):
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered.startswith("intern"):
                return "Internship"
            if lowered.replace(" ", "-") in ("full-time", "fulltime"):
                return "Full-time"
        return value

    @field_validator("match_score", mode="before")
    @classmethod
    def _clamp_score(cls, value):
        try:
            score = int(float(value))
        except (TypeError, ValueError, OverflowError):
            return 0
        return max(0, min(100, score))

    @field_validator("key_requirements", mode="before")
    @classmethod
    def _coerce_requirements(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        if not isinstance(value, (list, tuple)):
            return value
        return [str(r) for r in value]

    @field_validator("apply_url", mode="before")
    @classmethod
    def _check_url(cls, value):
        if not value:
            return None
        return normalize_apply_url(str(value))

    @property
    def is_strong_match(self) -> bool:
        return self.match_score >= STRONG_MATCH_THRESHOLD
