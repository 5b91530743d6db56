"""Data models for the career match workflow."""

from career_match.models.artifact import (
    ArtifactKind,
    CoverLetter,
    CvAssessment,
    GeneratedArtifact,
    Improvement,
    SectionSuggestion,
)
from career_match.models.opportunity import Category, OpportunityListing
from career_match.models.profile import CandidateProfile, SearchPreferences

__all__ = [
    "ArtifactKind",
    "CandidateProfile",
    "Category",
    "CoverLetter",
    "CvAssessment",
    "GeneratedArtifact",
    "Improvement",
    "OpportunityListing",
    "SearchPreferences",
    "SectionSuggestion",
]
