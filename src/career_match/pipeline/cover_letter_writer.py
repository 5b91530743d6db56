"""Agent 3: Cover Letter Writer."""

from __future__ import annotations

from career_match.clients.llm_client import LLMClient
from career_match.errors import ValidationFailure
from career_match.models.artifact import CoverLetter
from career_match.models.opportunity import OpportunityListing
from career_match.models.profile import CandidateProfile, SearchPreferences
from career_match.pipeline.prompts import build_cover_letter_request


class CoverLetterWriter:
    def __init__(self, llm: LLMClient, max_tokens: int = 900):
        self.llm = llm
        self.max_tokens = max_tokens

    async def write(
        self,
        profile: CandidateProfile,
        preferences: SearchPreferences,
        listing: OpportunityListing,
    ) -> CoverLetter:
        """Write a cover letter tailored to one listing."""
        request = build_cover_letter_request(
            profile, preferences, listing, max_tokens=self.max_tokens
        )
        response = await self.llm.complete(
            system=request.system,
            messages=request.messages,
            max_tokens=request.max_tokens,
        )
        text = response.text.strip()
        if not text:
            raise ValidationFailure("The cover letter came back empty. Please try again.")
        return CoverLetter(text=text)
