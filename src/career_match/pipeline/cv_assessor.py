"""Agent 4: CV Assessor - gap analysis of the candidate against one listing."""

from __future__ import annotations

from pydantic import ValidationError

from career_match.clients.llm_client import LLMClient
from career_match.errors import ParseFailure, ValidationFailure
from career_match.models.artifact import CvAssessment
from career_match.models.opportunity import OpportunityListing
from career_match.models.profile import CandidateProfile
from career_match.pipeline.prompts import build_assessment_request
from career_match.utils.json_parser import parse_structured


class CvAssessor:
    def __init__(self, llm: LLMClient, max_tokens: int = 900):
        self.llm = llm
        self.max_tokens = max_tokens

    async def assess(
        self, profile: CandidateProfile, listing: OpportunityListing
    ) -> CvAssessment:
        request = build_assessment_request(profile, listing, max_tokens=self.max_tokens)
        response = await self.llm.complete(
            system=request.system,
            messages=request.messages,
            max_tokens=request.max_tokens,
        )
        data = parse_structured(response.text, "object")
        if data is None:
            raise ParseFailure("Could not parse tips.")
        data.pop("kind", None)
        try:
            return CvAssessment.model_validate(data)
        except ValidationError as exc:
            raise ValidationFailure(f"Assessment is missing required fields: {exc}") from exc
