"""Agent 1: Profile Extractor - turns resume text into a CandidateProfile."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pydantic import ValidationError

from career_match.clients.llm_client import LLMClient
from career_match.models.profile import CandidateProfile
from career_match.pipeline.prompts import build_profile_request
from career_match.utils.json_parser import parse_structured

logger = logging.getLogger(__name__)


@dataclass
class ProfileResult:
    profile: CandidateProfile
    used_fallback: bool = False


class ProfileExtractor:
    def __init__(self, llm: LLMClient, max_tokens: int = 800):
        self.llm = llm
        self.max_tokens = max_tokens

    async def extract(self, resume_text: str) -> ProfileResult:
        """Extract a profile from sanitized resume text.

        Unparseable or invalid output degrades to a minimal profile built from
        the resume text so the user is never blocked. ServiceError propagates.
        """
        request = build_profile_request(resume_text, max_tokens=self.max_tokens)
        response = await self.llm.complete(
            system=request.system,
            messages=request.messages,
            max_tokens=request.max_tokens,
        )

        data = parse_structured(response.text, "object")
        if data is None:
            logger.warning("Profile output was not JSON, using fallback profile")
            return ProfileResult(CandidateProfile.fallback(resume_text), used_fallback=True)
        try:
            return ProfileResult(CandidateProfile.model_validate(data))
        except ValidationError as exc:
            logger.warning("Profile output failed validation, using fallback: %s", exc)
            return ProfileResult(CandidateProfile.fallback(resume_text), used_fallback=True)
