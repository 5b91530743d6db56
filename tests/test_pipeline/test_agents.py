"""Tests for the generator agents."""

from __future__ import annotations

import json

import pytest

from career_match.clients.llm_client import LLMResponse
from career_match.errors import ParseFailure, ServiceError, ValidationFailure
from career_match.models.artifact import CoverLetter, CvAssessment
from career_match.pipeline.cover_letter_writer import CoverLetterWriter
from career_match.pipeline.cv_assessor import CvAssessor
from career_match.pipeline.opportunity_finder import OpportunityFinder
from career_match.pipeline.profile_extractor import ProfileExtractor


def make_response(text: str) -> LLMResponse:
    return LLMResponse(text=text, input_tokens=100, output_tokens=50)


class TestProfileExtractor:
    async def test_parses_profile(self, mock_llm_client, profile_json, sample_resume_text):
        mock_llm_client.complete.return_value = make_response(json.dumps(profile_json))
        result = await ProfileExtractor(mock_llm_client).extract(sample_resume_text)

        assert not result.used_fallback
        assert result.profile.skills == profile_json["skills"]
        assert result.profile.experience_years == 3
        kwargs = mock_llm_client.complete.await_args.kwargs
        assert kwargs["max_tokens"] == 800
        assert kwargs["messages"][0]["content"].endswith(sample_resume_text)

    async def test_prose_wrapped_profile(self, mock_llm_client, profile_json):
        mock_llm_client.complete.return_value = make_response(
            "Here is the profile:\n" + json.dumps(profile_json) + "\nHope that helps!"
        )
        result = await ProfileExtractor(mock_llm_client).extract("x" * 100)
        assert result.profile.name == "Jane Doe"

    async def test_unparseable_falls_back(self, mock_llm_client, sample_resume_text):
        mock_llm_client.complete.return_value = make_response("I cannot read this resume.")
        result = await ProfileExtractor(mock_llm_client).extract(sample_resume_text)

        assert result.used_fallback
        assert result.profile.name == "Candidate"
        assert result.profile.summary == sample_resume_text[:200]

    async def test_invalid_shape_falls_back(self, mock_llm_client):
        mock_llm_client.complete.return_value = make_response('{"experience_years": -4}')
        result = await ProfileExtractor(mock_llm_client).extract("resume " * 10)
        assert result.used_fallback

    async def test_non_list_skills_falls_back(self, mock_llm_client, sample_resume_text):
        mock_llm_client.complete.return_value = make_response('{"name": "A", "skills": 5}')
        result = await ProfileExtractor(mock_llm_client).extract(sample_resume_text)

        assert result.used_fallback
        assert result.profile.skills == []

    async def test_service_error_propagates(self, mock_llm_client):
        mock_llm_client.complete.side_effect = ServiceError(500, "overloaded")
        with pytest.raises(ServiceError):
            await ProfileExtractor(mock_llm_client).extract("resume " * 10)


class TestOpportunityFinder:
    async def test_ids_renumbered(self, mock_llm_client, sample_profile, sample_preferences, listings_json):
        mock_llm_client.complete.return_value = make_response(json.dumps(listings_json))
        listings = await OpportunityFinder(mock_llm_client).search(sample_profile, sample_preferences)

        assert [j.id for j in listings] == list(range(1, 9))
        assert listings[0].organization == "Google"

    async def test_invalid_entries_dropped(self, mock_llm_client, sample_profile, sample_preferences, listings_json):
        items = [listings_json[0], "junk", {"title": "No company"}, listings_json[1]]
        mock_llm_client.complete.return_value = make_response(json.dumps(items))
        listings = await OpportunityFinder(mock_llm_client).search(sample_profile, sample_preferences)

        assert [j.id for j in listings] == [1, 2]
        assert [j.organization for j in listings] == ["Google", "Stripe"]

    async def test_non_list_requirements_dropped(self, mock_llm_client, sample_profile, sample_preferences, listings_json):
        items = [{**listings_json[0], "key_requirements": 3}, listings_json[1]]
        mock_llm_client.complete.return_value = make_response(json.dumps(items))
        listings = await OpportunityFinder(mock_llm_client).search(sample_profile, sample_preferences)

        assert [j.organization for j in listings] == ["Stripe"]
        assert listings[0].id == 1

    async def test_overflowing_score_clamped(self, mock_llm_client, sample_profile, sample_preferences):
        text = '[{"title": "T", "company": "C", "type": "Full-time", "match_score": 1e999}]'
        mock_llm_client.complete.return_value = make_response(text)
        listings = await OpportunityFinder(mock_llm_client).search(sample_profile, sample_preferences)

        assert listings[0].match_score == 0

    async def test_empty_array_is_validation_failure(self, mock_llm_client, sample_profile, sample_preferences):
        mock_llm_client.complete.return_value = make_response("[]")
        with pytest.raises(ValidationFailure):
            await OpportunityFinder(mock_llm_client).search(sample_profile, sample_preferences)

    async def test_prose_is_parse_failure(self, mock_llm_client, sample_profile, sample_preferences):
        mock_llm_client.complete.return_value = make_response("Sorry, no jobs today.")
        with pytest.raises(ParseFailure):
            await OpportunityFinder(mock_llm_client).search(sample_profile, sample_preferences)

    async def test_object_is_not_a_listing_set(self, mock_llm_client, sample_profile, sample_preferences):
        mock_llm_client.complete.return_value = make_response('{"jobs": "none"}')
        with pytest.raises(ParseFailure):
            await OpportunityFinder(mock_llm_client).search(sample_profile, sample_preferences)

    async def test_tools_forwarded(self, mock_llm_client, sample_profile, sample_preferences, listings_json):
        mock_llm_client.complete.return_value = make_response(json.dumps(listings_json))
        tool = {"type": "web_search_20250305", "name": "web_search", "max_uses": 5}
        await OpportunityFinder(mock_llm_client, tools=(tool,)).search(sample_profile, sample_preferences)
        assert mock_llm_client.complete.await_args.kwargs["tools"] == [tool]

    async def test_no_tools_by_default(self, mock_llm_client, sample_profile, sample_preferences, listings_json):
        mock_llm_client.complete.return_value = make_response(json.dumps(listings_json))
        await OpportunityFinder(mock_llm_client).search(sample_profile, sample_preferences)
        assert mock_llm_client.complete.await_args.kwargs["tools"] is None


class TestCoverLetterWriter:
    async def test_write(self, mock_llm_client, sample_profile, sample_preferences, sample_listing):
        mock_llm_client.complete.return_value = make_response("  Dear Hiring Manager,\n\nHello.  ")
        letter = await CoverLetterWriter(mock_llm_client).write(sample_profile, sample_preferences, sample_listing)

        assert isinstance(letter, CoverLetter)
        assert letter.text == "Dear Hiring Manager,\n\nHello."

    async def test_empty_text_rejected(self, mock_llm_client, sample_profile, sample_preferences, sample_listing):
        mock_llm_client.complete.return_value = make_response("   ")
        with pytest.raises(ValidationFailure):
            await CoverLetterWriter(mock_llm_client).write(sample_profile, sample_preferences, sample_listing)


class TestCvAssessor:
    async def test_assess(self, mock_llm_client, sample_profile, sample_listing, assessment_json):
        mock_llm_client.complete.return_value = make_response(
            "```json\n" + json.dumps(assessment_json) + "\n```"
        )
        tips = await CvAssessor(mock_llm_client).assess(sample_profile, sample_listing)

        assert isinstance(tips, CvAssessment)
        assert tips.missing_skills == ["Go"]

    async def test_unparseable(self, mock_llm_client, sample_profile, sample_listing):
        mock_llm_client.complete.return_value = make_response("You look great!")
        with pytest.raises(ParseFailure):
            await CvAssessor(mock_llm_client).assess(sample_profile, sample_listing)

    async def test_missing_fields(self, mock_llm_client, sample_profile, sample_listing):
        mock_llm_client.complete.return_value = make_response('{"missing_skills": ["Go"]}')
        with pytest.raises(ValidationFailure):
            await CvAssessor(mock_llm_client).assess(sample_profile, sample_listing)
