"""
Tests for the match explainer

Tests cover:
- Grounded match/gap assessment (role, location, skills, experience)
- Prompt contents: facts, word bound, example outputs
- Sentinel strings when generation is unavailable or fails
"""

import re

import pytest

from hirewise.exceptions import GenerationUnavailable
from hirewise.schemas import CandidateProfile, StructuredRequirement
from hirewise.services.generation import MockTextGenerator, UnavailableTextGenerator
from hirewise.services.match_explainer import (
    FAILED_SUMMARY,
    MAX_SUMMARY_WORDS,
    UNAVAILABLE_SUMMARY,
    MatchExplainer,
    assess_match,
    location_matches,
    parse_years,
    role_matches,
)


@pytest.fixture
def candidate():
    return CandidateProfile(
        id="c1",
        current_role="Senior React Developer",
        current_company="Acme",
        location="Mumbai",
        total_experience="6 years",
        technical_skills=["React", "TypeScript", "Redux"],
    )


@pytest.fixture
def requirement():
    return StructuredRequirement(
        raw_text="React developer, Pune, 5 years",
        role="react developer",
        location="pune",
        required_skills=["react"],
        min_experience_years=5,
    )


class TestAssessMatch:
    """Test deterministic match facts."""

    def test_matches_and_location_gap(self, candidate, requirement):
        assessment = assess_match(candidate, requirement)

        assert "Role: Senior React Developer matches React Developer" in assessment.matches
        assert "Skills: react" in assessment.matches
        assert "Experience: 6 years meets 5+ years" in assessment.matches
        assert assessment.gaps == ["Location mismatch (Mumbai vs Pune)"]

    def test_missing_skills_and_short_experience(self, candidate):
        requirement = StructuredRequirement(
            raw_text="x", required_skills=["react", "gps tracking"], min_experience_years=8
        )

        assessment = assess_match(candidate, requirement)

        assert "Missing skills: gps tracking" in assessment.gaps
        assert "Experience below requirement (6 vs 8+ years)" in assessment.gaps

    def test_skill_synonyms_match(self, candidate):
        candidate.technical_skills = ["ReactJS", "TS"]
        requirement = StructuredRequirement(raw_text="x", required_skills=["react", "typescript"])

        assessment = assess_match(candidate, requirement)

        assert assessment.gaps == []

    def test_text_only_requirement_has_no_facts(self, candidate):
        assessment = assess_match(candidate, StructuredRequirement(raw_text="anything"))

        assert assessment.matches == []
        assert assessment.gaps == []

    def test_missing_candidate_fields_are_gaps(self):
        requirement = StructuredRequirement(raw_text="x", role="fleet manager", location="delhi")

        assessment = assess_match(CandidateProfile(id="c2"), requirement)

        assert len(assessment.gaps) == 2
        assert assessment.matches == []


class TestMatchHelpers:
    @pytest.mark.parametrize("value,expected", [
        ("5 years", 5.0),
        ("3.5 yrs", 3.5),
        ("7", 7.0),
        ("", None),
        (None, None),
        ("fresher", None),
    ])
    def test_parse_years(self, value, expected):
        assert parse_years(value) == expected

    def test_role_matches(self):
        assert role_matches("Fleet Manager", "fleet manager")
        assert role_matches("Senior Fleet Manager", "fleet manager")
        assert role_matches("Warehouse Operations Manager", "warehouse manager")
        assert not role_matches("Truck Driver", "fleet manager")

    def test_location_matches(self):
        assert location_matches("Bengaluru, Karnataka", "bangalore")
        assert location_matches("Pune", "pune")
        assert location_matches("Mumbai", "remote")
        assert not location_matches("Mumbai", "pune")


class TestMatchExplainer:
    """Test summary generation and degradation."""

    @pytest.mark.asyncio
    async def test_prompt_is_grounded(self, candidate, requirement):
        generator = MockTextGenerator(["Role and skills match; location mismatch (Mumbai vs Pune)."])
        explainer = MatchExplainer(generator)

        await explainer.explain(candidate, requirement)

        prompt = generator.prompts[0]
        assert f"max {MAX_SUMMARY_WORDS} words" in prompt
        assert "Location mismatch (Mumbai vs Pune)" in prompt
        assert "Skills: React, TypeScript, Redux" in prompt
        assert '"location": "pune"' in prompt
        assert prompt.count("Example:") == 2
        assert "Do not invent" in prompt

    @pytest.mark.asyncio
    async def test_prompt_skills_are_capped(self, candidate, requirement):
        candidate.technical_skills = [f"skill{i}" for i in range(15)]
        generator = MockTextGenerator(["ok"])

        await MatchExplainer(generator).explain(candidate, requirement)

        assert "skill9" in generator.prompts[0]
        assert "skill10" not in generator.prompts[0]

    @pytest.mark.asyncio
    async def test_returns_generated_text(self, candidate, requirement):
        explainer = MatchExplainer(MockTextGenerator(['"Strong React match; location mismatch (Mumbai vs Pune)."']))

        summary = await explainer.explain(candidate, requirement)

        assert summary == "Strong React match; location mismatch (Mumbai vs Pune)."
        assert re.search(r"location mismatch", summary, re.IGNORECASE)

    @pytest.mark.asyncio
    async def test_unavailable_generator_sentinel(self, candidate, requirement):
        summary = await MatchExplainer(UnavailableTextGenerator()).explain(candidate, requirement)

        assert summary == UNAVAILABLE_SUMMARY

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [RuntimeError("500 from provider"), "", "   "])
    async def test_failure_sentinel(self, candidate, requirement, response):
        summary = await MatchExplainer(MockTextGenerator([response])).explain(candidate, requirement)

        assert summary == FAILED_SUMMARY

    @pytest.mark.asyncio
    async def test_unavailable_raised_mid_call(self, candidate, requirement):
        explainer = MatchExplainer(MockTextGenerator([GenerationUnavailable()]))

        assert await explainer.explain(candidate, requirement) == UNAVAILABLE_SUMMARY

    @pytest.mark.asyncio
    async def test_text_only_requirement_still_explained(self, candidate):
        generator = MockTextGenerator(["Limited information to compare."])

        summary = await MatchExplainer(generator).explain(candidate, StructuredRequirement(raw_text="someone good"))

        assert summary
        assert '"text": "someone good"' in generator.prompts[0]
