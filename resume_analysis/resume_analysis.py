from __future__ import annotations  # ATS-style resume scoring through the LLM gateway

import json
import logging
from pathlib import Path
from textwrap import dedent
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from config import LlmRoute, load_route
from config.settings import settings
from llm_gateway import HttpClient, complete, extract_json_object

logger = logging.getLogger(__name__)

ANALYZE_RESUME_KEY = "resume_analysis.analyze_resume"  # Registry key for the resume route


class ResumeTooShortError(ValueError):  # Resume text below the analysis threshold
    pass


class ATSResult(BaseModel):  # Resume analysis attached to the final report
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    ats_score: int = Field(ge=0, le=100, alias="atsScore")
    keyword_match_percent: int = Field(ge=0, le=100, alias="keywordMatchPercent")
    missing_keywords: List[str] = Field(default_factory=list, alias="missingKeywords")
    formatting_issues: List[str] = Field(default_factory=list, alias="formattingIssues")
    improvements: List[str] = Field(default_factory=list)
    role_compatibility_score: int = Field(ge=0, le=100, alias="roleCompatibilityScore")
    strengths: List[str] = Field(default_factory=list)
    summary: str = ""


DEFAULT_ATS_RESULT = ATSResult(
    ats_score=65,
    keyword_match_percent=60,
    missing_keywords=["Consider adding role-specific keywords"],
    formatting_issues=["Unable to fully analyze formatting"],
    improvements=["Ensure resume is well-structured", "Add quantifiable achievements"],
    role_compatibility_score=60,
    strengths=["Resume content provided"],
    summary="Resume analysis completed with limited data. Consider providing more detailed content.",
)


def analyze_resume(
    resume_text: str,
    target_role: Optional[str],
    *,
    route: LlmRoute,
    client: Optional[HttpClient] = None,
) -> ATSResult:  # Score a resume against a target role
    if len(resume_text.strip()) < settings.RESUME_MIN_CHARS:
        raise ResumeTooShortError("Resume text is too short. Please provide more content.")
    role = (target_role or "").strip() or "General"
    logger.info("Analyzing resume for role: %s", role)
    content = complete(
        [{"role": "user", "content": _build_task(resume_text, role)}],
        cfg=route,
        client=client,
    )
    result = parse_ats_payload(content)
    logger.info("Resume analysis complete, ATS score: %d", result.ats_score)
    return result


def analyze_with_config(
    resume_text: str,
    target_role: Optional[str],
    *,
    config_path: Path,
) -> ATSResult:  # Convenience helper using app config
    route = load_route(config_path, ANALYZE_RESUME_KEY)
    return analyze_resume(resume_text, target_role, route=route)


def parse_ats_payload(content: str) -> ATSResult:
    """Validate the JSON object embedded in ``content``, falling back to the default result."""

    raw = extract_json_object(content)
    if raw is None:
        logger.warning("No JSON found in resume analysis reply")
        return DEFAULT_ATS_RESULT
    try:
        return ATSResult.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError) as exc:
        logger.warning("Failed to parse resume analysis reply: %s", exc)
        return DEFAULT_ATS_RESULT


def _build_task(resume_text: str, target_role: str) -> str:  # Build task prompt for LLM
    header = dedent(
        f"""
        Analyze this resume for ATS (Applicant Tracking System) compatibility and job fit.

        TARGET ROLE: {target_role}

        RESUME CONTENT:
        """
    ).strip()
    contract = dedent(
        """
        Provide a JSON response with this exact structure (no markdown, just raw JSON):
        {
          "atsScore": <number 0-100>,
          "keywordMatchPercent": <number 0-100>,
          "missingKeywords": ["keyword1", "keyword2", ...],
          "formattingIssues": ["issue1", "issue2", ...],
          "improvements": ["tip1", "tip2", ...],
          "roleCompatibilityScore": <number 0-100>,
          "strengths": ["strength1", "strength2", ...],
          "summary": "<brief 2-3 sentence analysis>"
        }

        Evaluate based on:
        1. Keyword relevance to the target role
        2. ATS-friendly formatting (no tables, complex layouts)
        3. Action verbs and quantifiable achievements
        4. Skills section clarity
        5. Contact information presence
        6. Professional summary quality
        7. Experience relevance
        """
    ).strip()
    return f"{header}\n{resume_text}\n\n{contract}"
