from __future__ import annotations  # Learning roadmap generation

import json
import logging
from pathlib import Path
from textwrap import dedent
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from config import LlmRoute, load_route
from llm_gateway import (
    HttpClient,
    LlmGatewayError,
    PaymentRequiredError,
    RateLimitedError,
    complete,
    strip_code_fences,
)

logger = logging.getLogger(__name__)

GENERATE_ROADMAP_KEY = "roadmap.generate_roadmap"  # Registry key for roadmap generation

SYSTEM_PROMPT = "You are an expert career and learning advisor. Always respond with valid JSON only, no markdown formatting."

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again later."
CREDITS_MESSAGE = "AI credits exhausted. Please add credits."
PARSE_FAILURE_MESSAGE = "Failed to parse roadmap response"
EMPTY_MESSAGE = "No content generated from AI"


class RoadmapResource(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    type: str
    url: Optional[str] = None
    is_free: Optional[bool] = Field(default=None, alias="isFree")


class FreeResource(BaseModel):
    name: str
    type: str
    url: str
    description: str


class RoadmapPhase(BaseModel):  # One stage of the learning path
    id: int
    title: str
    duration: str
    description: str
    topics: List[str] = Field(default_factory=list)
    resources: List[RoadmapResource] = Field(default_factory=list)
    milestone: str


class Roadmap(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    summary: str
    total_duration: str = Field(alias="totalDuration")
    phases: List[RoadmapPhase] = Field(default_factory=list)
    free_resources: Optional[List[FreeResource]] = Field(default=None, alias="freeResources")


def generate_roadmap(
    goal: str,
    goal_type: str,
    experience_level: str,
    *,
    route: LlmRoute,
    client: Optional[HttpClient] = None,
) -> Roadmap:
    """Ask the route for a phased learning plan built around free resources.

    Raises :class:`RateLimitedError` and :class:`PaymentRequiredError` with
    user-facing messages, and :class:`LlmGatewayError` when the reply is empty or
    cannot be parsed.
    """

    if not goal.strip() or not goal_type.strip() or not experience_level.strip():
        raise ValueError("goal, goal_type and experience_level are required")
    logger.info("Generating roadmap goal=%s type=%s level=%s", goal, goal_type, experience_level)
    messages = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": _build_task(goal, goal_type, experience_level)},
    ]
    try:
        content = complete(messages, cfg=route, client=client)
    except RateLimitedError as exc:
        raise RateLimitedError(RATE_LIMIT_MESSAGE) from exc
    except PaymentRequiredError as exc:
        raise PaymentRequiredError(CREDITS_MESSAGE) from exc
    if not content.strip():
        raise LlmGatewayError(EMPTY_MESSAGE)
    return parse_roadmap(content)


def parse_roadmap(content: str) -> Roadmap:
    try:
        return Roadmap.model_validate(json.loads(strip_code_fences(content)))
    except (ValueError, ValidationError) as exc:
        logger.error("Failed to parse roadmap JSON: %s", exc)
        raise LlmGatewayError(PARSE_FAILURE_MESSAGE) from exc


def generate_with_config(
    goal: str,
    goal_type: str,
    experience_level: str,
    *,
    config_path: Path,
) -> Roadmap:  # Convenience helper using app config
    route = load_route(config_path, GENERATE_ROADMAP_KEY)
    return generate_roadmap(goal, goal_type, experience_level, route=route)


def _build_task(goal: str, goal_type: str, experience_level: str) -> str:  # Build task prompt for LLM
    return dedent(
        f"""
        You are an expert career and learning advisor. Generate a detailed learning roadmap for the following:

        Goal: {goal}
        Goal Type: {goal_type}
        Experience Level: {experience_level}

        Create a comprehensive roadmap with 5-7 phases. For each phase, provide:
        1. Phase title
        2. Duration (in weeks)
        3. Description (2-3 sentences)
        4. 4-6 specific topics/skills to learn
        5. 3-4 FREE recommended resources (courses, books, websites) - ONLY include free resources from platforms like:
           - freeCodeCamp, Khan Academy, Coursera (free courses), edX (audit mode)
           - YouTube channels, MDN Web Docs, W3Schools
           - Official documentation, GitHub repositories, free eBooks
           - GeeksforGeeks, LeetCode (free tier), HackerRank
        6. A milestone to achieve at the end of this phase

        IMPORTANT: Return ONLY valid JSON in this exact format, no markdown or extra text:
        {{
          "title": "Roadmap title",
          "summary": "Brief overview of the learning path",
          "totalDuration": "Total estimated time",
          "phases": [
            {{
              "id": 1,
              "title": "Phase title",
              "duration": "X weeks",
              "description": "Phase description",
              "topics": ["topic1", "topic2", "topic3", "topic4"],
              "resources": [
                {{"name": "Resource name", "type": "course/book/website/video", "url": "https://actual-url.com", "isFree": true}}
              ],
              "milestone": "What you should be able to do after this phase"
            }}
          ],
          "freeResources": [
            {{"name": "Top free resource", "type": "platform", "url": "https://url.com", "description": "Brief description of this resource"}}
          ]
        }}
        """
    ).strip()
