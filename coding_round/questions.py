from __future__ import annotations  # Coding problems: built-in set and LLM-generated sets

import logging
from pathlib import Path
from textwrap import dedent
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from config import LlmRoute, load_route
from interview_setup import InterviewConfig
from llm_gateway import HttpClient, call

logger = logging.getLogger(__name__)

GENERATE_QUESTIONS_KEY = "coding_round.generate_questions"  # Registry key for question generation

Difficulty = Literal["Easy", "Medium", "Hard"]

DIFFICULTY_MIX = {
    "beginner": "2 Easy, 1 Medium",
    "intermediate": "1 Easy, 2 Medium",
    "advanced": "1 Medium, 2 Hard",
}


class CodingExample(BaseModel):
    model_config = ConfigDict(frozen=True)

    input: str
    output: str
    explanation: Optional[str] = None


class CodingQuestion(BaseModel):  # One problem shown in the coding round
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    title: str
    difficulty: Difficulty
    description: str
    examples: List[CodingExample] = Field(default_factory=list)
    constraints: List[str] = Field(default_factory=list)
    starter_code: str = Field(alias="starterCode")
    hints: List[str] = Field(default_factory=list)


class CodingQuestionSet(BaseModel):  # Envelope returned by the question route
    questions: List[CodingQuestion] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_ids(self) -> "CodingQuestionSet":
        ids = [question.id for question in self.questions]
        if len(ids) != len(set(ids)):
            raise ValueError("question ids must be unique")
        return self


DEFAULT_QUESTIONS: List[CodingQuestion] = [
    CodingQuestion(
        id=1,
        title="Two Sum",
        difficulty="Easy",
        description=(
            "Given an array of integers nums and an integer target, return indices of the two numbers "
            "such that they add up to target.\n\nYou may assume that each input would have exactly one "
            "solution, and you may not use the same element twice.\n\nYou can return the answer in any order."
        ),
        examples=[
            CodingExample(
                input="nums = [2,7,11,15], target = 9",
                output="[0,1]",
                explanation="Because nums[0] + nums[1] == 9, we return [0, 1].",
            ),
            CodingExample(input="nums = [3,2,4], target = 6", output="[1,2]"),
        ],
        constraints=["2 <= nums.length <= 10^4", "-10^9 <= nums[i] <= 10^9", "-10^9 <= target <= 10^9"],
        starter_code="function twoSum(nums, target) {\n  // Write your code here\n  \n}",
        hints=[
            "Try using a hash map to store values you've seen",
            "For each number, check if target - num exists in the map",
        ],
    ),
    CodingQuestion(
        id=2,
        title="Valid Parentheses",
        difficulty="Easy",
        description=(
            "Given a string s containing just the characters '(', ')', '{', '}', '[' and ']', determine if "
            "the input string is valid.\n\nAn input string is valid if:\n1. Open brackets must be closed by "
            "the same type of brackets.\n2. Open brackets must be closed in the correct order.\n3. Every close "
            "bracket has a corresponding open bracket of the same type."
        ),
        examples=[
            CodingExample(input='s = "()"', output="true"),
            CodingExample(input='s = "()[]{}"', output="true"),
            CodingExample(input='s = "(]"', output="false"),
        ],
        constraints=["1 <= s.length <= 10^4", "s consists of parentheses only '()[]{}'"],
        starter_code="function isValid(s) {\n  // Write your code here\n  \n}",
        hints=[
            "Use a stack data structure",
            "Push opening brackets, pop and match for closing brackets",
        ],
    ),
    CodingQuestion(
        id=3,
        title="Reverse Linked List",
        difficulty="Medium",
        description="Given the head of a singly linked list, reverse the list, and return the reversed list.",
        examples=[
            CodingExample(input="head = [1,2,3,4,5]", output="[5,4,3,2,1]"),
            CodingExample(input="head = [1,2]", output="[2,1]"),
        ],
        constraints=["The number of nodes in the list is [0, 5000]", "-5000 <= Node.val <= 5000"],
        starter_code=(
            "function reverseList(head) {\n  // ListNode structure: { val: number, next: ListNode | null }\n"
            "  // Write your code here\n  \n}"
        ),
        hints=[
            "Keep track of previous, current, and next pointers",
            "Iteratively reverse the links",
        ],
    ),
]


def generate_questions(
    config: InterviewConfig,
    *,
    route: LlmRoute,
    client: Optional[HttpClient] = None,
) -> List[CodingQuestion]:  # Ask the route for three tailored problems
    logger.info(
        "Generating coding questions role=%s level=%s field=%s",
        config.role,
        config.interview_level,
        config.interest_field,
    )
    result = call(_build_task(config), CodingQuestionSet, cfg=route, client=client)
    return list(result.questions)


def generate_with_config(config: InterviewConfig, *, config_path: Path) -> List[CodingQuestion]:  # Convenience helper using app config
    route = load_route(config_path, GENERATE_QUESTIONS_KEY)
    return generate_questions(config, route=route)


def _build_task(config: InterviewConfig) -> str:  # Build task prompt for LLM
    level = config.interview_level
    mix = DIFFICULTY_MIX.get(level, DIFFICULTY_MIX["intermediate"])
    intro = dedent(
        f"""
        You are a technical interviewer creating coding problems. Generate exactly 3 coding questions in JSON format.

        The questions should be appropriate for a {level} level {config.role} position with interest in {config.interest_field}.
        Difficulty distribution for this level: {mix}.
        """
    ).strip()
    contract = dedent(
        """
        Return ONLY valid JSON in this exact format (no markdown, no explanation):
        {
          "questions": [
            {
              "id": 1,
              "title": "Problem Title",
              "difficulty": "Easy|Medium|Hard",
              "description": "Full problem description with clear requirements",
              "examples": [
                {"input": "example input", "output": "expected output", "explanation": "optional explanation"}
              ],
              "constraints": ["constraint 1", "constraint 2"],
              "starterCode": "function solutionName(params) {\\n  // Write your code here\\n  \\n}",
              "hints": ["hint 1", "hint 2"]
            }
          ]
        }
        """
    ).strip()
    return f"{intro}\n\n{contract}"
