from __future__ import annotations  # Report domain models

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from resume_analysis import ATSResult

ReportKind = Literal["interview", "coding", "partial"]


class QAPair(BaseModel):  # One interviewer question and the answer that followed it
    model_config = ConfigDict(frozen=True)

    question: str
    answer: str


class InterviewReport(BaseModel):  # Final scores and feedback for a session
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    technical_score: int = Field(alias="technicalScore")
    communication_score: int = Field(alias="communicationScore")
    problem_solving_score: int = Field(alias="problemSolvingScore")
    confidence_score: int = Field(alias="confidenceScore")
    overall_score: int = Field(alias="overallScore")
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)
    ats_result: Optional[ATSResult] = Field(default=None, alias="atsResult")
    answers: List[QAPair] = Field(default_factory=list)
    kind: ReportKind = "interview"


__all__ = ["InterviewReport", "QAPair", "ReportKind"]
