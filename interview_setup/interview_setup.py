from __future__ import annotations  # Candidate profile collected before a session starts

import logging
from typing import Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

InterviewType = Literal["technical", "hr", "coding", "phone"]
InterviewLevel = Literal["beginner", "intermediate", "advanced"]

TEXT_TYPES = {"text/plain"}
DOCUMENT_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


class UnsupportedResumeType(ValueError):  # Upload is neither text, PDF nor Word
    pass


class InterviewConfig(BaseModel):  # Immutable profile for one session
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    branch: str
    role: str
    experience_level: str = Field(alias="experienceLevel")
    interest_field: str = Field(alias="interestField")
    interview_type: InterviewType = Field(alias="interviewType")
    interview_level: InterviewLevel = Field(alias="interviewLevel")
    resume: str = ""
    resume_file_name: Optional[str] = Field(default=None, alias="resumeFileName")

    @field_validator("name", "branch", "role", "experience_level", "interest_field")
    @classmethod
    def _required(cls, value: str) -> str:  # Reject blank profile fields
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("field is required")
        return cleaned

    @field_validator("interview_type", "interview_level", mode="before")
    @classmethod
    def _lowercase(cls, value: object) -> object:  # Accept "HR", "Technical" and friends
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @property
    def is_coding(self) -> bool:
        return self.interview_type == "coding"


class ResumeUpload(BaseModel):  # Outcome of a resume file upload
    resume: str = ""
    resume_file_name: str = Field(alias="resumeFileName")
    notice: str

    model_config = ConfigDict(populate_by_name=True)


def accept_resume_upload(file_name: str, content_type: Optional[str], data: bytes) -> ResumeUpload:
    """Turn an uploaded resume into text, or keep only its name for PDF and Word files."""

    media_type = (content_type or "").split(";")[0].strip().lower()
    is_text = media_type in TEXT_TYPES or file_name.lower().endswith(".txt")
    if is_text:
        text = data.decode("utf-8", errors="replace")
        logger.info("Resume text uploaded file=%s chars=%d", file_name, len(text))
        return ResumeUpload(resume=text, resume_file_name=file_name, notice="Resume uploaded successfully")
    if media_type in DOCUMENT_TYPES:
        logger.info("Resume document kept by name only file=%s type=%s", file_name, media_type)
        return ResumeUpload(
            resume="",
            resume_file_name=file_name,
            notice="For best results, paste your resume text below. PDF parsing coming soon!",
        )
    raise UnsupportedResumeType("Please upload a TXT, PDF, or Word document")


def clear_resume(config: InterviewConfig) -> Tuple[InterviewConfig, None]:
    """Return a copy of ``config`` without resume data; the ATS result is dropped with it."""

    return config.model_copy(update={"resume": "", "resume_file_name": None}), None
