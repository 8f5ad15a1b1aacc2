from __future__ import annotations  # Re-export interview_setup public API

from .interview_setup import (
    InterviewConfig,
    InterviewLevel,
    InterviewType,
    ResumeUpload,
    UnsupportedResumeType,
    accept_resume_upload,
    clear_resume,
)

__all__ = [
    "InterviewConfig",
    "InterviewLevel",
    "InterviewType",
    "ResumeUpload",
    "UnsupportedResumeType",
    "accept_resume_upload",
    "clear_resume",
]
