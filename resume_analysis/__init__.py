from __future__ import annotations  # Re-export resume_analysis public API

from .resume_analysis import (
    ANALYZE_RESUME_KEY,
    ATSResult,
    DEFAULT_ATS_RESULT,
    ResumeTooShortError,
    analyze_resume,
    analyze_with_config,
    parse_ats_payload,
)

__all__ = [
    "ANALYZE_RESUME_KEY",
    "ATSResult",
    "DEFAULT_ATS_RESULT",
    "ResumeTooShortError",
    "analyze_resume",
    "analyze_with_config",
    "parse_ats_payload",
]
