from __future__ import annotations  # Session report package exports

from .models import InterviewReport, QAPair, ReportKind
from .pdf import generate_report_pdf, score_band
from .synthesizer import (
    early_exit_report,
    extract_qa_pairs,
    synthesize_coding_report,
    synthesize_interview_report,
)

__all__ = [
    "InterviewReport",
    "QAPair",
    "ReportKind",
    "early_exit_report",
    "extract_qa_pairs",
    "generate_report_pdf",
    "score_band",
    "synthesize_coding_report",
    "synthesize_interview_report",
]
